import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from online_assessment.db.base_class import Base
from online_assessment.models.constants import ATTEMPT_STATUS_IN_PROGRESS, ATTEMPT_STATUS_VALUES, sql_in
from online_assessment.models.mixins import AuditUserMixin, JSONDocument, TimestampMixin, UUIDPrimaryKeyMixin
from online_assessment.models.online_test import OnlineTest
from online_assessment.models.roster import Learner


class TestAttempt(UUIDPrimaryKeyMixin, TimestampMixin, AuditUserMixin, Base):
    __tablename__ = 'test_attempts'
    __table_args__ = (
        UniqueConstraint('test_id', 'learner_id', 'attempt_number', name='uq_test_attempts_number'),
        CheckConstraint(f'status in ({sql_in(ATTEMPT_STATUS_VALUES)})', name='test_attempt_status_values'),
        # At most one open attempt per learner and test.
        Index(
            'uq_test_attempts_in_progress',
            'test_id',
            'learner_id',
            unique=True,
            postgresql_where=text(f"status = '{ATTEMPT_STATUS_IN_PROGRESS}'"),
            sqlite_where=text(f"status = '{ATTEMPT_STATUS_IN_PROGRESS}'"),
        ),
    )
    __test__ = False

    test_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('online_tests.id', ondelete='RESTRICT'), nullable=False
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('learners.id', ondelete='RESTRICT'), nullable=False
    )
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=ATTEMPT_STATUS_IN_PROGRESS)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    questions_answered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    question_order: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)

    test: Mapped['OnlineTest'] = relationship()
    learner: Mapped['Learner'] = relationship()
    responses: Mapped[list['TestResponse']] = relationship(
        back_populates='attempt', cascade='all, delete-orphan', order_by='TestResponse.sequence_order'
    )


class TestResponse(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One answer slot per test question, frozen at attempt creation."""

    __tablename__ = 'test_responses'
    __table_args__ = (
        UniqueConstraint('attempt_id', 'sequence_order', name='uq_test_responses_sequence'),
        UniqueConstraint('attempt_id', 'test_question_id', name='uq_test_responses_test_question'),
    )
    __test__ = False

    attempt_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('test_attempts.id', ondelete='CASCADE'), nullable=False
    )
    # Plain reference: the test question may be edited away after the attempt started.
    test_question_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    question_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    sequence_order: Mapped[int] = mapped_column(Integer, nullable=False)
    marks: Mapped[float] = mapped_column(Float, nullable=False)
    negative_marks: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    question_snapshot: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False, default=dict)
    selected_options: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    response_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    marks_obtained: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    answered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    time_spent_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    auto_graded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    attempt: Mapped['TestAttempt'] = relationship(back_populates='responses')


Index('ix_test_attempts_test_id', TestAttempt.test_id)
Index('ix_test_attempts_learner_id', TestAttempt.learner_id)
Index('ix_test_responses_attempt_id', TestResponse.attempt_id)
