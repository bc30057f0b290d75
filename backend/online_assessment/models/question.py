import uuid
from typing import Any

from sqlalchemy import CheckConstraint, Float, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from online_assessment.db.base_class import Base
from online_assessment.models.constants import DEFAULT_QUESTION_MARKS, DIFFICULTY_VALUES, QUESTION_TYPE_VALUES, sql_in
from online_assessment.models.mixins import AuditUserMixin, JSONDocument, TimestampMixin, UUIDPrimaryKeyMixin


class Question(UUIDPrimaryKeyMixin, TimestampMixin, AuditUserMixin, Base):
    """Question bank entry; the only trusted source of marks and answers."""

    __tablename__ = 'questions'
    __table_args__ = (
        CheckConstraint(f'question_type in ({sql_in(QUESTION_TYPE_VALUES)})', name='question_type_values'),
        CheckConstraint(
            f'difficulty is null or difficulty in ({sql_in(DIFFICULTY_VALUES)})',
            name='question_difficulty_values',
        ),
        CheckConstraint('marks >= 0', name='question_marks_non_negative'),
        CheckConstraint('negative_marks >= 0', name='question_negative_marks_non_negative'),
    )

    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    class_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    chapter: Mapped[str | None] = mapped_column(String(200), nullable=True)
    topic: Mapped[str | None] = mapped_column(String(200), nullable=True)
    question_type: Mapped[str] = mapped_column(String(30), nullable=False)
    difficulty: Mapped[str | None] = mapped_column(String(20), nullable=True)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False, default=list)
    correct_answer: Mapped[str | None] = mapped_column(String(200), nullable=True)
    answer_explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    marks: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_QUESTION_MARKS)
    negative_marks: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)


Index('ix_questions_subject_id', Question.subject_id)
Index('ix_questions_class_id', Question.class_id)
Index('ix_questions_type', Question.question_type)
Index('ix_questions_difficulty', Question.difficulty)
