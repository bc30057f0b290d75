import logging
import random
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from online_assessment.core.config import settings
from online_assessment.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PolicyViolationError,
)
from online_assessment.models.attempt import TestAttempt, TestResponse
from online_assessment.models.constants import (
    ATTEMPT_STATUS_GRADED,
    ATTEMPT_STATUS_IN_PROGRESS,
    ATTEMPT_STATUS_SUBMITTED,
    COMPLETED_ATTEMPT_STATUSES,
    TEST_STATUS_PUBLISHED,
)
from online_assessment.models.online_test import OnlineTest
from online_assessment.models.roster import Learner
from online_assessment.services import test_service
from online_assessment.services.answer_keys import snapshot_question


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def is_overdue(attempt: TestAttempt, now: datetime) -> bool:
    """True once the attempt is past its expiry plus the configured grace period."""
    expires_at = as_utc(attempt.expires_at)
    if expires_at is None:
        return False
    return now > expires_at + timedelta(seconds=settings.ATTEMPT_GRACE_SECONDS)


def _find_in_progress(db: Session, *, test_id: UUID, learner_id: UUID) -> TestAttempt | None:
    return db.scalar(
        select(TestAttempt).where(
            TestAttempt.test_id == test_id,
            TestAttempt.learner_id == learner_id,
            TestAttempt.status == ATTEMPT_STATUS_IN_PROGRESS,
        )
    )


def count_completed_attempts(db: Session, *, test_id: UUID, learner_id: UUID) -> int:
    return int(
        db.scalar(
            select(func.count())
            .select_from(TestAttempt)
            .where(
                TestAttempt.test_id == test_id,
                TestAttempt.learner_id == learner_id,
                TestAttempt.status.in_(COMPLETED_ATTEMPT_STATUSES),
            )
        )
        or 0
    )


def _check_window(test: OnlineTest, now: datetime) -> None:
    start_at = as_utc(test.start_at)
    end_at = as_utc(test.end_at)
    if start_at and now < start_at:
        raise PolicyViolationError('Test has not started yet')
    if end_at and now > end_at:
        raise PolicyViolationError('Test has ended')


def _expires_at(test: OnlineTest, started_at: datetime) -> datetime:
    expires_at = started_at + timedelta(minutes=test.duration_minutes)
    end_at = as_utc(test.end_at)
    if end_at and end_at < expires_at:
        return end_at
    return expires_at


def start_attempt(
    db: Session,
    *,
    test_id: UUID,
    learner_id: UUID,
    actor_user_id: UUID | None = None,
) -> tuple[TestAttempt, bool]:
    """
    Start a new attempt or resume the open one.

    Returns the attempt and whether it was created by this call. The learner
    row is locked for the rest of the transaction so concurrent starts for the
    same learner run one after the other; the in-progress partial index catches
    whatever slips past (databases without row locks).
    """
    test = test_service.get_test(db, test_id)
    if test.status != TEST_STATUS_PUBLISHED:
        raise InvalidStateError(f'Test is not available (status {test.status})')
    now = _utcnow()
    _check_window(test, now)

    learner = db.scalar(select(Learner).where(Learner.id == learner_id).with_for_update())
    if not learner:
        raise NotFoundError('Learner not found')

    existing = _find_in_progress(db, test_id=test.id, learner_id=learner.id)
    if existing:
        return existing, False

    completed = count_completed_attempts(db, test_id=test.id, learner_id=learner.id)
    if completed >= test.max_attempts:
        raise PolicyViolationError(f'Maximum attempts ({test.max_attempts}) reached for this test')

    question_order = [str(item.id) for item in test.questions]
    if test.shuffle_questions:
        random.shuffle(question_order)

    attempt = TestAttempt(
        test_id=test.id,
        learner_id=learner.id,
        attempt_number=completed + 1,
        status=ATTEMPT_STATUS_IN_PROGRESS,
        started_at=now,
        expires_at=_expires_at(test, now),
        question_order=question_order,
        created_by=actor_user_id,
        updated_by=actor_user_id,
    )
    for item in test.questions:
        attempt.responses.append(
            TestResponse(
                test_question_id=item.id,
                question_id=item.question_id,
                sequence_order=item.sequence_order,
                marks=item.marks,
                negative_marks=item.negative_marks,
                question_snapshot=snapshot_question(
                    item.question, marks=item.marks, negative_marks=item.negative_marks
                ),
                selected_options=[],
            )
        )

    db.add(attempt)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning('Concurrent start for test %s learner %s; resuming the open attempt', test_id, learner_id)
        winner = _find_in_progress(db, test_id=test_id, learner_id=learner_id)
        if winner:
            return winner, False
        raise ConflictError('Another attempt was started at the same time, please retry') from None

    logger.info(
        'Started attempt %s (#%d) for test %s learner %s',
        attempt.id,
        attempt.attempt_number,
        test.id,
        learner.id,
    )
    return attempt, True


def get_attempt(db: Session, attempt_id: UUID) -> TestAttempt:
    attempt = db.scalar(
        select(TestAttempt)
        .where(TestAttempt.id == attempt_id)
        .options(
            selectinload(TestAttempt.responses),
            joinedload(TestAttempt.test),
            joinedload(TestAttempt.learner),
        )
    )
    if not attempt:
        raise NotFoundError('Attempt not found')
    return attempt


def list_learner_attempts(db: Session, *, learner_id: UUID, test_id: UUID | None = None) -> list[TestAttempt]:
    base = select(TestAttempt).where(TestAttempt.learner_id == learner_id)
    if test_id:
        base = base.where(TestAttempt.test_id == test_id)
    return list(
        db.scalars(base.order_by(TestAttempt.started_at.desc(), TestAttempt.attempt_number.desc())).all()
    )


def save_response(
    db: Session,
    *,
    attempt_id: UUID,
    test_question_id: UUID,
    payload: dict[str, Any],
    actor_user_id: UUID | None = None,
) -> TestResponse:
    attempt = db.scalar(
        select(TestAttempt)
        .where(TestAttempt.id == attempt_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not attempt:
        raise NotFoundError('Attempt not found')
    if attempt.status != ATTEMPT_STATUS_IN_PROGRESS:
        raise InvalidStateError('Attempt is not in progress')

    now = _utcnow()
    if settings.ENFORCE_ATTEMPT_DURATION and is_overdue(attempt, now):
        raise PolicyViolationError('Attempt time has expired')

    response = db.scalar(
        select(TestResponse).where(
            TestResponse.attempt_id == attempt.id,
            TestResponse.test_question_id == test_question_id,
        )
    )
    if not response:
        raise NotFoundError('Question not found in this attempt')

    response.selected_options = list(payload.get('selected_options') or [])
    response.response_text = payload.get('response_text')
    if payload.get('time_spent_seconds') is not None:
        response.time_spent_seconds = payload['time_spent_seconds']
    response.answered_at = now
    attempt.updated_by = actor_user_id
    db.flush()
    return response


def finalize_attempt(db: Session, *, attempt_id: UUID, actor_user_id: UUID) -> TestAttempt:
    attempt = db.scalar(
        select(TestAttempt)
        .where(TestAttempt.id == attempt_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not attempt:
        raise NotFoundError('Attempt not found')
    if attempt.status != ATTEMPT_STATUS_SUBMITTED:
        raise InvalidStateError(f'Only submitted attempts can be finalized (attempt is {attempt.status})')
    attempt.status = ATTEMPT_STATUS_GRADED
    attempt.updated_by = actor_user_id
    db.flush()
    logger.info('Finalized attempt %s', attempt.id)
    return attempt


def _shuffled_options(attempt: TestAttempt, response: TestResponse, options: list[dict[str, Any]]) -> list[dict]:
    # Seeded per attempt and question so reloading the attempt shows the same order.
    shuffled = list(options)
    random.Random(f'{attempt.id}:{response.test_question_id}').shuffle(shuffled)
    return shuffled


def build_attempt_questions(
    attempt: TestAttempt,
    *,
    include_results: bool,
    include_answers: bool,
) -> list[dict[str, Any]]:
    by_id = {str(item.test_question_id): item for item in attempt.responses}
    ordered = [by_id[qid] for qid in attempt.question_order or [] if qid in by_id]
    if len(ordered) != len(by_id):
        ordered = sorted(attempt.responses, key=lambda item: item.sequence_order)

    shuffle_options = attempt.test.shuffle_options
    payload = []
    for position, response in enumerate(ordered, start=1):
        snapshot = dict(response.question_snapshot or {})
        options = [{'id': opt.get('id'), 'text': opt.get('text')} for opt in snapshot.get('options', [])]
        if shuffle_options:
            options = _shuffled_options(attempt, response, options)
        item = {
            'test_question_id': response.test_question_id,
            'question_id': response.question_id,
            'sequence_order': response.sequence_order,
            'position': position,
            'question_text': snapshot.get('question_text', ''),
            'question_type': snapshot.get('question_type', 'mcq'),
            'options': options,
            'marks': response.marks,
            'negative_marks': response.negative_marks,
            'selected_options': list(response.selected_options or []),
            'response_text': response.response_text,
            'answered_at': response.answered_at,
        }
        if include_results:
            item['is_correct'] = response.is_correct
            item['marks_obtained'] = response.marks_obtained
        if include_answers:
            item['correct_answer'] = snapshot.get('correct_answer')
        payload.append(item)
    return payload


def mark_submitted(db: Session, *, attempt_id: UUID, submitted_at: datetime, actor_user_id: UUID | None) -> bool:
    """Atomically move an attempt out of ``in_progress``; False when it already left that state."""
    result = db.execute(
        update(TestAttempt)
        .where(TestAttempt.id == attempt_id, TestAttempt.status == ATTEMPT_STATUS_IN_PROGRESS)
        .values(status=ATTEMPT_STATUS_SUBMITTED, submitted_at=submitted_at, updated_by=actor_user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
