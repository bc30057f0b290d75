from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from online_assessment.models.attempt import TestAttempt
from online_assessment.models.constants import (
    ATTEMPT_STATUS_IN_PROGRESS,
    COMPLETED_ATTEMPT_STATUSES,
    TEST_STATUS_PUBLISHED,
)
from online_assessment.models.online_test import OnlineTest
from online_assessment.models.roster import Learner


def _completed_attempts_subquery(learner_id: UUID):
    return (
        select(func.count(TestAttempt.id))
        .where(
            TestAttempt.test_id == OnlineTest.id,
            TestAttempt.learner_id == learner_id,
            TestAttempt.status.in_(COMPLETED_ATTEMPT_STATUSES),
        )
        .correlate(OnlineTest)
        .scalar_subquery()
    )


def list_available_tests(db: Session, *, learner: Learner, now: datetime | None = None) -> list[dict[str, Any]]:
    """Published tests the learner may start right now, with attempt usage per test."""
    if learner.class_id is None:
        return []
    now = now or datetime.now(UTC)

    completed = _completed_attempts_subquery(learner.id)
    rows = db.execute(
        select(OnlineTest, completed.label('attempts_used'))
        .where(
            OnlineTest.status == TEST_STATUS_PUBLISHED,
            OnlineTest.class_id == learner.class_id,
            or_(OnlineTest.section_id.is_(None), OnlineTest.section_id == learner.section_id),
            or_(OnlineTest.start_at.is_(None), OnlineTest.start_at <= now),
            or_(OnlineTest.end_at.is_(None), OnlineTest.end_at >= now),
            completed < OnlineTest.max_attempts,
        )
        .order_by(OnlineTest.end_at.asc().nulls_last(), OnlineTest.title, OnlineTest.id)
    ).all()
    if not rows:
        return []

    test_ids = [test.id for test, _ in rows]
    in_progress = dict(
        db.execute(
            select(TestAttempt.test_id, TestAttempt.id).where(
                and_(
                    TestAttempt.learner_id == learner.id,
                    TestAttempt.test_id.in_(test_ids),
                    TestAttempt.status == ATTEMPT_STATUS_IN_PROGRESS,
                )
            )
        ).all()
    )

    items = []
    for test, attempts_used in rows:
        used = int(attempts_used or 0)
        items.append(
            {
                'test': test,
                'attempts_used': used,
                'attempts_remaining': max(test.max_attempts - used, 0),
                'in_progress_attempt_id': in_progress.get(test.id),
            }
        )
    return items
