from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from online_assessment.core.config import settings
from online_assessment.models.attempt import TestAttempt
from online_assessment.models.constants import COMPLETED_ATTEMPT_STATUSES
from online_assessment.services import test_service


def get_test_analytics(db: Session, *, test_id: UUID, leaderboard_size: int | None = None) -> dict[str, Any]:
    test = test_service.get_test(db, test_id)
    size = settings.LEADERBOARD_SIZE if leaderboard_size is None else leaderboard_size

    total_attempts = int(
        db.scalar(select(func.count()).select_from(TestAttempt).where(TestAttempt.test_id == test.id)) or 0
    )
    completed = db.scalars(
        select(TestAttempt)
        .where(TestAttempt.test_id == test.id, TestAttempt.status.in_(COMPLETED_ATTEMPT_STATUSES))
        .options(joinedload(TestAttempt.learner))
        .order_by(
            TestAttempt.total_score.desc(),
            TestAttempt.submitted_at.asc(),
            TestAttempt.attempt_number.asc(),
            TestAttempt.id,
        )
    ).all()

    passing_marks = test.passing_marks or 0.0
    scores = [attempt.total_score or 0.0 for attempt in completed]
    pass_count = len([score for score in scores if score >= passing_marks])

    stats = {
        'total_attempts': total_attempts,
        'completed_attempts': len(completed),
        'average_score': round(sum(scores) / len(scores), 2) if scores else 0.0,
        'highest_score': max(scores) if scores else 0.0,
        'lowest_score': min(scores) if scores else 0.0,
        'pass_count': pass_count,
        'fail_count': len(scores) - pass_count,
    }

    leaderboard = []
    for rank, attempt in enumerate(completed[:size], start=1):
        learner = attempt.learner
        leaderboard.append(
            {
                'rank': rank,
                'attempt_id': attempt.id,
                'learner': {
                    'id': learner.id,
                    'first_name': learner.first_name,
                    'last_name': learner.last_name,
                    'roll_no': learner.roll_no,
                },
                'score': attempt.total_score or 0.0,
                'percentage': attempt.percentage,
                'submitted_at': attempt.submitted_at,
            }
        )

    return {
        'test': {
            'id': test.id,
            'title': test.title,
            'total_marks': test.total_marks,
            'passing_marks': test.passing_marks,
        },
        'stats': stats,
        'leaderboard': leaderboard,
    }
