"""
Roster lookups.

Callers may identify a learner either by the learner id or by the id of the
user account linked to it. Resolution happens once, at the API boundary; the
rest of the service layer only ever sees canonical learner ids.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from online_assessment.core.exceptions import NotFoundError
from online_assessment.models.roster import Learner


def resolve_learner(db: Session, identifier: UUID | str) -> Learner:
    try:
        key = identifier if isinstance(identifier, UUID) else UUID(str(identifier))
    except ValueError as exc:
        raise NotFoundError('Learner not found') from exc

    learner = db.scalar(select(Learner).where(Learner.id == key))
    if not learner:
        learner = db.scalar(select(Learner).where(Learner.user_id == key))
    if not learner:
        raise NotFoundError('Learner not found')
    return learner


def get_learner_for_user(db: Session, user_id: UUID) -> Learner | None:
    return db.scalar(select(Learner).where(Learner.user_id == user_id))
