from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from online_assessment.core.security import create_access_token, verify_password
from online_assessment.models.rbac import User, UserRole


def get_user_with_roles(db: Session, user_id: UUID) -> User | None:
    return db.scalar(
        select(User)
        .where(User.id == user_id)
        .options(joinedload(User.user_roles).joinedload(UserRole.role))
    )


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = db.scalar(
        select(User)
        .where(User.email == email.lower())
        .options(joinedload(User.user_roles).joinedload(UserRole.role))
    )
    if not user or not user.is_active or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def issue_access_token(db: Session, *, user: User) -> str:
    access_token = create_access_token(str(user.id), roles=list(user.role_names))
    user.last_login_at = datetime.now(UTC)
    db.flush()
    return access_token
