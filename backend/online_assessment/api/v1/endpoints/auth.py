from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from online_assessment.api.deps import get_current_active_user
from online_assessment.db.session import get_db
from online_assessment.models.rbac import User
from online_assessment.schemas.auth import LoginRequest, TokenResponse, UserSummary
from online_assessment.services import audit_service, auth_service, roster_service


router = APIRouter(prefix='/auth', tags=['auth'])


def _to_user_summary(db: Session, user: User) -> UserSummary:
    learner = roster_service.get_learner_for_user(db, user.id)
    return UserSummary(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        roles=sorted(user.role_names),
        last_login_at=user.last_login_at,
        learner_id=learner.id if learner else None,
    )


@router.post('/login', response_model=TokenResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> TokenResponse:
    client_ip = request.client.host if request.client else 'unknown'

    user = auth_service.authenticate_user(db, payload.email, payload.password)
    if not user:
        audit_service.log_action(
            db,
            actor_user_id=None,
            action='user_login',
            entity_type='auth',
            status='failure',
            details={'email': payload.email.lower()},
            ip_address=client_ip,
        )
        db.commit()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    access_token = auth_service.issue_access_token(db, user=user)
    audit_service.log_action(
        db,
        actor_user_id=user.id,
        action='user_login',
        entity_type='auth',
        status='success',
        details={'email': user.email, 'timestamp': datetime.now(UTC)},
        ip_address=client_ip,
    )
    db.commit()

    return TokenResponse(access_token=access_token, user=_to_user_summary(db, user))


@router.get('/me', response_model=UserSummary)
def me(db: Session = Depends(get_db), current_user: User = Depends(get_current_active_user)) -> UserSummary:
    return _to_user_summary(db, current_user)
