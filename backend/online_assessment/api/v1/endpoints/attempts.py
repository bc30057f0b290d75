from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from online_assessment.api.deps import get_current_active_user, is_staff, require_staff, resolve_learner_for_user
from online_assessment.db.session import get_db
from online_assessment.models.attempt import TestAttempt
from online_assessment.models.constants import ATTEMPT_STATUS_IN_PROGRESS
from online_assessment.models.rbac import User
from online_assessment.schemas.attempt import (
    AttemptDetailOut,
    AttemptOut,
    AttemptStartRequest,
    AttemptSubmit,
    AttemptSubmitOut,
    ResponseSave,
    ResponseSaveOut,
)
from online_assessment.services import attempt_service, audit_service, grading_service


router = APIRouter(prefix='/attempts', tags=['attempts'])


def _is_owner(attempt: TestAttempt, current_user: User) -> bool:
    return attempt.learner is not None and attempt.learner.user_id == current_user.id


def _results_visible(attempt: TestAttempt, staff: bool) -> bool:
    if staff:
        return True
    return attempt.status != ATTEMPT_STATUS_IN_PROGRESS and attempt.test.show_results_immediately


def _attempt_out(attempt: TestAttempt, *, results_visible: bool) -> AttemptOut:
    out = AttemptOut.model_validate(attempt)
    if not results_visible:
        out.total_score = None
        out.percentage = None
        out.correct_answers = 0
    return out


def _attempt_detail(attempt: TestAttempt, *, staff: bool) -> AttemptDetailOut:
    test = attempt.test
    visible = _results_visible(attempt, staff)
    answers_visible = staff or (
        attempt.status != ATTEMPT_STATUS_IN_PROGRESS and test.show_correct_answers and test.allow_review
    )
    return AttemptDetailOut(
        attempt=_attempt_out(attempt, results_visible=visible),
        test_title=test.title,
        duration_minutes=test.duration_minutes,
        instructions=test.instructions,
        total_marks=sum(response.marks for response in attempt.responses),
        passing_marks=test.passing_marks,
        questions=attempt_service.build_attempt_questions(
            attempt, include_results=visible, include_answers=answers_visible
        ),
    )


def _get_owned_attempt(db: Session, attempt_id: UUID, current_user: User) -> TestAttempt:
    attempt = attempt_service.get_attempt(db, attempt_id)
    if not _is_owner(attempt, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not allowed to modify this attempt')
    return attempt


@router.post('/start', response_model=AttemptDetailOut)
def start_attempt(
    payload: AttemptStartRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AttemptDetailOut:
    learner = resolve_learner_for_user(db, payload.learner, current_user)
    attempt, created = attempt_service.start_attempt(
        db, test_id=payload.test_id, learner_id=learner.id, actor_user_id=current_user.id
    )
    if created:
        audit_service.log_action(
            db,
            actor_user_id=current_user.id,
            action='attempt_start',
            entity_type='test_attempt',
            entity_id=attempt.id,
            details={'test_id': payload.test_id, 'learner_id': learner.id, 'attempt_number': attempt.attempt_number},
        )
    db.commit()
    attempt = attempt_service.get_attempt(db, attempt.id)
    return _attempt_detail(attempt, staff=is_staff(current_user))


@router.get('/{attempt_id}', response_model=AttemptDetailOut)
def get_attempt(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AttemptDetailOut:
    attempt = attempt_service.get_attempt(db, attempt_id)
    staff = is_staff(current_user)
    if not staff and not _is_owner(attempt, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not allowed to view this attempt')
    return _attempt_detail(attempt, staff=staff)


@router.put('/{attempt_id}/responses', response_model=ResponseSaveOut)
def save_response(
    attempt_id: UUID,
    payload: ResponseSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ResponseSaveOut:
    _get_owned_attempt(db, attempt_id, current_user)
    response = attempt_service.save_response(
        db,
        attempt_id=attempt_id,
        test_question_id=payload.test_question_id,
        payload=payload.model_dump(exclude={'test_question_id'}),
        actor_user_id=current_user.id,
    )
    db.commit()
    return ResponseSaveOut(
        attempt_id=attempt_id,
        test_question_id=response.test_question_id,
        answered_at=response.answered_at,
    )


@router.post('/{attempt_id}/submit', response_model=AttemptSubmitOut)
def submit_attempt(
    attempt_id: UUID,
    payload: AttemptSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AttemptSubmitOut:
    _get_owned_attempt(db, attempt_id, current_user)
    attempt = grading_service.submit_attempt(
        db,
        attempt_id=attempt_id,
        responses=[entry.model_dump() for entry in payload.responses],
        actor_user_id=current_user.id,
    )
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='attempt_submit',
        entity_type='test_attempt',
        entity_id=attempt.id,
        details={'total_score': attempt.total_score, 'percentage': attempt.percentage},
    )
    db.commit()

    test = attempt.test
    visible = test.show_results_immediately
    passed = None
    if visible:
        passed = (attempt.total_score or 0.0) >= (test.passing_marks or 0.0)
    return AttemptSubmitOut(
        attempt=_attempt_out(attempt, results_visible=visible),
        total_marks=sum(response.marks for response in attempt.responses),
        passing_marks=test.passing_marks,
        passed=passed,
        results_visible=visible,
    )


@router.post('/{attempt_id}/finalize', response_model=AttemptOut)
def finalize_attempt(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> AttemptOut:
    attempt = attempt_service.finalize_attempt(db, attempt_id=attempt_id, actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='attempt_finalize',
        entity_type='test_attempt',
        entity_id=attempt.id,
    )
    db.commit()
    return AttemptOut.model_validate(attempt)
