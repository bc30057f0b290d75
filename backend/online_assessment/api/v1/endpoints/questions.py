from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from online_assessment.api.deps import require_staff
from online_assessment.db.session import get_db
from online_assessment.models.rbac import User
from online_assessment.schemas.common import PaginationMeta
from online_assessment.schemas.question import (
    AlternativeQuestionListResponse,
    QuestionCreate,
    QuestionListResponse,
    QuestionOut,
)
from online_assessment.services import audit_service, question_bank_service


router = APIRouter(prefix='/questions', tags=['questions'])


@router.get('', response_model=QuestionListResponse)
def list_questions(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    subject_id: UUID | None = Query(default=None),
    class_id: UUID | None = Query(default=None),
    question_type: str | None = Query(default=None),
    difficulty: str | None = Query(default=None),
    query: str | None = Query(default=None, alias='q'),
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
) -> QuestionListResponse:
    items, total = question_bank_service.list_questions(
        db,
        page=page,
        page_size=page_size,
        subject_id=subject_id,
        class_id=class_id,
        question_type=question_type,
        difficulty=difficulty,
        query=query,
    )
    return QuestionListResponse(
        items=[QuestionOut.model_validate(item) for item in items],
        meta=PaginationMeta(page=page, page_size=page_size, total=total),
    )


@router.post('', response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def create_question(
    payload: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> QuestionOut:
    question = question_bank_service.create_question(db, payload=payload.model_dump(), actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='question_create',
        entity_type='question',
        entity_id=question.id,
        details={'question_type': question.question_type},
    )
    db.commit()
    return QuestionOut.model_validate(question)


@router.get('/{question_id}', response_model=QuestionOut)
def get_question(
    question_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
) -> QuestionOut:
    return QuestionOut.model_validate(question_bank_service.get_question(db, question_id))


@router.get('/{question_id}/alternatives', response_model=AlternativeQuestionListResponse)
def list_alternatives(
    question_id: UUID,
    subject_id: UUID | None = Query(default=None),
    class_id: UUID | None = Query(default=None),
    question_type: str | None = Query(default=None),
    difficulty: str | None = Query(default=None),
    exclude_ids: list[UUID] = Query(default=[]),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
) -> AlternativeQuestionListResponse:
    # Unspecified attributes default to the ones of the question being replaced.
    source = question_bank_service.get_question(db, question_id)
    items = question_bank_service.list_alternative_questions(
        db,
        question_id=source.id,
        subject_id=subject_id or source.subject_id,
        class_id=class_id or source.class_id,
        question_type=question_type or source.question_type,
        difficulty=difficulty or source.difficulty,
        exclude_ids=exclude_ids,
        limit=limit,
    )
    return AlternativeQuestionListResponse(items=[QuestionOut.model_validate(item) for item in items])
