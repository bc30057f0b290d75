from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from online_assessment.api.deps import get_current_active_user, get_user_role_names, is_staff, require_staff
from online_assessment.core.exceptions import NotFoundError
from online_assessment.db.session import get_db
from online_assessment.models.constants import TEST_STATUS_DRAFT
from online_assessment.models.rbac import User
from online_assessment.schemas.analytics import TestAnalyticsOut
from online_assessment.schemas.common import PaginationMeta
from online_assessment.schemas.online_test import (
    QuestionRemovalOut,
    QuestionReplace,
    TestAssign,
    TestCreate,
    TestDuplicate,
    TestExportResponse,
    TestExportRow,
    TestListResponse,
    TestOut,
    TestQuestionOut,
    TestSummaryOut,
    TestUpdate,
)
from online_assessment.services import analytics_service, audit_service, test_service


router = APIRouter(prefix='/tests', tags=['tests'])


def _owner_filter(current_user: User) -> UUID | None:
    roles = get_user_role_names(current_user)
    if roles & {'super_admin', 'admin'}:
        return None
    return current_user.id


def _to_test_out(test, *, include_answers: bool) -> TestOut:
    out = TestOut.model_validate(test)
    if not include_answers:
        for item in out.questions:
            if item.question:
                item.question.correct_answer = None
                item.question.answer_explanation = None
    return out


@router.get('', response_model=TestListResponse)
def list_tests(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    subject_id: UUID | None = Query(default=None),
    class_id: UUID | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias='status'),
    search: str | None = Query(default=None, alias='q'),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestListResponse:
    items, total = test_service.list_tests(
        db,
        page=page,
        page_size=page_size,
        subject_id=subject_id,
        class_id=class_id,
        status_filter=status_filter,
        created_by=_owner_filter(current_user),
        search=search,
    )
    return TestListResponse(
        items=[TestSummaryOut.model_validate(item) for item in items],
        meta=PaginationMeta(page=page, page_size=page_size, total=total),
    )


@router.post('', response_model=TestOut, status_code=status.HTTP_201_CREATED)
def create_test(
    payload: TestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    test = test_service.create_test(db, payload=payload.model_dump(), actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_create',
        entity_type='online_test',
        entity_id=test.id,
        details={'title': test.title, 'total_questions': test.total_questions, 'total_marks': test.total_marks},
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.get('/{test_id}', response_model=TestOut)
def get_test(
    test_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> TestOut:
    test = test_service.get_test(db, test_id)
    staff = is_staff(current_user)
    if not staff and test.status == TEST_STATUS_DRAFT:
        raise NotFoundError('Test not found')
    return _to_test_out(test, include_answers=staff)


@router.put('/{test_id}', response_model=TestOut)
def update_test(
    test_id: UUID,
    payload: TestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    changes = payload.model_dump(exclude_unset=True)
    test = test_service.update_test(db, test_id=test_id, payload=changes, actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_update',
        entity_type='online_test',
        entity_id=test.id,
        details={'fields': sorted(changes)},
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.delete('/{test_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_test(
    test_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> Response:
    test_service.delete_test(db, test_id=test_id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_delete',
        entity_type='online_test',
        entity_id=test_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post('/{test_id}/publish', response_model=TestOut)
def publish_test(
    test_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    test = test_service.publish_test(db, test_id=test_id, actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_publish',
        entity_type='online_test',
        entity_id=test.id,
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.post('/{test_id}/close', response_model=TestOut)
def close_test(
    test_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    test = test_service.close_test(db, test_id=test_id, actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_close',
        entity_type='online_test',
        entity_id=test.id,
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.post('/{test_id}/assign', response_model=TestOut)
def assign_test(
    test_id: UUID,
    payload: TestAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    test = test_service.assign_test(
        db,
        test_id=test_id,
        class_id=payload.class_id,
        section_id=payload.section_id,
        actor_user_id=current_user.id,
    )
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_assign',
        entity_type='online_test',
        entity_id=test.id,
        details={'class_id': payload.class_id, 'section_id': payload.section_id},
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.post('/{test_id}/duplicate', response_model=TestOut, status_code=status.HTTP_201_CREATED)
def duplicate_test(
    test_id: UUID,
    payload: TestDuplicate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestOut:
    test = test_service.duplicate_test(db, test_id=test_id, new_title=payload.title, actor_user_id=current_user.id)
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_duplicate',
        entity_type='online_test',
        entity_id=test.id,
        details={'source_test_id': test_id},
    )
    db.commit()
    return _to_test_out(test, include_answers=True)


@router.delete('/{test_id}/questions/{test_question_id}', response_model=QuestionRemovalOut)
def remove_question(
    test_id: UUID,
    test_question_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> QuestionRemovalOut:
    test = test_service.remove_question(
        db, test_id=test_id, test_question_id=test_question_id, actor_user_id=current_user.id
    )
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_question_remove',
        entity_type='online_test',
        entity_id=test.id,
        details={'test_question_id': test_question_id},
    )
    db.commit()
    return QuestionRemovalOut(questions_remaining=test.total_questions, total_marks=test.total_marks)


@router.put('/{test_id}/questions/{test_question_id}/replace', response_model=TestQuestionOut)
def replace_question(
    test_id: UUID,
    test_question_id: UUID,
    payload: QuestionReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> TestQuestionOut:
    item = test_service.replace_question(
        db,
        test_id=test_id,
        test_question_id=test_question_id,
        new_question_id=payload.new_question_id,
        actor_user_id=current_user.id,
    )
    audit_service.log_action(
        db,
        actor_user_id=current_user.id,
        action='test_question_replace',
        entity_type='online_test',
        entity_id=test_id,
        details={'test_question_id': test_question_id, 'new_question_id': payload.new_question_id},
    )
    db.commit()
    return TestQuestionOut.model_validate(item)


@router.get('/{test_id}/export-template', response_model=TestExportResponse)
def export_test_template(
    test_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
) -> TestExportResponse:
    test = test_service.get_test(db, test_id)
    rows = test_service.export_test_template(db, test.id)
    return TestExportResponse(test_id=test.id, title=test.title, rows=[TestExportRow(**row) for row in rows])


@router.get('/{test_id}/analytics', response_model=TestAnalyticsOut)
def get_test_analytics(
    test_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
) -> TestAnalyticsOut:
    return TestAnalyticsOut(**analytics_service.get_test_analytics(db, test_id=test_id))
