from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from online_assessment.api.deps import get_path_learner
from online_assessment.db.session import get_db
from online_assessment.models.roster import Learner
from online_assessment.schemas.attempt import AttemptListResponse, AttemptOut
from online_assessment.schemas.online_test import AvailableTestListResponse, AvailableTestOut, TestSummaryOut
from online_assessment.services import attempt_service, availability_service


router = APIRouter(prefix='/learners', tags=['learners'])


@router.get('/{identifier}/available-tests', response_model=AvailableTestListResponse)
def list_available_tests(
    db: Session = Depends(get_db),
    learner: Learner = Depends(get_path_learner),
) -> AvailableTestListResponse:
    items = availability_service.list_available_tests(db, learner=learner)
    return AvailableTestListResponse(
        learner_id=learner.id,
        items=[
            AvailableTestOut(
                test=TestSummaryOut.model_validate(item['test']),
                attempts_used=item['attempts_used'],
                attempts_remaining=item['attempts_remaining'],
                in_progress_attempt_id=item['in_progress_attempt_id'],
            )
            for item in items
        ],
    )


@router.get('/{identifier}/attempts', response_model=AttemptListResponse)
def list_learner_attempts(
    test_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    learner: Learner = Depends(get_path_learner),
) -> AttemptListResponse:
    attempts = attempt_service.list_learner_attempts(db, learner_id=learner.id, test_id=test_id)
    return AttemptListResponse(items=[AttemptOut.model_validate(item) for item in attempts])
