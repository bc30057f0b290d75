"""
Submission and auto-grading.

Multiple choice and true/false responses are scored against the answer key
frozen into each response at attempt start. A correct answer earns the full
marks. A wrong answer deducts ``negative_marks`` from the attempt's total while
the response's ``marks_obtained`` stays at 0; the two are deliberately not
reconciled. Blank answers score nothing and cost nothing. Free-text responses
are counted as answered but left ungraded for manual review.

The percentage is taken against the marks frozen into the attempt's responses,
not the test's current ``total_marks``. Removing or replacing a question after
an attempt starts changes the test total but not that attempt's denominator.

Responses left out of the submit payload are graded from their autosaved
value, so a wrong autosaved answer is still penalized.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from online_assessment.core.config import settings
from online_assessment.core.exceptions import ALREADY_SUBMITTED, InvalidStateError, NotFoundError
from online_assessment.models.attempt import TestAttempt, TestResponse
from online_assessment.services import attempt_service
from online_assessment.services.answer_keys import FreeText, MultipleChoice, TrueFalse, answer_key_from_snapshot


logger = logging.getLogger(__name__)


@dataclass
class ScoreSheet:
    total_score: float = 0.0
    questions_answered: int = 0
    correct_answers: int = 0


def _apply_payload(attempt: TestAttempt, responses: list[dict[str, Any]], now) -> None:
    by_question = {response.test_question_id: response for response in attempt.responses}
    for entry in responses:
        response = by_question.get(entry['test_question_id'])
        if response is None:
            continue
        response.selected_options = list(entry.get('selected_options') or [])
        response.response_text = entry.get('response_text')
        if entry.get('time_spent_seconds') is not None:
            response.time_spent_seconds = entry['time_spent_seconds']
        response.answered_at = now


def grade_response(response: TestResponse, sheet: ScoreSheet) -> None:
    key = answer_key_from_snapshot(response.question_snapshot or {})
    selected = [str(value) for value in response.selected_options or []]

    if isinstance(key, FreeText):
        response.auto_graded = False
        response.is_correct = None
        response.marks_obtained = 0.0
        if (response.response_text or '').strip():
            sheet.questions_answered += 1
        return

    response.auto_graded = True
    if not selected:
        response.is_correct = None
        response.marks_obtained = 0.0
        return

    sheet.questions_answered += 1
    if isinstance(key, (MultipleChoice, TrueFalse)) and key.is_correct(selected):
        response.is_correct = True
        response.marks_obtained = response.marks
        sheet.total_score += response.marks
        sheet.correct_answers += 1
    else:
        response.is_correct = False
        response.marks_obtained = 0.0
        sheet.total_score -= response.negative_marks


def submit_attempt(
    db: Session,
    *,
    attempt_id: UUID,
    responses: list[dict[str, Any]],
    actor_user_id: UUID | None = None,
) -> TestAttempt:
    now = attempt_service._utcnow()
    if not attempt_service.mark_submitted(db, attempt_id=attempt_id, submitted_at=now, actor_user_id=actor_user_id):
        if not db.scalar(select(TestAttempt.id).where(TestAttempt.id == attempt_id)):
            raise NotFoundError('Attempt not found')
        raise InvalidStateError('Test already submitted', code=ALREADY_SUBMITTED)

    attempt = db.scalar(
        select(TestAttempt)
        .where(TestAttempt.id == attempt_id)
        .options(selectinload(TestAttempt.responses), joinedload(TestAttempt.test))
        .execution_options(populate_existing=True)
    )

    if settings.ENFORCE_ATTEMPT_DURATION and attempt_service.is_overdue(attempt, now):
        logger.warning('Late submit for attempt %s; grading autosaved responses only', attempt.id)
    else:
        _apply_payload(attempt, responses, now)

    sheet = ScoreSheet()
    for response in attempt.responses:
        grade_response(response, sheet)

    # Frozen marks, so later edits to the test do not move this attempt's percentage.
    total_marks = sum(response.marks for response in attempt.responses)
    attempt.total_score = sheet.total_score
    attempt.questions_answered = sheet.questions_answered
    attempt.correct_answers = sheet.correct_answers
    attempt.percentage = round(sheet.total_score / total_marks * 100, 2) if total_marks > 0 else 0.0
    db.flush()

    logger.info(
        'Submitted attempt %s: score %.2f/%.2f, %d answered, %d correct',
        attempt.id,
        sheet.total_score,
        total_marks,
        sheet.questions_answered,
        sheet.correct_answers,
    )
    return attempt
