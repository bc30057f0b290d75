from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from online_assessment.schemas.common import BaseSchema
from online_assessment.schemas.question import QuestionOption


class AttemptStartRequest(BaseModel):
    test_id: UUID
    # Learner id or the learner's user id; defaults to the caller.
    learner: str | None = None


class ResponsePayload(BaseModel):
    selected_options: list[str] = Field(default_factory=list)
    response_text: str | None = None
    time_spent_seconds: int | None = Field(default=None, ge=0)


class ResponseSave(ResponsePayload):
    test_question_id: UUID


class AttemptSubmit(BaseModel):
    responses: list[ResponseSave] = Field(default_factory=list)


class AttemptQuestionOut(BaseModel):
    test_question_id: UUID
    question_id: UUID
    sequence_order: int
    position: int
    question_text: str
    question_type: str
    options: list[QuestionOption]
    marks: float
    negative_marks: float
    selected_options: list[str]
    response_text: str | None
    answered_at: datetime | None
    is_correct: bool | None = None
    marks_obtained: float | None = None
    correct_answer: str | None = None


class AttemptOut(BaseSchema):
    id: UUID
    test_id: UUID
    learner_id: UUID
    attempt_number: int
    status: str
    started_at: datetime
    submitted_at: datetime | None
    expires_at: datetime | None
    total_score: float | None
    percentage: float | None
    questions_answered: int
    correct_answers: int


class AttemptDetailOut(BaseModel):
    attempt: AttemptOut
    test_title: str
    duration_minutes: int
    instructions: str | None
    total_marks: float
    passing_marks: float | None
    questions: list[AttemptQuestionOut]


class AttemptSubmitOut(BaseModel):
    attempt: AttemptOut
    total_marks: float
    passing_marks: float | None
    passed: bool | None
    results_visible: bool


class ResponseSaveOut(BaseModel):
    attempt_id: UUID
    test_question_id: UUID
    answered_at: datetime


class AttemptListResponse(BaseModel):
    items: list[AttemptOut]
