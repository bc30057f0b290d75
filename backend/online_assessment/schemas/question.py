from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from online_assessment.schemas.common import BaseSchema, PaginationMeta


QuestionType = Literal['mcq', 'true_false', 'short_answer', 'essay']
Difficulty = Literal['easy', 'medium', 'hard']


class QuestionOption(BaseModel):
    id: str = Field(min_length=1, max_length=50)
    text: str = Field(min_length=1)


class QuestionCreate(BaseModel):
    subject_id: UUID
    class_id: UUID | None = None
    chapter: str | None = None
    topic: str | None = None
    question_type: QuestionType
    difficulty: Difficulty | None = None
    question_text: str = Field(min_length=1)
    options: list[QuestionOption] = Field(default_factory=list)
    correct_answer: str | None = None
    answer_explanation: str | None = None
    marks: float = Field(default=4.0, ge=0)
    negative_marks: float = Field(default=0.0, ge=0)

    @model_validator(mode='after')
    def validate_answer_key(self) -> 'QuestionCreate':
        if self.question_type == 'mcq':
            option_ids = [option.id for option in self.options]
            if len(option_ids) < 2:
                raise ValueError('mcq questions need at least two options')
            if len(set(option_ids)) != len(option_ids):
                raise ValueError('option ids must be unique')
            if self.correct_answer not in option_ids:
                raise ValueError('correct_answer must be one of the option ids')
        elif self.question_type == 'true_false':
            normalized = (self.correct_answer or '').strip().lower()
            if normalized not in ('true', 'false'):
                raise ValueError("true_false questions need correct_answer 'true' or 'false'")
            self.correct_answer = normalized
        else:
            self.correct_answer = None
        return self


class QuestionOut(BaseSchema):
    id: UUID
    subject_id: UUID
    class_id: UUID | None
    chapter: str | None
    topic: str | None
    question_type: str
    difficulty: str | None
    question_text: str
    options: list[QuestionOption]
    correct_answer: str | None
    answer_explanation: str | None
    marks: float
    negative_marks: float
    created_at: datetime
    updated_at: datetime


class QuestionListResponse(BaseModel):
    items: list[QuestionOut]
    meta: PaginationMeta


class AlternativeQuestionListResponse(BaseModel):
    items: list[QuestionOut]
