"""
Typed answer keys.

A response carries a frozen ``question_snapshot``; grading never inspects that
dict directly. It is turned into one of the answer-key variants below and the
grader dispatches on the variant type.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MultipleChoice:
    options: tuple[str, ...]
    correct_option_id: str

    def is_correct(self, selected: list[str]) -> bool:
        return len(selected) == 1 and selected[0] == self.correct_option_id


@dataclass(frozen=True)
class TrueFalse:
    correct: bool

    def is_correct(self, selected: list[str]) -> bool:
        if len(selected) != 1:
            return False
        value = parse_bool(selected[0])
        return value is not None and value == self.correct


@dataclass(frozen=True)
class FreeText:
    rubric: str | None = field(default=None)


AnswerKey = MultipleChoice | TrueFalse | FreeText


def parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in ('true', 't', '1', 'yes'):
        return True
    if normalized in ('false', 'f', '0', 'no'):
        return False
    return None


def answer_key_from_snapshot(snapshot: dict[str, Any]) -> AnswerKey:
    question_type = snapshot.get('question_type')
    if question_type == 'mcq':
        options = tuple(str(option.get('id')) for option in snapshot.get('options') or [])
        return MultipleChoice(options=options, correct_option_id=str(snapshot.get('correct_answer') or ''))
    if question_type == 'true_false':
        correct = parse_bool(snapshot.get('correct_answer'))
        if correct is None:
            raise ValueError(f"Invalid true/false answer key: {snapshot.get('correct_answer')!r}")
        return TrueFalse(correct=correct)
    return FreeText(rubric=snapshot.get('answer_explanation'))


def snapshot_question(question, *, marks: float, negative_marks: float) -> dict[str, Any]:
    return {
        'question_text': question.question_text,
        'question_type': question.question_type,
        'difficulty': question.difficulty,
        'options': [{'id': option.get('id'), 'text': option.get('text')} for option in question.options or []],
        'correct_answer': question.correct_answer,
        'answer_explanation': question.answer_explanation,
        'marks': marks,
        'negative_marks': negative_marks,
    }
