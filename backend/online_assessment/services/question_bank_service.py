from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from online_assessment.core.exceptions import NotFoundError
from online_assessment.models.question import Question


def get_question(db: Session, question_id: UUID) -> Question:
    question = db.scalar(select(Question).where(Question.id == question_id))
    if not question:
        raise NotFoundError('Question not found')
    return question


def get_questions_by_ids(db: Session, question_ids: list[UUID]) -> dict[UUID, Question]:
    if not question_ids:
        return {}
    rows = db.scalars(select(Question).where(Question.id.in_(question_ids))).all()
    found = {row.id: row for row in rows}
    missing = [str(qid) for qid in question_ids if qid not in found]
    if missing:
        raise NotFoundError(f"Questions not found: {', '.join(missing)}")
    return found


def create_question(db: Session, *, payload: dict, actor_user_id: UUID) -> Question:
    question = Question(
        subject_id=payload['subject_id'],
        class_id=payload.get('class_id'),
        chapter=payload.get('chapter'),
        topic=payload.get('topic'),
        question_type=payload['question_type'],
        difficulty=payload.get('difficulty'),
        question_text=payload['question_text'],
        options=[dict(option) for option in payload.get('options', [])],
        correct_answer=payload.get('correct_answer'),
        answer_explanation=payload.get('answer_explanation'),
        marks=payload.get('marks', 4.0),
        negative_marks=payload.get('negative_marks', 0.0),
        created_by=actor_user_id,
        updated_by=actor_user_id,
    )
    db.add(question)
    db.flush()
    return question


def list_questions(
    db: Session,
    *,
    page: int,
    page_size: int,
    subject_id: UUID | None = None,
    class_id: UUID | None = None,
    question_type: str | None = None,
    difficulty: str | None = None,
    query: str | None = None,
) -> tuple[list[Question], int]:
    base = select(Question)
    if subject_id:
        base = base.where(Question.subject_id == subject_id)
    if class_id:
        base = base.where(Question.class_id == class_id)
    if question_type:
        base = base.where(Question.question_type == question_type)
    if difficulty:
        base = base.where(Question.difficulty == difficulty)
    if query:
        base = base.where(
            or_(
                Question.question_text.ilike(f'%{query}%'),
                Question.topic.ilike(f'%{query}%'),
                Question.chapter.ilike(f'%{query}%'),
            )
        )

    total = db.scalar(select(func.count()).select_from(base.subquery()))
    items = db.scalars(
        base.order_by(Question.created_at.desc(), Question.id).offset((page - 1) * page_size).limit(page_size)
    ).all()
    return list(items), int(total or 0)


def list_alternative_questions(
    db: Session,
    *,
    question_id: UUID,
    subject_id: UUID | None = None,
    class_id: UUID | None = None,
    question_type: str | None = None,
    difficulty: str | None = None,
    exclude_ids: list[UUID] | None = None,
    limit: int = 10,
) -> list[Question]:
    """Candidate replacements for a question, newest first."""
    excluded = [question_id, *(exclude_ids or [])]
    base = select(Question).where(Question.id.not_in(excluded))
    if subject_id:
        base = base.where(Question.subject_id == subject_id)
    if class_id:
        base = base.where(Question.class_id == class_id)
    if question_type:
        base = base.where(Question.question_type == question_type)
    if difficulty:
        base = base.where(Question.difficulty == difficulty)
    return list(db.scalars(base.order_by(Question.created_at.desc(), Question.id).limit(limit)).all())
