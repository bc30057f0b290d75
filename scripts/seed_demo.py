#!/usr/bin/env python3
import argparse
import sys
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))

DEMO_PASSWORD = 'DemoPass123!'
DEMO_SUBJECT_ID = uuid.UUID('5a1b0000-0000-4000-8000-0000000000d1')
DEMO_CLASS_ID = uuid.UUID('c1a50000-0000-4000-8000-0000000000d1')
DEMO_SECTION_ID = uuid.UUID('5ec70000-0000-4000-8000-0000000000d1')

DEMO_QUESTIONS = [
    {
        'question_type': 'mcq',
        'difficulty': 'easy',
        'question_text': 'Which planet is closest to the sun?',
        'options': [{'id': 'a', 'text': 'Venus'}, {'id': 'b', 'text': 'Mercury'}, {'id': 'c', 'text': 'Mars'}],
        'correct_answer': 'b',
        'marks': 4.0,
        'negative_marks': 1.0,
    },
    {
        'question_type': 'mcq',
        'difficulty': 'medium',
        'question_text': 'What is the chemical symbol for sodium?',
        'options': [{'id': 'a', 'text': 'So'}, {'id': 'b', 'text': 'Sd'}, {'id': 'c', 'text': 'Na'}],
        'correct_answer': 'c',
        'marks': 4.0,
        'negative_marks': 1.0,
    },
    {
        'question_type': 'true_false',
        'difficulty': 'easy',
        'question_text': 'Sound travels faster in water than in air.',
        'options': [],
        'correct_answer': 'true',
        'marks': 2.0,
        'negative_marks': 0.0,
    },
    {
        'question_type': 'essay',
        'difficulty': 'hard',
        'question_text': 'Describe the water cycle in your own words.',
        'options': [],
        'correct_answer': None,
        'marks': 10.0,
        'negative_marks': 0.0,
    },
]


def _ensure_user(db, *, email: str, full_name: str, role_name: str):
    from sqlalchemy import select

    from online_assessment.core.security import hash_password
    from online_assessment.models.rbac import Role, User, UserRole

    user = db.scalar(select(User).where(User.email == email))
    if user:
        return user
    user = User(email=email, full_name=full_name, hashed_password=hash_password(DEMO_PASSWORD), is_active=True)
    db.add(user)
    db.flush()
    role = db.scalar(select(Role).where(Role.name == role_name))
    db.add(UserRole(user_id=user.id, role_id=role.id))
    db.flush()
    return user


def main() -> int:
    parser = argparse.ArgumentParser(description='Seed a demo teacher, students, questions and one published test.')
    parser.add_argument('--students', type=int, default=3, help='Number of demo students to create.')
    args = parser.parse_args()

    from online_assessment.models.roster import Learner
    from online_assessment.db.session import SessionLocal
    from online_assessment.services import bootstrap_service, question_bank_service, roster_service, test_service

    with SessionLocal() as db:
        bootstrap_service.ensure_reference_data(db)
        teacher = _ensure_user(db, email='demo-teacher@example.com', full_name='Demo Teacher', role_name='teacher')

        for index in range(1, args.students + 1):
            student = _ensure_user(
                db,
                email=f'demo-student-{index}@example.com',
                full_name=f'Demo Student{index}',
                role_name='student',
            )
            if not roster_service.get_learner_for_user(db, student.id):
                db.add(
                    Learner(
                        user_id=student.id,
                        first_name='Demo',
                        last_name=f'Student{index}',
                        roll_no=f'D-{index:03d}',
                        class_id=DEMO_CLASS_ID,
                        section_id=DEMO_SECTION_ID,
                    )
                )
        db.flush()

        question_ids = []
        for payload in DEMO_QUESTIONS:
            question = question_bank_service.create_question(
                db,
                payload={**payload, 'subject_id': DEMO_SUBJECT_ID, 'class_id': DEMO_CLASS_ID},
                actor_user_id=teacher.id,
            )
            question_ids.append(question.id)

        test = test_service.create_test(
            db,
            payload={
                'title': 'Demo Science Quiz',
                'subject_id': DEMO_SUBJECT_ID,
                'class_id': DEMO_CLASS_ID,
                'duration_minutes': 20,
                'max_attempts': 2,
                'passing_marks': 8.0,
                'question_ids': question_ids,
            },
            actor_user_id=teacher.id,
        )
        test_id = test.id
        test_service.publish_test(db, test_id=test_id, actor_user_id=teacher.id)
        db.commit()

    print(f'Seeded demo test {test_id} ({len(question_ids)} questions). Password for demo users: {DEMO_PASSWORD}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
