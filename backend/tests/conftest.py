import os
import uuid
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite+pysqlite:///./test_online_assessment.db')

os.environ.setdefault('DATABASE_URL', TEST_DATABASE_URL)
os.environ.setdefault('JWT_SECRET_KEY', 'test-access-secret-32-chars-min-0001')
os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('CORS_ORIGINS', 'http://localhost:3001')
os.environ.setdefault('FIRST_ADMIN_EMAIL', 'seed-super-admin@example.com')
os.environ.setdefault('FIRST_ADMIN_PASSWORD', 'SeedPass123!')

from online_assessment.core.security import hash_password
from online_assessment.db.base import Base
from online_assessment.db.session import build_engine, get_db
from online_assessment.main import app
from online_assessment.models.question import Question
from online_assessment.models.rbac import Role, User, UserRole
from online_assessment.models.roster import Learner


SUBJECT_ID = uuid.UUID('5a1b0000-0000-4000-8000-000000000001')
CLASS_ID = uuid.UUID('c1a50000-0000-4000-8000-000000000001')
OTHER_CLASS_ID = uuid.UUID('c1a50000-0000-4000-8000-000000000002')
SECTION_A = uuid.UUID('5ec70000-0000-4000-8000-00000000000a')
SECTION_B = uuid.UUID('5ec70000-0000-4000-8000-00000000000b')

engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        _seed_roles(db)
        _seed_users(db)
        db.commit()
    finally:
        db.close()

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def _override_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as api_client:
        yield api_client

    app.dependency_overrides.clear()


@pytest.fixture()
def questions(db_session: Session) -> dict[str, uuid.UUID]:
    """Two negatively marked MCQs, a true/false and an essay question."""
    rows = {
        'mcq_1': Question(
            subject_id=SUBJECT_ID,
            class_id=CLASS_ID,
            question_type='mcq',
            difficulty='easy',
            question_text='2 + 2 = ?',
            options=[{'id': 'a', 'text': '3'}, {'id': 'b', 'text': '4'}, {'id': 'c', 'text': '5'}],
            correct_answer='b',
            marks=4.0,
            negative_marks=1.0,
        ),
        'mcq_2': Question(
            subject_id=SUBJECT_ID,
            class_id=CLASS_ID,
            question_type='mcq',
            difficulty='easy',
            question_text='3 * 3 = ?',
            options=[{'id': 'a', 'text': '6'}, {'id': 'b', 'text': '8'}, {'id': 'c', 'text': '9'}],
            correct_answer='c',
            marks=4.0,
            negative_marks=1.0,
        ),
        'true_false': Question(
            subject_id=SUBJECT_ID,
            class_id=CLASS_ID,
            question_type='true_false',
            difficulty='medium',
            question_text='Zero is an even number.',
            options=[],
            correct_answer='true',
            marks=2.0,
            negative_marks=0.5,
        ),
        'essay': Question(
            subject_id=SUBJECT_ID,
            class_id=CLASS_ID,
            question_type='essay',
            difficulty='hard',
            question_text='Explain why division by zero is undefined.',
            options=[],
            correct_answer=None,
            marks=5.0,
            negative_marks=0.0,
        ),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return {key: row.id for key, row in rows.items()}


def _seed_roles(db: Session) -> None:
    roles = [
        ('super_admin', 'Full access'),
        ('admin', 'Admin access'),
        ('teacher', 'Teacher access'),
        ('student', 'Student access'),
    ]
    for role_name, description in roles:
        db.add(Role(name=role_name, description=description))
    db.flush()


def _seed_users(db: Session) -> None:
    users = [
        ('seed-super-admin@example.com', 'Super Admin', ['super_admin', 'admin'], None),
        ('seed-teacher@example.com', 'Teacher User', ['teacher'], None),
        ('seed-teacher-2@example.com', 'Second Teacher', ['teacher'], None),
        ('seed-student-1@example.com', 'Student One', ['student'], (CLASS_ID, SECTION_A, 'R-001')),
        ('seed-student-2@example.com', 'Student Two', ['student'], (CLASS_ID, SECTION_B, 'R-002')),
        ('seed-student-3@example.com', 'Student Three', ['student'], (OTHER_CLASS_ID, SECTION_A, 'R-003')),
    ]

    role_map = {role.name: role for role in db.scalars(select(Role)).all()}

    for email, full_name, role_names, roster in users:
        user = User(
            email=email,
            full_name=full_name,
            hashed_password=hash_password('SeedPass123!'),
            is_active=True,
        )
        db.add(user)
        db.flush()

        for role_name in role_names:
            db.add(UserRole(user_id=user.id, role_id=role_map[role_name].id))

        if roster:
            class_id, section_id, roll_no = roster
            first_name, last_name = full_name.split(' ', 1)
            db.add(
                Learner(
                    user_id=user.id,
                    first_name=first_name,
                    last_name=last_name,
                    roll_no=roll_no,
                    class_id=class_id,
                    section_id=section_id,
                )
            )

    db.flush()


def login(client: TestClient, email: str, password: str = 'SeedPass123!') -> dict:
    response = client.post(
        '/api/v1/auth/login',
        json={
            'email': email,
            'password': password,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


def auth_header(access_token: str) -> dict[str, str]:
    return {'Authorization': f'Bearer {access_token}'}


def create_test(client: TestClient, token: str, question_ids: list, **overrides: Any) -> dict:
    payload = {
        'title': 'Arithmetic Unit Test',
        'subject_id': str(SUBJECT_ID),
        'class_id': str(CLASS_ID),
        'duration_minutes': 30,
        'max_attempts': 1,
        'shuffle_questions': False,
        'shuffle_options': False,
        'question_ids': [str(qid) for qid in question_ids],
    }
    payload.update(overrides)
    response = client.post('/api/v1/tests', headers=auth_header(token), json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def create_published_test(client: TestClient, token: str, question_ids: list, **overrides: Any) -> dict:
    test = create_test(client, token, question_ids, **overrides)
    response = client.post(f"/api/v1/tests/{test['id']}/publish", headers=auth_header(token))
    assert response.status_code == 200, response.text
    return response.json()


def start_attempt(client: TestClient, token: str, test_id: str, learner: str | None = None) -> dict:
    payload: dict[str, Any] = {'test_id': test_id}
    if learner is not None:
        payload['learner'] = learner
    response = client.post('/api/v1/attempts/start', headers=auth_header(token), json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def question_slots(detail: dict) -> dict[str, str]:
    """Map question id -> test question id for an attempt detail payload."""
    return {item['question_id']: item['test_question_id'] for item in detail['questions']}
