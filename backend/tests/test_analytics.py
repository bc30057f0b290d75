from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from online_assessment.services import attempt_service
from tests.conftest import auth_header, create_published_test, login, question_slots, start_attempt


def _take(client: TestClient, token: str, test_id: str, answers: dict) -> dict:
    detail = start_attempt(client, token, test_id)
    slots = question_slots(detail)
    response = client.post(
        f"/api/v1/attempts/{detail['attempt']['id']}/submit",
        headers=auth_header(token),
        json={
            'responses': [
                {'test_question_id': slots[str(question_id)], 'selected_options': [choice]}
                for question_id, choice in answers.items()
            ]
        },
    )
    assert response.status_code == 200, response.text
    return response.json()['attempt']


def test_analytics_stats_and_leaderboard(client: TestClient, questions: dict, monkeypatch) -> None:
    teacher = login(client, 'seed-teacher@example.com')['access_token']
    student_1 = login(client, 'seed-student-1@example.com')['access_token']
    student_2 = login(client, 'seed-student-2@example.com')['access_token']
    student_3 = login(client, 'seed-student-3@example.com')['access_token']
    mcq_1, mcq_2 = questions['mcq_1'], questions['mcq_2']
    test = create_published_test(client, teacher, [mcq_1, mcq_2], max_attempts=2, passing_marks=4)

    clock = {'now': datetime.now(UTC)}

    def _tick() -> datetime:
        clock['now'] += timedelta(seconds=1)
        return clock['now']

    monkeypatch.setattr(attempt_service, '_utcnow', _tick)

    top = _take(client, student_1, test['id'], {mcq_1: 'b', mcq_2: 'c'})
    early_tie = _take(client, student_2, test['id'], {mcq_1: 'b', mcq_2: 'a'})
    late_tie = _take(client, student_3, test['id'], {mcq_1: 'a', mcq_2: 'c'})
    bottom = _take(client, student_1, test['id'], {mcq_1: 'a', mcq_2: 'a'})
    start_attempt(client, student_2, test['id'])

    response = client.get(f"/api/v1/tests/{test['id']}/analytics", headers=auth_header(teacher))
    assert response.status_code == 200, response.text
    body = response.json()

    assert body['test']['total_marks'] == 8.0
    assert body['test']['passing_marks'] == 4.0
    assert body['stats'] == {
        'total_attempts': 5,
        'completed_attempts': 4,
        'average_score': 3.0,
        'highest_score': 8.0,
        'lowest_score': -2.0,
        'pass_count': 1,
        'fail_count': 3,
    }
    assert [entry['attempt_id'] for entry in body['leaderboard']] == [
        top['id'],
        early_tie['id'],
        late_tie['id'],
        bottom['id'],
    ]
    assert [entry['rank'] for entry in body['leaderboard']] == [1, 2, 3, 4]
    assert body['leaderboard'][0]['learner']['roll_no'] == 'R-001'
    assert body['leaderboard'][3]['score'] == -2.0


def test_analytics_without_attempts(client: TestClient, questions: dict) -> None:
    teacher = login(client, 'seed-teacher@example.com')['access_token']
    student = login(client, 'seed-student-1@example.com')['access_token']
    test = create_published_test(client, teacher, [questions['essay']])

    body = client.get(f"/api/v1/tests/{test['id']}/analytics", headers=auth_header(teacher)).json()
    assert body['stats']['completed_attempts'] == 0
    assert body['stats']['average_score'] == 0.0
    assert body['leaderboard'] == []

    assert client.get(f"/api/v1/tests/{test['id']}/analytics", headers=auth_header(student)).status_code == 403
