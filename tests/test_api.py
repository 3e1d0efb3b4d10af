import pytest

from quizmaster.application.errors import CourseServiceUnavailableError
from quizmaster.infrastructure.db.models.user_model import UserModel
from factories import add_quiz, add_user, auth_header

API = "/api/v1"


@pytest.fixture
def seeded(app_db):
    professor = add_user(app_db, "Ada", "Lovelace", role=UserModel.ROLE_PROFESSOR)
    alan = add_user(app_db, "Alan", "Turing")
    grace = add_user(app_db, "Grace", "Hopper")
    quiz = add_quiz(app_db, professor)
    for user in (professor, alan, grace):
        app_db.refresh(user)
    seeded = {
        "professor": professor,
        "alan": alan,
        "grace": grace,
        "quiz_id": quiz.id,
        "question_ids": [q.id for q in sorted(quiz.questions, key=lambda q: q.order)],
    }
    # Detach with attributes loaded so requests own the shared connection
    app_db.close()
    return seeded


def start(client, user, quiz_id):
    return client.post(f"{API}/attempts/start", json={"quiz_id": quiz_id}, headers=auth_header(user))


def answer(client, user, attempt_id, question_id, value, seconds=3):
    return client.post(
        f"{API}/attempts/answer",
        json={
            "attempt_id": attempt_id,
            "question_id": question_id,
            "answer": value,
            "time_to_answer": seconds,
        },
        headers=auth_header(user),
    )


def complete(client, user, attempt_id):
    return client.put(f"{API}/attempts/{attempt_id}/complete", headers=auth_header(user))


class TestHealthAndAuth:
    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_missing_token(self, client, seeded):
        response = client.post(f"{API}/attempts/start", json={"quiz_id": seeded["quiz_id"]})
        assert response.status_code == 401

    def test_garbage_token(self, client, seeded):
        response = client.get(f"{API}/attempts", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_professor_cannot_attempt(self, client, seeded):
        response = start(client, seeded["professor"], seeded["quiz_id"])
        assert response.status_code == 403


class TestAttemptFlow:
    def test_full_attempt_then_leaderboards(self, client, seeded):
        alan = seeded["alan"]
        q1, q2, q3 = seeded["question_ids"]

        started = start(client, alan, seeded["quiz_id"])
        assert started.status_code == 201
        body = started.json()
        attempt_id = body["attempt"]["id"]
        assert body["attempt"]["max_score"] == 60.0
        assert body["attempt"]["completed_at"] is None
        assert [q["id"] for q in body["quiz"]["questions"]] == [q1, q2, q3]
        for question in body["quiz"]["questions"]:
            assert "correct_answer" not in question
            assert "correct_boolean" not in question
            assert "correct_option_index" not in question

        first = answer(client, alan, attempt_id, q1, True, 3)
        assert first.status_code == 200
        assert first.json() == {
            "is_correct": True,
            "points_earned": 10.0,
            "message": "Answer submitted successfully",
        }

        second = answer(client, alan, attempt_id, q2, 2, 7)
        assert second.json()["points_earned"] == 17.6

        done = complete(client, alan, attempt_id)
        assert done.status_code == 200
        assert done.json()["total_score"] == 27.6
        assert done.json()["completed_at"] is not None
        assert len(done.json()["answers"]) == 2

        board = client.get(f"{API}/leaderboards/quiz/{seeded['quiz_id']}", headers=auth_header(alan))
        assert board.status_code == 200
        assert board.json()["total_count"] == 1
        entry = board.json()["leaderboard"][0]
        assert entry["rank"] == 1
        assert entry["student_name"] == "Alan Turing"
        assert entry["score"] == 27.6

        my_rank = client.get(
            f"{API}/leaderboards/quiz/{seeded['quiz_id']}/my-rank", headers=auth_header(alan)
        )
        assert my_rank.status_code == 200
        assert my_rank.json()["rank"] == 1
        assert my_rank.json()["total_participants"] == 1
        assert my_rank.json()["percentage"] == pytest.approx(46.0)

        global_board = client.get(f"{API}/leaderboards/global", headers=auth_header(alan))
        assert global_board.status_code == 200
        [row] = global_board.json()["leaderboard"]
        assert row["student_id"] == alan.id
        assert row["total_attempts"] == 1

    def test_submitted_answer_types_are_strict(self, client, seeded):
        alan = seeded["alan"]
        _, q2, _ = seeded["question_ids"]
        attempt_id = start(client, alan, seeded["quiz_id"]).json()["attempt"]["id"]

        assert answer(client, alan, attempt_id, q2, "2").status_code == 422
        assert answer(client, alan, attempt_id, q2, True).status_code == 400
        assert answer(client, alan, attempt_id, q2, 2, seconds=16).status_code == 400

        stored = client.get(f"{API}/attempts/{attempt_id}", headers=auth_header(alan))
        assert stored.json()["answers"] == []

    def test_duplicate_answer_conflicts(self, client, seeded):
        alan = seeded["alan"]
        q1 = seeded["question_ids"][0]
        attempt_id = start(client, alan, seeded["quiz_id"]).json()["attempt"]["id"]

        assert answer(client, alan, attempt_id, q1, True).status_code == 200
        assert answer(client, alan, attempt_id, q1, False).status_code == 409

    def test_duplicate_start_conflicts(self, client, seeded):
        assert start(client, seeded["alan"], seeded["quiz_id"]).status_code == 201
        assert start(client, seeded["alan"], seeded["quiz_id"]).status_code == 409

    def test_complete_twice_conflicts(self, client, seeded):
        alan = seeded["alan"]
        attempt_id = start(client, alan, seeded["quiz_id"]).json()["attempt"]["id"]

        assert complete(client, alan, attempt_id).status_code == 200
        assert complete(client, alan, attempt_id).status_code == 409
        assert answer(client, alan, attempt_id, seeded["question_ids"][0], True).status_code == 409

    def test_other_students_attempt_is_hidden(self, client, seeded):
        attempt_id = start(client, seeded["alan"], seeded["quiz_id"]).json()["attempt"]["id"]

        grace = seeded["grace"]
        assert client.get(f"{API}/attempts/{attempt_id}", headers=auth_header(grace)).status_code == 404
        assert complete(client, grace, attempt_id).status_code == 404

    def test_list_my_attempts(self, client, seeded):
        alan = seeded["alan"]
        attempt_id = start(client, alan, seeded["quiz_id"]).json()["attempt"]["id"]

        response = client.get(f"{API}/attempts", headers=auth_header(alan))
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [attempt_id]


class TestStartGuards:
    def test_unknown_quiz(self, client, seeded):
        assert start(client, seeded["alan"], 9999).status_code == 404

    def test_pending_quiz_is_forbidden(self, client, app_db, seeded):
        pending = add_quiz(app_db, seeded["professor"], status="pending", title="Draft")
        assert start(client, seeded["alan"], pending.id).status_code == 403

    def test_course_not_completed(self, client, seeded, course_checker):
        course_checker.completed = False

        response = start(client, seeded["alan"], seeded["quiz_id"])
        assert response.status_code == 403
        assert "course" in response.json()["detail"]

    def test_course_service_down(self, client, seeded, course_checker):
        course_checker.error = CourseServiceUnavailableError("Failed to verify course completion")

        response = start(client, seeded["alan"], seeded["quiz_id"])
        assert response.status_code == 503


class TestLeaderboardEndpoints:
    def test_my_rank_without_completed_attempt(self, client, seeded):
        response = client.get(
            f"{API}/leaderboards/quiz/{seeded['quiz_id']}/my-rank", headers=auth_header(seeded["grace"])
        )
        assert response.status_code == 404

    def test_empty_quiz_leaderboard(self, client, seeded):
        response = client.get(
            f"{API}/leaderboards/quiz/{seeded['quiz_id']}", headers=auth_header(seeded["grace"])
        )
        assert response.status_code == 200
        assert response.json() == {"quiz_id": seeded["quiz_id"], "total_count": 0, "leaderboard": []}
