import json

from bson import ObjectId

from conftest import SAMPLE_QUESTIONS, auth, register
from services import quiz_service


def answers_for(quiz, picks):
    return [
        {"question_id": q["question_id"], "selected_option": pick}
        for q, pick in zip(quiz["questions"], picks)
    ]


# ---------------- TRAINER ----------------

def test_create_quiz_links_it_to_course(client, cols, trainer_token, course_id, quiz):
    assert quiz["title"] == "Math Basics Quiz"
    assert quiz["course_id"] == course_id
    assert len(quiz["questions"]) == 3
    assert all(q["question_id"] for q in quiz["questions"])

    course = cols.courses.find_one({"_id": ObjectId(course_id)})
    assert course["quiz_ids"] == [ObjectId(quiz["id"])]


def test_student_cannot_create_quiz(client, student_token, course_id):
    res = client.post("/api/quizzes", json={"title": "Failed Quiz", "course_id": course_id, "questions": []},
                      headers=auth(student_token))
    assert res.status_code == 403
    assert res.get_json()["error"] == "forbidden_role"


def test_create_quiz_for_missing_course(client, trainer_token):
    res = client.post("/api/quizzes", json={"title": "Q", "course_id": str(ObjectId()), "questions": []},
                      headers=auth(trainer_token))
    assert res.status_code == 404


def test_correct_option_must_be_an_option(client, trainer_token, course_id):
    res = client.post(
        "/api/quizzes",
        json={"title": "Bad", "course_id": course_id,
              "questions": [{"text": "2 + 2?", "options": ["3", "5"], "correct_option": "4"}]},
        headers=auth(trainer_token),
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "validation_error"


def test_question_needs_an_option(client, trainer_token, course_id):
    res = client.post(
        "/api/quizzes",
        json={"title": "Bad", "course_id": course_id,
              "questions": [{"text": "Empty?", "options": [], "correct_option": ""}]},
        headers=auth(trainer_token),
    )
    assert res.status_code == 400


def test_trainer_reads_full_quiz(client, trainer_token, quiz):
    res = client.get(f"/api/quizzes/{quiz['id']}", headers=auth(trainer_token))
    assert res.status_code == 200
    assert [q["correct_option"] for q in res.get_json()["questions"]] == ["4", "Paris", "Yes"]


def test_student_cannot_read_full_quiz(client, student_token, quiz):
    res = client.get(f"/api/quizzes/{quiz['id']}", headers=auth(student_token))
    assert res.status_code == 403
    assert res.get_json()["error"] == "forbidden_role"


def test_update_replaces_questions_and_keeps_known_ids(client, trainer_token, quiz):
    kept = dict(quiz["questions"][0], correct_option="3")
    res = client.put(
        f"/api/quizzes/{quiz['id']}",
        json={"title": "Renamed", "questions": [kept, {"text": "New?", "options": ["a"], "correct_option": "a"}]},
        headers=auth(trainer_token),
    )
    assert res.status_code == 200
    body = res.get_json()
    assert body["title"] == "Renamed"
    assert len(body["questions"]) == 2
    assert body["questions"][0]["question_id"] == kept["question_id"]
    assert body["questions"][0]["correct_option"] == "3"
    assert body["questions"][1]["question_id"] != kept["question_id"]


def test_update_missing_quiz(client, trainer_token):
    res = client.put(f"/api/quizzes/{ObjectId()}", json={"title": "x", "questions": []},
                     headers=auth(trainer_token))
    assert res.status_code == 404


def test_delete_quiz_cascades(client, cols, trainer_token, student_token, course_id, quiz):
    client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": []}, headers=auth(student_token))

    res = client.delete(f"/api/quizzes/{quiz['id']}", headers=auth(trainer_token))
    assert res.status_code == 200
    assert res.get_json()["message"] == "Quiz removed"

    assert cols.courses.find_one({"_id": ObjectId(course_id)})["quiz_ids"] == []
    assert cols.quiz_attempts.count_documents({"quiz_id": ObjectId(quiz["id"])}) == 0
    assert client.get(f"/api/quizzes/{quiz['id']}", headers=auth(trainer_token)).status_code == 404
    assert client.delete(f"/api/quizzes/{quiz['id']}", headers=auth(trainer_token)).status_code == 404


# ---------------- STUDENT ----------------

def test_take_redacts_correct_options(client, student_token, quiz):
    res = client.get(f"/api/quizzes/{quiz['id']}/take", headers=auth(student_token))
    assert res.status_code == 200
    body = res.get_json()
    assert body["submitted"] is False
    assert len(body["questions"]) == 3
    for q in body["questions"]:
        assert "correct_option" not in q
        assert q["options"]
    assert "correct_option" not in json.dumps(body)


def test_trainer_cannot_use_take_path(client, trainer_token, quiz):
    res = client.get(f"/api/quizzes/{quiz['id']}/take", headers=auth(trainer_token))
    assert res.status_code == 403


def test_submit_scores_and_is_one_shot(client, cols, student_token, quiz):
    answers = answers_for(quiz, ["4", "Rome", "Yes"])
    res = client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": answers},
                      headers=auth(student_token))
    assert res.status_code == 201
    assert res.get_json() == {"score": 2, "total_questions": 3}

    again = client.post(f"/api/quizzes/{quiz['id']}/submit",
                        json={"answers": answers_for(quiz, ["4", "Paris", "Yes"])},
                        headers=auth(student_token))
    assert again.status_code == 409
    assert again.get_json()["message"] == "You have already submitted this quiz"

    attempts = list(cols.quiz_attempts.find({"quiz_id": ObjectId(quiz["id"])}))
    assert len(attempts) == 1
    assert attempts[0]["score"] == 2

    take = client.get(f"/api/quizzes/{quiz['id']}/take", headers=auth(student_token))
    assert take.get_json()["submitted"] is True


def test_submit_ignores_order_and_unknown_ids(client, student_token, quiz):
    answers = list(reversed(answers_for(quiz, ["4", "Paris"])))
    answers.append({"question_id": str(ObjectId()), "selected_option": "4"})
    res = client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": answers},
                      headers=auth(student_token))
    assert res.get_json() == {"score": 2, "total_questions": 3}


def test_submit_to_missing_quiz(client, student_token):
    res = client.post(f"/api/quizzes/{ObjectId()}/submit", json={"answers": []},
                      headers=auth(student_token))
    assert res.status_code == 404


def test_submit_rejects_non_list_answers(client, student_token, quiz):
    res = client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": {"0": "4"}},
                      headers=auth(student_token))
    assert res.status_code == 400


def test_concurrent_duplicate_is_stopped_by_unique_index(client, cols, student_token, quiz, monkeypatch):
    client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": []}, headers=auth(student_token))

    # Simulate a second request that passed the existence check before the first insert landed
    monkeypatch.setattr(quiz_service, "find_attempt", lambda *args: None)
    res = client.post(f"/api/quizzes/{quiz['id']}/submit",
                      json={"answers": answers_for(quiz, ["4", "Paris", "Yes"])},
                      headers=auth(student_token))
    assert res.status_code == 409
    assert cols.quiz_attempts.count_documents({}) == 1
    assert cols.quiz_attempts.find_one()["score"] == 0


def test_my_results_includes_answer_key(client, student_token, quiz):
    client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": answers_for(quiz, ["4"])},
                headers=auth(student_token))
    res = client.get("/api/quizzes/my-results", headers=auth(student_token))
    assert res.status_code == 200
    results = res.get_json()
    assert len(results) == 1
    assert results[0]["score"] == 1
    assert results[0]["quiz"]["title"] == "Math Basics Quiz"
    assert results[0]["quiz"]["questions"][0]["correct_option"] == "4"


def test_trainer_cannot_read_my_results(client, trainer_token):
    res = client.get("/api/quizzes/my-results", headers=auth(trainer_token))
    assert res.status_code == 403


# ---------------- END TO END ----------------

def test_end_to_end_flow(client):
    token_a = register(client, "Alice", "a@x.com")
    course = client.post("/api/courses", json={"title": "C1", "description": "First course"},
                         headers=auth(token_a)).get_json()
    quiz = client.post(
        "/api/quizzes",
        json={"title": "Q1", "course_id": course["id"],
              "questions": [{"text": "Pick X", "options": ["X", "Y"], "correct_option": "X"}]},
        headers=auth(token_a),
    ).get_json()

    reg_b = client.post("/api/auth/register", json={"name": "Bob", "email": "b@x.com", "password": "pw1234"})
    assert reg_b.get_json()["role"] == "student"
    token_b = reg_b.get_json()["token"]
    bob_id = client.get("/api/auth/me", headers=auth(token_b)).get_json()["id"]

    res = client.put(f"/api/courses/{course['id']}",
                     json={"title": "C1", "description": "First course", "students": [bob_id]},
                     headers=auth(token_a))
    assert res.status_code == 200

    taken = client.get(f"/api/quizzes/{quiz['id']}/take", headers=auth(token_b)).get_json()
    assert all("correct_option" not in q for q in taken["questions"])

    question_id = taken["questions"][0]["question_id"]
    submit = client.post(f"/api/quizzes/{quiz['id']}/submit",
                         json={"answers": [{"question_id": question_id, "selected_option": "X"}]},
                         headers=auth(token_b))
    assert submit.get_json() == {"score": 1, "total_questions": 1}

    again = client.post(f"/api/quizzes/{quiz['id']}/submit",
                        json={"answers": [{"question_id": question_id, "selected_option": "X"}]},
                        headers=auth(token_b))
    assert again.status_code == 409

    results = client.get(f"/api/quizzes/{quiz['id']}/results", headers=auth(token_a)).get_json()
    assert len(results) == 1
    assert results[0]["student"]["name"] == "Bob"
    assert results[0]["score"] == 1
