from bson import ObjectId


def _id(value):
    return str(value) if isinstance(value, ObjectId) else value


def _ts(value):
    return value.isoformat() if value is not None else None


def serialize_user(user):
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role"),
        "created_at": _ts(user.get("created_at")),
    }


def user_summary(user, *fields):
    if user is None:
        return None
    summary = {"id": str(user["_id"])}
    for field in fields:
        summary[field] = user.get(field)
    return summary


def serialize_question(q, redact=False):
    data = {
        "question_id": q["question_id"],
        "text": q.get("text"),
        "options": list(q.get("options", [])),
    }
    if not redact:
        data["correct_option"] = q.get("correct_option")
    return data


def serialize_quiz(quiz, redact=False):
    return {
        "id": str(quiz["_id"]),
        "title": quiz.get("title"),
        "course_id": _id(quiz.get("course_id")),
        "questions": [serialize_question(q, redact=redact) for q in quiz.get("questions", [])],
        "created_at": _ts(quiz.get("created_at")),
        "updated_at": _ts(quiz.get("updated_at")),
    }


def serialize_course(course, trainer=None, students=None, quizzes=None):
    """Course with trainer, enrolled students and quizzes expanded when given."""
    data = {
        "id": str(course["_id"]),
        "title": course.get("title"),
        "description": course.get("description"),
        "trainer_id": _id(course.get("trainer_id")),
        "student_ids": [_id(s) for s in course.get("student_ids", [])],
        "quiz_ids": [_id(q) for q in course.get("quiz_ids", [])],
        "created_at": _ts(course.get("created_at")),
        "updated_at": _ts(course.get("updated_at")),
    }
    if trainer is not None:
        data["trainer"] = user_summary(trainer, "name")
    if students is not None:
        data["students"] = [user_summary(s, "name", "email") for s in students]
    if quizzes is not None:
        data["quizzes"] = [serialize_quiz(q) for q in quizzes]
    return data


def serialize_attempt(attempt, student=None, quiz=None, quiz_fields=("title", "questions")):
    data = {
        "id": str(attempt["_id"]),
        "quiz_id": _id(attempt.get("quiz_id")),
        "student_id": _id(attempt.get("student_id")),
        "answers": list(attempt.get("answers", [])),
        "score": attempt.get("score"),
        "created_at": _ts(attempt.get("created_at")),
    }
    if student is not None:
        data["student"] = user_summary(student, "name", "email")
    if quiz is not None:
        expanded = {"id": str(quiz["_id"])}
        if "title" in quiz_fields:
            expanded["title"] = quiz.get("title")
        if "questions" in quiz_fields:
            expanded["questions"] = [serialize_question(q) for q in quiz.get("questions", [])]
        data["quiz"] = expanded
    return data
