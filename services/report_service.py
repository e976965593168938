from services.course_service import expand_courses, load_course
from services.quiz_service import my_results as _my_results
from utils.access import require_course_owner, require_found, require_role
from utils.identity import Role
from utils.serializers import serialize_attempt, user_summary
from utils.validators import parse_object_id


def student_progress(cols, caller, student_id, course_id):
    """
    One student's attempts on the quizzes of one course, for the course's
    trainer. Read-only: scores are the ones fixed at submission.
    """
    require_role(caller, Role.TRAINER)
    course = load_course(cols, course_id)
    require_course_owner(caller, course, "Not authorized to view this report")

    student_oid = parse_object_id(student_id, "student ID")
    student = require_found(
        cols.users.find_one({"_id": student_oid}, {"name": 1, "email": 1}), "Student not found"
    )

    quiz_ids = course.get("quiz_ids", [])
    attempts = list(cols.quiz_attempts.find({
        "student_id": student_oid,
        "quiz_id": {"$in": quiz_ids},
    }).sort("created_at", 1))
    quizzes = {
        q["_id"]: q
        for q in cols.quizzes.find({"_id": {"$in": quiz_ids}}, {"title": 1, "questions": 1})
    }

    return {
        "student": user_summary(student, "name", "email"),
        "course": expand_courses(cols, [course])[0],
        "attempts": [serialize_attempt(a, quiz=quizzes.get(a["quiz_id"])) for a in attempts],
    }


def course_results(cols, caller, course_id):
    """Every attempt on every quiz of a course, with student name/email and quiz title."""
    require_role(caller, Role.TRAINER)
    course = load_course(cols, course_id)
    require_course_owner(caller, course, "User not authorized")

    quiz_ids = course.get("quiz_ids", [])
    attempts = list(cols.quiz_attempts.find({"quiz_id": {"$in": quiz_ids}}).sort("created_at", 1))
    students = {
        u["_id"]: u
        for u in cols.users.find(
            {"_id": {"$in": [a["student_id"] for a in attempts]}}, {"name": 1, "email": 1}
        )
    }
    quizzes = {q["_id"]: q for q in cols.quizzes.find({"_id": {"$in": quiz_ids}}, {"title": 1})}

    return [
        serialize_attempt(
            a,
            student=students.get(a["student_id"]),
            quiz=quizzes.get(a["quiz_id"]),
            quiz_fields=("title",),
        )
        for a in attempts
    ]


def my_results_summary(cols, caller):
    """The caller's own attempts with quiz titles only."""
    results = _my_results(cols, caller)
    for r in results:
        if "quiz" in r:
            r["quiz"].pop("questions", None)
    return results
