import logging
from datetime import datetime

from utils.access import require_course_owner, require_found, require_role
from utils.errors import ValidationFailed
from utils.identity import Role
from utils.serializers import serialize_course
from utils.validators import parse_object_id, require_fields

logger = logging.getLogger(__name__)

COURSE_NOT_FOUND = "Course not found"


def load_course(cols, course_id):
    oid = parse_object_id(course_id, "course ID")
    return require_found(cols.courses.find_one({"_id": oid}), COURSE_NOT_FOUND)


def expand_courses(cols, courses):
    """Serializes courses with trainer name, student name/email and full quizzes, batching the lookups."""
    user_ids, quiz_ids = set(), set()
    for c in courses:
        user_ids.add(c["trainer_id"])
        user_ids.update(c.get("student_ids", []))
        quiz_ids.update(c.get("quiz_ids", []))

    users = {
        u["_id"]: u
        for u in cols.users.find({"_id": {"$in": list(user_ids)}}, {"name": 1, "email": 1})
    }
    quizzes = {q["_id"]: q for q in cols.quizzes.find({"_id": {"$in": list(quiz_ids)}})}

    expanded = []
    for c in courses:
        # Dangling references (deleted users) are dropped, like a populate would
        trainer = users.get(c["trainer_id"])
        expanded.append(serialize_course(
            c,
            trainer=trainer if trainer is not None else {"_id": c["trainer_id"]},
            students=[users[s] for s in c.get("student_ids", []) if s in users],
            quizzes=[quizzes[q] for q in c.get("quiz_ids", []) if q in quizzes],
        ))
    return expanded


def _clean_students(cols, students):
    if students is None:
        return []
    if not isinstance(students, list):
        raise ValidationFailed("Students must be a list of user IDs")

    student_ids = []
    for s in students:
        oid = parse_object_id(s, "student ID")
        if oid not in student_ids:
            student_ids.append(oid)

    found = cols.users.count_documents({"_id": {"$in": student_ids}, "role": Role.STUDENT.value})
    if found != len(student_ids):
        raise ValidationFailed("Every enrolled user must be an existing student")
    return student_ids


# ---------------- CRUD ----------------

def create_course(cols, caller, data):
    require_role(caller, Role.TRAINER)
    title, description = require_fields(data, "title", "description",
                                        message="Title and description are required")
    now = datetime.utcnow()
    course = {
        "title": title,
        "description": description,
        "trainer_id": parse_object_id(caller.id, "user ID"),
        "student_ids": [],
        "quiz_ids": [],
        "created_at": now,
        "updated_at": now,
    }
    course["_id"] = cols.courses.insert_one(course).inserted_id
    logger.info("Trainer %s created course %s", caller.id, course["_id"])
    return serialize_course(course)


def list_courses(cols, caller):
    """Trainers see the courses they own, students the ones they are enrolled in."""
    caller_oid = parse_object_id(caller.id, "user ID")
    if caller.role is Role.TRAINER:
        query = {"trainer_id": caller_oid}
    elif caller.role is Role.STUDENT:
        query = {"student_ids": caller_oid}
    elif caller.role is Role.ADMIN:
        # Admins neither own nor attend courses
        return []
    else:
        raise AssertionError(f"Unhandled role {caller.role!r}")

    courses = list(cols.courses.find(query).sort("created_at", 1))
    return expand_courses(cols, courses)


def get_course(cols, caller, course_id):
    """Any authenticated caller may read a course by id; no ownership or enrollment filter applies."""
    course = load_course(cols, course_id)
    return expand_courses(cols, [course])[0]


def update_course(cols, caller, course_id, data):
    """Replaces title, description and the whole enrolled-student set."""
    require_role(caller, Role.TRAINER)
    course = load_course(cols, course_id)
    require_course_owner(caller, course, "Not authorized")

    title, description = require_fields(data, "title", "description",
                                        message="Title and description are required")
    changes = {
        "title": title,
        "description": description,
        "student_ids": _clean_students(cols, data.get("students")),
        "updated_at": datetime.utcnow(),
    }
    cols.courses.update_one({"_id": course["_id"]}, {"$set": changes})
    course.update(changes)
    logger.info("Trainer %s updated course %s (%d students)",
                caller.id, course["_id"], len(changes["student_ids"]))
    return expand_courses(cols, [course])[0]


def delete_course(cols, caller, course_id):
    """
    Deletes the course with its quizzes and their attempts.

    Children go first: attempts, then quizzes, then the course. The steps are
    separate writes, so an interrupted delete leaves the course in place and
    can simply be repeated; deleting already-removed children is a no-op.
    """
    require_role(caller, Role.TRAINER)
    course = load_course(cols, course_id)
    require_course_owner(caller, course, "User not authorized")

    quiz_ids = set(course.get("quiz_ids", []))
    quiz_ids.update(q["_id"] for q in cols.quizzes.find({"course_id": course["_id"]}, {"_id": 1}))
    quiz_ids = list(quiz_ids)

    attempts = cols.quiz_attempts.delete_many({"quiz_id": {"$in": quiz_ids}})
    quizzes = cols.quizzes.delete_many({"_id": {"$in": quiz_ids}})
    cols.courses.delete_one({"_id": course["_id"]})

    logger.info("Trainer %s deleted course %s (%d quizzes, %d attempts)",
                caller.id, course["_id"], quizzes.deleted_count, attempts.deleted_count)
    return {"message": "Course and associated data removed"}
