import logging
from datetime import datetime

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from services.course_service import COURSE_NOT_FOUND, load_course
from utils.access import require_course_owner, require_found, require_role
from utils.errors import Conflict, ValidationFailed
from utils.identity import Role
from utils.serializers import serialize_attempt, serialize_quiz
from utils.validators import (
    clean_answers, clean_string, parse_object_id, validate_questions,
)

logger = logging.getLogger(__name__)

QUIZ_NOT_FOUND = "Quiz not found"
ALREADY_SUBMITTED = "You have already submitted this quiz"


# --- HELPER UTILITIES ---

def load_quiz(cols, quiz_id):
    oid = parse_object_id(quiz_id, "quiz ID")
    return require_found(cols.quizzes.find_one({"_id": oid}), QUIZ_NOT_FOUND)


def load_owned_quiz(cols, caller, quiz_id, message):
    """Loads a quiz and checks, live against its course, that the caller trains that course."""
    require_role(caller, Role.TRAINER)
    quiz = load_quiz(cols, quiz_id)
    course = require_found(cols.courses.find_one({"_id": quiz["course_id"]}), COURSE_NOT_FOUND)
    require_course_owner(caller, course, message)
    return quiz, course


def find_attempt(cols, quiz_oid, student_oid):
    return cols.quiz_attempts.find_one({"quiz_id": quiz_oid, "student_id": student_oid})


def score_answers(questions, answers):
    """
    Counts the questions whose submitted option exactly matches the correct
    option. Comparison is case-sensitive. Unanswered questions and answers
    for unknown question ids score nothing; the first answer given for a
    question is the one that counts.
    """
    submitted = {}
    for a in answers:
        submitted.setdefault(a.get("question_id"), a.get("selected_option"))

    score = 0
    for q in questions:
        selected = submitted.get(q["question_id"])
        if selected is not None and selected == q["correct_option"]:
            score += 1
    return score


# --- TRAINER: QUIZ LIFECYCLE ---

def create_quiz(cols, caller, data):
    """
    Creates the quiz and appends it to its course's quiz list. These are two
    writes; if linking to the course fails the new quiz is removed again
    before the error propagates.
    """
    require_role(caller, Role.TRAINER)
    course = load_course(cols, data.get("course_id"))
    require_course_owner(caller, course, "Not authorized to add a quiz to this course")

    title = clean_string(data.get("title"))
    if not title:
        raise ValidationFailed("Quiz title is required")
    questions = validate_questions(data.get("questions", []))

    now = datetime.utcnow()
    quiz = {
        "title": title,
        "course_id": course["_id"],
        "questions": questions,
        "created_at": now,
        "updated_at": now,
    }
    quiz["_id"] = cols.quizzes.insert_one(quiz).inserted_id

    try:
        cols.courses.update_one({"_id": course["_id"]}, {"$addToSet": {"quiz_ids": quiz["_id"]}})
    except PyMongoError:
        logger.exception("Linking quiz %s to course %s failed, removing quiz", quiz["_id"], course["_id"])
        cols.quizzes.delete_one({"_id": quiz["_id"]})
        raise

    logger.info("Trainer %s created quiz %s in course %s (%d questions)",
                caller.id, quiz["_id"], course["_id"], len(questions))
    return serialize_quiz(quiz)


def get_quiz(cols, caller, quiz_id):
    quiz, _ = load_owned_quiz(cols, caller, quiz_id, "Not authorized to view this quiz")
    return serialize_quiz(quiz)


def update_quiz(cols, caller, quiz_id, data):
    """Replaces the title and the whole question list."""
    quiz, _ = load_owned_quiz(cols, caller, quiz_id, "Not authorized to update this quiz")

    title = clean_string(data.get("title"))
    if not title:
        raise ValidationFailed("Quiz title is required")
    changes = {
        "title": title,
        "questions": validate_questions(data.get("questions", [])),
        "updated_at": datetime.utcnow(),
    }
    cols.quizzes.update_one({"_id": quiz["_id"]}, {"$set": changes})
    quiz.update(changes)
    logger.info("Trainer %s updated quiz %s", caller.id, quiz["_id"])
    return serialize_quiz(quiz)


def delete_quiz(cols, caller, quiz_id):
    """Unlinks the quiz from its course, then deletes its attempts and the quiz itself."""
    quiz, course = load_owned_quiz(cols, caller, quiz_id, "Not authorized to delete this quiz")

    cols.courses.update_one({"_id": course["_id"]}, {"$pull": {"quiz_ids": quiz["_id"]}})
    attempts = cols.quiz_attempts.delete_many({"quiz_id": quiz["_id"]})
    cols.quizzes.delete_one({"_id": quiz["_id"]})

    logger.info("Trainer %s deleted quiz %s (%d attempts)",
                caller.id, quiz["_id"], attempts.deleted_count)
    return {"message": "Quiz removed"}


def quiz_results(cols, caller, quiz_id):
    quiz, _ = load_owned_quiz(cols, caller, quiz_id, "Not authorized to view these results")

    attempts = list(cols.quiz_attempts.find({"quiz_id": quiz["_id"]}).sort("created_at", 1))
    students = {
        u["_id"]: u
        for u in cols.users.find(
            {"_id": {"$in": [a["student_id"] for a in attempts]}}, {"name": 1, "email": 1}
        )
    }
    return [serialize_attempt(a, student=students.get(a["student_id"])) for a in attempts]


# --- STUDENT: TAKE, SUBMIT, REVIEW ---

def take_quiz(cols, caller, quiz_id):
    """The quiz as served for taking: every question's correct option is stripped."""
    require_role(caller, Role.STUDENT)
    quiz = load_quiz(cols, quiz_id)
    student_oid = parse_object_id(caller.id, "user ID")

    data = serialize_quiz(quiz, redact=True)
    data["submitted"] = find_attempt(cols, quiz["_id"], student_oid) is not None
    return data


def submit_quiz(cols, caller, quiz_id, data):
    """
    Scores and stores the caller's single attempt on a quiz.

    An existing attempt is rejected before any scoring work. Two concurrent
    submissions can both pass that check; the unique (quiz_id, student_id)
    index then lets exactly one insert through.
    """
    require_role(caller, Role.STUDENT)
    quiz_oid = parse_object_id(quiz_id, "quiz ID")
    student_oid = parse_object_id(caller.id, "user ID")

    if find_attempt(cols, quiz_oid, student_oid):
        raise Conflict(ALREADY_SUBMITTED)

    quiz = require_found(cols.quizzes.find_one({"_id": quiz_oid}), QUIZ_NOT_FOUND)
    answers = clean_answers(data.get("answers", []))
    questions = quiz.get("questions", [])
    score = score_answers(questions, answers)

    try:
        cols.quiz_attempts.insert_one({
            "quiz_id": quiz_oid,
            "student_id": student_oid,
            "answers": answers,
            "score": score,
            "created_at": datetime.utcnow(),
        })
    except DuplicateKeyError:
        raise Conflict(ALREADY_SUBMITTED)

    logger.info("Student %s submitted quiz %s: %d/%d", caller.id, quiz_oid, score, len(questions))
    return {"score": score, "total_questions": len(questions)}


def my_results(cols, caller):
    """The caller's attempts, newest first, with quiz title and full questions for review."""
    require_role(caller, Role.STUDENT)
    student_oid = parse_object_id(caller.id, "user ID")

    attempts = list(cols.quiz_attempts.find({"student_id": student_oid}).sort("created_at", DESCENDING))
    quizzes = {
        q["_id"]: q
        for q in cols.quizzes.find(
            {"_id": {"$in": [a["quiz_id"] for a in attempts]}}, {"title": 1, "questions": 1}
        )
    }
    return [serialize_attempt(a, quiz=quizzes.get(a["quiz_id"])) for a in attempts]
