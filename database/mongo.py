from flask import current_app
from pymongo import ASCENDING, DESCENDING, MongoClient
import config


class Collections:
    """Handles to every collection the API touches."""

    def __init__(self, db):
        self.db = db
        self.users = db["users"]                  # students, trainers and admins (role field)
        self.courses = db["courses"]              # owned by one trainer, enrolled student ids, quiz ids
        self.quizzes = db["quizzes"]              # questions with correct option, linked to a course
        self.quiz_attempts = db["quiz_attempts"]  # one per (quiz, student): answers and score
        self.settings = db["settings"]            # one-off flags, keyed by _id

    def ensure_indexes(self):
        self.users.create_index([("email", ASCENDING)], unique=True)
        self.courses.create_index([("trainer_id", ASCENDING)])
        self.quizzes.create_index([("course_id", ASCENDING)])
        self.quiz_attempts.create_index(
            [("quiz_id", ASCENDING), ("student_id", ASCENDING)], unique=True
        )
        self.quiz_attempts.create_index([("student_id", ASCENDING), ("created_at", DESCENDING)])


def connect(client=None, uri=None, db_name=None):
    if client is None:
        client = MongoClient(uri or config.MONGO_URI)
    collections = Collections(client[db_name or config.DB_NAME])
    collections.ensure_indexes()
    return collections


def init_app(app, client=None):
    app.extensions["mongo"] = connect(
        client=client,
        uri=app.config.get("MONGO_URI"),
        db_name=app.config.get("DB_NAME"),
    )
    return app.extensions["mongo"]


def get_collections():
    return current_app.extensions["mongo"]
