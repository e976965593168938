from datetime import datetime

import mongomock
import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from database.mongo import get_collections

TEST_SECRET = "learnix-test-secret-key-that-is-long-enough"


@pytest.fixture
def app():
    app = create_app(
        {"TESTING": True, "JWT_SECRET_KEY": TEST_SECRET, "DB_NAME": "learnix_test"},
        mongo_client=mongomock.MongoClient(),
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def cols(app):
    with app.app_context():
        yield get_collections()


def auth(token):
    return {"x-auth-token": token}


def register(client, name, email, password="password123"):
    res = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.get_json()
    return res.get_json()["token"]


def login(client, email, password="password123"):
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.get_json()
    return res.get_json()["token"]


def create_admin(cols, email="admin@learnix.com", password="adminpass"):
    cols.users.insert_one({
        "name": "Admin User",
        "email": email,
        "password": generate_password_hash(password),
        "role": "admin",
        "created_at": datetime.utcnow(),
    })


@pytest.fixture
def trainer_token(client):
    return register(client, "Test Trainer", "trainer@test.com")


@pytest.fixture
def student_token(client, trainer_token):
    return register(client, "Test Student", "student@test.com")


@pytest.fixture
def admin_token(client, cols):
    create_admin(cols)
    return login(client, "admin@learnix.com", "adminpass")


@pytest.fixture
def student_id(cols, student_token):
    return str(cols.users.find_one({"email": "student@test.com"})["_id"])


@pytest.fixture
def course_id(client, trainer_token):
    res = client.post(
        "/api/courses",
        json={"title": "Test Course", "description": "A course for testing"},
        headers=auth(trainer_token),
    )
    assert res.status_code == 201
    return res.get_json()["id"]


SAMPLE_QUESTIONS = [
    {"text": "What is 2 + 2?", "options": ["3", "4", "5"], "correct_option": "4"},
    {"text": "Capital of France?", "options": ["Paris", "Rome"], "correct_option": "Paris"},
    {"text": "Is water wet?", "options": ["Yes", "No"], "correct_option": "Yes"},
]


@pytest.fixture
def quiz(client, trainer_token, course_id):
    res = client.post(
        "/api/quizzes",
        json={"title": "Math Basics Quiz", "course_id": course_id, "questions": SAMPLE_QUESTIONS},
        headers=auth(trainer_token),
    )
    assert res.status_code == 201, res.get_json()
    return res.get_json()
