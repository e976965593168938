import re

from bson import ObjectId
from bson.errors import InvalidId

from utils.errors import ValidationFailed

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_object_id(value, label="ID"):
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationFailed(f"Invalid {label} format")


def clean_string(value):
    if value is None:
        return ""
    return str(value).strip()


def normalize_email(value):
    return clean_string(value).lower()


def require_fields(data, *names, message="All fields are required"):
    values = [clean_string(data.get(name)) for name in names]
    if not all(values):
        raise ValidationFailed(message)
    return values


def validate_email(email):
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailed("Please provide a valid email")
    return email


def validate_questions(questions):
    """
    Checks a submitted question list and returns it in stored form.
    Every question needs text, at least one option, and a correct option
    that is one of those options. A valid question_id is kept so attempts
    taken before an edit still line up with the question.
    """
    if not isinstance(questions, list):
        raise ValidationFailed("Questions must be a list")

    cleaned = []
    for idx, q in enumerate(questions, start=1):
        if not isinstance(q, dict):
            raise ValidationFailed(f"Question {idx} is malformed")

        text = clean_string(q.get("text"))
        if not text:
            raise ValidationFailed(f"Question {idx} needs text")

        options = q.get("options")
        if not isinstance(options, list) or not options:
            raise ValidationFailed(f"Question {idx} needs at least one option")
        options = [str(opt) for opt in options]

        correct = q.get("correct_option")
        if correct is None or str(correct) not in options:
            raise ValidationFailed(f"Question {idx}: correct option must be one of its options")

        question_id = q.get("question_id")
        if not question_id or not ObjectId.is_valid(str(question_id)):
            question_id = ObjectId()

        cleaned.append({
            "question_id": str(question_id),
            "text": text,
            "options": options,
            "correct_option": str(correct),
        })
    return cleaned


def clean_answers(answers):
    if not isinstance(answers, list):
        raise ValidationFailed("Answers must be a list")

    cleaned = []
    for a in answers:
        if not isinstance(a, dict) or a.get("question_id") is None:
            continue
        selected = a.get("selected_option")
        cleaned.append({
            "question_id": str(a["question_id"]),
            "selected_option": None if selected is None else str(selected),
        })
    return cleaned


def json_object(payload):
    """A request body parsed by get_json(silent=True); anything but an object is rejected."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return payload


def raw_password(data):
    # Hashed and compared exactly as sent, never stripped
    value = data.get("password")
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
