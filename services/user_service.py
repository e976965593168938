import logging

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError
from werkzeug.security import generate_password_hash

import config
from services.auth_service import EMAIL_TAKEN, insert_user
from utils.access import require_found, require_role
from utils.errors import Conflict, ValidationFailed
from utils.identity import Role
from utils.serializers import serialize_user
from utils.validators import (
    clean_string, normalize_email, parse_object_id, raw_password, require_fields,
    validate_email,
)

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


# ---------------- TRAINER: STUDENT ACCOUNTS ----------------

def list_students(cols, caller):
    """Every student account, not only those enrolled in the caller's courses."""
    require_role(caller, Role.TRAINER)
    students = cols.users.find({"role": Role.STUDENT.value}).sort("created_at", DESCENDING)
    return [serialize_user(s) for s in students]


def create_student(cols, caller, data):
    require_role(caller, Role.TRAINER)
    name, email, _ = require_fields(data, "name", "email", "password")
    email = validate_email(normalize_email(email))
    password = raw_password(data)
    user = insert_user(
        cols, name, email, password, Role.STUDENT,
        taken_message="Student with this email already exists",
    )
    return serialize_user(user)


# ---------------- ADMIN: ALL ACCOUNTS ----------------

def list_users(cols, caller):
    require_role(caller, Role.ADMIN)
    users = cols.users.find({"role": {"$ne": Role.ADMIN.value}}).sort("created_at", DESCENDING)
    return [serialize_user(u) for u in users]


def create_user(cols, caller, data):
    require_role(caller, Role.ADMIN)
    name, email, _ = require_fields(data, "name", "email", "password")
    email = validate_email(normalize_email(email))
    password = raw_password(data)
    role = Role.parse(clean_string(data.get("role")) or Role.STUDENT.value)
    if role is None:
        raise ValidationFailed("Role must be student, trainer or admin")

    user = insert_user(cols, name, email, password, role)
    logger.info("Admin %s created user %s", caller.id, user["_id"])
    return serialize_user(user)


def update_user(cols, caller, user_id, data):
    """Applies whichever of name, email and role are supplied."""
    require_role(caller, Role.ADMIN)
    oid = parse_object_id(user_id, "user ID")
    user = require_found(cols.users.find_one({"_id": oid}), USER_NOT_FOUND)

    changes = {}
    name = clean_string(data.get("name"))
    if name:
        changes["name"] = name

    email = normalize_email(data.get("email"))
    if email and email != user["email"]:
        validate_email(email)
        if cols.users.find_one({"email": email, "_id": {"$ne": oid}}):
            raise Conflict(EMAIL_TAKEN)
        changes["email"] = email

    role_value = clean_string(data.get("role"))
    if role_value:
        role = Role.parse(role_value)
        if role is None:
            raise ValidationFailed("Role must be student, trainer or admin")
        changes["role"] = role.value

    if changes:
        try:
            cols.users.update_one({"_id": oid}, {"$set": changes})
        except DuplicateKeyError:
            raise Conflict(EMAIL_TAKEN)
        user.update(changes)
        logger.info("Admin %s updated user %s: %s", caller.id, user_id, sorted(changes))
    return serialize_user(user)


def delete_user(cols, caller, user_id):
    require_role(caller, Role.ADMIN)
    oid = parse_object_id(user_id, "user ID")
    require_found(cols.users.find_one({"_id": oid}, {"_id": 1}), USER_NOT_FOUND)

    cols.users.delete_one({"_id": oid})
    logger.info("Admin %s deleted user %s", caller.id, user_id)
    return {"message": "User removed successfully"}


def change_password(cols, caller, user_id, data):
    require_role(caller, Role.ADMIN)
    password = raw_password(data)
    if len(password) < config.MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters long"
        )

    oid = parse_object_id(user_id, "user ID")
    require_found(cols.users.find_one({"_id": oid}, {"_id": 1}), USER_NOT_FOUND)

    cols.users.update_one({"_id": oid}, {"$set": {"password": generate_password_hash(password)}})
    logger.info("Admin %s reset password of user %s", caller.id, user_id)
    return {"message": "Password updated successfully"}
