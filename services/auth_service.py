import logging
from datetime import datetime

from bson import ObjectId
from flask_jwt_extended import create_access_token
from pymongo.errors import DuplicateKeyError, PyMongoError
from werkzeug.security import check_password_hash, generate_password_hash

from utils.errors import Conflict, Unauthenticated
from utils.identity import Role
from utils.serializers import serialize_user
from utils.validators import normalize_email, raw_password, require_fields, validate_email

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
TRAINER_BOOTSTRAP = "trainer_bootstrap"


def issue_token(user):
    return create_access_token(
        identity=str(user["_id"]),
        additional_claims={"name": user.get("name"), "role": user["role"]},
    )


def insert_user(cols, name, email, password, role, taken_message=EMAIL_TAKEN):
    """Stores a new account. Email uniqueness is checked up front and again by the unique index."""
    if cols.users.find_one({"email": email}):
        raise Conflict(taken_message)

    user = {
        "name": name,
        "email": email,
        "password": generate_password_hash(password),
        "role": role.value,
        "created_at": datetime.utcnow(),
    }
    try:
        result = cols.users.insert_one(user)
    except DuplicateKeyError:
        raise Conflict(taken_message)

    user["_id"] = result.inserted_id
    logger.info("Created %s account %s", role.value, result.inserted_id)
    return user


def trainer_exists(cols):
    return cols.users.find_one({"role": Role.TRAINER.value}, {"_id": 1}) is not None


def trainer_assigned(cols):
    """True once self-registration has handed out the trainer role, or any trainer account exists."""
    return trainer_exists(cols) or cols.settings.find_one({"_id": TRAINER_BOOTSTRAP}) is not None


def claim_trainer_bootstrap(cols):
    # The insert is the atomic step: only one registration can create this document
    try:
        cols.settings.insert_one({"_id": TRAINER_BOOTSTRAP, "claimed_at": datetime.utcnow()})
    except DuplicateKeyError:
        return False
    return True


def register(cols, data):
    """
    Self-registration. The first registrant becomes the trainer, everyone
    after that a student. The trainer slot is claimed once and never handed
    out again, even if that trainer is later deleted.
    """
    name, email, _ = require_fields(data, "name", "email", "password")
    email = validate_email(normalize_email(email))
    password = raw_password(data)
    if cols.users.find_one({"email": email}):
        raise Conflict(EMAIL_TAKEN)

    claimed = not trainer_exists(cols) and claim_trainer_bootstrap(cols)
    role = Role.TRAINER if claimed else Role.STUDENT
    try:
        user = insert_user(cols, name, email, password, role)
    except (Conflict, PyMongoError):
        if claimed:
            # No trainer account was stored, so the slot goes back
            cols.settings.delete_one({"_id": TRAINER_BOOTSTRAP})
            logger.warning("Released trainer bootstrap after failed registration of %s", email)
        raise
    return {"token": issue_token(user), "role": user["role"]}


def login(cols, data):
    email = normalize_email(data.get("email"))
    password = raw_password(data)

    user = cols.users.find_one({"email": email}) if email else None
    # Same answer for unknown email and wrong password
    if not user or not check_password_hash(user["password"], password):
        logger.warning("Failed login for %s", email or "<blank>")
        raise Unauthenticated("Invalid credentials")

    return {"token": issue_token(user), "role": user["role"]}


def get_me(cols, caller):
    user = cols.users.find_one({"_id": ObjectId(caller.id)})
    if user is None:
        raise Unauthenticated("Token is not valid")
    return serialize_user(user)
