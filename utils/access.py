"""Authorization gate.

Every check here is a pure decision over the caller and an already-loaded
document. Lookups happen first so an absent resource is reported as not found
and never leaks who owns it.
"""
import logging

from utils.errors import ForbiddenOwnership, ForbiddenRole, NotFound
from utils.identity import Role

logger = logging.getLogger(__name__)

ROLE_DENIED_MESSAGES = {
    Role.STUDENT: "Access denied. Not authorized as a student.",
    Role.TRAINER: "Access denied. Not authorized as a trainer.",
    Role.ADMIN: "Access denied. Not authorized as an admin.",
}


def require_role(caller, role):
    if caller.role is not role:
        logger.warning("%r denied: %s role required", caller, role.value)
        raise ForbiddenRole(ROLE_DENIED_MESSAGES[role])


def require_found(doc, message):
    if doc is None:
        raise NotFound(message)
    return doc


def is_course_owner(caller, course):
    return str(course["trainer_id"]) == caller.id


def require_course_owner(caller, course, message="Not authorized"):
    if not is_course_owner(caller, course):
        logger.warning("%r denied: does not own course %s", caller, course["_id"])
        raise ForbiddenOwnership(message)
    return course
