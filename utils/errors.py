class ApiError(Exception):
    """Base for every failure reported to the client as ``{"message", "error"}``."""

    status_code = 500
    code = "internal"
    default_message = "Server Error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"message": self.message, "error": self.code}


class Unauthenticated(ApiError):
    status_code = 401
    code = "unauthenticated"
    default_message = "No token, authorization denied"


class ForbiddenRole(ApiError):
    status_code = 403
    code = "forbidden_role"
    default_message = "Access denied"


class ForbiddenOwnership(ApiError):
    status_code = 403
    code = "forbidden_ownership"
    default_message = "Not authorized"


class NotFound(ApiError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    code = "conflict"
    default_message = "Already exists"


class ValidationFailed(ApiError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"
