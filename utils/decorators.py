from functools import wraps

from flask_jwt_extended import get_current_user, jwt_required

from utils.identity import Caller


def current_caller():
    return Caller.from_user(get_current_user())


def login_required(fn):
    """
    Verifies the x-auth-token and passes the caller to the view as its first
    argument. Role and ownership checks are made by the service the view calls.
    """
    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):
        return fn(current_caller(), *args, **kwargs)
    return wrapper
