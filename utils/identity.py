from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    TRAINER = "trainer"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None


class Caller:
    """The authenticated user a request acts on behalf of."""

    __slots__ = ("id", "name", "role")

    def __init__(self, id, name, role):
        self.id = id
        self.name = name
        self.role = role

    @classmethod
    def from_user(cls, user):
        return cls(str(user["_id"]), user.get("name"), Role(user["role"]))

    def __repr__(self):
        return f"Caller(id={self.id!r}, role={self.role.value!r})"
