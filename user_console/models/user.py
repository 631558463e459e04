from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
AGE_MIN = 18
AGE_MAX = 120

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PASSWORD_CLASSES_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)", re.ASCII | re.DOTALL
)


@dataclass(frozen=True, slots=True)
class FieldRule:
    field: str
    message: str
    check: Callable[[Any], bool]
    # A failed required rule hides the remaining rules of the same field.
    required: bool = False


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


USER_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", "Name is required", _present, required=True),
    FieldRule(
        "name",
        f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
        lambda v: NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH,
    ),
    FieldRule("email", "Email is required", _present, required=True),
    FieldRule(
        "email",
        "Invalid email format",
        lambda v: _EMAIL_RE.match(v) is not None,
    ),
    FieldRule("password", "Password is required", _present, required=True),
    FieldRule(
        "password",
        f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
        lambda v: len(v) >= PASSWORD_MIN_LENGTH,
    ),
    FieldRule(
        "password",
        "Password must contain at least one uppercase letter, "
        "one lowercase letter and one digit",
        lambda v: _PASSWORD_CLASSES_RE.match(v) is not None,
    ),
    FieldRule(
        "age",
        f"Age must be between {AGE_MIN} and {AGE_MAX}",
        lambda v: isinstance(v, int) and AGE_MIN <= v <= AGE_MAX,
    ),
)


def validate_fields(obj: object, rules: tuple[FieldRule, ...] = USER_RULES) -> list[str]:
    """Run every rule against ``obj`` and collect the violation messages.

    Messages come back in rule-table order, which is field declaration
    order.  Nothing short-circuits across fields.
    """
    errors: list[str] = []
    missing: set[str] = set()
    for rule in rules:
        if rule.field in missing:
            continue
        if rule.check(getattr(obj, rule.field, None)):
            continue
        errors.append(rule.message)
        if rule.required:
            missing.add(rule.field)
    return errors


@dataclass(slots=True)
class User:
    name: str
    email: str
    password: str = field(repr=False)
    age: int
    id: int | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        # Once the manager has assigned an id the record is sealed.
        if getattr(self, "id", None) is not None:
            raise AttributeError(f"User {self.id} is immutable (tried to set {name!r})")
        object.__setattr__(self, name, value)

    def assign_id(self, user_id: int) -> None:
        if self.id is not None:
            raise AttributeError(f"User already has id {self.id}")
        self.id = user_id

    def validate(self) -> list[str]:
        return validate_fields(self)
