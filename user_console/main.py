"""Console entry point.

RUN:  user-console        (or: python -m user_console.main)

Adds a fixed batch of demo users, lists what was stored, then asks for
one more user on stdin.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from pydantic import BaseModel, ValidationError, field_validator

from user_console.core.config import load_settings
from user_console.core.logging import setup_logging
from user_console.models.user import User
from user_console.services.user_manager import AddResult, Printer, UserManager

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]

# Optional sign and ASCII digits, surrounding whitespace allowed.
_INTEGER_RE = re.compile(r"^\s*[+-]?[0-9]+\s*\Z")


class ManualEntryIn(BaseModel):
    name: str
    email: str
    password: str
    age: int

    @field_validator("age", mode="before")
    @classmethod
    def _plain_integer(cls, value: object) -> object:
        # Reject what lax int parsing would accept: "25.0", "2_5".
        if isinstance(value, str):
            if not _INTEGER_RE.match(value):
                raise ValueError("age must be a whole number")
            return int(value)
        return value


def demo_users() -> list[User]:
    # Fresh instances every call: the manager seals users it stores.
    return [
        User(name="Иван Иванов", email="ivan@example.com", password="Password123", age=25),
        User(name="Петр Петров", email="неправильный-email", password="pass", age=17),
        User(name="А", email="short@example.com", password="123", age=150),
        User(name="Мария Сидорова", email="maria@example.com", password="SecurePass456", age=30),
        User(name="Дубликат", email="ivan@example.com", password="AnotherPass789", age=35),
    ]


def run_batch(manager: UserManager, users: Iterable[User]) -> list[AddResult]:
    # Unexpected errors from add_user are not caught here; they end the batch.
    return [manager.add_user(user) for user in users]


def prompt_manual_user(
    manager: UserManager, *, read: Reader | None = None, out: Printer = print
) -> AddResult | None:
    if read is None:
        read = input
    out("\n=== MANUAL USER ENTRY ===")
    try:
        raw = {
            "name": read("Enter name: "),
            "email": read("Enter email: "),
            "password": read("Enter password: "),
            "age": read("Enter age: "),
        }
    except EOFError:
        out("❌ Input ended before all fields were entered")
        return None

    try:
        entry = ManualEntryIn.model_validate(raw)
    except ValidationError as exc:
        logger.info("Manual entry rejected: %d parse error(s)", exc.error_count())
        out("❌ Error: age must be a number!")
        return None

    user = User(
        name=entry.name,
        email=entry.email,
        password=entry.password,
        age=entry.age,
    )
    return manager.add_user(user)


def run(
    manager: UserManager, *, read: Reader | None = None, out: Printer = print
) -> None:
    out("=== USER CONSOLE APPLICATION ===")
    run_batch(manager, demo_users())
    manager.display_all_users()
    prompt_manual_user(manager, read=read, out=out)
    out("\n=== APPLICATION FINISHED ===")


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.debug("Error log path=%s", settings.error_log_path)

    manager = UserManager.from_settings(settings)
    try:
        run(manager)
    except Exception:
        logger.exception("User console aborted")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
