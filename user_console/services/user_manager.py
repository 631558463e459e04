"""Validate, deduplicate and store users in memory.

An add attempt walks these states, and any step may end it early:

    Validating -> Checking uniqueness -> Assigning id -> Stored -> Persisting

Failures are raised internally as UserManagerError subclasses and turned
into an AddResult at the add_user() boundary.  Anything else is written
to the error file and re-raised.  The "finished" notice is printed on
every path.
"""

from __future__ import annotations

import enum
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from user_console.core.config import DEFAULT_SAVE_FAILURE_RATE, Settings
from user_console.core.error_log import ErrorLog
from user_console.models.user import User
from user_console.repos.user_repo import InMemoryUserRepo, UserRepo

logger = logging.getLogger(__name__)

Printer = Callable[[str], None]

OPERATION_FINISHED = "User add operation finished"


class UserManagerError(Exception):
    kind = "UserManagerError"


class UserValidationError(UserManagerError):
    kind = "ValidationError"

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("User data failed validation")


class DuplicateEmailError(UserManagerError):
    kind = "DuplicateEmailError"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User with email {email} already exists")


class PersistenceError(UserManagerError):
    kind = "PersistenceError"

    def __init__(self, message: str = "Failed to save to the database. Connection lost.") -> None:
        super().__init__(message)


class AddOutcome(enum.Enum):
    PERSISTED = "persisted"
    VALIDATION_FAILED = "validation_failed"
    DUPLICATE_EMAIL = "duplicate_email"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass(frozen=True)
class AddResult:
    outcome: AddOutcome
    user: User
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is AddOutcome.PERSISTED

    @property
    def stored(self) -> bool:
        # A failed save leaves the record in memory.
        return self.outcome in (AddOutcome.PERSISTED, AddOutcome.PERSISTENCE_FAILED)


class UserManager:
    def __init__(
        self,
        *,
        error_log: ErrorLog,
        repo: UserRepo | None = None,
        save_failure_rate: float = DEFAULT_SAVE_FAILURE_RATE,
        rng: random.Random | None = None,
        out: Printer = print,
    ) -> None:
        self._repo = repo if repo is not None else InMemoryUserRepo()
        self._error_log = error_log
        self._save_failure_rate = save_failure_rate
        self._rng = rng if rng is not None else random.Random()
        self._out = out
        self._next_id = 1

    @classmethod
    def from_settings(cls, settings: Settings, *, out: Printer = print) -> UserManager:
        return cls(
            error_log=ErrorLog(settings.error_log_path),
            save_failure_rate=settings.save_failure_rate,
            out=out,
        )

    def add_user(self, user: User) -> AddResult:
        try:
            self._out(f"\nAttempting to add user: {user.name}")

            errors = user.validate()
            if errors:
                self._out("Validation errors:")
                for error in errors:
                    self._out(f"  - {error}")
                raise UserValidationError(errors)

            if self._repo.get_by_email(user.email) is not None:
                raise DuplicateEmailError(user.email)

            user.assign_id(self._next_id)
            self._next_id += 1
            self._repo.add(user)
            self._out(f"✅ User {user.name} added with ID: {user.id}")
            logger.info(
                "Stored user id=%d", user.id, extra={"user_id": user.id, "email": user.email}
            )

            self._simulate_save(user)
            return AddResult(AddOutcome.PERSISTED, user)

        except UserValidationError as e:
            self._out(f"❌ Validation error: {e}")
            logger.warning(
                "Rejected invalid user: %s",
                "; ".join(e.errors),
                extra={"error_kind": e.kind},
            )
            self._log_error(e.kind, f"{e}: {'; '.join(e.errors)}")
            return AddResult(AddOutcome.VALIDATION_FAILED, user, tuple(e.errors))

        except DuplicateEmailError as e:
            self._out(f"❌ Duplicate email: {e}")
            logger.warning(
                "Rejected duplicate email=%s",
                e.email,
                extra={"email": e.email, "error_kind": e.kind},
            )
            self._log_error(e.kind, str(e))
            return AddResult(AddOutcome.DUPLICATE_EMAIL, user, (str(e),))

        except PersistenceError as e:
            # No rollback: the user stays listed even though the save failed.
            self._out(f"❌ Save error: {e}")
            logger.warning(
                "Simulated save failed for user id=%s",
                user.id,
                extra={"user_id": user.id, "error_kind": e.kind},
            )
            self._log_error(e.kind, str(e))
            return AddResult(AddOutcome.PERSISTENCE_FAILED, user, (str(e),))

        except Exception as e:
            self._out(f"❌ Unexpected error: {e}")
            logger.error(
                "Unexpected %s while adding user",
                type(e).__name__,
                extra={"error_kind": "UnexpectedError"},
            )
            self._log_error("UnexpectedError", f"{type(e).__name__} - {e}")
            raise

        finally:
            self._out(OPERATION_FINISHED)

    def list_users(self) -> list[User]:
        return self._repo.list_all()

    def display_all_users(self) -> None:
        self._out("\n=== ALL USERS ===")
        users = self.list_users()
        if not users:
            self._out("No users")
            return
        for u in users:
            self._out(f"ID: {u.id}, Name: {u.name}, Email: {u.email}, Age: {u.age}")

    def _simulate_save(self, user: User) -> None:
        if self._rng.random() < self._save_failure_rate:
            raise PersistenceError()
        logger.debug("Simulated save succeeded for user id=%s", user.id)

    def _log_error(self, kind: str, message: str) -> None:
        try:
            self._error_log.append(kind, message)
        except OSError as exc:
            self._out(f"⚠️ Could not write to the error log: {exc}")
            logger.warning("Error log write failed path=%s: %s", self._error_log.path, exc)
        else:
            self._out(f"📝 Error written to log file: {self._error_log.path}")
