from __future__ import annotations

from typing import Protocol

from user_console.models.user import User


class UserRepo(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def add(self, user: User) -> None: ...
    def list_all(self) -> list[User]: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._users: list[User] = []
        self._by_email: dict[str, User] = {}

    def get_by_email(self, email: str) -> User | None:
        # Exact, case-sensitive match.
        return self._by_email.get(email)

    def add(self, user: User) -> None:
        if user.id is None:
            raise ValueError("user must have an id before it is stored")
        if user.email in self._by_email:
            raise ValueError("email already exists")
        self._users.append(user)
        self._by_email[user.email] = user

    def list_all(self) -> list[User]:
        return list(self._users)
