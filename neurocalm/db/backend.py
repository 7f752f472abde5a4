"""User directory abstraction with SQLite and in-memory implementations.

Directories are constructed explicitly (see ``create_directory``) and handed
to whoever needs them; nothing here is process-global.
"""

from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import Protocol, runtime_checkable

from loguru import logger

from neurocalm.db.connection import get_conn, init_db
from neurocalm.db.models import UserRecord, normalize_email
from neurocalm.errors import UserExistsError, UserNotFoundError


@runtime_checkable
class UserDirectory(Protocol):
    """Minimal contract for storing and fetching users."""

    def add(self, user: UserRecord) -> UserRecord: ...

    def get(self, user_id: str) -> UserRecord: ...

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def list(self) -> list[UserRecord]: ...

    def close(self) -> None: ...


class InMemoryUserDirectory:
    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}

    def add(self, user: UserRecord) -> UserRecord:
        user.email = normalize_email(user.email)
        if self.find_by_email(user.email) is not None:
            raise UserExistsError(f"A user with email {user.email} already exists.")
        self._users[user.id] = user
        return user

    def get(self, user_id: str) -> UserRecord:
        try:
            return self._users[user_id]
        except KeyError:
            raise UserNotFoundError(user_id) from None

    def find_by_email(self, email: str) -> UserRecord | None:
        email = normalize_email(email)
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def list(self) -> list[UserRecord]:
        return sorted(self._users.values(), key=lambda u: u.created_at)

    def close(self) -> None:
        pass


class SQLiteUserDirectory:
    """Thin adapter over a single SQLite connection."""

    def __init__(self, db_path: Path | str) -> None:
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._conn = get_conn(db_path)
        init_db(self._conn)

    def add(self, user: UserRecord) -> UserRecord:
        user.email = normalize_email(user.email)
        with self._lock:
            if self._find_by_email(user.email) is not None:
                raise UserExistsError(f"A user with email {user.email} already exists.")
            with self._conn:
                self._conn.execute(
                    "INSERT INTO users (id, name, email, role, created_at) VALUES (?, ?, ?, ?, ?)",
                    (user.id, user.name, user.email, user.role, float(user.created_at)),
                )
        logger.info("Registered {} user {}", user.role, user.id)
        return user

    def get(self, user_id: str) -> UserRecord:
        with self._lock:
            row = self._conn.execute(
                "SELECT id, name, email, role, created_at FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            raise UserNotFoundError(user_id)
        return UserRecord.from_row(row)

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            return self._find_by_email(normalize_email(email))

    def _find_by_email(self, email: str) -> UserRecord | None:
        row = self._conn.execute(
            "SELECT id, name, email, role, created_at FROM users WHERE email = ?",
            (email,),
        ).fetchone()
        return UserRecord.from_row(row) if row else None

    def list(self) -> list[UserRecord]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, name, email, role, created_at FROM users ORDER BY created_at"
            ).fetchall()
        return [UserRecord.from_row(row) for row in rows]

    def close(self) -> None:
        self._conn.close()


def create_directory(backend: str = "sqlite", db_path: Path | str | None = None) -> UserDirectory:
    name = (backend or "").lower()
    if name == "sqlite":
        return SQLiteUserDirectory(db_path or ":memory:")
    if name == "memory":
        return InMemoryUserDirectory()
    raise ValueError(f"Unsupported user directory backend: {backend}")


__all__ = [
    "InMemoryUserDirectory",
    "SQLiteUserDirectory",
    "UserDirectory",
    "create_directory",
]
