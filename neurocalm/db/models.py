"""User directory records independent of SQLite plumbing."""

from __future__ import annotations

import sqlite3
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

Role = Literal["student", "admin"]


@dataclass
class UserRecord:
    name: str
    email: str
    role: str = "student"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "UserRecord":
        return cls(
            id=str(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            role=str(row["role"]),
            created_at=float(row["created_at"]),
        )


class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, description="Used as the unique login handle.")
    role: Role = Field("student", description="student | admin")


def normalize_email(email: str) -> str:
    return email.strip().lower()


__all__ = ["Role", "SignUpRequest", "UserRecord", "normalize_email"]
