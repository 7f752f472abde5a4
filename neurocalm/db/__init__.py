"""DB package exposing the injectable user directory."""

from .backend import InMemoryUserDirectory, SQLiteUserDirectory, UserDirectory, create_directory
from .models import SignUpRequest, UserRecord

__all__ = [
    "InMemoryUserDirectory",
    "SQLiteUserDirectory",
    "SignUpRequest",
    "UserDirectory",
    "UserRecord",
    "create_directory",
]
