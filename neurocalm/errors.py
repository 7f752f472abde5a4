"""Domain exceptions shared across the monitor, sources and API."""

from __future__ import annotations


class NeuroCalmError(Exception):
    """Base class for every error raised by neurocalm."""


class SourceError(NeuroCalmError):
    """A sample source reported a device or stream failure.

    ``fatal`` is False for failure keywords seen in the stream (the source keeps
    reading) and True when the stream itself broke or closed.
    """

    def __init__(self, message: str, *, fatal: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.fatal = fatal


class UnknownSourceError(NeuroCalmError, ValueError):
    pass


class NotConnectedError(NeuroCalmError):
    pass


class CatalogError(NeuroCalmError, ValueError):
    pass


class AudioUnavailableError(NeuroCalmError):
    pass


class UnknownTrackError(NeuroCalmError, KeyError):
    pass


class UserExistsError(NeuroCalmError):
    pass


class UserNotFoundError(NeuroCalmError, KeyError):
    pass


__all__ = [
    "AudioUnavailableError",
    "CatalogError",
    "NeuroCalmError",
    "NotConnectedError",
    "SourceError",
    "UnknownSourceError",
    "UnknownTrackError",
    "UserExistsError",
    "UserNotFoundError",
]
