# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Exceptions raised by the Last.fm scrobbler."""

from __future__ import annotations


class ScrobblerError(Exception):
    """Base class for every error raised by this package."""


class InvalidScrobble(ScrobblerError, ValueError):
    """A scrobble record is missing a required field."""


class InvalidBatchSize(ScrobblerError, ValueError):
    """A scrobble batch holds more records than a single request accepts."""


class EmptyBatch(InvalidBatchSize):
    """A scrobble batch holds no records."""


class ClockError(ScrobblerError):
    """The system clock could not produce a Unix timestamp."""


class NotAuthenticated(ScrobblerError):
    """A submission was attempted before a session key was obtained."""


class TransportError(ScrobblerError):
    """The API client failed to complete a request.

    Args:
        message: Human readable description of the failure
        code: Last.fm error code, when the service returned one
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"
