# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Last.fm scrobbling client package."""

from .client import ApiClient, PylastClient
from .exceptions import (
    ClockError,
    EmptyBatch,
    InvalidBatchSize,
    InvalidScrobble,
    NotAuthenticated,
    ScrobblerError,
    TransportError,
)
from .models import (
    BatchScrobbleResponse,
    CorrectedValue,
    NowPlayingResponse,
    Scrobble,
    ScrobbleBatch,
    ScrobbleResponse,
    ScrobbleResult,
    SessionResponse,
)
from .scrobbler import MAX_BATCH_SIZE, Scrobbler, SessionState

__version__ = "0.1.0"
__all__ = [
    "MAX_BATCH_SIZE",
    "ApiClient",
    "BatchScrobbleResponse",
    "ClockError",
    "CorrectedValue",
    "EmptyBatch",
    "InvalidBatchSize",
    "InvalidScrobble",
    "NotAuthenticated",
    "NowPlayingResponse",
    "PylastClient",
    "Scrobble",
    "ScrobbleBatch",
    "ScrobbleResponse",
    "ScrobbleResult",
    "Scrobbler",
    "ScrobblerError",
    "SessionResponse",
    "SessionState",
    "TransportError",
]
