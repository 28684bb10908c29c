# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Session handling and scrobble submission for Last.fm."""

from __future__ import annotations

import enum
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Final

from .client import ApiClient, PylastClient
from .config import get_config
from .exceptions import ClockError, EmptyBatch, InvalidBatchSize, NotAuthenticated
from .utils import logger

if TYPE_CHECKING:
    from .models import (
        BatchScrobbleResponse,
        NowPlayingResponse,
        Scrobble,
        ScrobbleBatch,
        ScrobbleResponse,
        SessionResponse,
    )

# Last.fm accepts at most 50 scrobbles per track.scrobble request
MAX_BATCH_SIZE: Final[int] = 50


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class Scrobbler:
    """Submits song-play tracking information to Last.fm.

    The scrobbler owns the session state and builds request parameters. All
    network traffic goes through ``client``.

    Args:
        client: API client used for every request
        clock: Callable returning the current Unix time in seconds
    """

    def __init__(
        self,
        client: ApiClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.clock = clock
        self._session_key: str | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_credentials(cls, api_key: str, api_secret: str) -> Scrobbler:
        """Create a scrobbler talking to Last.fm through pylast."""
        return cls(PylastClient(api_key, api_secret))

    @classmethod
    def from_env(cls) -> Scrobbler:
        """Create a scrobbler from ``LASTFM_*`` environment variables.

        A ``LASTFM_SESSION_KEY`` is restored as the current session.

        Raises:
            ValueError: If the API key or secret is missing
        """
        config = get_config()
        scrobbler = cls.from_credentials(
            config["LASTFM_API_KEY"] or "",
            config["LASTFM_API_SECRET"] or "",
        )
        if session_key := config["LASTFM_SESSION_KEY"]:
            scrobbler.authenticate_with_session_key(session_key)
        return scrobbler

    @property
    def state(self) -> SessionState:
        with self._lock:
            if self._session_key is None:
                return SessionState.UNAUTHENTICATED
            return SessionState.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def session_key(self) -> str | None:
        """Return the key of the current session, or None if not authenticated.

        A stored key can later be passed to :meth:`authenticate_with_session_key`.
        """
        with self._lock:
            return self._session_key

    def authenticate_with_password(
        self, username: str, password: str,
    ) -> SessionResponse:
        """Obtain a session key with a username and password.

        Args:
            username: Last.fm username
            password: Last.fm password

        Returns:
            The session returned by Last.fm

        Raises:
            TransportError: If the request fails; the session is left unchanged
        """
        with self._lock:
            self.client.set_user_credentials(username, password)
            session = self.client.authenticate_with_password()
            self._store_session_key(session.key)
        logger.debug("Authenticated as %s with password", session.name)
        return session

    def authenticate_with_token(self, token: str) -> SessionResponse:
        """Obtain a session key with a pre-issued auth token.

        Raises:
            TransportError: If the request fails; the session is left unchanged
        """
        with self._lock:
            self.client.set_user_token(token)
            session = self.client.authenticate_with_token()
            self._store_session_key(session.key)
        logger.debug("Authenticated as %s with token", session.name)
        return session

    def authenticate_with_session_key(self, session_key: str) -> None:
        """Restore a previously obtained session without a network call."""
        with self._lock:
            self._store_session_key(session_key)

    def _store_session_key(self, session_key: str) -> None:
        # Caller holds the lock
        self._session_key = session_key
        self.client.set_session_key(session_key)

    def _require_session(self) -> None:
        if self.session_key() is None:
            msg = "Not authenticated; obtain a session key first"
            raise NotAuthenticated(msg)

    def _current_timestamp(self) -> str:
        # int() rejects nan and infinity as well as unreadable clocks
        try:
            seconds = int(self.clock())
        except (OSError, OverflowError, ValueError) as exc:
            msg = f"Could not read the system clock: {exc}"
            raise ClockError(msg) from exc
        if seconds < 0:
            msg = f"System clock is before the Unix epoch: {seconds}"
            raise ClockError(msg)
        return str(seconds)

    def _scrobble_params(self, scrobble: Scrobble) -> dict[str, str]:
        params = scrobble.as_map()
        if "timestamp" not in params:
            params["timestamp"] = self._current_timestamp()
        return params

    def now_playing(self, scrobble: Scrobble) -> NowPlayingResponse:
        """Register the track as the authenticated user's "now playing" track.

        Raises:
            NotAuthenticated: If no session key is set
            TransportError: If the request fails
        """
        self._require_session()
        params = scrobble.as_map()
        logger.debug("Updating now playing: %s - %s", scrobble.artist, scrobble.track)
        return self.client.send_now_playing(params)

    def scrobble(self, scrobble: Scrobble) -> ScrobbleResponse:
        """Register a play of the track.

        The play is recorded at the scrobble's own timestamp, or at the current
        time when it has none.

        Raises:
            NotAuthenticated: If no session key is set
            ClockError: If the current time is needed but cannot be read
            TransportError: If the request fails
        """
        self._require_session()
        params = self._scrobble_params(scrobble)
        logger.debug("Scrobbling: %s - %s", scrobble.artist, scrobble.track)
        return self.client.send_scrobble(params)

    def scrobble_batch(self, batch: ScrobbleBatch) -> BatchScrobbleResponse:
        """Register plays of up to 50 tracks in a single request.

        Each record's parameters get an ``[index]`` suffix matching its
        position in the batch, e.g. ``artist[0]``, ``artist[1]``.

        Raises:
            InvalidBatchSize: If the batch holds more than 50 scrobbles
            EmptyBatch: If the batch is empty
            NotAuthenticated: If no session key is set
            ClockError: If the current time is needed but cannot be read
            TransportError: If the request fails
        """
        batch_count = len(batch)
        if batch_count > MAX_BATCH_SIZE:
            msg = (
                f"Scrobble batch too large ({batch_count}); "
                f"must be {MAX_BATCH_SIZE} or fewer scrobbles"
            )
            raise InvalidBatchSize(msg)
        if batch_count == 0:
            msg = "Scrobble batch is empty"
            raise EmptyBatch(msg)
        self._require_session()

        params: dict[str, str] = {}
        for index, scrobble in enumerate(batch):
            for key, value in self._scrobble_params(scrobble).items():
                params[f"{key}[{index}]"] = value

        logger.debug("Scrobbling batch of %d tracks", batch_count)
        return self.client.send_batch_scrobbles(params)
