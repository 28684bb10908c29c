"""Shared fixtures for scrobbler tests."""

from __future__ import annotations

from collections.abc import Mapping

import pytest

from lastfm_scrobbler.exceptions import TransportError
from lastfm_scrobbler.models import (
    BatchScrobbleResponse,
    CorrectedValue,
    NowPlayingResponse,
    ScrobbleResponse,
    ScrobbleResult,
    SessionResponse,
)


def make_result(params: Mapping[str, str]) -> ScrobbleResult:
    return ScrobbleResult(
        artist=CorrectedValue(params.get("artist", "")),
        track=CorrectedValue(params.get("track", "")),
        album=CorrectedValue(params.get("album", "")),
        album_artist=CorrectedValue(params.get("albumArtist", "")),
        timestamp=int(params.get("timestamp", "0")),
    )


class StubClient:
    """In-memory API client recording every call."""

    def __init__(self, session_key: str = "K") -> None:
        self.returned_key = session_key
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.fail_with: TransportError | None = None
        self.session_key: str | None = None
        self.username: str | None = None
        self.password: str | None = None
        self.token: str | None = None

    def _record(self, name: str, params: Mapping[str, str] | None = None) -> None:
        self.calls.append((name, dict(params or {})))
        if self.fail_with is not None:
            raise self.fail_with

    def set_user_credentials(self, username: str, password: str) -> None:
        self.username = username
        self.password = password

    def set_user_token(self, token: str) -> None:
        self.token = token

    def set_session_key(self, session_key: str) -> None:
        self.session_key = session_key

    def authenticate_with_password(self) -> SessionResponse:
        self._record("authenticate_with_password")
        return SessionResponse(key=self.returned_key, name=self.username or "")

    def authenticate_with_token(self) -> SessionResponse:
        self._record("authenticate_with_token")
        return SessionResponse(key=self.returned_key, name="token user")

    def send_now_playing(self, params: Mapping[str, str]) -> NowPlayingResponse:
        self._record("send_now_playing", params)
        return NowPlayingResponse(
            artist=CorrectedValue(params["artist"]),
            track=CorrectedValue(params["track"]),
            album=CorrectedValue(params["album"]),
            album_artist=CorrectedValue(params.get("albumArtist", "")),
        )

    def send_scrobble(self, params: Mapping[str, str]) -> ScrobbleResponse:
        self._record("send_scrobble", params)
        return ScrobbleResponse(make_result(params))

    def send_batch_scrobbles(
        self, params: Mapping[str, str],
    ) -> BatchScrobbleResponse:
        self._record("send_batch_scrobbles", params)
        count = len({key.split("[", 1)[1] for key in params})
        return BatchScrobbleResponse(accepted=count, ignored=0)

    @property
    def network_calls(self) -> list[str]:
        return [name for name, _params in self.calls]

    @property
    def last_params(self) -> dict[str, str]:
        return self.calls[-1][1]


@pytest.fixture
def client() -> StubClient:
    return StubClient()
