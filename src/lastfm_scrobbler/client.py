# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""API client boundary used by the scrobbler, and its pylast implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Final, Protocol

import pylast  # type: ignore[import-untyped]

from .exceptions import TransportError
from .models import (
    BatchScrobbleResponse,
    CorrectedValue,
    NowPlayingResponse,
    ScrobbleResponse,
    ScrobbleResult,
    SessionResponse,
)
from .utils import logger

if TYPE_CHECKING:
    from xml.dom.minidom import Document, Element

PYLAST_ERRORS: Final[tuple[type[Exception], ...]] = (
    pylast.WSError,
    pylast.NetworkError,
    pylast.MalformedResponseError,
)


class ApiClient(Protocol):
    """Network collaborator the :class:`~lastfm_scrobbler.Scrobbler` talks to.

    Implementations own signing, transport and response parsing, and raise
    :class:`TransportError` for any failure.
    """

    def set_user_credentials(self, username: str, password: str) -> None: ...

    def set_user_token(self, token: str) -> None: ...

    def set_session_key(self, session_key: str) -> None: ...

    def authenticate_with_password(self) -> SessionResponse: ...

    def authenticate_with_token(self) -> SessionResponse: ...

    def send_now_playing(self, params: Mapping[str, str]) -> NowPlayingResponse: ...

    def send_scrobble(self, params: Mapping[str, str]) -> ScrobbleResponse: ...

    def send_batch_scrobbles(
        self, params: Mapping[str, str],
    ) -> BatchScrobbleResponse: ...


def _first(parent: Document | Element, tag: str) -> Element | None:
    nodes = parent.getElementsByTagName(tag)
    return nodes[0] if nodes else None


def _text(parent: Document | Element, tag: str) -> str:
    node = _first(parent, tag)
    if node is None or node.firstChild is None:
        return ""
    return str(node.firstChild.data)  # type: ignore[attr-defined]


def _corrected(parent: Element, tag: str) -> CorrectedValue:
    node = _first(parent, tag)
    if node is None:
        return CorrectedValue("")
    return CorrectedValue(_text(parent, tag), node.getAttribute("corrected") == "1")


def _ignored(parent: Element) -> tuple[int, str]:
    node = _first(parent, "ignoredMessage")
    if node is None:
        return 0, ""
    code = node.getAttribute("code")
    return int(code) if code.isdigit() else 0, _text(parent, "ignoredMessage")


def _int_attr(node: Element, name: str) -> int:
    value = node.getAttribute(name)
    return int(value) if value.isdigit() else 0


def parse_session(doc: Document) -> SessionResponse:
    """Parse an auth.getSession / auth.getMobileSession document.

    Raises:
        TransportError: If the document carries no session key
    """
    key = _text(doc, "key")
    if not key:
        msg = "Authentication response did not contain a session key"
        raise TransportError(msg)
    return SessionResponse(
        key=key,
        name=_text(doc, "name"),
        subscriber=_text(doc, "subscriber") == "1",
    )


def parse_now_playing(doc: Document) -> NowPlayingResponse:
    node = _first(doc, "nowplaying")
    if node is None:
        msg = "Now playing response did not contain a nowplaying element"
        raise TransportError(msg)
    code, message = _ignored(node)
    return NowPlayingResponse(
        artist=_corrected(node, "artist"),
        track=_corrected(node, "track"),
        album=_corrected(node, "album"),
        album_artist=_corrected(node, "albumArtist"),
        ignored_code=code,
        ignored_message=message,
    )


def _parse_scrobble_result(node: Element) -> ScrobbleResult:
    code, message = _ignored(node)
    timestamp = _text(node, "timestamp")
    return ScrobbleResult(
        artist=_corrected(node, "artist"),
        track=_corrected(node, "track"),
        album=_corrected(node, "album"),
        album_artist=_corrected(node, "albumArtist"),
        timestamp=int(timestamp) if timestamp.isdigit() else 0,
        ignored_code=code,
        ignored_message=message,
    )


def parse_scrobbles(doc: Document) -> BatchScrobbleResponse:
    """Parse a track.scrobble document into accepted/ignored counts and results.

    Raises:
        TransportError: If the document has no scrobbles element
    """
    node = _first(doc, "scrobbles")
    if node is None:
        msg = "Scrobble response did not contain a scrobbles element"
        raise TransportError(msg)
    results = tuple(
        _parse_scrobble_result(child)
        for child in node.getElementsByTagName("scrobble")
    )
    return BatchScrobbleResponse(
        accepted=_int_attr(node, "accepted"),
        ignored=_int_attr(node, "ignored"),
        results=results,
    )


class PylastClient:
    """:class:`ApiClient` backed by pylast's signed request machinery.

    Args:
        api_key: Last.fm API key
        api_secret: Last.fm API secret
        network: Preconfigured network, built from the key and secret if omitted
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        network: pylast.LastFMNetwork | None = None,
    ) -> None:
        self.network = network or pylast.LastFMNetwork(
            api_key=api_key,
            api_secret=api_secret,
        )
        self.username: str | None = None
        self.password: str | None = None
        self.token: str | None = None

    def set_user_credentials(self, username: str, password: str) -> None:
        self.username = username
        self.password = password

    def set_user_token(self, token: str) -> None:
        self.token = token

    def set_session_key(self, session_key: str) -> None:
        self.network.session_key = session_key

    def _execute(self, method: str, params: Mapping[str, str]) -> Document:
        """Sign and send a request, wrapping pylast failures.

        Raises:
            TransportError: If the request fails or Last.fm returns an error
        """
        logger.debug("Calling %s with %d parameters", method, len(params))
        try:
            request = pylast._Request(self.network, method, dict(params))  # noqa: SLF001
            request.sign_it()
            return request.execute()
        except pylast.WSError as exc:
            status = exc.get_id()
            code = int(status) if str(status).isdigit() else None
            raise TransportError(str(exc), code) from exc
        except PYLAST_ERRORS as exc:
            raise TransportError(str(exc)) from exc

    def authenticate_with_password(self) -> SessionResponse:
        if not self.username or not self.password:
            msg = "Username and password must be set before authenticating"
            raise TransportError(msg)
        doc = self._execute(
            "auth.getMobileSession",
            {"username": self.username, "password": self.password},
        )
        return parse_session(doc)

    def authenticate_with_token(self) -> SessionResponse:
        if not self.token:
            msg = "An auth token must be set before authenticating"
            raise TransportError(msg)
        doc = self._execute("auth.getSession", {"token": self.token})
        return parse_session(doc)

    def send_now_playing(self, params: Mapping[str, str]) -> NowPlayingResponse:
        return parse_now_playing(self._execute("track.updateNowPlaying", params))

    def send_scrobble(self, params: Mapping[str, str]) -> ScrobbleResponse:
        response = parse_scrobbles(self._execute("track.scrobble", params))
        if not response.results:
            msg = "Scrobble response did not contain a scrobble result"
            raise TransportError(msg)
        return ScrobbleResponse(response.results[0])

    def send_batch_scrobbles(
        self, params: Mapping[str, str],
    ) -> BatchScrobbleResponse:
        return parse_scrobbles(self._execute("track.scrobble", params))
