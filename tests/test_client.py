"""Tests for the pylast-backed API client."""

from __future__ import annotations

from xml.dom import minidom

import pylast
import pytest

from lastfm_scrobbler.client import PylastClient
from lastfm_scrobbler.exceptions import TransportError

SESSION_XML = """\
<lfm status="ok">
  <session>
    <name>foo floyd</name>
    <key>d580d57f32848f5dcf574d1ce18d78b2</key>
    <subscriber>1</subscriber>
  </session>
</lfm>"""

NOW_PLAYING_XML = """\
<lfm status="ok">
  <nowplaying>
    <track corrected="0">old bananas</track>
    <artist corrected="1">foo floyd and the fruit flies</artist>
    <album corrected="0">old bananas</album>
    <albumArtist corrected="0"></albumArtist>
    <ignoredMessage code="0"></ignoredMessage>
  </nowplaying>
</lfm>"""

SCROBBLES_XML = """\
<lfm status="ok">
  <scrobbles accepted="1" ignored="1">
    <scrobble>
      <track corrected="0">old bananas</track>
      <artist corrected="0">foo floyd</artist>
      <album corrected="0">old bananas</album>
      <albumArtist corrected="0"></albumArtist>
      <timestamp>1337</timestamp>
      <ignoredMessage code="0"></ignoredMessage>
    </scrobble>
    <scrobble>
      <track corrected="0">new bananas</track>
      <artist corrected="0">foo floyd</artist>
      <album corrected="0"></album>
      <albumArtist corrected="0"></albumArtist>
      <timestamp>1338</timestamp>
      <ignoredMessage code="3">Timestamp too old</ignoredMessage>
    </scrobble>
  </scrobbles>
</lfm>"""


class FakeRequest:
    """Stands in for ``pylast._Request`` and records what would be sent."""

    sent: list[tuple[str, dict[str, str]]] = []
    response: str = SESSION_XML
    error: Exception | None = None

    def __init__(self, network, method_name, params=None) -> None:  # noqa: ANN001
        self.network = network
        self.method_name = method_name
        self.params = dict(params or {})
        self.signed = False

    def sign_it(self) -> None:
        self.signed = True

    def execute(self, cacheable: bool = False):  # noqa: ANN201, ARG002, FBT001, FBT002
        assert self.signed
        FakeRequest.sent.append((self.method_name, self.params))
        if FakeRequest.error is not None:
            raise FakeRequest.error
        return minidom.parseString(FakeRequest.response)


@pytest.fixture
def fake_request(monkeypatch: pytest.MonkeyPatch) -> type[FakeRequest]:
    monkeypatch.setattr(FakeRequest, "sent", [])
    monkeypatch.setattr(FakeRequest, "error", None)
    monkeypatch.setattr(FakeRequest, "response", SESSION_XML)
    monkeypatch.setattr(pylast, "_Request", FakeRequest)
    return FakeRequest


@pytest.fixture
def api_client() -> PylastClient:
    return PylastClient("api_key", "api_secret")


def test_password_authentication_parses_session(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    api_client.set_user_credentials("user", "pass")

    session = api_client.authenticate_with_password()

    assert session.key == "d580d57f32848f5dcf574d1ce18d78b2"
    assert session.name == "foo floyd"
    assert session.subscriber is True
    assert fake_request.sent == [
        ("auth.getMobileSession", {"username": "user", "password": "pass"}),
    ]


def test_token_authentication_uses_get_session(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    api_client.set_user_token("some_token")

    api_client.authenticate_with_token()

    assert fake_request.sent == [("auth.getSession", {"token": "some_token"})]


def test_authentication_without_credentials_sends_nothing(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    with pytest.raises(TransportError):
        api_client.authenticate_with_password()
    with pytest.raises(TransportError):
        api_client.authenticate_with_token()

    assert fake_request.sent == []


def test_missing_session_key_is_transport_error(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.response = '<lfm status="ok"><session></session></lfm>'
    api_client.set_user_token("some_token")

    with pytest.raises(TransportError, match="session key"):
        api_client.authenticate_with_token()


def test_set_session_key_updates_network(api_client: PylastClient) -> None:
    api_client.set_session_key("abc")

    assert api_client.network.session_key == "abc"


def test_now_playing_response_reports_corrections(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.response = NOW_PLAYING_XML

    response = api_client.send_now_playing({"artist": "foo", "track": "t"})

    assert fake_request.sent[0][0] == "track.updateNowPlaying"
    assert response.artist.text == "foo floyd and the fruit flies"
    assert response.artist.corrected is True
    assert response.track.corrected is False
    assert response.album_artist.text == ""
    assert response.ignored_code == 0


def test_batch_response_counts_and_results(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.response = SCROBBLES_XML
    params = {"artist[0]": "foo floyd", "artist[1]": "foo floyd"}

    response = api_client.send_batch_scrobbles(params)

    assert fake_request.sent == [("track.scrobble", params)]
    assert (response.accepted, response.ignored) == (1, 1)
    assert [r.timestamp for r in response.results] == [1337, 1338]
    assert response.results[0].accepted
    assert response.results[1].ignored_code == 3
    assert response.results[1].ignored_message == "Timestamp too old"


def test_single_scrobble_returns_first_result(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.response = SCROBBLES_XML

    response = api_client.send_scrobble({"artist": "foo floyd"})

    assert response.result.track.text == "old bananas"


def test_malformed_scrobble_document_is_transport_error(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.response = '<lfm status="ok"></lfm>'

    with pytest.raises(TransportError, match="scrobbles"):
        api_client.send_scrobble({"artist": "foo floyd"})


def test_ws_error_is_wrapped_with_code(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.error = pylast.WSError(
        api_client.network, "9", "Invalid session key - Please re-authenticate",
    )

    with pytest.raises(TransportError) as excinfo:
        api_client.send_scrobble({"artist": "foo floyd"})

    assert excinfo.value.code == 9
    assert "Invalid session key" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, pylast.WSError)


def test_network_error_is_wrapped(
    fake_request: type[FakeRequest], api_client: PylastClient,
) -> None:
    fake_request.error = pylast.NetworkError(
        api_client.network, OSError("connection refused"),
    )

    with pytest.raises(TransportError) as excinfo:
        api_client.send_now_playing({"artist": "foo"})

    assert excinfo.value.code is None
