# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Scrobble records, batches and the typed responses returned by Last.fm."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Final

from .exceptions import InvalidScrobble

# Parameter names understood by track.scrobble / track.updateNowPlaying
REQUIRED_FIELDS: Final[tuple[str, ...]] = ("artist", "track", "album")
OPTIONAL_FIELDS: Final[dict[str, str]] = {
    "album_artist": "albumArtist",
    "track_number": "trackNumber",
    "duration": "duration",
    "timestamp": "timestamp",
    "mbid": "mbid",
}
INTEGER_FIELDS: Final[frozenset[str]] = frozenset(
    {"track_number", "duration", "timestamp"},
)


def _check_int(key: str, value: object) -> int:
    # bool is an int subclass but never a valid count or time
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"Scrobble {key} must be an integer, got {value!r}"
        raise InvalidScrobble(msg)
    return value


def _check_text(key: str, value: object) -> str:
    if not isinstance(value, str):
        msg = f"Scrobble {key} must be a string, got {value!r}"
        raise InvalidScrobble(msg)
    return value


@dataclass
class Scrobble:
    """A single track-play event.

    ``artist``, ``track`` and ``album`` must be non-empty. Every other field is
    optional and only appears in :meth:`as_map` once it has been set.

    Raises:
        InvalidScrobble: If artist, track or album is empty
    """

    artist: str
    track: str
    album: str
    album_artist: str | None = None
    track_number: int | None = None
    duration: int | None = None
    timestamp: int | None = None
    mbid: str | None = None

    def __post_init__(self) -> None:
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                msg = f"Scrobble {name} must be a non-empty string"
                raise InvalidScrobble(msg)

    def with_album_artist(self, album_artist: str) -> Scrobble:
        self.album_artist = _check_text("albumArtist", album_artist)
        return self

    def with_track_number(self, track_number: int) -> Scrobble:
        self.track_number = _check_int("trackNumber", track_number)
        return self

    def with_duration(self, duration: int) -> Scrobble:
        """Set the track length in seconds."""
        self.duration = _check_int("duration", duration)
        return self

    def with_timestamp(self, timestamp: int) -> Scrobble:
        """Set the Unix time (seconds) at which the track started playing.

        Raises:
            InvalidScrobble: If ``timestamp`` is not an integer
        """
        self.timestamp = _check_int("timestamp", timestamp)
        return self

    def with_mbid(self, mbid: str) -> Scrobble:
        self.mbid = _check_text("mbid", mbid)
        return self

    def as_map(self) -> dict[str, str]:
        """Render the record as Last.fm request parameters.

        Returns:
            Parameter name to string value, optional fields only when set
        """
        params = {name: getattr(self, name) for name in REQUIRED_FIELDS}
        for attr, key in OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                params[key] = str(value)
        return params

    @classmethod
    def from_map(cls, data: Mapping[str, object]) -> Scrobble:
        """Build a record from a mapping keyed like :meth:`as_map`.

        Integer fields may be given as ints or decimal text. Optional text
        fields that are null or blank are left unset.

        Args:
            data: Mapping with at least ``artist``, ``track`` and ``album``

        Returns:
            The new record

        Raises:
            InvalidScrobble: If a required key is missing or not a string, or
                an optional field has the wrong type
        """
        required = []
        for name in REQUIRED_FIELDS:
            if name not in data:
                msg = f"Scrobble is missing required field {name!r}"
                raise InvalidScrobble(msg)
            required.append(_check_text(name, data[name]))
        scrobble = cls(*required)

        for attr, key in OPTIONAL_FIELDS.items():
            value = data.get(key)
            if value is None:
                continue
            if attr in INTEGER_FIELDS:
                if isinstance(value, str):
                    try:
                        value = int(value.strip())
                    except ValueError as exc:
                        msg = f"Scrobble {key} must be an integer, got {value!r}"
                        raise InvalidScrobble(msg) from exc
                setattr(scrobble, attr, _check_int(key, value))
            elif _check_text(key, value).strip():
                setattr(scrobble, attr, value)
        return scrobble


@dataclass
class ScrobbleBatch:
    """Ordered collection of scrobbles submitted in one request.

    The position of each record is the index used in the batch encoding, so
    records are never reordered or deduplicated. Size is only checked when the
    batch is submitted.
    """

    scrobbles: list[Scrobble] = field(default_factory=list)

    @classmethod
    def of(cls, scrobbles: Iterable[Scrobble]) -> ScrobbleBatch:
        return cls(list(scrobbles))

    def append(self, scrobble: Scrobble) -> None:
        self.scrobbles.append(scrobble)

    def extend(self, scrobbles: Iterable[Scrobble]) -> None:
        self.scrobbles.extend(scrobbles)

    def __len__(self) -> int:
        return len(self.scrobbles)

    def __iter__(self) -> Iterator[Scrobble]:
        return iter(self.scrobbles)

    def __getitem__(self, index: int) -> Scrobble:
        return self.scrobbles[index]


@dataclass(frozen=True)
class CorrectedValue:
    """A value echoed back by Last.fm, flagged when the service corrected it."""

    text: str
    corrected: bool = False


@dataclass(frozen=True)
class SessionResponse:
    """Result of auth.getMobileSession / auth.getSession."""

    key: str
    name: str
    subscriber: bool = False


@dataclass(frozen=True)
class NowPlayingResponse:
    artist: CorrectedValue
    track: CorrectedValue
    album: CorrectedValue
    album_artist: CorrectedValue
    ignored_code: int = 0
    ignored_message: str = ""


@dataclass(frozen=True)
class ScrobbleResult:
    """Outcome for one record of a track.scrobble request.

    ``ignored_code`` is zero when Last.fm accepted the record.
    """

    artist: CorrectedValue
    track: CorrectedValue
    album: CorrectedValue
    album_artist: CorrectedValue
    timestamp: int
    ignored_code: int = 0
    ignored_message: str = ""

    @property
    def accepted(self) -> bool:
        return self.ignored_code == 0


@dataclass(frozen=True)
class ScrobbleResponse:
    result: ScrobbleResult


@dataclass(frozen=True)
class BatchScrobbleResponse:
    accepted: int
    ignored: int
    results: tuple[ScrobbleResult, ...] = ()
