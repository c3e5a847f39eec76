from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import quote, urlsplit

DEGRADED_SCHEME = "m3u-degraded"


class EntryKind(str, Enum):
    MOVIE = "movie"
    SERIES = "series"
    LIVE = "live"
    UNKNOWN = "unknown"


class AttributeMap(Mapping):
    """Read-only, hashable str -> str mapping for attributes without a dedicated field."""

    __slots__ = ("_data",)

    def __init__(self, items: Union[Mapping, Iterable[Tuple[str, str]]] = ()):
        self._data: Dict[str, str] = dict(items)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def __reduce__(self):
        return (AttributeMap, (self._data,))

    def __repr__(self) -> str:
        return f"AttributeMap({self._data!r})"


@dataclass(frozen=True)
class ResolvedLocator:
    """A well-formed absolute URI."""
    uri: str

    @property
    def scheme(self) -> str:
        return urlsplit(self.uri).scheme.lower()

    @property
    def host(self) -> Optional[str]:
        return urlsplit(self.uri).hostname

    @property
    def path(self) -> str:
        return urlsplit(self.uri).path

    @property
    def degraded(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class DegradedLocator:
    """
    Placeholder for a locator line that could not be turned into a URI.

    Only produced when maximum resilience is enabled. The marker URI uses
    its own scheme so a degraded entry never looks playable.
    """
    original: str

    @property
    def scheme(self) -> str:
        return DEGRADED_SCHEME

    @property
    def host(self) -> Optional[str]:
        return None

    @property
    def path(self) -> str:
        return ""

    @property
    def uri(self) -> str:
        return f"{DEGRADED_SCHEME}:{quote(self.original, safe='')}"

    @property
    def degraded(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.uri


Locator = Union[ResolvedLocator, DegradedLocator]


@dataclass(frozen=True)
class EntryAttributes:
    id: Optional[str] = None               # tvg-id
    name: Optional[str] = None             # tvg-name
    country: Optional[str] = None          # tvg-country
    language: Optional[str] = None         # tvg-language
    logo: Optional[str] = None             # tvg-logo
    channel_number: Optional[str] = None   # tvg-chno
    shift: Optional[str] = None            # tvg-shift
    group_title: Optional[str] = None      # group-title
    season: Optional[int] = None
    episode: Optional[int] = None
    epg_url: Optional[str] = None          # tvg-url
    epg_shift: Optional[str] = None        # tvg-shift
    aspect_ratio: Optional[str] = None     # aspect-ratio
    audio_track: Optional[str] = None      # audio-track
    subtitle_track: Optional[str] = None   # subtitles
    other: Mapping = field(default_factory=AttributeMap)

    def __post_init__(self) -> None:
        object.__setattr__(self, "other", AttributeMap(self.other))


@dataclass(frozen=True)
class Entry:
    duration: int
    attributes: EntryAttributes
    kind: EntryKind
    display_name: str
    locator: Locator

    @property
    def url(self) -> str:
        return self.locator.uri

    @property
    def degraded(self) -> bool:
        return self.locator.degraded


@dataclass(frozen=True)
class PlaylistAttributes:
    epg_url: Optional[str] = None
    description: Optional[str] = None
    size: Optional[str] = None
    background: Optional[str] = None
    other: Mapping = field(default_factory=AttributeMap)

    def __post_init__(self) -> None:
        object.__setattr__(self, "other", AttributeMap(self.other))


@dataclass(frozen=True)
class Playlist:
    entries: Tuple[Entry, ...]
    attributes: Optional[PlaylistAttributes] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def live_channels(self) -> List[Entry]:
        return [e for e in self.entries if e.kind is EntryKind.LIVE]

    @property
    def movies(self) -> List[Entry]:
        return [e for e in self.entries if e.kind is EntryKind.MOVIE]

    @property
    def series(self) -> List[Entry]:
        return [e for e in self.entries if e.kind is EntryKind.SERIES]

    @property
    def degraded_count(self) -> int:
        return sum(1 for e in self.entries if e.degraded)

    def in_group(self, group_title: str) -> List[Entry]:
        return [e for e in self.entries if e.attributes.group_title == group_title]

    def from_country(self, country: str) -> List[Entry]:
        return [e for e in self.entries if e.attributes.country == country]

    def in_language(self, language: str) -> List[Entry]:
        return [e for e in self.entries if e.attributes.language == language]

    def search(self, query: str) -> List[Entry]:
        """Case-insensitive match against tvg-name, falling back to the display name."""
        q = query.lower()
        return [
            e for e in self.entries
            if q in (e.attributes.name if e.attributes.name is not None else e.display_name).lower()
        ]

    def by_id(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.attributes.id == entry_id), None)

    def by_locator(self, uri: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.locator.uri == uri), None)

    def group_titles(self) -> List[str]:
        seen: Dict[str, None] = {}
        for e in self.entries:
            g = (e.attributes.group_title or "").strip()
            if g:
                seen.setdefault(g, None)
        return list(seen)


class DiagnosticKind(str, Enum):
    UNUSABLE_LOCATOR = "unusable-locator"
    DEGRADED_LOCATOR = "degraded-locator"
    MISSING_DISPLAY_NAME = "missing-display-name"
    SUPERSEDED_METADATA = "superseded-metadata"


@dataclass(frozen=True)
class Diagnostic:
    line: int
    kind: DiagnosticKind
    text: str
    message: str = ""


@dataclass(frozen=True)
class ParseResult:
    playlist: Playlist
    diagnostics: Tuple[Diagnostic, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self.playlist.entries
