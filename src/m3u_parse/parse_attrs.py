from __future__ import annotations
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from .classify import INFO_PREFIXES
from .model import EntryAttributes

UNKNOWN_NAME = "Unknown"
DEFAULT_DURATION = -1

# EXTINF key -> EntryAttributes field
ENTRY_KEYS: Dict[str, str] = {
    "tvg-id": "id",
    "tvg-name": "name",
    "tvg-country": "country",
    "tvg-language": "language",
    "tvg-logo": "logo",
    "tvg-chno": "channel_number",
    "tvg-shift": "shift",
    "group-title": "group_title",
    "tvg-url": "epg_url",
    "aspect-ratio": "aspect_ratio",
    "audio-track": "audio_track",
    "subtitles": "subtitle_track",
}

_DURATION_ANCHORED = re.compile(r"^#EXT(?:INF|NF):\s*([-+]?\d+(?:\.\d+)?)")
# a bare numeric token: preceded by start/space/colon, followed by end/space/comma
_DURATION_ANYWHERE = re.compile(r"(?<![^\s:])([-+]?\d+(?:\.\d+)?)(?![^\s,])")
_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
_SEASON_EPISODE = re.compile(r"\bS\s*(\d+)\s*E\s*(\d+)\b", re.IGNORECASE)


@dataclass(frozen=True)
class InfoRecord:
    """Everything extracted from one #EXTINF line, waiting for its locator."""
    line: int
    raw: str
    duration: int
    attributes: EntryAttributes
    display_name: str
    name_missing: bool = False


def tokenize_attrs(text: str) -> List[Tuple[str, str]]:
    """
    Single pass over `text` producing (key, value) pairs in source order.

    Accepts key="value", key='value' and key=value, with optional
    whitespace around '='. Tokens without '=' (the duration, stray words)
    are skipped. An unterminated quote runs to the end of the text.
    """
    pairs: List[Tuple[str, str]] = []
    i, n = 0, len(text)

    while i < n:
        while i < n and text[i].isspace():
            i += 1
        if i >= n:
            break

        start = i
        while i < n and not text[i].isspace() and text[i] not in "=\"'":
            i += 1
        key = text[start:i]

        j = i
        while j < n and text[j].isspace():
            j += 1

        if key and j < n and text[j] == "=":
            i = j + 1
            while i < n and text[i].isspace():
                i += 1
            if i < n and text[i] in "\"'":
                quote = text[i]
                end = text.find(quote, i + 1)
                if end == -1:
                    value, i = text[i + 1:], n
                else:
                    value, i = text[i + 1:end], end + 1
            else:
                start = i
                while i < n and not text[i].isspace():
                    i += 1
                value = text[start:i]
            pairs.append((key, value))
            continue

        if not key:
            ch = text[i]
            if ch in "\"'":
                end = text.find(ch, i + 1)
                i = n if end == -1 else end + 1
            else:
                i += 1

    return pairs


def split_info_line(line: str) -> Tuple[str, Optional[str]]:
    """
    Split an #EXTINF line into (head, name) at the last top-level comma.

    A quote only opens a quoted run when it starts an attribute value, so
    apostrophes in names do not hide commas. `name` is None when the line
    has no top-level comma.
    """
    quote: Optional[str] = None
    last_comma = -1
    prev = ""

    for i, ch in enumerate(line):
        if quote is not None:
            if ch == quote:
                quote = None
                prev = ch
            continue
        if ch in "\"'" and prev == "=":
            quote = ch
        elif ch == ",":
            last_comma = i
        if not ch.isspace():
            prev = ch

    if last_comma == -1:
        return line, None
    return line[:last_comma], line[last_comma + 1:]


def strip_info_prefix(line: str) -> str:
    for prefix in INFO_PREFIXES:
        if line.startswith(prefix):
            return line[len(prefix):]
    return line


def _to_int(number: str) -> Optional[int]:
    try:
        # int(Decimal) truncates toward zero
        return int(Decimal(number))
    except (InvalidOperation, ValueError):
        return None


def extract_duration(line: str) -> int:
    """
    Duration in whole seconds; -1 when the line carries none.

    Tries the number right after the directive prefix first, then the
    first bare numeric token outside quoted values.
    """
    m = _DURATION_ANCHORED.match(line)
    if m:
        value = _to_int(m.group(1))
        if value is not None:
            return value

    head, _ = split_info_line(line)
    scrubbed = _QUOTED.sub(" ", strip_info_prefix(head))
    m = _DURATION_ANYWHERE.search(scrubbed)
    if m:
        value = _to_int(m.group(1))
        if value is not None:
            return value

    return DEFAULT_DURATION


def parse_season_episode(text: str, strip: bool = False) -> Tuple[str, Optional[Tuple[int, int]]]:
    m = _SEASON_EPISODE.search(text)
    if not m:
        return text, None
    se = (int(m.group(1)), int(m.group(2)))
    if strip:
        text = " ".join((text[:m.start()] + " " + text[m.end():]).split())
    return text, se


def extract_entry_attributes(pairs: List[Tuple[str, str]]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Split tokenized pairs into known EntryAttributes fields and the rest (first occurrence wins)."""
    known: Dict[str, str] = {}
    other: Dict[str, str] = {}
    for key, value in pairs:
        field_name = ENTRY_KEYS.get(key)
        if field_name is not None:
            known.setdefault(field_name, value)
        else:
            other.setdefault(key, value)
    return known, other


def extract_info(line: str, line_no: int, strip_series_markers: bool = False) -> InfoRecord:
    head, name = split_info_line(line)
    known, other = extract_entry_attributes(tokenize_attrs(strip_info_prefix(head)))

    name_missing = False
    display_name = (name or "").strip()
    if not display_name:
        display_name = UNKNOWN_NAME
        name_missing = True

    season_episode = None
    if not name_missing:
        display_name, season_episode = parse_season_episode(display_name, strip_series_markers)

    tvg_name = known.get("name")
    if tvg_name is not None:
        tvg_name, tvg_se = parse_season_episode(tvg_name, strip_series_markers)
        known["name"] = tvg_name
        if season_episode is None:
            season_episode = tvg_se

    attributes = EntryAttributes(
        season=season_episode[0] if season_episode else None,
        episode=season_episode[1] if season_episode else None,
        # tvg-shift doubles as the EPG shift
        epg_shift=known.get("shift"),
        other=other,
        **known,
    )

    return InfoRecord(
        line=line_no,
        raw=line,
        duration=extract_duration(line),
        attributes=attributes,
        display_name=display_name,
        name_missing=name_missing,
    )
