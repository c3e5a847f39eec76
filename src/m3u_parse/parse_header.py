from __future__ import annotations
from typing import Dict, List

from .classify import HEADER_TOKEN
from .model import PlaylistAttributes
from .parse_attrs import tokenize_attrs

# matched case-insensitively, values joined in this order
EPG_KEYS = ("url-tvg", "x-tvg-url")

# matched case-sensitively
HEADER_KEYS = ("description", "size", "background")


def parse_playlist_attributes(header_line: str) -> PlaylistAttributes:
    """
    Read playlist-wide attributes from the #EXTM3U line.

    Both EPG key spellings mean the same thing; when both are present their
    values are comma-joined, url-tvg first. Within one key the last
    occurrence wins. Anything unrecognized lands in `other`.
    """
    body = header_line.lstrip()[len(HEADER_TOKEN):]

    epg: Dict[str, str] = {}
    known: Dict[str, str] = {}
    other: Dict[str, str] = {}

    for key, value in tokenize_attrs(body):
        lowered = key.lower()
        if lowered in EPG_KEYS:
            epg[lowered] = value
        elif key in HEADER_KEYS:
            known[key] = value
        else:
            other[key] = value

    epg_values: List[str] = [epg[k] for k in EPG_KEYS if epg.get(k)]

    return PlaylistAttributes(
        epg_url=",".join(epg_values) if epg_values else None,
        description=known.get("description"),
        size=known.get("size"),
        background=known.get("background"),
        other=other,
    )
