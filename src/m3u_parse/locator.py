from __future__ import annotations
import logging
import re
from typing import Optional
from urllib.parse import quote, urlsplit

from .model import DegradedLocator, EntryKind, Locator, ResolvedLocator

logger = logging.getLogger("m3u_parse.locator")

STREAM_SCHEMES = frozenset({"http", "https", "rtmp", "rtmps", "rtsp", "rtsps", "mms", "mmsh"})
MEDIA_EXTENSIONS = frozenset({
    "m3u8", "m3u", "mp4", "m4v", "ts", "mpd", "flv", "avi", "mkv",
    "mov", "webm", "mp3", "aac", "m4a", "ogg",
})
PLAYLIST_MARKER = ".m3u"

# RFC 3986 reserved + unreserved + '%'
_URI_SAFE = "-._~:/?#[]@!$&'()*+,;=%"
_URI_CHARS = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")
_HOST = re.compile(r"^(?:\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9\-._~]+)$")

# path fragment -> kind, checked in this order
_KIND_MARKERS = (
    ("/movie/", EntryKind.MOVIE),
    ("/series/", EntryKind.SERIES),
    ("/live/", EntryKind.LIVE),
)


def clean_locator(raw: str) -> str:
    """Apply the textual fixes IPTV lists need before a line can be read as a URI."""
    s = raw.replace("\r", "").replace("\n", "").replace("\t", "").strip()

    # provider convention: "url|User-Agent=...&Referer=..."
    if "|" in s:
        s = s.split("|", 1)[0].strip()

    s = s.replace(" ", "%20")

    if s.startswith("//"):
        s = "https:" + s
    elif "://" not in s and not s.startswith("/"):
        s = "http://" + s
    return s


def _host_of(netloc: str) -> str:
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        end = hostport.find("]")
        return hostport if end == -1 else hostport[:end + 1]
    return hostport.split(":", 1)[0]


def is_valid_locator(uri: str, strict: bool = False) -> bool:
    if not uri or not _URI_CHARS.match(uri):
        return False
    try:
        parts = urlsplit(uri)
        # raises on a non-numeric port
        parts.port
    except ValueError:
        return False

    if not parts.scheme:
        return False

    if parts.netloc or uri[len(parts.scheme) + 1:].startswith("//"):
        host = _host_of(parts.netloc)
        if not host or not _HOST.match(host):
            return False
    elif not parts.path:
        return False

    if strict:
        if parts.scheme.lower() not in STREAM_SCHEMES:
            return False
        path = parts.path.lower()
        if PLAYLIST_MARKER not in path:
            last = path.rsplit("/", 1)[-1]
            ext = last.rsplit(".", 1)[-1] if "." in last else ""
            if ext not in MEDIA_EXTENSIONS:
                return False

    return True


def normalize_locator(
    raw: str,
    strict: bool = False,
    best_effort: bool = False,
    maximum_resilience: bool = False,
) -> Optional[Locator]:
    """
    Turn a locator line into a Locator, or None when it is unusable.

    In non-strict best-effort mode an invalid result is percent-encoded and
    validated once more. With maximum resilience, anything still invalid
    comes back as a DegradedLocator carrying the original text.
    """
    cleaned = clean_locator(raw)
    if is_valid_locator(cleaned, strict):
        return ResolvedLocator(cleaned)

    if best_effort and not strict:
        encoded = quote(cleaned, safe=_URI_SAFE)
        if encoded != cleaned and is_valid_locator(encoded):
            logger.debug("Locator accepted after percent-encoding: %s", encoded)
            return ResolvedLocator(encoded)

    if maximum_resilience:
        return DegradedLocator(raw.strip())

    return None


def entry_kind(locator: Locator) -> EntryKind:
    path = locator.path
    for marker, kind in _KIND_MARKERS:
        if marker in path:
            return kind
    return EntryKind.UNKNOWN


def id_from_locator(locator: Locator) -> Optional[str]:
    """Last path component up to its first '.', e.g. '.../live/u/p/1234.ts' -> '1234'."""
    last = locator.path.rstrip("/").rsplit("/", 1)[-1]
    ident = last.split(".", 1)[0]
    return ident or None
