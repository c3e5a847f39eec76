from __future__ import annotations
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

import requests

from .classify import is_header
from .config import FetchSettings

logger = logging.getLogger("m3u_parse.source")

BOM = "\ufeff"


class PlaylistFormat(str, Enum):
    M3U = "M3U"
    M3U8 = "M3U8"
    PLS = "PLS"
    UNKNOWN = "Unknown"


def decode_bytes(data: bytes) -> str:
    """UTF-8 (BOM tolerated), falling back to Latin-1 which never fails."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def sniff_format(text: Optional[str]) -> PlaylistFormat:
    if not text:
        return PlaylistFormat.UNKNOWN
    if "#EXTM3U" in text:
        return PlaylistFormat.M3U8 if "#EXT-X-" in text else PlaylistFormat.M3U
    if "[playlist]" in text:
        return PlaylistFormat.PLS
    return PlaylistFormat.UNKNOWN


def has_header(text: Optional[str]) -> bool:
    if not text:
        return False
    stripped = text.lstrip(BOM + " \t\r\n")
    return is_header(stripped.split("\n", 1)[0])


class PlaylistSource:
    """Something that can hand the parser decoded playlist text."""

    @property
    def raw_text(self) -> Optional[str]:
        raise NotImplementedError

    @property
    def format(self) -> PlaylistFormat:
        return sniff_format(self.raw_text)

    @property
    def is_valid(self) -> bool:
        return has_header(self.raw_text)


class TextSource(PlaylistSource):
    def __init__(self, text: Optional[str]):
        self._text = text

    @property
    def raw_text(self) -> Optional[str]:
        return self._text

    def __repr__(self) -> str:
        return f"TextSource({len(self._text or '')} chars)"


class FileSource(PlaylistSource):
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @property
    def raw_text(self) -> Optional[str]:
        try:
            return decode_bytes(self.path.read_bytes())
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.path, e)
            return None

    def __repr__(self) -> str:
        return f"FileSource({str(self.path)!r})"


class UrlSource(PlaylistSource):
    """Playlist fetched over HTTP(S) with retries and exponential backoff."""

    def __init__(
        self,
        url: str,
        settings: Optional[FetchSettings] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.url = url
        self.settings = settings or FetchSettings()
        self.headers = dict(headers or {})
        self.headers.setdefault("User-Agent", self.settings.user_agent)

    @property
    def raw_text(self) -> Optional[str]:
        return fetch_text(self.url, self.headers, self.settings)

    def __repr__(self) -> str:
        return f"UrlSource({self.url!r})"


class CachedSource(PlaylistSource):
    """
    Memoizes the wrapped source's text and validity until clear_cache().

    The cache never expires on its own.
    """

    def __init__(self, source: PlaylistSource):
        self.source = source
        self._text: Optional[str] = None
        self._loaded = False
        self._valid: Optional[bool] = None

    @property
    def raw_text(self) -> Optional[str]:
        if not self._loaded:
            self._text = self.source.raw_text
            self._loaded = True
        return self._text

    @property
    def is_valid(self) -> bool:
        if self._valid is None:
            self._valid = has_header(self.raw_text)
        return self._valid

    def clear_cache(self) -> None:
        self._text = None
        self._loaded = False
        self._valid = None

    def __repr__(self) -> str:
        return f"CachedSource({self.source!r})"


def fetch_text(url: str, headers: Dict[str, str], settings: FetchSettings) -> Optional[str]:
    attempt = 0
    last_exc: Optional[Exception] = None
    while attempt <= settings.retries:
        try:
            resp = requests.get(url, headers=headers, timeout=settings.timeout_secs)
            if 200 <= resp.status_code < 300:
                logger.info("200 OK (%s bytes): %s", len(resp.content), url)
                return decode_bytes(resp.content)
            logger.warning("HTTP %s for %s", resp.status_code, url)
        except requests.RequestException as e:
            last_exc = e
            logger.warning("Network error on %s (attempt %d/%d): %s", url, attempt + 1, settings.retries + 1, e)

        attempt += 1
        if attempt <= settings.retries:
            time.sleep(settings.backoff ** attempt)

    logger.error("Fetch failed for %s. Last error: %s", url, last_exc)
    return None


def as_source(obj: Union[PlaylistSource, str, Path]) -> PlaylistSource:
    """
    Coerce `obj` into a PlaylistSource.

    A str is playlist text unless it is a single line starting with
    http(s)://, in which case it is fetched.
    """
    if isinstance(obj, PlaylistSource):
        return obj
    if isinstance(obj, Path):
        return FileSource(obj)
    if isinstance(obj, str):
        if "\n" not in obj and obj.strip().lower().startswith(("http://", "https://")):
            return UrlSource(obj.strip())
        return TextSource(obj)
    raise TypeError(f"cannot read a playlist from {type(obj).__name__}")
