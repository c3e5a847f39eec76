from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .chunked import pair_chunked
from .classify import LineKind, classify_line
from .config import ChunkSettings, ParserOptions
from .errors import InvalidSource
from .locator import clean_locator, is_valid_locator
from .model import Entry, ParseResult
from .pairing import PairingStateMachine, build_result, check_unusable, pair_lines
from .parse_header import parse_playlist_attributes
from .source import BOM, FileSource, PlaylistSource, as_source

logger = logging.getLogger("m3u_parse.parser")

SourceLike = Union[PlaylistSource, str, Path]


@dataclass(frozen=True)
class Document:
    header: str
    lines: List[str]
    first_line: int   # 1-based line number of lines[0]


def normalize_text(raw: Optional[str]) -> Document:
    """
    Strip the BOM, unify line endings and split off the #EXTM3U line.

    Raises InvalidSource when there is no text or the first non-empty
    line is not the header.
    """
    if raw is None:
        raise InvalidSource("source text is unavailable")

    text = raw[1:] if raw.startswith(BOM) else raw
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    for idx, line in enumerate(lines):
        stripped = line.replace(BOM, "").strip()
        if not stripped:
            continue
        if classify_line(stripped, first=True) is not LineKind.HEADER:
            raise InvalidSource("playlist does not start with #EXTM3U")
        return Document(header=stripped, lines=lines[idx + 1:], first_line=idx + 2)

    raise InvalidSource("source is empty")


def load_document(source: SourceLike) -> Document:
    return normalize_text(as_source(source).raw_text)


def parse_m3u(
    source: SourceLike,
    options: Optional[ParserOptions] = None,
    chunks: Optional[ChunkSettings] = None,
) -> ParseResult:
    """
    Parse a playlist into a ParseResult (playlist + diagnostics).

    With `chunks` asking for more than one chunk, pairing runs through the
    parallel chunk driver; the result is identical either way.
    """
    options = options or ParserOptions()
    doc = load_document(source)
    attributes = parse_playlist_attributes(doc.header)

    if chunks is not None and chunks.chunks > 1:
        entries, diagnostics = pair_chunked(doc.lines, options, chunks, doc.first_line)
    else:
        outcome = pair_lines(doc.lines, options, doc.first_line)
        entries, diagnostics = list(outcome.entries), list(outcome.diagnostics)

    logger.debug("Parsed %d entries with %d diagnostics", len(entries), len(diagnostics))
    return build_result(entries, diagnostics, attributes, options)


def iter_entries(source: SourceLike, options: Optional[ParserOptions] = None) -> Iterator[Entry]:
    """
    Walk a playlist and yield entries as they are paired.

    Does not fail on an empty playlist; in strict mode an unusable locator
    is raised once the walk reaches the end.
    """
    options = options or ParserOptions()
    doc = load_document(source)
    machine = PairingStateMachine(options)

    for offset, raw in enumerate(doc.lines):
        entry = machine.feed(doc.first_line + offset, raw)
        if entry is not None:
            yield entry

    machine.finish()
    check_unusable(machine.diagnostics, options)


def read_m3u(path: Path, options: Optional[ParserOptions] = None) -> Iterator[Entry]:
    return iter_entries(FileSource(path), options)


def validate_source(source: SourceLike) -> bool:
    """A header, at least one #EXTINF line and at least one usable locator line."""
    try:
        doc = load_document(source)
    except InvalidSource:
        return False

    has_info = has_locator = False
    for raw in doc.lines:
        kind = classify_line(raw.strip())
        if kind is LineKind.INFO:
            has_info = True
        elif kind is LineKind.LOCATOR and not has_locator:
            has_locator = is_valid_locator(clean_locator(raw))
        if has_info and has_locator:
            return True
    return False
