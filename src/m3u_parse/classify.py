from __future__ import annotations
from enum import Enum

HEADER_TOKEN = "#EXTM3U"

# "#EXTNF:" is a common typo in hand-edited IPTV lists
INFO_PREFIXES = ("#EXTINF:", "#EXTNF:")

SESSION_PREFIX = "#EXT-X-SESSION-DATA"

IGNORABLE_PREFIXES = (
    "#EXTGRP",
    "#EXTVLCOPT",
    "#EXT-X-",
    "#EXTENC",
    "#PLAYLIST",
    "#EXTBYT",
    "#EXTBIN",
)

COMMENT_MARKER = "#"


class LineKind(str, Enum):
    HEADER = "header"
    DIRECTIVE = "directive"
    INFO = "info"
    SESSION = "session"
    LOCATOR = "locator"
    BLANK = "blank"


def is_header(line: str) -> bool:
    return line.lstrip()[: len(HEADER_TOKEN)].upper() == HEADER_TOKEN


def is_info_line(line: str) -> bool:
    return line.startswith(INFO_PREFIXES)


def is_session_line(line: str) -> bool:
    return line.startswith(SESSION_PREFIX)


def classify_line(line: str, first: bool = False) -> LineKind:
    """
    Map one trimmed line to its LineKind.

    `first` marks the first non-empty line of the document, the only place
    a header may appear. Everything else starting with '#' that is not an
    info line is a directive and can never touch pairing state.
    """
    if not line:
        return LineKind.BLANK
    if first and is_header(line):
        return LineKind.HEADER
    if is_info_line(line):
        return LineKind.INFO
    if line.startswith(IGNORABLE_PREFIXES) and not is_session_line(line):
        return LineKind.DIRECTIVE
    if is_session_line(line):
        return LineKind.SESSION
    if not line.startswith(COMMENT_MARKER):
        return LineKind.LOCATOR
    return LineKind.DIRECTIVE
