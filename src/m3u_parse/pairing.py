from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .classify import LineKind, classify_line
from .config import ParserOptions
from .errors import EmptyResult, UnusableLocator
from .locator import entry_kind, id_from_locator, normalize_locator
from .model import (
    Diagnostic,
    DiagnosticKind,
    Entry,
    Locator,
    ParseResult,
    Playlist,
    PlaylistAttributes,
)
from .parse_attrs import InfoRecord, extract_info

logger = logging.getLogger("m3u_parse.parser")


@dataclass(frozen=True)
class PairingOutcome:
    entries: Tuple[Entry, ...]
    diagnostics: Tuple[Diagnostic, ...]
    leftover: Optional[InfoRecord] = None


def superseded(record: InfoRecord) -> Diagnostic:
    return Diagnostic(
        line=record.line,
        kind=DiagnosticKind.SUPERSEDED_METADATA,
        text=record.raw,
        message="metadata line was not followed by a usable locator before the next #EXTINF",
    )


class PairingStateMachine:
    """
    Pairs each #EXTINF record with the first usable locator after it.

    State is a single pending record. Only INFO and LOCATOR lines can
    change it; directives, session data and blanks pass straight through.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()
        self.pending: Optional[InfoRecord] = None
        self.diagnostics: List[Diagnostic] = []

    def feed(self, line_no: int, raw_line: str) -> Optional[Entry]:
        line = raw_line.strip()
        kind = classify_line(line)

        if kind is LineKind.INFO:
            self._start(extract_info(line, line_no, self.options.strip_series_markers))
            return None

        if kind is LineKind.LOCATOR:
            return self._locator(line_no, line)

        if kind is LineKind.SESSION and self.options.skip_session_data:
            logger.debug("Line %d: skipping session data", line_no)
        return None

    def finish(self) -> Optional[InfoRecord]:
        """End of input: hand back (and forget) any metadata still waiting."""
        leftover, self.pending = self.pending, None
        if leftover is not None:
            logger.debug("Line %d: metadata without locator dropped at end of input", leftover.line)
        return leftover

    def _start(self, record: InfoRecord) -> None:
        if self.pending is not None:
            logger.debug("Line %d: superseded by #EXTINF on line %d", self.pending.line, record.line)
            self.diagnostics.append(superseded(self.pending))
        if record.name_missing:
            logger.debug("Line %d: no display name, using %r", record.line, record.display_name)
            self.diagnostics.append(Diagnostic(
                line=record.line,
                kind=DiagnosticKind.MISSING_DISPLAY_NAME,
                text=record.raw,
                message=f"no display name after the last comma, using {record.display_name!r}",
            ))
        self.pending = record

    def _locator(self, line_no: int, line: str) -> Optional[Entry]:
        opts = self.options
        locator = normalize_locator(
            line,
            strict=opts.strict_locators,
            best_effort=opts.best_effort_locators,
            maximum_resilience=opts.maximum_resilience,
        )

        if locator is None:
            logger.warning("Line %d: unusable locator %r", line_no, line)
            self.diagnostics.append(Diagnostic(
                line=line_no,
                kind=DiagnosticKind.UNUSABLE_LOCATOR,
                text=line,
                message="line could not be normalized into an absolute URI",
            ))
            return None

        if self.pending is None:
            return None

        # only reported once the degraded locator is bound to an entry
        if locator.degraded:
            logger.warning("Line %d: degraded locator %r", line_no, line)
            self.diagnostics.append(Diagnostic(
                line=line_no,
                kind=DiagnosticKind.DEGRADED_LOCATOR,
                text=line,
                message=f"kept as {locator.uri}",
            ))

        entry = self._complete(self.pending, locator)
        self.pending = None
        return entry

    def _complete(self, record: InfoRecord, locator: Locator) -> Entry:
        attributes = record.attributes
        if not attributes.id and self.options.extract_id_from_url:
            attributes = replace(attributes, id=id_from_locator(locator))
        return Entry(
            duration=record.duration,
            attributes=attributes,
            kind=entry_kind(locator),
            display_name=record.display_name,
            locator=locator,
        )


def pair_lines(
    lines: Sequence[str],
    options: Optional[ParserOptions] = None,
    first_line: int = 1,
) -> PairingOutcome:
    """Run one fresh state machine over `lines`; `first_line` is the 1-based number of lines[0]."""
    machine = PairingStateMachine(options)
    entries: List[Entry] = []
    for offset, raw in enumerate(lines):
        entry = machine.feed(first_line + offset, raw)
        if entry is not None:
            entries.append(entry)
    leftover = machine.finish()
    return PairingOutcome(tuple(entries), tuple(machine.diagnostics), leftover)


def check_unusable(diagnostics: Iterable[Diagnostic], options: ParserOptions) -> None:
    """In strict mode an unusable locator anywhere fails the parse, reported after the full pass."""
    if not options.strict_locators:
        return
    unusable = [d for d in diagnostics if d.kind is DiagnosticKind.UNUSABLE_LOCATOR]
    if unusable:
        first = unusable[0]
        raise UnusableLocator(first.line, first.text, len(unusable))


def build_result(
    entries: Sequence[Entry],
    diagnostics: Sequence[Diagnostic],
    attributes: Optional[PlaylistAttributes],
    options: ParserOptions,
) -> ParseResult:
    if not entries:
        raise EmptyResult()
    check_unusable(diagnostics, options)
    return ParseResult(
        playlist=Playlist(entries=tuple(entries), attributes=attributes),
        diagnostics=tuple(diagnostics),
    )
