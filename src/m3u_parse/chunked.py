from __future__ import annotations
import bisect
import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait
from typing import List, Optional, Sequence, Tuple

from .classify import LineKind, classify_line
from .config import ChunkSettings, ParserOptions
from .locator import normalize_locator
from .model import Diagnostic, Entry
from .pairing import PairingOutcome, pair_lines, superseded

logger = logging.getLogger("m3u_parse.chunked")


def scan_boundaries(lines: Sequence[str], options: ParserOptions) -> Tuple[List[int], List[int]]:
    """
    Cheap pass that finds where the line stream may be cut.

    Returns (after_pairing, info_starts): indices right after a line that
    completed an entry, and indices of #EXTINF lines. Cutting at either
    leaves the next chunk in the same state a sequential run would be in.
    """
    after_pairing: List[int] = []
    info_starts: List[int] = []
    pending = False

    for i, raw in enumerate(lines):
        kind = classify_line(raw.strip())
        if kind is LineKind.INFO:
            info_starts.append(i)
            pending = True
        elif kind is LineKind.LOCATOR and pending:
            locator = normalize_locator(
                raw,
                strict=options.strict_locators,
                best_effort=options.best_effort_locators,
                maximum_resilience=options.maximum_resilience,
            )
            if locator is not None:
                after_pairing.append(i + 1)
                pending = False

    return after_pairing, info_starts


def plan_chunks(lines: Sequence[str], chunks: int, options: ParserOptions) -> List[Tuple[int, int]]:
    """Split [0, len(lines)) into at most `chunks` ranges that only end on safe boundaries."""
    total = len(lines)
    if chunks <= 1 or total == 0:
        return [(0, total)]

    after_pairing, info_starts = scan_boundaries(lines, options)
    target = total / chunks
    window = max(1, int(target // 2))

    cuts: List[int] = []
    last = 0
    for k in range(1, chunks):
        t = max(int(round(k * target)), last + 1)
        cut: Optional[int] = None

        idx = bisect.bisect_left(after_pairing, t)
        if idx < len(after_pairing) and after_pairing[idx] < t + window:
            cut = after_pairing[idx]
        else:
            idx = bisect.bisect_left(info_starts, t)
            if idx < len(info_starts):
                cut = info_starts[idx]

        if cut is None or cut <= last or cut >= total:
            continue
        cuts.append(cut)
        last = cut

    bounds = [0] + cuts + [total]
    return list(zip(bounds[:-1], bounds[1:]))


def _pair_chunk(lines: Sequence[str], options: ParserOptions, first_line: int) -> PairingOutcome:
    return pair_lines(lines, options, first_line)


def _executor(settings: ChunkSettings) -> Executor:
    if settings.executor == "process":
        return ProcessPoolExecutor(max_workers=settings.workers)
    return ThreadPoolExecutor(max_workers=settings.workers)


def pair_chunked(
    lines: Sequence[str],
    options: ParserOptions,
    settings: ChunkSettings,
    first_line: int = 1,
) -> Tuple[List[Entry], List[Diagnostic]]:
    """
    Pair `lines` in independent chunks and stitch the results in order.

    Produces the same entries and diagnostics as a single pair_lines()
    run. A worker failure is raised once every other worker has finished.
    """
    ranges = plan_chunks(lines, settings.chunks, options)
    logger.debug("Pairing %d lines in %d chunk(s) on %d worker(s)", len(lines), len(ranges), settings.workers)

    if len(ranges) == 1:
        outcome = pair_lines(lines, options, first_line)
        return list(outcome.entries), list(outcome.diagnostics)

    with _executor(settings) as pool:
        futures = [
            pool.submit(_pair_chunk, list(lines[start:end]), options, first_line + start)
            for start, end in ranges
        ]
        wait(futures)

    error: Optional[BaseException] = None
    entries: List[Entry] = []
    diagnostics: List[Diagnostic] = []

    for index, future in enumerate(futures):
        exc = future.exception()
        if exc is not None:
            logger.error("Chunk %d failed: %s", index, exc)
            if error is None:
                error = exc
            continue
        outcome = future.result()
        entries.extend(outcome.entries)
        diagnostics.extend(outcome.diagnostics)
        # the next chunk opens with the #EXTINF that would have replaced it
        if outcome.leftover is not None and index < len(futures) - 1:
            diagnostics.append(superseded(outcome.leftover))

    if error is not None:
        raise error
    return entries, diagnostics
