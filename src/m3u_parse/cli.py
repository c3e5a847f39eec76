from __future__ import annotations
import argparse, csv
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Config, load_config
from .errors import M3UParseError
from .parse_m3u import parse_m3u
from .source import FileSource, PlaylistSource, UrlSource, has_header, sniff_format

logger = logging.getLogger("m3u_parse.cli")


def _setup_logging(verbose: bool) -> None:
    root = logging.getLogger("m3u_parse")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    if not root.handlers:
        root.addHandler(ch)


def _open_source(location: str, cfg: Config) -> PlaylistSource:
    if location.lower().startswith(("http://", "https://")):
        return UrlSource(location, cfg.fetch)
    return FileSource(Path(location))


def _effective_config(args: argparse.Namespace) -> Config:
    cfg = load_config(args.config)
    parser = cfg.parser
    if args.strict:
        parser = replace(parser, strict_locators=True)
    if args.resilient:
        parser = replace(parser, best_effort_locators=True, maximum_resilience=True)
    chunks = cfg.chunks
    if args.chunks is not None:
        chunks = replace(chunks, chunks=max(1, args.chunks))
    return replace(cfg, parser=parser, chunks=chunks)


def cmd_validate(sources: Sequence[str], cfg: Config) -> int:
    failed = 0
    for location in sources:
        src = _open_source(location, cfg)
        text = src.raw_text
        ok = has_header(text)
        failed += 0 if ok else 1
        print(f"{location}\t{sniff_format(text).value}\t{'valid' if ok else 'invalid'}")
    return 1 if failed else 0


def cmd_summary(sources: Sequence[str], cfg: Config, out: Path) -> int:
    """
    One CSV row per source:
      source, entries, live, movies, series, degraded, diagnostics, epg_url, notes
    """
    out.parent.mkdir(parents=True, exist_ok=True)
    failed = 0

    with out.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow([
            "source", "entries", "live", "movies", "series",
            "degraded", "diagnostics", "epg_url", "notes",
        ])
        for location in sources:
            try:
                res = parse_m3u(_open_source(location, cfg), cfg.parser, cfg.chunks)
            except M3UParseError as e:
                failed += 1
                logger.error("%s: %s", location, e)
                w.writerow([location, 0, 0, 0, 0, 0, 0, "", f"{e.__class__.__name__}: {e}"])
                continue
            pl = res.playlist
            w.writerow([
                location, len(pl), len(pl.live_channels), len(pl.movies), len(pl.series),
                pl.degraded_count, len(res.diagnostics),
                (pl.attributes.epg_url if pl.attributes else None) or "", "",
            ])

    print(f"wrote: {out}")
    return 1 if failed else 0


def cmd_entries(source: str, cfg: Config, out: Path) -> int:
    try:
        res = parse_m3u(_open_source(source, cfg), cfg.parser, cfg.chunks)
    except M3UParseError as e:
        logger.error("%s: %s", source, e)
        return 1

    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["display_name", "tvg_id", "tvg_name", "group_title", "kind", "duration", "locator"])
        for e in res.playlist:
            a = e.attributes
            w.writerow([
                e.display_name, a.id or "", a.name or "", a.group_title or "",
                e.kind.value, e.duration, e.locator.uri,
            ])

    print(f"wrote: {out} ({len(res.playlist)} entries)")
    return 0


def cmd_groups(sources: Sequence[str], cfg: Config, out: Path) -> int:
    rows: List[tuple] = []
    failed = 0
    for location in sources:
        try:
            res = parse_m3u(_open_source(location, cfg), cfg.parser, cfg.chunks)
        except M3UParseError as e:
            failed += 1
            logger.error("%s: %s", location, e)
            continue
        for g in sorted(res.playlist.group_titles(), key=str.lower):
            rows.append((location, g))

    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["source", "group_title"])
        w.writerows(rows)

    print(f"wrote: {out} ({len(rows)} rows)")
    return 1 if failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Parent with global flags so every subcommand accepts them
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--config", "-c", type=Path, default=None, help="YAML config file")
    parent.add_argument("--strict", action="store_true", help="Strict locator validation")
    parent.add_argument("--resilient", action="store_true", help="Keep unusable locators as degraded entries")
    parent.add_argument("--chunks", type=int, default=None, help="Pair lines in N parallel chunks")
    parent.add_argument("--verbose", "-v", action="store_true")

    ap = argparse.ArgumentParser(prog="m3u-parse", description="M3U/M3U8 playlist parser")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sp_val = sub.add_parser("validate", parents=[parent], help="Report format and header validity")
    sp_val.add_argument("sources", nargs="+")

    sp_sum = sub.add_parser("summary", parents=[parent], help="Write one CSV row per playlist")
    sp_sum.add_argument("sources", nargs="+")
    sp_sum.add_argument("--out", "-o", type=Path, default=Path("reports/summary.csv"))

    sp_ent = sub.add_parser("entries", parents=[parent], help="Write one CSV row per entry")
    sp_ent.add_argument("source")
    sp_ent.add_argument("--out", "-o", type=Path, default=Path("reports/entries.csv"))

    sp_grp = sub.add_parser("groups", parents=[parent], help="Write unique group-titles per playlist")
    sp_grp.add_argument("sources", nargs="+")
    sp_grp.add_argument("--out", "-o", type=Path, default=Path("reports/groups.csv"))

    args = ap.parse_args(argv)
    _setup_logging(args.verbose)
    cfg = _effective_config(args)

    if args.cmd == "validate":
        return cmd_validate(args.sources, cfg)
    if args.cmd == "summary":
        return cmd_summary(args.sources, cfg, args.out)
    if args.cmd == "entries":
        return cmd_entries(args.source, cfg, args.out)
    return cmd_groups(args.sources, cfg, args.out)


if __name__ == "__main__":
    raise SystemExit(main())
