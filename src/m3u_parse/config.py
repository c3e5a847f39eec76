from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class ParserOptions:
    """Independent switches; every one defaults to off."""
    strip_series_markers: bool = False
    extract_id_from_url: bool = False
    strict_locators: bool = False
    skip_session_data: bool = False
    best_effort_locators: bool = False
    maximum_resilience: bool = False

    @classmethod
    def iptv(cls) -> "ParserOptions":
        return cls(
            strip_series_markers=True,
            extract_id_from_url=True,
            skip_session_data=True,
            best_effort_locators=True,
        )


@dataclass(frozen=True)
class ChunkSettings:
    chunks: int = 1
    max_workers: Optional[int] = None   # None -> os.cpu_count()
    executor: str = "thread"            # "thread" | "process"

    @property
    def workers(self) -> int:
        return max(1, self.max_workers or os.cpu_count() or 1)


@dataclass(frozen=True)
class FetchSettings:
    timeout_secs: int = 20
    retries: int = 3
    backoff: float = 1.5
    user_agent: str = "m3u-parse"


@dataclass(frozen=True)
class Config:
    parser: ParserOptions = field(default_factory=ParserOptions)
    chunks: ChunkSettings = field(default_factory=ChunkSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: Optional[Path]) -> Config:
    if config_path is None or not config_path.exists():
        return Config()

    raw = _load_yaml(config_path)

    p = raw.get("parser", {}) or {}
    parser = ParserOptions(
        strip_series_markers=bool(p.get("strip_series_markers", False)),
        extract_id_from_url=bool(p.get("extract_id_from_url", False)),
        strict_locators=bool(p.get("strict_locators", False)),
        skip_session_data=bool(p.get("skip_session_data", False)),
        best_effort_locators=bool(p.get("best_effort_locators", False)),
        maximum_resilience=bool(p.get("maximum_resilience", False)),
    )

    c = raw.get("chunks", {}) or {}
    workers = c.get("max_workers")
    executor = str(c.get("executor", "thread")).lower()
    if executor not in ("thread", "process"):
        raise ValueError(f"chunks.executor must be 'thread' or 'process', got {executor!r}")
    chunks = ChunkSettings(
        chunks=max(1, int(c.get("chunks", 1))),
        max_workers=int(workers) if workers is not None else None,
        executor=executor,
    )

    f = raw.get("fetch", {}) or {}
    fetch = FetchSettings(
        timeout_secs=int(f.get("timeout_secs", 20)),
        retries=int(f.get("retries", 3)),
        backoff=float(f.get("backoff", 1.5)),
        user_agent=str(f.get("user_agent", "m3u-parse")),
    )

    return Config(parser=parser, chunks=chunks, fetch=fetch)
