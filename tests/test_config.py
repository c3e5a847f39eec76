from pathlib import Path

import pytest

from m3u_parse.config import ChunkSettings, Config, ParserOptions, load_config


def test_missing_config_yields_defaults(tmp_path: Path):
    assert load_config(None) == Config()
    assert load_config(tmp_path / "absent.yaml") == Config()


def test_defaults_are_all_off():
    opts = ParserOptions()
    assert not any(vars(opts).values())


def test_iptv_preset():
    opts = ParserOptions.iptv()
    assert opts.strip_series_markers and opts.extract_id_from_url
    assert opts.skip_session_data and opts.best_effort_locators
    assert not opts.strict_locators
    assert not opts.maximum_resilience


def test_load_config(tmp_path: Path):
    path = tmp_path / "m3u.yaml"
    path.write_text(
        """
parser:
  strict_locators: true
  extract_id_from_url: yes
chunks:
  chunks: 4
  max_workers: 2
  executor: Process
fetch:
  timeout_secs: 5
  retries: 0
  user_agent: tester
""",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.parser == ParserOptions(strict_locators=True, extract_id_from_url=True)
    assert cfg.chunks == ChunkSettings(chunks=4, max_workers=2, executor="process")
    assert cfg.fetch.timeout_secs == 5
    assert cfg.fetch.retries == 0
    assert cfg.fetch.backoff == 1.5
    assert cfg.fetch.user_agent == "tester"


def test_empty_file_and_null_sections(tmp_path: Path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_config(empty) == Config()

    nulls = tmp_path / "nulls.yaml"
    nulls.write_text("parser:\nchunks:\nfetch:\n", encoding="utf-8")
    assert load_config(nulls) == Config()


def test_chunk_count_is_clamped(tmp_path: Path):
    path = tmp_path / "c.yaml"
    path.write_text("chunks:\n  chunks: 0\n", encoding="utf-8")
    assert load_config(path).chunks.chunks == 1


def test_bad_executor_is_rejected(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("chunks:\n  executor: fibers\n", encoding="utf-8")
    with pytest.raises(ValueError, match="executor"):
        load_config(path)


def test_worker_count_falls_back_to_cpu_count(monkeypatch):
    monkeypatch.setattr("m3u_parse.config.os.cpu_count", lambda: 6)
    assert ChunkSettings().workers == 6
    assert ChunkSettings(max_workers=3).workers == 3
    monkeypatch.setattr("m3u_parse.config.os.cpu_count", lambda: None)
    assert ChunkSettings().workers == 1
