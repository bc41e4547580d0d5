import logging
from pathlib import Path

import config


def _write_config(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def _use_config_dir(tmp_path, monkeypatch):
    config_dir = tmp_path / ".hifztrack"
    config_path = config_dir / "config.toml"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    for name in ("HIFZTRACK_TRACKED_PROGRAMS", "HIFZTRACK_CORPUS_TOTAL", "HIFZTRACK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_dir, config_path


def test_load_config_copies_example_on_first_run(tmp_path, monkeypatch):
    config_dir, config_path = _use_config_dir(tmp_path, monkeypatch)

    loaded = config.load_config()

    assert config_path.exists()
    assert loaded["coverage"]["tracked_programs"] == ["MEMORIZATION", "CONSOLIDATION", "TAFSIR"]
    assert loaded["coverage"]["corpus_total_verses"] == 6236
    assert loaded["mastery"]["mirror_program"] == "MEMORIZATION"
    assert loaded["logging"]["level"] == "info"


def test_load_config_fills_missing_sections(tmp_path, monkeypatch):
    config_dir, config_path = _use_config_dir(tmp_path, monkeypatch)
    config_dir.mkdir()
    _write_config(config_path, "[mastery]\nmirror_program = \"consolidation\"\n")

    loaded = config.load_config()

    assert loaded["mastery"]["mirror_program"] == "CONSOLIDATION"
    assert loaded["attendance"]["daily_programs"] == ["MEMORIZATION", "CONSOLIDATION", "REVISION", "READING"]
    assert config.get_config_value("coverage", "corpus_total_verses") == 6236
    assert config.get_config_value("coverage", "missing", "fallback") == "fallback"


def test_environment_overrides_config_file(tmp_path, monkeypatch):
    config_dir, config_path = _use_config_dir(tmp_path, monkeypatch)
    config_dir.mkdir()
    _write_config(config_path, "[coverage]\ntracked_programs = [\"MEMORIZATION\"]\n")
    monkeypatch.setenv("HIFZTRACK_TRACKED_PROGRAMS", "memorization, tafsir")
    monkeypatch.setenv("HIFZTRACK_CORPUS_TOTAL", "100")
    monkeypatch.setenv("HIFZTRACK_LOG_LEVEL", "DEBUG")

    loaded = config.load_config()

    assert loaded["coverage"]["tracked_programs"] == ["MEMORIZATION", "TAFSIR"]
    assert loaded["coverage"]["corpus_total_verses"] == 100
    assert config.configure_logging(loaded) == "debug"
    assert logging.getLogger().level == logging.DEBUG
