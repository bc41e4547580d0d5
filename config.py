import logging
import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".hifztrack"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_TRACKED_PROGRAMS = ["MEMORIZATION", "CONSOLIDATION", "TAFSIR"]
DEFAULT_DAILY_PROGRAMS = ["MEMORIZATION", "CONSOLIDATION", "REVISION", "READING"]
DEFAULT_CORPUS_TOTAL = 6236


def _as_list(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [part.strip().upper() for part in value.split(",") if part.strip()]
    return [str(part).upper() for part in value]


def load_config() -> Dict[str, Any]:
    """Load config from ~/.hifztrack/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    coverage_cfg = config.get("coverage", {})
    config["coverage"] = {
        "tracked_programs": _as_list(
            os.getenv("HIFZTRACK_TRACKED_PROGRAMS", coverage_cfg.get("tracked_programs")),
            DEFAULT_TRACKED_PROGRAMS,
        ),
        "corpus_total_verses": int(os.getenv(
            "HIFZTRACK_CORPUS_TOTAL",
            coverage_cfg.get("corpus_total_verses", DEFAULT_CORPUS_TOTAL),
        )),
    }
    attendance_cfg = config.get("attendance", {})
    config["attendance"] = {
        "daily_programs": _as_list(attendance_cfg.get("daily_programs"), DEFAULT_DAILY_PROGRAMS),
    }
    mastery_cfg = config.get("mastery", {})
    config["mastery"] = {
        "mirror_program": str(mastery_cfg.get("mirror_program", "MEMORIZATION")).upper(),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("HIFZTRACK_LOG_LEVEL", logging_cfg.get("level", "info")).lower(),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('coverage', 'tracked_programs')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value


def configure_logging(config: Optional[Dict[str, Any]] = None) -> str:
    """Configure root logging from the [logging] section and return the level name."""
    if config is None:
        config = load_config()
    level_name = config.get("logging", {}).get("level", "info")
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    return level_name
