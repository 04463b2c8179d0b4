"""
appstore_leads/config.py

Environment-driven runtime settings for the App Store crawler.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
)


ENV_FILENAMES = (".env", ".env.local")


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if line.startswith("#"):
        return None
    key, separator, value = line.partition("=")
    key = key.strip()
    if not separator or not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path | None = None) -> None:
    """
    Seed `os.environ` with crawler settings from dotenv files under `root`.

    Files are read in `ENV_FILENAMES` order and missing ones are skipped.
    A variable already set in the environment, by the shell or by an
    earlier file, keeps its value.
    """

    base = root or _project_root()
    for env_path in (base / name for name in ENV_FILENAMES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Read the dotenv files the first time any setting is looked up.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (Path.cwd() / candidate).resolve()


@dataclass(frozen=True)
class CrawlSettings:
    """
    Runtime settings for App Store crawling.
    """

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 15.0
    batch_size: int = 5
    batch_delay_seconds: float = 3.0
    batch_delay_jitter_seconds: float = 2.0
    input_path: str = "input/apps.csv"
    ignore_path: str = "input/ignore.csv"
    output_dir: str = "output"
    email_columns: int = 10
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_crawl_settings() -> CrawlSettings:
    """
    Return cached crawl settings from environment variables.
    """

    return CrawlSettings(
        user_agent=_get_str_env("APPSTORE_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=max(1.0, _get_float_env("APPSTORE_TIMEOUT_SECONDS", 15.0)),
        batch_size=max(1, _get_int_env("APPSTORE_BATCH_SIZE", 5)),
        batch_delay_seconds=max(0.0, _get_float_env("APPSTORE_BATCH_DELAY_SECONDS", 3.0)),
        batch_delay_jitter_seconds=max(
            0.0,
            _get_float_env("APPSTORE_BATCH_DELAY_JITTER_SECONDS", 2.0),
        ),
        input_path=str(_resolve_path(_get_str_env("APPSTORE_INPUT_PATH", "input/apps.csv"))),
        ignore_path=str(_resolve_path(_get_str_env("APPSTORE_IGNORE_PATH", "input/ignore.csv"))),
        output_dir=str(_resolve_path(_get_str_env("APPSTORE_OUTPUT_DIR", "output"))),
        email_columns=max(1, _get_int_env("APPSTORE_EMAIL_COLUMNS", 10)),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
