# src/tictac/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time: every value has a local default.
- Timer thresholds and retention are policy constants, so they live here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TICTAC"

STORAGE_KINDS = ("sqlite", "json", "firebase", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    storage: str
    data_dir: Path
    db_path: Path
    firebase_url: str
    firebase_root: str
    firebase_timeout_seconds: float

    # ---- Timer policy ----
    timer_warn_seconds: int
    timer_stop_seconds: int
    watchdog_interval_seconds: float

    # ---- Board policy ----
    retention_days: int
    renumber_epsilon: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tictac").strip() or "tictac"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        storage = _env(_k("STORAGE"), "sqlite").strip().lower()
        if storage not in STORAGE_KINDS:
            storage = "sqlite"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tictac"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "board.sqlite3")

        firebase_url = _env(_k("FIREBASE_URL"), "").strip().rstrip("/")
        firebase_root = _env(_k("FIREBASE_ROOT"), "timetracker").strip().strip("/") or "timetracker"
        firebase_timeout_seconds = _env_float(_k("FIREBASE_TIMEOUT_SECONDS"), 10.0)

        timer_warn_seconds = _env_int(_k("TIMER_WARN_SECONDS"), 9000)
        timer_stop_seconds = _env_int(_k("TIMER_STOP_SECONDS"), 10800)
        # the warning must fire before the hard cap
        if timer_warn_seconds >= timer_stop_seconds:
            timer_warn_seconds = max(0, timer_stop_seconds - 1)
        watchdog_interval_seconds = max(0.1, _env_float(_k("WATCHDOG_INTERVAL_SECONDS"), 1.0))

        retention_days = max(0, _env_int(_k("RETENTION_DAYS"), 5))
        renumber_epsilon = _env_float(_k("RENUMBER_EPSILON"), 1e-6)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            storage=storage,
            data_dir=data_dir,
            db_path=db_path,
            firebase_url=firebase_url,
            firebase_root=firebase_root,
            firebase_timeout_seconds=firebase_timeout_seconds,
            timer_warn_seconds=timer_warn_seconds,
            timer_stop_seconds=timer_stop_seconds,
            watchdog_interval_seconds=watchdog_interval_seconds,
            retention_days=retention_days,
            renumber_epsilon=renumber_epsilon,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
