"""Settings loader for Power Sticky."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    store_file: str
    save_debounce_s: float
    save_retries: int
    log_level: str
    autostart_dir: Path

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_file


def load_settings() -> Settings:
    load_dotenv(find_dotenv(usecwd=True))
    data_dir = Path(
        os.environ.get("POWER_STICKY_DATA_DIR", "~/.power-sticky")
    ).expanduser()
    store_file = os.environ.get("POWER_STICKY_STORE_FILE", "power-sticky.json")
    if not store_file or Path(store_file).name != store_file:
        raise ValueError(f"Invalid store file name: {store_file!r}")
    save_debounce_ms = _parse_int(
        os.environ.get("POWER_STICKY_SAVE_DEBOUNCE_MS", "500"),
        "POWER_STICKY_SAVE_DEBOUNCE_MS",
    )
    if save_debounce_ms < 0:
        raise ValueError("POWER_STICKY_SAVE_DEBOUNCE_MS must not be negative")
    save_retries = _parse_int(
        os.environ.get("POWER_STICKY_SAVE_RETRIES", "1"), "POWER_STICKY_SAVE_RETRIES"
    )
    if save_retries < 0:
        raise ValueError("POWER_STICKY_SAVE_RETRIES must not be negative")
    log_level = _parse_log_level(
        os.environ.get("POWER_STICKY_LOG_LEVEL", "WARNING"), "POWER_STICKY_LOG_LEVEL"
    )
    autostart_dir = Path(
        os.environ.get("POWER_STICKY_AUTOSTART_DIR", "~/.config/autostart")
    ).expanduser()

    return Settings(
        data_dir=data_dir,
        store_file=store_file,
        save_debounce_s=save_debounce_ms / 1000,
        save_retries=save_retries,
        log_level=log_level,
        autostart_dir=autostart_dir,
    )


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {name}: {value}") from exc


def _parse_log_level(value: str, name: str) -> str:
    normalized = value.strip().upper()
    if normalized not in _LOG_LEVELS:
        raise ValueError(f"Invalid log level for {name}: {value}")
    return normalized
