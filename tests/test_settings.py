from __future__ import annotations

import os
from pathlib import Path

import pytest

from power_sticky.core.settings import load_settings

_VARS = [
    "POWER_STICKY_DATA_DIR",
    "POWER_STICKY_STORE_FILE",
    "POWER_STICKY_SAVE_DEBOUNCE_MS",
    "POWER_STICKY_SAVE_RETRIES",
    "POWER_STICKY_LOG_LEVEL",
    "POWER_STICKY_AUTOSTART_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.data_dir == Path("~/.power-sticky").expanduser()
    assert settings.store_path == settings.data_dir / "power-sticky.json"
    assert settings.save_debounce_s == 0.5
    assert settings.save_retries == 1
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("POWER_STICKY_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("POWER_STICKY_STORE_FILE", "notes.json")
    monkeypatch.setenv("POWER_STICKY_SAVE_DEBOUNCE_MS", "250")
    monkeypatch.setenv("POWER_STICKY_LOG_LEVEL", "debug")

    settings = load_settings()
    assert settings.store_path == tmp_path / "notes.json"
    assert settings.save_debounce_s == 0.25
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("POWER_STICKY_SAVE_DEBOUNCE_MS", "soon"),
        ("POWER_STICKY_SAVE_DEBOUNCE_MS", "-1"),
        ("POWER_STICKY_SAVE_RETRIES", "-2"),
        ("POWER_STICKY_LOG_LEVEL", "chatty"),
        ("POWER_STICKY_STORE_FILE", "../escape.json"),
    ],
)
def test_invalid_values_raise(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_settings()


def test_dotenv_file_is_read(tmp_path) -> None:
    (tmp_path / ".env").write_text("POWER_STICKY_SAVE_RETRIES=3\n", encoding="utf-8")
    settings = load_settings()
    assert settings.save_retries == 3
    os.environ.pop("POWER_STICKY_SAVE_RETRIES", None)
