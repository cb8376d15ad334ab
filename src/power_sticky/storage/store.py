"""Durable store adapters for the snapshot document."""

from __future__ import annotations

import asyncio
import os
import uuid
from pathlib import Path
from typing import Protocol


class DurableStore(Protocol):
    async def read(self) -> str | None: ...

    async def write(self, payload: str) -> None: ...


class JsonFileStore:
    """One UTF-8 JSON file, replaced whole on every write."""

    def __init__(self, path: Path) -> None:
        self._path = path

    async def read(self) -> str | None:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, payload: str) -> None:
        await asyncio.to_thread(self._write_sync, payload)

    def _read_sync(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write_sync(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f".{self._path.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        finally:
            tmp_path.unlink(missing_ok=True)


class MemoryStore:
    def __init__(self, payload: str | None = None) -> None:
        self.payload = payload
        self.writes = 0

    async def read(self) -> str | None:
        return self.payload

    async def write(self, payload: str) -> None:
        self.payload = payload
        self.writes += 1
