"""
JSON File Stores - the ads array as a single JSON document on disk.

Two flavours share one file format:

- JsonFileAdStore reads and writes with blocking calls directly in the
  request coroutine. Fine for a single low-traffic worker.
- AsyncJsonFileAdStore runs the same blocking calls in a worker thread
  so the event loop keeps serving other requests during disk I/O.

Writes go to a temporary file in the same directory which is then
renamed over the target, so a crash mid-write leaves the previous
document intact.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..core.exceptions import StorageError
from .base import AdStore

logger = logging.getLogger(__name__)


def read_ads_file(path: Path) -> list[dict[str, Any]]:
    """
    Read the ads array from ``path``.

    A missing file is an empty board. Anything that is not a JSON
    array is reported as corrupt rather than silently discarded.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}") from e

    if not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt ads file {path}: {e}") from e

    if not isinstance(data, list):
        raise StorageError(
            f"Corrupt ads file {path}: expected a JSON array, got {type(data).__name__}"
        )
    return data


def write_ads_file(path: Path, ads: list[dict[str, Any]]) -> None:
    """Atomically replace ``path`` with the JSON encoding of ``ads``."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(ads, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise StorageError(f"Cannot write {path}: {e}") from e


class JsonFileAdStore(AdStore):
    """Ads stored in a JSON file, accessed with blocking I/O."""

    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def load_all(self) -> list[dict[str, Any]]:
        return read_ads_file(self.path)

    async def save_all(self, ads: list[dict[str, Any]]) -> None:
        write_ads_file(self.path, ads)
        logger.debug(f"Wrote {len(ads)} ads to {self.path}")

    async def health_check(self) -> bool:
        directory = self.path.parent
        if directory.exists():
            return os.access(directory, os.W_OK)
        # Created on first write
        return True


class AsyncJsonFileAdStore(JsonFileAdStore):
    """Ads stored in a JSON file, disk I/O offloaded to a thread."""

    name = "async-file"

    async def load_all(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(read_ads_file, self.path)

    async def save_all(self, ads: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(write_ads_file, self.path, ads)
        logger.debug(f"Wrote {len(ads)} ads to {self.path}")
