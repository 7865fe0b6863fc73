"""
Storage module: ad persistence backends, the ad repository and
video upload storage.
"""

import logging

from ..core.config import Settings
from .ads import AdRepository
from .base import AdStore
from .json_file import AsyncJsonFileAdStore, JsonFileAdStore
from .memory import MemoryAdStore
from .upstash import UpstashAdStore
from .uploads import VideoUploadStorage

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> AdStore:
    """
    Create the store selected by ``settings.storage.backend``.

    Args:
        settings: Application settings

    Returns:
        A ready-to-use AdStore
    """
    backend = settings.storage.backend

    if backend == "file":
        store = JsonFileAdStore(settings.storage.data_file)
    elif backend == "async-file":
        store = AsyncJsonFileAdStore(settings.storage.data_file)
    elif backend == "upstash":
        store = UpstashAdStore(settings.upstash)
    else:
        store = MemoryAdStore()

    logger.info(f"Using '{store.name}' ad store")
    return store


__all__ = [
    "AdRepository",
    "AdStore",
    "AsyncJsonFileAdStore",
    "JsonFileAdStore",
    "MemoryAdStore",
    "UpstashAdStore",
    "VideoUploadStorage",
    "build_store"
]
