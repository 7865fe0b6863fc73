"""
Base Store - the read-modify-write contract every backend implements.

A store only knows how to load the whole ads array and how to persist
the whole ads array. Everything else (lookups, merges, counters) lives
in the repository on top of it, so swapping backends never touches
the routes.
"""

from abc import ABC, abstractmethod
from typing import Any


class AdStore(ABC):
    """Abstract base class for ad persistence backends"""

    name: str = "abstract"

    @abstractmethod
    async def load_all(self) -> list[dict[str, Any]]:
        """
        Load every ad.

        Returns:
            The ads in insertion order; an empty list when nothing
            has been stored yet

        Raises:
            StorageError: If the stored document is unreadable
        """

    @abstractmethod
    async def save_all(self, ads: list[dict[str, Any]]) -> None:
        """
        Replace the stored ads with ``ads``.

        Raises:
            StorageError: If the document cannot be written
        """

    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release any resources held by the backend."""
