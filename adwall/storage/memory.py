"""
In-memory store. Ads live in the process and vanish on restart.
"""

import copy
import logging
from typing import Any, Optional

from .base import AdStore

logger = logging.getLogger(__name__)


class MemoryAdStore(AdStore):
    """
    Keeps the ads array in a process-local list.

    Loads and saves deep-copy the data so a caller mutating what it
    loaded never changes the stored state without calling save_all.
    """

    name = "memory"

    def __init__(self, initial: Optional[list[dict[str, Any]]] = None):
        self._ads: list[dict[str, Any]] = copy.deepcopy(initial or [])

    async def load_all(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._ads)

    async def save_all(self, ads: list[dict[str, Any]]) -> None:
        self._ads = copy.deepcopy(ads)
        logger.debug(f"Stored {len(self._ads)} ads in memory")
