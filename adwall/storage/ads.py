"""
Ad Repository - ad operations on top of a store.

Every operation is a read-modify-write of the whole ads array:
load all ads, change the list, save all ads. Writes are serialised by
an asyncio.Lock so two requests in the same process cannot interleave
and lose an update. Multiple processes writing the same store are not
coordinated.
"""

import asyncio
import logging
import math
from typing import Any, Callable, Optional

from ..core.utils import generate_ad_id
from .base import AdStore

logger = logging.getLogger(__name__)


def _matches(ad: Any, ad_id: str) -> bool:
    """IDs compare as strings; records without an id never match."""
    if not isinstance(ad, dict) or ad.get("id") is None:
        return False
    return str(ad["id"]) == ad_id


def _find_index(ads: list[dict[str, Any]], ad_id: str) -> int:
    """Position of the ad with ``ad_id`` or -1."""
    for index, ad in enumerate(ads):
        if _matches(ad, ad_id):
            return index
    return -1


def _as_count(value: Any) -> int | float:
    """Read a stored click counter; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
        return int(value) if value.is_integer() else _as_count(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    return 0


class AdRepository:
    """
    CRUD and click counting for ads.

    Ads are untyped dictionaries. The repository only owns three
    fields: ``id`` (server assigned, immutable), ``clicked`` and
    ``videos`` (defaults for new ads).
    """

    def __init__(
        self,
        store: AdStore,
        id_factory: Callable[[], str] = generate_ad_id
    ):
        self.store = store
        self.id_factory = id_factory
        self._lock = asyncio.Lock()

    async def list_ads(self) -> list[dict[str, Any]]:
        return await self.store.load_all()

    async def get_ad(self, ad_id: str) -> Optional[dict[str, Any]]:
        ads = await self.store.load_all()
        index = _find_index(ads, ad_id)
        return ads[index] if index != -1 else None

    async def create_ad(self, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Append a new ad.

        Client fields may override the ``clicked`` and ``videos``
        defaults; ``id`` is always generated.
        """
        async with self._lock:
            ads = await self.store.load_all()
            ad = {"id": "", "clicked": 0, "videos": [], **fields}
            ad["id"] = self.id_factory()
            ads.append(ad)
            await self.store.save_all(ads)

        logger.info(f"Created ad {ad['id']}")
        return ad

    async def update_ad(
        self,
        ad_id: str,
        fields: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Shallow-merge ``fields`` into the ad.

        Returns:
            The merged ad, or None if no ad has that ID
        """
        async with self._lock:
            ads = await self.store.load_all()
            index = _find_index(ads, ad_id)
            if index == -1:
                return None

            current = ads[index]
            merged = {**current, **fields}
            merged["id"] = current.get("id")
            ads[index] = merged
            await self.store.save_all(ads)

        logger.info(f"Updated ad {ad_id}")
        return merged

    async def delete_ad(self, ad_id: str) -> bool:
        """
        Remove the ad.

        Returns:
            True if an ad was removed, False if none matched
        """
        async with self._lock:
            ads = await self.store.load_all()
            remaining = [ad for ad in ads if not _matches(ad, ad_id)]
            if len(remaining) == len(ads):
                return False
            await self.store.save_all(remaining)

        logger.info(f"Deleted ad {ad_id}")
        return True

    async def record_click(self, ad_id: str) -> Optional[dict[str, Any]]:
        """
        Increment the ad's ``clicked`` counter by one.

        Returns:
            The updated ad, or None if no ad has that ID
        """
        async with self._lock:
            ads = await self.store.load_all()
            index = _find_index(ads, ad_id)
            if index == -1:
                return None

            ad = ads[index]
            ad["clicked"] = _as_count(ad.get("clicked")) + 1
            await self.store.save_all(ads)

        logger.debug(f"Ad {ad_id} clicked ({ad['clicked']} total)")
        return ad
