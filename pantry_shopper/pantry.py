"""Pantry management: the ingredients a user already has at home."""

import logging
from collections.abc import Iterable

from .config import PANTRY_ITEMS_KEY
from .normalizer import dedupe_names, normalize_ingredient
from .store import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)


def parse_pantry_input(text: str) -> list[str]:
    """Split comma-separated user input into pantry entries."""
    return dedupe_names(part for part in text.split(","))


class PantryStore:
    """Persisted pantry items, one free-text entry each.

    Stored as an ordered list; duplicates (by normalized name) collapse on save.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_pantry_items(self) -> list[str]:
        """Load pantry items. Missing or malformed data reads as empty."""
        items = await read_json(self.store, PANTRY_ITEMS_KEY, [])
        if not isinstance(items, list):
            logger.warning("Ignoring pantry stored as %s", type(items).__name__)
            return []
        return [item for item in items if isinstance(item, str)]

    async def save_pantry_items(self, items: Iterable[str]) -> list[str]:
        """Replace the pantry. Returns what was stored."""
        cleaned = dedupe_names(items)
        await write_json(self.store, PANTRY_ITEMS_KEY, cleaned)
        return cleaned

    async def add_to_pantry(self, items: Iterable[str]) -> list[str]:
        """Add items to the pantry, ignoring ones already there."""
        current = await self.get_pantry_items()
        return await self.save_pantry_items([*current, *items])

    async def remove_from_pantry(self, items: Iterable[str]) -> list[str]:
        """Remove items from the pantry (case-insensitive)."""
        to_remove = {normalize_ingredient(item) for item in items if item is not None}
        current = await self.get_pantry_items()
        return await self.save_pantry_items(
            item for item in current if normalize_ingredient(item) not in to_remove
        )

    async def clear_pantry(self) -> None:
        """Remove every pantry item."""
        await write_json(self.store, PANTRY_ITEMS_KEY, [])
