"""Named shopping lists and the active-list pointer."""

import logging
from typing import Any

from .config import (
    ACTIVE_SHOPPING_LIST_KEY,
    DEFAULT_LIST_NAME,
    LEGACY_SHOPPING_LIST_KEY,
    SHOPPING_LISTS_KEY,
)
from .store import KeyValueStore, StorageError, read_json, write_json

logger = logging.getLogger(__name__)

ShoppingLists = dict[str, list[dict[str, Any]]]


class ShoppingListRegistry:
    """
    Persisted mapping of list name to shopping items, plus the active list.

    Reads never raise: missing keys, malformed JSON and failed store reads
    all come back empty. Store write failures propagate as StorageError.
    Every mutation is a whole-mapping read-modify-write, so callers must
    await one write before issuing the next.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def _save_all(self, lists: ShoppingLists) -> None:
        await write_json(self.store, SHOPPING_LISTS_KEY, lists)

    async def _migrate_legacy(self) -> ShoppingLists:
        """Import the pre-named-lists single list as "Default", if there is one."""
        legacy = await read_json(self.store, LEGACY_SHOPPING_LIST_KEY, None)
        if not isinstance(legacy, list):
            return {}

        lists: ShoppingLists = {DEFAULT_LIST_NAME: legacy}
        try:
            await self._save_all(lists)
        except StorageError as e:
            # Still serve the legacy items; migration is retried on the next read
            logger.error("Could not persist migrated shopping list: %s", e)
            return lists

        logger.info("Migrated %d legacy shopping items into %r", len(legacy), DEFAULT_LIST_NAME)
        return lists

    async def get_all_shopping_lists(self) -> ShoppingLists:
        """
        Get every named list.

        The first read on a store without named lists migrates legacy data.
        Once the named-lists key exists the legacy key is never read again.
        """
        raw = await read_json(self.store, SHOPPING_LISTS_KEY, None)

        if raw is None:
            return await self._migrate_legacy()

        if not isinstance(raw, dict):
            logger.warning("Ignoring shopping lists stored as %s", type(raw).__name__)
            return {}

        return {
            str(name): items if isinstance(items, list) else [] for name, items in raw.items()
        }

    async def list_names(self) -> list[str]:
        """Sorted names of all lists."""
        return sorted(await self.get_all_shopping_lists())

    async def get_shopping_list_by_name(self, name: str) -> list[dict[str, Any]]:
        """Items of a named list, or an empty list if the name does not exist."""
        lists = await self.get_all_shopping_lists()
        return lists.get(name, [])

    async def save_shopping_list_by_name(self, name: str, items: list[dict[str, Any]]) -> None:
        """Replace the contents of a list, creating it if needed."""
        lists = await self.get_all_shopping_lists()
        lists[name] = list(items)
        await self._save_all(lists)

    async def create_shopping_list(self, name: str) -> None:
        """Add an empty list. An existing list of the same name is left alone."""
        lists = await self.get_all_shopping_lists()
        if name in lists:
            return
        lists[name] = []
        await self._save_all(lists)

    async def rename_shopping_list(self, old_name: str, new_name: str) -> None:
        """
        Move a list's contents to a new name.

        An existing list under ``new_name`` is overwritten. The active pointer
        follows the rename.
        """
        if old_name == new_name:
            return

        lists = await self.get_all_shopping_lists()
        if old_name not in lists:
            logger.debug("Rename skipped, no list named %r", old_name)
            return

        lists[new_name] = lists.pop(old_name)
        await self._save_all(lists)

        if await self.get_active_shopping_list_name() == old_name:
            await self.set_active_shopping_list_name(new_name)

    async def delete_shopping_list(self, name: str) -> None:
        """
        Remove a list.

        Deleting the active list moves the pointer back to "Default",
        creating an empty "Default" list if there is none.
        """
        lists = await self.get_all_shopping_lists()
        was_active = await self.get_active_shopping_list_name() == name

        if name not in lists and not was_active:
            return

        lists.pop(name, None)
        if was_active:
            lists.setdefault(DEFAULT_LIST_NAME, [])

        await self._save_all(lists)

        if was_active:
            await self.set_active_shopping_list_name(DEFAULT_LIST_NAME)

    async def get_active_shopping_list_name(self) -> str:
        """Name of the active list, "Default" if none was ever set."""
        name = await read_json(self.store, ACTIVE_SHOPPING_LIST_KEY, None)
        if not isinstance(name, str) or not name:
            return DEFAULT_LIST_NAME
        return name

    async def set_active_shopping_list_name(self, name: str) -> None:
        await write_json(self.store, ACTIVE_SHOPPING_LIST_KEY, name)

    async def get_shopping_list(self) -> list[dict[str, Any]]:
        """Items of the active list."""
        return await self.get_shopping_list_by_name(await self.get_active_shopping_list_name())

    async def save_shopping_list(self, items: list[dict[str, Any]]) -> None:
        """Replace the contents of the active list."""
        await self.save_shopping_list_by_name(await self.get_active_shopping_list_name(), items)

    async def clear_shopping_list(self, name: str | None = None) -> None:
        """Empty a list (the active one by default) without removing it."""
        if name is None:
            name = await self.get_active_shopping_list_name()
        await self.save_shopping_list_by_name(name, [])
