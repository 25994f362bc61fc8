"""Shopping list aggregation: merge ingredients from recipes into named lists."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .amounts import add_amounts
from .config import DEFAULT_CATEGORY
from .matcher import PantryMatch, missing_items_for_shopping
from .normalizer import display_name, normalize_ingredient
from .recipes import Recipe
from .registry import ShoppingListRegistry

logger = logging.getLogger(__name__)

_ITEM_FIELDS = {"ingredient", "totalAmount", "total_amount", "category", "recipes", "checked"}


@dataclass
class ShoppingListItem:
    """An ingredient on a shopping list, consolidated across recipes."""

    ingredient: str
    total_amount: str = ""
    category: str = DEFAULT_CATEGORY
    recipes: list[str] = field(default_factory=list)
    checked: bool = False
    # Stored fields beyond the five above, written back unchanged
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def key(self) -> str:
        """Merge key: the normalized ingredient name."""
        return normalize_ingredient(self.ingredient)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON form."""
        data = dict(self.extra)
        data.update(
            {
                "ingredient": self.ingredient,
                "totalAmount": self.total_amount,
                "category": self.category,
                "recipes": list(self.recipes),
                "checked": self.checked,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShoppingListItem":
        """Create from persisted JSON; legacy items may lack most fields."""
        amount = data.get("totalAmount", data.get("total_amount"))
        recipes = data.get("recipes") or []
        if isinstance(recipes, str):
            recipes = [recipes]
        return cls(
            ingredient=str(data.get("ingredient") or ""),
            total_amount=str(amount or ""),
            category=data.get("category") or "",
            recipes=[str(r) for r in recipes],
            checked=bool(data.get("checked", False)),
            extra={k: v for k, v in data.items() if k not in _ITEM_FIELDS},
        )

    def __str__(self) -> str:
        parts = []
        if self.total_amount:
            parts.append(self.total_amount)
        parts.append(self.ingredient)
        if self.recipes:
            parts.append(f"({', '.join(self.recipes)})")
        return " ".join(parts)


@dataclass
class ShoppingListSummary:
    """Counts shown above a shopping list."""

    total_items: int
    checked_items: int
    recipe_count: int
    categories: list[str]

    @property
    def remaining_items(self) -> int:
        return self.total_items - self.checked_items


def coerce_item(item: "ShoppingListItem | dict[str, Any]") -> ShoppingListItem:
    """Copy an item, or build one from its persisted dict form."""
    if isinstance(item, ShoppingListItem):
        return ShoppingListItem(
            ingredient=item.ingredient,
            total_amount=item.total_amount,
            category=item.category,
            recipes=list(item.recipes),
            checked=item.checked,
            extra=dict(item.extra),
        )
    return ShoppingListItem.from_dict(item)


def _union_recipes(existing: list[str], incoming: Iterable[str]) -> list[str]:
    """Case-sensitive set union that keeps first-seen order."""
    result = list(existing)
    for name in incoming:
        if name not in result:
            result.append(name)
    return result


def merge_item(existing: ShoppingListItem, incoming: ShoppingListItem) -> None:
    """
    Fold an incoming entry into an existing item with the same key.

    Recipes are unioned. Amounts are summed when the consolidator can; when it
    cannot, the existing amount stays, unless it is blank.
    """
    existing.recipes = _union_recipes(existing.recipes, incoming.recipes)

    merged = add_amounts(existing.total_amount, incoming.total_amount)
    if merged is not None:
        existing.total_amount = merged
    elif not existing.total_amount.strip() and incoming.total_amount:
        existing.total_amount = incoming.total_amount

    if not existing.category and incoming.category:
        existing.category = incoming.category


def merge_shopping_items(
    current: Iterable[ShoppingListItem],
    incoming: Iterable["ShoppingListItem | dict[str, Any]"],
) -> list[ShoppingListItem]:
    """
    Merge incoming entries into a list, one item per normalized ingredient.

    Args:
        current: Items already on the list (kept in order)
        incoming: New entries as ShoppingListItem or persisted-style dicts

    Returns:
        New list: existing items updated in place, unseen ingredients appended
    """
    items = list(current)
    by_key: dict[str, ShoppingListItem] = {}
    for item in items:
        by_key.setdefault(item.key, item)

    for raw in incoming:
        candidate = coerce_item(raw)
        key = candidate.key
        if not key:
            logger.debug("Skipping shopping item without an ingredient name")
            continue

        candidate.recipes = _union_recipes([], candidate.recipes)

        if key in by_key:
            merge_item(by_key[key], candidate)
            continue

        new_item = ShoppingListItem(
            ingredient=display_name(candidate.ingredient),
            total_amount=candidate.total_amount,
            category=candidate.category or DEFAULT_CATEGORY,
            recipes=candidate.recipes,
            checked=False,
            extra=candidate.extra,
        )
        items.append(new_item)
        by_key[key] = new_item

    return items


def recipe_to_shopping_items(recipe: Recipe) -> list[dict[str, Any]]:
    """Shopping entries for every ingredient of a recipe."""
    return [
        {
            "ingredient": display_name(ing.name),
            "totalAmount": ing.amount,
            "category": ing.category,
            "recipes": [recipe.name],
        }
        for ing in recipe.ingredients
    ]


def generate_shopping_list(recipes: Iterable[Recipe]) -> list[ShoppingListItem]:
    """
    Consolidate the ingredients of several recipes into one list.

    Returns:
        Items sorted by category, then ingredient name
    """
    incoming: list[dict[str, Any]] = []
    for recipe in recipes:
        incoming.extend(recipe_to_shopping_items(recipe))

    items = merge_shopping_items([], incoming)
    return sorted(items, key=lambda i: (i.category.lower(), i.ingredient.lower()))


def summarize_shopping_list(
    items: Iterable["ShoppingListItem | dict[str, Any]"],
) -> ShoppingListSummary:
    """Count items, checked items, contributing recipes and categories."""
    coerced = [coerce_item(i) for i in items]
    recipes: set[str] = set()
    categories: set[str] = set()
    for item in coerced:
        recipes.update(item.recipes)
        if item.category:
            categories.add(item.category)

    return ShoppingListSummary(
        total_items=len(coerced),
        checked_items=sum(1 for i in coerced if i.checked),
        recipe_count=len(recipes),
        categories=sorted(categories),
    )


class ShoppingListAggregator:
    """Merge, toggle and prune items of the lists held by a registry.

    Each operation reads a whole list, changes it in memory and writes it
    back. Concurrent calls against the same list lose all but the last write.
    """

    def __init__(self, registry: ShoppingListRegistry):
        self.registry = registry

    async def _resolve(self, list_name: str | None) -> str:
        if list_name is None:
            return await self.registry.get_active_shopping_list_name()
        return list_name

    async def get_shopping_list_by_name(self, list_name: str) -> list[dict[str, Any]]:
        return await self.registry.get_shopping_list_by_name(list_name)

    async def get_items(self, list_name: str | None = None) -> list[ShoppingListItem]:
        """Typed view of a list (the active one by default)."""
        raw = await self.registry.get_shopping_list_by_name(await self._resolve(list_name))
        return [ShoppingListItem.from_dict(d) for d in raw if isinstance(d, dict)]

    async def add_items_to_named_shopping_list(
        self,
        list_name: str,
        items: Iterable["ShoppingListItem | dict[str, Any]"],
    ) -> None:
        """
        Merge items into a named list, creating the list if needed.

        Args:
            list_name: Target list
            items: Entries with ``ingredient`` and optional ``totalAmount``,
                ``category`` and ``recipes``
        """
        raw = await self.registry.get_shopping_list_by_name(list_name)
        current = [ShoppingListItem.from_dict(e) for e in raw if isinstance(e, dict)]
        merged = merge_shopping_items(current, items)

        # Existing items come back first, in order; entries that are not
        # objects are kept where they were
        updated = iter(merged)
        result = [next(updated).to_dict() if isinstance(e, dict) else e for e in raw]
        result.extend(item.to_dict() for item in updated)

        await self.registry.save_shopping_list_by_name(list_name, result)
        logger.debug("List %r now has %d items", list_name, len(result))

    async def add_items_to_shopping_list(
        self, items: Iterable["ShoppingListItem | dict[str, Any]"]
    ) -> None:
        """Merge items into the active list."""
        await self.add_items_to_named_shopping_list(await self._resolve(None), items)

    async def _search_order(self, lists: dict[str, list], list_name: str | None) -> list[str]:
        if list_name is not None:
            return [list_name]
        active = await self.registry.get_active_shopping_list_name()
        return [active] + [name for name in lists if name != active]

    async def toggle_shopping_list_item_checked(
        self, ingredient: str, checked: bool, list_name: str | None = None
    ) -> bool:
        """
        Set the checked flag of an item matched by normalized ingredient name.

        Without ``list_name`` the active list is searched first, then the
        other lists in stored order; the first match is updated.

        Returns:
            True if an item was updated, False if none matched
        """
        key = normalize_ingredient(ingredient)
        lists = await self.registry.get_all_shopping_lists()

        for name in await self._search_order(lists, list_name):
            items = lists.get(name, [])
            for entry in items:
                if isinstance(entry, dict) and normalize_ingredient(
                    str(entry.get("ingredient") or "")
                ) == key:
                    entry["checked"] = checked
                    await self.registry.save_shopping_list_by_name(name, items)
                    return True

        logger.debug("No shopping item %r to toggle", ingredient)
        return False

    async def set_item_amount(
        self, ingredient: str, amount: str, list_name: str | None = None
    ) -> bool:
        """Overwrite the amount of one item. Returns False if it is not on the list."""
        name = await self._resolve(list_name)
        key = normalize_ingredient(ingredient)
        items = await self.registry.get_shopping_list_by_name(name)

        for entry in items:
            if isinstance(entry, dict) and normalize_ingredient(
                str(entry.get("ingredient") or "")
            ) == key:
                entry["totalAmount"] = amount
                await self.registry.save_shopping_list_by_name(name, items)
                return True
        return False

    async def remove_shopping_list_item(self, ingredient: str, list_name: str | None = None) -> bool:
        """Remove one item by ingredient name. Returns False if it was not there."""
        name = await self._resolve(list_name)
        key = normalize_ingredient(ingredient)
        items = await self.registry.get_shopping_list_by_name(name)

        kept = [
            entry
            for entry in items
            if not (
                isinstance(entry, dict)
                and normalize_ingredient(str(entry.get("ingredient") or "")) == key
            )
        ]
        if len(kept) == len(items):
            return False

        await self.registry.save_shopping_list_by_name(name, kept)
        return True

    async def remove_checked_items(self, list_name: str | None = None) -> int:
        """Drop checked items from a list. Returns how many were removed."""
        name = await self._resolve(list_name)
        items = await self.registry.get_shopping_list_by_name(name)
        kept = [e for e in items if not (isinstance(e, dict) and e.get("checked"))]

        removed = len(items) - len(kept)
        if removed:
            await self.registry.save_shopping_list_by_name(name, kept)
        return removed

    async def add_recipes_to_named_shopping_list(
        self,
        list_name: str,
        recipe_ids: Iterable[str],
        find_recipe: Callable[[str], Recipe | None],
    ) -> list[str]:
        """
        Add every ingredient of the given recipes to a list.

        Repeated ids count once. Unknown ids are skipped so the rest still
        get added.

        Returns:
            The ids that could not be found
        """
        incoming: list[dict[str, Any]] = []
        skipped: list[str] = []

        for recipe_id in dict.fromkeys(recipe_ids):
            recipe = find_recipe(recipe_id)
            if recipe is None:
                logger.warning("Recipe %s not found, skipping its ingredients", recipe_id)
                skipped.append(recipe_id)
                continue
            incoming.extend(recipe_to_shopping_items(recipe))

        await self.add_items_to_named_shopping_list(list_name, incoming)
        return skipped

    async def add_missing_to_named_shopping_list(self, list_name: str, match: PantryMatch) -> int:
        """Add a recipe's missing pantry ingredients to a list. Returns the count."""
        items = missing_items_for_shopping(match)
        if not items:
            return 0
        await self.add_items_to_named_shopping_list(list_name, items)
        return len(items)
