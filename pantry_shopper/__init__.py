"""Pantry Shopper - pantry matching and shopping list consolidation."""

__version__ = "1.0.0"

from .aggregator import (
    ShoppingListAggregator,
    ShoppingListItem,
    generate_shopping_list,
    merge_shopping_items,
)
from .amounts import add_amounts, format_amount, parse_leading_amount
from .export import export_shopping_list, shopping_list_to_csv
from .matcher import PantryMatch, match_recipes_by_pantry
from .normalizer import normalize_ingredient
from .pantry import PantryStore
from .recipes import Recipe, RecipeCache, RecipeIngredient, load_recipes_dir
from .registry import ShoppingListRegistry
from .store import JsonFileStore, KeyValueStore, MemoryStore, StorageError

__all__ = [
    "normalize_ingredient",
    "match_recipes_by_pantry",
    "PantryMatch",
    "add_amounts",
    "parse_leading_amount",
    "format_amount",
    "ShoppingListItem",
    "ShoppingListAggregator",
    "merge_shopping_items",
    "generate_shopping_list",
    "ShoppingListRegistry",
    "PantryStore",
    "Recipe",
    "RecipeIngredient",
    "RecipeCache",
    "load_recipes_dir",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "StorageError",
    "shopping_list_to_csv",
    "export_shopping_list",
]
