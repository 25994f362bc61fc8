"""Recipe data source: country recipe documents and an expiring in-memory cache."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

INGREDIENT_CATEGORIES = {"protein", "vegetable", "grain", "dairy", "spice", "other", "nut"}
DIFFICULTIES = {"easy", "medium", "hard"}

# Fields mapped onto Recipe attributes; anything else is kept in Recipe.extra
_KNOWN_FIELDS = {
    "id",
    "name",
    "cuisine",
    "ingredients",
    "mealType",
    "servings",
    "difficulty",
    "tags",
    "rating",
}


class RecipeDataError(Exception):
    """Exception raised for unreadable or invalid recipe documents."""

    pass


def _list_field(data: dict[str, Any], key: str) -> list:
    """Return an optional array field, rejecting anything that is not a list."""
    value = data.get(key, [])
    if not isinstance(value, list):
        raise RecipeDataError(
            f"Recipe {data.get('id')} field {key!r} must be a list, got {type(value).__name__}"
        )
    return value


@dataclass
class RecipeIngredient:
    """One entry of a recipe's ingredient list."""

    name: str
    amount: str = ""
    category: str = "other"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecipeIngredient":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise RecipeDataError(f"Invalid ingredient entry: {data!r}")

        category = data.get("category") or "other"
        if category not in INGREDIENT_CATEGORIES:
            logger.debug("Unknown category %r for %s, using 'other'", category, data["name"])
            category = "other"

        return cls(
            name=data["name"],
            amount=str(data.get("amount") or ""),
            category=category,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "amount": self.amount, "category": self.category}


@dataclass
class Recipe:
    """A read-only recipe from the static dataset."""

    id: str
    name: str
    cuisine: str = ""
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    meal_type: list[str] = field(default_factory=list)
    servings: int | None = None
    difficulty: str | None = None
    tags: list[str] = field(default_factory=list)
    rating: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def ingredient_names(self) -> list[str]:
        return [ing.name for ing in self.ingredients]

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to its JSON document form."""
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "name": self.name,
                "cuisine": self.cuisine,
                "mealType": list(self.meal_type),
                "servings": self.servings,
                "difficulty": self.difficulty,
                "ingredients": [ing.to_dict() for ing in self.ingredients],
                "tags": list(self.tags),
                "rating": self.rating,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from its JSON document form."""
        if not isinstance(data, dict):
            raise RecipeDataError(f"Recipe must be an object, got {type(data).__name__}")
        if data.get("id") is None or not data.get("name"):
            raise RecipeDataError(f"Recipe is missing id or name: {data.get('id')!r}")

        difficulty = data.get("difficulty")
        if difficulty is not None and difficulty not in DIFFICULTIES:
            raise RecipeDataError(f"Recipe {data['id']} has invalid difficulty {difficulty!r}")

        ingredients = [RecipeIngredient.from_dict(ing) for ing in _list_field(data, "ingredients")]

        return cls(
            id=str(data["id"]),
            name=data["name"],
            cuisine=data.get("cuisine", ""),
            ingredients=ingredients,
            meal_type=list(_list_field(data, "mealType")),
            servings=data.get("servings"),
            difficulty=difficulty,
            tags=list(_list_field(data, "tags")),
            rating=data.get("rating"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )


@dataclass
class CountryRecipes:
    """One country document: ``{country, flag, recipes}``."""

    country: str
    flag: str
    recipes: list[Recipe] = field(default_factory=list)


def load_country_file(path: str | Path) -> CountryRecipes:
    """
    Load a single country recipe document.

    Raises:
        RecipeDataError: If the file cannot be read or does not match the schema
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RecipeDataError(f"Failed to load {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("recipes"), list):
        raise RecipeDataError(f"{path} has no recipes array")

    return CountryRecipes(
        country=data.get("country", path.stem),
        flag=data.get("flag", ""),
        recipes=[Recipe.from_dict(r) for r in data["recipes"]],
    )


def load_recipes_dir(directory: str | Path) -> list[Recipe]:
    """
    Load every ``*.json`` country document in a directory.

    Files are read in name order. A broken file is logged and skipped so one
    bad country does not hide the rest of the dataset.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Recipe directory not found: %s", directory)
        return []

    recipes: list[Recipe] = []
    for path in sorted(directory.glob("*.json")):
        try:
            recipes.extend(load_country_file(path).recipes)
        except RecipeDataError as e:
            logger.error("Skipping recipe file: %s", e)
    return recipes


class RecipeCache:
    """Expiring cache around a recipe loader.

    Args:
        loader: Callable returning the full recipe list
        ttl: Seconds a loaded list stays valid
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        loader: Callable[[], list[Recipe]],
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl
        self._clock = clock
        self._recipes: list[Recipe] | None = None
        self._loaded_at: float | None = None

    @property
    def is_fresh(self) -> bool:
        if self._recipes is None or self._loaded_at is None:
            return False
        return (self._clock() - self._loaded_at) < self._ttl

    def get_or_load(self) -> list[Recipe]:
        """Return cached recipes, reloading when the cache is empty or expired."""
        if self.is_fresh:
            assert self._recipes is not None
            return self._recipes

        recipes = self._loader()
        self._recipes = recipes
        self._loaded_at = self._clock()
        logger.debug("Loaded %d recipes into cache", len(recipes))
        return recipes

    def invalidate(self) -> None:
        """Drop cached recipes; the next read reloads."""
        self._recipes = None
        self._loaded_at = None

    def find_by_id(self, recipe_id: str) -> Recipe | None:
        for recipe in self.get_or_load():
            if recipe.id == recipe_id:
                return recipe
        return None
