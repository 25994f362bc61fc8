"""Shared fixtures for pantry-shopper tests."""

import json

import pytest

from pantry_shopper.aggregator import ShoppingListAggregator
from pantry_shopper.pantry import PantryStore
from pantry_shopper.recipes import Recipe, RecipeIngredient
from pantry_shopper.registry import ShoppingListRegistry
from pantry_shopper.store import MemoryStore


def make_recipe(recipe_id: str, name: str | None = None, ingredients=()) -> Recipe:
    """Create a Recipe from (name, amount, category) tuples or plain names."""
    parsed = []
    for ing in ingredients:
        if isinstance(ing, str):
            parsed.append(RecipeIngredient(name=ing))
        else:
            parsed.append(RecipeIngredient(*ing))
    return Recipe(id=recipe_id, name=name or recipe_id, ingredients=parsed)


@pytest.fixture
def memory_store():
    """Fresh in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def registry(memory_store):
    return ShoppingListRegistry(memory_store)


@pytest.fixture
def aggregator(registry):
    return ShoppingListAggregator(registry)


@pytest.fixture
def pantry_store(memory_store):
    return PantryStore(memory_store)


@pytest.fixture
def sample_recipes() -> list[Recipe]:
    """A few recipes with overlapping ingredients."""
    return [
        make_recipe(
            "r1",
            "Fried Rice",
            [
                ("rice", "2 cups", "grain"),
                ("onion", "1", "vegetable"),
                ("salt", "1 tsp", "spice"),
            ],
        ),
        make_recipe(
            "r2",
            "Tomato Soup",
            [
                ("tomato", "4", "vegetable"),
                ("onion", "1/2", "vegetable"),
                ("cream", "1 cup", "dairy"),
                ("salt", "to taste", "spice"),
            ],
        ),
        make_recipe(
            "r3",
            "Plain Rice",
            [("rice", "1 cups", "grain")],
        ),
    ]


@pytest.fixture
def country_document():
    """A country recipe document as stored on disk."""
    return {
        "country": "Italy",
        "flag": "🇮🇹",
        "recipes": [
            {
                "id": "it-1",
                "name": "Bruschetta",
                "cuisine": "Italian",
                "mealType": ["lunch"],
                "image": "bruschetta.jpg",
                "prepTime": 10,
                "cookTime": 5,
                "servings": 4,
                "difficulty": "easy",
                "ingredients": [
                    {"name": "Bread", "amount": "4 slices", "category": "grain"},
                    {"name": "Tomato", "amount": "2", "category": "vegetable"},
                    {"name": "Basil", "amount": "1 handful", "category": "spice"},
                ],
                "instructions": ["Toast bread", "Top with tomato"],
                "nutrition": {
                    "calories": 200,
                    "protein": 5,
                    "carbs": 30,
                    "fat": 6,
                    "fiber": 2,
                    "sugar": 3,
                    "sodium": 300,
                },
                "tags": ["vegetarian"],
                "rating": 4.5,
                "reviews": 12,
            }
        ],
    }


@pytest.fixture
def recipes_dir(tmp_path, country_document):
    """Directory holding one country recipe file."""
    directory = tmp_path / "recipes"
    directory.mkdir()
    with open(directory / "italy.json", "w", encoding="utf-8") as f:
        json.dump(country_document, f)
    return directory


@pytest.fixture
def recipe_factory():
    """Build recipes inline: recipe_factory("r1", "Name", [("rice", "1 cup", "grain")])."""
    return make_recipe
