"""Recipe to pantry matching logic."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_CATEGORY
from .normalizer import display_name, normalize_ingredient
from .recipes import Recipe

# Regional names for the same ingredient. Pantry terms are expanded with these
# before matching, so "coriander" in the pantry satisfies "cilantro".
INGREDIENT_SYNONYMS: dict[str, list[str]] = {
    "cilantro": ["coriander"],
    "coriander": ["cilantro"],
    "scallion": ["green onion", "spring onion"],
    "green onion": ["scallion", "spring onion"],
    "aubergine": ["eggplant"],
    "eggplant": ["aubergine"],
    "courgette": ["zucchini"],
    "zucchini": ["courgette"],
    "chickpea": ["garbanzo"],
    "garbanzo": ["chickpea"],
    "bell pepper": ["capsicum"],
    "capsicum": ["bell pepper"],
    "parmesan": ["parmesan cheese", "parm"],
}


@dataclass
class PantryMatch:
    """How well the pantry covers one recipe."""

    recipe: Recipe
    matched_ingredient_names: list[str] = field(default_factory=list)
    missing_ingredient_names: list[str] = field(default_factory=list)
    match_percent: int = 0

    @property
    def recipe_id(self) -> str:
        return self.recipe.id

    @property
    def matched_count(self) -> int:
        return len(self.matched_ingredient_names)

    @property
    def missing_count(self) -> int:
        return len(self.missing_ingredient_names)

    @property
    def total_count(self) -> int:
        return self.matched_count + self.missing_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipeId": self.recipe_id,
            "recipeName": self.recipe.name,
            "matchedIngredientNames": list(self.matched_ingredient_names),
            "missingIngredientNames": list(self.missing_ingredient_names),
            "missingCount": self.missing_count,
            "matchPercent": self.match_percent,
        }


def expand_pantry_terms(terms: Iterable[str]) -> list[str]:
    """Add known synonyms to normalized pantry terms, keeping first-seen order."""
    expanded: list[str] = []
    for term in terms:
        for candidate in [term, *INGREDIENT_SYNONYMS.get(term, [])]:
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def is_ingredient_in_pantry(ingredient_name: str, pantry_terms: Iterable[str]) -> bool:
    """
    Check an ingredient against normalized pantry terms.

    Containment works in both directions, so "tomato" covers "tomatoes" and
    "ripe tomato". This is deliberately loose: "pea" also covers "peanut".
    """
    name = normalize_ingredient(ingredient_name)
    return any(term in name or name in term for term in pantry_terms)


def calculate_match_percent(matched: int, total: int) -> int:
    """Percentage of ingredients covered, rounded half up; 0 for an empty recipe."""
    if total == 0:
        return 0
    return math.floor(matched / total * 100 + 0.5)


def match_recipe(recipe: Recipe, pantry_terms: list[str]) -> PantryMatch:
    """Match a single recipe against already normalized pantry terms."""
    matched: list[str] = []
    missing: list[str] = []

    for ingredient in recipe.ingredients:
        name = normalize_ingredient(ingredient.name)
        if is_ingredient_in_pantry(name, pantry_terms):
            matched.append(name)
        else:
            missing.append(name)

    return PantryMatch(
        recipe=recipe,
        matched_ingredient_names=matched,
        missing_ingredient_names=missing,
        match_percent=calculate_match_percent(len(matched), len(recipe.ingredients)),
    )


def match_recipes_by_pantry(
    recipes: Iterable[Recipe],
    pantry_items: Iterable[str],
    *,
    max_missing: int | None = None,
    expand_synonyms: bool = True,
) -> list[PantryMatch]:
    """
    Rank recipes by how much of each the pantry already covers.

    Args:
        recipes: Recipes to score
        pantry_items: Free-text pantry entries (normalized here)
        max_missing: Drop recipes missing more than this many ingredients
        expand_synonyms: Also match regional synonyms of pantry terms

    Returns:
        Matches ordered by fewest missing, then highest match percent.
        Ties keep the input recipe order.
    """
    pantry_terms = [normalize_ingredient(p) for p in pantry_items if p is not None]
    pantry_terms = [p for p in pantry_terms if p]
    if expand_synonyms:
        pantry_terms = expand_pantry_terms(pantry_terms)

    matches = [match_recipe(recipe, pantry_terms) for recipe in recipes]
    matches = sorted(matches, key=lambda m: (m.missing_count, -m.match_percent))

    if max_missing is not None:
        matches = [m for m in matches if m.missing_count <= max_missing]

    return matches


def summarize_pantry_match(match: PantryMatch) -> str:
    """One-line description, e.g. "Fried Rice - 67% match (1 missing)"."""
    return f"{match.recipe.name} - {match.match_percent}% match ({match.missing_count} missing)"


def missing_items_for_shopping(match: PantryMatch) -> list[dict[str, Any]]:
    """
    Build shopping list entries for the ingredients a recipe is missing.

    Amount and category come from the recipe's own ingredient entry.
    """
    by_name = {normalize_ingredient(ing.name): ing for ing in match.recipe.ingredients}
    items: list[dict[str, Any]] = []

    for name in match.missing_ingredient_names:
        source = by_name.get(name)
        items.append(
            {
                "ingredient": display_name(name),
                "totalAmount": source.amount if source else "",
                "category": source.category if source else DEFAULT_CATEGORY,
                "recipes": [match.recipe.name],
            }
        )

    return items
