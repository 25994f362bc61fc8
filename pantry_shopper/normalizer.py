"""Ingredient name normalization.

Every equality and merge decision in the package goes through
:func:`normalize_ingredient`. Casing uses plain ``str.lower()``; locale-aware
folding of non-ASCII names is out of scope.
"""

from collections.abc import Iterable


def normalize_ingredient(name: str) -> str:
    """Normalize an ingredient or pantry name into its comparison key."""
    return name.strip().lower()


def display_name(name: str) -> str:
    """Display form of an ingredient: trimmed, first letter upper-cased."""
    name = name.strip()
    return name[:1].upper() + name[1:]


def dedupe_names(names: Iterable[str]) -> list[str]:
    """
    Drop blank names and collapse duplicates by normalized key.

    Keeps the first-seen spelling of each name, in input order.
    """
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name is None:
            continue
        key = normalize_ingredient(name)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(name.strip())
    return result
