"""CLI entry point for Pantry Shopper."""

import asyncio
import logging

import click

from . import __version__
from .aggregator import ShoppingListAggregator, ShoppingListItem, summarize_shopping_list
from .config import RECIPE_CACHE_TTL, RECIPES_DIR, get_store_file
from .export import export_shopping_list
from .matcher import match_recipes_by_pantry, summarize_pantry_match
from .pantry import PantryStore, parse_pantry_input
from .recipes import RecipeCache, load_recipes_dir
from .registry import ShoppingListRegistry
from .store import JsonFileStore, KeyValueStore, StorageError

# Shared store and recipe cache instances
_store: KeyValueStore | None = None
_recipe_cache: RecipeCache | None = None


def get_store() -> KeyValueStore:
    """Get or create the storage backend."""
    global _store
    if _store is None:
        _store = JsonFileStore(get_store_file())
    return _store


def get_recipe_cache() -> RecipeCache:
    """Get or create the recipe cache over the configured recipe directory."""
    global _recipe_cache
    if _recipe_cache is None:
        _recipe_cache = RecipeCache(lambda: load_recipes_dir(RECIPES_DIR), ttl=RECIPE_CACHE_TTL)
    return _recipe_cache


def get_registry() -> ShoppingListRegistry:
    return ShoppingListRegistry(get_store())


def get_aggregator() -> ShoppingListAggregator:
    return ShoppingListAggregator(get_registry())


def run(coro):
    """Run a storage coroutine, turning storage failures into a CLI error."""
    try:
        return asyncio.run(coro)
    except StorageError as e:
        click.echo(f"✗ Storage error: {e}", err=True)
        raise SystemExit(1) from None


def display_items(name: str, items: list[ShoppingListItem]) -> None:
    """Display a shopping list in a formatted way."""
    click.echo()
    click.echo("=" * 60)
    click.echo(f"SHOPPING LIST: {name}")
    click.echo("=" * 60)

    if not items:
        click.echo("  (empty)")
        click.echo()
        return

    for i, item in enumerate(items, 1):
        box = "[x]" if item.checked else "[ ]"
        amount = f" - {item.total_amount}" if item.total_amount else ""
        click.echo(f"{i:3}. {box} {item.ingredient}{amount}")
        if item.recipes:
            click.echo(f"        {', '.join(item.recipes)}")

    summary = summarize_shopping_list(items)
    click.echo()
    click.echo("-" * 60)
    click.echo(
        f"Items: {summary.total_items} | Checked: {summary.checked_items} | "
        f"Recipes: {summary.recipe_count}"
    )
    click.echo("-" * 60)


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="pantry-shopper")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Pantry Shopper - pantry matching and shopping lists.

    Find recipes you can cook from your pantry and collect what is missing
    into named shopping lists.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Pantry Commands
# ============================================================================


@cli.group()
def pantry():
    """Manage your pantry items (ingredients you already have at home)."""
    pass


@pantry.command("list")
def pantry_list():
    """List your pantry items."""
    items = run(PantryStore(get_store()).get_pantry_items())

    click.echo()
    click.echo("YOUR PANTRY")
    click.echo("=" * 50)

    if items:
        for item in items:
            click.echo(f"  {item}")
    else:
        click.echo("  (empty)")

    click.echo()
    click.echo(f"Total: {len(items)} items")
    click.echo()


@pantry.command("add")
@click.argument("items", nargs=-1, required=True)
def pantry_add(items: tuple[str, ...]):
    """Add items to your pantry.

    Items may be separate arguments or comma-separated.

    Examples:

    \b
        pantry-shopper pantry add rice onion
        pantry-shopper pantry add "rice, tomato, olive oil"
    """
    to_add = parse_pantry_input(",".join(items))
    stored = run(PantryStore(get_store()).add_to_pantry(to_add))
    click.echo(f"✓ Added {len(to_add)} item(s). Pantry now has {len(stored)} items.")


@pantry.command("remove")
@click.argument("items", nargs=-1, required=True)
def pantry_remove(items: tuple[str, ...]):
    """Remove items from your pantry."""
    stored = run(PantryStore(get_store()).remove_from_pantry(parse_pantry_input(",".join(items))))
    click.echo(f"✓ Removed. Pantry now has {len(stored)} items.")


@pantry.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def pantry_clear(yes: bool):
    """Remove all pantry items."""
    if not yes:
        if not click.confirm("Clear your pantry?"):
            click.echo("Cancelled.")
            return

    run(PantryStore(get_store()).clear_pantry())
    click.echo("✓ Pantry cleared")


# ============================================================================
# Matching Commands
# ============================================================================


@cli.command("match")
@click.argument("pantry_items", nargs=-1)
@click.option("--max-missing", "-m", type=int, help="Hide recipes missing more ingredients")
@click.option("--limit", "-l", default=20, help="Maximum results to show")
@click.option("--add-missing", "add_to", help="Add missing ingredients of the best match to LIST")
def match_cmd(
    pantry_items: tuple[str, ...],
    max_missing: int | None,
    limit: int,
    add_to: str | None,
):
    """Find recipes you can cook with what you have.

    Uses your saved pantry when no items are given.

    Examples:

    \b
        pantry-shopper match rice onion tomato
        pantry-shopper match --max-missing 2
        pantry-shopper match rice onion --add-missing Weekly
    """
    if pantry_items:
        items = parse_pantry_input(",".join(pantry_items))
    else:
        items = run(PantryStore(get_store()).get_pantry_items())

    if not items:
        click.echo("✗ No pantry items. Pass items or use 'pantry-shopper pantry add'.", err=True)
        raise SystemExit(1)

    recipes = get_recipe_cache().get_or_load()
    if not recipes:
        click.echo(f"✗ No recipes found in {RECIPES_DIR}", err=True)
        raise SystemExit(1)

    matches = match_recipes_by_pantry(recipes, items, max_missing=max_missing)

    if not matches:
        click.echo("No recipes match your pantry.")
        return

    click.echo()
    for i, match in enumerate(matches[:limit], 1):
        click.echo(f"{i}. {summarize_pantry_match(match)}")
        if match.missing_ingredient_names:
            shown = match.missing_ingredient_names[:5]
            more = "..." if match.missing_count > 5 else ""
            click.echo(f"   Missing: {', '.join(shown)}{more}")

    if add_to:
        best = matches[0]
        count = run(get_aggregator().add_missing_to_named_shopping_list(add_to, best))
        if count:
            click.echo(f"\n✓ Added {count} item(s) from {best.recipe.name} to '{add_to}'")
        else:
            click.echo(f"\n{best.recipe.name} has no missing ingredients.")


# ============================================================================
# Shopping List Commands
# ============================================================================


@cli.group("lists")
def lists_group():
    """Manage named shopping lists."""
    pass


@lists_group.command("all")
def lists_all():
    """Show every list and which one is active."""
    registry = get_registry()
    lists = run(registry.get_all_shopping_lists())
    active = run(registry.get_active_shopping_list_name())

    if not lists:
        click.echo("No shopping lists yet.")
        return

    for name in sorted(lists):
        marker = "*" if name == active else " "
        click.echo(f"{marker} {name} ({len(lists[name])} items)")


@lists_group.command("show")
@click.argument("name", required=False)
def lists_show(name: str | None):
    """Show a list (the active one by default)."""
    aggregator = get_aggregator()
    if name is None:
        name = run(aggregator.registry.get_active_shopping_list_name())
    display_items(name, run(aggregator.get_items(name)))


@lists_group.command("create")
@click.argument("name")
@click.option("--use", "make_active", is_flag=True, help="Make the new list active")
def lists_create(name: str, make_active: bool):
    """Create an empty list."""
    registry = get_registry()
    name = name.strip()
    if not name:
        click.echo("✗ List name cannot be empty.", err=True)
        raise SystemExit(1)

    run(registry.create_shopping_list(name))
    click.echo(f"✓ Created list '{name}'")

    if make_active:
        run(registry.set_active_shopping_list_name(name))
        click.echo(f"✓ '{name}' is now the active list")


@lists_group.command("rename")
@click.argument("old_name")
@click.argument("new_name")
def lists_rename(old_name: str, new_name: str):
    """Rename a list. An existing list with the new name is replaced."""
    registry = get_registry()
    lists = run(registry.get_all_shopping_lists())

    if old_name not in lists:
        click.echo(f"✗ List '{old_name}' not found", err=True)
        raise SystemExit(1)

    run(registry.rename_shopping_list(old_name, new_name))
    click.echo(f"✓ Renamed '{old_name}' to '{new_name}'")


@lists_group.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def lists_delete(name: str, yes: bool):
    """Delete a list."""
    if not yes:
        if not click.confirm(f"Delete list '{name}'?"):
            click.echo("Cancelled.")
            return

    registry = get_registry()
    run(registry.delete_shopping_list(name))
    click.echo(f"✓ Deleted list '{name}'")

    click.echo(f"Active list: {run(registry.get_active_shopping_list_name())}")


@lists_group.command("use")
@click.argument("name")
def lists_use(name: str):
    """Make a list the active one."""
    run(get_registry().set_active_shopping_list_name(name))
    click.echo(f"✓ '{name}' is now the active list")


@lists_group.command("add")
@click.argument("ingredient")
@click.option("--amount", "-a", default="", help="Amount, e.g. '2 cups'")
@click.option("--category", "-c", default="", help="Category, e.g. vegetable")
@click.option("--list", "list_name", help="Target list (default: active)")
def lists_add(ingredient: str, amount: str, category: str, list_name: str | None):
    """Add a single item by hand."""
    aggregator = get_aggregator()
    item = {"ingredient": ingredient, "totalAmount": amount, "category": category}

    if list_name:
        run(aggregator.add_items_to_named_shopping_list(list_name, [item]))
    else:
        run(aggregator.add_items_to_shopping_list([item]))
    click.echo(f"✓ Added {ingredient}")


@lists_group.command("add-recipe")
@click.argument("recipe_ids", nargs=-1, required=True)
@click.option("--list", "list_name", help="Target list (default: active)")
def lists_add_recipe(recipe_ids: tuple[str, ...], list_name: str | None):
    """Add all ingredients of one or more recipes to a list."""
    aggregator = get_aggregator()
    if list_name is None:
        list_name = run(aggregator.registry.get_active_shopping_list_name())

    cache = get_recipe_cache()
    skipped = run(
        aggregator.add_recipes_to_named_shopping_list(list_name, recipe_ids, cache.find_by_id)
    )

    for recipe_id in skipped:
        click.echo(f"  ✗ Recipe not found: {recipe_id}", err=True)

    added = len(set(recipe_ids)) - len(skipped)
    click.echo(f"✓ Added {added} recipe(s) to '{list_name}'")


@lists_group.command("check")
@click.argument("ingredient")
@click.option("--list", "list_name", help="List to search (default: active first)")
def lists_check(ingredient: str, list_name: str | None):
    """Mark an item as bought."""
    found = run(get_aggregator().toggle_shopping_list_item_checked(ingredient, True, list_name))
    click.echo(f"✓ Checked {ingredient}" if found else f"'{ingredient}' is not on the list")


@lists_group.command("uncheck")
@click.argument("ingredient")
@click.option("--list", "list_name", help="List to search (default: active first)")
def lists_uncheck(ingredient: str, list_name: str | None):
    """Mark an item as not bought."""
    found = run(get_aggregator().toggle_shopping_list_item_checked(ingredient, False, list_name))
    click.echo(f"✓ Unchecked {ingredient}" if found else f"'{ingredient}' is not on the list")


@lists_group.command("remove")
@click.argument("ingredient")
@click.option("--list", "list_name", help="Target list (default: active)")
def lists_remove(ingredient: str, list_name: str | None):
    """Remove an item from a list."""
    found = run(get_aggregator().remove_shopping_list_item(ingredient, list_name))
    click.echo(f"✓ Removed {ingredient}" if found else f"'{ingredient}' is not on the list")


@lists_group.command("clear-checked")
@click.option("--list", "list_name", help="Target list (default: active)")
def lists_clear_checked(list_name: str | None):
    """Remove every checked item from a list."""
    removed = run(get_aggregator().remove_checked_items(list_name))
    click.echo(f"✓ Removed {removed} checked item(s)")


@lists_group.command("export")
@click.argument("output", type=click.Path())
@click.option("--list", "list_name", help="List to export (default: active)")
@click.option("--format", "-f", type=click.Choice(["csv", "json", "md"]), help="Output format")
def lists_export(output: str, list_name: str | None, format: str | None):
    """Export a list to CSV, JSON, or Markdown.

    Examples:

    \b
        pantry-shopper lists export groceries.csv
        pantry-shopper lists export weekly.md --list Weekly
    """
    aggregator = get_aggregator()
    if list_name is None:
        list_name = run(aggregator.registry.get_active_shopping_list_name())

    items = run(aggregator.get_items(list_name))

    try:
        used_format = export_shopping_list(items, output, list_name=list_name, format=format)
    except OSError as e:
        click.echo(f"✗ Export failed: {e}", err=True)
        raise SystemExit(1) from None

    click.echo(f"✓ Exported {len(items)} items to {output} ({used_format} format)")


def main():
    cli()


if __name__ == "__main__":
    main()
