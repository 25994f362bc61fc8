"""Tests for the CLI module."""

import asyncio
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pantry_shopper import __version__
from pantry_shopper.cli import cli
from pantry_shopper.recipes import RecipeCache
from pantry_shopper.registry import ShoppingListRegistry
from pantry_shopper.store import JsonFileStore, MemoryStore


@pytest.fixture
def runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def store():
    """Patch the CLI's storage backend with an in-memory one."""
    memory = MemoryStore()
    with patch("pantry_shopper.cli.get_store", return_value=memory):
        yield memory


@pytest.fixture
def recipe_cache(sample_recipes):
    """Patch the CLI's recipe cache with the sample recipes."""
    cache = RecipeCache(lambda: sample_recipes)
    with patch("pantry_shopper.cli.get_recipe_cache", return_value=cache):
        yield cache


def stored_lists(store: MemoryStore) -> dict:
    return asyncio.run(ShoppingListRegistry(store).get_all_shopping_lists())


# =============================================================================
# Main CLI Tests
# =============================================================================


class TestMainCLI:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Pantry Shopper" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Pantry Command Tests
# =============================================================================


class TestPantryCommands:
    def test_list_empty(self, runner, store):
        result = runner.invoke(cli, ["pantry", "list"])
        assert result.exit_code == 0
        assert "(empty)" in result.output
        assert "Total: 0 items" in result.output

    def test_add_and_list(self, runner, store):
        result = runner.invoke(cli, ["pantry", "add", "rice, onion", "Rice", "salt"])
        assert result.exit_code == 0
        assert "Pantry now has 3 items" in result.output

        result = runner.invoke(cli, ["pantry", "list"])
        assert "rice" in result.output
        assert "Total: 3 items" in result.output

    def test_remove(self, runner, store):
        runner.invoke(cli, ["pantry", "add", "rice", "onion"])

        result = runner.invoke(cli, ["pantry", "remove", "RICE"])

        assert result.exit_code == 0
        assert "Pantry now has 1 items" in result.output

    def test_clear_with_yes(self, runner, store):
        runner.invoke(cli, ["pantry", "add", "rice"])

        result = runner.invoke(cli, ["pantry", "clear", "--yes"])

        assert result.exit_code == 0
        assert "Pantry cleared" in result.output

    def test_clear_cancelled(self, runner, store):
        runner.invoke(cli, ["pantry", "add", "rice"])

        result = runner.invoke(cli, ["pantry", "clear"], input="n\n")

        assert "Cancelled" in result.output
        assert "Total: 1 items" in runner.invoke(cli, ["pantry", "list"]).output


# =============================================================================
# Match Command Tests
# =============================================================================


class TestMatchCommand:
    def test_match_with_items(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["match", "rice", "onion"])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0] == "1. Plain Rice - 100% match (0 missing)"
        assert lines[1] == "2. Fried Rice - 67% match (1 missing)"
        assert "Missing: salt" in result.output

    def test_match_uses_saved_pantry(self, runner, store, recipe_cache):
        runner.invoke(cli, ["pantry", "add", "rice"])

        result = runner.invoke(cli, ["match", "--max-missing", "0"])

        assert result.exit_code == 0
        assert "Plain Rice" in result.output
        assert "Fried Rice" not in result.output

    def test_match_without_pantry(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["match"])
        assert result.exit_code == 1
        assert "No pantry items" in result.output

    def test_match_without_recipes(self, runner, store):
        with patch(
            "pantry_shopper.cli.get_recipe_cache", return_value=RecipeCache(lambda: [])
        ):
            result = runner.invoke(cli, ["match", "rice"])
        assert result.exit_code == 1
        assert "No recipes found" in result.output

    def test_no_results(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["match", "caviar", "--max-missing", "0"])
        assert result.exit_code == 0
        assert "No recipes match" in result.output

    def test_add_missing(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["match", "onion", "cream", "salt", "--add-missing", "Weekly"])

        assert result.exit_code == 0
        assert "Added 1 item(s) from Tomato Soup to 'Weekly'" in result.output
        [item] = stored_lists(store)["Weekly"]
        assert item["ingredient"] == "Tomato"
        assert item["totalAmount"] == "4"
        assert item["recipes"] == ["Tomato Soup"]

    def test_add_missing_nothing_to_add(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["match", "rice", "onion", "--add-missing", "Weekly"])

        assert result.exit_code == 0
        assert "Plain Rice has no missing ingredients" in result.output
        assert stored_lists(store) == {}


# =============================================================================
# Shopping List Command Tests
# =============================================================================


class TestListsCommands:
    def test_all_empty(self, runner, store):
        result = runner.invoke(cli, ["lists", "all"])
        assert result.exit_code == 0
        assert "No shopping lists yet" in result.output

    def test_create_and_use(self, runner, store):
        result = runner.invoke(cli, ["lists", "create", "Weekly", "--use"])
        assert result.exit_code == 0
        assert "Created list 'Weekly'" in result.output

        result = runner.invoke(cli, ["lists", "all"])
        assert "* Weekly (0 items)" in result.output

    def test_create_blank_name(self, runner, store):
        result = runner.invoke(cli, ["lists", "create", "  "])
        assert result.exit_code == 1

    def test_add_and_show(self, runner, store):
        runner.invoke(cli, ["lists", "add", "tomato", "-a", "2", "-c", "vegetable"])
        runner.invoke(cli, ["lists", "add", "Tomato", "-a", "3"])

        result = runner.invoke(cli, ["lists", "show"])

        assert result.exit_code == 0
        assert "SHOPPING LIST: Default" in result.output
        assert "[ ] Tomato - 5" in result.output

    def test_add_to_named_list(self, runner, store):
        runner.invoke(cli, ["lists", "add", "Rice", "--list", "Weekly"])
        assert stored_lists(store)["Weekly"][0]["ingredient"] == "Rice"

    def test_add_recipe(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["lists", "add-recipe", "r1", "r3", "ghost", "--list", "Weekly"])

        assert result.exit_code == 0
        assert "Recipe not found: ghost" in result.output
        assert "Added 2 recipe(s) to 'Weekly'" in result.output

        items = {i["ingredient"]: i for i in stored_lists(store)["Weekly"]}
        assert items["Rice"]["totalAmount"] == "3 cups"

    def test_add_recipe_repeated_id_counted_once(self, runner, store, recipe_cache):
        result = runner.invoke(cli, ["lists", "add-recipe", "r3", "r3", "--list", "Weekly"])

        assert "Added 1 recipe(s) to 'Weekly'" in result.output
        assert stored_lists(store)["Weekly"][0]["totalAmount"] == "1 cups"

    def test_check_uncheck(self, runner, store):
        runner.invoke(cli, ["lists", "add", "Onion"])

        result = runner.invoke(cli, ["lists", "check", "onion"])
        assert "Checked onion" in result.output
        assert stored_lists(store)["Default"][0]["checked"] is True

        runner.invoke(cli, ["lists", "uncheck", "ONION"])
        assert stored_lists(store)["Default"][0]["checked"] is False

    def test_check_missing(self, runner, store):
        result = runner.invoke(cli, ["lists", "check", "Onion"])
        assert result.exit_code == 0
        assert "'Onion' is not on the list" in result.output

    def test_remove_and_clear_checked(self, runner, store):
        for name in ["Rice", "Salt", "Milk"]:
            runner.invoke(cli, ["lists", "add", name])
        runner.invoke(cli, ["lists", "remove", "rice"])
        runner.invoke(cli, ["lists", "check", "salt"])

        result = runner.invoke(cli, ["lists", "clear-checked"])

        assert "Removed 1 checked item(s)" in result.output
        assert [i["ingredient"] for i in stored_lists(store)["Default"]] == ["Milk"]

    def test_rename(self, runner, store):
        runner.invoke(cli, ["lists", "create", "Old", "--use"])

        result = runner.invoke(cli, ["lists", "rename", "Old", "New"])

        assert result.exit_code == 0
        assert "* New" in runner.invoke(cli, ["lists", "all"]).output

    def test_rename_missing(self, runner, store):
        result = runner.invoke(cli, ["lists", "rename", "Ghost", "New"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_active(self, runner, store):
        runner.invoke(cli, ["lists", "create", "Weekly", "--use"])

        result = runner.invoke(cli, ["lists", "delete", "Weekly", "--yes"])

        assert result.exit_code == 0
        assert "Active list: Default" in result.output
        assert stored_lists(store) == {"Default": []}

    def test_export(self, runner, store, tmp_path):
        runner.invoke(cli, ["lists", "add", "Milk, 1L", "-a", "1"])
        output = tmp_path / "list.csv"

        result = runner.invoke(cli, ["lists", "export", str(output)])

        assert result.exit_code == 0
        assert "(csv format)" in result.output
        assert '"Milk, 1L",1,other,,false' in output.read_text(encoding="utf-8")


class TestStorageErrors:
    def test_corrupt_store_file_set_aside(self, runner, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        with patch("pantry_shopper.cli.get_store", return_value=JsonFileStore(path)):
            result = runner.invoke(cli, ["lists", "create", "Weekly"])

        assert result.exit_code == 0
        assert "Created list 'Weekly'" in result.output
        assert (tmp_path / "storage.json.corrupt").read_text() == "{not json"

    def test_unwritable_store(self, runner, tmp_path):
        with patch("pantry_shopper.cli.get_store", return_value=JsonFileStore(tmp_path)):
            result = runner.invoke(cli, ["lists", "create", "Weekly"])

        assert result.exit_code == 1
        assert "Storage error" in result.output
