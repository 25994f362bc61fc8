"""Tests for the config module."""

import importlib

import pytest

from pantry_shopper import config


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config under patched environment, restoring it afterwards."""

    def _reload():
        return importlib.reload(config)

    yield _reload

    monkeypatch.undo()
    importlib.reload(config)


class TestStorageLocation:
    def test_get_store_file_creates_directory(self, tmp_path, monkeypatch):
        store_file = tmp_path / "home" / "storage.json"
        monkeypatch.setattr("pantry_shopper.config.STORE_FILE", store_file)

        assert config.get_store_file() == store_file
        assert store_file.parent.is_dir()

    def test_home_from_environment(self, tmp_path, monkeypatch, reload_config):
        monkeypatch.setenv("PANTRY_SHOPPER_HOME", str(tmp_path))
        monkeypatch.delenv("PANTRY_SHOPPER_RECIPES_DIR", raising=False)

        cfg = reload_config()

        assert cfg.STORE_FILE == tmp_path / "storage.json"
        assert cfg.RECIPES_DIR == tmp_path / "recipes"


class TestCacheTtl:
    def test_from_environment(self, monkeypatch, reload_config):
        monkeypatch.setenv("PANTRY_SHOPPER_CACHE_TTL", "60")
        assert reload_config().RECIPE_CACHE_TTL == 60.0

    def test_invalid_value_falls_back(self, monkeypatch, reload_config):
        monkeypatch.setenv("PANTRY_SHOPPER_CACHE_TTL", "soon")
        assert reload_config().RECIPE_CACHE_TTL == 300.0


class TestStorageKeys:
    def test_keys(self):
        assert config.LEGACY_SHOPPING_LIST_KEY == "@shopping_list"
        assert config.SHOPPING_LISTS_KEY == "@shopping_lists"
        assert config.ACTIVE_SHOPPING_LIST_KEY == "@active_shopping_list"
        assert config.DEFAULT_LIST_NAME == "Default"
