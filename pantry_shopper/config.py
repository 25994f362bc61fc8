"""Configuration and storage locations for Pantry Shopper."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "pantry-shopper"
CONFIG_DIR = Path(os.getenv("PANTRY_SHOPPER_HOME", Path.home() / f".{APP_NAME}"))
STORE_FILE = CONFIG_DIR / "storage.json"

# Directory of per-country recipe documents ({country, flag, recipes})
RECIPES_DIR = Path(os.getenv("PANTRY_SHOPPER_RECIPES_DIR", CONFIG_DIR / "recipes"))

# Recipe cache lifetime in seconds
try:
    RECIPE_CACHE_TTL = float(os.getenv("PANTRY_SHOPPER_CACHE_TTL", "300"))
except ValueError:
    RECIPE_CACHE_TTL = 300.0

# Key-value storage keys
LEGACY_SHOPPING_LIST_KEY = "@shopping_list"  # bare array from the single-list era
SHOPPING_LISTS_KEY = "@shopping_lists"
ACTIVE_SHOPPING_LIST_KEY = "@active_shopping_list"
PANTRY_ITEMS_KEY = "@pantry_items"

# Reserved list name, also the target of legacy migration
DEFAULT_LIST_NAME = "Default"

DEFAULT_CATEGORY = "other"


def get_store_file() -> Path:
    """Get the storage file path, creating its directory if needed."""
    STORE_FILE.parent.mkdir(parents=True, exist_ok=True)
    return STORE_FILE
