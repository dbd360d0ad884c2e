"""
Preference storage for Item Stat Filters.

Keeps the four saved form settings (buffer, attribute grouping,
resistance grouping, clear before apply) in a JSON file under the
user's config directory.
"""

import json
import os
from pathlib import Path
from typing import Any

from src.filters.filter_config import (
    CLEAR_BEFORE_APPLY,
    GENERIC_ATTRIBUTES,
    GENERIC_ELEMENTAL_RESISTS,
    MIN_BUFFER,
    PREFERENCE_KEYS,
)

DEFAULT_PREFERENCES = {
    MIN_BUFFER: "",
    GENERIC_ATTRIBUTES: False,
    GENERIC_ELEMENTAL_RESISTS: False,
    CLEAR_BEFORE_APPLY: False,
}


def get_config_dir() -> Path:
    """Get the configuration directory, creating it if needed."""
    # Use XDG_CONFIG_HOME if set, otherwise ~/.config
    config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    config_dir = Path(config_home) / "item-stat-filters"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_preferences_path() -> Path:
    """Get the path to the preferences file."""
    return get_config_dir() / "preferences.json"


def load_preferences() -> dict:
    """Load saved preferences. Missing keys get their disabled default."""
    prefs = dict(DEFAULT_PREFERENCES)
    path = get_preferences_path()
    if path.exists():
        try:
            with open(path) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, IOError):
            stored = {}
        if isinstance(stored, dict):
            prefs.update({k: v for k, v in stored.items() if k in PREFERENCE_KEYS})
    return prefs


def save_preferences(prefs: dict) -> None:
    """Save preferences to disk. Unknown keys are dropped."""
    path = get_preferences_path()
    data = {k: prefs[k] for k in PREFERENCE_KEYS if k in prefs}
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def update_preferences(**changes: Any) -> dict:
    """Change some preferences and save. Returns the full saved set."""
    unknown = set(changes) - set(PREFERENCE_KEYS)
    if unknown:
        raise KeyError(f"Unknown preferences: {', '.join(sorted(unknown))}")
    prefs = load_preferences()
    prefs.update(changes)
    save_preferences(prefs)
    return prefs
