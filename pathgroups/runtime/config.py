"""View settings shared by every workspace.

The display mode, the active-group toggles and the debug switch live in one
JSON object under the user config directory. A missing or damaged file only
means defaults; a failed write only loses the preference for next time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "pathgroups"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DisplayMode = Literal["name", "fullPath"]
DISPLAY_MODES: tuple[DisplayMode, ...] = ("name", "fullPath")


@dataclass(frozen=True)
class ViewSettings:
    """Immutable settings snapshot handed to the materializer and resolver."""

    display_mode: DisplayMode = "name"
    collapse_others_on_activate: bool = False
    active_behavior_enabled: bool = True
    debug: bool = False

    def with_changes(self, **changes: object) -> ViewSettings:
        return replace(self, **changes)


def load_config() -> dict[str, object]:
    """Return the saved settings object, or ``{}`` when none is usable."""
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        logger.debug("ignoring non-object settings in %s", CONFIG_PATH)
        return {}
    return data


def save_config(data: dict[str, object]) -> None:
    """Write the settings object for the next session."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.debug("cannot save settings to %s: %s", CONFIG_PATH, exc)


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else yields ``default``."""
    value = data.get(key)
    return value if isinstance(value, bool) else default


def load_view_settings() -> ViewSettings:
    """Return the persisted settings snapshot, defaulting invalid fields."""
    data = load_config()
    defaults = ViewSettings()
    mode = data.get("display_mode")
    return ViewSettings(
        display_mode=mode if mode in DISPLAY_MODES else defaults.display_mode,
        collapse_others_on_activate=_load_bool(
            data, "collapse_others_on_activate", defaults.collapse_others_on_activate
        ),
        active_behavior_enabled=_load_bool(data, "active_behavior_enabled", defaults.active_behavior_enabled),
        debug=_load_bool(data, "debug", defaults.debug),
    )


def save_view_settings(settings: ViewSettings) -> None:
    """Persist a settings snapshot, keeping unrelated keys intact."""
    config = load_config()
    config["display_mode"] = settings.display_mode
    config["collapse_others_on_activate"] = bool(settings.collapse_others_on_activate)
    config["active_behavior_enabled"] = bool(settings.active_behavior_enabled)
    config["debug"] = bool(settings.debug)
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "DISPLAY_MODES",
    "DisplayMode",
    "ViewSettings",
    "load_config",
    "load_view_settings",
    "save_config",
    "save_view_settings",
]
