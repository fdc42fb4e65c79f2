"""Settings with JSON persistence and editor-side overrides.

Precedence: defaults < ``$HOVERPICK_CONFIG_DIR/settings.json`` < the
``g:hoverpick`` dictionary passed in by the editor.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hoverpick.overlay import OverlayOptions
from hoverpick.translate import DEFAULT_LANG, DEFAULT_PROGRAM

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


# --- Settings schema ---


@dataclass
class TranslateSettings:
    """Controls the translator invocation."""

    program: str = DEFAULT_PROGRAM
    default_lang: str = DEFAULT_LANG
    brief: bool = True
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class PickerSettings:
    """Tab picker options."""

    prompt_title: str = "Tabs"
    keybindings: dict[str, str | list[str]] = field(default_factory=dict)


@dataclass
class Settings:
    translate: TranslateSettings = field(default_factory=TranslateSettings)
    picker: PickerSettings = field(default_factory=PickerSettings)
    overlay: OverlayOptions = field(default_factory=OverlayOptions)


def get_config_dir() -> Path:
    default = Path.home() / ".config" / "hoverpick"
    return Path(os.environ.get("HOVERPICK_CONFIG_DIR", default))


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILE_NAME


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Deserialize Settings from a JSON-compatible dict (camelCase keys)."""
    tr = data.get("translate") or {}
    pk = data.get("picker") or {}
    ov = data.get("overlay") or {}
    defaults = OverlayOptions()

    return Settings(
        translate=TranslateSettings(
            program=tr.get("program", DEFAULT_PROGRAM),
            default_lang=tr.get("defaultLang", DEFAULT_LANG),
            brief=bool(tr.get("brief", True)),
            env={str(k): str(v) for k, v in (tr.get("env") or {}).items()},
        ),
        picker=PickerSettings(
            prompt_title=pk.get("promptTitle", "Tabs"),
            keybindings=dict(pk.get("keybindings") or {}),
        ),
        overlay=OverlayOptions(
            border=ov.get("border", defaults.border),
            focusable=bool(ov.get("focusable", defaults.focusable)),
            focus=bool(ov.get("focus", defaults.focus)),
            max_width=ov.get("maxWidth", defaults.max_width),
            max_height=ov.get("maxHeight", defaults.max_height),
            anchor=ov.get("anchor", defaults.anchor),
        ),
    )


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Error reading settings from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings in %s: expected an object", path)
        return {}
    return data


def load_settings(
    overrides: dict[str, Any] | None = None,
    path: Path | None = None,
) -> Settings:
    data = _read_settings_file(path or get_settings_path())
    if overrides:
        data = _deep_merge(data, overrides)
    return settings_from_dict(data)
