from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
import logging
import os
from pathlib import Path
from typing import Any
import yaml
from .styles import PALETTE, Component

log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the settings file cannot be used or a setting is invalid"""


class PromptStyle(Enum):
    """The selectable prompt layouts"""

    DEFAULT = "default"
    MINIMAL = "minimal"
    INFO = "info"
    EMOJI = "emoji"


#: Setting key prefix for component colors
COLOR_PREFIX = "color."

#: Every setting key that is recognized, in display order
KEYS = ["style", "show_git"] + [COLOR_PREFIX + c.value for c in Component]

#: The built-in settings, used wherever no other layer supplies a valid value
DEFAULTS: dict[str, Any] = {
    "style": "default",
    "show_git": True,
    "color.username": "green",
    "color.hostname": "yellow",
    "color.directory": "cyan",
    "color.git_branch": "green",
    "color.git_dirty": "red",
    "color.time": "blue",
}

TRUE_STRINGS = {"true", "yes", "on", "1"}
FALSE_STRINGS = {"false", "no", "off", "0"}


@dataclass(frozen=True)
class EffectiveConfig:
    #: The prompt layout to render
    style: PromptStyle

    #: Whether to show the Git segment of the prompt
    show_git: bool

    #: The palette color name assigned to each component of the prompt
    colors: Mapping[Component, str]

    def as_settings(self) -> dict[str, Any]:
        """Return the configuration as a mapping of dotted setting keys"""
        settings: dict[str, Any] = {
            "style": self.style.value,
            "show_git": self.show_git,
        }
        for c in Component:
            settings[COLOR_PREFIX + c.value] = self.colors[c]
        return settings


def normalize(key: str, value: Any) -> Any:
    """
    Validate ``value`` for the setting ``key`` and return it in canonical
    form: a `PromptStyle` value string for ``style``, a `bool` for
    ``show_git``, or a lowercase palette name for a color.

    :raises ValueError: if the key is not recognized or the value is invalid
    """
    if key == "style":
        try:
            return PromptStyle(str(value).lower()).value
        except ValueError:
            raise ValueError(f"Invalid style: {value!r}") from None
    elif key == "show_git":
        if isinstance(value, bool):
            return value
        s = str(value).lower()
        if s in TRUE_STRINGS:
            return True
        elif s in FALSE_STRINGS:
            return False
        else:
            raise ValueError(f"Invalid boolean: {value!r}")
    elif key in KEYS:
        if isinstance(value, str) and value.lower() in PALETTE:
            return value.lower()
        raise ValueError(f"Invalid color: {value!r}")
    else:
        raise ValueError(f"Unknown configuration key: {key}")


def resolve(
    defaults: Mapping[str, Any],
    persisted: Mapping[str, Any],
    override: Mapping[str, Any],
) -> EffectiveConfig:
    """
    Merge three layers of settings into an `EffectiveConfig`.  For each
    recognized key, the first valid value found in ``override``,
    ``persisted``, or ``defaults`` (in that order) is used; if none of them
    holds a valid value, the entry from `DEFAULTS` is used.  Invalid values
    and unrecognized keys are ignored, so resolution never fails.
    """
    values: dict[str, Any] = {}
    for key in KEYS:
        for layer in (override, persisted, defaults):
            if key not in layer:
                continue
            try:
                values[key] = normalize(key, layer[key])
            except ValueError as e:
                log.debug("Ignoring setting %s: %s", key, e)
            else:
                break
        else:
            values[key] = DEFAULTS[key]
    return EffectiveConfig(
        style=PromptStyle(values["style"]),
        show_git=values["show_git"],
        colors={c: values[COLOR_PREFIX + c.value] for c in Component},
    )


def config_path() -> Path | None:
    """
    Return the location of the settings file: :envvar:`LOCO_PILOT_CONFIG` if
    set, otherwise ``loco-pilot/config.yaml`` under the XDG config directory.
    Returns `None` if neither is set and the home directory is unknown.
    """
    if p := os.environ.get("LOCO_PILOT_CONFIG"):
        return Path(p)
    if xdg := os.environ.get("XDG_CONFIG_HOME"):
        base = Path(xdg)
    else:
        try:
            base = Path.home() / ".config"
        except (KeyError, RuntimeError) as e:
            log.debug("Could not determine home directory: %s", e)
            return None
    return base / "loco-pilot" / "config.yaml"


def load_settings(path: Path) -> dict[str, Any]:
    """
    Read the flat key-value settings file at ``path``.  Nested mappings are
    flattened into dotted keys.  A missing or empty file yields an empty
    `dict`.

    :raises ConfigError: if the file cannot be read, is not valid YAML, or is
        not a mapping
    """
    try:
        with path.open(encoding="utf-8") as fp:
            data = yaml.safe_load(fp)
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Failed to load config from {path}: not a mapping")
    return _flatten(data)


def _flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    # Non-scalar leaves are kept as-is; resolve() drops them as invalid.
    settings: dict[str, Any] = {}
    for k, v in data.items():
        key = f"{prefix}{k}"
        if isinstance(v, dict):
            settings.update(_flatten(v, prefix=key + "."))
        else:
            settings[key] = v
    return settings


def save_settings(path: Path, settings: Mapping[str, Any]) -> None:
    """Rewrite the settings file at ``path`` with the given settings"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fp:
            yaml.safe_dump(
                dict(settings), fp, default_flow_style=False, sort_keys=False
            )
    except OSError as e:
        raise ConfigError(f"Failed to save config to {path}: {e}")


def set_setting(settings: Mapping[str, Any], key: str, value: str) -> dict[str, Any]:
    """
    Return a copy of ``settings`` with ``key`` set to the normalized form of
    ``value``

    :raises ConfigError: if the key is not recognized or the value is invalid
    """
    try:
        v = normalize(key, value)
    except ValueError as e:
        raise ConfigError(str(e)) from None
    return {**settings, key: v}


def describe(config: EffectiveConfig) -> list[str]:
    """Return ``key = value`` lines describing ``config``"""
    lines = []
    for key, value in config.as_settings().items():
        if isinstance(value, bool):
            value = str(value).lower()
        lines.append(f"{key} = {value}")
    return lines
