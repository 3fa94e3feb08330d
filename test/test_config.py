from __future__ import annotations
from pathlib import Path
import pytest
import yaml
from loco_pilot.config import (
    DEFAULTS,
    KEYS,
    ConfigError,
    PromptStyle,
    config_path,
    describe,
    load_settings,
    resolve,
    save_settings,
    set_setting,
)
from loco_pilot.styles import Component


def test_resolve_empty_layers() -> None:
    config = resolve({}, {}, {})
    assert config.style is PromptStyle.DEFAULT
    assert config.show_git is True
    assert config.colors == {
        Component.USERNAME: "green",
        Component.HOSTNAME: "yellow",
        Component.DIRECTORY: "cyan",
        Component.GIT_BRANCH: "green",
        Component.GIT_DIRTY: "red",
        Component.TIME: "blue",
    }


def test_resolve_layer_precedence() -> None:
    config = resolve(
        DEFAULTS,
        {"style": "info", "color.username": "blue", "color.time": "white"},
        {"style": "emoji", "color.username": "bright_red"},
    )
    assert config.style is PromptStyle.EMOJI
    assert config.colors[Component.USERNAME] == "bright_red"
    assert config.colors[Component.TIME] == "white"
    assert config.colors[Component.HOSTNAME] == "yellow"


@pytest.mark.parametrize("key", KEYS)
def test_resolve_override_always_wins(key: str) -> None:
    value = {"style": "minimal", "show_git": False}.get(key, "bold_white")
    persisted = {"style": "info", "show_git": True, key: "purple"}
    config = resolve(DEFAULTS, persisted, {key: value})
    assert config.as_settings()[key] == value


def test_resolve_invalid_persisted_color_falls_through() -> None:
    config = resolve(
        DEFAULTS, {"color.directory": "chartreuse", "color.hostname": 42}, {}
    )
    assert config.colors[Component.DIRECTORY] == "cyan"
    assert config.colors[Component.HOSTNAME] == "yellow"


def test_resolve_invalid_override_falls_through() -> None:
    config = resolve(DEFAULTS, {"style": "info"}, {"style": "fancy"})
    assert config.style is PromptStyle.INFO


def test_resolve_invalid_defaults_use_builtin() -> None:
    config = resolve({"style": "nope", "color.time": None}, {}, {})
    assert config.style is PromptStyle.DEFAULT
    assert config.colors[Component.TIME] == "blue"


def test_resolve_ignores_unknown_keys() -> None:
    config = resolve(DEFAULTS, {"prompt.symbol": ">", "color.cwd": "red"}, {"x": 1})
    assert config == resolve(DEFAULTS, {}, {})


@pytest.mark.parametrize(
    "value,expected",
    [
        (True, True),
        (False, False),
        ("true", True),
        ("TRUE", True),
        ("yes", True),
        ("on", True),
        ("1", True),
        ("false", False),
        ("No", False),
        ("off", False),
        ("0", False),
        ("maybe", True),
    ],
)
def test_resolve_show_git(value: object, expected: bool) -> None:
    assert resolve(DEFAULTS, {"show_git": value}, {}).show_git is expected


def test_resolve_normalizes_case() -> None:
    config = resolve(DEFAULTS, {"style": "Minimal", "color.time": "Bold_Cyan"}, {})
    assert config.style is PromptStyle.MINIMAL
    assert config.colors[Component.TIME] == "bold_cyan"


def test_config_is_frozen() -> None:
    config = resolve(DEFAULTS, {}, {})
    with pytest.raises(AttributeError):
        config.show_git = False  # type: ignore[misc]


def test_load_settings_missing(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "nonexistent.yaml") == {}


def test_load_settings_empty(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings(p) == {}


def test_load_settings_flattens(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text(
        "style: info\n"
        "show_git: false\n"
        "color.username: blue\n"
        "color:\n"
        "  directory: purple\n",
        encoding="utf-8",
    )
    assert load_settings(p) == {
        "style": "info",
        "show_git": False,
        "color.username": "blue",
        "color.directory": "purple",
    }


@pytest.mark.parametrize(
    "content",
    [
        "style: [unclosed\n",
        "- style\n- info\n",
        "just a string\n",
    ],
)
def test_load_settings_malformed(tmp_path: Path, content: str) -> None:
    p = tmp_path / "config.yaml"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_settings(p)
    assert str(p) in str(excinfo.value)


def test_load_settings_keeps_non_scalar_values(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text(
        "style: minimal\n"
        "plugins: [git, time]\n"
        "color.username: [red]\n",
        encoding="utf-8",
    )
    settings = load_settings(p)
    assert settings == {
        "style": "minimal",
        "plugins": ["git", "time"],
        "color.username": ["red"],
    }
    config = resolve(DEFAULTS, settings, {})
    assert config.style is PromptStyle.MINIMAL
    assert config.colors[Component.USERNAME] == "green"


@pytest.mark.parametrize(
    "key,value",
    [
        ("style", ["info", "emoji"]),
        ("show_git", {"enabled": False}),
        ("color.time", ["blue"]),
    ],
)
def test_resolve_non_scalar_falls_through(key: str, value: object) -> None:
    assert resolve(DEFAULTS, {key: value}, {}) == resolve(DEFAULTS, {}, {})


def test_set_and_save_settings(tmp_path: Path) -> None:
    p = tmp_path / "loco-pilot" / "config.yaml"
    settings = set_setting({}, "color.git_dirty", "Bright_Yellow")
    settings = set_setting(settings, "show_git", "off")
    save_settings(p, settings)
    with p.open(encoding="utf-8") as fp:
        assert yaml.safe_load(fp) == {
            "color.git_dirty": "bright_yellow",
            "show_git": False,
        }
    assert load_settings(p) == settings


def test_set_setting_does_not_mutate() -> None:
    settings = {"style": "info"}
    assert set_setting(settings, "style", "emoji") == {"style": "emoji"}
    assert settings == {"style": "info"}


@pytest.mark.parametrize(
    "key,value",
    [
        ("prompt.symbol", ">"),
        ("style", "fancy"),
        ("show_git", "maybe"),
        ("color.username", "chartreuse"),
    ],
)
def test_set_setting_invalid(key: str, value: str) -> None:
    with pytest.raises(ConfigError):
        set_setting({}, key, value)


def test_config_path_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LOCO_PILOT_CONFIG", str(tmp_path / "settings.yaml"))
    assert config_path() == tmp_path / "settings.yaml"


def test_config_path_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LOCO_PILOT_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert config_path() == tmp_path / "loco-pilot" / "config.yaml"


def test_config_path_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LOCO_PILOT_CONFIG", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config_path() == tmp_path / ".config" / "loco-pilot" / "config.yaml"


def test_describe() -> None:
    config = resolve(DEFAULTS, {"show_git": False, "color.time": "gray"}, {})
    assert describe(config) == [
        "style = default",
        "show_git = false",
        "color.username = green",
        "color.hostname = yellow",
        "color.directory = cyan",
        "color.git_branch = green",
        "color.git_dirty = red",
        "color.time = gray",
    ]


def test_config_path_no_home(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOCO_PILOT_CONFIG", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

    def no_home() -> Path:
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(Path, "home", no_home)
    assert config_path() is None


def test_set_setting_error_not_chained() -> None:
    with pytest.raises(ConfigError) as excinfo:
        set_setting({}, "style", "fancy")
    assert str(excinfo.value) == "Invalid style: 'fancy'"
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__
