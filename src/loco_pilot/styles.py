from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Protocol


class Color(Enum):
    """
    An enumeration of the supported foreground colors.  Each color's value
    equals its xterm number.
    """

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    BRIGHT_BLACK = 8
    BRIGHT_RED = 9
    BRIGHT_GREEN = 10
    BRIGHT_YELLOW = 11
    BRIGHT_BLUE = 12
    BRIGHT_MAGENTA = 13
    BRIGHT_CYAN = 14
    BRIGHT_WHITE = 15

    def asfg(self) -> int:
        """
        Return the ANSI SGR parameter for setting the color as the foreground
        color
        """
        c = self.value
        return c + 30 if c < 8 else c + 82


@dataclass(frozen=True)
class Style:
    color: Color | None = None
    bold: bool = False

    def as_params(self) -> list[str]:
        params = []
        if self.bold:
            params.append("1")
        if self.color is not None:
            params.append(str(self.color.asfg()))
        return params


def _palette() -> dict[str, Style]:
    palette: dict[str, Style] = {}
    for c in Color:
        name = c.name.lower()
        palette[name] = Style(c)
        if c.value < 8:
            palette[f"bold_{name}"] = Style(c, bold=True)
    palette["purple"] = palette["magenta"]
    palette["gray"] = palette["bright_black"]
    palette["bright_purple"] = palette["bright_magenta"]
    palette["bold_purple"] = palette["bold_magenta"]
    return palette


#: Mapping from the color names accepted in the settings to their styles
PALETTE: dict[str, Style] = _palette()

#: Styles for the ahead/behind indicators, which are not user-configurable
AHEAD_STYLE = Style(Color.YELLOW, bold=True)
BEHIND_STYLE = Style(Color.MAGENTA, bold=True)


class Component(Enum):
    """
    The parts of the prompt whose color can be configured.  Each value is the
    part's name as used in a ``color.*`` setting key.
    """

    USERNAME = "username"
    HOSTNAME = "hostname"
    DIRECTORY = "directory"
    GIT_BRANCH = "git_branch"
    GIT_DIRTY = "git_dirty"
    TIME = "time"


class Styler(Protocol):
    prompt_suffix: ClassVar[str]

    def __call__(self, s: str, style: Style) -> str: ...


class BashStyler:
    """Class for escaping & styling strings for use in Bash's PS1 variable"""

    #: The actual prompt symbol to add at the end of the output, just before a
    #: final space character
    prompt_suffix: ClassVar[str] = r"\$"

    def __call__(self, s: str, style: Style) -> str:
        r"""
        Return the string ``s`` escaped for use in a PS1 variable.  If
        ``style.color`` is non-`None`, the string will be wrapped in the proper
        escape sequences to display it as the given foreground color.  If
        ``style.bold`` is true, the string will be wrapped in the proper escape
        sequences to display it bold.  All escape sequences are wrapped in ``\[
        ... \]`` so that Bash does not count them toward the prompt's width.

        :param str s: the string to stylize
        :param Style style: the color & weight to stylize the string with
        """
        s = self.escape(s)
        if params := style.as_params():
            s = rf"\[\e[{';'.join(params)}m\]{s}\[\e[0m\]"
        return s

    def escape(self, s: str) -> str:
        """
        Escape characters in the string ``s`` that have special meaning in a
        PS1 variable, including the ``$`` and backtick that Bash would
        otherwise expand under ``promptvars``
        """
        return s.replace("\\", r"\\").replace("$", r"\$").replace("`", r"\`")


class ANSIStyler:
    """Class for styling strings for display immediately in the terminal"""

    prompt_suffix: ClassVar[str] = "$"

    def __call__(self, s: str, style: Style) -> str:
        """
        Stylize the string ``s`` with ANSI escape sequences.  If
        ``style.color`` is non-`None`, the string will be stylized with the
        given foreground color.  If ``style.bold`` is true, the string will be
        stylized bold.
        """
        if params := style.as_params():
            s = f"\x1B[{';'.join(params)}m{s}\x1B[0m"
        return s


class ZshStyler:
    """Class for escaping & styling strings for use in zsh's PS1 variable"""

    prompt_suffix: ClassVar[str] = "%#"

    def __call__(self, s: str, style: Style) -> str:
        s = self.escape(s)
        if style.bold:
            s = f"%B{s}%b"
        if style.color is not None:
            s = f"%F{{{style.color.value}}}{s}%f"
        return s

    def escape(self, s: str) -> str:
        return s.replace("%", "%%")


class PlainStyler:
    """Styler for terminals without color support; emits text unchanged"""

    prompt_suffix: ClassVar[str] = "$"

    def __call__(self, s: str, style: Style) -> str:
        return s


#: Stylers selectable on the command line, by option name
STYLERS: dict[str, type[Styler]] = {
    "ansi": ANSIStyler,
    "bash": BashStyler,
    "plain": PlainStyler,
    "zsh": ZshStyler,
}


@dataclass
class Painter:
    styler: Styler
    colors: Mapping[Component, str]

    def __call__(self, s: str, component: Component) -> str:
        return self.styler(s, PALETTE[self.colors[component]])

    def style(self, s: str, style: Style) -> str:
        return self.styler(s, style)

    @property
    def prompt_suffix(self) -> str:
        return self.styler.prompt_suffix
