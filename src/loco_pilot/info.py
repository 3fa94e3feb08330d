from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import getpass
import logging
import os
from pathlib import Path
import socket
from .config import EffectiveConfig, PromptStyle
from .git import GIT_TIMEOUT, RepoStatus, collect
from .styles import AHEAD_STYLE, BEHIND_STYLE, Painter, Styler
from .styles import Component as C

log = logging.getLogger(__name__)

#: Paths no longer than this many characters are never shortened
MAX_CWD_LEN = 15

#: The path component that stands in for elided components
ELLIPSIS = "..."

#: Format of the timestamp shown by the "info" & "emoji" styles
TIME_FORMAT = "%H:%M:%S"


@dataclass(frozen=True)
class PathDisplay:
    #: The path to display, with the home directory replaced by ``~``
    path: str

    #: `True` iff components were elided from the path
    shortened: bool = False


def shorten(absolute_path: str, home_dir: str, sep: str = os.sep) -> PathDisplay:
    """
    Prepare ``absolute_path`` for display.  If it is at or under ``home_dir``,
    that prefix is replaced by ``~``.  If the result is longer than
    `MAX_CWD_LEN` characters, everything between the first component and the
    last two is replaced by a single ``...`` component.

    >>> shorten("/home/user/deeply/nested/folders/project/src", "/home/user", "/")
    PathDisplay(path='~/.../project/src', shortened=True)
    >>> shorten("/var/log", "/home/user", "/")
    PathDisplay(path='/var/log', shortened=False)
    """
    p = absolute_path
    home = home_dir.rstrip(sep)
    # An empty or root home directory would turn every path into "~/...".
    if home and (p == home or p.startswith(home + sep)):
        p = "~" + p[len(home) :]
    if len(p) <= MAX_CWD_LEN:
        return PathDisplay(p)
    parts = p.split(sep)
    if len(parts) <= 3:
        return PathDisplay(p)
    short = sep.join([parts[0], ELLIPSIS, *parts[-2:]])
    return PathDisplay(short, shortened=short != p)


@dataclass
class PromptInfo:
    username: str
    hostname: str

    #: The current working directory, prepared for display
    cwd: PathDisplay

    #: Status of the Git repository containing the current directory, or
    #: `None` if there is none or Git integration is disabled
    git: RepoStatus | None

    #: The time at which the prompt is being rendered
    now: datetime

    @classmethod
    def get(
        cls, config: EffectiveConfig, git_timeout: float = GIT_TIMEOUT
    ) -> PromptInfo:
        cwd = getcwd()
        if config.show_git and config.style is not PromptStyle.MINIMAL and cwd:
            gs = collect(cwd, timeout=git_timeout)
        else:
            gs = None
        return cls(
            username=getusername(),
            hostname=gethostname(),
            cwd=shorten(cwd, gethome()),
            git=gs,
            now=datetime.now(),
        )


def getcwd() -> str:
    # Prefer $PWD to os.getcwd() as the former does not resolve symlinks
    try:
        return os.environ.get("PWD") or os.getcwd()
    except OSError as e:
        log.debug("Could not determine current directory: %s", e)
        return ""


def gethome() -> str:
    try:
        return str(Path.home())
    except (KeyError, RuntimeError) as e:
        log.debug("Could not determine home directory: %s", e)
        return ""


def getusername() -> str:
    if user := os.environ.get("USER"):
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "user"


def gethostname() -> str:
    if host := os.environ.get("HOSTNAME") or os.environ.get("HOST"):
        return host
    try:
        return socket.gethostname()
    except OSError:
        return "localhost"


def render(config: EffectiveConfig, info: PromptInfo, styler: Styler) -> str:
    """
    Construct & return the complete prompt string for ``info`` in the layout
    selected by ``config.style``
    """
    paint = Painter(styler=styler, colors=config.colors)
    style = config.style

    if style is PromptStyle.MINIMAL:
        return paint.prompt_suffix + " "

    time = paint(info.now.strftime(TIME_FORMAT), C.TIME)
    user = paint(info.username, C.USERNAME)
    host = paint(info.hostname, C.HOSTNAME)
    cwd = paint(info.cwd.path, C.DIRECTORY)
    if config.show_git and info.git is not None:
        gitseg = git_segment(info.git, paint, emoji=style is PromptStyle.EMOJI)
    else:
        gitseg = ""

    if style is PromptStyle.INFO:
        return f"[{time}] {user}@{host}: {cwd}{gitseg} {paint.prompt_suffix} "
    elif style is PromptStyle.EMOJI:
        return f"🕒 {time} 👤 {user} 🖥️  {host} 📁 {cwd}{gitseg} ➡️  "
    else:
        return f"{user}@{host}:{cwd}{gitseg} {paint.prompt_suffix} "


def git_segment(gs: RepoStatus, paint: Painter, emoji: bool = False) -> str:
    """
    Returns the portion of the prompt string (including the leading space)
    dedicated to showing the status of the current Git repository
    """
    if emoji:
        p = " 🔖 " + paint(gs.branch, C.GIT_BRANCH)
    else:
        p = " (" + paint(gs.branch, C.GIT_BRANCH) + ")"
    if gs.is_dirty:
        p += paint(" 🔴" if emoji else "*", C.GIT_DIRTY)
    if gs.ahead:
        # Show commits ahead of upstream:
        p += " " + paint.style(f"↑{gs.ahead}", AHEAD_STYLE)
    if gs.behind:
        # Show commits behind upstream:
        p += " " + paint.style(f"↓{gs.behind}", BEHIND_STYLE)
    return p
