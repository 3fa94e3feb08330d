from __future__ import annotations
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import subprocess

log = logging.getLogger(__name__)

#: Default limit, in seconds, on the runtime of ``git status``
GIT_TIMEOUT = 3

#: Number of hex digits of the commit hash shown in detached ``HEAD`` state
SHORT_OID_LEN = 7


class GitError(Exception):
    """Raised when a Git command needed by a subcommand fails"""


@dataclass(frozen=True)
class RepoStatus:
    #: The name of the current branch, or ``detached@<short hash>`` when
    #: ``HEAD`` is detached
    branch: str

    #: `True` iff the working tree has staged, unstaged, conflicted, or
    #: untracked changes
    is_dirty: bool = False

    #: The number of commits by which ``HEAD`` is ahead of ``@{upstream}``;
    #: zero if there is no upstream
    ahead: int = 0

    #: The number of commits by which ``HEAD`` is behind ``@{upstream}``;
    #: zero if there is no upstream
    behind: int = 0


def find_repo_root(cwd: str | os.PathLike[str]) -> Path | None:
    """
    Return the nearest directory at or above ``cwd`` that contains a ``.git``
    entry (either a directory or a gitfile), or `None` if there is none or the
    filesystem cannot be examined
    """
    try:
        start = Path(cwd).absolute()
        for d in (start, *start.parents):
            if (d / ".git").exists():
                return d
    except OSError as e:
        log.debug("Could not search for repository from %s: %s", cwd, e)
    return None


def collect(
    cwd: str | os.PathLike[str], timeout: float = GIT_TIMEOUT
) -> RepoStatus | None:
    """
    If ``cwd`` is inside a Git working tree, return a `RepoStatus` describing
    it; otherwise return `None`.

    The status is read from a single ``git status --porcelain=v2 --branch``
    invocation, which reports the branch and the ahead/behind counts from the
    refs without walking history.  Optional locks are disabled so that the
    probe never writes to the repository.  If Git is not installed, the
    command fails, or its runtime exceeds ``timeout``, the repository is
    treated as absent and `None` is returned.
    """
    if find_repo_root(cwd) is None:
        return None
    try:
        r = subprocess.run(
            ["git", "--no-optional-locks", "status", "--porcelain=v2", "--branch"],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
        )
    except FileNotFoundError:
        log.debug("Git is not installed")
        return None
    except subprocess.TimeoutExpired:
        log.debug("`git status` timed out after %s seconds", timeout)
        return None
    except (subprocess.CalledProcessError, OSError, UnicodeDecodeError) as e:
        log.debug("`git status` failed: %s", e)
        return None
    return parse_status(r.stdout)


def parse_status(output: str) -> RepoStatus:
    """Parse the output of ``git status --porcelain=v2 --branch``"""
    branch = "unknown"
    oid: str | None = None
    ahead = 0
    behind = 0
    dirty = False
    for line in output.splitlines():
        if line.startswith("# branch.head "):
            branch = line[len("# branch.head ") :].strip()
        elif line.startswith("# branch.oid "):
            oid = line[len("# branch.oid ") :].strip()
        elif line.startswith("# branch.ab "):
            parts = line[len("# branch.ab ") :].split()
            if len(parts) == 2:
                try:
                    ahead = abs(int(parts[0]))
                    behind = abs(int(parts[1]))
                except ValueError:
                    pass
        elif line.startswith(("1 ", "2 ", "u ", "? ")):
            # Ordinary/renamed/unmerged tracked entries and untracked files.
            # Ignored files ("! ") are not dirt.
            dirty = True
    if branch == "(detached)":
        if oid is not None and oid != "(initial)":
            branch = f"detached@{oid[:SHORT_OID_LEN]}"
        else:
            branch = "detached"
    return RepoStatus(branch=branch, is_dirty=dirty, ahead=ahead, behind=behind)


def git(*args: str, cwd: str | os.PathLike[str] | None = None) -> str:
    """
    Run a Git command (suppressing stderr) and return its stdout with leading &
    trailing whitespace stripped

    :raises GitError: if Git is not installed or the command fails
    """
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=True,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        ).stdout.strip()
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH")
    except subprocess.CalledProcessError:
        raise GitError(f"Git command failed: git {' '.join(args)}")


def list_branches(cwd: str | os.PathLike[str]) -> list[str]:
    """
    Return the names of the local branches of the repository containing
    ``cwd``

    :raises GitError: if ``cwd`` is not in a repository or Git fails
    """
    if find_repo_root(cwd) is None:
        raise GitError("Not in a git repository")
    out = git("branch", "--format=%(refname:short)", cwd=cwd)
    return [b.strip() for b in out.splitlines() if b.strip()]
