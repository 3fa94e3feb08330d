from __future__ import annotations
import argparse
import logging
import os
from pathlib import Path
import sys
from . import __version__
from .config import (
    DEFAULTS,
    ConfigError,
    PromptStyle,
    config_path,
    describe,
    load_settings,
    resolve,
    save_settings,
    set_setting,
)
from .git import GIT_TIMEOUT, GitError, collect, list_branches
from .info import PromptInfo, getcwd, render
from .styles import STYLERS, BashStyler, PlainStyler, Styler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loco-pilot", description="A customizable bash/zsh prompt"
    )
    parser.add_argument(
        "-s",
        "--style",
        choices=[s.value for s in PromptStyle],
        help="The style of prompt to display  [default: from config]",
    )
    parser.add_argument(
        "--no-git",
        action="store_true",
        help="Do not show Git information for this prompt",
    )
    for name, help_text in [
        ("ansi", "Format prompt for direct display"),
        ("bash", "Format prompt for Bash's PS1 (default)"),
        ("plain", "Format prompt without colors"),
        ("zsh", "Format prompt for zsh's PS1"),
    ]:
        parser.add_argument(
            f"--{name}",
            action="store_const",
            dest="stylecls",
            const=STYLERS[name],
            help=help_text,
        )
    parser.add_argument(
        "--git-timeout",
        type=float,
        metavar="SECONDS",
        default=GIT_TIMEOUT,
        help=(
            "Disable Git integration if `git status` runtime exceeds timeout"
            f"  [default: {GIT_TIMEOUT}]"
        ),
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        metavar="PATH",
        help="Read & write settings at PATH instead of the default location",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log diagnostics at the given level to stderr",
    )
    parser.add_argument(
        "--gbc",
        action="store_const",
        dest="command",
        const="git-branch-copy",
        help="Print the current Git branch name",
    )
    parser.add_argument(
        "--gbs",
        action="store_const",
        dest="command",
        const="git-branch-select",
        help="Select a local Git branch and print its name",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", title="commands")
    config_parser = subparsers.add_parser(
        "config",
        help="Show or change the persisted settings",
        description=(
            "With no arguments, show the current configuration.  With a key"
            " and a value, store the value for that key."
        ),
    )
    config_parser.add_argument("key", nargs="?", help="The setting to change")
    config_parser.add_argument("value", nargs="?", help="The new value")
    subparsers.add_parser("version", help="Display version information")
    subparsers.add_parser(
        "git-branch-copy", help="Print the current Git branch name"
    )
    subparsers.add_parser(
        "git-branch-select", help="Select a local Git branch and print its name"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level is not None:
        logging.basicConfig(
            format="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
            level=getattr(logging, args.log_level),
        )
    if args.command == "config" and args.key is not None and args.value is None:
        parser.error("config: a value is required when a key is given")
    try:
        run(args)
    except ConfigError as e:
        sys.exit(f"loco-pilot: {e}")


def run(args: argparse.Namespace) -> None:
    if args.command == "version":
        print(f"Version: {__version__}")
        return
    if args.command == "git-branch-copy":
        gs = collect(getcwd(), timeout=args.git_timeout)
        if gs is None:
            sys.exit(
                "Not in a git repository or unable to determine current branch"
            )
        print(gs.branch)
        return
    if args.command == "git-branch-select":
        select_branch()
        return

    path = args.config_file or config_path()
    persisted = load_settings(path) if path is not None else {}
    if args.command == "config":
        if args.key is None:
            config = resolve(DEFAULTS, persisted, {})
            print("Current configuration:")
            for line in describe(config):
                print("  " + line)
        elif path is None:
            raise ConfigError("Could not determine config directory")
        else:
            settings = set_setting(persisted, args.key, args.value)
            save_settings(path, settings)
            print(f"{args.key} set to: {settings[args.key]}")
        return

    override: dict[str, object] = {}
    if args.style is not None:
        override["style"] = args.style
    if args.no_git:
        override["show_git"] = False
    config = resolve(DEFAULTS, persisted, override)
    info = PromptInfo.get(config, git_timeout=args.git_timeout)
    print(render(config, info, get_styler(args.stylecls)))


def get_styler(stylecls: type[Styler] | None) -> Styler:
    if stylecls is None:
        stylecls = PlainStyler if os.environ.get("NO_COLOR") else BashStyler
    return stylecls()


def select_branch() -> None:
    try:
        branches = list_branches(getcwd())
    except GitError as e:
        sys.exit(f"Failed to get git branches: {e}")
    if not branches:
        sys.exit("No git branches found")
    print("Select a branch:")
    for i, b in enumerate(branches, start=1):
        print(f"{i}. {b}")
    try:
        choice = int(input(f"Enter number (1-{len(branches)}): "))
    except (EOFError, ValueError):
        choice = 0
    if not 1 <= choice <= len(branches):
        sys.exit("Invalid selection")
    print(branches[choice - 1])


if __name__ == "__main__":
    main()
