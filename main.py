#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
koh: ephemeral git worktree workspaces paired with tmux windows.
Command-line entry point.
"""

import argparse
import sys

from cleanup import run_cleanup
from config import detect_capabilities, get_namespace, load_config
from errors import KohError
from logging_config import get_logger, log_exception, setup_logging
from models import TeardownReport
from reporting import ConsoleReporter
from tmux_utils import TmuxClient

__version__ = "0.1.0"

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="koh",
        description="Manage git worktree workspaces paired with tmux windows.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    cleanup_parser = subparsers.add_parser(
        "cleanup",
        help="close tmux window and remove worktree",
        description=(
            "Closes the associated tmux window and removes the git worktree. "
            "If no worktree name is provided and you're currently in a worktree, "
            "it will automatically clean up the current worktree."
        ),
    )
    cleanup_parser.add_argument("worktree_name", nargs="?", help="name of the worktree under the namespace directory")
    cleanup_parser.add_argument(
        "-f", "--force",
        action="store_true",
        default=None,
        help="remove the worktree even if it has modified or untracked files",
    )
    return parser


def cmd_cleanup(args: argparse.Namespace, cfg: dict) -> int:
    force = args.force if args.force is not None else bool(cfg.get("force_remove"))
    report = TeardownReport(listeners=[ConsoleReporter()])
    run_cleanup(
        args.worktree_name,
        detect_capabilities(),
        namespace=get_namespace(cfg),
        force=force,
        tmux=TmuxClient(command=cfg.get("tmux_command") or "tmux"),
        report=report,
    )
    return 0


COMMANDS = {
    "cleanup": cmd_cleanup,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config()
    setup_logging(
        level="DEBUG" if args.verbose else cfg.get("log_level", "WARNING"),
        log_to_file=bool(cfg.get("log_to_file", True)),
        log_to_console=args.verbose,
    )
    logger.debug(f"Running koh {args.command} with {vars(args)}")

    try:
        return COMMANDS[args.command](args, cfg)
    except KohError as e:
        log_exception(logger, f"koh {args.command} failed: {e}", command=args.command)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
