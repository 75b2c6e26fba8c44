#!/usr/bin/env python3
"""
taskctl: local task tracker.

One markdown file per task under the data directory; this module only wires
argument parsing, logging and the command handlers together.
"""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from typing import List, Optional

from config import Settings, init_config
from core.desktop.devtools.application.task_manager import TaskManager
from core.desktop.devtools.interface import cli_commands
from core.desktop.devtools.interface.cli_commands import CliDeps
from core.desktop.devtools.interface.cli_parser import build_parser as build_cli_parser

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Single stderr handler on the `taskctl` logger; idempotent."""
    root = logging.getLogger("taskctl")
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(getattr(h, "_taskctl_cli", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._taskctl_cli = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def build_deps(args) -> CliDeps:
    config_path = Path(args.config) if getattr(args, "config", None) else None
    data_dir = getattr(args, "data_dir", None)

    def manager_factory() -> TaskManager:
        settings = Settings.load(config_path, data_dir=data_dir)
        return TaskManager(settings=settings)

    return CliDeps(manager_factory=manager_factory, init_config=init_config)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = build_cli_parser(commands=cli_commands)
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "version", False):
        try:
            print(pkg_version("taskctl"))
        except PackageNotFoundError:
            print("0.0.0")
        return 0
    if not getattr(args, "command", None):
        parser.print_help()
        return 1
    setup_logging(bool(getattr(args, "verbose", False)))
    return args.func(args, build_deps(args))


if __name__ == "__main__":
    sys.exit(main())
