"""
runstamp command line.

Usage:
    runstamp [--log-level LEVEL] [--log-format json|console] <command> [args]
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from runstamp.cli.realize import (
    handle_realize_command,
    handle_stamp_command,
    register_realize_parser,
    register_stamp_parser,
)
from runstamp.config import get_settings
from runstamp.config.settings import LOG_LEVELS
from runstamp.core.errors import ConfigurationError, ExitCode, format_error_message
from runstamp.logging import configure_logging

HANDLERS = {
    "realize": handle_realize_command,
    "stamp": handle_stamp_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runstamp",
        description="Stamp RunTemplates for pipelines and report their outputs",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (overrides RUNSTAMP_LOG_LEVEL)",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Log format (overrides RUNSTAMP_LOG_FORMAT)",
    )

    subparsers = parser.add_subparsers(dest="command")
    register_realize_parser(subparsers)
    register_stamp_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return ExitCode.SUCCESS

    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(format_error_message(e), file=sys.stderr)
        return e.exit_code

    configure_logging(
        level=args.log_level or settings.log_level,
        fmt=args.log_format or settings.log_format,
    )
    return HANDLERS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
