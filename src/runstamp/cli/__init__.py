"""
CLI commands for runstamp.
"""

from runstamp.cli.realize import realize_command, stamp_command

__all__ = [
    "realize_command",
    "stamp_command",
]
