"""Code and utilities common to all command-line tools using this library."""
from __future__ import annotations

import argparse
import os
import sys
from typing import IO, Optional

from .._package import __version__
from ..errors import SWHKDParserError
from ..resolver import DEFAULT_MAX_FILE_SIZE

__all__ = [
    "BASE_PARSER",
    "find_swhkdrc",
    "format_error_msg",
    "get_command_name",
    "print_exceptions",
]


def get_command_name(path: str) -> str:
    """Get command name from __file__."""
    cmd, _ = os.path.splitext(os.path.basename(path))
    return cmd


def find_swhkdrc() -> Optional[str]:
    """Find any existing swhkdrc in the standard directories.

    Looks in $XDG_CONFIG_HOME (default: $HOME/.config) for subdir 'swhkd/',
    then falls back to the system-wide /etc/swhkd/swhkdrc.  Returns `None` if
    neither exists.
    """
    candidates = []
    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    if not xdg_config_home:
        home = os.getenv("HOME")
        if home:
            xdg_config_home = os.path.join(home, ".config")
    if xdg_config_home:
        candidates.append(os.path.join(xdg_config_home, "swhkd", "swhkdrc"))
    candidates.append(os.path.join("/etc", "swhkd", "swhkdrc"))
    for swhkdrc in candidates:
        if os.path.exists(swhkdrc):
            return swhkdrc
    return None


def _parse_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid size: {value!r}"
        ) from None
    if size < 0:
        raise argparse.ArgumentTypeError("size cannot be negative")
    return size


BASE_PARSER = argparse.ArgumentParser(add_help=False)
BASE_PARSER.add_argument(
    "--version",
    "-V",
    action="version",
    version=f"%(prog)s (swhkd-parser) {__version__}",
)
BASE_PARSER.add_argument(
    "--config",
    "-c",
    default=find_swhkdrc(),
    help="the location of the config file (default: $XDG_CONFIG_HOME/swhkd/swhkdrc, then /etc/swhkd/swhkdrc)",
)
BASE_PARSER.add_argument(
    "--max-size",
    "-M",
    type=_parse_size,
    default=DEFAULT_MAX_FILE_SIZE,
    metavar="BYTES",
    help="the largest config file, in bytes, that will be read (default: %(default)s)",
)


def format_error_msg(err: SWHKDParserError, config_filename: str) -> str:
    """Return formatted error message for an error.

    The error's own file is used if it has one, falling back to
    `config_filename`.
    """
    parts = []
    parts.append(err.path or config_filename)
    if err.line is None and err.column is not None:
        raise ValueError(f"missing line but column exists with {err!r}")
    if err.line is not None:
        parts.append(str(err.line))
    if err.column is not None:
        parts.append(str(err.column))
    return f"{':'.join(parts)}: {err.message}"


def print_exceptions(
    ex: BaseException, config_filename: str, file: Optional[IO[str]] = None
) -> None:
    """Print exceptions for a fatal error in order of their time of raising."""
    if file is None:
        file = sys.stderr
    if ex.__context__ is not None and not ex.__suppress_context__:
        print_exceptions(ex.__context__, config_filename, file)
    if isinstance(ex, SWHKDParserError):
        print(f"{format_error_msg(ex, config_filename)} [FATAL]", file=file)
    else:
        print(f"{config_filename}: {ex} [FATAL]", file=file)
