"""Tool for checking a config and its imports for errors."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from ..compiler import compile_file
from ..errors import SWHKDParserError
from .common import (
    BASE_PARSER,
    format_error_msg,
    get_command_name,
    print_exceptions,
)

__all__ = ["main"]


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command-line tool with the given arguments, without the command name.

    Returns 1 on a fatal error, or if there were any diagnostics with
    `--werror`, and 0 otherwise.
    """
    parser = argparse.ArgumentParser(
        get_command_name(__file__),
        description="Check a config and its imports for syntax errors, unknown keys, collisions and undefined modes",
        parents=[BASE_PARSER],
    )
    parser.add_argument(
        "--werror",
        "-W",
        action="store_true",
        help="exit with an error status if there are any diagnostics",
    )

    namespace = parser.parse_args(argv)
    if namespace.config is None:
        parser.error("no config file found: pass one with --config")

    try:
        result = compile_file(namespace.config, namespace.max_size)
    except SWHKDParserError as e:
        print_exceptions(e, namespace.config)
        return 1

    for diagnostic in result.diagnostics:
        print(format_error_msg(diagnostic, namespace.config), file=sys.stderr)

    if namespace.werror and result.diagnostics:
        return 1
    return 0
