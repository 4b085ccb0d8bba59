"""Tool for printing the compiled binding table as plaintext or JSON."""
from __future__ import annotations

import argparse
import json
import sys
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Type

from ..compiler import compile_file
from ..document import Mode
from ..errors import SWHKDParserError
from .common import (
    BASE_PARSER,
    format_error_msg,
    get_command_name,
    print_exceptions,
)

__all__ = ["main"]


class TableEmitter(ABC):
    @abstractmethod
    def emit(self, modes: List[Mode]) -> Iterable[str]:
        raise NotImplementedError


class PlaintextEmitter(TableEmitter):
    """Emit each mode as a header followed by its bindings, one per line."""

    def emit(self, modes: List[Mode]) -> Iterable[str]:
        for mode in modes:
            yield str(mode)


class JSONEmitter(TableEmitter):
    def emit(self, modes: List[Mode]) -> Iterable[str]:
        yield json.dumps(
            {"modes": [mode.to_dict() for mode in modes]}, indent=2
        )


EMITTERS: Dict[str, Type[TableEmitter]] = {
    "txt": PlaintextEmitter,
    "json": JSONEmitter,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command-line tool with the given arguments, without the command name.

    Diagnostics go to stderr and the table to stdout, which is printed even if
    there were diagnostics.  Returns 1 on a fatal error or an unknown mode.
    """
    parser = argparse.ArgumentParser(
        get_command_name(__file__),
        description="Print the bindings of a config after expansion, imports and unbinds",
        parents=[BASE_PARSER],
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=sorted(EMITTERS),
        default="txt",
        help="set the output format (default: %(default)s)",
    )
    parser.add_argument(
        "--mode",
        "-m",
        metavar="NAME",
        action="append",
        help="only print the given mode (may be repeated)",
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

    document = result.document
    if namespace.mode:
        modes = []
        for name in namespace.mode:
            try:
                modes.append(document.mode(name))
            except KeyError:
                print(f"{namespace.config}: no mode named '{name}'", file=sys.stderr)
                return 1
    else:
        modes = list(document.modes.values())

    emitter = EMITTERS[namespace.format]()
    for chunk in emitter.emit(modes):
        print(chunk)
    return 0
