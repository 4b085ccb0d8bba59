"""Entry points that turn config files into a `CompiledDocument`.

Example:

    result = compile_file(os.path.expanduser("~/.config/swhkd/swhkdrc"))
    for diagnostic in result.diagnostics:
        print(diagnostic)
    print(result.document)

Every call builds its own resolver state, so separate compilations never
share anything and can run side by side (e.g., for a reload).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .document import CompiledDocument
from .errors import SWHKDParserError
from .resolver import DEFAULT_MAX_FILE_SIZE, Merger, SourceFile, load_sources

__all__ = [
    "CompileResult",
    "compile_file",
    "compile_sources",
    "compile_text",
]


@dataclass
class CompileResult:
    """The compiled document along with every recoverable error found.

    Diagnostics are ordered by file, in merge order, and then by line.
    """

    document: CompiledDocument
    diagnostics: List[SWHKDParserError] = field(default_factory=list)


def compile_sources(sources: Sequence[SourceFile]) -> CompileResult:
    """Merge already loaded files, in order, into a document.

    Raises UndefinedModeError if a command switches to a mode nobody defined.
    """
    merger = Merger()
    for source in sources:
        merger.add_file(source)
    merger.modes.validate(merger.bindings())
    merger.apply_unbinds()
    document = merger.modes.freeze(merger.bindings_by_mode)

    file_order = {source.path: i for i, source in enumerate(sources)}
    # sorted() is stable, so errors on one line keep the order they were found in.
    diagnostics = sorted(
        merger.diagnostics,
        key=lambda d: (file_order.get(d.path, len(file_order)), d.line or 0),
    )
    return CompileResult(document, diagnostics)


def compile_file(
    path: str, max_size: int = DEFAULT_MAX_FILE_SIZE
) -> CompileResult:
    """Compile the config file at `path` and everything it imports.

    `max_size` is the size limit in bytes for every file read.

    Raises LexError, ImportResolutionError or UndefinedModeError on fatal
    errors.
    """
    return compile_sources(load_sources(path, max_size))


def compile_text(
    text: str,
    path: Optional[str] = None,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
) -> CompileResult:
    """Compile config text as if it were the contents of the file at `path`.

    Imports are resolved relative to `path`, or to the current directory if
    it's None.
    """
    return compile_sources(load_sources(path, max_size, root_text=text))
