"""Exceptions for the library.

SWHKDParserError is the ancestor for all of the exceptions in the library.

Errors fall into two groups.  Fatal ones (`LexError`, `ImportResolutionError`
and its subclasses, `UndefinedModeError`) are raised out of the compiler.
Item-scoped ones (`ParseError`, `KeyNameError`, `ExpansionError`,
`InvalidModeError`) only drop the offending item: they are collected in a list
of diagnostics alongside the compiled document, as are the purely informative
`MergeCollision`, `UnmatchedUnbind` and `ConflictingModeFlags`.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from .document import Binding

__all__ = [
    "SWHKDParserError",
    # ---
    "LexError",
    "ParseError",
    # ---
    "KeyNameError",
    "UnknownModifierError",
    "UnknownKeyError",
    # ---
    "ExpansionError",
    "GroupLengthMismatchError",
    "UnpairedGroupError",
    "InvalidRangeError",
    "DuplicateModifierError",
    # ---
    "ConfigReadError",
    "ImportResolutionError",
    "MissingFileError",
    "NotRegularFileError",
    "FileTooLargeError",
    "ImportCycleError",
    # ---
    "ModeError",
    "UndefinedModeError",
    "InvalidModeError",
    # ---
    "MergeCollision",
    "UnmatchedUnbind",
    "ConflictingModeFlags",
]


class SWHKDParserError(Exception):
    """Ancestor for all of the exceptions in the library.

    `path` is the file the error was found in, if known.  It's usually filled
    in after the fact by whoever knows which file was being processed.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.path = path

    def __str__(self) -> str:
        if self.line is not None:
            if self.column is None:
                return f"{self.line}: {self.message}"
            else:
                return f"{self.line}:{self.column}: {self.message}"
        elif self.column is not None:
            return f"{self.message} at column {self.column}"
        else:
            return self.message


class LexError(SWHKDParserError):
    """The text of a config file couldn't be tokenized."""

    def __init__(
        self,
        reason: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=reason, line=line, column=column)
        self.reason = reason


class ParseError(SWHKDParserError):
    """A top-level item didn't follow the grammar.

    `expected` describes what the parser was looking for and `found` is the
    text of the offending token (empty at the end of a line).
    """

    def __init__(
        self,
        message: str,
        expected: str,
        found: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.expected = expected
        self.found = found


class KeyNameError(SWHKDParserError):
    """Base class for names missing from the key and modifier tables."""

    def __init__(
        self,
        message: str,
        name: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.name = name


class UnknownModifierError(KeyNameError):
    """A modifier name isn't in the modifier table."""

    pass


class UnknownKeyError(KeyNameError):
    """A key name isn't in the key table."""

    pass


class ExpansionError(SWHKDParserError):
    """Base class for errors while expanding shorthand groups."""

    pass


class GroupLengthMismatchError(ExpansionError):
    """Aligned groups had a different number of members."""

    def __init__(
        self,
        message: str,
        hotkey_cases: int,
        command_cases: int,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.hotkey_cases = hotkey_cases
        self.command_cases = command_cases


class UnpairedGroupError(ExpansionError):
    """A command group had no hotkey group at the same ordinal to align with."""

    def __init__(
        self,
        message: str,
        ordinal: int,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.ordinal = ordinal


class InvalidRangeError(ExpansionError):
    """A range such as `a..f` or `1..9` couldn't be expanded."""

    def __init__(
        self,
        message: str,
        start: str,
        end: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.start = start
        self.end = end


class DuplicateModifierError(ExpansionError):
    """A modifier was repeated in the same expanded hotkey."""

    def __init__(
        self,
        message: str,
        modifier: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.modifier = modifier


class ConfigReadError(SWHKDParserError):
    """Base class for errors related to reading config files."""

    pass


class ImportResolutionError(ConfigReadError):
    """Base class for file-scoped errors while following imports.

    These abort the whole compilation.
    """

    pass


class MissingFileError(ImportResolutionError):
    """A config file or one of its imports doesn't exist."""

    pass


class NotRegularFileError(ImportResolutionError):
    """A config file resolved to a directory, device or other non-regular file."""

    pass


class FileTooLargeError(ImportResolutionError):
    """A config file exceeded the configured size cap."""

    def __init__(
        self,
        message: str,
        size: int,
        max_size: int,
        line: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message=message, line=line, path=path)
        self.size = size
        self.max_size = max_size


class ImportCycleError(ImportResolutionError):
    """A file transitively imported itself.

    `path_chain` starts and ends with the same canonical path.
    """

    def __init__(
        self,
        message: str,
        path_chain: Sequence[str],
        line: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message=message, line=line, path=path)
        self.path_chain: List[str] = list(path_chain)


class ModeError(SWHKDParserError):
    """Base class for errors related to modes."""

    pass


class UndefinedModeError(ModeError):
    """A command referenced a mode that no file defines."""

    def __init__(
        self,
        message: str,
        mode: str,
        line: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message=message, line=line, path=path)
        self.mode = mode


class InvalidModeError(ModeError):
    """A mode declaration was not allowed, e.g. a oneoff default mode."""

    def __init__(
        self,
        message: str,
        mode: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.mode = mode


class MergeCollision(SWHKDParserError):
    """Two bindings in the same mode shared a trigger: the later one won.

    This is never raised, only reported.
    """

    def __init__(
        self,
        message: str,
        kept: Binding,
        replaced: Binding,
        line: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message=message, line=line, path=path)
        self.kept = kept
        self.replaced = replaced


class UnmatchedUnbind(SWHKDParserError):
    """An unbind statement didn't remove anything."""

    pass


class ConflictingModeFlags(SWHKDParserError):
    """A mode was declared again with different flags: the later ones won."""

    def __init__(
        self,
        message: str,
        mode: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message=message, line=line, column=column)
        self.mode = mode
