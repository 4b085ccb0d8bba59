"""Bookkeeping for modes: ids, flags and `@mode` references."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .document import (
    DEFAULT_MODE_ID,
    DEFAULT_MODE_NAME,
    Binding,
    CompiledDocument,
    Mode,
)
from .errors import (
    ConflictingModeFlags,
    InvalidModeError,
    SWHKDParserError,
    UndefinedModeError,
)
from .parser import ModeBlock

__all__ = ["ModeTable"]


@dataclass
class _ModeDecl:
    id: int
    name: str
    oneoff: bool = False
    swallow: bool = False
    # Whether a `mode` block has been seen, as opposed to the implicit default.
    declared: bool = False


class ModeTable:
    """Mode declarations collected while merging files.

    The default mode always exists with id 0.  Other modes get ids in order of
    their first declaration.
    """

    def __init__(
        self, diagnostics: Optional[List[SWHKDParserError]] = None
    ) -> None:
        self._modes: Dict[str, _ModeDecl] = {
            DEFAULT_MODE_NAME: _ModeDecl(DEFAULT_MODE_ID, DEFAULT_MODE_NAME)
        }
        # May be shared with the caller so diagnostics stay in merge order.
        self.diagnostics = [] if diagnostics is None else diagnostics

    def __contains__(self, name: object) -> bool:
        return name in self._modes

    def __len__(self) -> int:
        return len(self._modes)

    def register(self, block: ModeBlock, path: Optional[str] = None) -> int:
        """Declare the mode of `block` and return its id.

        A mode may be declared any number of times, and its bindings are
        merged.  If the flags differ from an earlier declaration, the later
        ones win and a ConflictingModeFlags diagnostic is recorded.

        Raises InvalidModeError for a oneoff default mode.
        """
        if block.name == DEFAULT_MODE_NAME and block.oneoff:
            err = InvalidModeError(
                "The default mode can't be oneoff",
                mode=block.name,
                line=block.line,
                column=block.col,
            )
            err.path = path
            raise err
        decl = self._modes.get(block.name)
        if decl is None:
            decl = _ModeDecl(len(self._modes), block.name)
            self._modes[block.name] = decl
        elif decl.declared and (decl.oneoff, decl.swallow) != (
            block.oneoff,
            block.swallow,
        ):
            diag = ConflictingModeFlags(
                f"Mode '{block.name}' redeclared with different flags",
                mode=block.name,
                line=block.line,
                column=block.col,
            )
            diag.path = path
            self.diagnostics.append(diag)
        decl.oneoff = block.oneoff
        decl.swallow = block.swallow
        decl.declared = True
        return decl.id

    def validate(self, bindings: Iterable[Binding]) -> None:
        """Check that every `@mode` reference names a declared mode.

        Raises UndefinedModeError for the first one that doesn't.
        """
        for binding in bindings:
            for name in binding.mode_switches:
                if name not in self._modes:
                    raise UndefinedModeError(
                        f"Undefined mode '@{name}'",
                        mode=name,
                        line=binding.line,
                        path=binding.path,
                    )

    def freeze(
        self, bindings_by_mode: Mapping[int, Sequence[Binding]]
    ) -> CompiledDocument:
        """Build the final document from the bindings of each mode."""
        modes = {}
        for decl in sorted(self._modes.values(), key=lambda d: d.id):
            modes[decl.id] = Mode(
                id=decl.id,
                name=decl.name,
                oneoff=decl.oneoff,
                swallow=decl.swallow,
                bindings=tuple(bindings_by_mode.get(decl.id, ())),
            )
        return CompiledDocument(
            modes, {decl.name: decl.id for decl in self._modes.values()}
        )
