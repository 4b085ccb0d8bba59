"""Following imports between config files and merging their items.

`load_sources` reads and parses every file reachable from the root, and
`Merger` turns their items into bindings, one file at a time.  Files are
merged imports-first, so anything in the root overrides what it imports.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from .document import DEFAULT_MODE_ID, Binding, Trigger, UnbindEntry
from .errors import (
    ExpansionError,
    ImportCycleError,
    ImportResolutionError,
    InvalidModeError,
    KeyNameError,
    MergeCollision,
    SWHKDParserError,
    UnmatchedUnbind,
)
from .modes import ModeTable
from .parser import (
    BindingItem,
    Document,
    ImportItem,
    Item,
    ModeBlock,
    UnbindItem,
    parse_text,
)
from .seq import expand_binding, expand_unbind
from .util import read_config_file

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "Merger",
    "SourceFile",
    "canonical_path",
    "load_sources",
]

DEFAULT_MAX_FILE_SIZE = 1024 * 1024

# Stands in for the path of config text that didn't come from a file.
STRING_SOURCE = "<string>"


@dataclass
class SourceFile:
    """A parsed config file.

    Instance variables:
        path: the canonical path of the file.
        document: the parse result, including its parse errors.
    """

    path: str
    document: Document


def canonical_path(path: str, base_dir: Optional[str] = None) -> str:
    """Return the canonical form of `path`, resolved against `base_dir`.

    `~` is expanded and symlinks are resolved, so one file always maps to the
    same string however it was reached.
    """
    path = os.path.expanduser(path)
    if base_dir is not None and not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    return os.path.realpath(path)


def _load(path: str, max_size: int) -> Document:
    return parse_text(read_config_file(path, max_size), path)


@dataclass
class _Frame:
    source: SourceFile
    base_dir: str
    imports: List[ImportItem]
    next_import: int = 0


def load_sources(
    root_path: Optional[str],
    max_size: int = DEFAULT_MAX_FILE_SIZE,
    root_text: Optional[str] = None,
) -> List[SourceFile]:
    """Read the root file and everything it imports, directly or not.

    If `root_text` is given it is used as the contents of the root file
    instead of reading `root_path`, which may then be None; imports are then
    resolved against the current directory.

    Returns the files in merge order: each file comes after everything it
    imports, so the root is last.  A file imported from several places is only
    returned once, at its first position.

    Raises ImportCycleError if a file imports itself, directly or not, and
    ImportResolutionError subclasses (with the line of the import directive)
    for files that can't be read.  No file is expanded before all have loaded.
    """
    if root_path is None:
        root_key = STRING_SOURCE
        base_dir = os.getcwd()
    else:
        root_key = canonical_path(root_path)
        base_dir = os.path.dirname(root_key)
    if root_text is None:
        assert root_path is not None, "need a path or text"
        root_doc = _load(root_key, max_size)
    else:
        root_doc = parse_text(root_text, root_key)

    # An explicit stack instead of recursion, so long import chains can't
    # exhaust the call stack.
    frames = [_Frame(SourceFile(root_key, root_doc), base_dir, root_doc.imports)]
    on_stack: Set[str] = {root_key}
    loaded: Set[str] = set()
    order: List[SourceFile] = []
    while frames:
        frame = frames[-1]
        if frame.next_import >= len(frame.imports):
            frames.pop()
            on_stack.discard(frame.source.path)
            loaded.add(frame.source.path)
            order.append(frame.source)
            continue

        imp = frame.imports[frame.next_import]
        frame.next_import += 1
        target = canonical_path(imp.path, frame.base_dir)
        if target in on_stack:
            chain = [f.source.path for f in frames]
            chain = chain[chain.index(target) :] + [target]
            raise ImportCycleError(
                "Import cycle: " + " -> ".join(chain),
                path_chain=chain,
                line=imp.line,
                path=frame.source.path,
            )
        if target in loaded:
            continue
        try:
            document = _load(target, max_size)
        except ImportResolutionError as e:
            # Point at the import directive rather than the missing file.
            e.line = imp.line
            e.column = imp.col
            e.path = frame.source.path
            raise
        frames.append(
            _Frame(
                SourceFile(target, document),
                os.path.dirname(target),
                document.imports,
            )
        )
        on_stack.add(target)
    return order


@dataclass
class Merger:
    """Accumulates the bindings and unbinds of parsed files.

    Bindings are kept per mode in definition order.  A binding with the same
    trigger as an earlier one in its mode takes the earlier one's place, and
    a MergeCollision is recorded.

    Instance variables:
        diagnostics: every recoverable error, including those from parsing.
        modes: the modes declared so far.
    """

    diagnostics: List[SWHKDParserError] = field(default_factory=list)
    modes: ModeTable = field(init=False)
    _bindings: Dict[int, Dict[Trigger, Binding]] = field(
        default_factory=dict, init=False, repr=False
    )
    _unbinds: List[UnbindEntry] = field(
        default_factory=list, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.modes = ModeTable(self.diagnostics)

    def add_file(self, source: SourceFile) -> None:
        """Merge every item of `source` into what has been merged so far."""
        self.diagnostics.extend(source.document.diagnostics)
        for item in source.document.items:
            self._add_item(item, DEFAULT_MODE_ID, source.path)

    def _add_item(self, item: Item, mode_id: int, path: str) -> None:
        try:
            if isinstance(item, ImportItem):
                # Already followed by load_sources.
                pass
            elif isinstance(item, ModeBlock):
                block_mode = self.modes.register(item, path)
                for subitem in item.body:
                    self._add_item(subitem, block_mode, path)
            elif isinstance(item, BindingItem):
                for binding in expand_binding(item, mode_id, path):
                    self._add_binding(binding)
            elif isinstance(item, UnbindItem):
                self._unbinds.extend(expand_unbind(item, mode_id, path))
            else:
                raise TypeError(f"unknown item type {type(item).__name__}")
        except (KeyNameError, ExpansionError, InvalidModeError) as e:
            if e.path is None:
                e.path = path
            self.diagnostics.append(e)

    def _add_binding(self, binding: Binding) -> None:
        table = self._bindings.setdefault(binding.mode, {})
        old = table.get(binding.trigger)
        if old is not None:
            self.diagnostics.append(
                MergeCollision(
                    f"'{binding.hotkey}' redefined, overriding the binding "
                    f"from {old.path}:{old.line}",
                    kept=binding,
                    replaced=old,
                    line=binding.line,
                    path=binding.path,
                )
            )
        # Replacing an existing key keeps its position in the dict.
        table[binding.trigger] = binding

    def apply_unbinds(self) -> None:
        """Remove the bindings matched by every unbind seen so far.

        Each unbind removes both the press and release bindings of its hotkey.
        Unbinds that match nothing are reported as UnmatchedUnbind.
        """
        for entry in self._unbinds:
            table = self._bindings.get(entry.mode, {})
            matched = [
                trigger
                for trigger, binding in table.items()
                if entry.matches(binding)
            ]
            if not matched:
                self.diagnostics.append(
                    UnmatchedUnbind(
                        f"'{entry}' doesn't match any binding",
                        line=entry.line,
                        path=entry.path,
                    )
                )
            for trigger in matched:
                del table[trigger]
        self._unbinds.clear()

    def bindings(self) -> Iterator[Binding]:
        for table in self._bindings.values():
            yield from table.values()

    @property
    def bindings_by_mode(self) -> Dict[int, List[Binding]]:
        return {
            mode: list(table.values())
            for mode, table in self._bindings.items()
        }
