"""The resolved, flattened form of a set of config files.

Everything here is immutable: a `CompiledDocument` is a snapshot that can be
handed to a running daemon and swapped out for a fresh one on reload.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Tuple,
)

from .keys import Key, Modifier, key_name, modifier_name, sort_modifiers

__all__ = [
    "DEFAULT_MODE_ID",
    "DEFAULT_MODE_NAME",
    "Binding",
    "CompiledDocument",
    "Mode",
    "Trigger",
    "UnbindEntry",
    "format_hotkey",
]

DEFAULT_MODE_ID = 0
DEFAULT_MODE_NAME = "default"

Trigger = Tuple[FrozenSet[Modifier], Key, bool]


def format_hotkey(
    modifiers: Iterable[Modifier],
    key: Key,
    send: bool = False,
    on_release: bool = False,
) -> str:
    """Return the canonical text of a hotkey, e.g. `super + shift + a ~`."""
    names = [modifier_name(mod) for mod in sort_modifiers(modifiers)]
    names.append(key_name(key))
    text = " + ".join(names)
    if send:
        text += " @send"
    if on_release:
        text += " ~"
    return text


@dataclass(frozen=True)
class Binding:
    """A concrete hotkey and its command in a single mode.

    Instance variables:
        modifiers: the set of modifiers that must be held.
        key: the key code.
        command: the command text after expansion, `@mode` references included.
        send: whether the key event is passed through as well.
        on_release: whether the binding fires on release instead of press.
        mode: the id of the mode the binding belongs to.
        mode_switches: names of the modes referenced by `command`, in order.
        path: the file the binding came from; not part of equality.
        line: the line the binding came from; not part of equality.
    """

    modifiers: FrozenSet[Modifier]
    key: Key
    command: str
    send: bool = False
    on_release: bool = False
    mode: int = DEFAULT_MODE_ID
    mode_switches: Tuple[str, ...] = ()
    path: Optional[str] = field(default=None, compare=False)
    line: Optional[int] = field(default=None, compare=False)

    @property
    def trigger(self) -> Trigger:
        """Return what the daemon matches key events against."""
        return (self.modifiers, self.key, self.on_release)

    @property
    def hotkey(self) -> str:
        return format_hotkey(
            self.modifiers, self.key, self.send, self.on_release
        )

    def __str__(self) -> str:
        return f"{self.hotkey} -> {self.command}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modifiers": [
                modifier_name(mod) for mod in sort_modifiers(self.modifiers)
            ],
            "key": key_name(self.key),
            "keycode": int(self.key),
            "command": self.command,
            "send": self.send,
            "on_release": self.on_release,
            "mode_switches": list(self.mode_switches),
            "path": self.path,
            "line": self.line,
        }


@dataclass(frozen=True)
class UnbindEntry:
    """A request to remove every binding for a hotkey in a mode."""

    modifiers: FrozenSet[Modifier]
    key: Key
    mode: int = DEFAULT_MODE_ID
    path: Optional[str] = field(default=None, compare=False)
    line: Optional[int] = field(default=None, compare=False)

    def matches(self, binding: Binding) -> bool:
        """Return whether `binding` is removed by this entry, on press or release."""
        return (
            binding.mode == self.mode
            and binding.modifiers == self.modifiers
            and binding.key == self.key
        )

    def __str__(self) -> str:
        return f"unbind {format_hotkey(self.modifiers, self.key)}"


@dataclass(frozen=True)
class Mode:
    """A named keymap and the flags the daemon needs to run it.

    Instance variables:
        id: the mode id; the default mode is always 0.
        name: the mode name as declared.
        oneoff: whether the daemon returns to the default mode after one binding.
        swallow: whether unmatched key events are consumed.
        bindings: the bindings of the mode in definition order.
    """

    id: int
    name: str
    oneoff: bool = False
    swallow: bool = False
    bindings: Tuple[Binding, ...] = ()

    def find(
        self,
        modifiers: Iterable[Modifier],
        key: Key,
        on_release: bool = False,
    ) -> Optional[Binding]:
        """Return the binding for the given trigger, if any."""
        trigger = (frozenset(modifiers), key, on_release)
        for binding in self.bindings:
            if binding.trigger == trigger:
                return binding
        return None

    @property
    def header(self) -> str:
        flags = "".join(
            f" {flag}"
            for flag, is_set in (("oneoff", self.oneoff), ("swallow", self.swallow))
            if is_set
        )
        return f"mode {self.name}{flags}:"

    def __str__(self) -> str:
        lines = [self.header]
        lines.extend(f"    {binding}" for binding in self.bindings)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "oneoff": self.oneoff,
            "swallow": self.swallow,
            "bindings": [binding.to_dict() for binding in self.bindings],
        }


@dataclass(frozen=True)
class CompiledDocument:
    """The final binding table: every mode and its bindings.

    Instance variables:
        modes: mapping of mode id to `Mode`, in id order.
        mode_name_index: mapping of mode name to mode id.
    """

    modes: Mapping[int, Mode]
    mode_name_index: Mapping[str, int]

    def __post_init__(self) -> None:
        # Read-only views over private copies, so callers can't mutate the snapshot.
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))
        object.__setattr__(
            self,
            "mode_name_index",
            MappingProxyType(dict(self.mode_name_index)),
        )

    @property
    def default_mode(self) -> Mode:
        return self.modes[DEFAULT_MODE_ID]

    def mode(self, name: str) -> Mode:
        """Return the mode called `name`.

        Raises KeyError if there is no such mode.
        """
        return self.modes[self.mode_name_index[name]]

    def bindings(self) -> Iterator[Binding]:
        """Yield every binding of every mode, ordered by mode id."""
        for mode in self.modes.values():
            yield from mode.bindings

    def __str__(self) -> str:
        return "\n".join(str(mode) for mode in self.modes.values())

    def to_dict(self) -> Dict[str, Any]:
        return {"modes": [mode.to_dict() for mode in self.modes.values()]}
