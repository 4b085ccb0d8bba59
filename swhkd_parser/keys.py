"""Tables mapping key and modifier names to the codes used by the daemon.

Key codes are the values from `linux/input-event-codes.h`, so they are stable
and can be handed to evdev as-is.  Both tables are built once at import time
and exposed as read-only mappings, so they can be shared by any number of
compilations.

Lookup is case-insensitive and most keys have a few aliases (e.g., `escape`
and `esc`).  The first name listed for a key is its canonical name.
"""
from __future__ import annotations

import string
from enum import Enum, IntEnum, auto
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .errors import UnknownKeyError, UnknownModifierError

__all__ = [
    "KEY_NAMES",
    "MODIFIER_NAMES",
    "Key",
    "Modifier",
    "key_name",
    "modifier_name",
    "resolve_key",
    "resolve_modifier",
    "sort_modifiers",
]


class Modifier(Enum):
    """Modifiers that may be held for a hotkey.

    `ANY` matches whatever modifiers happen to be held.
    """

    SUPER = auto()
    SHIFT = auto()
    CTRL = auto()
    ALT = auto()
    ALTGR = auto()
    ANY = auto()


class Key(IntEnum):
    """Keys recognized in hotkeys, valued as in linux/input-event-codes.h."""

    KEY_ESC = 1
    KEY_1 = 2
    KEY_2 = 3
    KEY_3 = 4
    KEY_4 = 5
    KEY_5 = 6
    KEY_6 = 7
    KEY_7 = 8
    KEY_8 = 9
    KEY_9 = 10
    KEY_0 = 11
    KEY_MINUS = 12
    KEY_EQUAL = 13
    KEY_BACKSPACE = 14
    KEY_TAB = 15
    KEY_Q = 16
    KEY_W = 17
    KEY_E = 18
    KEY_R = 19
    KEY_T = 20
    KEY_Y = 21
    KEY_U = 22
    KEY_I = 23
    KEY_O = 24
    KEY_P = 25
    KEY_LEFTBRACE = 26
    KEY_RIGHTBRACE = 27
    KEY_ENTER = 28
    KEY_LEFTCTRL = 29
    KEY_A = 30
    KEY_S = 31
    KEY_D = 32
    KEY_F = 33
    KEY_G = 34
    KEY_H = 35
    KEY_J = 36
    KEY_K = 37
    KEY_L = 38
    KEY_SEMICOLON = 39
    KEY_APOSTROPHE = 40
    KEY_GRAVE = 41
    KEY_LEFTSHIFT = 42
    KEY_BACKSLASH = 43
    KEY_Z = 44
    KEY_X = 45
    KEY_C = 46
    KEY_V = 47
    KEY_B = 48
    KEY_N = 49
    KEY_M = 50
    KEY_COMMA = 51
    KEY_DOT = 52
    KEY_SLASH = 53
    KEY_RIGHTSHIFT = 54
    KEY_KPASTERISK = 55
    KEY_LEFTALT = 56
    KEY_SPACE = 57
    KEY_CAPSLOCK = 58
    KEY_F1 = 59
    KEY_F2 = 60
    KEY_F3 = 61
    KEY_F4 = 62
    KEY_F5 = 63
    KEY_F6 = 64
    KEY_F7 = 65
    KEY_F8 = 66
    KEY_F9 = 67
    KEY_F10 = 68
    KEY_NUMLOCK = 69
    KEY_SCROLLLOCK = 70
    KEY_KP7 = 71
    KEY_KP8 = 72
    KEY_KP9 = 73
    KEY_KPMINUS = 74
    KEY_KP4 = 75
    KEY_KP5 = 76
    KEY_KP6 = 77
    KEY_KPPLUS = 78
    KEY_KP1 = 79
    KEY_KP2 = 80
    KEY_KP3 = 81
    KEY_KP0 = 82
    KEY_KPDOT = 83
    KEY_F11 = 87
    KEY_F12 = 88
    KEY_KPENTER = 96
    KEY_RIGHTCTRL = 97
    KEY_KPSLASH = 98
    KEY_SYSRQ = 99
    KEY_RIGHTALT = 100
    KEY_HOME = 102
    KEY_UP = 103
    KEY_PAGEUP = 104
    KEY_LEFT = 105
    KEY_RIGHT = 106
    KEY_END = 107
    KEY_DOWN = 108
    KEY_PAGEDOWN = 109
    KEY_INSERT = 110
    KEY_DELETE = 111
    KEY_MUTE = 113
    KEY_VOLUMEDOWN = 114
    KEY_VOLUMEUP = 115
    KEY_POWER = 116
    KEY_KPEQUAL = 117
    KEY_PAUSE = 119
    KEY_LEFTMETA = 125
    KEY_RIGHTMETA = 126
    KEY_COMPOSE = 127
    KEY_CALC = 140
    KEY_SLEEP = 142
    KEY_MAIL = 155
    KEY_NEXTSONG = 163
    KEY_PLAYPAUSE = 164
    KEY_PREVIOUSSONG = 165
    KEY_STOPCD = 166
    KEY_HOMEPAGE = 172
    KEY_F13 = 183
    KEY_F14 = 184
    KEY_F15 = 185
    KEY_F16 = 186
    KEY_F17 = 187
    KEY_F18 = 188
    KEY_F19 = 189
    KEY_F20 = 190
    KEY_F21 = 191
    KEY_F22 = 192
    KEY_F23 = 193
    KEY_F24 = 194
    KEY_PRINT = 210
    KEY_SEARCH = 217
    KEY_BRIGHTNESSDOWN = 224
    KEY_BRIGHTNESSUP = 225
    KEY_MICMUTE = 248


_MODIFIER_ALIASES: Tuple[Tuple[Modifier, Tuple[str, ...]], ...] = (
    (Modifier.SUPER, ("super", "mod4", "meta", "logo", "win")),
    (Modifier.SHIFT, ("shift",)),
    (Modifier.CTRL, ("ctrl", "control")),
    (Modifier.ALT, ("alt", "mod1")),
    (Modifier.ALTGR, ("altgr", "mod5")),
    (Modifier.ANY, ("any",)),
)

# Letters, digits and function keys are filled in by `_build_key_table`.
_KEY_ALIASES: Tuple[Tuple[Key, Tuple[str, ...]], ...] = (
    (Key.KEY_ESC, ("escape", "esc")),
    (Key.KEY_BACKSPACE, ("backspace",)),
    (Key.KEY_TAB, ("tab",)),
    (Key.KEY_ENTER, ("return", "enter")),
    (Key.KEY_SPACE, ("space",)),
    (Key.KEY_CAPSLOCK, ("capslock", "caps_lock")),
    (Key.KEY_NUMLOCK, ("numlock", "num_lock")),
    (Key.KEY_SCROLLLOCK, ("scrolllock", "scroll_lock")),
    (Key.KEY_MINUS, ("minus", "-")),
    (Key.KEY_EQUAL, ("equal", "=")),
    (Key.KEY_GRAVE, ("grave", "`")),
    (Key.KEY_COMMA, ("comma", ",")),
    (Key.KEY_DOT, ("period", "dot", ".")),
    (Key.KEY_SLASH, ("slash", "/")),
    (Key.KEY_BACKSLASH, ("backslash", "\\")),
    (Key.KEY_LEFTBRACE, ("bracketleft", "leftbrace", "[")),
    (Key.KEY_RIGHTBRACE, ("bracketright", "rightbrace", "]")),
    (Key.KEY_SEMICOLON, ("semicolon", ";")),
    (Key.KEY_APOSTROPHE, ("apostrophe", "'")),
    (Key.KEY_SYSRQ, ("print", "sysrq")),
    (Key.KEY_PRINT, ("printscreen",)),
    (Key.KEY_PAUSE, ("pause",)),
    (Key.KEY_INSERT, ("insert",)),
    (Key.KEY_DELETE, ("delete",)),
    (Key.KEY_HOME, ("home",)),
    (Key.KEY_END, ("end",)),
    (Key.KEY_PAGEUP, ("pageup", "prior")),
    (Key.KEY_PAGEDOWN, ("pagedown", "next")),
    (Key.KEY_LEFT, ("left",)),
    (Key.KEY_RIGHT, ("right",)),
    (Key.KEY_UP, ("up",)),
    (Key.KEY_DOWN, ("down",)),
    (Key.KEY_KPASTERISK, ("kpasterisk", "kp_multiply")),
    (Key.KEY_KPMINUS, ("kpminus", "kp_subtract")),
    (Key.KEY_KPPLUS, ("plus", "kpplus", "kp_add")),
    (Key.KEY_KPDOT, ("kpdot", "kp_decimal")),
    (Key.KEY_KPENTER, ("kpenter", "kp_enter")),
    (Key.KEY_KPSLASH, ("kpslash", "kp_divide")),
    (Key.KEY_KPEQUAL, ("kpequal", "kp_equal")),
    (Key.KEY_LEFTSHIFT, ("leftshift", "shift_l")),
    (Key.KEY_RIGHTSHIFT, ("rightshift", "shift_r")),
    (Key.KEY_LEFTCTRL, ("leftctrl", "control_l")),
    (Key.KEY_RIGHTCTRL, ("rightctrl", "control_r")),
    (Key.KEY_LEFTALT, ("leftalt", "alt_l")),
    (Key.KEY_RIGHTALT, ("rightalt", "alt_r")),
    (Key.KEY_LEFTMETA, ("leftmeta", "super_l")),
    (Key.KEY_RIGHTMETA, ("rightmeta", "super_r")),
    (Key.KEY_COMPOSE, ("compose", "menu")),
    (Key.KEY_MUTE, ("mute", "xf86audiomute")),
    (Key.KEY_VOLUMEDOWN, ("volumedown", "xf86audiolowervolume")),
    (Key.KEY_VOLUMEUP, ("volumeup", "xf86audioraisevolume")),
    (Key.KEY_MICMUTE, ("micmute", "xf86audiomicmute")),
    (Key.KEY_NEXTSONG, ("nextsong", "xf86audionext")),
    (Key.KEY_PREVIOUSSONG, ("previoussong", "xf86audioprev")),
    (Key.KEY_PLAYPAUSE, ("playpause", "xf86audioplay")),
    (Key.KEY_STOPCD, ("stopcd", "xf86audiostop")),
    (Key.KEY_BRIGHTNESSDOWN, ("brightnessdown", "xf86monbrightnessdown")),
    (Key.KEY_BRIGHTNESSUP, ("brightnessup", "xf86monbrightnessup")),
    (Key.KEY_POWER, ("power", "xf86poweroff")),
    (Key.KEY_SLEEP, ("sleep", "xf86sleep")),
    (Key.KEY_CALC, ("calc", "xf86calculator")),
    (Key.KEY_MAIL, ("mail", "xf86mail")),
    (Key.KEY_HOMEPAGE, ("homepage", "xf86homepage")),
    (Key.KEY_SEARCH, ("search", "xf86search")),
)


def _add_aliases(
    table: Dict[str, Key],
    canonical: Dict[Key, str],
    key: Key,
    names: Iterable[str],
) -> None:
    for name in names:
        assert name not in table, f"duplicate key name {name!r}"
        table[name] = key
        canonical.setdefault(key, name)


def _build_key_table() -> Tuple[Dict[str, Key], Dict[Key, str]]:
    table: Dict[str, Key] = {}
    canonical: Dict[Key, str] = {}
    for c in string.ascii_lowercase:
        _add_aliases(table, canonical, Key[f"KEY_{c.upper()}"], [c])
    for c in string.digits:
        _add_aliases(table, canonical, Key[f"KEY_{c}"], [c])
    for n in range(1, 25):
        _add_aliases(table, canonical, Key[f"KEY_F{n}"], [f"f{n}"])
    for n in range(10):
        _add_aliases(
            table, canonical, Key[f"KEY_KP{n}"], [f"kp{n}", f"kp_{n}"]
        )
    for key, names in _KEY_ALIASES:
        _add_aliases(table, canonical, key, names)
    return table, canonical


_key_table, _canonical_key_names = _build_key_table()

KEY_NAMES: Mapping[str, Key] = MappingProxyType(_key_table)
MODIFIER_NAMES: Mapping[str, Modifier] = MappingProxyType(
    {name: mod for mod, names in _MODIFIER_ALIASES for name in names}
)
_CANONICAL_KEY_NAMES: Mapping[Key, str] = MappingProxyType(
    _canonical_key_names
)
_CANONICAL_MODIFIER_NAMES: Mapping[Modifier, str] = MappingProxyType(
    {mod: names[0] for mod, names in _MODIFIER_ALIASES}
)


def resolve_modifier(
    name: str, line: Optional[int] = None, column: Optional[int] = None
) -> Modifier:
    """Return the modifier called `name`, ignoring case.

    Raises UnknownModifierError if there is no such modifier.
    """
    try:
        return MODIFIER_NAMES[name.lower()]
    except KeyError:
        raise UnknownModifierError(
            f"Unknown modifier '{name}'", name=name, line=line, column=column
        ) from None


def resolve_key(
    name: str, line: Optional[int] = None, column: Optional[int] = None
) -> Key:
    """Return the key called `name`, ignoring case.

    Raises UnknownKeyError if there is no such key.  Modifier names are not
    keys: use the `leftshift`-style names to bind a modifier key itself.
    """
    try:
        return KEY_NAMES[name.lower()]
    except KeyError:
        if name.lower() in MODIFIER_NAMES:
            msg = f"Expected a key but got modifier '{name}'"
        else:
            msg = f"Unknown key '{name}'"
        raise UnknownKeyError(
            msg, name=name, line=line, column=column
        ) from None


def key_name(key: Key) -> str:
    """Return the canonical name of `key`."""
    return _CANONICAL_KEY_NAMES[key]


def modifier_name(modifier: Modifier) -> str:
    """Return the canonical name of `modifier`."""
    return _CANONICAL_MODIFIER_NAMES[modifier]


def sort_modifiers(modifiers: Iterable[Modifier]) -> Tuple[Modifier, ...]:
    """Return `modifiers` in declaration order, for stable output."""
    return tuple(sorted(modifiers, key=lambda mod: mod.value))
