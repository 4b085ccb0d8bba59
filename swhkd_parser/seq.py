"""Functions for expanding groups of the form {s1,s2,...,sn} into bindings.

Hotkey groups are numbered left to right, as are command groups.  The n-th
command group is aligned with the n-th hotkey group: both take the same
member for each binding produced.  Hotkey groups without a command group
expand independently, so

    super + {shift,ctrl} + {1,2} -> echo {a,b}

gives four bindings: `{shift,ctrl}` zips with `{a,b}` and the product is taken
with `{1,2}`.  Combinations are ordered with the leftmost group outermost.

A `_` member drops every combination that selects it, so the position it
occupies disappears from aligned groups on both sides.
"""
from __future__ import annotations

import itertools
import re
import string
from typing import (
    Callable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from .document import Binding, UnbindEntry
from .errors import (
    DuplicateModifierError,
    GroupLengthMismatchError,
    InvalidRangeError,
    UnpairedGroupError,
)
from .keys import (
    KEY_NAMES,
    MODIFIER_NAMES,
    Key,
    Modifier,
    modifier_name,
    resolve_key,
    resolve_modifier,
)
from .parser import (
    BindingItem,
    Group,
    Literal,
    ModeRef,
    Omission,
    Range,
    Term,
    UnbindItem,
)

__all__ = [
    "expand_binding",
    "expand_range",
    "expand_unbind",
]

_T = TypeVar("_T")
_Member = Optional[Union[Literal, ModeRef]]

_NUMBER_RE = re.compile(r"[0-9]+")


def _range_codes(range_: Range) -> Tuple[int, int, Callable[[int], str]]:
    """Return the first and last code of `range_` and how to render a code.

    Raises InvalidRangeError if the bounds can't form a range.
    """
    start, end = range_.start, range_.end

    def _err(reason: str) -> InvalidRangeError:
        return InvalidRangeError(
            f"Invalid range '{start}..{end}': {reason}",
            start=start,
            end=end,
            line=range_.line,
            column=range_.col,
        )

    if _NUMBER_RE.fullmatch(start) and _NUMBER_RE.fullmatch(end):
        return int(start), int(end), str
    if len(start) == 1 and len(end) == 1:
        if start in string.ascii_letters and end in string.ascii_letters:
            if start.islower() != end.islower():
                raise _err("letters must have the same case")
            return ord(start), ord(end), chr
        if start in string.ascii_letters + string.digits and (
            end in string.ascii_letters + string.digits
        ):
            raise _err("type mismatch")
    raise _err("bounds must be numbers or single ASCII letters")


def _range_size(range_: Range) -> int:
    first, last, _ = _range_codes(range_)
    return abs(last - first) + 1


def expand_range(range_: Range) -> List[str]:
    """Expand ranges in the form a..f, 1..10 or 9..1 found in groups.

    Ranges run in either direction and include both ends.  Bounds must both be
    numbers or both be single ASCII letters of the same case.

    Raises InvalidRangeError otherwise.
    """
    first, last, render = _range_codes(range_)
    step = 1 if last >= first else -1
    return [render(code) for code in range(first, last + step, step)]


def _group_size(group: Group) -> int:
    """Return the number of members in `group` without expanding its ranges."""
    return sum(
        _range_size(item) if isinstance(item, Range) else 1
        for item in group.items
    )


def _expand_members(
    group: Group, names: Optional[Mapping[str, object]] = None
) -> List[_Member]:
    """Return the members of `group` with ranges expanded; omissions are None.

    If `names` is given, a range with more members than there are names is
    rejected before it is expanded, since some member could not be resolved.
    """
    members: List[_Member] = []
    for item in group.items:
        if isinstance(item, Omission):
            members.append(None)
        elif isinstance(item, Range):
            if names is not None:
                size = _range_size(item)
                if size > len(names):
                    raise InvalidRangeError(
                        f"Range '{item.start}..{item.end}' has {size} members, "
                        f"more than the {len(names)} known names",
                        start=item.start,
                        end=item.end,
                        line=item.line,
                        column=item.col,
                    )
            members.extend(
                Literal(text, item.line, item.col)
                for text in expand_range(item)
            )
        else:
            members.append(item)
    return members


def _resolve_term(
    term: Term,
    resolve: Callable[[str, int, int], _T],
    names: Mapping[str, object],
) -> List[Optional[_T]]:
    if isinstance(term, Literal):
        return [resolve(term.text, term.line, term.col)]
    choices: List[Optional[_T]] = []
    for member in _expand_members(term, names):
        if member is None:
            choices.append(None)
        else:
            assert isinstance(member, Literal), member
            choices.append(resolve(member.text, member.line, member.col))
    return choices


def _hotkey_columns(
    modifiers: Sequence[Term], key: Term
) -> Tuple[List[List[Optional[Union[Modifier, Key]]]], List[int]]:
    """Resolve every name in a hotkey once.

    Returns one list of choices per term (a single choice for plain terms) and
    the indices of the terms that were groups, in order.
    """
    columns: List[List[Optional[Union[Modifier, Key]]]] = []
    group_columns: List[int] = []
    for i, term in enumerate(modifiers):
        if isinstance(term, Group):
            group_columns.append(i)
        columns.append(
            list(_resolve_term(term, resolve_modifier, MODIFIER_NAMES))
        )
    if isinstance(key, Group):
        group_columns.append(len(modifiers))
    columns.append(list(_resolve_term(key, resolve_key, KEY_NAMES)))
    return columns, group_columns


def _combinations(
    columns: List[List[Optional[_T]]],
) -> List[Tuple[Tuple[int, ...], List[_T]]]:
    """Return the index tuple and choices of every complete combination.

    Combinations that select an omission are left out.
    """
    combos = []
    for indices in itertools.product(*(range(len(c)) for c in columns)):
        chosen = [columns[i][k] for i, k in enumerate(indices)]
        if any(choice is None for choice in chosen):
            continue
        combos.append((indices, chosen))
    return combos  # type: ignore[return-value]


def _modifier_set(
    modifiers: Sequence[Modifier], line: int, col: int
) -> frozenset:
    seen = set()
    for mod in modifiers:
        if mod in seen:
            name = modifier_name(mod)
            raise DuplicateModifierError(
                f"Modifier '{name}' appears more than once",
                modifier=name,
                line=line,
                column=col,
            )
        seen.add(mod)
    return frozenset(seen)


def _check_alignment(
    hotkey_groups: List[Group],
    hotkey_sizes: List[int],
    command_groups: List[Group],
    command_sizes: List[int],
) -> None:
    if len(command_groups) > len(hotkey_groups):
        ordinal = len(hotkey_groups) + 1
        group = command_groups[len(hotkey_groups)]
        raise UnpairedGroupError(
            f"Command group {ordinal} has no hotkey group to align with",
            ordinal=ordinal,
            line=group.line,
            column=group.col,
        )
    for i, (group, size) in enumerate(zip(command_groups, command_sizes)):
        if size != hotkey_sizes[i]:
            raise GroupLengthMismatchError(
                f"Command group {i + 1} has {size} members but hotkey group "
                f"{i + 1} has {hotkey_sizes[i]}",
                hotkey_cases=hotkey_sizes[i],
                command_cases=size,
                line=group.line,
                column=group.col,
            )


def _render_command(
    item: BindingItem, choices: Sequence[Union[Literal, ModeRef]]
) -> Tuple[str, Tuple[str, ...]]:
    """Return the command text for one combination and the modes it switches to."""
    text: List[str] = []
    switches: List[str] = []
    group_index = 0
    for part in item.command.parts:
        if isinstance(part, str):
            text.append(part)
            continue
        if isinstance(part, Group):
            member = choices[group_index]
            group_index += 1
        else:
            member = part
        if isinstance(member, ModeRef):
            text.append(str(member))
            switches.append(member.name)
        else:
            text.append(member.text)
    return "".join(text), tuple(dict.fromkeys(switches))


def expand_binding(
    item: BindingItem, mode_id: int, path: Optional[str] = None
) -> List[Binding]:
    """Expand `item` into concrete bindings in mode `mode_id`.

    Every name is resolved before any binding is built, and all errors are
    raised before anything is returned, so a bad item yields no bindings.

    Raises KeyNameError for unknown names and ExpansionError for malformed
    ranges, misaligned groups and repeated modifiers.
    """
    columns, group_columns = _hotkey_columns(item.modifiers, item.key)
    command_groups = item.command.groups
    # Sizes are checked before any command range is expanded.
    _check_alignment(
        item.groups,
        [len(columns[i]) for i in group_columns],
        command_groups,
        [_group_size(group) for group in command_groups],
    )
    command_columns = [_expand_members(group) for group in command_groups]

    bindings: List[Binding] = []
    for indices, chosen in _combinations(columns):
        group_indices = [indices[i] for i in group_columns]
        command_choices = [
            column[group_indices[j]] for j, column in enumerate(command_columns)
        ]
        if any(choice is None for choice in command_choices):
            continue
        *mods, key = chosen
        command, switches = _render_command(item, command_choices)  # type: ignore[arg-type]
        bindings.append(
            Binding(
                modifiers=_modifier_set(mods, item.line, item.col),  # type: ignore[arg-type]
                key=key,  # type: ignore[arg-type]
                command=command,
                send=item.send,
                on_release=item.on_release,
                mode=mode_id,
                mode_switches=switches,
                path=path,
                line=item.line,
            )
        )
    return bindings


def expand_unbind(
    item: UnbindItem, mode_id: int, path: Optional[str] = None
) -> List[UnbindEntry]:
    """Expand `item` into one entry per hotkey it names.

    Groups expand independently, as there is no command to align with.
    """
    columns, _ = _hotkey_columns(item.modifiers, item.key)
    entries: List[UnbindEntry] = []
    for _, chosen in _combinations(columns):
        *mods, key = chosen
        entries.append(
            UnbindEntry(
                modifiers=_modifier_set(mods, item.line, item.col),  # type: ignore[arg-type]
                key=key,  # type: ignore[arg-type]
                mode=mode_id,
                path=path,
                line=item.line,
            )
        )
    return entries
