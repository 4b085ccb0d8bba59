"""Classes and functions for turning tokens into items.

Terminology:
    Hotkey: the modifiers and key that trigger a binding, e.g. `super + a`.
    Command: the text passed to the shell when the hotkey is pressed.
    Binding: the entity that encompasses the above.
    Item: a top-level statement of a file: a binding, an unbind, an import or
        a mode block.

Items are plain dataclasses and `Item` is the union of their types.  Every
stage after the parser handles each of the four kinds explicitly.

Names are not looked up here: `super` and `a` are just `Literal` objects
until the expander in the `seq` module resolves them.

Parse errors are scoped to the item they occur in.  The item is dropped, the
error is kept in `Document.diagnostics`, and parsing carries on with the next
item.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, List, NoReturn, Optional, Set, Union

from .errors import ParseError, SWHKDParserError
from .lexer import Token, tokenize

__all__ = [
    "BindingItem",
    "CommandPart",
    "CommandTemplate",
    "Document",
    "Group",
    "GroupItem",
    "ImportItem",
    "Item",
    "Literal",
    "ModeBlock",
    "ModeRef",
    "Omission",
    "Range",
    "Term",
    "UnbindItem",
    "parse",
    "parse_text",
]


@dataclass
class Literal:
    """A single key, modifier or piece of command text."""

    text: str
    line: int
    col: int


@dataclass
class Range:
    """An inclusive range such as `1..9` or `a-f` inside a group."""

    start: str
    end: str
    line: int
    col: int


@dataclass
class Omission:
    """The `_` placeholder inside a group: drops its position when expanded."""

    line: int
    col: int


@dataclass
class ModeRef:
    """An `@name` reference in a command, meaning "switch to mode `name`"."""

    name: str
    line: int
    col: int

    def __str__(self) -> str:
        return f"@{self.name}"


GroupItem = Union[Literal, Range, Omission, ModeRef]


@dataclass
class Group:
    """A brace-delimited list of alternatives, e.g. `{shift,ctrl}`.

    Instance variables:
        items: the members in order of appearance, ranges still unexpanded.
    """

    items: List[GroupItem]
    line: int
    col: int


Term = Union[Literal, Group]
CommandPart = Union[str, ModeRef, Group]


@dataclass
class CommandTemplate:
    """The command of a binding, split into text, mode references and groups.

    Instance variables:
        raw: the command text as written.
        parts: plain strings (already unescaped), `ModeRef` and `Group` objects.
    """

    raw: str
    parts: List[CommandPart]
    line: int
    col: int

    @property
    def groups(self) -> List[Group]:
        """Return the groups of the command in order of appearance."""
        return [part for part in self.parts if isinstance(part, Group)]


@dataclass
class BindingItem:
    """A hotkey and the command it runs, before shorthand expansion.

    Instance variables:
        modifiers: the terms before the key; each a `Literal` or a `Group`.
        key: the last term of the hotkey.
        command: the parsed command template.
        send: whether the key event is also passed on to other clients (`@send`).
        on_release: whether the binding fires on key release (`~`).
    """

    modifiers: List[Term]
    key: Term
    command: CommandTemplate
    send: bool
    on_release: bool
    line: int
    col: int

    @property
    def groups(self) -> List[Group]:
        """Return the groups of the hotkey in order of appearance."""
        return [
            term
            for term in [*self.modifiers, self.key]
            if isinstance(term, Group)
        ]


@dataclass
class UnbindItem:
    """An `unbind` statement, before shorthand expansion."""

    modifiers: List[Term]
    key: Term
    line: int
    col: int


@dataclass
class ImportItem:
    """An `import` directive; `path` is as written, relative or not."""

    path: str
    line: int
    col: int


@dataclass
class ModeBlock:
    """A `mode` block and the bindings and unbinds in its body."""

    name: str
    oneoff: bool
    swallow: bool
    body: List[Union[BindingItem, UnbindItem]]
    line: int
    col: int


Item = Union[ImportItem, ModeBlock, BindingItem, UnbindItem]


@dataclass
class Document:
    """The items of one file along with the parse errors that were skipped."""

    items: List[Item]
    diagnostics: List[SWHKDParserError] = field(default_factory=list)
    path: Optional[str] = None

    @property
    def imports(self) -> List[ImportItem]:
        """Return the import directives in order of appearance."""
        return [item for item in self.items if isinstance(item, ImportItem)]


class _CommandScanMode(Enum):
    """Mode when splitting command text into text, mode references and groups."""

    NORMAL = auto()
    NORMAL_ESCAPE_NEXT = auto()
    GROUP = auto()
    GROUP_ESCAPE_NEXT = auto()


_MODE_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_MODE_REF_RE = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")
_COMMAND_RANGE_RE = re.compile(
    r"([0-9]+|[A-Za-z])\s*(?:\.\.|-)\s*([0-9]+|[A-Za-z])"
)
# Characters after which an '@' starts a mode reference.
_WORD_BOUNDARY = " \t;|&("


class _Parser:
    TERM_TYPES: ClassVar[Set[str]] = {"WORD", "NUMBER", "SYMBOL"}
    MODE_FLAGS: ClassVar[Set[str]] = {"oneoff", "swallow"}

    def __init__(self, tokens: List[Token], path: Optional[str] = None):
        assert tokens and tokens[-1].type == "EOF", "missing EOF token"
        self.tokens = tokens
        self.path = path
        self.pos = 0
        self.diagnostics: List[SWHKDParserError] = []

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != "EOF":
            self.pos += 1
        return tok

    def error(
        self,
        expected: str,
        tok: Optional[Token] = None,
        message: Optional[str] = None,
    ) -> NoReturn:
        if tok is None:
            tok = self.peek()
        found = tok.value if tok.value else tok.type.lower()
        if message is None:
            message = f"Expected {expected} but got {found!r}"
        raise ParseError(
            message,
            expected=expected,
            found=tok.value,
            line=tok.line,
            column=tok.col,
        )

    def expect(self, type_: str, expected: str) -> Token:
        if self.peek().type != type_:
            self.error(expected)
        return self.advance()

    def synchronize(self, start: int) -> None:
        """Skip the rest of a broken item, including any block indented under it."""
        depth = 0
        for tok in self.tokens[start : self.pos]:
            if tok.type == "INDENT":
                depth += 1
            elif tok.type == "DEDENT":
                depth -= 1
        while True:
            prev = self.tokens[self.pos - 1] if self.pos > start else None
            nxt = self.peek()
            if (
                prev is not None
                and prev.type in ("NEWLINE", "DEDENT")
                and depth <= 0
                and nxt.type != "INDENT"
            ):
                return
            if nxt.type == "EOF" or (nxt.type == "DEDENT" and depth <= 0):
                return
            self.advance()
            if nxt.type == "INDENT":
                depth += 1
            elif nxt.type == "DEDENT":
                depth -= 1

    def parse_items(self, in_mode: bool) -> List[Item]:
        items: List[Item] = []
        while self.peek().type not in ("EOF", "DEDENT"):
            start = self.pos
            try:
                items.append(self.parse_item(in_mode))
            except ParseError as e:
                if e.path is None:
                    e.path = self.path
                self.diagnostics.append(e)
                self.synchronize(start)
        return items

    def parse_document(self) -> Document:
        items = self.parse_items(in_mode=False)
        # Stray dedents can only come from a broken first item.
        while self.peek().type == "DEDENT":
            self.advance()
            items.extend(self.parse_items(in_mode=False))
        return Document(items, self.diagnostics, self.path)

    def parse_item(self, in_mode: bool) -> Item:
        tok = self.peek()
        if tok.type == "INDENT":
            self.error("a new item", message="Unexpected indentation")
        if tok.type == "IMPORT":
            if in_mode:
                self.error("a binding or unbind", message="Imports are not allowed inside a mode block")
            return self.parse_import()
        if tok.type == "MODE":
            if in_mode:
                self.error("a binding or unbind", message="Mode blocks cannot be nested")
            return self.parse_mode()
        if tok.type == "UNBIND":
            return self.parse_unbind()
        if tok.type in self.TERM_TYPES or tok.type == "LBRACE":
            return self.parse_binding()
        self.error("an import, mode block, unbind or binding")

    def parse_import(self) -> ImportItem:
        start = self.advance()
        tok = self.expect("PATH", "a file path")
        path = tok.value
        if len(path) >= 2 and path[0] == path[-1] and path[0] in "'\"":
            path = path[1:-1]
        if not path:
            self.error("a file path", tok, message="Missing path after 'import'")
        self.expect("NEWLINE", "the end of the line")
        return ImportItem(path, start.line, start.col)

    def parse_mode(self) -> ModeBlock:
        start = self.advance()
        name_tok = self.expect("WORD", "a mode name")
        if not _MODE_NAME_RE.fullmatch(name_tok.value):
            self.error("a mode name", name_tok)
        flags: Set[str] = set()
        while self.peek().type == "WORD" and self.peek().value in self.MODE_FLAGS:
            flag = self.advance()
            if flag.value in flags:
                self.error(
                    "':'", flag, message=f"Duplicate mode flag '{flag.value}'"
                )
            flags.add(flag.value)
        self.expect("COLON", "'oneoff', 'swallow' or ':'")
        self.expect("NEWLINE", "the end of the line")
        if self.peek().type != "INDENT":
            self.error(
                "an indented block",
                message=f"Mode '{name_tok.value}' has no bindings",
            )
        self.advance()
        body = self.parse_items(in_mode=True)
        self.expect("DEDENT", "the end of the mode block")
        return ModeBlock(
            name_tok.value,
            oneoff="oneoff" in flags,
            swallow="swallow" in flags,
            body=body,  # type: ignore[arg-type]
            line=start.line,
            col=start.col,
        )

    def parse_unbind(self) -> UnbindItem:
        start = self.advance()
        *modifiers, key = self.parse_terms()
        self.expect("NEWLINE", "'+' or the end of the line")
        return UnbindItem(modifiers, key, start.line, start.col)

    def parse_binding(self) -> BindingItem:
        start = self.peek()
        *modifiers, key = self.parse_terms()
        send = on_release = False
        while self.peek().type in ("ATSIGN", "TILDE"):
            tok = self.advance()
            if tok.type == "ATSIGN":
                attr = self.expect("WORD", "'send' after '@'")
                if attr.value != "send":
                    self.error("'send' after '@'", attr)
                if send:
                    self.error("'->'", tok, message="Duplicate attribute '@send'")
                send = True
            else:
                if on_release:
                    self.error("'->'", tok, message="Duplicate attribute '~'")
                on_release = True

        if self.peek().type == "ARROW":
            self.advance()
            cmd_tok = self.expect("COMMAND", "a command")
            self.expect("NEWLINE", "the end of the line")
        else:
            self.expect("NEWLINE", "'+', '@send', '~', '->' or the end of the line")
            if self.peek().type != "INDENT":
                self.error(
                    "an indented command line",
                    start,
                    message="Missing command for hotkey: expected an indented line or '->'",
                )
            self.advance()
            cmd_tok = self.expect("COMMAND", "a command")
            self.expect("NEWLINE", "the end of the line")
            self.expect("DEDENT", "the end of the command")
        if not cmd_tok.value:
            self.error("a command", cmd_tok, message="Empty command")
        command = self.parse_command(cmd_tok)
        return BindingItem(
            modifiers,
            key,
            command,
            send=send,
            on_release=on_release,
            line=start.line,
            col=start.col,
        )

    def parse_terms(self) -> List[Term]:
        terms = [self.parse_term()]
        while self.peek().type == "PLUS":
            self.advance()
            terms.append(self.parse_term())
        return terms

    def parse_term(self) -> Term:
        tok = self.peek()
        if tok.type in self.TERM_TYPES:
            self.advance()
            return Literal(tok.value, tok.line, tok.col)
        if tok.type == "LBRACE":
            return self.parse_group()
        if tok.type == "OMIT":
            self.error(
                "a key or modifier",
                message="'_' is only allowed inside a group",
            )
        self.error("a key, modifier or group")

    def parse_group(self) -> Group:
        start = self.advance()
        items: List[GroupItem] = [self.parse_group_item()]
        while self.peek().type == "COMMA":
            self.advance()
            items.append(self.parse_group_item())
        self.expect("RBRACE", "',' or '}'")
        return Group(items, start.line, start.col)

    def parse_group_item(self) -> GroupItem:
        tok = self.peek()
        if tok.type == "OMIT":
            self.advance()
            return Omission(tok.line, tok.col)
        if tok.type not in self.TERM_TYPES:
            self.error("a group member")
        self.advance()
        nxt = self.peek()
        if nxt.type == "RANGE" or (nxt.type == "SYMBOL" and nxt.value == "-"):
            self.advance()
            end = self.peek()
            if end.type not in self.TERM_TYPES:
                self.error("the end of the range")
            self.advance()
            return Range(tok.value, end.value, tok.line, tok.col)
        return Literal(tok.value, tok.line, tok.col)

    def parse_command(self, tok: Token) -> CommandTemplate:
        """Split command text into plain text, mode references and groups.

        Based on the sequence parser of sxhkd, with '@name' references added.
        """
        raw = tok.value
        parts: List[CommandPart] = []
        text = ""
        members: List[GroupItem] = []
        member_raw = ""
        member_text = ""
        member_col = 0
        group_col = 0
        mode = _CommandScanMode.NORMAL

        def col_of(i: int) -> int:
            return tok.col + i

        def flush_text() -> None:
            nonlocal text
            if text:
                parts.append(text)
            text = ""

        def end_member(i: int) -> None:
            nonlocal member_raw, member_text
            members.append(
                self._command_group_item(
                    member_raw, member_text, tok.line, member_col, col_of(i)
                )
            )
            member_raw = member_text = ""

        i = 0
        while i < len(raw):
            c = raw[i]
            if mode == _CommandScanMode.NORMAL:
                if c == "\\":
                    mode = _CommandScanMode.NORMAL_ESCAPE_NEXT
                elif c == "{" and text.endswith("$"):
                    # Shell parameter expansion: not a group.
                    end = raw.find("}", i)
                    end = len(raw) if end == -1 else end + 1
                    text += raw[i:end]
                    i = end
                    continue
                elif c == "{":
                    flush_text()
                    mode = _CommandScanMode.GROUP
                    group_col = member_col = col_of(i)
                    members = []
                elif c == "}":
                    self.error("'{' before '}'", message="Unmatched closing brace in command")
                elif c == "@" and (i == 0 or raw[i - 1] in _WORD_BOUNDARY):
                    m = _MODE_NAME_RE.match(raw, i + 1)
                    if m:
                        flush_text()
                        parts.append(ModeRef(m.group(), tok.line, col_of(i)))
                        i = m.end()
                        continue
                    text += c
                else:
                    text += c
            elif mode == _CommandScanMode.NORMAL_ESCAPE_NEXT:
                # Only braces, '#' and '@' lose their backslash: the rest is for the shell.
                if c in "{}#@":
                    text += c
                else:
                    text += "\\" + c
                mode = _CommandScanMode.NORMAL
            elif mode == _CommandScanMode.GROUP:
                member_raw += c
                if c == "\\":
                    mode = _CommandScanMode.GROUP_ESCAPE_NEXT
                elif c == "{":
                    self.error("',' or '}'", message="No nested groups allowed")
                elif c in ",}":
                    member_raw = member_raw[:-1]
                    end_member(i)
                    member_col = col_of(i + 1)
                    if c == "}":
                        parts.append(Group(members, tok.line, group_col))
                        mode = _CommandScanMode.NORMAL
                else:
                    member_text += c
            elif mode == _CommandScanMode.GROUP_ESCAPE_NEXT:
                member_raw += c
                if c in "{},#@_":
                    member_text += c
                else:
                    member_text += "\\" + c
                mode = _CommandScanMode.GROUP
            i += 1

        if mode in (_CommandScanMode.GROUP, _CommandScanMode.GROUP_ESCAPE_NEXT):
            self.error("'}'", message="Unterminated group in command")
        if mode == _CommandScanMode.NORMAL_ESCAPE_NEXT:
            text += "\\"
        flush_text()
        return CommandTemplate(raw, parts, tok.line, tok.col)

    def _command_group_item(
        self, raw: str, text: str, line: int, col: int, end_col: int
    ) -> GroupItem:
        stripped = raw.strip()
        col += len(raw) - len(raw.lstrip())
        if not stripped:
            raise ParseError(
                "Empty group member: use '_' to omit a position",
                expected="a group member",
                found="",
                line=line,
                column=end_col,
            )
        if stripped == "_":
            return Omission(line, col)
        m = _MODE_REF_RE.fullmatch(stripped)
        if m:
            return ModeRef(m.group(1), line, col)
        m = _COMMAND_RANGE_RE.fullmatch(stripped)
        if m:
            return Range(m.group(1), m.group(2), line, col)
        return Literal(text.strip(), line, col)


def parse(tokens: List[Token], path: Optional[str] = None) -> Document:
    """Parse the tokens of one file into a `Document`.

    Malformed items are skipped and their `ParseError` kept in the returned
    document's `diagnostics`.  `path` is only used to label those errors.
    """
    return _Parser(tokens, path).parse_document()


def parse_text(text: str, path: Optional[str] = None) -> Document:
    """Tokenize and parse `text` in one go.

    Raises LexError if the text can't be tokenized at all.
    """
    try:
        tokens = tokenize(text)
    except SWHKDParserError as e:
        e.path = path
        raise
    return parse(tokens, path)
