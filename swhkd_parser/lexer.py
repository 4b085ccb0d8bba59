"""Tokenizer for swhkdrc files.

The text is processed a logical line at a time:

    - comments (from an unescaped '#' to the end of the line) are removed;
    - a trailing backslash joins the next physical line onto the current one,
      dropping the leading whitespace of the joined line;
    - blank lines are skipped;
    - changes in indentation are turned into INDENT and DEDENT tokens, so the
      parser never has to look at whitespace.

Command text is not broken up here.  The text after '->', and a line indented
under a binding that has no '->', each become a single COMMAND token.
Likewise, everything after 'import' becomes a single PATH token.

Token types:
    WORD, NUMBER, SYMBOL: key/modifier/mode names and single punctuation keys.
    LBRACE, RBRACE, COMMA, RANGE, OMIT: shorthand groups.
    PLUS, ATSIGN, TILDE, ARROW, COLON: operators.
    IMPORT, UNBIND, MODE: keywords (only as the first word of a line).
    PATH, COMMAND: raw text.
    NEWLINE, INDENT, DEDENT, EOF: structure.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, List, Optional, Pattern, Tuple

from .errors import LexError

__all__ = ["Token", "tokenize"]


@dataclass
class Token:
    """Token produced by `tokenize`.

    `line` and `col` are 1-based and point at the first character of the
    token in the original text.  Escaped characters have the backslash
    removed from `value`.
    """

    type: str
    value: str
    line: int
    col: int


@dataclass
class _LogicalLine:
    """One or more physical lines joined by trailing backslashes."""

    text: str
    # (offset into `text`, physical line number, column at that offset)
    segments: List[Tuple[int, int, int]] = field(default_factory=list)

    def pos(self, offset: int) -> Tuple[int, int]:
        for start, line, col in reversed(self.segments):
            if offset >= start:
                return (line, col + offset - start)
        raise RuntimeError(f"offset {offset} precedes the logical line")


def _strip_comment(line: str) -> str:
    escaped = False
    for i, c in enumerate(line):
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == "#":
            return line[:i]
    return line


def _continues(line: str) -> bool:
    # An odd number of trailing backslashes means the last one is unescaped.
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _check_control_chars(line: str, lineno: int) -> None:
    for col, c in enumerate(line, start=1):
        if (ord(c) < 0x20 and c != "\t") or ord(c) == 0x7F:
            raise LexError(
                f"Disallowed control character {c!r}",
                line=lineno,
                column=col,
            )


def _logical_lines(text: str) -> Iterator[_LogicalLine]:
    physical = text.split("\n")
    i = 0
    while i < len(physical):
        raw = physical[i]
        if raw.endswith("\r"):
            raw = raw[:-1]
        _check_control_chars(raw, i + 1)
        logical = _LogicalLine(_strip_comment(raw), [(0, i + 1, 1)])
        while _continues(logical.text) and i + 1 < len(physical):
            logical.text = logical.text[:-1]
            i += 1
            raw = physical[i]
            if raw.endswith("\r"):
                raw = raw[:-1]
            _check_control_chars(raw, i + 1)
            joined = _strip_comment(raw)
            stripped = joined.lstrip(" \t")
            logical.segments.append(
                (len(logical.text), i + 1, len(joined) - len(stripped) + 1)
            )
            logical.text += stripped
        if _continues(logical.text):
            # Backslash on the very last line: nothing to join.
            logical.text = logical.text[:-1]
        i += 1
        yield logical


class _Lexer:
    KEYWORDS: ClassVar[Dict[str, str]] = {
        "import": "IMPORT",
        "unbind": "UNBIND",
        "mode": "MODE",
    }
    # Characters that may be escaped on the hotkey side of a line.
    ESCAPABLE: ClassVar[str] = "{},\\+~@_-.:#"
    TOKEN_SPEC: ClassVar[List[Tuple[str, str]]] = [
        ("ARROW", r"->"),
        ("RANGE", r"\.\."),
        ("LBRACE", r"\{"),
        ("RBRACE", r"\}"),
        ("COMMA", r","),
        ("PLUS", r"\+"),
        ("COLON", r":"),
        ("ATSIGN", r"@"),
        ("TILDE", r"~"),
        ("ESCAPE", r"\\."),
        ("NUMBER", r"[0-9]+(?![A-Za-z0-9_])"),
        ("OMIT", r"_(?![A-Za-z0-9_])"),
        ("WORD", r"[A-Za-z0-9_]+"),
        ("WHITESPACE", r"[ \t]+"),
        # Anything else is a one-character key name: the key table decides
        # whether it exists.
        ("SYMBOL", r"."),
    ]
    TOKENIZER_RE: ClassVar[Pattern[str]] = re.compile(
        "|".join("(?P<%s>%s)" % pair for pair in TOKEN_SPEC)
    )

    def __init__(self, text: str):
        self.text = text
        self.tokens: List[Token] = []
        self.indents: List[int] = [0]
        # Set after a binding line with no '->': the next, deeper line is its command.
        self.pending_command_indent: Optional[int] = None
        self.last_line = 1

    def _emit(self, type_: str, value: str, line: int, col: int) -> None:
        self.tokens.append(Token(type_, value, line, col))

    def tokenize(self) -> List[Token]:
        for logical in _logical_lines(self.text):
            if not logical.text.strip():
                continue
            self._lex_line(logical)
        line = self.last_line + 1
        while len(self.indents) > 1:
            self.indents.pop()
            self._emit("DEDENT", "", line, 1)
        self._emit("EOF", "", line, 1)
        return self.tokens

    def _lex_indent(self, logical: _LogicalLine, indent: str) -> int:
        width = len(indent.expandtabs(8))
        line, _ = logical.pos(0)
        if width > self.indents[-1]:
            self.indents.append(width)
            self._emit("INDENT", indent, line, 1)
            return width
        while width < self.indents[-1]:
            self.indents.pop()
            self._emit("DEDENT", "", line, 1)
        if width != self.indents[-1]:
            raise LexError(
                "Unindent does not match any outer indentation level",
                line=line,
                column=len(indent) + 1,
            )
        return width

    def _lex_line(self, logical: _LogicalLine) -> None:
        text = logical.text.rstrip(" \t")
        body = text.lstrip(" \t")
        start = len(text) - len(body)
        width = self._lex_indent(logical, text[:start])
        self.last_line = logical.segments[-1][1]

        pending = self.pending_command_indent
        self.pending_command_indent = None
        if pending is not None and width > pending:
            self._lex_command(logical, text, start)
            self._emit("NEWLINE", "", *logical.pos(len(text)))
            return

        first = True
        group_start: Optional[Token] = None
        line_tokens: List[Token] = []
        for m in self.TOKENIZER_RE.finditer(text, start):
            type_ = m.lastgroup
            value = m.group()
            assert type_ is not None
            if type_ == "WHITESPACE":
                continue
            line, col = logical.pos(m.start())
            if first and type_ == "WORD" and value in self.KEYWORDS:
                type_ = self.KEYWORDS[value]
            first = False

            if type_ == "ESCAPE":
                if value[1] not in self.ESCAPABLE:
                    raise LexError(
                        f"Invalid escape sequence '{value}'",
                        line=line,
                        column=col,
                    )
                type_, value = "SYMBOL", value[1]
            elif type_ == "LBRACE":
                if group_start is not None:
                    raise LexError(
                        "No nested groups allowed", line=line, column=col
                    )
            elif type_ == "RBRACE":
                if group_start is None:
                    raise LexError(
                        "Unmatched closing brace", line=line, column=col
                    )

            token = Token(type_, value, line, col)
            if type_ == "LBRACE":
                group_start = token
            elif type_ == "RBRACE":
                group_start = None
            line_tokens.append(token)

            if type_ == "IMPORT":
                self._lex_rest(logical, text, m.end(), "PATH", line_tokens)
                break
            if type_ == "ARROW":
                if group_start is not None:
                    break
                self._lex_rest(logical, text, m.end(), "COMMAND", line_tokens)
                break

        if group_start is not None:
            raise LexError(
                "Unterminated group",
                line=group_start.line,
                column=group_start.col,
            )
        self.tokens.extend(line_tokens)
        self._emit("NEWLINE", "", *logical.pos(len(text)))

        types = [tok.type for tok in line_tokens]
        if (
            types[0] not in self.KEYWORDS.values()
            and "ARROW" not in types
            and types[-1] != "COLON"
        ):
            self.pending_command_indent = width

    def _lex_rest(
        self,
        logical: _LogicalLine,
        text: str,
        offset: int,
        type_: str,
        line_tokens: List[Token],
    ) -> None:
        rest = text[offset:]
        value = rest.strip(" \t")
        offset += len(rest) - len(rest.lstrip(" \t"))
        if type_ == "COMMAND":
            _check_command_braces(value, logical, offset)
        line_tokens.append(Token(type_, value, *logical.pos(offset)))

    def _lex_command(self, logical: _LogicalLine, text: str, offset: int) -> None:
        value = text[offset:]
        _check_command_braces(value, logical, offset)
        self._emit("COMMAND", value, *logical.pos(offset))


def _check_command_braces(
    command: str, logical: _LogicalLine, offset: int
) -> None:
    """Make sure groups in command text are balanced and not nested.

    Braces directly after '$' are shell parameter expansions and are skipped.
    """
    group_start: Optional[int] = None
    escaped = False
    i = 0
    while i < len(command):
        c = command[i]
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == "{":
            if group_start is None and i > 0 and command[i - 1] == "$":
                end = command.find("}", i)
                if end == -1:
                    break
                i = end
            elif group_start is not None:
                raise LexError(
                    "No nested groups allowed",
                    *logical.pos(offset + i),
                )
            else:
                group_start = i
        elif c == "}":
            if group_start is None:
                raise LexError(
                    "Unmatched closing brace", *logical.pos(offset + i)
                )
            group_start = None
        i += 1
    if group_start is not None:
        raise LexError("Unterminated group", *logical.pos(offset + group_start))


def tokenize(text: str) -> List[Token]:
    """Tokenize the full text of a swhkdrc file.

    The returned list always ends with an EOF token, preceded by enough
    DEDENT tokens to close every open indentation level.

    Raises LexError on unbalanced or nested braces, invalid escapes,
    disallowed control characters, and inconsistent dedents.
    """
    # A leading byte order mark is not part of the first line.
    if text.startswith("\ufeff"):
        text = text[1:]
    return _Lexer(text).tokenize()
