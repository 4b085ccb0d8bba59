import pytest

from swhkd_parser.errors import LexError
from swhkd_parser.lexer import tokenize


def _types(text):
    return [tok.type for tok in tokenize(text)]


def test_binding_with_arrow():
    tokens = tokenize("super + a -> echo hi\n")
    assert [tok.type for tok in tokens] == [
        "WORD",
        "PLUS",
        "WORD",
        "ARROW",
        "COMMAND",
        "NEWLINE",
        "EOF",
    ]
    command = tokens[4]
    assert command.value == "echo hi"
    assert (command.line, command.col) == (1, 14)


def test_indented_command_line():
    assert _types("super + a\n    echo hi\n") == [
        "WORD",
        "PLUS",
        "WORD",
        "NEWLINE",
        "INDENT",
        "COMMAND",
        "NEWLINE",
        "DEDENT",
        "EOF",
    ]


def test_comments_are_stripped():
    tokens = tokenize("# a comment\nsuper + a -> echo hi # trailing\n")
    assert tokens[0].line == 2
    assert [tok.value for tok in tokens if tok.type == "COMMAND"] == ["echo hi"]


def test_escaped_hash_is_not_a_comment():
    tokens = tokenize("super + a -> echo \\#1\n")
    assert [tok.value for tok in tokens if tok.type == "COMMAND"] == ["echo \\#1"]


def test_line_continuation_keeps_positions():
    tokens = tokenize("super + \\\n    a -> echo hi\n")
    key = tokens[2]
    assert key.value == "a"
    assert (key.line, key.col) == (2, 5)
    assert tokens[4].value == "echo hi"


def test_keywords_only_at_line_start():
    assert _types("import other.swhkdrc\n")[:2] == ["IMPORT", "PATH"]
    assert _types("unbind super + a\n")[0] == "UNBIND"
    assert _types("mode resize oneoff:\n    h -> x\n")[:5] == [
        "MODE",
        "WORD",
        "WORD",
        "COLON",
        "NEWLINE",
    ]


def test_groups_ranges_and_omissions():
    types = _types("super + {1..3,_,a-c} -> x\n")
    assert types[:12] == [
        "WORD",
        "PLUS",
        "LBRACE",
        "NUMBER",
        "RANGE",
        "NUMBER",
        "COMMA",
        "OMIT",
        "COMMA",
        "WORD",
        "SYMBOL",
        "WORD",
    ]


def test_attributes():
    assert _types("a ~ @send -> x\n")[:4] == ["WORD", "TILDE", "ATSIGN", "WORD"]


def test_mode_block_indentation():
    text = "mode resize:\n    h -> x\n    l -> y\nsuper + r -> @resize\n"
    types = _types(text)
    assert types.count("INDENT") == 1
    assert types.count("DEDENT") == 1
    assert types.index("DEDENT") < types.index("PLUS")


def test_unterminated_group():
    with pytest.raises(LexError) as excinfo:
        tokenize("super + {a,b -> echo\n")
    assert (excinfo.value.line, excinfo.value.column) == (1, 9)


def test_unmatched_and_nested_braces():
    with pytest.raises(LexError, match="Unmatched"):
        tokenize("super + a} -> x\n")
    with pytest.raises(LexError, match="nested"):
        tokenize("super + {a,{b}} -> x\n")
    with pytest.raises(LexError, match="nested"):
        tokenize("super + a -> echo {a,{b}}\n")


def test_shell_parameter_expansion_is_not_a_group():
    tokens = tokenize("super + a -> echo ${HOME}\n")
    assert tokens[4].value == "echo ${HOME}"


def test_invalid_escape():
    with pytest.raises(LexError, match="escape"):
        tokenize("super + \\q -> x\n")


def test_control_character():
    with pytest.raises(LexError) as excinfo:
        tokenize("super + a\x01 -> x\n")
    assert excinfo.value.column == 10


def test_inconsistent_dedent():
    with pytest.raises(LexError, match="Unindent"):
        tokenize("mode a:\n        h -> x\n    j -> y\n")


def test_crlf_line_endings():
    assert _types("super + a -> x\r\n") == _types("super + a -> x\n")


def test_leading_byte_order_mark_is_ignored():
    tokens = tokenize("\ufeffsuper + a -> x\n")
    assert tokens[0].type == "WORD"
    assert tokens[0].value == "super"
    assert (tokens[0].line, tokens[0].col) == (1, 1)
