import pytest

from swhkd_parser.errors import LexError, ParseError
from swhkd_parser.parser import (
    BindingItem,
    Group,
    ImportItem,
    Literal,
    ModeBlock,
    ModeRef,
    Omission,
    Range,
    UnbindItem,
    parse_text,
)


def _single(text):
    doc = parse_text(text)
    assert not doc.diagnostics, doc.diagnostics
    assert len(doc.items) == 1
    return doc.items[0]


def test_binding_with_arrow():
    item = _single("super + shift + a -> echo hi\n")
    assert isinstance(item, BindingItem)
    assert [m.text for m in item.modifiers] == ["super", "shift"]
    assert item.key.text == "a"
    assert item.command.raw == "echo hi"
    assert item.command.parts == ["echo hi"]
    assert not item.send and not item.on_release
    assert (item.line, item.col) == (1, 1)


def test_binding_with_indented_command():
    item = _single("super + a\n    echo hi\n")
    assert isinstance(item, BindingItem)
    assert item.command.raw == "echo hi"
    assert item.command.line == 2


@pytest.mark.parametrize("attrs", ["@send ~", "~ @send"])
def test_attributes_in_either_order(attrs):
    item = _single(f"super + a {attrs} -> echo hi\n")
    assert item.send and item.on_release


@pytest.mark.parametrize("attrs", ["~ ~", "@send @send"])
def test_repeated_attribute_is_an_error(attrs):
    doc = parse_text(f"super + a {attrs} -> echo hi\n")
    assert not doc.items
    assert isinstance(doc.diagnostics[0], ParseError)
    assert "Duplicate" in doc.diagnostics[0].message


def test_hotkey_groups():
    item = _single("super + {shift,ctrl} + {1..3,_,x} -> echo\n")
    mods, key = item.modifiers, item.key
    assert isinstance(mods[1], Group)
    assert [m.text for m in mods[1].items] == ["shift", "ctrl"]
    assert isinstance(key, Group)
    first, omission, last = key.items
    assert isinstance(first, Range) and (first.start, first.end) == ("1", "3")
    assert isinstance(omission, Omission)
    assert isinstance(last, Literal) and last.text == "x"
    assert item.groups == [mods[1], key]


def test_command_template_parts():
    item = _single("super + {1,2} -> bspc desktop -f {I, II} && @resize\n")
    parts = item.command.parts
    assert parts[0] == "bspc desktop -f "
    group = parts[1]
    assert isinstance(group, Group)
    assert [m.text for m in group.items] == ["I", "II"]
    assert parts[2] == " && "
    assert isinstance(parts[3], ModeRef) and parts[3].name == "resize"


def test_command_escapes_and_shell_braces():
    item = _single(r"a -> echo \{x\} ${HOME} \@y user@host \n" + "\n")
    assert item.command.parts == [r"echo {x} ${HOME} @y user@host \n"]


def test_command_group_members():
    item = _single("super + {a,b,c,d} -> echo {1-2, @normal, _}\n")
    (group,) = item.command.groups
    one_two, mode, omission = group.items
    assert isinstance(one_two, Range) and (one_two.start, one_two.end) == ("1", "2")
    assert isinstance(mode, ModeRef) and mode.name == "normal"
    assert isinstance(omission, Omission)


def test_hyphenated_command_member_is_literal():
    item = _single("super + {a,b} -> {firefox,google-chrome}\n")
    (group,) = item.command.groups
    assert [m.text for m in group.items] == ["firefox", "google-chrome"]


def test_unbind_and_import():
    doc = parse_text("import ~/common.swhkdrc\nunbind super + {a,b}\n")
    imp, unbind = doc.items
    assert isinstance(imp, ImportItem) and imp.path == "~/common.swhkdrc"
    assert isinstance(unbind, UnbindItem)
    assert isinstance(unbind.key, Group)
    assert doc.imports == [imp]


def test_quoted_import_path():
    item = _single('import "my config.swhkdrc"\n')
    assert item.path == "my config.swhkdrc"


def test_mode_block():
    text = (
        "mode resize oneoff swallow:\n"
        "    h -> echo left\n"
        "    unbind l\n"
        "    super + j\n"
        "        echo down\n"
        "super + r -> @resize\n"
    )
    doc = parse_text(text)
    assert not doc.diagnostics
    block, binding = doc.items
    assert isinstance(block, ModeBlock)
    assert (block.name, block.oneoff, block.swallow) == ("resize", True, True)
    assert [type(sub) for sub in block.body] == [BindingItem, UnbindItem, BindingItem]
    assert block.body[2].command.raw == "echo down"
    assert isinstance(binding, BindingItem)


def test_recovers_at_next_item():
    doc = parse_text("super + -> echo broken\nsuper + b -> echo ok\n")
    assert len(doc.items) == 1
    assert doc.items[0].key.text == "b"
    (err,) = doc.diagnostics
    assert isinstance(err, ParseError)
    assert (err.line, err.column) == (1, 9)
    assert err.found == "->"


def test_broken_mode_header_drops_the_block():
    text = (
        "mode resize oops:\n"
        "    h -> echo left\n"
        "super + b -> echo ok\n"
    )
    doc = parse_text(text)
    assert len(doc.items) == 1
    assert isinstance(doc.items[0], BindingItem)
    assert doc.items[0].key.text == "b"
    assert len(doc.diagnostics) == 1


def test_errors_inside_mode_body_only_drop_the_item():
    text = (
        "mode resize:\n"
        "    import other\n"
        "    h -> echo left\n"
    )
    doc = parse_text(text)
    (block,) = doc.items
    assert len(block.body) == 1
    assert "Imports" in doc.diagnostics[0].message


def test_missing_command():
    doc = parse_text("super + a\nsuper + b -> echo b\n")
    assert [item.key.text for item in doc.items] == ["b"]
    assert "Missing command" in doc.diagnostics[0].message


def test_empty_command():
    doc = parse_text("super + a ->\n")
    assert not doc.items
    assert doc.diagnostics[0].message == "Empty command"


def test_empty_mode_body():
    doc = parse_text("mode empty:\nsuper + b -> echo b\n")
    assert len(doc.items) == 1
    assert "no bindings" in doc.diagnostics[0].message


def test_omission_outside_group():
    doc = parse_text("super + _ -> echo\n")
    assert not doc.items
    assert "group" in doc.diagnostics[0].message


def test_errors_carry_path():
    doc = parse_text("super + -> x\n", path="/tmp/rc")
    assert doc.diagnostics[0].path == "/tmp/rc"


def test_lex_errors_are_raised():
    with pytest.raises(LexError) as excinfo:
        parse_text("super + {a -> x\n", path="/tmp/rc")
    assert excinfo.value.path == "/tmp/rc"
