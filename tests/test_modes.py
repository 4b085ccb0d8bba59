import pytest

from swhkd_parser.document import DEFAULT_MODE_ID, Binding
from swhkd_parser.errors import (
    ConflictingModeFlags,
    InvalidModeError,
    UndefinedModeError,
)
from swhkd_parser.keys import Key, Modifier
from swhkd_parser.modes import ModeTable
from swhkd_parser.parser import ModeBlock


def _block(name, oneoff=False, swallow=False, line=1):
    return ModeBlock(name, oneoff, swallow, [], line, 1)


def _binding(command, mode=DEFAULT_MODE_ID, switches=()):
    return Binding(
        frozenset({Modifier.SUPER}),
        Key.KEY_A,
        command,
        mode=mode,
        mode_switches=switches,
    )


def test_ids_in_order_of_first_declaration():
    table = ModeTable()
    assert table.register(_block("resize")) == 1
    assert table.register(_block("launch")) == 2
    assert table.register(_block("resize")) == 1
    assert table.register(_block("default")) == DEFAULT_MODE_ID
    assert len(table) == 3
    assert not table.diagnostics


def test_conflicting_flags_later_wins():
    table = ModeTable()
    table.register(_block("resize", swallow=True))
    table.register(_block("resize", oneoff=True, line=7), path="/tmp/rc")
    (diag,) = table.diagnostics
    assert isinstance(diag, ConflictingModeFlags)
    assert (diag.mode, diag.line, diag.path) == ("resize", 7, "/tmp/rc")
    resize = table.freeze({}).mode("resize")
    assert (resize.oneoff, resize.swallow) == (True, False)


def test_default_mode_cannot_be_oneoff():
    table = ModeTable()
    with pytest.raises(InvalidModeError):
        table.register(_block("default", oneoff=True))
    table.register(_block("default", swallow=True))
    assert table.freeze({}).default_mode.swallow


def test_validate():
    table = ModeTable()
    table.register(_block("resize"))
    table.validate([_binding("@resize", switches=("resize",))])
    table.validate([_binding("@default", switches=("default",))])
    with pytest.raises(UndefinedModeError) as excinfo:
        table.validate([_binding("@nope", switches=("nope",))])
    assert excinfo.value.mode == "nope"


def test_freeze():
    table = ModeTable()
    table.register(_block("resize", oneoff=True))
    binding = _binding("echo", mode=1)
    document = table.freeze({1: [binding]})
    assert list(document.mode_name_index) == ["default", "resize"]
    assert document.default_mode.bindings == ()
    assert document.mode("resize").bindings == (binding,)
    assert document.mode("resize").oneoff
    with pytest.raises(TypeError):
        document.modes[5] = None  # type: ignore[index]
