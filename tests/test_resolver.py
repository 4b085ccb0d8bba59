import os

import pytest

from swhkd_parser.errors import (
    FileTooLargeError,
    ImportCycleError,
    LexError,
    MissingFileError,
    NotRegularFileError,
)
from swhkd_parser.resolver import canonical_path, load_sources
from swhkd_parser.util import read_config_file


def test_read_config_file_size_cap(write_config):
    path = write_config("rc", "super + a -> x\n")
    size = os.path.getsize(path)
    assert read_config_file(path, size) == "super + a -> x\n"
    with pytest.raises(FileTooLargeError) as excinfo:
        read_config_file(path, size - 1)
    assert (excinfo.value.size, excinfo.value.max_size) == (size, size - 1)


def test_read_config_file_rejects_non_regular_files(tmp_path):
    with pytest.raises(NotRegularFileError):
        read_config_file(str(tmp_path), 1024)
    link = tmp_path / "link"
    link.symlink_to(tmp_path, target_is_directory=True)
    with pytest.raises(NotRegularFileError):
        read_config_file(str(link), 1024)


def test_read_config_file_missing(tmp_path):
    with pytest.raises(MissingFileError):
        read_config_file(str(tmp_path / "nope"), 1024)


def test_read_config_file_invalid_utf8(write_config):
    path = write_config("rc", b"a -> x\nb -> \xff\n")
    with pytest.raises(LexError) as excinfo:
        read_config_file(path, 1024)
    assert (excinfo.value.line, excinfo.value.column) == (2, 6)
    assert excinfo.value.path == path


def test_canonical_path(tmp_path):
    base = os.path.realpath(str(tmp_path))
    assert canonical_path("a/../b", base) == os.path.join(base, "b")
    assert canonical_path("/etc/swhkd/../swhkd/swhkdrc", base) == os.path.realpath(
        "/etc/swhkd/swhkdrc"
    )


def test_imports_come_before_importers(write_config):
    root = write_config("root", "import b\nimport c\n")
    b = write_config("b", "import sub/d\n")
    c = write_config("c", "import sub/d\n")
    d = write_config("sub/d", "a -> echo d\n")
    assert [s.path for s in load_sources(root)] == [d, b, c, root]


def test_imports_are_relative_to_the_importing_file(write_config):
    root = write_config("root", "import sub/b\n")
    b = write_config("sub/b", "import c\n")
    c = write_config("sub/c", "a -> echo c\n")
    assert [s.path for s in load_sources(root)] == [c, b, root]


def test_same_file_through_different_routes_loads_once(write_config):
    root = write_config("root", "import b\nimport ./sub/../b\n")
    b = write_config("b", "a -> echo b\n")
    assert [s.path for s in load_sources(root)] == [b, root]


def test_import_cycle(write_config):
    a = write_config("a", "import b\n")
    b = write_config("b", "import a\n")
    with pytest.raises(ImportCycleError) as excinfo:
        load_sources(a)
    assert excinfo.value.path_chain == [a, b, a]
    assert excinfo.value.path == b
    assert excinfo.value.line == 1


def test_self_import(write_config):
    a = write_config("a", "a -> x\nimport a\n")
    with pytest.raises(ImportCycleError) as excinfo:
        load_sources(a)
    assert excinfo.value.path_chain == [a, a]


def test_missing_import_points_at_directive(write_config):
    root = write_config("root", "a -> x\nimport missing\n")
    with pytest.raises(MissingFileError) as excinfo:
        load_sources(root)
    assert excinfo.value.path == root
    assert excinfo.value.line == 2
    assert "missing" in excinfo.value.message


def test_oversized_import(write_config):
    root = write_config("root", "import big\n")
    write_config("big", "a -> " + "x" * 100 + "\n")
    with pytest.raises(FileTooLargeError):
        load_sources(root, max_size=50)


def test_root_text_resolves_imports_against_path(write_config, tmp_path):
    b = write_config("b", "a -> echo b\n")
    root = os.path.join(str(tmp_path), "virtual")
    sources = load_sources(root, root_text="import b\n")
    assert [s.path for s in sources] == [b, os.path.realpath(root)]
