import os

import pytest


@pytest.fixture
def write_config(tmp_path):
    """Return a function that writes a config file under `tmp_path`.

    The function returns the canonical path of the file it wrote, which is how
    the library refers to files in errors and bindings.
    """

    def _write(name, text):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8")
        return os.path.realpath(str(path))

    return _write
