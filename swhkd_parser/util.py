"""Convenience functions for reading config files safely."""
import os
import stat
from os import PathLike
from typing import Union

from .errors import (
    FileTooLargeError,
    ImportResolutionError,
    LexError,
    MissingFileError,
    NotRegularFileError,
)

__all__ = ["read_config_file"]


def read_config_file(path: Union[str, "PathLike[str]"], max_size: int) -> str:
    """Read and decode a config file of at most `max_size` bytes.

    Symlinks are followed before checking the file type, so a symlink to a
    directory or device is rejected like the target itself.  The size is
    checked before reading, and the read itself stops one byte past the cap in
    case the file grew in the meantime.

    Raises MissingFileError, NotRegularFileError or FileTooLargeError, and
    LexError if the contents aren't valid UTF-8.
    """
    path = os.fspath(path)
    try:
        st = os.stat(path)
    except FileNotFoundError:
        raise MissingFileError(
            f"No such file: '{path}'", path=path
        ) from None
    except OSError as e:
        raise ImportResolutionError(
            f"Can't read '{path}': {e.strerror}", path=path
        ) from e
    if not stat.S_ISREG(st.st_mode):
        raise NotRegularFileError(f"Not a regular file: '{path}'", path=path)
    if st.st_size > max_size:
        raise FileTooLargeError(
            f"'{path}' is {st.st_size} bytes, over the limit of {max_size}",
            size=st.st_size,
            max_size=max_size,
            path=path,
        )

    try:
        with open(path, "rb") as f:
            data = f.read(max_size + 1)
    except OSError as e:
        raise ImportResolutionError(
            f"Can't read '{path}': {e.strerror}", path=path
        ) from e
    if len(data) > max_size:
        raise FileTooLargeError(
            f"'{path}' grew past the limit of {max_size} bytes while reading",
            size=len(data),
            max_size=max_size,
            path=path,
        )

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        # Report the position of the bad byte as a line and column.
        before = data[: e.start]
        line = before.count(b"\n") + 1
        column = e.start - (before.rfind(b"\n") + 1) + 1
        err = LexError(f"Invalid UTF-8: {e.reason}", line=line, column=column)
        err.path = path
        raise err from None
