"""Library for parsing and compiling Simple Wayland HotKey Daemon (swhkd) configs.

You should start with the `compiler` module: `compile_file` turns a config
file and everything it imports into a `CompiledDocument`.

Re-exports every member in all modules directly part of this package.  The
`cli` subpackage as well as modules under it need to be imported explicitly.
"""
# mypy: implicit-reexport
from ._package import *
from .compiler import *
from .document import *
from .errors import *
from .keys import *
from .lexer import *
from .modes import *
from .parser import *
from .resolver import *
from .seq import *
from .util import *
