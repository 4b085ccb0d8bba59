"""Command-line interfaces to the library.

This package provides command-line programs using the library: a checker and
a dumper for the compiled binding table.  Third-party users of the library
can create their own programs.

For now, all such CLI programs are prefixed with 'hk'.
"""
