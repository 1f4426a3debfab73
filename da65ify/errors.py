"""
Exception types shared by the da65ify analysis engine.

FormatError covers anything wrong with the *contents* of an input file
(bad iNES magic, truncated header, trace log shorter than the ROM, broken
label address field). UsageError covers bad command-line input. Plain
OSError is left alone and propagates from the file operations themselves.
"""

from __future__ import annotations

__all__ = ['Da65ifyError', 'FormatError', 'UsageError']


class Da65ifyError(Exception):
    """Base class for all da65ify errors."""


class FormatError(Da65ifyError):
    """Raised when an input file's contents cannot be interpreted."""
    def __init__(self, message: str, path: str = "", line_num: int = 0):
        self.path = path
        self.line_num = line_num
        where = path
        if line_num:
            where = f"{path}:{line_num}" if path else f"line {line_num}"
        super().__init__(f"{where}: {message}" if where else message)


class UsageError(Da65ifyError):
    """Raised on invalid or missing command-line arguments."""
