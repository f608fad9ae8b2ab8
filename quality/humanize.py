"""Human-readable byte counts for limit messages and CLI output."""

from __future__ import annotations


_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")
_SCALE = 1024


def pretty_filesize(size: int) -> str:
    """
    Format a byte count, switching units only past twice the unit size.

    Examples:
      pretty_filesize(2047) -> "2047 B"
      pretty_filesize(2048) -> "2.00 KB"
    """
    if size < 2 * _SCALE:
        return f"{size} B"

    for index in range(2, len(_UNITS) + 1):
        if size < 2 * (_SCALE**index):
            return f"{size / (_SCALE ** (index - 1)):.2f} {_UNITS[index - 1]}"

    return f"{size / (_SCALE ** (len(_UNITS) - 1)):.2f} {_UNITS[-1]}"
