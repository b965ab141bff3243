"""Parsers for the "name: value" style files found under /proc."""

from __future__ import annotations

import errno as _errno
import re
from collections.abc import Iterable

from .messages import PluginError, Status

_NAME_MAX = 32
_ULONG_MAX = 2**64 - 1
_NUMBER = re.compile(r"\s*\+?(\d+)")


def _strtoul(text: str) -> int:
    match = _NUMBER.match(text)
    if match is None:
        return 0
    return min(int(match.group(1)), _ULONG_MAX)


def parse_proc_table(
    filename: str, names: Iterable[str], separator: str = ":"
) -> dict[str, int]:
    """Read the values of the rows listed in ``names`` from ``filename``.

    Only rows that are present in the file appear in the result.
    """
    wanted = set(names)
    values: dict[str, int] = {}
    try:
        with open(filename, encoding="utf-8", errors="replace") as fp:
            for line in fp:
                head, sep, tail = line.partition(separator)
                if not sep or len(head) >= _NAME_MAX:
                    continue
                if head in wanted:
                    values[head] = _strtoul(tail)
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN,
            f"error: cannot read {filename}",
            exc.errno or _errno.EIO,
        ) from exc
    return values


def linelookup(line: str, pattern: str) -> str | None:
    """Return the value of ``line`` if it reads ``pattern : value``."""
    if not line or not line.startswith(pattern):
        return None
    rest = line[len(pattern):].lstrip()
    if not rest.startswith(":"):
        return None
    value = rest[1:].strip()
    return value or None