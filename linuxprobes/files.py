"""Counting the entries of a directory by type, age, size and name."""

from __future__ import annotations

import os
import stat
import time
from dataclasses import dataclass
from enum import IntFlag
from fnmatch import fnmatchcase

from .messages import PluginError, Status


class FilesFlags(IntFlag):
    """Options for :func:`filecount`."""

    INCLUDE_HIDDEN = 1 << 0
    RECURSIVE = 1 << 1
    REGULAR_ONLY = 1 << 2
    IGNORE_SYMLINKS = 1 << 3
    IGNORE_UNKNOWN = 1 << 4


@dataclass
class FileCount:
    """How many entries of each kind were counted."""

    total: int = 0
    regular_file: int = 0
    directory: int = 0
    symlink: int = 0
    special_file: int = 0
    hidden: int = 0
    unknown: int = 0


_SPECIAL = (stat.S_IFBLK, stat.S_IFCHR, stat.S_IFIFO, stat.S_IFSOCK)


def _matches(pattern: str | None, name: str) -> bool:
    return pattern is None or fnmatchcase(name, pattern)


def _age_matches(age: int, now: int, mtime: int) -> bool:
    """Positive ``age``: older than age seconds; negative: newer than -age."""
    if age == 0:
        return True
    limit = now - abs(age)
    return mtime > limit if age < 0 else mtime < limit


def _size_matches(size: int, filesize: int) -> bool:
    """Positive ``size``: larger than size bytes; negative: smaller than -size."""
    if size == 0:
        return True
    return filesize < -size if size < 0 else filesize > size


def _scan(
    directory: str,
    flags: FilesFlags,
    age: int,
    size: int,
    pattern: str | None,
    now: int,
    count: FileCount,
) -> None:
    with os.scandir(directory) as entries:
        names = [entry.name for entry in entries]

    for name in names:
        hidden = name.startswith(".")
        if hidden and not flags & FilesFlags.INCLUDE_HIDDEN:
            continue

        path = f"{directory}/{name}"
        try:
            info = os.lstat(path)
        except OSError as exc:
            raise PluginError(
                Status.UNKNOWN, f"lstat ({path}) failed", exc.errno or 0
            ) from exc
        kind = stat.S_IFMT(info.st_mode)

        if kind == stat.S_IFDIR:
            if flags & FilesFlags.RECURSIVE:
                if not flags & FilesFlags.REGULAR_ONLY and _matches(pattern, name):
                    count.directory += 1
                    count.total += 1
                    if hidden:
                        count.hidden += 1
                try:
                    _scan(path, flags, age, size, pattern, now, count)
                except OSError:
                    pass  # unreadable subdirectories are skipped
                continue
            if flags & FilesFlags.REGULAR_ONLY:
                continue

        if not _matches(pattern, name):
            continue

        if kind in _SPECIAL:
            count.special_file += 1
            if flags & FilesFlags.REGULAR_ONLY:
                continue
        elif kind == stat.S_IFLNK:
            if flags & (FilesFlags.IGNORE_SYMLINKS | FilesFlags.REGULAR_ONLY):
                continue
            count.symlink += 1
        elif kind == stat.S_IFREG:
            if not _age_matches(age, now, int(info.st_mtime)):
                continue
            if not _size_matches(size, info.st_size):
                continue
            count.regular_file += 1
            if hidden:
                count.hidden += 1
        else:
            count.unknown += 1
            if flags & FilesFlags.IGNORE_UNKNOWN:
                continue

        count.total += 1


def filecount(
    directory: str,
    flags: FilesFlags = FilesFlags(0),
    age: int = 0,
    size: int = 0,
    pattern: str | None = None,
) -> FileCount:
    """Count the entries of ``directory``.

    ``age`` and ``size`` filter regular files (see the helpers above; 0
    disables the filter) and ``pattern`` is a shell wildcard matched
    against entry names.  Raises OSError if ``directory`` cannot be opened.
    """
    count = FileCount()
    _scan(directory, FilesFlags(flags), age, size, pattern, int(time.time()), count)
    return count