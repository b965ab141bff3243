"""Counting the running processes, or threads, of each user."""

from __future__ import annotations

import errno as _errno
import os
import pwd
import re
import resource
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntFlag

from .messages import PluginError, Status

PROC_ROOT = "/proc"
_MAX_CMD = 127
_NUMBER = re.compile(r"\s*([+-]?\d+)")


class ProcsFlags(IntFlag):
    """Options for :func:`procs_list_getall`."""

    NONE = 0
    VERBOSE = 1 << 0
    THREADS = 1 << 1


def uid_to_username(uid: int) -> str:
    """Return the login name of ``uid``, or ``"<no-user>"``."""
    try:
        return pwd.getpwuid(uid).pw_name
    except (KeyError, OverflowError):
        return "<no-user>"


def _rlimit_nproc() -> tuple[int, int]:
    try:
        return resource.getrlimit(resource.RLIMIT_NPROC)
    except (ValueError, OSError, AttributeError):
        return resource.RLIM_INFINITY, resource.RLIM_INFINITY


@dataclass
class UserProcs:
    """The processes counted for one user, with the nproc limits (ulimit -u)."""

    uid: int
    username: str
    nbr: int = 0
    rlimit_nproc_soft: int = field(default=resource.RLIM_INFINITY)
    rlimit_nproc_hard: int = field(default=resource.RLIM_INFINITY)


class ProcsList:
    """Per-user process counts, in the order users were first seen."""

    def __init__(self) -> None:
        self._users: dict[int, UserProcs] = {}
        self._total = 0

    def add(self, uid: int, inc: int = 1) -> UserProcs:
        """Add ``inc`` processes to ``uid`` and return its entry."""
        entry = self._users.get(uid)
        if entry is None:
            soft, hard = _rlimit_nproc()
            entry = UserProcs(uid, uid_to_username(uid), 0, soft, hard)
            self._users[uid] = entry
        entry.nbr += inc
        self._total += inc
        return entry

    def total(self) -> int:
        """Return the number of processes counted for all users."""
        return self._total

    def get(self, uid: int) -> UserProcs | None:
        """Return the entry of ``uid``, or None."""
        return self._users.get(uid)

    def __iter__(self) -> Iterator[UserProcs]:
        return iter(self._users.values())

    def __len__(self) -> int:
        return len(self._users)


def _strtol(text: str) -> int:
    match = _NUMBER.match(text)
    return int(match.group(1)) if match else 0


def parse_status(text: str) -> tuple[str, int, int] | None:
    """Return (command, real uid, threads) from a /proc/PID/status text.

    Returns None unless all three lines are present.
    """
    name: str | None = None
    uid: int | None = None
    threads: int | None = None
    for line in text.splitlines():
        if line.startswith("Name:"):
            name = line[5:].lstrip()[:_MAX_CMD]
        if line.startswith("Threads:"):
            threads = _strtol(line[8:])
        if line.startswith("Uid:"):
            uid = _strtol(line[4:])
        if name is not None and uid is not None and threads is not None:
            return name, uid, threads
    return None


def procs_list_getall(
    flags: ProcsFlags = ProcsFlags.NONE, proc_root: str = PROC_ROOT
) -> ProcsList:
    """Scan the PID directories of ``proc_root`` and count processes per user.

    With THREADS the threads of each process are counted instead; with
    VERBOSE one line per process is printed.
    """
    flags = ProcsFlags(flags)
    plist = ProcsList()
    try:
        entries = list(os.scandir(proc_root))
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"Cannot open {proc_root}", exc.errno or _errno.EIO
        ) from exc

    for entry in entries:
        if not entry.name[:1].isdigit():
            continue
        try:
            if not entry.is_dir(follow_symlinks=False):
                continue
            with open(
                os.path.join(entry.path, "status"), encoding="utf-8", errors="replace"
            ) as fp:
                text = fp.read()
        except OSError:
            continue  # the process may have just terminated

        status = parse_status(text)
        if status is None:
            continue
        cmd, uid, threads = status
        plist.add(uid, threads if flags & ProcsFlags.THREADS else 1)
        if flags & ProcsFlags.VERBOSE:
            print(
                f"{uid_to_username(uid):>12}:  pid: {entry.name:>5}  "
                f"threads: {threads:>5}, cmd: {cmd}"
            )
    return plist