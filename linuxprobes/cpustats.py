"""CPU time counters and event totals read from /proc/stat."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from .messages import PluginError, Status

_DEFAULT_PROC_STAT = "/proc/stat"
_NFIELDS = 10
_NUMBER = re.compile(r"\s*\+?(\d+)")
_CPU_NUMBER = re.compile(r"\s*\+?(\d+)")


@dataclass
class CpuTime:
    """Time counters of one CPU line of /proc/stat, in clock ticks."""

    cpuname: str | None = None
    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0
    guest: int = 0
    guestn: int = 0


def proc_stat_path() -> str:
    """Return the stat file to read, honouring NPL_TEST_PATH_PROCSTAT."""
    return os.environ.get("NPL_TEST_PATH_PROCSTAT") or _DEFAULT_PROC_STAT


def _scan_numbers(text: str, count: int) -> list[int]:
    """Read up to ``count`` leading unsigned numbers, padding with zeros."""
    values: list[int] = []
    pos = 0
    while len(values) < count:
        match = _NUMBER.match(text, pos)
        if match is None:
            break
        values.append(int(match.group(1)))
        pos = match.end()
    return values + [0] * (count - len(values))


def _read_lines(path: str) -> list[str]:
    try:
        with open(path, encoding="utf-8", errors="replace") as fp:
            return fp.readlines()
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"error opening {path}", exc.errno or 0
        ) from exc


def cpu_stats_get_time(lines: int = 1, path: str | None = None) -> list[CpuTime]:
    """Return the CPU time counters found in the stat file.

    Item 0 holds the aggregate "cpu" line; item ``n + 1`` holds "cpu<n>".
    With ``lines`` equal to 1 only the aggregate line is read.
    """
    if lines < 1:
        raise ValueError("lines must be at least 1")
    procpath = path or proc_stat_path()
    times = [CpuTime() for _ in range(lines)]
    found = False

    for line in _read_lines(procpath):
        if line.startswith("cpu "):
            times[0] = CpuTime("cpu", *_scan_numbers(line[4:], _NFIELDS))
            found = True
            if lines == 1:
                break
        elif line.startswith("cpu"):
            rest = line[3:]
            match = _CPU_NUMBER.match(rest)
            if match is None:
                cpunum = 0
            else:
                cpunum = int(match.group(1))
                rest = rest[match.end():]
            if lines <= cpunum + 1:
                raise PluginError(
                    Status.UNKNOWN,
                    f"BUG: cpu_stats_get_time(): lines({lines}) <= "
                    f"cpunum({cpunum}) + 1",
                )
            times[cpunum + 1] = CpuTime(
                f"cpu{cpunum}", *_scan_numbers(rest, _NFIELDS)
            )

    if not found:
        raise PluginError(Status.UNKNOWN, f"{procpath}: pattern not found: 'cpu '")
    return times


def _value_with_pattern(pattern: str, mandatory: bool, path: str | None) -> int:
    procpath = path or proc_stat_path()
    for line in _read_lines(procpath):
        if line.startswith(pattern):
            match = _NUMBER.match(line, len(pattern))
            return int(match.group(1)) if match else 0
    if mandatory:
        raise PluginError(
            Status.UNKNOWN, f"{procpath}: pattern not found: '{pattern}'"
        )
    return 0


def cpu_stats_get_cswch(path: str | None = None) -> int:
    """Return the total number of context switches."""
    return _value_with_pattern("ctxt ", True, path)


def cpu_stats_get_intr(path: str | None = None) -> int:
    """Return the total number of interrupts serviced."""
    return _value_with_pattern("intr ", True, path)


def cpu_stats_get_softirq(path: str | None = None) -> int:
    """Return the total number of softirqs, or 0 on kernels without the line."""
    return _value_with_pattern("softirq ", False, path)