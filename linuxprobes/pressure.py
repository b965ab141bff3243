"""Linux Pressure Stall Information (PSI) readers."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass

from .messages import PluginError, Status

PATH_PSI_PROC_CPU = "/proc/pressure/cpu"
PATH_PSI_PROC_IO = "/proc/pressure/io"
PATH_PSI_PROC_MEMORY = "/proc/pressure/memory"

_FLOAT = r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
_PSI_FIELDS = re.compile(
    rf"avg10={_FLOAT}\s*avg60={_FLOAT}\s*avg300={_FLOAT}\s*total=\s*\+?(\d+)"
)


@dataclass(frozen=True)
class PsiOneLine:
    """Averages (percent) and total stall time (microseconds) of one line."""

    avg10: float = 0.0
    avg60: float = 0.0
    avg300: float = 0.0
    total: int = 0


@dataclass(frozen=True)
class PsiTwoLines:
    """The "some" and "full" lines of an io or memory pressure file."""

    some_avg10: float = 0.0
    some_avg60: float = 0.0
    some_avg300: float = 0.0
    some_total: int = 0
    full_avg10: float = 0.0
    full_avg60: float = 0.0
    full_avg300: float = 0.0
    full_total: int = 0


def parse_psi_line(path: str, label: str) -> PsiOneLine:
    """Parse the first line of ``path`` that starts with ``label``."""
    try:
        with open(path, encoding="utf-8", errors="replace") as fp:
            lines = fp.readlines()
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"error opening {path}", exc.errno or 0
        ) from exc

    for line in lines:
        if line.startswith(label):
            match = _PSI_FIELDS.match(line, len(label) + 1)
            if match is None:
                break
            avg10, avg60, avg300, total = match.groups()
            return PsiOneLine(float(avg10), float(avg60), float(avg300), int(total))
    raise PluginError(Status.UNKNOWN, f"error reading {path}")


def _check_delay(delay: int) -> None:
    if delay <= 0:
        raise ValueError("delay must be a positive number of seconds")


def read_cpu(delay: int = 1, path: str = PATH_PSI_PROC_CPU) -> tuple[PsiOneLine, int]:
    """Return the cpu pressure and the starvation per second over ``delay``."""
    _check_delay(delay)
    stats = parse_psi_line(path, "some")
    time.sleep(delay)
    later = parse_psi_line(path, "some")
    return stats, (later.total - stats.total) // delay


def _read_twolines(delay: int, path: str) -> tuple[PsiTwoLines, tuple[int, int]]:
    _check_delay(delay)
    some = parse_psi_line(path, "some")
    full = parse_psi_line(path, "full")
    stats = PsiTwoLines(
        some_avg10=some.avg10,
        some_avg60=some.avg60,
        some_avg300=some.avg300,
        some_total=some.total,
        full_avg10=full.avg10,
        full_avg60=full.avg60,
        full_avg300=full.avg300,
        full_total=full.total,
    )
    time.sleep(delay)
    some_later = parse_psi_line(path, "some")
    full_later = parse_psi_line(path, "full")
    starvation = (
        (some_later.total - some.total) // delay,
        (full_later.total - full.total) // delay,
    )
    return stats, starvation


def read_io(
    delay: int = 1, path: str = PATH_PSI_PROC_IO
) -> tuple[PsiTwoLines, tuple[int, int]]:
    """Return the io pressure and the (some, full) starvation per second."""
    return _read_twolines(delay, path)


def read_memory(
    delay: int = 1, path: str = PATH_PSI_PROC_MEMORY
) -> tuple[PsiTwoLines, tuple[int, int]]:
    """Return the memory pressure and the (some, full) starvation per second."""
    return _read_twolines(delay, path)