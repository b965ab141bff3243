"""Per-CPU interrupt totals from /proc/interrupts."""

from __future__ import annotations

from itertools import islice

from .cputopology import processor_number_online

PROC_INTERRUPTS = "/proc/interrupts"


def interrupts_per_cpu(
    path: str = PROC_INTERRUPTS, ncpus: int | None = None
) -> list[int] | None:
    """Return the number of interrupts serviced by each CPU.

    ``ncpus`` defaults to the number of online CPUs.  Returns None when the
    interrupts file cannot be opened.
    """
    if ncpus is None:
        ncpus = processor_number_online()
    totals = [0] * max(ncpus, 0)

    try:
        fp = open(path, encoding="utf-8", errors="replace")
    except OSError:
        return None

    with fp:
        next(fp, None)  # the header names the CPU columns
        for line in fp:
            _, sep, counters = line.partition(":")
            if not sep:
                continue
            for cpu, field in enumerate(islice(counters.split(), len(totals))):
                if not (field.isascii() and field.isdigit()):
                    break
                totals[cpu] += int(field)
    return totals