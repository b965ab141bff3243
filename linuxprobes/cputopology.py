"""CPU counts and socket/core/thread topology from sysfs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .messages import PluginError, Status

SYSFS_CPU = "/sys/devices/system/cpu"


@dataclass(frozen=True)
class CpuTopology:
    """Number of sockets, cores per socket and threads per core."""

    sockets: int = 1
    cores: int = 1
    threads: int = 1


def _sysconf(name: str) -> int:
    try:
        return os.sysconf(name)
    except (ValueError, OSError):
        return -1


def processor_number_total() -> int:
    """Return the number of CPUs configured in the system, or -1."""
    return _sysconf("SC_NPROCESSORS_CONF")


def processor_number_online() -> int:
    """Return the number of CPUs available to the scheduler, or -1."""
    return _sysconf("SC_NPROCESSORS_ONLN")


def _read_value(path: Path) -> int:
    try:
        return int(path.read_text().strip())
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"cannot read {path}", exc.errno or 0
        ) from exc
    except ValueError as exc:
        raise PluginError(Status.UNKNOWN, f"invalid value in {path}") from exc


def _read_line(path: Path) -> str | None:
    try:
        return path.read_text().strip()
    except OSError:
        return None


def processor_number_kernel_max(sysfs_cpu: str = SYSFS_CPU) -> int:
    """Return the number of CPUs the kernel configuration allows."""
    return _read_value(Path(sysfs_cpu) / "kernel_max") + 1


def cpumask_parse(mask: str) -> int:
    """Return the number of CPUs set in a hexadecimal sysfs CPU mask.

    Raises ValueError if the mask holds anything but hex digits and commas.
    """
    text = mask.strip()
    if len(text) > 1 and text.startswith("0x"):
        text = text[2:]

    count = 0
    chars = reversed(text)
    for char in chars:
        if char == ",":
            char = next(chars, None)
            if char is None:
                break
        try:
            value = int(char, 16)
        except ValueError:
            raise ValueError(f"invalid cpu mask: {mask!r}") from None
        count += bin(value).count("1")
    return count


def cputopology_read(sysfs_cpu: str = SYSFS_CPU) -> CpuTopology:
    """Work out the socket, core and thread counts from sysfs."""
    sockets = cores = threads = 1
    maxcpus = processor_number_kernel_max(sysfs_cpu)

    for cpu in range(maxcpus):
        topology = Path(sysfs_cpu) / f"cpu{cpu}" / "topology"
        thread_siblings = _read_line(topology / "thread_siblings")
        if thread_siblings is None:
            continue

        threads = cpumask_parse(thread_siblings) or 1

        core_siblings = _read_line(topology / "core_siblings")
        in_package = cpumask_parse(core_siblings) if core_siblings else 0
        cores = in_package // threads or 1

        online = max(processor_number_online(), 0)
        sockets = online // threads // cores or 1

    return CpuTopology(sockets=sockets, cores=cores, threads=threads)