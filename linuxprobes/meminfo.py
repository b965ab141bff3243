"""Memory and swap usage read from /proc/meminfo."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path

from .kernelver import kernel_version, linux_version
from .messages import PluginError, Status
from .procparser import parse_proc_table

PROC_MEMINFO = "/proc/meminfo"
PATH_VM_MIN_FREE_KB = "/proc/sys/vm/min_free_kbytes"

# Row names of the meminfo file and the SysMem fields they fill.
_TABLE = {
    "Active": "active",
    "Active(file)": "active_file",
    "AnonPages": "anon_pages",
    "Buffers": "main_buffers",
    "Cached": "page_cache",
    "Committed_AS": "committed_as",
    "Dirty": "dirty",
    "HighTotal": "high_total",
    "Inact_clean": "inact_clean",
    "Inact_dirty": "inact_dirty",
    "Inact_laundry": "inact_laundry",
    "Inactive": "inactive",
    "Inactive(file)": "inactive_file",
    "LowFree": "low_free",
    "LowTotal": "low_total",
    "MemAvailable": "main_available",
    "MemFree": "main_free",
    "MemTotal": "main_total",
    "SReclaimable": "slab_reclaimable",
    "Shmem": "main_shared",
    "Slab": "slab",
    "SwapCached": "swap_cached",
    "SwapFree": "swap_free",
    "SwapTotal": "swap_total",
}

# MemAvailable appeared in 3.14; before 2.6.27 it cannot be estimated.
_MEMAVAILABLE_ESTIMATE_KERNEL = kernel_version(2, 6, 27)


def proc_meminfo_path() -> str:
    """Return the meminfo file to read, honouring NPL_TEST_PATH_PROCMEMINFO."""
    return os.environ.get("NPL_TEST_PATH_PROCMEMINFO") or PROC_MEMINFO


def _read_min_free_kbytes(path: str) -> int:
    try:
        return int(Path(path).read_text().strip())
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"cannot read {path}", exc.errno or 0
        ) from exc
    except ValueError as exc:
        raise PluginError(Status.UNKNOWN, f"invalid value in {path}") from exc


@dataclass
class SysMem:
    """Memory counters in kB, with the derived cached and used values."""

    active: int = 0
    active_file: int = 0
    anon_pages: int = 0
    main_buffers: int = 0
    page_cache: int = 0
    committed_as: int = 0
    dirty: int = 0
    high_total: int = 0
    inact_clean: int = 0
    inact_dirty: int = 0
    inact_laundry: int = 0
    inactive: int = 0
    inactive_file: int = 0
    low_free: int = 0
    low_total: int = 0
    main_available: int = 0
    main_free: int = 0
    main_total: int = 0
    slab_reclaimable: int = 0
    main_shared: int = 0
    slab: int = 0
    swap_cached: int = 0
    swap_free: int = 0
    swap_total: int = 0
    main_cached: int = 0
    main_used: int = 0

    @classmethod
    def read(
        cls,
        path: str | None = None,
        kernel: int | None = None,
        min_free_kbytes_path: str = PATH_VM_MIN_FREE_KB,
    ) -> SysMem:
        """Read the meminfo file and fill in the values it lacks.

        ``kernel`` is a packed kernel version; it defaults to the running
        kernel and is only needed when MemAvailable is missing.
        """
        raw = parse_proc_table(path or proc_meminfo_path(), _TABLE, ":")
        values = {_TABLE[name]: value for name, value in raw.items()}
        mem = cls(**values)

        if not values.get("low_total"):
            # low == main except with large-memory support
            mem.low_total = mem.main_total
            mem.low_free = mem.main_free

        if "inactive" not in values:
            mem.inactive = mem.inact_dirty + mem.inact_clean + mem.inact_laundry

        if "main_available" not in values:
            mem.main_available = mem._estimate_available(kernel, min_free_kbytes_path)

        mem.main_cached = mem.page_cache + mem.slab_reclaimable
        mem.main_used = (
            mem.main_total - mem.main_free - mem.main_cached - mem.main_buffers
        )
        return mem

    def _estimate_available(self, kernel: int | None, min_free_path: str) -> int:
        if kernel is None:
            kernel = linux_version()
        if kernel < _MEMAVAILABLE_ESTIMATE_KERNEL:
            return self.main_free

        # should be equal to the sum of all 'low' fields in /proc/zoneinfo
        watermark_low = _read_min_free_kbytes(min_free_path) * 5 // 4
        pagecache = self.inactive_file + self.active_file
        available = (
            self.main_free
            - watermark_low
            + pagecache
            - min(pagecache // 2, watermark_low)
            + self.slab_reclaimable
            - min(self.slab_reclaimable // 2, watermark_low)
        )
        return max(available, 0)

    def swap_used(self) -> int:
        """Return the amount of swap in use, in kB."""
        return self.swap_total - self.swap_free

    def as_dict(self) -> dict[str, int]:
        """Return all counters as a plain dictionary."""
        return dataclasses.asdict(self)