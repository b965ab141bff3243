"""Description of the installed CPUs from /proc/cpuinfo and sysfs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path

from .cputopology import SYSFS_CPU, processor_number_kernel_max, processor_number_total
from .messages import PluginError, Status
from .procparser import linelookup

PROC_CPUINFO = "/proc/cpuinfo"

_LOOKUPS = (
    ("vendor", "vendor"),
    ("vendor_id", "vendor"),
    ("family", "family"),
    ("cpu family", "family"),
    ("model", "model"),
    ("model name", "modelname"),
    ("cpu MHz", "mhz"),
    ("flags", "flags"),
)

_VIRTUALIZATION = {"svm": "AMD-V", "vmx": "VT-x"}
_LONG_MODE_FLAGS = frozenset({"lm", "zarch", "sun4v", "sun4u"})
_ONLY_64BIT = ("alpha", "ia64")
_DEFAULT_32BIT = frozenset(
    {"i386", "i486", "i586", "i686", "x86_64", "s390", "s390x", "sparc64"}
)


class CpuMode(IntFlag):
    """CPU operating modes."""

    BIT32 = 1 << 1
    BIT64 = 1 << 2


def _default_mode(arch: str) -> CpuMode:
    mode = CpuMode(0)
    if arch.startswith(_ONLY_64BIT):
        mode |= CpuMode.BIT64
    if arch in _DEFAULT_32BIT:
        mode |= CpuMode.BIT32
    return mode


@dataclass
class CpuDesc:
    """What is known about the CPUs of this machine."""

    arch: str | None = None
    vendor: str | None = None
    family: str | None = None
    model: str | None = None
    modelname: str | None = None
    virtflag: str | None = None
    mhz: str | None = None
    flags: str | None = None
    mode: CpuMode = CpuMode(0)
    ncpus: int = 0
    ncpuspos: int = 0

    @classmethod
    def read(
        cls, cpuinfo_path: str = PROC_CPUINFO, sysfs_cpu: str = SYSFS_CPU
    ) -> CpuDesc:
        """Build a description from the cpuinfo file and sysfs."""
        try:
            with open(cpuinfo_path, encoding="utf-8", errors="replace") as fp:
                lines = fp.readlines()
        except OSError as exc:
            raise PluginError(
                Status.UNKNOWN, f"error opening {cpuinfo_path}", exc.errno or 0
            ) from exc

        arch = os.uname().machine
        ncpus = processor_number_total()
        ncpuspos = processor_number_kernel_max(sysfs_cpu)

        fields: dict[str, str] = {}
        for line in lines:
            for pattern, attr in _LOOKUPS:
                value = linelookup(line, pattern)
                if value is not None:
                    fields[attr] = value
                    break

        mode = _default_mode(arch)
        virtflag = None
        flags = fields.get("flags")
        if flags:
            words = set(flags.split())
            if "svm" in words:
                virtflag = "svm"
            elif "vmx" in words:
                virtflag = "vmx"
            if words & _LONG_MODE_FLAGS:
                mode |= CpuMode.BIT32 | CpuMode.BIT64

        return cls(
            arch=arch,
            virtflag=virtflag,
            mode=mode,
            ncpus=ncpus,
            ncpuspos=ncpuspos,
            **fields,
        )

    def virtualization(self) -> str | None:
        """Return the hardware virtualization technology, if any."""
        if self.virtflag is None:
            return None
        return _VIRTUALIZATION.get(self.virtflag, self.virtflag)


def _online_path(cpu: int, sysfs_cpu: str) -> Path:
    return Path(sysfs_cpu) / f"cpu{cpu}" / "online"


def processor_is_hot_pluggable(cpu: int, sysfs_cpu: str = SYSFS_CPU) -> bool:
    """Tell whether ``cpu`` can be taken offline."""
    return _online_path(cpu, sysfs_cpu).exists()


def processor_is_online(cpu: int, sysfs_cpu: str = SYSFS_CPU) -> bool | None:
    """Tell whether ``cpu`` is online; None if it is not hot-pluggable."""
    path = _online_path(cpu, sysfs_cpu)
    if not path.exists():
        return None
    try:
        return bool(int(path.read_text().strip()))
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"cannot read {path}", exc.errno or 0
        ) from exc
    except ValueError as exc:
        raise PluginError(Status.UNKNOWN, f"invalid value in {path}") from exc