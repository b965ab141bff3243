"""Network interface link state and traffic statistics."""

from __future__ import annotations

import dataclasses
import math
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from pathlib import Path

import psutil

from .messages import PluginError, Status

SYSFS_NET = "/sys/class/net"

IFF_UP = 0x1
IFF_LOOPBACK = 0x8
IFF_RUNNING = 0x40

SPEED_UNKNOWN = -1
_UNKNOWN_SPEEDS = (0xFFFF, 0xFFFFFFFF)

_LINK_SPEEDS = {
    10: "10Mbps",
    100: "100Mbps",
    1000: "1Gbps",
    2500: "2.5Gbps",
    5000: "5Gbps",
    10000: "10Gbps",
    14000: "14Gbps",
    20000: "20Gbps",
    25000: "25Gbps",
    40000: "40Gbps",
    50000: "50Gbps",
    56000: "56Gbps",
    100000: "100Gbps",
    SPEED_UNKNOWN: "unknown!",
}


class Duplex(IntEnum):
    """Duplex mode of a link."""

    HALF = 0x00
    FULL = 0x01
    UNKNOWN = 0xFF


_DUPLEX_NAMES = {"half": Duplex.HALF, "full": Duplex.FULL}

_PSUTIL_DUPLEX = {
    psutil.NIC_DUPLEX_HALF: Duplex.HALF,
    psutil.NIC_DUPLEX_FULL: Duplex.FULL,
}


class NetOptions(IntFlag):
    """Options selecting interfaces and the metrics to report."""

    NONE = 0
    CHECK_LINK = 1 << 0
    NO_LOOPBACK = 1 << 1
    NO_WIRELESS = 1 << 2
    NO_BYTES = 1 << 3
    NO_COLLISIONS = 1 << 4
    NO_DROPS = 1 << 5
    NO_ERRORS = 1 << 6
    NO_MULTICAST = 1 << 7
    NO_PACKETS = 1 << 8
    RX_ONLY = 1 << 9
    TX_ONLY = 1 << 10


@dataclass(frozen=True)
class IfStats:
    """Traffic counters of one interface."""

    collisions: int = 0
    multicast: int = 0
    tx_packets: int = 0
    rx_packets: int = 0
    tx_bytes: int = 0
    rx_bytes: int = 0
    tx_errors: int = 0
    rx_errors: int = 0
    tx_dropped: int = 0
    rx_dropped: int = 0


_STAT_NAMES = tuple(f.name for f in dataclasses.fields(IfStats))


@dataclass
class Interface:
    """A network interface, its link settings and, if known, its counters."""

    ifname: str
    flags: int = 0
    speed: int = 0
    duplex: Duplex = Duplex.UNKNOWN
    stats: IfStats | None = None

    def is_up(self) -> bool:
        """Tell whether the interface is administratively up."""
        return bool(self.flags & IFF_UP)

    def is_running(self) -> bool:
        """Tell whether the interface has a carrier."""
        return bool(self.flags & IFF_RUNNING)

    def is_loopback(self) -> bool:
        """Tell whether this is a loopback interface."""
        return bool(self.flags & IFF_LOOPBACK)


def link_speed_str(speed: int) -> str:
    """Return a readable form of a link speed given in Mbit/s."""
    return _LINK_SPEEDS.get(speed, "unknown!")


def is_wireless(ifname: str, sysfs_net: str = SYSFS_NET) -> bool:
    """Tell whether ``ifname`` is a wireless interface."""
    base = Path(sysfs_net) / ifname
    return (base / "wireless").exists() or (base / "phy80211").exists()


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text().strip()
    except OSError:
        return None


def _read_int(path: Path, base: int = 10) -> int | None:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return int(text, base)
    except ValueError:
        return None


def _psutil_link(ifname: str) -> tuple[int, Duplex]:
    try:
        nic = psutil.net_if_stats().get(ifname)
    except (OSError, RuntimeError):
        nic = None
    if nic is None:
        return 0, Duplex.UNKNOWN
    return nic.speed, _PSUTIL_DUPLEX.get(nic.duplex, Duplex.UNKNOWN)


def _link_settings(ifdir: Path, ifname: str) -> tuple[int, Duplex]:
    speed = _read_int(ifdir / "speed")
    duplex_text = _read_text(ifdir / "duplex")
    if speed is None:
        speed, duplex = _psutil_link(ifname)
    else:
        duplex = _DUPLEX_NAMES.get(duplex_text or "", Duplex.UNKNOWN)
    if speed < 0 or speed in _UNKNOWN_SPEEDS:
        speed = 0
    return speed, duplex


def _read_stats(statdir: Path) -> IfStats | None:
    if not statdir.is_dir():
        return None
    return IfStats(**{name: _read_int(statdir / name) or 0 for name in _STAT_NAMES})


def _compile(ifname_regex: str | re.Pattern[str] | None) -> re.Pattern[str]:
    if isinstance(ifname_regex, re.Pattern):
        return ifname_regex
    try:
        return re.compile(ifname_regex if ifname_regex else ".*")
    except re.error as exc:
        raise PluginError(Status.UNKNOWN, f"could not compile regex: {exc}") from exc


def _snapshot(
    options: NetOptions,
    ifname_regex: str | re.Pattern[str] | None,
    sysfs_net: str,
) -> list[Interface]:
    options = NetOptions(options)
    regex = _compile(ifname_regex)
    root = Path(sysfs_net)
    try:
        entries = list(root.iterdir())
    except OSError as exc:
        raise PluginError(
            Status.UNKNOWN, f"cannot read {sysfs_net}", exc.errno or 0
        ) from exc

    ordered = sorted(
        entries,
        key=lambda p: (_read_int(p / "ifindex") or float("inf"), p.name),
    )

    interfaces: list[Interface] = []
    for ifdir in ordered:
        name = ifdir.name
        flags = _read_int(ifdir / "flags", 16) or 0
        loopback = bool(flags & IFF_LOOPBACK)
        wireless = is_wireless(name, sysfs_net)
        if (
            (loopback and options & NetOptions.NO_LOOPBACK)
            or (wireless and options & NetOptions.NO_WIRELESS)
            or regex.search(name) is None
        ):
            continue
        speed, duplex = _link_settings(ifdir, name)
        interfaces.append(
            Interface(name, flags, speed, duplex, _read_stats(ifdir / "statistics"))
        )
    return interfaces


def snapshot(
    options: NetOptions = NetOptions.NONE,
    ifname_regex: str | re.Pattern[str] | None = None,
) -> list[Interface]:
    """Return the interfaces selected by ``options`` and ``ifname_regex``."""
    return _snapshot(options, ifname_regex, SYSFS_NET)


def stats_rate(before: IfStats, after: IfStats, seconds: int) -> IfStats:
    """Return the per-second rate of each counter between two samples."""
    if seconds <= 0:
        raise ValueError("seconds must be positive")
    return IfStats(
        **{
            name: math.ceil(
                ((getattr(after, name) - getattr(before, name)) % 2**64) / seconds
            )
            for name in _STAT_NAMES
        }
    )


def _netinfo(
    options: NetOptions,
    ifname_regex: str | None,
    seconds: int,
    sysfs_net: str = SYSFS_NET,
    sleep: Callable[[float], object] = time.sleep,
) -> list[Interface]:
    options = NetOptions(options)
    regex = _compile(ifname_regex)
    first = _snapshot(options, regex, sysfs_net)
    if seconds <= 0:
        return first

    sleep(seconds)
    second = _snapshot(options, regex, sysfs_net)
    for ifl, ifl2 in zip(first, second):
        if ifl.ifname != ifl2.ifname:
            raise PluginError(
                Status.UNKNOWN, "bug in netinfo(), please contact the developers"
            )
        if ifl.stats is not None and ifl2.stats is not None:
            ifl.stats = stats_rate(ifl.stats, ifl2.stats, seconds)
        if options & NetOptions.CHECK_LINK and not (ifl.is_up() and ifl.is_running()):
            raise PluginError(
                Status.CRITICAL,
                f"{ifl.ifname} matches the given regular expression "
                "but is not UP and RUNNING!",
            )
    return first


def netinfo(
    options: NetOptions = NetOptions.NONE,
    ifname_regex: str | None = None,
    seconds: int = 0,
) -> list[Interface]:
    """Return the selected interfaces.

    With ``seconds`` greater than zero the interfaces are sampled twice and
    their counters are replaced by per-second rates.
    """
    return _netinfo(options, ifname_regex, seconds)


def format_ifname_debug(
    interfaces: Iterable[Interface], options: NetOptions = NetOptions.NONE
) -> str:
    """Describe the interfaces and the metrics that would be reported."""
    options = NetOptions(options)
    rx_only = bool(options & NetOptions.RX_ONLY)
    tx_only = bool(options & NetOptions.TX_ONLY)
    lines: list[str] = []

    def tx_rx(name: str, metric: str) -> str:
        text = " - "
        if not rx_only:
            text += f"{name}_tx{metric}\t "
        if not tx_only:
            text += f"{name}_rx{metric}"
        return text + "\n"

    for ifl in interfaces:
        if ifl.is_up() and not ifl.is_running():
            state = " (NO-CARRIER)"
        elif ifl.is_up():
            state = ""
        else:
            state = " (DOWN)"
        speed = f" link-speed:{ifl.speed}Mbps" if ifl.speed > 0 else ""
        duplex = (
            f" {ifl.duplex.name.lower()}-duplex"
            if ifl.duplex is not Duplex.UNKNOWN
            else ""
        )
        lines.append(f"{ifl.ifname}{state}{speed}{duplex}\n")

        if ifl.stats is not None:
            if not options & NetOptions.NO_BYTES:
                lines.append(tx_rx(ifl.ifname, "byte/s"))
            if not options & NetOptions.NO_ERRORS:
                lines.append(tx_rx(ifl.ifname, "err/s"))
            if not options & NetOptions.NO_DROPS:
                lines.append(tx_rx(ifl.ifname, "drop/s"))
            if not options & NetOptions.NO_PACKETS:
                lines.append(tx_rx(ifl.ifname, "pck/s"))
            if not options & NetOptions.NO_COLLISIONS:
                lines.append(f" - {ifl.ifname}_coll/s\n")
            if not options & NetOptions.NO_MULTICAST:
                lines.append(f" - {ifl.ifname}_mcast/s\n")
    return "".join(lines)