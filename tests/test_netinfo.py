import pytest

from linuxprobes.messages import PluginError, Status
from linuxprobes.netinfo import (
    IFF_LOOPBACK,
    IFF_RUNNING,
    IFF_UP,
    Duplex,
    IfStats,
    Interface,
    NetOptions,
    _netinfo,
    _snapshot,
    format_ifname_debug,
    is_wireless,
    link_speed_str,
    stats_rate,
)

UP_RUNNING = IFF_UP | IFF_RUNNING


def make_iface(root, name, ifindex, flags, stats=None, speed="1000",
               duplex="full", wireless=False):
    d = root / name
    d.mkdir()
    (d / "ifindex").write_text(f"{ifindex}\n")
    (d / "flags").write_text(f"{flags:#x}\n")
    (d / "speed").write_text(f"{speed}\n")
    (d / "duplex").write_text(f"{duplex}\n")
    if wireless:
        (d / "wireless").mkdir()
    s = d / "statistics"
    s.mkdir()
    for key, value in (stats or {}).items():
        (s / key).write_text(f"{value}\n")
    return d


def write_stats(root, name, stats):
    for key, value in stats.items():
        (root / name / "statistics" / key).write_text(f"{value}\n")


def test_interface_flags():
    iface = Interface("eth0", flags=UP_RUNNING)
    assert iface.is_up() and iface.is_running()
    down = Interface("eth1", flags=0)
    assert not down.is_up() and not down.is_running()


@pytest.mark.parametrize(
    "speed,text",
    [(1000, "1Gbps"), (2500, "2.5Gbps"), (-1, "unknown!"), (12345, "unknown!")],
)
def test_link_speed_str(speed, text):
    assert link_speed_str(speed) == text


def test_is_wireless(tmp_path):
    make_iface(tmp_path, "wlan0", 3, UP_RUNNING, wireless=True)
    make_iface(tmp_path, "eth0", 2, UP_RUNNING)
    assert is_wireless("wlan0", str(tmp_path)) is True
    assert is_wireless("eth0", str(tmp_path)) is False


def test_stats_rate_one_second_is_difference():
    before = IfStats(tx_bytes=100, rx_bytes=40, collisions=2)
    after = IfStats(tx_bytes=350, rx_bytes=90, collisions=2)
    rate = stats_rate(before, after, 1)
    assert rate.tx_bytes == 250
    assert rate.rx_bytes == 50
    assert rate.collisions == 0


def test_stats_rate_rounds_up():
    assert stats_rate(IfStats(), IfStats(rx_packets=5), 2).rx_packets == 3


def test_stats_rate_rejects_zero_seconds():
    with pytest.raises(ValueError):
        stats_rate(IfStats(), IfStats(), 0)


def test_snapshot_reads_sysfs(tmp_path):
    make_iface(tmp_path, "eth0", 2, UP_RUNNING,
               stats={"tx_bytes": 1234, "rx_packets": 77})
    make_iface(tmp_path, "lo", 1, UP_RUNNING | IFF_LOOPBACK)
    ifaces = _snapshot(NetOptions.NONE, None, str(tmp_path))
    assert [i.ifname for i in ifaces] == ["lo", "eth0"]
    eth = ifaces[1]
    assert eth.speed == 1000
    assert eth.duplex is Duplex.FULL
    assert eth.stats.tx_bytes == 1234
    assert eth.stats.rx_packets == 77
    assert eth.flags == UP_RUNNING


def test_snapshot_unknown_speed_is_zero(tmp_path):
    make_iface(tmp_path, "eth0", 2, UP_RUNNING, speed="-1", duplex="unknown")
    ifaces = _snapshot(NetOptions.NONE, None, str(tmp_path))
    assert len(ifaces) == 1
    assert ifaces[0].speed == 0
    assert ifaces[0].duplex is Duplex.UNKNOWN


def test_snapshot_filters(tmp_path):
    make_iface(tmp_path, "lo", 1, UP_RUNNING | IFF_LOOPBACK)
    make_iface(tmp_path, "eth0", 2, UP_RUNNING)
    make_iface(tmp_path, "wlan0", 3, UP_RUNNING, wireless=True)
    make_iface(tmp_path, "docker0", 4, UP_RUNNING)
    opts = NetOptions.NO_LOOPBACK | NetOptions.NO_WIRELESS
    names = [i.ifname for i in _snapshot(opts, None, str(tmp_path))]
    assert names == ["eth0", "docker0"]
    names = [i.ifname for i in _snapshot(NetOptions.NONE, "^eth", str(tmp_path))]
    assert names == ["eth0"]


def test_netinfo_computes_rates(tmp_path):
    make_iface(tmp_path, "eth0", 2, UP_RUNNING,
               stats={"tx_bytes": 1000, "rx_bytes": 500})
    seen = []

    def fake_sleep(seconds):
        seen.append(seconds)
        write_stats(tmp_path, "eth0", {"tx_bytes": 1400, "rx_bytes": 900})

    ifaces = _netinfo(NetOptions.NONE, None, 2, str(tmp_path), fake_sleep)
    assert seen == [2]
    assert len(ifaces) == 1
    assert ifaces[0].stats.tx_bytes == 200
    assert ifaces[0].stats.rx_bytes == 200
    assert ifaces[0].stats.collisions == 0


def test_netinfo_without_delay_keeps_counters(tmp_path):
    make_iface(tmp_path, "eth0", 2, UP_RUNNING, stats={"tx_bytes": 42})

    def no_sleep(seconds):
        raise AssertionError("must not sleep")

    ifaces = _netinfo(NetOptions.NONE, None, 0, str(tmp_path), no_sleep)
    assert len(ifaces) == 1
    assert ifaces[0].stats.tx_bytes == 42


def _no_wait(seconds):
    return None


def test_netinfo_check_link_down(tmp_path):
    make_iface(tmp_path, "eth0", 2, IFF_UP)
    with pytest.raises(PluginError) as excinfo:
        _netinfo(NetOptions.CHECK_LINK, None, 1, str(tmp_path), _no_wait)
    assert excinfo.value.status == Status.CRITICAL
    assert "eth0" in excinfo.value.message


def test_netinfo_interface_changed(tmp_path):
    make_iface(tmp_path, "eth0", 2, UP_RUNNING)

    def swap(seconds):
        (tmp_path / "eth0" / "ifindex").write_text("5\n")
        make_iface(tmp_path, "eth1", 2, UP_RUNNING)

    with pytest.raises(PluginError) as excinfo:
        _netinfo(NetOptions.NONE, None, 1, str(tmp_path), swap)
    assert excinfo.value.status == Status.UNKNOWN


def test_netinfo_bad_regex(tmp_path):
    with pytest.raises(PluginError) as excinfo:
        _netinfo(NetOptions.NONE, "(", 0, str(tmp_path))
    assert excinfo.value.message.startswith("could not compile regex")


def test_format_ifname_debug_bytes_only():
    iface = Interface("eth0", UP_RUNNING, 1000, Duplex.FULL, IfStats())
    opts = (
        NetOptions.NO_ERRORS
        | NetOptions.NO_DROPS
        | NetOptions.NO_PACKETS
        | NetOptions.NO_COLLISIONS
        | NetOptions.NO_MULTICAST
    )
    expected = (
        "eth0 link-speed:1000Mbps full-duplex\n"
        " - eth0_txbyte/s\t eth0_rxbyte/s\n"
    )
    assert format_ifname_debug([iface], opts) == expected


def test_format_ifname_debug_states_and_directions():
    down = Interface("eth1", 0, 0, Duplex.UNKNOWN, None)
    nocarrier = Interface("eth2", IFF_UP, 0, Duplex.UNKNOWN, IfStats())
    text = format_ifname_debug([down, nocarrier], NetOptions.TX_ONLY)
    lines = text.splitlines()
    assert lines[0] == "eth1 (DOWN)"
    assert lines[1] == "eth2 (NO-CARRIER)"
    assert "_rx" not in text
    assert " - eth2_coll/s" in lines
    assert " - eth2_mcast/s" in lines
    assert len(lines) == 8