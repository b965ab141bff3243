from unittest import mock

import pytest

from linuxprobes.cputopology import (
    CpuTopology,
    cpumask_parse,
    cputopology_read,
    processor_number_kernel_max,
    processor_number_online,
    processor_number_total,
)
from linuxprobes.messages import PluginError


def _sysfs(tmp_path, kernel_max="0", thread_siblings=None, core_siblings=None):
    root = tmp_path / "cpu"
    root.mkdir()
    (root / "kernel_max").write_text(kernel_max + "\n")
    if thread_siblings is not None:
        topology = root / "cpu0" / "topology"
        topology.mkdir(parents=True)
        (topology / "thread_siblings").write_text(thread_siblings + "\n")
        if core_siblings is not None:
            (topology / "core_siblings").write_text(core_siblings + "\n")
    return str(root)


def test_cpumask_single_digit():
    assert cpumask_parse("f") == 4


def test_cpumask_empty_set():
    assert cpumask_parse("0") == 0


def test_cpumask_hex_prefix_is_ignored():
    assert cpumask_parse("0xff") == cpumask_parse("ff")


def test_cpumask_commas_separate_words():
    assert cpumask_parse("ff,ff") == cpumask_parse("ffff")
    assert cpumask_parse("00000000,00000003") == cpumask_parse("3")


def test_cpumask_case_and_newline():
    assert cpumask_parse("AB") == cpumask_parse("ab")
    assert cpumask_parse("3\n") == cpumask_parse("3")


def test_cpumask_invalid():
    with pytest.raises(ValueError):
        cpumask_parse("zz")


def test_kernel_max(tmp_path):
    assert processor_number_kernel_max(_sysfs(tmp_path, kernel_max="7")) == 8


def test_kernel_max_missing(tmp_path):
    with pytest.raises(PluginError):
        processor_number_kernel_max(str(tmp_path))


def test_topology_defaults_without_siblings(tmp_path):
    assert cputopology_read(_sysfs(tmp_path)) == CpuTopology(1, 1, 1)


def test_topology_from_masks(tmp_path):
    sysfs = _sysfs(tmp_path, thread_siblings="3", core_siblings="ff")
    with mock.patch("os.sysconf", return_value=8):
        topology = cputopology_read(sysfs)
    assert topology.threads == cpumask_parse("3")
    assert topology.cores * topology.threads == cpumask_parse("ff")
    assert topology.sockets * topology.cores * topology.threads == 8


def test_processor_counts_from_sysconf():
    with mock.patch("os.sysconf", return_value=16):
        assert processor_number_online() == 16
        assert processor_number_total() == 16


def test_processor_counts_unavailable():
    with mock.patch("os.sysconf", side_effect=ValueError):
        assert processor_number_online() == -1
        assert processor_number_total() == -1