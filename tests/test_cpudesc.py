import os

import pytest

from linuxprobes.cpudesc import (
    CpuDesc,
    CpuMode,
    processor_is_hot_pluggable,
    processor_is_online,
)
from linuxprobes.cputopology import processor_number_kernel_max
from linuxprobes.messages import PluginError, Status

INTEL = """processor\t: 0
vendor_id\t: GenuineIntel
cpu family\t: 6
model\t\t: 142
model name\t: Example CPU 1.80GHz
cpu MHz\t\t: 1800.000
flags\t\t: fpu vme lm vmx

"""

AMD = """vendor_id\t: AuthenticAMD
flags\t\t: fpu svm
"""


@pytest.fixture
def sysfs(tmp_path):
    root = tmp_path / "cpu"
    root.mkdir()
    (root / "kernel_max").write_text("3\n")
    return str(root)


def _cpuinfo(tmp_path, text):
    path = tmp_path / "cpuinfo"
    path.write_text(text)
    return str(path)


def test_read_intel(tmp_path, sysfs):
    desc = CpuDesc.read(_cpuinfo(tmp_path, INTEL), sysfs)
    assert desc.vendor == "GenuineIntel"
    assert desc.family == "6"
    assert desc.model == "142"
    assert desc.modelname == "Example CPU 1.80GHz"
    assert desc.mhz == "1800.000"
    assert desc.flags == "fpu vme lm vmx"
    assert desc.arch == os.uname().machine


def test_intel_virtualization_and_mode(tmp_path, sysfs):
    desc = CpuDesc.read(_cpuinfo(tmp_path, INTEL), sysfs)
    assert desc.virtflag == "vmx"
    assert desc.virtualization() == "VT-x"
    assert CpuMode.BIT64 in desc.mode
    assert CpuMode.BIT32 in desc.mode


def test_amd_virtualization(tmp_path, sysfs):
    desc = CpuDesc.read(_cpuinfo(tmp_path, AMD), sysfs)
    assert desc.vendor == "AuthenticAMD"
    assert desc.virtflag == "svm"
    assert desc.virtualization() == "AMD-V"


def test_no_flags(tmp_path, sysfs):
    desc = CpuDesc.read(_cpuinfo(tmp_path, "vendor_id : Acme\n"), sysfs)
    assert desc.vendor == "Acme"
    assert desc.flags is None
    assert desc.virtualization() is None


def test_unknown_virtualization_flag_is_returned_as_is():
    assert CpuDesc(virtflag="xyz").virtualization() == "xyz"


def test_last_occurrence_wins(tmp_path, sysfs):
    text = "model name : First\nmodel name : Second\n"
    desc = CpuDesc.read(_cpuinfo(tmp_path, text), sysfs)
    assert desc.modelname == "Second"


def test_possible_cpus_from_sysfs(tmp_path, sysfs):
    desc = CpuDesc.read(_cpuinfo(tmp_path, INTEL), sysfs)
    assert desc.ncpuspos == processor_number_kernel_max(sysfs)


def test_missing_cpuinfo(tmp_path, sysfs):
    with pytest.raises(PluginError) as info:
        CpuDesc.read(str(tmp_path / "absent"), sysfs)
    assert info.value.status == Status.UNKNOWN


def test_online_state(tmp_path, sysfs):
    for cpu, state in ((0, "1"), (1, "0")):
        cpu_dir = tmp_path / "cpu" / f"cpu{cpu}"
        cpu_dir.mkdir()
        (cpu_dir / "online").write_text(state + "\n")
    assert processor_is_online(0, sysfs) is True
    assert processor_is_online(1, sysfs) is False
    assert processor_is_online(2, sysfs) is None


def test_hot_pluggable(tmp_path, sysfs):
    cpu_dir = tmp_path / "cpu" / "cpu1"
    cpu_dir.mkdir()
    (cpu_dir / "online").write_text("1\n")
    assert processor_is_hot_pluggable(1, sysfs) is True
    assert processor_is_hot_pluggable(0, sysfs) is False