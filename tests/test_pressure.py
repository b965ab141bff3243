from unittest.mock import patch

import pytest

from linuxprobes.messages import PluginError
from linuxprobes.pressure import parse_psi_line, read_cpu, read_io, read_memory

CPU_DATA = "some avg10=7.48 avg60=6.25 avg300=6.66 total=200932088\n"
IO_DATA = (
    "some avg10=0.08 avg60=0.02 avg300=0.01 total=40636071\n"
    "full avg10=0.04 avg60=0.01 avg300=0.00 total=32897091\n"
)


@pytest.fixture
def cpu_file(tmp_path):
    path = tmp_path / "cpu"
    path.write_text(CPU_DATA)
    return str(path)


@pytest.fixture
def io_file(tmp_path):
    path = tmp_path / "io"
    path.write_text(IO_DATA)
    return str(path)


@patch("time.sleep")
def test_cpu_parser(_sleep, cpu_file):
    psi, starvation = read_cpu(1, cpu_file)
    assert int(psi.avg10 * 100) == 748
    assert int(psi.avg60 * 100) == 625
    assert int(psi.avg300 * 100) == 666
    assert psi.total == 200932088
    assert starvation == 0


@patch("time.sleep")
def test_io_parser(_sleep, io_file):
    psi, starvation = read_io(1, io_file)
    assert int(psi.some_avg10 * 100) == 8
    assert int(psi.some_avg60 * 100) == 2
    assert int(psi.some_avg300 * 100) == 1
    assert psi.some_total == 40636071
    assert int(psi.full_avg10 * 100) == 4
    assert int(psi.full_avg60 * 100) == 1
    assert int(psi.full_avg300 * 100) == 0
    assert psi.full_total == 32897091
    assert starvation == (0, 0)


@patch("time.sleep")
def test_memory_parser(_sleep, io_file):
    psi, _ = read_memory(1, io_file)
    assert psi.some_total == 40636071
    assert psi.full_total == 32897091


def test_sleeps_for_delay(cpu_file):
    with patch("time.sleep") as sleep:
        psi, starvation = read_cpu(3, cpu_file)
    sleep.assert_called_once_with(3)
    assert psi.total == 200932088
    assert starvation == 0


def test_starvation_is_delta_per_second(tmp_path):
    path = tmp_path / "io"
    path.write_text(IO_DATA)
    later = (
        "some avg10=0.08 avg60=0.02 avg300=0.01 total=40637071\n"
        "full avg10=0.04 avg60=0.01 avg300=0.00 total=32897491\n"
    )
    with patch("time.sleep", side_effect=lambda _s: path.write_text(later)):
        psi, starvation = read_io(2, str(path))
    assert psi.some_total == 40636071
    assert starvation == (500, 200)


def test_parse_single_label(io_file):
    full = parse_psi_line(io_file, "full")
    assert full.total == 32897091
    assert int(full.avg10 * 100) == 4


def test_missing_label_is_an_error(cpu_file):
    with pytest.raises(PluginError):
        parse_psi_line(cpu_file, "full")


def test_malformed_line_is_an_error(tmp_path):
    path = tmp_path / "cpu"
    path.write_text("some avg10=abc avg60=1 avg300=1 total=5\n")
    with pytest.raises(PluginError):
        parse_psi_line(str(path), "some")


def test_missing_file_is_an_error(tmp_path):
    with pytest.raises(PluginError):
        parse_psi_line(str(tmp_path / "missing"), "some")


def test_zero_delay_is_rejected(cpu_file):
    with pytest.raises(ValueError):
        read_cpu(0, cpu_file)