"""Probes for the health of a Linux host: CPU, memory, pressure, interrupts, files, processes, network and containers."""

__version__ = "0.1.0"