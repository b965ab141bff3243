[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linuxprobes"
version = "0.1.0"
description = "Probes for Linux system health: CPU, memory, pressure stall, interrupts, files, processes, network and containers."
requires-python = ">=3.10"
keywords = [
    "linux",
    "monitoring",
    "nagios",
    "procfs",
    "sysfs",
    "psi",
    "docker",
    "perfdata",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["linuxprobes"]

[tool.hatch.build.targets.sdist]
include = [
    "linuxprobes",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
