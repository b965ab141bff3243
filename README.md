# linuxprobes

A library for reading the health of a Linux host: the kind of numbers a
monitoring check needs. It reads them from `/proc`, `/sys`, `psutil` and
the Docker/Podman API on a Unix socket, and returns plain Python objects.

## What it covers

| Module | What it gives you |
| --- | --- |
| `linuxprobes.messages` | `Status` (OK, WARNING, CRITICAL, UNKNOWN, DEPENDENT), `state_text()` and `PluginError`, the exception raised when a probe cannot do its work |
| `linuxprobes.procparser` | `parse_proc_table()` for `name: value` files such as `/proc/meminfo`, and `linelookup()` for `key : value` lines |
| `linuxprobes.collection` | `Counter`, a counter of string keys that remembers insertion order |
| `linuxprobes.json_helpers` | a small flat JSON tokenizer (`tokenise()`, `Token`, `TokenType`), `token_streq()`, `token_tostr()`, `dump_pretty()` and `search()` for `.object.label` lookups |
| `linuxprobes.kernelver` | `kernel_version()`, `parse_release()` and `linux_version()` |
| `linuxprobes.perfdata` | `Range` and `get_perfdata_limit()` for turning a threshold into a perfdata limit |
| `linuxprobes.cpustats` | `CpuTime` rows from `/proc/stat` (`cpu_stats_get_time()`) and the context-switch, interrupt and softirq totals |
| `linuxprobes.cputopology` | processor counts, `cpumask_parse()` and `cputopology_read()` returning a `CpuTopology` |
| `linuxprobes.cpudesc` | `CpuDesc.read()` from `/proc/cpuinfo`, with `CpuMode`, `CpuDesc.virtualization()` and CPU hot-plug/online state |
| `linuxprobes.interrupts` | `interrupts_per_cpu()` from `/proc/interrupts` |
| `linuxprobes.meminfo` | `SysMem.read()`: memory and swap figures in kB, with an estimated "available" value on kernels that lack `MemAvailable` |
| `linuxprobes.pressure` | Pressure Stall Information: `PsiOneLine`, `PsiTwoLines`, `parse_psi_line()`, `read_cpu()`, `read_io()`, `read_memory()` |
| `linuxprobes.files` | `filecount()` with `FilesFlags`, filtered by age, size and a shell pattern, returning a `FileCount` |
| `linuxprobes.container` | `DockerClient`, `running_containers()` (counts and perfdata grouped by image) and `running_containers_memory()` |
| `linuxprobes.processes` | `procs_list_getall()` returning a `ProcsList` of `UserProcs`: processes or threads per user, with their nproc limits |
| `linuxprobes.netinfo` | `Interface`, `IfStats`, `Duplex`, `NetOptions`, `snapshot()`, `netinfo()` for per-second interface rates and `format_ifname_debug()` |

## Examples

Count things by key:

```python
from linuxprobes.collection import Counter

images = Counter()
images.put("nginx:latest", 1)
images.put("redis:7", 1)
images.put("nginx:latest", 1)

images.elements()          # 3
images.unique_elements()   # 2
images.keys()              # ['nginx:latest', 'redis:7']
```

Read a `key : value` line the way `/proc/cpuinfo` writes it:

```python
from linuxprobes.procparser import linelookup

linelookup("model name\t: Example CPU 2.00GHz\n", "model name")
# 'Example CPU 2.00GHz'
```

Compare kernel versions:

```python
from linuxprobes.kernelver import kernel_version, linux_version

if linux_version() < kernel_version(3, 14, 0):
    ...
```

Sample CPU pressure over one second:

```python
from linuxprobes.pressure import read_cpu

stats, starvation = read_cpu(1)
print(stats.avg10, stats.total, starvation)
```

Turn a status into the word a monitoring system expects:

```python
from linuxprobes.messages import Status, state_text

state_text(Status.WARNING)   # 'WARNING'
```

## Environment

- `NPL_TEST_PATH_PROCSTAT` replaces `/proc/stat` for `linuxprobes.cpustats`.
- `NPL_TEST_PATH_PROCMEMINFO` replaces `/proc/meminfo` for `linuxprobes.meminfo`.
- `DOCKER_HOST` gives the container engine socket when `DockerClient` is
  created without one; a `unix://` prefix is accepted.
- `DOCKER_API_VERSION` selects the API version (default `1.24`).

## Errors

When a probe cannot read what it needs (a missing `/proc` file, an
unparsable value, an unreachable container socket) it raises
`linuxprobes.messages.PluginError`. The exception carries the `Status`
the failure maps to, and its `exit_code` property gives the matching
process exit status.

## What it does not do

This is a library only. It installs no commands and contains no
ready-made checks: it does not parse threshold strings into a `Range`,
compare values against thresholds, or print plugin output lines. Those
are left to the program that uses it.

## Requirements

Python 3.10 or later on Linux. `psutil` is the only dependency.