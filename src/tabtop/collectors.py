"""Collector adapters: one blocking psutil call per metric domain.

Each collector takes no arguments and returns a populated snapshot, or
raises on failure. Retry policy lives in the poll scheduler, not here.
"""

import platform
import time
from collections.abc import Callable
from pathlib import Path

import psutil

from tabtop.models import (
    CpuSnapshot,
    DiskSnapshot,
    Domain,
    InterfaceStat,
    MemorySnapshot,
    NetworkSnapshot,
    Snapshot,
    SystemSnapshot,
    ThreadStat,
)

Collector = Callable[[], Snapshot]

_GB = 1e9
_CPUINFO = Path("/proc/cpuinfo")


def _model_name() -> str:
    """Read the processor model name, falling back to platform.processor()."""
    try:
        for line in _CPUINFO.read_text(encoding="utf-8").splitlines():
            if line.startswith("model name"):
                return line.split(":", 1)[1].strip()
    except OSError:
        pass  # Not Linux, or /proc unavailable
    return platform.processor() or "Unknown"


def prime_cpu_percent() -> None:
    """Seed psutil's CPU counters; the first non-blocking read is always 0.0."""
    psutil.cpu_percent(interval=None)
    psutil.cpu_percent(interval=None, percpu=True)


def collect_cpu() -> CpuSnapshot:
    """Collect processor usage, frequency and per-thread times."""
    # Non-blocking: percentages are relative to the previous call
    usage = psutil.cpu_percent(interval=None)
    per_thread_usage = psutil.cpu_percent(interval=None, percpu=True)
    per_thread_times = psutil.cpu_times(percpu=True)
    freq = psutil.cpu_freq()

    per_thread: dict[str, ThreadStat] = {}
    for i, (percent, times) in enumerate(zip(per_thread_usage, per_thread_times)):
        per_thread[f"cpu{i}"] = ThreadStat(
            usage_percent=percent,
            user=int(times.user * 1000),
            system=int(times.system * 1000),
            idle=int(times.idle * 1000),
        )

    return CpuSnapshot(
        model_name=_model_name(),
        cores=psutil.cpu_count(logical=False) or 0,
        threads=psutil.cpu_count(logical=True) or 0,
        usage_percent=usage,
        frequency_mhz=freq.current if freq is not None else 0.0,
        per_thread=per_thread,
    )


def collect_memory() -> MemorySnapshot:
    """Collect memory and swap usage in GB."""
    mem = psutil.virtual_memory()
    swap = psutil.swap_memory()
    return MemorySnapshot(
        total=mem.total / _GB,
        used=mem.used / _GB,
        available=mem.available / _GB,
        swap_total=swap.total / _GB,
        swap_used=swap.used / _GB,
    )


def collect_disk(path: str = "/") -> DiskSnapshot:
    """Collect usage of the filesystem holding ``path``."""
    usage = psutil.disk_usage(path)
    return DiskSnapshot(total=usage.total, used=usage.used, free=usage.free)


def collect_network() -> NetworkSnapshot:
    """Collect per-interface link state and I/O counters."""
    stats = psutil.net_if_stats()
    counters = psutil.net_io_counters(pernic=True)

    interfaces = []
    for name, stat in stats.items():
        io = counters.get(name)
        interfaces.append(
            InterfaceStat(
                name=name,
                state="up" if stat.isup else "down",
                speed=stat.speed,
                rx_bytes=io.bytes_recv if io else 0,
                tx_bytes=io.bytes_sent if io else 0,
                rx_errors=io.errin if io else 0,
                tx_errors=io.errout if io else 0,
            )
        )
    return NetworkSnapshot(interfaces=tuple(interfaces))


def collect_system() -> SystemSnapshot:
    """Collect general host information."""
    uname = platform.uname()
    boot_time = psutil.boot_time()
    try:
        load_avg = psutil.getloadavg()
    except (AttributeError, OSError):
        load_avg = (0.0, 0.0, 0.0)

    return SystemSnapshot(
        hostname=uname.node,
        os_name=uname.system,
        release=uname.release,
        machine=uname.machine,
        boot_time=boot_time,
        uptime_seconds=time.time() - boot_time,
        process_count=len(psutil.pids()),
        load_avg=load_avg,
    )


DEFAULT_COLLECTORS: dict[Domain, Collector] = {
    Domain.CPU: collect_cpu,
    Domain.MEMORY: collect_memory,
    Domain.DISK: collect_disk,
    Domain.NETWORK: collect_network,
    Domain.SYSTEM: collect_system,
}

prime_cpu_percent()
