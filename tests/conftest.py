"""Shared fixtures: fake snapshots and collectors."""

import pytest

from tabtop.models import (
    CpuSnapshot,
    DiskSnapshot,
    Domain,
    InterfaceStat,
    MemorySnapshot,
    NetworkSnapshot,
    SystemSnapshot,
    ThreadStat,
)


def make_cpu(usages: dict[str, float] | None = None, model: str = "Test CPU") -> CpuSnapshot:
    """Build a CpuSnapshot whose threads have the given usages."""
    usages = {"cpu0": 30.5, "cpu1": 45.0} if usages is None else usages
    return CpuSnapshot(
        model_name=model,
        cores=max(len(usages) // 2, 1),
        threads=len(usages),
        usage_percent=sum(usages.values()) / max(len(usages), 1),
        frequency_mhz=2400.0,
        per_thread={
            label: ThreadStat(usage_percent=usage, user=100, system=50, idle=850)
            for label, usage in usages.items()
        },
    )


def make_network(*names: str) -> NetworkSnapshot:
    """Build a NetworkSnapshot with one interface per name."""
    return NetworkSnapshot(
        interfaces=tuple(
            InterfaceStat(
                name=name,
                state="up",
                speed=1000,
                rx_bytes=1024 * (i + 1),
                tx_bytes=512 * (i + 1),
                rx_errors=0,
                tx_errors=i,
            )
            for i, name in enumerate(names)
        )
    )


MEMORY = MemorySnapshot(total=16.0, used=8.0, available=8.0, swap_total=4.0, swap_used=1.0)
DISK = DiskSnapshot(total=500_000_000_000, used=125_000_000_000, free=375_000_000_000)
SYSTEM = SystemSnapshot(
    hostname="testhost",
    os_name="Linux",
    release="6.1.0",
    machine="x86_64",
    boot_time=0.0,
    uptime_seconds=90061.0,
    process_count=123,
    load_avg=(1.0, 0.5, 0.25),
)


@pytest.fixture
def fake_collectors():
    """Collectors that return fixed snapshots without touching the host."""
    return {
        Domain.CPU: make_cpu,
        Domain.MEMORY: lambda: MEMORY,
        Domain.DISK: lambda: DISK,
        Domain.NETWORK: lambda: make_network("lo", "eth0"),
        Domain.SYSTEM: lambda: SYSTEM,
    }
