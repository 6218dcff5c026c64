"""Data models for tabtop."""

from dataclasses import dataclass, field
from enum import Enum


class Domain(Enum):
    """Metric domains, each refreshed by its own poll loop."""

    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    SYSTEM = "system"


@dataclass(slots=True, frozen=True)
class ThreadStat:
    """Usage and accumulated times of one logical CPU."""

    usage_percent: float
    user: int  # Milliseconds
    system: int
    idle: int


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Immutable reading of the processor."""

    model_name: str
    cores: int
    threads: int
    usage_percent: float
    frequency_mhz: float
    per_thread: dict[str, ThreadStat] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """Immutable reading of memory and swap, in GB."""

    total: float
    used: float
    available: float
    swap_total: float
    swap_used: float


@dataclass(slots=True, frozen=True)
class DiskSnapshot:
    """Immutable reading of disk usage, in bytes."""

    total: int
    used: int
    free: int


@dataclass(slots=True, frozen=True)
class InterfaceStat:
    """Counters of one network interface."""

    name: str
    state: str  # 'up' or 'down'
    speed: int  # Mbit/s
    rx_bytes: int
    tx_bytes: int
    rx_errors: int
    tx_errors: int


@dataclass(slots=True, frozen=True)
class NetworkSnapshot:
    """Immutable reading of all network interfaces, in collector order."""

    interfaces: tuple[InterfaceStat, ...] = ()


@dataclass(slots=True, frozen=True)
class SystemSnapshot:
    """Immutable reading of general host information."""

    hostname: str
    os_name: str
    release: str
    machine: str
    boot_time: float  # Epoch seconds
    uptime_seconds: float
    process_count: int
    load_avg: tuple[float, float, float]


@dataclass(slots=True, frozen=True)
class FetchFailure:
    """A collector call that failed; replaces the domain's content for one cycle."""

    domain: Domain
    message: str


@dataclass(slots=True, frozen=True)
class KeyPressed:
    """A keyboard event, identified by its key name (e.g. 'tab', 'shift+tab', 'j')."""

    key: str


@dataclass(slots=True, frozen=True)
class Resized:
    """The terminal viewport changed size."""

    width: int
    height: int


Snapshot = CpuSnapshot | MemorySnapshot | DiskSnapshot | NetworkSnapshot | SystemSnapshot

Message = Snapshot | FetchFailure | KeyPressed | Resized
