"""Turn metric snapshots into display text, progress bars and table rows."""

import time

from tabtop.models import (
    CpuSnapshot,
    DiskSnapshot,
    FetchFailure,
    MemorySnapshot,
    NetworkSnapshot,
    SystemSnapshot,
)

BAR_WIDTH = 20
BAR_FILL = "█"
BAR_EMPTY = "░"

BAR_LABELS = (
    "Memory Usage:",
    "Available Memory:",
    "Swap Usage:",
    "Disk Usage:",
    "Free Space:",
)
LABEL_WIDTH = max(len(label) for label in BAR_LABELS)

NETWORK_HEADER = "Network Stats: \n"

Row = tuple[str, ...]


def thread_suffix(label: str) -> int:
    """Return the integer value of the trailing digits of ``label``, or 0."""
    start = len(label)
    while start > 0 and "0" <= label[start - 1] <= "9":
        start -= 1
    digits = label[start:]
    return int(digits) if digits else 0


def sort_threads(labels: list[str]) -> list[str]:
    """Sort thread labels ascending by numeric suffix (cpu2 before cpu10)."""
    return sorted(labels, key=thread_suffix)


def bar_fraction(value: float, total: float) -> float:
    """Fraction of ``total`` taken by ``value``, clamped to [0, 1]."""
    if total <= 0:
        return 0.0
    return min(max(value / total, 0.0), 1.0)


def render_bar(
    value: float,
    total: float,
    label: str,
    fill: str = BAR_FILL,
    empty: str = BAR_EMPTY,
) -> str:
    """
    Render a labelled progress bar.

    The label is padded to the longest known label so that consecutive bars
    line up, followed by a 20-cell bar and the percentage to two decimals.
    """
    fraction = bar_fraction(value, total)
    filled = round(fraction * BAR_WIDTH)
    bar = fill * filled + empty * (BAR_WIDTH - filled)
    return f"{label.ljust(LABEL_WIDTH)}\t{bar} {fraction * 100:.2f}%\n"


def cpu_text(snapshot: CpuSnapshot) -> str:
    """Summary block for the CPU tab."""
    return (
        f"CPU: {snapshot.model_name}\n"
        f"Cores: {snapshot.cores}\n"
        f"Threads: {snapshot.threads}\n"
        f"CPU Usage: {snapshot.usage_percent:.2f}%\n"
        f"Frequency: {snapshot.frequency_mhz:.0f}Mhz\n"
    )


def memory_text(
    snapshot: MemorySnapshot, fill: str = BAR_FILL, empty: str = BAR_EMPTY
) -> str:
    """Summary block with bars for the Memory tab."""
    used = render_bar(snapshot.used, snapshot.total, "Memory Usage:", fill, empty)
    available = render_bar(snapshot.available, snapshot.total, "Available Memory:", fill, empty)
    swap = render_bar(snapshot.swap_used, snapshot.swap_total, "Swap Usage:", fill, empty)
    return (
        f"Total: {snapshot.total:.3f}GB\n"
        f"Used: {snapshot.used:.3f}GB\n"
        f"Available: {snapshot.available:.3f}GB\n"
        f"Swap Total: {snapshot.swap_total:.3f}GB\n"
        f"Swap Used: {snapshot.swap_used:.3f}GB\n"
        "\n"
        f"{used}\n"
        f"{available}\n"
        f"{swap}\n"
    )


def disk_text(snapshot: DiskSnapshot, fill: str = BAR_FILL, empty: str = BAR_EMPTY) -> str:
    """Summary block with bars for the Disks tab."""
    return (
        f"Total: {snapshot.total / 1e9:.3f}GB\n"
        f"Used: {snapshot.used / 1e9:.3f}GB\n"
        f"Available: {snapshot.free / 1e9:.3f}GB\n"
        "\n"
        f"{render_bar(snapshot.used, snapshot.total, 'Disk Usage:', fill, empty)}\n"
        f"{render_bar(snapshot.free, snapshot.total, 'Free Space:', fill, empty)}\n"
    )


def network_text(snapshot: NetworkSnapshot) -> str:
    """Header shown above the network interface table."""
    return NETWORK_HEADER


def format_uptime(seconds: float) -> str:
    """Format an uptime as 'D days, HH:MM:SS' or 'HH:MM:SS'."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def system_text(snapshot: SystemSnapshot) -> str:
    """Summary block for the General Info tab."""
    booted = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(snapshot.boot_time))
    load = snapshot.load_avg
    return (
        f"Hostname: {snapshot.hostname}\n"
        f"OS: {snapshot.os_name} {snapshot.release}\n"
        f"Architecture: {snapshot.machine}\n"
        f"Booted: {booted}\n"
        f"Uptime: {format_uptime(snapshot.uptime_seconds)}\n"
        f"Processes: {snapshot.process_count}\n"
        f"Load average: {load[0]:.2f} {load[1]:.2f} {load[2]:.2f}\n"
    )


def failure_text(failure: FetchFailure) -> str:
    """Content shown in place of a domain's summary after a failed fetch."""
    return f"Error: {failure.message}"


def cpu_rows(snapshot: CpuSnapshot) -> list[Row]:
    """One row per thread, ordered by thread number."""
    rows = []
    for label in sort_threads(list(snapshot.per_thread)):
        stat = snapshot.per_thread[label]
        rows.append(
            (
                label,
                f"{stat.usage_percent:.2f}%",
                f"User: {stat.user}, System: {stat.system}, Idle: {stat.idle}",
            )
        )
    return rows


def network_rows(snapshot: NetworkSnapshot) -> list[Row]:
    """One row per interface, in the order the collector reported them."""
    return [
        (
            iface.name,
            iface.state,
            str(iface.speed),
            str(iface.rx_bytes),
            str(iface.tx_bytes),
            str(iface.rx_errors),
            str(iface.tx_errors),
        )
        for iface in snapshot.interfaces
    ]
