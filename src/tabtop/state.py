"""Dashboard state and the single function that mutates it."""

import logging
from dataclasses import dataclass, field
from typing import assert_never

from tabtop.config import Theme
from tabtop.formatting import (
    Row,
    cpu_rows,
    cpu_text,
    disk_text,
    failure_text,
    memory_text,
    network_rows,
    network_text,
    system_text,
)
from tabtop.models import (
    CpuSnapshot,
    DiskSnapshot,
    Domain,
    FetchFailure,
    KeyPressed,
    MemorySnapshot,
    Message,
    NetworkSnapshot,
    Resized,
    SystemSnapshot,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Tab:
    """A named view bound to one metric domain."""

    label: str
    domain: Domain
    placeholder: str


TAB_SLOTS: tuple[tuple[Domain, str], ...] = (
    (Domain.CPU, "Loading CPU info..."),
    (Domain.MEMORY, "Memory metrics..."),
    (Domain.DISK, "Disk metrics..."),
    (Domain.NETWORK, "Network metrics..."),
    (Domain.SYSTEM, "General system info..."),
)


def make_tabs(labels: tuple[str, ...]) -> tuple[Tab, ...]:
    """Bind one label per tab slot, in slot order."""
    if len(labels) != len(TAB_SLOTS):
        raise ValueError(f"expected {len(TAB_SLOTS)} tab labels, got {len(labels)}")
    return tuple(
        Tab(label, domain, placeholder)
        for label, (domain, placeholder) in zip(labels, TAB_SLOTS)
    )


class TabController:
    """Tracks the active tab index, bounded to [0, count - 1] without wraparound."""

    def __init__(self, count: int, active: int = 0) -> None:
        if count < 1:
            raise ValueError("TabController needs at least one tab")
        self._count = count
        self._active = min(max(active, 0), count - 1)

    @property
    def active_index(self) -> int:
        """Get the active tab index."""
        return self._active

    @property
    def count(self) -> int:
        return self._count

    def next(self) -> int:
        """Move to the next tab, stopping at the last one."""
        self._active = min(self._active + 1, self._count - 1)
        return self._active

    def prev(self) -> int:
        """Move to the previous tab, stopping at the first one."""
        self._active = max(self._active - 1, 0)
        return self._active


class TableViewState:
    """
    A row set with a single cursor.

    The cursor survives row replacement but is clamped whenever the row
    count shrinks, so it never points past the last row.
    """

    def __init__(self) -> None:
        self._rows: list[Row] = []
        self._cursor = 0

    @property
    def rows(self) -> list[Row]:
        return self._rows

    @property
    def cursor(self) -> int:
        """Get the selected row index."""
        return self._cursor

    @property
    def last_index(self) -> int:
        return max(len(self._rows) - 1, 0)

    def set_rows(self, rows: list[Row]) -> None:
        """Replace the row set, keeping the cursor where it still fits."""
        self._rows = list(rows)
        self._cursor = min(self._cursor, self.last_index)

    def move_up(self, n: int = 1) -> int:
        self._cursor = max(self._cursor - n, 0)
        return self._cursor

    def move_down(self, n: int = 1) -> int:
        self._cursor = min(self._cursor + n, self.last_index)
        return self._cursor


@dataclass(slots=True, frozen=True)
class StartPolling:
    """Request to start the refresh loop of a domain (no-op if already running)."""

    domain: Domain


@dataclass(slots=True, frozen=True)
class Quit:
    """Request to terminate the program with exit code 0."""


Command = StartPolling | Quit


@dataclass
class DashboardState:
    """Everything the renderer reads. Only update() writes to it."""

    theme: Theme = field(default_factory=Theme)
    initial_tab: int = 0
    tabs: tuple[Tab, ...] = field(init=False)
    controller: TabController = field(init=False)
    contents: list[str] = field(init=False)
    cpu_table: TableViewState = field(default_factory=TableViewState)
    network_table: TableViewState = field(default_factory=TableViewState)
    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        self.tabs = make_tabs(self.theme.tab_labels)
        self.controller = TabController(len(self.tabs), self.initial_tab)
        self.contents = [tab.placeholder for tab in self.tabs]

    @property
    def active_index(self) -> int:
        return self.controller.active_index

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self.controller.active_index]

    def slot_for(self, domain: Domain) -> int:
        """Index of the tab that displays ``domain``."""
        for i, tab in enumerate(self.tabs):
            if tab.domain is domain:
                return i
        raise KeyError(domain)

    def active_table(self) -> TableViewState | None:
        """The table belonging to the active tab, if it has one."""
        domain = self.active_tab.domain
        if domain is Domain.CPU:
            return self.cpu_table
        if domain is Domain.NETWORK:
            return self.network_table
        return None


def initial_commands(state: DashboardState) -> list[Command]:
    """Commands to run at startup: poll the initially active tab's domain."""
    return [StartPolling(state.active_tab.domain)]


def update(state: DashboardState, message: Message) -> list[Command]:
    """
    Apply one message to the dashboard state.

    Returns the commands the event loop must carry out afterwards.
    """
    match message:
        case KeyPressed(key=key):
            return _handle_key(state, key)
        case Resized(width=width, height=height):
            logger.debug("Viewport resized to %dx%d", width, height)
            state.width = width
            state.height = height
        case CpuSnapshot():
            state.contents[state.slot_for(Domain.CPU)] = cpu_text(message)
            state.cpu_table.set_rows(cpu_rows(message))
        case MemorySnapshot():
            glyphs = state.theme.bar_fill, state.theme.bar_empty
            state.contents[state.slot_for(Domain.MEMORY)] = memory_text(message, *glyphs)
        case DiskSnapshot():
            glyphs = state.theme.bar_fill, state.theme.bar_empty
            state.contents[state.slot_for(Domain.DISK)] = disk_text(message, *glyphs)
        case NetworkSnapshot():
            state.contents[state.slot_for(Domain.NETWORK)] = network_text(message)
            state.network_table.set_rows(network_rows(message))
        case SystemSnapshot():
            state.contents[state.slot_for(Domain.SYSTEM)] = system_text(message)
        case FetchFailure(domain=domain):
            state.contents[state.slot_for(domain)] = failure_text(message)
        case _:
            assert_never(message)
    return []


def _handle_key(state: DashboardState, key: str) -> list[Command]:
    """Keyboard navigation: tabs switch views, j/k move the active table's cursor."""
    match key:
        case "q" | "ctrl+c":
            return [Quit()]
        case "tab" | "shift+tab":
            before = state.active_index
            if key == "tab":
                state.controller.next()
            else:
                state.controller.prev()
            if state.active_index != before:
                logger.debug("Switched to tab %s", state.active_tab.label)
            return [StartPolling(state.active_tab.domain)]
        case "k" | "up":
            table = state.active_table()
            if table is not None:
                table.move_up(1)
        case "j" | "down":
            table = state.active_table()
            if table is not None:
                table.move_down(1)
    return []
