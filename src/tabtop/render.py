"""Compose the current dashboard state into one frame."""

import re
from dataclasses import dataclass

from rich.text import Text

from tabtop.config import Column, Theme
from tabtop.formatting import Row
from tabtop.models import Domain
from tabtop.state import DashboardState


@dataclass(slots=True, frozen=True)
class TabSegment:
    """One entry of the tab bar, already padded to its share of the width."""

    label: str
    active: bool
    text: str


@dataclass(slots=True, frozen=True)
class TableView:
    """The table shown beneath the active tab's text."""

    domain: Domain
    columns: tuple[Column, ...]
    rows: tuple[Row, ...]
    cursor: int


@dataclass(slots=True, frozen=True)
class Frame:
    """A read-only picture of the dashboard, ready to be drawn."""

    tabs: tuple[TabSegment, ...]
    content: str
    table: TableView | None


def tab_segment_width(labels: list[str], width: int, padding: int) -> int:
    """
    Width of each tab bar segment.

    The viewport is shared evenly between the tabs; a segment is never
    narrower than the longest label plus its padding.
    """
    widest = max(len(label) for label in labels) + 2 * padding
    if width <= 0:
        return widest
    return max(width // len(labels), widest)


def render_frame(state: DashboardState, theme: Theme) -> Frame:
    """Build the frame: tab bar, active tab's cached text, then its table if any."""
    labels = [tab.label for tab in state.tabs]
    seg_width = tab_segment_width(labels, state.width, theme.tab_padding)
    pad = " " * theme.tab_padding
    segments = tuple(
        TabSegment(
            label=label,
            active=i == state.active_index,
            text=f"{pad}{label}".ljust(seg_width),
        )
        for i, label in enumerate(labels)
    )

    table = None
    active = state.active_table()
    if active is not None:
        domain = state.active_tab.domain
        columns = theme.cpu_columns if domain is Domain.CPU else theme.network_columns
        table = TableView(
            domain=domain,
            columns=columns,
            rows=tuple(active.rows),
            # Cursor is clamped again in case rows were swapped underneath
            cursor=min(active.cursor, max(len(active.rows) - 1, 0)),
        )

    return Frame(tabs=segments, content=state.contents[state.active_index], table=table)


def tab_bar_text(frame: Frame, theme: Theme) -> Text:
    """Join the tab segments into one styled line."""
    bar = Text(no_wrap=True, overflow="crop")
    for segment in frame.tabs:
        if segment.active:
            bar.append(segment.text, style=f"bold reverse {theme.accent_color}")
        else:
            bar.append(segment.text, style=theme.inactive_color)
    return bar


def content_text(frame: Frame, theme: Theme) -> Text:
    """The active tab's text block, with progress bars in the bar color."""
    text = Text(frame.content, style=f"bold {theme.content_color}")
    glyphs = re.escape(theme.bar_fill) + re.escape(theme.bar_empty)
    text.highlight_regex(f"[{glyphs}]+", style=theme.bar_color)
    return text


def table_cells(view: TableView, theme: Theme) -> list[tuple[str | Text, ...]]:
    """Table rows ready for display; the cursor row is drawn in the selection color."""
    cells: list[tuple[str | Text, ...]] = []
    for i, row in enumerate(view.rows):
        if i == view.cursor:
            style = f"bold {theme.selected_color}"
            cells.append(tuple(Text(cell, style=style) for cell in row))
        else:
            cells.append(row)
    return cells
