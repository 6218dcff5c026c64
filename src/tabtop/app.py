"""tabtop - Main Textual application."""

import argparse
import logging
import sys
from pathlib import Path
from queue import Empty, Queue

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.logging import TextualHandler
from textual.widgets import DataTable, Static

from tabtop.collectors import Collector
from tabtop.config import ConfigError, Theme, dump_default_config, load_theme
from tabtop.models import Domain, KeyPressed, Message, Resized
from tabtop.monitor import PollScheduler
from tabtop.render import Frame, content_text, render_frame, tab_bar_text, table_cells
from tabtop.state import (
    TAB_SLOTS,
    Command,
    DashboardState,
    Quit,
    StartPolling,
    initial_commands,
    update,
)

logger = logging.getLogger(__name__)


class MetricTable(DataTable):
    """Row table driven entirely by TableViewState; never takes focus."""

    can_focus = False

    DEFAULT_CSS = """
    MetricTable {
        height: 1fr;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize MetricTable."""
        super().__init__(*args, **kwargs)
        self.cursor_type = "row"
        self._table_domain: Domain | None = None

    def show_frame(self, frame: Frame, theme: Theme) -> None:
        """Replace columns (when the table kind changes), rows and cursor."""
        view = frame.table
        if view is None:
            self.display = False
            return

        self.display = True
        if view.domain is not self._table_domain:
            self.clear(columns=True)
            for title, width in view.columns:
                self.add_column(title, width=width)
            self._table_domain = view.domain
        else:
            self.clear()
        self.add_rows(table_cells(view, theme))
        if view.rows:
            self.move_cursor(row=view.cursor)


class TabtopApp(App):
    """Main tabtop application."""

    TITLE = "tabtop"
    SUB_TITLE = "Terminal System Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #tab-bar {
        height: 1;
        margin-bottom: 1;
    }

    #content {
        height: auto;
        padding: 1 0;
        border: solid $primary;
        border-top: none;
    }
    """

    BINDINGS = [
        Binding("tab", "navigate('tab')", "Next tab", priority=True),
        Binding("shift+tab", "navigate('shift+tab')", "Previous tab", priority=True),
        Binding("k,up", "navigate('up')", "Up", show=False, priority=True),
        Binding("j,down", "navigate('down')", "Down", show=False, priority=True),
        Binding("q", "navigate('q')", "Quit", priority=True),
        Binding("ctrl+c", "navigate('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        theme: Theme | None = None,
        collectors: dict[Domain, Collector] | None = None,
        initial_tab: int = 0,
        drain_interval: float = 0.1,
    ) -> None:
        """Initialize the TabtopApp."""
        super().__init__()
        self._ui_theme = theme or Theme()
        self._update_queue: Queue[Message] = Queue()
        self._scheduler = PollScheduler(self._update_queue, collectors)
        self._dashboard = DashboardState(theme=self._ui_theme, initial_tab=initial_tab)
        self._drain_interval = drain_interval
        self._frame_ready = False

    @property
    def dashboard(self) -> DashboardState:
        return self._dashboard

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(id="tab-bar")
        yield Static(id="content")
        yield MetricTable(id="metric-table")

    def on_mount(self) -> None:
        """Start the initial tab's refresh loop and watch the message queue."""
        self._run_commands(initial_commands(self._dashboard))
        self._frame_ready = True
        self.set_interval(self._drain_interval, self._drain_queue)
        self._refresh_frame()

    def on_resize(self, event: events.Resize) -> None:
        self.apply_message(Resized(width=event.size.width, height=event.size.height))

    def action_navigate(self, key: str) -> None:
        """Route a bound key into the dispatch function."""
        self.apply_message(KeyPressed(key))

    def apply_message(self, message: Message) -> None:
        """Apply one message, carry out resulting commands, then redraw."""
        commands = update(self._dashboard, message)
        self._run_commands(commands)
        if self._frame_ready:
            self._refresh_frame()

    def _drain_queue(self) -> None:
        """Dispatch every queued poll result, strictly in arrival order."""
        while True:
            try:
                message = self._update_queue.get_nowait()
            except Empty:
                break
            self.apply_message(message)

    def _run_commands(self, commands: list[Command]) -> None:
        for command in commands:
            match command:
                case StartPolling(domain=domain):
                    self._scheduler.ensure_started(domain)
                case Quit():
                    logger.info("Quit requested, stopping refresh loops")
                    self._scheduler.stop(timeout=0)
                    self.exit(return_code=0)

    def _refresh_frame(self) -> None:
        """Draw the current state."""
        frame = render_frame(self._dashboard, self._ui_theme)
        self.query_one("#tab-bar", Static).update(tab_bar_text(frame, self._ui_theme))
        self.query_one("#content", Static).update(content_text(frame, self._ui_theme))
        self.query_one(MetricTable).show_frame(frame, self._ui_theme)


def _setup_logging(log_file: Path | None) -> None:
    """Send log records to the Textual devtools console and, optionally, a file."""
    handlers: list[logging.Handler] = [TextualHandler()]
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabtop",
        description="Terminal dashboard for CPU, memory, disk and network telemetry.",
    )
    parser.add_argument("--config", type=Path, default=None, help="theme TOML file")
    parser.add_argument("--log-file", type=Path, default=None, help="also log to this file")
    parser.add_argument(
        "--tab",
        type=int,
        default=0,
        help=f"initially active tab, 0-{len(TAB_SLOTS) - 1}",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="print the default configuration and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for tabtop application."""
    args = build_parser().parse_args(argv)
    if args.print_config:
        sys.stdout.write(dump_default_config())
        return

    try:
        theme = load_theme(args.config)
    except ConfigError as e:
        print(f"tabtop: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    _setup_logging(args.log_file)
    app = TabtopApp(theme=theme, initial_tab=args.tab)
    try:
        app.run()
    except Exception as e:
        print("Error running program:", e, file=sys.stderr)
        raise SystemExit(1) from e
    raise SystemExit(app.return_code or 0)


if __name__ == "__main__":
    main()
