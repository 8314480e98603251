"""ttywho - Textual browse view over one snapshot."""

import logging
from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from ttywho.monitor import Snapshot
from ttywho.render import DETACHED_TTY, HEADER_COLUMNS, lookup_username, pretty_time, summary_line

log = logging.getLogger(__name__)


class SummaryBar(Static):
    """Header widget showing uptime, users and load."""

    DEFAULT_CSS = """
    SummaryBar {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def update_summary(self, snapshot: Snapshot) -> None:
        """Show the summary line of a snapshot."""
        self.update(summary_line(snapshot))


class TerminalTable(Container):
    """Container for the occupied terminal table."""

    DEFAULT_CSS = """
    TerminalTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, username: Callable[[int], str] = lookup_username, **kwargs) -> None:
        """Initialize TerminalTable."""
        super().__init__(*args, **kwargs)
        self._username = username
        self._show_detached: bool = True
        self._row_count: int = 0

    @property
    def show_detached(self) -> bool:
        """Whether the no-terminal rows are shown."""
        return self._show_detached

    @property
    def row_count(self) -> int:
        return self._row_count

    def toggle_detached(self) -> bool:
        """Flip whether no-terminal rows are shown and return the new state."""
        self._show_detached = not self._show_detached
        return self._show_detached

    def compose(self) -> ComposeResult:
        """Compose the terminal table."""
        yield DataTable(id="terminal-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self._table()

    def _table(self) -> DataTable:
        table = self.query_one("#terminal-table", DataTable)
        if not table.columns:
            table.cursor_type = "row"
            for column in HEADER_COLUMNS:
                table.add_column(column, key=column.lower())
        return table

    def update_snapshot(self, snapshot: Snapshot) -> None:
        """Replace all rows with the contents of a snapshot."""
        table = self._table()
        table.clear()
        now = snapshot.taken_at

        rows = 0
        for occupied in snapshot.association.occupied:
            tty = occupied.terminal
            name = self._username(tty.uid)[:8]
            for command in occupied.commands:
                table.add_row(
                    name,
                    tty.name,
                    pretty_time(tty.ctime, now),
                    pretty_time(tty.atime, now),
                    pretty_time(tty.mtime, now),
                    command,
                )
                rows += 1

        if self._show_detached:
            for uid, count in snapshot.association.no_terminal:
                table.add_row(self._username(uid)[:8], DETACHED_TTY, "", "", "", f"{count} more processes")
                rows += 1

        self._row_count = rows


class TtywhoApp(App):
    """Browse one snapshot of terminal occupancy."""

    TITLE = "ttywho"
    SUB_TITLE = "Who is running what, on which terminal"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "rescan", "Rescan"),
        ("d", "toggle_detached", "Detached"),
    ]

    def __init__(
        self,
        collect: Callable[[], Snapshot],
        username: Callable[[int], str] = lookup_username,
    ) -> None:
        """
        Initialize the TtywhoApp.

        Args:
            collect: Takes a fresh snapshot; called on mount and on rescan.
            username: Resolver from uid to display name.
        """
        super().__init__()
        self._collect = collect
        self._username = username
        self._snapshot: Snapshot | None = None

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield SummaryBar(id="summary")
        yield TerminalTable(username=self._username)
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot once the widgets exist."""
        self.action_rescan()

    def action_rescan(self) -> None:
        """Take a new snapshot and show it."""
        try:
            snapshot = self._collect()
        except Exception as exc:
            log.exception("rescan failed")
            self.notify(f"Rescan failed: {exc}", severity="error")
            return

        self._snapshot = snapshot
        self._show(snapshot)

    def action_toggle_detached(self) -> None:
        """Show or hide the no-terminal rows."""
        table = self.query_one(TerminalTable)
        shown = table.toggle_detached()
        if self._snapshot is not None:
            table.update_snapshot(self._snapshot)
        self.notify("Detached: shown" if shown else "Detached: hidden")

    def _show(self, snapshot: Snapshot) -> None:
        self.query_one("#summary", SummaryBar).update_summary(snapshot)
        self.query_one(TerminalTable).update_snapshot(snapshot)
