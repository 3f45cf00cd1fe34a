"""fdbtop - Main Textual application."""

from collections.abc import Callable
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from fdbtop.loop import RefreshLoop
from fdbtop.monitor import FetchResult, StatusMonitor
from fdbtop.sorting import SortController


class StatusView(Static):
    """Full-screen plain-text view of the cropped process table."""

    DEFAULT_CSS = """
    StatusView {
        width: 100%;
        height: 100%;
    }
    """


class FdbtopApp(App):
    """Main fdbtop application."""

    TITLE = "fdbtop"

    BINDINGS = [
        Binding("greater_than_sign", "next_sort", "Next sort", show=False),
        Binding("less_than_sign", "previous_sort", "Previous sort", show=False),
        Binding("q", "quit", "Quit", show=False),
        Binding("escape", "quit", "Quit", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        fetch: Callable[[], str],
        interval: float = 1.0,
        show_stateless_iops: bool = False,
        iops_divisor: int = 1,
    ) -> None:
        """
        Initialize the FdbtopApp.

        Args:
            fetch: Returns status snapshot text or raises FetchFailure.
            interval: Seconds between refreshes.
            show_stateless_iops: Show I/O for all roles.
            iops_divisor: Divide I/O rates by this before display.
        """
        super().__init__()
        self.sort_controller = SortController()
        self.refresh_loop = RefreshLoop(self.sort_controller, show_stateless_iops, iops_divisor)
        self._update_queue: Queue[FetchResult] = Queue()
        self._monitor = StatusMonitor(self._update_queue, self.refresh_loop, fetch, interval=interval)
        self.last_output = ""

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusView("Fetching status...", id="status", markup=False)

    def on_mount(self) -> None:
        """Start the status monitor when the app is mounted."""
        self._monitor.start()
        # Set up a timer to poll the queue for results
        self.set_interval(0.05, self._check_for_updates)

    def on_unmount(self) -> None:
        self._monitor.stop()

    def _check_for_updates(self) -> None:
        """Display every fetched result in order; each one closes a refresh cycle."""
        while True:
            try:
                result = self._update_queue.get_nowait()
            except Empty:
                break
            self._display_result(result)

    def _display_result(self, result: FetchResult) -> None:
        width, height = self.size
        self._show(self.refresh_loop.complete(result.snapshot, result.error, width, height))

    def _show(self, text: str) -> None:
        self.last_output = text
        self.query_one("#status", StatusView).update(text)

    def action_next_sort(self) -> None:
        """Handle '>' - select the next sort column; the next cycle shows it."""
        self.sort_controller.advance()
        self._monitor.request_refresh()

    def action_previous_sort(self) -> None:
        """Handle '<' - go back to the previous sort column."""
        self.sort_controller.retreat()
        self._monitor.request_refresh()

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
