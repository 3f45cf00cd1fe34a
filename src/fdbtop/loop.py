"""Refresh cycle state machine: fetch, render, display."""

import logging
import threading
from enum import Enum

from fdbtop.errors import FetchFailure, MalformedSnapshot
from fdbtop.render import crop, render_table
from fdbtop.snapshot import parse_snapshot, project_records
from fdbtop.sorting import SortController, order_records

logger = logging.getLogger(__name__)


class RefreshState(Enum):
    """Phases of one refresh cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    RENDERING = "rendering"
    DISPLAYING = "displaying"
    ERROR = "error"


_TRANSITIONS: dict[RefreshState, frozenset[RefreshState]] = {
    RefreshState.IDLE: frozenset({RefreshState.FETCHING}),
    RefreshState.FETCHING: frozenset({RefreshState.RENDERING, RefreshState.ERROR}),
    RefreshState.RENDERING: frozenset({RefreshState.DISPLAYING, RefreshState.ERROR}),
    RefreshState.DISPLAYING: frozenset({RefreshState.IDLE}),
    RefreshState.ERROR: frozenset({RefreshState.IDLE}),
}


def format_error(error: Exception) -> str:
    """Error text shown in place of the table, followed by any captured output."""
    text = f"Error: {error}\n"
    output = getattr(error, "output", "")
    if output:
        text += "\n" + output
    return text


class RefreshLoop:
    """
    Drives refresh cycles from snapshot text to displayed table.

    The fetch side (a timer thread or piped stdin) and the display side each
    advance the state; transitions are serialized and only legal ones are
    accepted, so two cycles never overlap.
    """

    def __init__(
        self,
        controller: SortController | None = None,
        show_stateless_iops: bool = False,
        iops_divisor: int = 1,
    ) -> None:
        """
        Initialize the RefreshLoop.

        Args:
            controller: Sort mode selection, read on every render.
            show_stateless_iops: Show I/O for processes without log or storage roles.
            iops_divisor: Divide I/O rates by this before display.
        """
        self.controller = controller or SortController()
        self.show_stateless_iops = show_stateless_iops
        self.iops_divisor = iops_divisor
        self._state = RefreshState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> RefreshState:
        """Get the current cycle state."""
        return self._state

    def _transition(self, new_state: RefreshState) -> None:
        with self._lock:
            if new_state not in _TRANSITIONS[self._state]:
                raise RuntimeError(f"Illegal refresh transition {self._state.value} -> {new_state.value}")
            logger.debug("Refresh %s -> %s", self._state.value, new_state.value)
            self._state = new_state

    def try_begin_fetch(self) -> bool:
        """Start a cycle if none is running. Returns False when the tick is coalesced."""
        with self._lock:
            if self._state is not RefreshState.IDLE:
                return False
            self._state = RefreshState.FETCHING
            return True

    def fetch_succeeded(self) -> None:
        self._transition(RefreshState.RENDERING)

    def fetch_failed(self) -> None:
        self._transition(RefreshState.ERROR)

    def render(self, snapshot: str) -> str:
        """Render snapshot text under the active sort mode, without cropping.

        Raises:
            MalformedSnapshot: If the text cannot be parsed.
        """
        processes = parse_snapshot(snapshot)
        records = project_records(processes.values(), self.show_stateless_iops, self.iops_divisor)
        spec = self.controller.active()
        return render_table(order_records(records, spec), spec)

    def complete(self, snapshot: str | None, error: FetchFailure | None, width: int, height: int) -> str:
        """
        Finish a fetched cycle and return the screen text.

        Called with the fetched snapshot, or with the fetch error. Either way
        the loop is back to idle afterwards.
        """
        if error is not None:
            text = format_error(error)
        else:
            try:
                text = self.render(snapshot or "")
            except MalformedSnapshot as e:
                logger.warning("Cannot render status: %s", e)
                self._transition(RefreshState.ERROR)
                text = format_error(e)
            except Exception as e:
                logger.exception("Unexpected error rendering status")
                self._transition(RefreshState.ERROR)
                text = format_error(e)
            else:
                self._transition(RefreshState.DISPLAYING)
        self._transition(RefreshState.IDLE)
        return crop(text, width, height, pad=True)

    def run_once(self, snapshot: str) -> str:
        """
        Run a single cycle on already-read snapshot text (piped mode).

        Raises:
            MalformedSnapshot: If the text cannot be parsed. The loop is left idle.
        """
        if not self.try_begin_fetch():
            raise RuntimeError("A refresh cycle is already running")
        self.fetch_succeeded()
        try:
            text = self.render(snapshot)
        except Exception:
            self._transition(RefreshState.ERROR)
            self._transition(RefreshState.IDLE)
            raise
        self._transition(RefreshState.DISPLAYING)
        self._transition(RefreshState.IDLE)
        return text
