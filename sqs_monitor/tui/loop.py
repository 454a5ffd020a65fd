"""Driver loop: event source -> app state -> render sink.

Everything runs on one control thread. Queue service calls are submitted
to a small worker pool and their futures are polled at the top of each
iteration, so a slow or stalled call never blocks rendering or keyboard
handling. Completed results are applied on the control thread; worker
threads never touch AppState.

Concurrency limits:
  - at most one full refresh in flight; extra requests are dropped
  - at most one detail fetch in flight; a request for another queue while
    one is running is remembered (newest wins) and issued afterwards
  - at most one purge in flight
Stale detail results are discarded by AppState.apply_detail_refresh
rather than cancelled.
"""

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from ..aws.errors import QueueServiceError
from ..models import FetchResult
from .events import InputEvent
from .state import AppState, Direction, StateSnapshot

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30.0


class LoopState(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


def _log_failure(what: str, result: FetchResult) -> None:
    if isinstance(result.error, QueueServiceError):
        logger.warning("%s failed (%s): %s", what, result.error.kind, result.error)
    else:
        logger.error("%s raised unexpectedly", what, exc_info=result.error)


class DashboardLoop:
    """Single-threaded cooperative loop owning the refresh cadence."""

    def __init__(self, state: AppState, client: Any,
                 refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
                 scope: str = "",
                 executor: Optional[Executor] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.state = state
        self._client = client
        self._refresh_interval = refresh_interval
        self._scope = scope
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=3, thread_name_prefix="sqs-fetch")
        self._clock = clock

        self.loop_state = LoopState.RUNNING

        self._full_refresh: Optional[Future] = None
        self._refresh_queued = False
        self._last_refresh_attempt: Optional[float] = None
        self._detail: Optional[Tuple[str, Future]] = None
        self._detail_wanted: Optional[str] = None
        self._purge: Optional[Tuple[str, Future]] = None

        self._handlers: Dict[InputEvent, Callable[[float], None]] = {
            InputEvent.QUIT: self._on_quit,
            InputEvent.REFRESH_REQUESTED: self._on_refresh,
            InputEvent.NEXT_QUEUE: lambda now: self._on_move(Direction.NEXT),
            InputEvent.PREVIOUS_QUEUE: lambda now: self._on_move(Direction.PREVIOUS),
            InputEvent.TOGGLE_FILTER: self._on_toggle_filter,
            InputEvent.PURGE_REQUESTED: self._on_purge_requested,
            InputEvent.CONFIRM_PURGE: self._on_confirm_purge,
            InputEvent.CANCEL_PURGE: self._on_cancel_purge,
            InputEvent.TICK: lambda now: None,
            InputEvent.NONE: lambda now: None,
        }

    @property
    def running(self) -> bool:
        return self.loop_state is LoopState.RUNNING

    @property
    def full_refresh_in_flight(self) -> bool:
        return self._full_refresh is not None

    @property
    def detail_in_flight(self) -> Optional[str]:
        return self._detail[0] if self._detail else None

    # -- Main loop --

    def run(self, events: Iterator[InputEvent],
            render: Callable[[StateSnapshot], None]) -> None:
        """Iterate until a QUIT event arrives (or the event source ends)."""
        try:
            while self.running:
                self.step(events, render)
        finally:
            self.shutdown()

    def step(self, events: Iterator[InputEvent],
             render: Callable[[StateSnapshot], None]) -> None:
        """Run one loop iteration."""
        now = self._clock()
        self.collect_completions(now)
        render(self.state.snapshot())
        self.check_auto_refresh(now)
        event = next(events, InputEvent.QUIT)
        self.dispatch(event, now)

    def dispatch(self, event: InputEvent, now: Optional[float] = None) -> None:
        if now is None:
            now = self._clock()
        self._handlers[event](now)

    def shutdown(self) -> None:
        self.loop_state = LoopState.SHUTTING_DOWN
        if self._owns_executor:
            # In-flight calls are abandoned; their results are never applied
            self._executor.shutdown(wait=False, cancel_futures=True)

    # -- Refresh scheduling --

    def check_auto_refresh(self, now: float) -> bool:
        """Start a full refresh if the refresh interval has elapsed."""
        marks = [t for t in (self.state.last_refreshed_at,
                             self._last_refresh_attempt) if t is not None]
        if marks and now - max(marks) < self._refresh_interval:
            return False
        return self.request_full_refresh(now)

    def request_full_refresh(self, now: float, queue_if_busy: bool = False,
                             announce: bool = True) -> bool:
        """Submit a full refresh unless one is already outstanding.

        With *queue_if_busy*, a request that collides with an outstanding
        refresh is issued again once that one completes.
        """
        if self._full_refresh is not None:
            if queue_if_busy:
                self._refresh_queued = True
            return False
        self.state.mark_refresh_started(announce)
        self._last_refresh_attempt = now
        self._full_refresh = self._executor.submit(
            self._client.list_queues, self._scope)
        logger.debug("Full refresh started (scope=%r)", self._scope)
        return True

    def request_detail(self, queue_name: str) -> bool:
        """Submit a detail fetch, or remember it if one is already running."""
        if self._detail is not None:
            in_flight = self._detail[0]
            self._detail_wanted = None if queue_name == in_flight else queue_name
            return False
        self._detail_wanted = None
        self._detail = (queue_name, self._executor.submit(
            self._client.get_queue_detail, queue_name))
        return True

    def _ensure_detail(self, previous: Optional[str]) -> None:
        current = self.state.selected_queue_name()
        if current is None:
            return
        detail = self.state.selected_detail
        if current != previous or detail is None or detail.name != current:
            self.request_detail(current)

    # -- Completion handling --

    def collect_completions(self, now: float) -> None:
        """Apply every finished asynchronous call to the app state."""
        if self._full_refresh is not None and self._full_refresh.done():
            result = FetchResult.from_future(self._full_refresh)
            self._full_refresh = None
            if self.state.apply_full_refresh(result, now):
                logger.info("Refreshed %d queues", len(self.state.all_queues))
                self._ensure_detail(None)
            else:
                _log_failure("Queue list refresh", result)
            if self._refresh_queued:
                self._refresh_queued = False
                self.request_full_refresh(now)

        if self._detail is not None and self._detail[1].done():
            name, future = self._detail
            self._detail = None
            result = FetchResult.from_future(future)
            if not result.ok:
                _log_failure(f"Detail fetch for {name}", result)
            self.state.apply_detail_refresh(name, result)
            wanted = self._detail_wanted
            self._detail_wanted = None
            if wanted is not None and wanted == self.state.selected_queue_name():
                self.request_detail(wanted)

        if self._purge is not None and self._purge[1].done():
            name, future = self._purge
            self._purge = None
            result = FetchResult.from_future(future)
            if self.state.apply_purge_result(name, result):
                self.request_full_refresh(now, queue_if_busy=True, announce=False)
            else:
                _log_failure(f"Purge of {name}", result)

    # -- Event handlers --

    def _on_quit(self, now: float) -> None:
        self.loop_state = LoopState.SHUTTING_DOWN

    def _on_refresh(self, now: float) -> None:
        self.request_full_refresh(now)

    def _on_move(self, direction: Direction) -> None:
        if self.state.awaiting_purge_confirmation:
            return
        previous = self.state.selected_queue_name()
        if self.state.move_selection(direction):
            self._ensure_detail(previous)

    def _on_toggle_filter(self, now: float) -> None:
        if self.state.awaiting_purge_confirmation:
            return
        previous = self.state.selected_queue_name()
        self.state.toggle_filter()
        self._ensure_detail(previous)

    def _on_purge_requested(self, now: float) -> None:
        if self.state.awaiting_purge_confirmation or self._purge is not None:
            return
        self.state.request_purge_confirmation()

    def _on_confirm_purge(self, now: float) -> None:
        if not self.state.awaiting_purge_confirmation:
            return
        name = self.state.begin_purge()
        if name is not None:
            self._purge = (name, self._executor.submit(
                self._client.purge_queue, name))

    def _on_cancel_purge(self, now: float) -> None:
        if self.state.awaiting_purge_confirmation:
            self.state.cancel_purge()
