"""Application state for the SQS dashboard.

Owns the queue list (full and filtered), the selection cursor, the filter
toggle, the selected queue's detail, and the status line. All mutation is
plain data manipulation with no I/O; the driver loop is the only caller,
so no locking is needed here.

Invariants maintained by every operation:
  - visible_queues is an order-preserving subset of all_queues, and equal
    to it when the filter is off
  - selected_index is in range whenever visible_queues is non-empty,
    otherwise it is 0 and no detail is held
  - a completed detail fetch is only stored if it is for the queue that is
    selected at the moment it is applied
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ..aws.errors import QueueServiceError
from ..models import FetchResult, QueueDetail, QueueSummary
from ..utils.filters import QueueFilter

logger = logging.getLogger(__name__)


class Direction(Enum):
    NEXT = 1
    PREVIOUS = -1


def describe_error(error: Optional[BaseException]) -> str:
    """Human-readable text for a failed queue service call."""
    if error is None:
        return "unknown error"
    if isinstance(error, QueueServiceError):
        return str(error) or error.kind
    return f"{type(error).__name__}: {error}"


def sort_queues(queues: Sequence[QueueSummary]) -> List[QueueSummary]:
    """Order by approximate message count descending, then name ascending."""
    return sorted(queues, key=QueueSummary.sort_key)


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only view of AppState handed to the renderer each frame."""
    all_queues: Tuple[QueueSummary, ...]
    visible_queues: Tuple[QueueSummary, ...]
    selected_index: int
    filter_active: bool
    filter_label: str
    selected_detail: Optional[QueueDetail]
    status_message: str
    last_refreshed_at: Optional[float]
    last_refreshed_wall: Optional[float]
    refresh_in_flight: bool
    awaiting_purge_confirmation: bool
    purge_in_progress: bool

    @property
    def selected_queue(self) -> Optional[QueueSummary]:
        if 0 <= self.selected_index < len(self.visible_queues):
            return self.visible_queues[self.selected_index]
        return None

    @property
    def detail_for_selection(self) -> Optional[QueueDetail]:
        """The held detail, only if it belongs to the current selection."""
        queue = self.selected_queue
        detail = self.selected_detail
        if queue is None or detail is None or detail.name != queue.name:
            return None
        return detail


class AppState:
    """Mutable dashboard state, driven exclusively by DashboardLoop."""

    def __init__(self, queue_filter: QueueFilter,
                 wall_clock: Callable[[], float] = time.time):
        self._filter = queue_filter
        self._wall_clock = wall_clock

        self.all_queues: List[QueueSummary] = []
        self.visible_queues: List[QueueSummary] = []
        self.selected_index = 0
        self.filter_active = False
        self.selected_detail: Optional[QueueDetail] = None
        self.status_message = "Initializing..."
        # Monotonic time of the last successful full refresh
        self.last_refreshed_at: Optional[float] = None
        self.last_refreshed_wall: Optional[float] = None
        self.refresh_in_flight = False

        self.awaiting_purge_confirmation = False
        self.purge_target: Optional[str] = None
        self.purge_in_progress = False

    @property
    def queue_filter(self) -> QueueFilter:
        return self._filter

    # -- Selection --

    def selected_queue(self) -> Optional[QueueSummary]:
        if 0 <= self.selected_index < len(self.visible_queues):
            return self.visible_queues[self.selected_index]
        return None

    def selected_queue_name(self) -> Optional[str]:
        queue = self.selected_queue()
        return queue.name if queue else None

    def move_selection(self, direction: Direction) -> bool:
        """Move the cursor one row, clamping at both ends.

        Returns True if the selected index changed.
        """
        if not self.visible_queues:
            return False
        last = len(self.visible_queues) - 1
        new_index = min(max(self.selected_index + direction.value, 0), last)
        if new_index == self.selected_index:
            return False
        self.selected_index = new_index
        return True

    def _index_of(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        for i, queue in enumerate(self.visible_queues):
            if queue.name == name:
                return i
        return None

    def _clamp_selection(self) -> None:
        if not self.visible_queues:
            self.selected_index = 0
            self.selected_detail = None
            return
        self.selected_index = min(max(self.selected_index, 0),
                                  len(self.visible_queues) - 1)

    # -- Filtering --

    def _recompute_visible(self) -> None:
        if self.filter_active:
            self.visible_queues = [q for q in self.all_queues if self._filter(q)]
        else:
            self.visible_queues = list(self.all_queues)

    def toggle_filter(self) -> None:
        """Flip the filter and keep the same queue selected where possible."""
        previous = self.selected_queue_name()
        self.filter_active = not self.filter_active
        self._recompute_visible()

        index = self._index_of(previous)
        self.selected_index = index if index is not None else 0
        self._clamp_selection()

        total = len(self.all_queues)
        if self.filter_active:
            self.status_message = (
                f"Filter: ON | {len(self.visible_queues)} of {total} queues "
                f"({self._filter.label})")
        else:
            self.status_message = f"Filter: OFF | {total} queues shown"

    def _summary_status(self) -> str:
        total = len(self.all_queues)
        if self.filter_active:
            return (f"Connected to AWS | {len(self.visible_queues)} of {total} "
                    f"queues ({self._filter.label})")
        return f"Connected to AWS | {total} queues found"

    # -- Refresh results --

    def _purge_prompt_showing(self) -> bool:
        return self.awaiting_purge_confirmation or self.purge_in_progress

    def mark_refresh_started(self, announce: bool = True) -> None:
        self.refresh_in_flight = True
        if announce and not self._purge_prompt_showing():
            self.status_message = "Refreshing queues..."

    def apply_full_refresh(self, result: FetchResult, now: float) -> bool:
        """Apply a completed full-list refresh.

        On success the queue list is replaced and re-sorted and the refresh
        timestamp moves to *now*. On failure only the status line changes.
        Never raises. Returns True on success.
        """
        self.refresh_in_flight = False
        if not result.ok:
            self.status_message = f"Error: {describe_error(result.error)}"
            return False

        self.all_queues = sort_queues(result.value or [])
        self._recompute_visible()
        self._clamp_selection()
        self.last_refreshed_at = now
        self.last_refreshed_wall = self._wall_clock()
        if not self._purge_prompt_showing():
            self.status_message = self._summary_status()
        return True

    def apply_detail_refresh(self, queue_name: str, result: FetchResult) -> bool:
        """Apply a completed detail fetch if *queue_name* is still selected.

        Returns True if the result was applied, False if it was discarded
        as stale.
        """
        if queue_name != self.selected_queue_name():
            logger.debug("Discarding stale detail for %s", queue_name)
            return False
        if result.ok:
            self.selected_detail = result.value
        else:
            self.status_message = (
                f"Error fetching details: {describe_error(result.error)}")
        return True

    # -- Purge confirmation --

    def request_purge_confirmation(self) -> bool:
        name = self.selected_queue_name()
        if name is None or self.purge_in_progress:
            return False
        self.awaiting_purge_confirmation = True
        self.purge_target = name
        self.status_message = (
            f"Purge queue '{name}'? Press Y to confirm, N to cancel")
        return True

    def cancel_purge(self) -> None:
        self.awaiting_purge_confirmation = False
        self.purge_target = None
        self.status_message = "Purge cancelled"

    def begin_purge(self) -> Optional[str]:
        """Leave confirmation mode and return the queue name to purge.

        The target is the queue that was selected when confirmation was
        requested, even if a refresh has since moved the cursor.
        """
        self.awaiting_purge_confirmation = False
        name, self.purge_target = self.purge_target, None
        if name is None:
            return None
        self.purge_in_progress = True
        self.status_message = f"Purging queue '{name}'..."
        return name

    def apply_purge_result(self, queue_name: str, result: FetchResult) -> bool:
        self.purge_in_progress = False
        if result.ok:
            self.status_message = f"Queue '{queue_name}' purged successfully"
            return True
        self.status_message = (
            f"Failed to purge queue '{queue_name}': {describe_error(result.error)}")
        return False

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            all_queues=tuple(self.all_queues),
            visible_queues=tuple(self.visible_queues),
            selected_index=self.selected_index,
            filter_active=self.filter_active,
            filter_label=self._filter.label,
            selected_detail=self.selected_detail,
            status_message=self.status_message,
            last_refreshed_at=self.last_refreshed_at,
            last_refreshed_wall=self.last_refreshed_wall,
            refresh_in_flight=self.refresh_in_flight,
            awaiting_purge_confirmation=self.awaiting_purge_confirmation,
            purge_in_progress=self.purge_in_progress,
        )
