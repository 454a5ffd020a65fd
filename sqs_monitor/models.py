"""Queue data model shared by the SQS client, app state, and renderer.

All records are frozen: a refresh replaces them wholesale instead of
mutating them in place.
"""

from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

DLQ_SUFFIXES = ("-dlq", "_dlq")


def is_dead_letter_name(name: str) -> bool:
    """Return True if the queue name follows the dead-letter naming convention."""
    return name.lower().endswith(DLQ_SUFFIXES)


@dataclass(frozen=True)
class QueueSummary:
    """Message counts for one queue, as returned by a full refresh."""
    name: str
    approximate_messages: int = 0
    in_flight_messages: int = 0
    delayed_messages: int = 0
    is_dead_letter_queue: bool = False
    url: str = ""

    def sort_key(self):
        # Busiest queue first, ties by name
        return (-self.approximate_messages, self.name)


@dataclass(frozen=True)
class RedrivePolicy:
    dead_letter_target_arn: str
    max_receive_count: int


@dataclass(frozen=True)
class QueueDetail:
    """Extended attributes for the currently selected queue."""
    summary: QueueSummary
    arn: str = ""
    retention_seconds: Optional[int] = None
    visibility_timeout_seconds: Optional[int] = None
    maximum_message_size: Optional[int] = None
    delay_seconds: Optional[int] = None
    created_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None
    redrive_policy: Optional[RedrivePolicy] = None

    @property
    def name(self) -> str:
        return self.summary.name


@dataclass(frozen=True)
class FetchResult:
    """Outcome of an asynchronous queue-service call.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is None
    on success.
    """
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "FetchResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "FetchResult":
        return cls(error=error)

    @classmethod
    def from_future(cls, future: "Future[Any]") -> "FetchResult":
        """Collect a completed future without letting its exception escape."""
        error = future.exception()
        if error is not None:
            return cls.failure(error)
        return cls.success(future.result())
