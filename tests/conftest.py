"""Shared fixtures for the sqs-monitor test suite."""

from concurrent.futures import Future
from typing import Any, Callable, List, Tuple

import pytest

from sqs_monitor.models import QueueSummary, is_dead_letter_name


def make_summary(name: str, messages: int = 0, in_flight: int = 0,
                 delayed: int = 0) -> QueueSummary:
    return QueueSummary(
        name=name,
        approximate_messages=messages,
        in_flight_messages=in_flight,
        delayed_messages=delayed,
        is_dead_letter_queue=is_dead_letter_name(name),
        url=f"https://sqs.us-east-1.amazonaws.com/123456789012/{name}",
    )


class ManualExecutor:
    """Executor whose submitted calls only run when the test says so."""

    def __init__(self):
        self.pending: List[Tuple[Future, Callable[..., Any], tuple]] = []
        self.submitted: List[Tuple[str, tuple]] = []

    def submit(self, fn, *args, **kwargs):
        future: Future = Future()
        self.pending.append((future, fn, args))
        self.submitted.append((getattr(fn, "__name__", repr(fn)), args))
        return future

    def run_next(self) -> None:
        future, fn, args = self.pending.pop(0)
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)

    def run_all(self) -> None:
        while self.pending:
            self.run_next()

    def shutdown(self, wait=True, cancel_futures=False):
        pass


class FakeQueueClient:
    """Stand-in for SqsQueueClient returning canned data."""

    region = "us-east-1"

    def __init__(self, queues=None, details=None):
        self.queues = list(queues or [])
        self.details = dict(details or {})
        self.list_error = None
        self.detail_error = None
        self.purge_error = None
        self.purged: List[str] = []

    def list_queues(self, scope=""):
        if self.list_error is not None:
            raise self.list_error
        return [q for q in self.queues if q.name.startswith(scope)]

    def get_queue_detail(self, name):
        if self.detail_error is not None:
            raise self.detail_error
        return self.details[name]

    def purge_queue(self, name):
        if self.purge_error is not None:
            raise self.purge_error
        self.purged.append(name)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def tmp_config(tmp_path):
    """Provide a temporary config file path."""
    return tmp_path / "settings.json"


@pytest.fixture
def sample_queues():
    """Three queues as returned by the service, unsorted."""
    return [
        make_summary("A", 10),
        make_summary("B", 200, in_flight=4),
        make_summary("C", 0),
    ]


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def clock():
    return FakeClock()
