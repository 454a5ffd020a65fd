"""Queue filter predicates for the dashboard's filter toggle.

A filter is a named predicate over QueueSummary. Which one the 'f' key
toggles is chosen by configuration; the app state only ever calls
``predicate(summary)``.
"""

import fnmatch
from dataclasses import dataclass
from typing import Callable, Dict, List

from ..models import QueueSummary

Predicate = Callable[[QueueSummary], bool]


@dataclass(frozen=True)
class QueueFilter:
    name: str
    label: str
    predicate: Predicate

    def __call__(self, queue: QueueSummary) -> bool:
        return self.predicate(queue)


def non_empty() -> QueueFilter:
    return QueueFilter("non_empty", "non-empty only",
                       lambda q: q.approximate_messages > 0)


def dlq_only() -> QueueFilter:
    return QueueFilter("dlq_only", "dead-letter only",
                       lambda q: q.is_dead_letter_queue)


def min_messages(threshold: int) -> QueueFilter:
    return QueueFilter("min_messages", f">= {threshold} messages",
                       lambda q: q.approximate_messages >= threshold)


def name_glob(pattern: str) -> QueueFilter:
    return QueueFilter("name_glob", f"name ~ {pattern}",
                       lambda q: fnmatch.fnmatchcase(q.name, pattern))


FILTER_NAMES: List[str] = ["non_empty", "dlq_only", "min_messages", "name_glob"]


def build_filter(name: str, threshold: int = 1, pattern: str = "*") -> QueueFilter:
    """Build a filter from its configured name and parameters.

    Raises ValueError for an unknown filter name.
    """
    factories: Dict[str, Callable[[], QueueFilter]] = {
        "non_empty": non_empty,
        "dlq_only": dlq_only,
        "min_messages": lambda: min_messages(threshold),
        "name_glob": lambda: name_glob(pattern),
    }
    if name not in factories:
        raise ValueError(
            f"Unknown filter '{name}' (choose from {', '.join(FILTER_NAMES)})")
    return factories[name]()
