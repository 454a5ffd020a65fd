"""Keyboard event source for the dashboard.

``key_events`` is an infinite generator: each step waits up to the poll
timeout for a key and yields the matching InputEvent, or TICK when the
timeout elapses. The driver loop therefore wakes at least once per poll
timeout even when nobody is typing.
"""

import curses
import logging
from enum import Enum
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT_MS = 100

KEY_ESCAPE = 27


class InputEvent(Enum):
    QUIT = "quit"
    REFRESH_REQUESTED = "refresh"
    NEXT_QUEUE = "next"
    PREVIOUS_QUEUE = "previous"
    TOGGLE_FILTER = "toggle_filter"
    PURGE_REQUESTED = "purge"
    CONFIRM_PURGE = "confirm_purge"
    CANCEL_PURGE = "cancel_purge"
    TICK = "tick"
    NONE = "none"


KEY_BINDINGS: Dict[int, InputEvent] = {
    ord("q"): InputEvent.QUIT,
    KEY_ESCAPE: InputEvent.QUIT,
    ord("r"): InputEvent.REFRESH_REQUESTED,
    ord("f"): InputEvent.TOGGLE_FILTER,
    curses.KEY_DOWN: InputEvent.NEXT_QUEUE,
    ord("j"): InputEvent.NEXT_QUEUE,
    curses.KEY_UP: InputEvent.PREVIOUS_QUEUE,
    ord("k"): InputEvent.PREVIOUS_QUEUE,
    ord("X"): InputEvent.PURGE_REQUESTED,
    ord("y"): InputEvent.CONFIRM_PURGE,
    ord("Y"): InputEvent.CONFIRM_PURGE,
    ord("n"): InputEvent.CANCEL_PURGE,
    ord("N"): InputEvent.CANCEL_PURGE,
}


def map_key(key: int) -> InputEvent:
    """Translate a curses key code; -1 (no key) becomes TICK."""
    if key == -1:
        return InputEvent.TICK
    return KEY_BINDINGS.get(key, InputEvent.NONE)


def key_events(win: Any,
               timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS) -> Iterator[InputEvent]:
    """Yield one InputEvent per keyboard poll, forever."""
    win.timeout(timeout_ms)
    while True:
        try:
            key = win.getch()
        except curses.error:
            key = -1
        yield map_key(key)
