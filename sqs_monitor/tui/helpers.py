"""Shared helpers for the SQS monitor TUI.

Color constants, color-mapping functions, safe drawing utilities, and
timestamp formatting used by the renderer.
"""

import curses
import time
from datetime import datetime
from typing import Any, Optional


# ── Color pair IDs ────────────────────────────────────────────────

CP_NORMAL = 0
CP_HEADER = 1
CP_STATUS_BAR = 2
CP_HIGHLIGHT = 3
CP_COUNT_EMPTY = 4
CP_COUNT_LOW = 5
CP_COUNT_HIGH = 6
CP_DLQ = 7
CP_LABEL = 8
CP_WARNING = 9
CP_ERROR = 10

# Message counts above this are drawn in the "high" color
HIGH_COUNT_THRESHOLD = 100


def _init_colors() -> None:
    """Set up curses color pairs."""
    curses.start_color()
    curses.use_default_colors()

    curses.init_pair(CP_HEADER, curses.COLOR_CYAN, curses.COLOR_BLUE)
    curses.init_pair(CP_STATUS_BAR, curses.COLOR_BLACK, curses.COLOR_WHITE)
    curses.init_pair(CP_HIGHLIGHT, curses.COLOR_BLACK, curses.COLOR_CYAN)
    curses.init_pair(CP_COUNT_EMPTY, curses.COLOR_GREEN, -1)
    curses.init_pair(CP_COUNT_LOW, curses.COLOR_YELLOW, -1)
    curses.init_pair(CP_COUNT_HIGH, curses.COLOR_RED, -1)
    curses.init_pair(CP_DLQ, curses.COLOR_MAGENTA, -1)
    curses.init_pair(CP_LABEL, curses.COLOR_CYAN, -1)
    curses.init_pair(CP_WARNING, curses.COLOR_YELLOW, -1)
    curses.init_pair(CP_ERROR, curses.COLOR_RED, -1)


def count_color_pair(count: int) -> int:
    """Color pair ID for an approximate message count."""
    if count <= 0:
        return CP_COUNT_EMPTY
    if count <= HIGH_COUNT_THRESHOLD:
        return CP_COUNT_LOW
    return CP_COUNT_HIGH


def count_color(count: int) -> int:
    return curses.color_pair(count_color_pair(count))


def status_color_pair(message: str) -> int:
    """Pick a color for the status line from its content."""
    lowered = message.lower()
    if lowered.startswith("error") or lowered.startswith("failed"):
        return CP_ERROR
    if lowered.startswith("purg"):
        return CP_WARNING
    return CP_NORMAL


def safe_addstr(win: Any, y: int, x: int, text: str,
                attr: int = 0, max_width: int = 0) -> None:
    """Write text to curses window, clipping to avoid curses errors."""
    rows, cols = win.getmaxyx()
    if y < 0 or y >= rows or x >= cols:
        return
    available = cols - x - 1  # leave 1 col margin to avoid bottom-right corner issue
    if max_width > 0:
        available = min(available, max_width)
    if available <= 0:
        return
    clipped = text[:available]
    try:
        win.addstr(y, x, clipped, attr)
    except curses.error:
        pass


def _format_ts(ts: Optional[float]) -> str:
    """Format a unix timestamp as YYYY-MM-DD HH:MM:SS local time."""
    if not ts:
        return "Never"
    try:
        return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))
    except (OSError, OverflowError, ValueError):
        return "????-??-?? ??:??:??"


def _format_dt(dt: Optional[datetime]) -> str:
    if dt is None:
        return "N/A"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _format_duration(seconds: Optional[int]) -> str:
    """Render seconds as e.g. '345600 seconds (4d)'."""
    if seconds is None:
        return "N/A"
    units = [("d", 86400), ("h", 3600), ("m", 60)]
    for suffix, size in units:
        if seconds >= size and seconds % size == 0:
            return f"{seconds} seconds ({seconds // size}{suffix})"
    return f"{seconds} seconds"
