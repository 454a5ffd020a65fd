"""Render sink: draws one dashboard frame from a StateSnapshot.

Layout:
  row 0        header bar
  rows 1..n-3  queue list (left 40%) | queue details (right 60%)
  row n-2      status message
  row n-1      key hints, filter state, last refresh time

Rendering never mutates state; it only reads the snapshot it is given.
"""

import curses
from typing import Any, List, Tuple

from ..models import QueueSummary
from .helpers import (
    CP_DLQ,
    CP_HEADER,
    CP_HIGHLIGHT,
    CP_LABEL,
    CP_STATUS_BAR,
    _format_dt,
    _format_duration,
    _format_ts,
    count_color,
    safe_addstr,
    status_color_pair,
)
from .state import StateSnapshot

MIN_ROWS = 8
MIN_COLS = 60
NAME_WIDTH = 30
KEY_HINTS = "[q]uit [r]efresh [f]ilter [X]purge [j/k]navigate"

Line = Tuple[str, int]


def list_scroll_offset(selected: int, total: int, height: int) -> int:
    """First visible row so that *selected* stays on screen."""
    if height <= 0 or total <= height:
        return 0
    offset = selected - height + 1 if selected >= height else 0
    return max(0, min(offset, total - height))


def queue_row_text(queue: QueueSummary, is_selected: bool) -> Tuple[str, str]:
    marker = "> " if is_selected else "  "
    return f"{marker}{queue.name:<{NAME_WIDTH}}", f"{queue.approximate_messages:>6}"


def build_detail_lines(snapshot: StateSnapshot) -> List[Line]:
    """Lines for the details panel of the selected queue."""
    queue = snapshot.selected_queue
    if queue is None:
        if snapshot.filter_active and snapshot.all_queues:
            return [("No queues match the filter", curses.A_DIM)]
        return [("No queue selected", curses.A_DIM)]

    label = curses.color_pair(CP_LABEL)
    lines: List[Line] = [
        (f"Queue Name: {queue.name}", curses.A_BOLD),
        ("", 0),
        (f"Messages:              {queue.approximate_messages}", label),
        (f"Messages In Flight:    {queue.in_flight_messages}", label),
        (f"Messages Delayed:      {queue.delayed_messages}", label),
    ]
    if queue.is_dead_letter_queue:
        lines.append(("Dead-letter queue", curses.color_pair(CP_DLQ) | curses.A_BOLD))
    lines.append(("", 0))

    detail = snapshot.detail_for_selection
    if detail is None:
        lines.append(("Loading details...", curses.A_DIM))
        return lines

    if detail.arn:
        lines.append(("ARN:", curses.A_BOLD))
        lines.append((detail.arn, 0))
        lines.append(("", 0))
    lines.append((f"Retention Period:      {_format_duration(detail.retention_seconds)}", label))
    lines.append((f"Visibility Timeout:    {_format_duration(detail.visibility_timeout_seconds)}", label))
    if detail.maximum_message_size is not None:
        lines.append((f"Max Message Size:      {detail.maximum_message_size} bytes", label))
    if detail.delay_seconds is not None:
        lines.append((f"Delay Seconds:         {detail.delay_seconds}", label))
    lines.append(("", 0))
    lines.append((f"Created:               {_format_dt(detail.created_at)}", label))
    lines.append((f"Last Modified:         {_format_dt(detail.last_modified_at)}", label))

    policy = detail.redrive_policy
    if policy is not None:
        lines.append(("", 0))
        lines.append(("Redrive Policy:", curses.A_BOLD))
        lines.append((f"  Dead-letter target:  {policy.dead_letter_target_arn}", 0))
        lines.append((f"  Max receive count:   {policy.max_receive_count}", 0))
    return lines


def build_footer(snapshot: StateSnapshot) -> str:
    filter_state = f"ON ({snapshot.filter_label})" if snapshot.filter_active else "OFF"
    return (f"Last Refresh: {_format_ts(snapshot.last_refreshed_wall)} | "
            f"Filter: {filter_state} | {KEY_HINTS}")


def draw_header(win: Any, cols: int, title: str) -> None:
    attr = curses.color_pair(CP_HEADER) | curses.A_BOLD
    safe_addstr(win, 0, 0, " " * cols, attr)
    safe_addstr(win, 0, 1, title, attr)


def draw_queue_list(win: Any, top: int, height: int, width: int,
                    snapshot: StateSnapshot) -> None:
    queues = snapshot.visible_queues
    title = f" Queues ({len(queues)}) "
    safe_addstr(win, top, 0, title, curses.A_BOLD | curses.A_UNDERLINE, width)
    rows = height - 1
    if not queues:
        msg = "  No queues match the filter" if snapshot.filter_active else "  No queues"
        safe_addstr(win, top + 1, 0, msg, curses.A_DIM, width)
        return

    offset = list_scroll_offset(snapshot.selected_index, len(queues), rows)
    for i, queue in enumerate(queues[offset:offset + rows]):
        idx = offset + i
        y = top + 1 + i
        is_selected = idx == snapshot.selected_index
        name_text, count_text = queue_row_text(queue, is_selected)
        if is_selected:
            name_attr = curses.color_pair(CP_HIGHLIGHT) | curses.A_BOLD
        elif queue.is_dead_letter_queue:
            name_attr = curses.color_pair(CP_DLQ)
        else:
            name_attr = 0
        safe_addstr(win, y, 0, name_text, name_attr, width)
        if len(name_text) < width:
            safe_addstr(win, y, len(name_text), count_text,
                        count_color(queue.approximate_messages),
                        width - len(name_text))

    if len(queues) > rows:
        safe_addstr(win, top + height - 1, max(0, width - 14),
                    f"[{offset + 1}-{min(offset + rows, len(queues))}/{len(queues)}]",
                    curses.A_DIM)


def draw_details(win: Any, top: int, height: int, left: int, width: int,
                 snapshot: StateSnapshot) -> None:
    safe_addstr(win, top, left, " Queue Details ",
                curses.A_BOLD | curses.A_UNDERLINE, width)
    for i, (text, attr) in enumerate(build_detail_lines(snapshot)[:height - 1]):
        safe_addstr(win, top + 1 + i, left, text, attr, width)


def draw_status(win: Any, rows: int, cols: int, snapshot: StateSnapshot) -> None:
    message = snapshot.status_message
    attr = curses.color_pair(status_color_pair(message))
    if snapshot.awaiting_purge_confirmation:
        attr |= curses.A_BOLD
    safe_addstr(win, rows - 2, 1, message, attr)

    bar = curses.color_pair(CP_STATUS_BAR)
    safe_addstr(win, rows - 1, 0, " " * cols, bar)
    safe_addstr(win, rows - 1, 1, build_footer(snapshot), bar)


def draw_frame(win: Any, snapshot: StateSnapshot,
               title: str = "SQS Queue Monitor") -> None:
    """Render the full TUI frame."""
    win.erase()
    rows, cols = win.getmaxyx()
    if rows < MIN_ROWS or cols < MIN_COLS:
        safe_addstr(win, 0, 0, "Terminal too small")
        win.refresh()
        return

    draw_header(win, cols, title)
    content_top = 1
    content_height = rows - 3
    list_width = max(NAME_WIDTH + 10, cols * 2 // 5)
    draw_queue_list(win, content_top, content_height, list_width - 1, snapshot)
    for y in range(content_top, content_top + content_height):
        safe_addstr(win, y, list_width, "│", curses.A_DIM)
    draw_details(win, content_top, content_height, list_width + 2,
                 cols - list_width - 3, snapshot)
    draw_status(win, rows, cols, snapshot)
    win.refresh()
