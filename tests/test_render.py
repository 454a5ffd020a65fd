"""Tests for the renderer and drawing helpers (without initializing curses)."""

import curses as _curses
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_summary
from sqs_monitor.models import FetchResult, QueueDetail, RedrivePolicy
from sqs_monitor.tui.helpers import (
    CP_COUNT_EMPTY,
    CP_COUNT_HIGH,
    CP_COUNT_LOW,
    CP_ERROR,
    CP_NORMAL,
    _format_duration,
    _format_ts,
    count_color_pair,
    safe_addstr,
    status_color_pair,
)
from sqs_monitor.tui.render import (
    build_detail_lines,
    build_footer,
    draw_frame,
    list_scroll_offset,
)
from sqs_monitor.tui.state import AppState, Direction
from sqs_monitor.utils.filters import non_empty


@pytest.fixture
def no_curses():
    """Patch curses attribute lookups used while building frames."""
    with patch("sqs_monitor.tui.render.curses") as render_curses, \
            patch("sqs_monitor.tui.helpers.curses") as helper_curses:
        render_curses.color_pair.return_value = 0
        render_curses.A_BOLD = render_curses.A_DIM = render_curses.A_UNDERLINE = 0
        helper_curses.color_pair.return_value = 0
        helper_curses.error = _curses.error
        yield render_curses


def _loaded_state(queues=None):
    state = AppState(non_empty(), wall_clock=lambda: 1700000000.0)
    queues = queues if queues is not None else [
        make_summary("orders", 120, in_flight=5, delayed=2),
        make_summary("orders-dlq", 3),
        make_summary("idle", 0),
    ]
    state.apply_full_refresh(FetchResult.success(queues), 1.0)
    return state


def _texts(lines):
    return [text for text, _ in lines]


class TestCountColors:

    @pytest.mark.parametrize("count,pair", [
        (0, CP_COUNT_EMPTY),
        (1, CP_COUNT_LOW),
        (100, CP_COUNT_LOW),
        (101, CP_COUNT_HIGH),
    ])
    def test_count_thresholds(self, count, pair):
        assert count_color_pair(count) == pair

    def test_status_colors(self):
        assert status_color_pair("Error: Throttling") == CP_ERROR
        assert status_color_pair("Failed to purge queue 'x': no") == CP_ERROR
        assert status_color_pair("Connected to AWS | 3 queues found") == CP_NORMAL


class TestSafeAddstr:

    def test_clips_to_window_width(self):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 10)
        safe_addstr(win, 0, 0, "Hello World!", 0)
        win.addstr.assert_called_once_with(0, 0, "Hello Wor", 0)

    def test_skips_if_y_out_of_bounds(self):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 80)
        safe_addstr(win, 30, 0, "test", 0)
        win.addstr.assert_not_called()

    def test_respects_max_width(self):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 80)
        safe_addstr(win, 0, 0, "Hello World!", 0, max_width=5)
        win.addstr.assert_called_once_with(0, 0, "Hello", 0)

    def test_handles_curses_error(self):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 80)
        win.addstr.side_effect = _curses.error("test")
        safe_addstr(win, 0, 0, "test", 0)


class TestFormatting:

    def test_never_refreshed(self):
        assert _format_ts(None) == "Never"

    def test_timestamp_shape(self):
        result = _format_ts(1700000000)
        assert len(result) == 19
        assert result[4] == "-" and result[13] == ":"

    def test_duration(self):
        assert _format_duration(None) == "N/A"
        assert _format_duration(345600) == "345600 seconds (4d)"
        assert _format_duration(30) == "30 seconds"
        assert _format_duration(120) == "120 seconds (2m)"


class TestListScroll:

    def test_no_scroll_when_fits(self):
        assert list_scroll_offset(5, 10, 20) == 0

    def test_keeps_selection_visible(self):
        assert list_scroll_offset(25, 40, 10) == 16

    def test_never_past_end(self):
        assert list_scroll_offset(39, 40, 10) == 30


class TestDetailLines:

    def test_no_selection(self, no_curses):
        state = AppState(non_empty())
        assert _texts(build_detail_lines(state.snapshot())) == ["No queue selected"]

    def test_summary_shown_while_loading(self, no_curses):
        snap = _loaded_state().snapshot()
        texts = _texts(build_detail_lines(snap))
        assert texts[0] == "Queue Name: orders"
        assert "Messages In Flight:    5" in texts
        assert texts[-1] == "Loading details..."

    def test_full_detail(self, no_curses):
        state = _loaded_state()
        detail = QueueDetail(
            summary=state.visible_queues[0],
            arn="arn:aws:sqs:us-east-1:1:orders",
            retention_seconds=345600,
            visibility_timeout_seconds=30,
            maximum_message_size=262144,
            delay_seconds=0,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            redrive_policy=RedrivePolicy("arn:aws:sqs:us-east-1:1:orders-dlq", 5),
        )
        state.apply_detail_refresh("orders", FetchResult.success(detail))
        texts = _texts(build_detail_lines(state.snapshot()))
        assert "arn:aws:sqs:us-east-1:1:orders" in texts
        assert "Max Message Size:      262144 bytes" in texts
        assert "Delay Seconds:         0" in texts
        assert "  Max receive count:   5" in texts
        assert "Loading details..." not in texts

    def test_stale_detail_not_shown(self, no_curses):
        state = _loaded_state()
        state.apply_detail_refresh("orders", FetchResult.success(
            QueueDetail(summary=state.visible_queues[0], arn="arn-orders")))
        state.move_selection(Direction.NEXT)
        texts = _texts(build_detail_lines(state.snapshot()))
        assert "arn-orders" not in texts
        assert "Dead-letter queue" in texts

    def test_empty_filter_message(self, no_curses):
        state = _loaded_state([make_summary("idle", 0)])
        state.toggle_filter()
        texts = _texts(build_detail_lines(state.snapshot()))
        assert texts == ["No queues match the filter"]


def test_footer_shows_filter_and_refresh():
    state = _loaded_state()
    state.toggle_filter()
    footer = build_footer(state.snapshot())
    assert "Filter: ON (non-empty only)" in footer
    assert "Last Refresh: Never" not in footer


class TestDrawFrame:

    def test_draws_rows_and_status(self, no_curses):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 120)
        state = _loaded_state()
        draw_frame(win, state.snapshot())

        drawn = " ".join(call.args[2] for call in win.addstr.call_args_list)
        assert "SQS Queue Monitor" in drawn
        assert "> orders" in drawn
        assert "Connected to AWS | 3 queues found" in drawn
        win.erase.assert_called_once()
        win.refresh.assert_called_once()

    def test_small_terminal(self, no_curses):
        win = MagicMock()
        win.getmaxyx.return_value = (5, 40)
        draw_frame(win, _loaded_state().snapshot())
        win.addstr.assert_called_once_with(0, 0, "Terminal too small", 0)

    def test_does_not_mutate_state(self, no_curses):
        win = MagicMock()
        win.getmaxyx.return_value = (24, 120)
        state = _loaded_state()
        before = state.snapshot()
        draw_frame(win, before)
        assert state.snapshot() == before
