"""Tests for MonitorApp wiring (curses calls are mocked)."""

from unittest.mock import MagicMock, patch

from conftest import FakeQueueClient
from sqs_monitor.tui.app import ESCAPE_DELAY_MS, MonitorApp
from sqs_monitor.utils.config import MonitorConfig


def _app(tmp_config, **settings):
    config = MonitorConfig(config_path=tmp_config)
    config.update(settings)
    return MonitorApp(config, FakeQueueClient())


class TestMonitorAppInit:

    def test_uses_configured_interval_and_filter(self, tmp_config):
        app = _app(tmp_config, refresh_interval=12, filter="dlq_only")
        assert app.loop._refresh_interval == 12
        assert app.state.queue_filter.name == "dlq_only"
        assert app.loop.running

    def test_title_includes_region_and_prefix(self, tmp_config):
        app = _app(tmp_config, queue_name_prefix="orders-")
        assert app.title == "SQS Queue Monitor | region: us-east-1 | prefix: orders-"

    def test_title_without_prefix(self, tmp_config):
        assert _app(tmp_config).title == "SQS Queue Monitor | region: us-east-1"


class TestMonitorAppMain:

    def test_main_runs_loop_with_poll_timeout(self, tmp_config):
        app = _app(tmp_config, poll_timeout_ms=250)
        stdscr = MagicMock()
        stdscr.getch.return_value = ord("q")
        with patch("sqs_monitor.tui.app.curses") as mock_curses, \
                patch("sqs_monitor.tui.app._init_colors"), \
                patch("sqs_monitor.tui.app.draw_frame") as draw:
            app._main(stdscr)

        stdscr.timeout.assert_called_once_with(250)
        mock_curses.curs_set.assert_called_once_with(0)
        mock_curses.set_escdelay.assert_called_once_with(ESCAPE_DELAY_MS)
        draw.assert_called_once()
        assert not app.loop.running

    def test_render_delegates_to_draw_frame(self, tmp_config):
        app = _app(tmp_config)
        app._stdscr = MagicMock()
        with patch("sqs_monitor.tui.app.draw_frame") as draw:
            snap = app.state.snapshot()
            app._render(snap)
        draw.assert_called_once_with(app._stdscr, snap, app.title)
