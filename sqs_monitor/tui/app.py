"""SQS Monitor TUI - Core Application

Curses-based terminal dashboard showing SQS queue depth, in-flight counts,
and queue configuration. Owns terminal setup/teardown and wires the
keyboard event source, the driver loop, and the renderer together.
"""

import curses
import logging
from typing import Any

from ..utils.config import MonitorConfig
from .events import key_events
from .helpers import _init_colors
from .loop import DashboardLoop
from .render import draw_frame
from .state import AppState

logger = logging.getLogger(__name__)

ESCAPE_DELAY_MS = 25


class MonitorApp:
    """Main TUI application controller."""

    def __init__(self, config: MonitorConfig, client: Any):
        self._config = config
        self._client = client
        self.state = AppState(config.queue_filter())
        self.loop = DashboardLoop(
            self.state,
            client,
            refresh_interval=config.refresh_interval,
            scope=config.get("queue_name_prefix") or "",
        )
        self._stdscr: Any = None

    @property
    def title(self) -> str:
        region = getattr(self._client, "region", "?")
        prefix = self._config.get("queue_name_prefix")
        scope = f" | prefix: {prefix}" if prefix else ""
        return f"SQS Queue Monitor | region: {region}{scope}"

    def run(self) -> None:
        """Launch the TUI (blocks until quit).

        curses.wrapper restores the terminal on the way out, including
        when an exception escapes.
        """
        curses.wrapper(self._main)

    def _main(self, stdscr: Any) -> None:
        self._stdscr = stdscr
        _init_colors()
        try:
            curses.curs_set(0)  # hide cursor
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")
        # Esc is a quit key; keypad mode otherwise holds it for ~1s
        curses.set_escdelay(ESCAPE_DELAY_MS)

        timeout_ms = self._config.poll_timeout_ms
        logger.info("Dashboard started (refresh every %ss, poll %dms)",
                    self._config.refresh_interval, timeout_ms)
        self.loop.run(key_events(stdscr, timeout_ms), self._render)
        logger.info("Dashboard stopped")

    def _render(self, snapshot: Any) -> None:
        draw_frame(self._stdscr, snapshot, self.title)
