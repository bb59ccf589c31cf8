"""curses terminal setup and teardown."""

import curses
import logging
from typing import Any, Optional

from ncxbacklight.render import Glyphs

logger = logging.getLogger(__name__)


class Terminal:
    """Full-screen curses session.

    open() and close() are each effective once; close() is safe to call
    before open() or more than once.
    """

    def __init__(self, ascii_glyphs: bool = False):
        self.ascii_glyphs = ascii_glyphs
        self.window: Optional[Any] = None
        self.width = 0
        self.height = 0

    def open(self) -> None:
        if self.window is not None:
            return
        window = curses.initscr()
        self.window = window
        curses.noecho()
        curses.cbreak()
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")
        window.leaveok(True)
        window.keypad(True)
        if curses.has_colors():
            curses.start_color()
            curses.init_pair(1, curses.COLOR_WHITE, curses.COLOR_BLACK)
            window.attron(curses.color_pair(1))

        self.height, self.width = window.getmaxyx()
        logger.debug(f"Terminal size {self.width}x{self.height}")

    @property
    def glyphs(self) -> Glyphs:
        if self.ascii_glyphs:
            return Glyphs.ascii()
        return Glyphs.from_curses()

    def read_key(self) -> int:
        """Block until a key is pressed."""
        assert self.window is not None
        return self.window.getch()

    def close(self) -> None:
        window = self.window
        if window is None:
            return
        self.window = None

        window.refresh()
        try:
            curses.curs_set(1)
        except curses.error:
            pass
        window.leaveok(False)
        window.keypad(False)
        curses.nocbreak()
        curses.echo()
        curses.endwin()
