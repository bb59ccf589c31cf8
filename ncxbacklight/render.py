"""Bar rendering for the active screen."""

import curses
from dataclasses import dataclass
from typing import Any, Union

from ncxbacklight import PROGNAME, __version__
from ncxbacklight.model import AppState, Output

Glyph = Union[int, str]

NO_OUTPUTS_MESSAGE = "no outputs found with valid backlight property"


@dataclass(frozen=True)
class Glyphs:
    """Characters used for the frame and bars."""

    hline: Glyph
    vline: Glyph
    ulcorner: Glyph
    urcorner: Glyph
    llcorner: Glyph
    lrcorner: Glyph
    fill: Glyph
    empty: Glyph = " "

    @classmethod
    def from_curses(cls) -> "Glyphs":
        """Box-drawing characters; only valid after curses.initscr()."""
        return cls(
            hline=curses.ACS_HLINE,
            vline=curses.ACS_VLINE,
            ulcorner=curses.ACS_ULCORNER,
            urcorner=curses.ACS_URCORNER,
            llcorner=curses.ACS_LLCORNER,
            lrcorner=curses.ACS_LRCORNER,
            fill=curses.ACS_CKBOARD,
        )

    @classmethod
    def ascii(cls) -> "Glyphs":
        return cls(
            hline="-",
            vline="|",
            ulcorner="+",
            urcorner="+",
            llcorner="+",
            lrcorner="+",
            fill="#",
        )


class Renderer:
    """Draws AppState onto a curses window. Never talks to the X server."""

    def __init__(self, window: Any, glyphs: Glyphs):
        self.window = window
        self.glyphs = glyphs

    def draw(self, state: AppState) -> None:
        if state.clear:
            self.window.clearok(True)
            state.clear = False

        screen = state.active
        count = len(screen.outputs)
        for i, output in enumerate(screen.outputs):
            x = (i + 1) * (state.width // (count + 1)) - 2
            y = state.height - 5
            self.draw_bar(x, y, state.height - 8, output.percent)
            self.draw_label(x, y + 2, output, selected=i == screen.selected)

        if count == 0:
            row = state.height // 2
            col = (state.width - len(NO_OUTPUTS_MESSAGE)) // 2
            self._puts(row, col, NO_OUTPUTS_MESSAGE)

        self.draw_frame(state.width, state.height)
        self.window.refresh()

    def draw_bar(self, x: int, y: int, h: int, barval: int) -> None:
        """Draw one vertical bar with its bottom edge on row y.

        Row i of the bar is filled when barval (a percentage) exceeds the
        row's share of the bar height, giving a coarse block meter.
        """
        g = self.glyphs

        # bottom
        self._put(y, x + 2, g.llcorner)
        self._put(y, x + 3, g.hline)
        self._put(y, x + 4, g.hline)
        self._put(y, x + 5, g.lrcorner)

        for i in range(1, h):
            self._put(y - i, x + 2, g.vline)
            self._put(y - i, x + 5, g.vline)

            cell = g.fill if barval > i * 100 // h else g.empty
            self._put(y - i, x + 3, cell)
            self._put(y - i, x + 4, cell)

        # top
        self._puts(y - h, x, " " * 9)
        self._put(y - h, x + 2, g.ulcorner)
        self._put(y - h, x + 3, g.hline)
        self._put(y - h, x + 4, g.hline)
        self._put(y - h, x + 5, g.urcorner)

        self._puts(y + 1, x + 2, " " * 8)
        self._puts(y + 1, x + 3 - (barval >= 100), str(barval))

    def draw_label(self, x: int, y: int, output: Output, selected: bool) -> None:
        label = f"<{output.name}>" if selected else output.name
        self._puts(y, x + 1, " " * 8)
        self._puts(y, x + 3 - len(label) // 2, label)

    def draw_frame(self, w: int, h: int) -> None:
        g = self.glyphs

        for i in range(1, w):
            self._put(0, i, g.hline)
            self._put(h - 1, i, g.hline)

        for i in range(1, h):
            self._put(i, 0, g.vline)
            self._put(i, w - 1, g.vline)

        self._put(0, 0, g.ulcorner)
        self._put(0, w - 1, g.urcorner)
        self._put(h - 1, 0, g.llcorner)
        self._put(h - 1, w - 1, g.lrcorner)

        title = f"{PROGNAME} v{__version__}"
        self._puts(0, w // 2 - len(title) // 2, title)

    def _put(self, y: int, x: int, glyph: Glyph) -> None:
        if y < 0 or x < 0:
            return
        try:
            self.window.addch(y, x, glyph)
        except curses.error:
            # Writing the bottom-right cell moves the cursor off-screen
            pass

    def _puts(self, y: int, x: int, text: str) -> None:
        if y < 0 or x < 0:
            return
        try:
            self.window.addstr(y, x, text)
        except curses.error:
            pass
