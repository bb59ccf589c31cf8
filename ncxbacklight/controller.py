"""Keystroke handling for the active screen."""

import curses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.model import AppState, Output, Screen

logger = logging.getLogger(__name__)

FORM_FEED = 0x0C  # Ctrl-L


class Action(Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    DECILE = "decile"
    REDRAW = "redraw"


@dataclass(frozen=True)
class Command:
    action: Action
    digit: int = 0


NO_COMMAND = Command(Action.NONE)

_KEYMAP = {
    curses.KEY_UP: Command(Action.UP),
    curses.KEY_DOWN: Command(Action.DOWN),
    curses.KEY_LEFT: Command(Action.LEFT),
    curses.KEY_RIGHT: Command(Action.RIGHT),
    FORM_FEED: Command(Action.REDRAW),
    ord("l"): Command(Action.REDRAW),
    ord("L"): Command(Action.REDRAW),
}
_KEYMAP.update({ord(str(d)): Command(Action.DECILE, d) for d in range(10)})


def translate_key(key: int) -> Command:
    """Map a curses key code to a command."""
    return _KEYMAP.get(key, NO_COMMAND)


def apply_command(screen: Screen, command: Command) -> Optional[Output]:
    """Apply a brightness or selection command to a screen.

    Returns:
        The output whose value changed and must be written, or None
    """
    output = screen.active_output
    if output is None:
        return None

    # 5% steps, sized from the output selected before the key
    ten_percent = output.span / 10.0
    step = ten_percent / 2.0

    if command.action is Action.UP:
        output.value = min(int(output.value + step), output.max)
        return output
    if command.action is Action.DOWN:
        output.value = max(int(output.value - step), output.min)
        return output
    if command.action is Action.LEFT:
        screen.select(screen.selected - 1)
    elif command.action is Action.RIGHT:
        screen.select(screen.selected + 1)
    elif command.action is Action.DECILE:
        output.value = output.clamp(int(ten_percent * command.digit + output.min))
        return output
    return None


class InputController:
    """Turns one keystroke into state changes and backlight writes."""

    def __init__(self, state: AppState, backlight: BacklightProperty):
        self.state = state
        self.backlight = backlight

    def sync(self, screen: Screen) -> None:
        """Refresh every output of a screen from the hardware."""
        for output in screen.outputs:
            output.update(self.backlight.get_value(output.handle))

    def handle_key(self, key: int) -> None:
        command = translate_key(key)
        if command.action is Action.REDRAW:
            self.state.clear = True

        screen = self.state.active
        if not screen.outputs:
            return

        # Pick up changes made elsewhere (hotkeys, other tools)
        self.sync(screen)

        changed = apply_command(screen, command)
        if changed is not None:
            self.backlight.set_value(changed.handle, changed.value)
            self.backlight.sync()
            logger.debug(f"{changed.name} -> {changed.value}")
