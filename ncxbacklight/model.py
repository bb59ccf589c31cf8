"""Output and screen state for the backlight interface."""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_LABEL = "OUT"


@dataclass(frozen=True)
class OutputHandle:
    """Opaque reference to a RandR output."""

    xid: int


@dataclass(frozen=True)
class WindowHandle:
    """Opaque reference to a screen's root window."""

    xid: int


@dataclass(frozen=True)
class Atom:
    """Opaque reference to an interned property name."""

    xid: int


@dataclass(frozen=True)
class BacklightRange:
    """Server-reported valid backlight bounds (inclusive)."""

    min: int
    max: int

    @property
    def valid(self) -> bool:
        return self.max > 0 and self.min < self.max


@dataclass
class Output:
    """A backlight-capable output and its last known brightness."""

    handle: OutputHandle
    min: int
    max: int
    value: int
    name: str = DEFAULT_LABEL  # e.g., "eDP-1"

    def __post_init__(self) -> None:
        self.value = self.clamp(self.value)

    @property
    def span(self) -> int:
        return self.max - self.min

    @property
    def percent(self) -> int:
        """Brightness scaled against max, as drawn in the bar."""
        return int(self.value * 100 / self.max)

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))

    def update(self, value: Optional[int]) -> None:
        """Store a hardware reading; unreadable values leave the state unchanged."""
        if value is not None:
            self.value = self.clamp(value)


@dataclass
class Screen:
    """One X screen and its valid outputs."""

    root: WindowHandle
    outputs: list[Output] = field(default_factory=list)
    selected: int = 0

    @property
    def active_output(self) -> Optional[Output]:
        if not self.outputs:
            return None
        return self.outputs[self.selected]

    def select(self, index: int) -> None:
        """Move the selection, clamped to the available outputs."""
        if not self.outputs:
            self.selected = 0
            return
        self.selected = max(0, min(len(self.outputs) - 1, index))


@dataclass
class AppState:
    """Everything the main loop reads and mutates."""

    screens: list[Screen]
    width: int = 0
    height: int = 0
    clear: bool = False

    @property
    def active(self) -> Screen:
        # Only the first screen is driven by input and render.
        if not self.screens:
            return Screen(root=WindowHandle(0))
        return self.screens[0]
