from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.backends.xserver import XA_INTEGER, PropertyInfo, PropertyValue
from ncxbacklight.errors import DisplayServerError
from ncxbacklight.model import Atom, OutputHandle, WindowHandle

BACKLIGHT_ATOM = Atom(300)


@dataclass
class FakeOutput:
    name: str
    value: int | None = 0
    valid_values: list[int] = field(default_factory=lambda: [0, 1000])
    is_range: bool = True
    fail_query: bool = False


class FakeDisplayServer:
    """In-memory stand-in for an X server with RandR outputs.

    Writes are only visible after sync(), like a real unflushed connection.
    """

    def __init__(
        self,
        screens: list[list[FakeOutput]] | None = None,
        atoms: dict[str, Atom] | None = None,
        resource_error: int | None = None,
    ):
        self.atoms = {"Backlight": BACKLIGHT_ATOM} if atoms is None else atoms
        self.screens = screens if screens is not None else [[]]
        self.resource_error = resource_error
        self.outputs: dict[OutputHandle, FakeOutput] = {}
        self.layout: dict[WindowHandle, list[OutputHandle]] = {}
        self.pending: list[tuple[OutputHandle, int]] = []
        self.calls: list[str] = []
        self.syncs = 0
        self.closed = 0

        xid = 100
        for s, outputs in enumerate(self.screens):
            root = WindowHandle(s + 1)
            self.layout[root] = []
            for out in outputs:
                handle = OutputHandle(xid)
                xid += 1
                self.outputs[handle] = out
                self.layout[root].append(handle)

    def handle(self, name: str) -> OutputHandle:
        return next(h for h, o in self.outputs.items() if o.name == name)

    def intern_atom(self, name: str) -> Atom | None:
        self.calls.append(f"intern:{name}")
        return self.atoms.get(name)

    def roots(self) -> list[WindowHandle]:
        return list(self.layout)

    def screen_outputs(self, root: WindowHandle) -> list[OutputHandle]:
        self.calls.append(f"resources:{root.xid}")
        if self.resource_error is not None:
            raise DisplayServerError("BadWindow", self.resource_error)
        return list(self.layout[root])

    def output_name(self, output: OutputHandle) -> str | None:
        return self.outputs[output].name

    def query_output_property(self, output: OutputHandle, atom: Atom) -> PropertyInfo:
        self.calls.append(f"range:{output.xid}")
        out = self.outputs[output]
        if out.fail_query:
            raise DisplayServerError("BadMatch", 8)
        return PropertyInfo(range=out.is_range, valid_values=list(out.valid_values))

    def get_output_property(self, output: OutputHandle, atom: Atom) -> PropertyValue | None:
        self.calls.append(f"get:{output.xid}")
        value = self.outputs[output].value
        if value is None:
            return None
        return PropertyValue(type=XA_INTEGER, format=32, items=[value])

    def change_output_property(self, output: OutputHandle, atom: Atom, value: int) -> None:
        self.calls.append(f"set:{output.xid}={value}")
        self.pending.append((output, value))

    def sync(self) -> None:
        self.syncs += 1
        for output, value in self.pending:
            self.outputs[output].value = value
        self.pending.clear()

    def close(self) -> None:
        self.closed += 1


class FakeWindow:
    """Records curses drawing calls into a character grid."""

    def __init__(self, height: int = 24, width: int = 80):
        self.height = height
        self.width = width
        self.cells: dict[tuple[int, int], Any] = {}
        self.cleared = 0
        self.refreshed = 0

    def addch(self, y: int, x: int, ch: Any) -> None:
        self.cells[(y, x)] = ch

    def addstr(self, y: int, x: int, text: str) -> None:
        for i, ch in enumerate(text):
            self.cells[(y, x + i)] = ch

    def clearok(self, flag: bool) -> None:
        if flag:
            self.cleared += 1

    def refresh(self) -> None:
        self.refreshed += 1

    def row(self, y: int) -> str:
        return "".join(str(self.cells.get((y, x), " "))[:1] for x in range(self.width))

    def text(self) -> str:
        return "\n".join(self.row(y) for y in range(self.height))


@pytest.fixture
def laptop() -> FakeDisplayServer:
    return FakeDisplayServer(
        screens=[
            [
                FakeOutput("eDP-1", value=500),
                FakeOutput("HDMI-1", value=None, valid_values=[], is_range=False),
                FakeOutput("DP-1", value=40, valid_values=[0, 100]),
            ]
        ]
    )


@pytest.fixture
def backlight(laptop: FakeDisplayServer) -> BacklightProperty:
    return BacklightProperty.resolve(laptop)
