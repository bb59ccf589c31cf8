from __future__ import annotations

from ncxbacklight.model import (
    AppState,
    BacklightRange,
    Output,
    OutputHandle,
    Screen,
    WindowHandle,
)


def test_handles_compare_by_value() -> None:
    assert OutputHandle(5) == OutputHandle(5)
    assert OutputHandle(5) != OutputHandle(6)
    assert len({WindowHandle(1), WindowHandle(1)}) == 1


def test_range_validity() -> None:
    assert BacklightRange(0, 100).valid
    assert not BacklightRange(0, 0).valid
    assert not BacklightRange(-5, 0).valid
    assert not BacklightRange(50, 10).valid


def test_output_clamps_on_construction_and_update() -> None:
    output = Output(OutputHandle(1), 10, 100, 500)
    assert output.value == 100

    output.update(-3)
    assert output.value == 10

    output.update(None)
    assert output.value == 10


def test_empty_screen_has_no_active_output() -> None:
    screen = Screen(root=WindowHandle(1))
    screen.select(3)
    assert screen.selected == 0
    assert screen.active_output is None


def test_active_screen_is_the_first() -> None:
    first = Screen(root=WindowHandle(1))
    second = Screen(root=WindowHandle(2))
    assert AppState(screens=[first, second]).active is first
    assert AppState(screens=[]).active.outputs == []


def test_percent_truncates_toward_zero() -> None:
    assert Output(OutputHandle(1), 0, 1000, 505).percent == 50
    assert Output(OutputHandle(1), -10, 3, -1).percent == -33
    assert Output(OutputHandle(1), -10, 3, 3).percent == 100
