from __future__ import annotations

import pytest
from conftest import FakeDisplayServer, FakeOutput

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.backends.display import Candidate, ScreenDiscovery
from ncxbacklight.errors import DiscoveryError
from ncxbacklight.model import BacklightRange, OutputHandle


def discover(server: FakeDisplayServer):
    return ScreenDiscovery(BacklightProperty.resolve(server)).discover()


def test_invalid_ranges_are_dropped_and_indices_stay_dense() -> None:
    server = FakeDisplayServer(
        screens=[
            [
                FakeOutput("VGA-1", value=0, valid_values=[0, 0]),
                FakeOutput("eDP-1", value=300),
                FakeOutput("DP-1", value=5, valid_values=[10, 5]),
                FakeOutput("DP-2", value=0, valid_values=[-10, 0]),
                FakeOutput("HDMI-1", value=20, valid_values=[0, 100]),
                FakeOutput("DP-3", fail_query=True),
            ]
        ]
    )

    (screen,) = discover(server)

    assert [o.name for o in screen.outputs] == ["eDP-1", "HDMI-1"]
    assert screen.selected == 0
    assert screen.active_output is screen.outputs[0]
    for output in screen.outputs:
        assert output.max > 0 and output.min < output.max


def test_values_are_clamped_into_range() -> None:
    server = FakeDisplayServer(
        screens=[
            [
                FakeOutput("eDP-1", value=5000),
                FakeOutput("DP-1", value=None, valid_values=[10, 100]),
            ]
        ]
    )

    (screen,) = discover(server)

    assert screen.outputs[0].value == 1000
    # unreadable at startup
    assert screen.outputs[1].value == 10
    for output in screen.outputs:
        assert output.min <= output.value <= output.max


def test_range_is_queried_before_value() -> None:
    server = FakeDisplayServer(screens=[[FakeOutput("eDP-1", value=1)]])
    discover(server)

    xid = server.handle("eDP-1").xid
    assert server.calls.index(f"range:{xid}") < server.calls.index(f"get:{xid}")


def test_every_screen_is_discovered() -> None:
    server = FakeDisplayServer(
        screens=[[FakeOutput("eDP-1", value=1)], [], [FakeOutput("DP-1", value=2)]]
    )

    screens = discover(server)

    assert [len(s.outputs) for s in screens] == [1, 0, 1]
    assert [s.root.xid for s in screens] == [1, 2, 3]


def test_screen_without_outputs() -> None:
    server = FakeDisplayServer(screens=[[]])
    (screen,) = discover(server)
    assert screen.outputs == []
    assert screen.active_output is None


def test_resource_failure_is_fatal() -> None:
    server = FakeDisplayServer(screens=[[FakeOutput("eDP-1")], []], resource_error=3)

    with pytest.raises(DiscoveryError) as exc:
        discover(server)

    assert exc.value.code == 3
    assert str(exc.value) == "RANDR Get Screen Resources returned error 3"
    # later screens are not attempted
    assert [c for c in server.calls if c.startswith("resources:")] == ["resources:1"]


def test_candidate_builds_only_with_a_valid_range() -> None:
    handle = OutputHandle(7)

    assert Candidate(handle, None, 5).build() is None
    assert Candidate(handle, BacklightRange(0, 0), 0).build() is None

    output = Candidate(handle, BacklightRange(10, 100), None, name="eDP-1").build()
    assert output is not None
    assert (output.min, output.max, output.value, output.name) == (10, 100, 10, "eDP-1")
