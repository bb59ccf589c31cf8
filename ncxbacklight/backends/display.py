"""Screen and output discovery via RandR."""

import logging
from dataclasses import dataclass
from typing import Optional

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.errors import DiscoveryError, DisplayServerError
from ncxbacklight.model import (
    DEFAULT_LABEL,
    BacklightRange,
    Output,
    OutputHandle,
    Screen,
    WindowHandle,
)

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """An output as reported by the server, before range validation."""

    handle: OutputHandle
    range: Optional[BacklightRange]
    value: Optional[int]
    name: str = DEFAULT_LABEL

    def build(self) -> Optional[Output]:
        """Return the Output for this candidate, or None if its range is invalid."""
        backlight_range = self.range
        if backlight_range is None or not backlight_range.valid:
            return None
        value = self.value if self.value is not None else backlight_range.min
        return Output(
            handle=self.handle,
            min=backlight_range.min,
            max=backlight_range.max,
            value=value,
            name=self.name,
        )


class ScreenDiscovery:
    """Builds the screen/output model from the display server."""

    def __init__(self, backlight: BacklightProperty):
        """Initialize with a resolved backlight property."""
        self.backlight = backlight
        self.server = backlight.server

    def discover(self) -> list[Screen]:
        """Enumerate every screen and its outputs with a valid backlight range.

        Raises:
            DiscoveryError: if the screen resources of any screen cannot be read
        """
        screens = [self.discover_screen(root) for root in self.server.roots()]

        logger.info(
            f"Found {len(screens)} screen(s), "
            f"{sum(len(s.outputs) for s in screens)} backlight output(s)"
        )
        if len(screens) > 1:
            logger.info("Only the first screen is controlled")
        return screens

    def discover_screen(self, root: WindowHandle) -> Screen:
        """Build one screen, keeping only outputs with a valid range."""
        try:
            handles = self.server.screen_outputs(root)
        except DisplayServerError as e:
            code = e.code if e.code is not None else -1
            logger.error(f"Screen resources for root {root.xid} unavailable: {e}")
            raise DiscoveryError(code) from e

        outputs = []
        for handle in handles:
            candidate = self.probe(handle)
            output = candidate.build()
            if output is None:
                logger.debug(f"Skipping {candidate.name}: range {candidate.range}")
                continue
            logger.info(
                f"  {output.name}: value={output.value}, range={output.min}-{output.max}"
            )
            outputs.append(output)

        return Screen(root=root, outputs=outputs, selected=0)

    def probe(self, handle: OutputHandle) -> Candidate:
        """Query range, value and name of one output."""
        backlight_range = self.backlight.get_range(handle)
        value = self.backlight.get_value(handle)
        return Candidate(
            handle=handle,
            range=backlight_range,
            value=value,
            name=self._name(handle),
        )

    def _name(self, handle: OutputHandle) -> str:
        try:
            name = self.server.output_name(handle)
        except DisplayServerError as e:
            logger.debug(f"No name for output {handle.xid}: {e}")
            return DEFAULT_LABEL
        return name or DEFAULT_LABEL
