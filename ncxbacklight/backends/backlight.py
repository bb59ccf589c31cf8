"""Backlight control via the RandR output property."""

import logging
from typing import Optional, Sequence

from ncxbacklight.backends.xserver import XA_INTEGER, DisplayServer
from ncxbacklight.errors import DisplayServerError
from ncxbacklight.model import Atom, BacklightRange, OutputHandle

logger = logging.getLogger(__name__)

# Newer drivers use "Backlight", older ones the all-caps spelling
PROPERTY_NAMES = ("Backlight", "BACKLIGHT")


class BacklightProperty:
    """Read and write the backlight property of RandR outputs.

    Every operation is best-effort: protocol errors are logged and reported
    as "unavailable" (None) instead of being raised.
    """

    def __init__(self, server: DisplayServer, atom: Optional[Atom]):
        """Initialize with a display server and the resolved property atom.

        Args:
            server: Connected display server
            atom: Interned backlight atom, or None when the server has none
        """
        self.server = server
        self.atom = atom

    @classmethod
    def resolve(
        cls, server: DisplayServer, names: Sequence[str] = PROPERTY_NAMES
    ) -> "BacklightProperty":
        """Intern the backlight property, trying each spelling in order."""
        for name in names:
            try:
                atom = server.intern_atom(name)
            except DisplayServerError as e:
                logger.debug(f"Could not intern {name}: {e}")
                continue
            if atom is not None:
                logger.info(f"Using backlight property {name}")
                return cls(server, atom)

        logger.warning(f"None of {', '.join(names)} exist on this server")
        return cls(server, None)

    @property
    def found(self) -> bool:
        return self.atom is not None

    def get_range(self, output: OutputHandle) -> Optional[BacklightRange]:
        """Get the valid backlight range for an output.

        Returns:
            The (min, max) bounds, or None unless the server reports a range
            of exactly two values
        """
        if self.atom is None:
            return None

        try:
            info = self.server.query_output_property(output, self.atom)
        except DisplayServerError as e:
            logger.debug(f"Range query failed for output {output.xid}: {e}")
            return None

        if not info.range or len(info.valid_values) != 2:
            logger.debug(
                f"Output {output.xid} has no usable range "
                f"(range={info.range}, values={info.valid_values})"
            )
            return None

        low, high = info.valid_values
        return BacklightRange(min=low, max=high)

    def get_value(self, output: OutputHandle) -> Optional[int]:
        """Get the current backlight value of an output.

        Returns:
            The value, or None unless the reply is a single 32-bit INTEGER
        """
        if self.atom is None:
            return None

        try:
            prop = self.server.get_output_property(output, self.atom)
        except DisplayServerError as e:
            logger.debug(f"Value query failed for output {output.xid}: {e}")
            return None

        if prop is None or prop.type != XA_INTEGER or prop.format != 32 or len(prop.items) != 1:
            return None
        return prop.items[0]

    def set_value(self, output: OutputHandle, value: int) -> None:
        """Replace the backlight value of an output.

        The request is not flushed; call sync() before reading it back.
        """
        if self.atom is None:
            return

        try:
            self.server.change_output_property(output, self.atom, int(value))
        except DisplayServerError as e:
            logger.debug(f"Write failed for output {output.xid}: {e}")
            return
        logger.debug(f"Set output {output.xid} backlight to {value}")

    def sync(self) -> None:
        """Wait until the server has processed every pending request."""
        try:
            self.server.sync()
        except DisplayServerError as e:
            logger.debug(f"Sync failed: {e}")
