"""Exception types shared across ncxbacklight."""

from typing import Optional


class NcxBacklightError(Exception):
    """Base class for ncxbacklight errors."""


class DisplayServerError(NcxBacklightError):
    """A request to the display server failed or returned no reply."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class DiscoveryError(NcxBacklightError):
    """Screen resources could not be enumerated."""

    def __init__(self, code: int):
        super().__init__(f"RANDR Get Screen Resources returned error {code}")
        self.code = code


class ShutdownRequested(NcxBacklightError):
    """Raised from a termination signal handler to unwind the main loop."""

    def __init__(self, signum: int):
        super().__init__(f"received signal {signum}")
        self.signum = signum

