"""Terminal interface to RandR backlight properties."""

__version__ = "0.1.0"

PROGNAME = "NCXBacklight"
