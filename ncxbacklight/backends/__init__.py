"""Backend modules for X server access and backlight control."""

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.backends.display import Candidate, ScreenDiscovery
from ncxbacklight.backends.xserver import (
    DisplayServer,
    PropertyInfo,
    PropertyValue,
    XlibDisplayServer,
)

__all__ = [
    "BacklightProperty",
    "Candidate",
    "ScreenDiscovery",
    "DisplayServer",
    "PropertyInfo",
    "PropertyValue",
    "XlibDisplayServer",
]
