"""X server access via python-xlib and the RandR extension."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from Xlib import X, Xatom
from Xlib import display as xdisplay
from Xlib import error as xerror
from Xlib.ext import randr
from Xlib.protocol import rq

from ncxbacklight.errors import DisplayServerError
from ncxbacklight.model import Atom, OutputHandle, WindowHandle

logger = logging.getLogger(__name__)

XA_INTEGER = Atom(Xatom.INTEGER)

# Xlib errors that mean "this request failed" rather than a programming bug
_REQUEST_ERRORS = (xerror.XError, xerror.ConnectionClosedError)


@dataclass(frozen=True)
class PropertyInfo:
    """Reply to a RandR QueryOutputProperty request."""

    range: bool
    valid_values: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class PropertyValue:
    """Reply to a RandR GetOutputProperty request."""

    type: Atom
    format: int
    items: list[int] = field(default_factory=list)


class DisplayServer(Protocol):
    """The display-server requests ncxbacklight depends on."""

    def intern_atom(self, name: str) -> Optional[Atom]: ...

    def roots(self) -> list[WindowHandle]: ...

    def screen_outputs(self, root: WindowHandle) -> list[OutputHandle]: ...

    def output_name(self, output: OutputHandle) -> Optional[str]: ...

    def query_output_property(self, output: OutputHandle, atom: Atom) -> PropertyInfo: ...

    def get_output_property(
        self, output: OutputHandle, atom: Atom
    ) -> Optional[PropertyValue]: ...

    def change_output_property(self, output: OutputHandle, atom: Atom, value: int) -> None: ...

    def sync(self) -> None: ...

    def close(self) -> None: ...


def _signed32(value: int) -> int:
    return value - (1 << 32) if value >= (1 << 31) else value


class GetOutputPropertyData(randr.GetOutputProperty):
    """GetOutputProperty with a reply that keeps the data format.

    python-xlib's stock reply reads ``num_items`` single bytes and drops the
    format byte, which truncates 16 and 32 bit properties. This one decodes
    the data the way the core GetProperty reply does.
    """

    _reply = rq.Struct(
        rq.ReplyCode(),
        rq.Format("value", 1),
        rq.Card16("sequence_number"),
        rq.ReplyLength(),
        rq.Card32("property_type"),
        rq.Card32("bytes_after"),
        rq.LengthOf("value", 4),
        rq.Pad(12),
        rq.PropertyData("value"),
    )


def request_output_property(connection: Any, output: OutputHandle, atom: Atom) -> Any:
    """Send GetOutputProperty for the first four items of any type."""
    return GetOutputPropertyData(
        display=connection.display,
        opcode=connection.get_extension_major(randr.extname),
        output=output.xid,
        property=atom.xid,
        type=X.AnyPropertyType,
        long_offset=0,
        long_length=4,
        delete=False,
        pending=False,
    )


def _decode_items(reply: Any) -> tuple[int, list[int]]:
    """Return (format, items) from a GetOutputPropertyData reply."""
    if not reply.value:
        return 0, []
    fmt, data = reply.value
    if data is None:
        return fmt, []
    if fmt == 32:
        return fmt, [_signed32(int(v)) for v in data]
    return fmt, [int(v) for v in data]


class XlibDisplayServer:
    """DisplayServer backed by a python-xlib connection."""

    def __init__(self, connection: Any):
        self._display = connection
        self._timestamps: dict[OutputHandle, int] = {}
        self._closed = False

    @classmethod
    def connect(cls, name: Optional[str] = None) -> "XlibDisplayServer":
        """Open a connection to the X server (None means $DISPLAY)."""
        try:
            connection = xdisplay.Display(name)
        except (xerror.DisplayError, OSError) as e:
            raise DisplayServerError(f"Cannot open display: {e}") from e

        if not connection.has_extension("RANDR"):
            connection.close()
            raise DisplayServerError("X server does not support the RANDR extension")

        # Errors for requests without replies arrive asynchronously
        connection.set_error_handler(_log_async_error)

        version = connection.xrandr_query_version()
        logger.info(
            f"Connected to {connection.get_display_name()}, "
            f"RANDR {version.major_version}.{version.minor_version}"
        )
        return cls(connection)

    def intern_atom(self, name: str) -> Optional[Atom]:
        try:
            atom = self._display.intern_atom(name, only_if_exists=True)
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"InternAtom {name} failed: {e}", _code(e)) from e
        if atom == X.NONE:
            return None
        return Atom(atom)

    def roots(self) -> list[WindowHandle]:
        return [
            WindowHandle(self._display.screen(i).root.id)
            for i in range(self._display.screen_count())
        ]

    def screen_outputs(self, root: WindowHandle) -> list[OutputHandle]:
        window = self._display.create_resource_object("window", root.xid)
        try:
            resources = window.xrandr_get_screen_resources()
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"GetScreenResources failed: {e}", _code(e)) from e
        if resources is None:
            raise DisplayServerError("GetScreenResources returned no reply")

        outputs = [OutputHandle(xid) for xid in resources.outputs]
        for output in outputs:
            self._timestamps[output] = resources.config_timestamp
        return outputs

    def output_name(self, output: OutputHandle) -> Optional[str]:
        timestamp = self._timestamps.get(output, X.CurrentTime)
        try:
            info = self._display.xrandr_get_output_info(output.xid, timestamp)
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"GetOutputInfo failed: {e}", _code(e)) from e
        name = info.name
        if isinstance(name, bytes):
            name = name.decode("utf-8", "replace")
        return name or None

    def query_output_property(self, output: OutputHandle, atom: Atom) -> PropertyInfo:
        try:
            reply = self._display.xrandr_query_output_property(output.xid, atom.xid)
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"QueryOutputProperty failed: {e}", _code(e)) from e
        if reply is None:
            raise DisplayServerError("QueryOutputProperty returned no reply")
        return PropertyInfo(
            range=bool(reply.range),
            valid_values=[_signed32(int(v)) for v in reply.valid_values],
        )

    def get_output_property(self, output: OutputHandle, atom: Atom) -> Optional[PropertyValue]:
        try:
            reply = request_output_property(self._display, output, atom)
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"GetOutputProperty failed: {e}", _code(e)) from e
        if reply is None or reply.property_type == X.NONE:
            return None
        fmt, items = _decode_items(reply)
        return PropertyValue(type=Atom(reply.property_type), format=fmt, items=items)

    def change_output_property(self, output: OutputHandle, atom: Atom, value: int) -> None:
        # Not flushed here; callers batch writes and call sync().
        try:
            self._display.xrandr_change_output_property(
                output.xid, atom.xid, XA_INTEGER.xid, X.PropModeReplace, (32, [value])
            )
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"ChangeOutputProperty failed: {e}", _code(e)) from e

    def sync(self) -> None:
        try:
            self._display.sync()
        except _REQUEST_ERRORS as e:
            raise DisplayServerError(f"Sync failed: {e}", _code(e)) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._display.sync()
        except _REQUEST_ERRORS as e:
            logger.debug(f"Final sync failed: {e}")
        self._display.close()


def _code(e: Exception) -> Optional[int]:
    return getattr(e, "code", None)


def _log_async_error(err: Exception, request: Any) -> None:
    logger.debug(f"X error for {type(request).__name__}: {err}")
