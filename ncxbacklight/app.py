"""Interactive backlight application: lifecycle, signals and main loop."""

import faulthandler
import logging
import signal
import sys
from typing import Any, Callable, Optional

from ncxbacklight.backends.backlight import BacklightProperty
from ncxbacklight.backends.display import ScreenDiscovery
from ncxbacklight.backends.xserver import DisplayServer, XlibDisplayServer
from ncxbacklight.config import Settings
from ncxbacklight.controller import InputController
from ncxbacklight.errors import ShutdownRequested
from ncxbacklight.model import AppState, Screen
from ncxbacklight.render import Renderer
from ncxbacklight.terminal import Terminal

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGQUIT, signal.SIGTERM)

ServerFactory = Callable[[Optional[str]], DisplayServer]

def open_backlight(
    settings: Settings, connect: ServerFactory = XlibDisplayServer.connect
) -> tuple[BacklightProperty, list[Screen]]:
    """Connect to the X server and discover every screen.

    Raises:
        DisplayServerError: if the connection cannot be established
        DiscoveryError: if screen resources cannot be enumerated
    """
    server = connect(settings.display.name)
    try:
        backlight = BacklightProperty.resolve(server, settings.display.property_names)
        screens = ScreenDiscovery(backlight).discover()
    except BaseException:
        server.close()
        raise
    return backlight, screens

class Application:
    """Owns the X connection and the terminal for one interactive session."""

    def __init__(
        self,
        settings: Settings,
        connect: ServerFactory = XlibDisplayServer.connect,
        terminal: Optional[Terminal] = None,
    ):
        """Initialize the application with settings."""
        self.settings = settings
        self._connect = connect
        self.terminal = terminal or Terminal(ascii_glyphs=settings.interface.ascii_glyphs)

        self.backlight: Optional[BacklightProperty] = None
        self.state: Optional[AppState] = None
        self.renderer: Optional[Renderer] = None
        self.controller: Optional[InputController] = None

        self._previous_handlers: dict[int, Any] = {}
        self._shut_down = False
        self._enabled_faulthandler = False

    def run(self) -> int:
        """Run until a signal arrives. Returns the process exit code."""
        self._setup_signal_handlers()

        try:
            self.start()
            while True:
                self.step()
        except ShutdownRequested as e:
            logger.info(f"Received {signal.Signals(e.signum).name}, shutting down")
            return 0
        finally:
            self.shutdown()

    def start(self) -> None:
        """Discover outputs, then take over the terminal."""
        self.backlight, screens = open_backlight(self.settings, self._connect)

        self.terminal.open()
        self.state = AppState(
            screens=screens,
            width=self.terminal.width,
            height=self.terminal.height,
        )
        assert self.terminal.window is not None
        self.renderer = Renderer(self.terminal.window, self.terminal.glyphs)
        self.controller = InputController(self.state, self.backlight)

    def step(self) -> None:
        """Draw the current state, then wait for and apply one key."""
        assert self.renderer and self.controller and self.state
        self.renderer.draw(self.state)
        self.controller.handle_key(self.terminal.read_key())

    def shutdown(self) -> None:
        """Restore the terminal and release the X connection (once)."""
        if self._shut_down:
            return
        self._shut_down = True

        try:
            self.terminal.close()
        finally:
            if self.backlight is not None:
                self.backlight.server.close()
            self._restore_signal_handlers()
        logger.info("Shutdown complete")

    def _setup_signal_handlers(self) -> None:
        for sig in TERMINATION_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)

        # A memory fault cannot be handled from Python: the faulting
        # instruction re-executes after a Python-level handler returns.
        if not faulthandler.is_enabled():
            faulthandler.enable(file=sys.stderr)
            self._enabled_faulthandler = True

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            # None means the handler was not installed from Python
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

        if self._enabled_faulthandler:
            faulthandler.disable()
            self._enabled_faulthandler = False

    def _handle_signal(self, signum: int, frame: Any) -> None:
        # Python runs handlers in the main thread between bytecodes, so
        # raising here unwinds through run()'s finally block.
        if self._shut_down:
            logger.debug(f"Ignoring {signal.Signals(signum).name} during shutdown")
            return
        raise ShutdownRequested(signum)
