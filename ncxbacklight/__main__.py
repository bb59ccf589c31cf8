"""CLI entry point for ncxbacklight."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from ncxbacklight import __version__
from ncxbacklight.config import Settings
from ncxbacklight.errors import NcxBacklightError

app = typer.Typer(
    name="ncxbacklight",
    help="Terminal interface to RandR backlight brightness",
    add_completion=True,
)


def setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Configure logging.

    The interactive UI owns the terminal, so it logs to a file; the other
    commands log to stderr.
    """
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[handler],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ncxbacklight {__version__}")
        raise typer.Exit()


def load_settings(
    config: Optional[Path], display: Optional[str], verbose: bool
) -> Settings:
    settings = Settings.load(config)

    # CLI overrides
    if display:
        settings.display.name = display

    if verbose:
        settings.app.log_level = "DEBUG"

    return settings


ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to YAML config file",
    exists=True,
    dir_okay=False,
)
DisplayOption = typer.Option(
    None,
    "--display",
    "-d",
    help="X display to connect to (overrides config and $DISPLAY)",
)
VerboseOption = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Terminal interface to RandR backlight brightness."""
    if ctx.invoked_subcommand is None:
        run(config=None, display=None, verbose=False, ascii_glyphs=False)


@app.command()
def run(
    config: Optional[Path] = ConfigOption,
    display: Optional[str] = DisplayOption,
    verbose: bool = VerboseOption,
    ascii_glyphs: bool = typer.Option(
        False,
        "--ascii",
        help="Draw bars with plain ASCII instead of line-drawing characters",
    ),
) -> None:
    """Run the interactive backlight interface.

    Keys:
        Up/Down     change brightness of the selected output in 5% steps
        Left/Right  select output
        0-9         jump to 0%..90% of the range
        l, Ctrl-L   redraw the screen
    """
    from ncxbacklight.app import Application

    settings = load_settings(config, display, verbose)
    if ascii_glyphs:
        settings.interface.ascii_glyphs = True

    setup_logging(settings.app.log_level, settings.app.resolved_log_file())

    try:
        code = Application(settings).run()
    except NcxBacklightError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    raise typer.Exit(code)


@app.command("list")
def list_outputs(
    config: Optional[Path] = ConfigOption,
    display: Optional[str] = DisplayOption,
    verbose: bool = VerboseOption,
) -> None:
    """List outputs with a backlight property."""
    from ncxbacklight.app import open_backlight

    settings = load_settings(config, display, verbose)
    setup_logging(settings.app.log_level if verbose else "WARNING")

    try:
        backlight, screens = open_backlight(settings)
    except NcxBacklightError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    try:
        if not any(s.outputs for s in screens):
            typer.echo("No outputs found with valid backlight property.", err=True)
            raise typer.Exit(1)

        for index, screen in enumerate(screens):
            for i, output in enumerate(screen.outputs):
                marker = "*" if index == 0 and i == screen.selected else " "
                typer.echo(
                    f"{marker} screen {index}  {output.name}  {output.value}  "
                    f"[{output.min}-{output.max}]  {output.percent}%"
                )
    finally:
        backlight.server.close()


@app.command("set")
def set_brightness(
    value: str = typer.Argument(
        ...,
        help="Brightness value (0-100 or 0%-100%)",
    ),
    output_name: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Target a specific output by name (default: all outputs of the first screen)",
    ),
    config: Optional[Path] = ConfigOption,
    display: Optional[str] = DisplayOption,
    verbose: bool = VerboseOption,
) -> None:
    """Set backlight brightness.

    Examples:
        ncxbacklight set 50
        ncxbacklight set 75%
        ncxbacklight set 30 --output eDP-1
    """
    from ncxbacklight.app import open_backlight

    try:
        percent = int(value.rstrip("%"))
        if not 0 <= percent <= 100:
            typer.echo("Error: Brightness must be between 0 and 100", err=True)
            raise typer.Exit(1)
    except ValueError:
        typer.echo(f"Error: Invalid brightness value: {value}", err=True)
        raise typer.Exit(1)

    settings = load_settings(config, display, verbose)
    setup_logging(settings.app.log_level if verbose else "WARNING")

    try:
        backlight, screens = open_backlight(settings)
    except NcxBacklightError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    try:
        if output_name is None:
            targets = screens[0].outputs if screens else []
        else:
            targets = [o for s in screens for o in s.outputs if o.name == output_name]

        if not targets:
            if output_name:
                typer.echo(f"Output not found: {output_name}", err=True)
            else:
                typer.echo("No outputs with backlight control found.", err=True)
            raise typer.Exit(1)

        for output in targets:
            output.value = output.clamp(output.min + output.span * percent // 100)
            backlight.set_value(output.handle, output.value)
        backlight.sync()

        for output in targets:
            typer.echo(f"{output.name}: Set backlight to {output.value} ({percent}%)")
    finally:
        backlight.server.close()


if __name__ == "__main__":
    app()
