"""logq CLI entry point."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import typer

from logq import __version__
from logq.cli.commands import stream_dataset
from logq.cli.config import settings
from logq.cli.core.constants import ENV_VERBOSE, LOG_FILENAME
from logq.logging.redact import install_redaction_filter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_dir: str, verbose: bool = False) -> Path:
    """Send logq's logs to a rotating file, never to the console.

    Returns:
        Path: The log file in use
    """
    directory = Path(log_dir).expanduser()
    os.makedirs(directory, exist_ok=True)
    log_file = directory / LOG_FILENAME

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    install_redaction_filter(file_handler, secrets=[settings.TOKEN])

    logger = logging.getLogger("logq")
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return log_file


# Root typer for `logq` CLI commands
app = typer.Typer(
    help="Query and stream hosted log datasets from the command line",
    no_args_is_help=True,
)

app.command(name="stream")(stream_dataset)


@app.command(name="version")
def version() -> None:
    """Show the logq version."""
    typer.echo(f"logq version {__version__}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"logq version {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
    verbose: bool = typer.Option(
        settings.VERBOSE,
        "--verbose",
        help="Write debug logs to the log file.",
        envvar=ENV_VERBOSE,
    ),
) -> None:
    """logq: the power of your log datasets on the command line."""
    configure_logging(settings.LOG_DIR, verbose=verbose)


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
