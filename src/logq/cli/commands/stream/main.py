"""Livestream events from a dataset."""

import asyncio
import logging
import signal
import sys
from typing import Callable, List, Optional, TextIO

import typer
from pydantic import BaseModel, ConfigDict
from rich.prompt import Prompt

from logq.cli.config import settings
from logq.cli.core.api_client import UnauthenticatedError
from logq.cli.core.constants import (
    ENV_API_BASE_URL,
    ENV_API_KEY,
    ENV_INSECURE,
    ENV_ORG_ID,
    FORMAT_TABLE,
    STREAMING_DURATION_SECONDS,
)
from logq.cli.core.utils import run_async
from logq.cli.datasets.api_client import DatasetsClient
from logq.cli.exceptions import CLIError
from logq.cli.stream import (
    DatasetQuerySource,
    EventEmitter,
    OutputMode,
    PollLoop,
    PollStats,
)
from logq.cli.utils.ux import console, print_error, print_warning
from logq.logging.redact import redact_secret

logger = logging.getLogger(__name__)

DatasetPrompt = Callable[[List[str]], str]


class StreamOptions(BaseModel):
    """Resolved options for one ``logq stream`` invocation."""

    model_config = ConfigDict(frozen=True)

    dataset: Optional[str] = None
    output_mode: OutputMode = OutputMode.HUMAN_READABLE
    interval: float = STREAMING_DURATION_SECONDS


def _parse_format(value: str) -> OutputMode:
    try:
        return OutputMode.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def ask_dataset(names: List[str]) -> str:
    """Let the user pick one of ``names`` on the terminal."""
    return Prompt.ask(
        "Which dataset to stream from?",
        choices=names,
        default=names[0],
        console=console,
    )


async def complete_dataset(
    opts: StreamOptions,
    client: DatasetsClient,
    ask: Optional[DatasetPrompt],
) -> StreamOptions:
    """Return ``opts`` with a dataset filled in, asking the user if needed.

    ``ask`` is None when no terminal is attached; a missing dataset is then
    an error instead of a prompt.
    """
    if opts.dataset:
        return opts
    if ask is None:
        raise CLIError("missing dataset", exit_code=2)

    with console.status("[dim]Fetching datasets...[/dim]"):
        datasets = await client.list_datasets()

    names = [d.name for d in datasets]
    if not names:
        raise CLIError("missing dataset")

    return opts.model_copy(update={"dataset": ask(names)})


async def _stream(
    opts: StreamOptions,
    client: DatasetsClient,
    ask: Optional[DatasetPrompt],
    out: TextIO,
) -> PollStats:
    opts = await complete_dataset(opts, client, ask)

    is_tty = out.isatty()
    if is_tty:
        console.print(
            f"Streaming events from dataset [dataset]{opts.dataset}[/dataset]:\n"
        )

    emitter = EventEmitter(out, opts.output_mode, color=is_tty)
    poll_loop = PollLoop(
        DatasetQuerySource(client, opts.dataset),
        emitter,
        interval=opts.interval,
    )

    loop = asyncio.get_running_loop()
    installed: List[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, poll_loop.stop)
        except (NotImplementedError, RuntimeError):
            # No signal support on this platform/thread; Ctrl+C still raises
            # KeyboardInterrupt.
            continue
        installed.append(sig)

    logger.info(
        "Streaming dataset %s (format=%s, interval=%.1fs)",
        opts.dataset,
        opts.output_mode.value,
        opts.interval,
    )
    try:
        await poll_loop.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        logger.info(
            "Stream of %s ended: polls=%d events=%d dropped=%d recoverable_failures=%d",
            opts.dataset,
            poll_loop.stats.polls,
            poll_loop.stats.events_forwarded,
            emitter.dropped,
            poll_loop.stats.recoverable_failures,
        )
    return poll_loop.stats


def stream_dataset(
    dataset: Optional[str] = typer.Argument(
        None,
        help="Dataset to stream from. Asked for interactively if omitted.",
    ),
    output_format: str = typer.Option(
        FORMAT_TABLE,
        "--format",
        "-f",
        help="Format to output data in (json or table)",
    ),
    api_url: Optional[str] = typer.Option(
        settings.URL,
        "--api-url",
        help="API base URL. Defaults to LOGQ_URL environment variable.",
        envvar=ENV_API_BASE_URL,
    ),
    api_key: Optional[str] = typer.Option(
        settings.TOKEN,
        "--api-key",
        help="API token for authentication. Defaults to LOGQ_TOKEN environment variable.",
        envvar=ENV_API_KEY,
    ),
    org_id: Optional[str] = typer.Option(
        settings.ORG_ID or None,
        "--org-id",
        help="Organization ID to use. Defaults to LOGQ_ORG_ID environment variable.",
        envvar=ENV_ORG_ID,
    ),
    insecure: bool = typer.Option(
        settings.INSECURE,
        "--insecure",
        help="Bypass certificate validation.",
        envvar=ENV_INSECURE,
    ),
) -> None:
    """Livestream data from a dataset.

    Events are printed as they arrive until the command is interrupted.

    Examples:
        # Interactively pick a dataset and stream it
        logq stream

        # Stream the "my-logs" dataset as JSON lines
        logq stream my-logs --format json
    """
    mode = _parse_format(output_format)

    if not api_key:
        print_error(
            "Not authenticated. Set LOGQ_TOKEN or pass --api-key.", log=False
        )
        raise typer.Exit(4)
    redact_secret(api_key)

    opts = StreamOptions(dataset=dataset or None, output_mode=mode)
    client = DatasetsClient(
        api_url=api_url or settings.URL,
        api_key=api_key,
        org_id=org_id,
        insecure=insecure,
    )
    ask = ask_dataset if sys.stdin.isatty() else None

    try:
        run_async(_stream(opts, client, ask, sys.stdout))
    except KeyboardInterrupt:
        print_warning("Interrupted by user")
        return
    except CLIError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e
    except UnauthenticatedError as e:
        print_error(
            "Invalid API token. Set LOGQ_TOKEN or pass --api-key with a valid token."
        )
        raise typer.Exit(1) from e
    except Exception as e:
        print_error(f"Error streaming dataset: {e}")
        raise typer.Exit(1) from e
