"""
Bootstrap wrapper that shows a Rich spinner while the main CLI wiring imports.
Keeps heavy imports (httpx, pydantic, OpenTelemetry) out of import time so the
console script feels responsive.
"""

from __future__ import annotations

import sys

from rich.console import Console


def run() -> None:
    """Display a spinner during CLI bootstrap, then hand off to main.run()."""
    console = Console(stderr=True)
    if console.is_terminal and sys.stdout.isatty():
        with console.status("[dim]Loading logq...[/dim]", spinner="dots"):
            from logq.cli.main import run as main_run  # heavy imports happen here
    else:
        from logq.cli.main import run as main_run
    main_run()
