"""User experience utilities for logq.

Status messages go to stderr so that stdout only ever carries event records.
"""

import logging
from typing import Any

from rich.console import Console
from rich.theme import Theme

# Define a custom theme for consistent styling
CUSTOM_THEME = Theme(
    {
        "warning": "bold yellow",
        "error": "bold red",
        "dataset": "bold",
    }
)

# Create console for terminal output
console = Console(theme=CUSTOM_THEME, stderr=True)

logger = logging.getLogger("logq")


def print_warning(
    message: str,
    *args: Any,
    log: bool = True,
    console_output: bool = True,
    **kwargs: Any,
) -> None:
    """Print a warning message."""
    if console_output:
        console.print(f"[warning]WARNING:[/warning] {message}", *args, **kwargs)
    if log:
        logger.warning(message)


def print_error(
    message: str,
    *args: Any,
    log: bool = True,
    console_output: bool = True,
    **kwargs: Any,
) -> None:
    """Print an error message."""
    if console_output:
        console.print(f"[error]ERROR:[/error] {message}", *args, **kwargs)
    if log:
        logger.error(message, exc_info=True)
