"""Exceptions raised by logq CLI commands."""


class CLIError(Exception):
    """User-facing command failure.

    Args:
        message: Text shown to the user
        exit_code: Process exit code the command should terminate with
    """

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code
