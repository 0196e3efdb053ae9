"""logq: live access to hosted log datasets from the command line."""

__version__ = "0.1.0"
