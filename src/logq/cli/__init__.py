"""logq command-line interface."""
