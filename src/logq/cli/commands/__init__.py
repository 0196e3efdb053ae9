"""logq commands."""

from .stream import stream_dataset

__all__ = ["stream_dataset"]
