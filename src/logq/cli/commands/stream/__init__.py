"""The ``logq stream`` command."""

from .main import stream_dataset

__all__ = ["stream_dataset"]
