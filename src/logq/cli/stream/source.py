"""Adapts the datasets API to the poll loop's query capability."""

from __future__ import annotations

from typing import List

import httpx

from ..datasets.api_client import DatasetsClient
from .poller import QueryDeadlineExceeded
from .window import Event, TimeWindow


class DatasetQuerySource:
    """Runs one bounded query per window against a single dataset."""

    def __init__(self, client: DatasetsClient, dataset: str) -> None:
        self.client = client
        self.dataset = dataset

    async def __call__(self, window: TimeWindow, deadline: float) -> List[Event]:
        try:
            result = await self.client.query(
                self.dataset,
                window.start,
                window.end,
                streaming_duration=deadline,
                timeout=deadline,
            )
        except httpx.TimeoutException as e:
            raise QueryDeadlineExceeded(str(e)) from e

        return [Event(timestamp=m.time, payload=m.data) for m in result.matches]


__all__ = ["DatasetQuerySource"]
