"""Datasets API client implementation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.api_client import APIClient
from ..core.constants import DEFAULT_REQUEST_TIMEOUT
from ..core.timestamps import format_rfc3339, parse_timestamp


class Dataset(BaseModel):
    """Information about a dataset."""

    name: str
    description: Optional[str] = None
    created: Optional[datetime] = None


class QueryMatch(BaseModel):
    """A single event matched by a query."""

    model_config = ConfigDict(populate_by_name=True)

    time: int = Field(alias="_time")
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> int:
        return parse_timestamp(value)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value: Any) -> Any:
        return {} if value is None else value


class QueryResult(BaseModel):
    """Matches of a time-bounded query, in the order the API returned them."""

    matches: List[QueryMatch] = Field(default_factory=list)


def format_duration(seconds: float) -> str:
    """Render a duration the way the query API expects it, e.g. ``2s``."""
    millis = int(round(seconds * 1000))
    if millis % 1000 == 0:
        return f"{millis // 1000}s"
    return f"{millis}ms"


class DatasetsClient(APIClient):
    """Client for the dataset endpoints of the API."""

    async def list_datasets(self) -> List[Dataset]:
        """List the datasets visible to the configured token.

        Raises:
            ValueError: If the API response is invalid
            httpx.HTTPStatusError: If the API returns an error (e.g., 404, 403)
            httpx.HTTPError: If the request fails
        """
        response = await self.get("/v1/datasets")

        res = response.json()
        if not isinstance(res, list):
            raise ValueError("API response did not contain a list of datasets")

        return [Dataset(**item) for item in res]

    async def query(
        self,
        dataset: str,
        start: int,
        end: int,
        *,
        streaming_duration: Optional[float] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> QueryResult:
        """Query ``dataset`` for events in ``[start, end)``.

        Args:
            dataset: Name of the dataset to query
            start: Inclusive lower bound, nanoseconds since the epoch
            end: Exclusive upper bound, nanoseconds since the epoch
            streaming_duration: Optional server-side streaming window in seconds
            timeout: Client-side request timeout in seconds

        Returns:
            QueryResult: The matched events

        Raises:
            ValueError: If the API response is invalid
            httpx.HTTPStatusError: If the API returns an error (e.g., 404, 403)
            httpx.HTTPError: If the request fails
        """
        params = None
        if streaming_duration is not None:
            params = {"streaming-duration": format_duration(streaming_duration)}

        response = await self.post(
            f"/v1/datasets/{dataset}/query",
            {"startTime": format_rfc3339(start), "endTime": format_rfc3339(end)},
            params=params,
            timeout=timeout,
        )

        res = response.json()
        if not isinstance(res, dict):
            raise ValueError("API response did not contain the query result")

        try:
            return QueryResult(**res)
        except ValidationError as e:
            raise ValueError(f"Malformed query result: {e}") from e
