"""Dataset API access."""

from .api_client import Dataset, DatasetsClient, QueryMatch, QueryResult

__all__ = ["Dataset", "DatasetsClient", "QueryMatch", "QueryResult"]
