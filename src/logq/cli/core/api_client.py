"""API client implementation for the hosted analytics API."""

import uuid
from typing import Any, Dict, Mapping, Optional

import httpx
from opentelemetry import trace
from opentelemetry.propagate import inject

from .constants import DEFAULT_REQUEST_TIMEOUT


class UnauthenticatedError(Exception):
    """Raised when the API client is unauthenticated (e.g., redirected to login)."""

    pass


def _raise_for_unauthenticated(response: httpx.Response):
    """Check if the response indicates an unauthenticated request.
    Raises:
        UnauthenticatedError: If the response status code is 401 or a sign-in redirect.
    """
    if response.status_code == 401 or (
        response.status_code in (302, 307)
        and "/login" in response.headers.get("location", "")
    ):
        raise UnauthenticatedError(
            "Unauthenticated request. Please check your API token."
        )


def _raise_for_status_with_details(response: httpx.Response) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                error_info = response.json()
                message = (
                    error_info.get("error")
                    or error_info.get("message")
                    or str(error_info)
                )
            except Exception:
                message = response.text
        else:
            message = response.text
        raise httpx.HTTPStatusError(
            f"{exc.response.status_code} Error for {exc.request.url}: {message}",
            request=exc.request,
            response=exc.response,
        ) from exc


class APIClient:
    """Client for interacting with the API service over HTTP."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        org_id: Optional[str] = None,
        insecure: bool = False,
        trace_id: Optional[str] = None,
    ):
        """Initialize the API client.

        Args:
            api_url: The base URL of the API (e.g., https://api.logq.dev)
            api_key: The API token sent as a bearer credential
            org_id: Optional organization the token acts on behalf of
            insecure: Skip TLS certificate validation
            trace_id: Optional trace ID for the CLI process lifecycle (generated if not provided)
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.org_id = org_id
        self.insecure = insecure
        self.trace_id = trace_id or str(uuid.uuid4())
        self.tracer = trace.get_tracer(__name__)

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.org_id:
            headers["X-Org-Id"] = self.org_id

        # Inject OpenTelemetry trace context headers
        trace_headers: Dict[str, str] = {}
        inject(trace_headers)
        headers.update(trace_headers)

        headers["X-Logq-Trace-Id"] = self.trace_id

        return headers

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> httpx.Response:
        with self.tracer.start_as_current_span(
            f"api.{method.lower()}.{path.strip('/').replace('/', '.')}",
            attributes={
                "http.method": method,
                "http.url": self._url(path),
                "logq.trace_id": self.trace_id,
            },
        ) as span:
            try:
                async with httpx.AsyncClient(verify=not self.insecure) as client:
                    response = await client.request(
                        method,
                        self._url(path),
                        json=payload,
                        params=params,
                        headers=self._get_headers(),
                        timeout=timeout,
                    )
                    span.set_attribute("http.status_code", response.status_code)
                    _raise_for_unauthenticated(response)
                    _raise_for_status_with_details(response)
                    return response
            except Exception as e:
                span.record_exception(e)
                raise

    async def post(
        self,
        path: str,
        payload: Dict[str, Any],
        params: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> httpx.Response:
        return await self._request(
            "POST", path, payload=payload, params=params, timeout=timeout
        )

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> httpx.Response:
        return await self._request("GET", path, params=params, timeout=timeout)
