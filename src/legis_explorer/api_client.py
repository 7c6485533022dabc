"""Shared HTTP plumbing for the Graph and Persistence API clients.

Both APIs are plain JSON over HTTP. Every failure is converted into an
ExplorerError here so the flows only ever deal with one exception family:

- transport failure or non-2xx status -> NetworkError (404 -> NotFound)
- non-JSON body or wrong shape -> MalformedResponse
"""

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import pydantic

from .errors import MalformedResponse, NetworkError, NotFound

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def encode_segment(value: str) -> str:
    """Percent-encode one URL path segment, slashes included."""
    return quote(str(value), safe="")


def _get_headers(api_key: str | None) -> dict[str, str]:
    """Build headers for explorer API requests."""
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if api_key:
        headers["X-API-Key"] = api_key
    return headers


class ApiClient:
    """Base client owning a pooled httpx.AsyncClient.

    Pass ``http_client`` to share a client (or inject a mock transport in
    tests); a client passed in is not closed by ``aclose``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is created with connection pooling."""
        if self._http_client is None:
            headers = _get_headers(self._api_key)
            logger.info(
                "Creating HTTP client with headers: %s, has_api_key=%s",
                list(headers.keys()), "X-API-Key" in headers
            )

            limits = httpx.Limits(
                max_keepalive_connections=20,
                max_connections=100,
                keepalive_expiry=30.0,
            )

            # Check if h2 package is available for HTTP/2 support
            try:
                import h2  # noqa: F401
                http2_enabled = True
            except ImportError:
                http2_enabled = False
                logger.debug("h2 package not installed, HTTP/2 support disabled")

            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers=headers,
                limits=limits,
                http2=http2_enabled,
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.request(method, url, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("%s %s failed with HTTP %d", method, url, status)
            if status == 404:
                raise NotFound(f"API error: {status}") from e
            raise NetworkError(f"API error: {status}", status=status) from e
        except httpx.RequestError as e:
            logger.error("%s %s request error: %s", method, url, e)
            raise NetworkError(f"Network error: {e}") from e
        return response

    async def _request_model(
        self,
        method: str,
        url: str,
        model: type[ModelT],
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ModelT:
        """Send a request and validate the JSON body against ``model``."""
        response = await self._send(method, url, params=params, json=json)
        try:
            body = response.json()
        except ValueError as e:
            logger.error("%s %s returned non-JSON body: %s", method, url, response.text[:200])
            raise MalformedResponse("Malformed response: body is not JSON") from e
        try:
            return model.model_validate(body)
        except pydantic.ValidationError as e:
            logger.error("%s %s returned unexpected shape for %s: %s", method, url, model.__name__, e)
            raise MalformedResponse(f"Malformed response: unexpected {model.__name__}") from e
