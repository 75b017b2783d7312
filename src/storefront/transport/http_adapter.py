"""HTTP transport backed by ``httpx.AsyncClient``."""

from typing import Any

import httpx

from storefront.errors import TransportError, extract_message
from storefront.transport.port import TransportPort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport(TransportPort):
    """Transport that talks to the real storefront API.

    Timeouts are the client's global default; individual calls cannot
    override or cancel them.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: str | None = None,
        headers: dict | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        request_headers = {"Accept": "application/json"}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        request_headers.update(headers or {})

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, headers=request_headers)
        if not self._owns_client:
            self.client.headers.update(request_headers)

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("http_request_failed", method=method, path=path, error=str(exc))
            raise TransportError(str(exc) or exc.__class__.__name__, method=method, path=path) from exc

        data = _decode_body(response)
        if response.is_error:
            message = extract_message(data) or response.reason_phrase or f"HTTP {response.status_code}"
            raise TransportError(message, status=response.status_code, data=data, method=method, path=path)

        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
