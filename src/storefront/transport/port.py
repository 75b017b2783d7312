"""Transport port — abstract interface to the storefront REST API.

Services program against the port; adapters are swapped via configuration.
Every adapter returns the decoded JSON body on success and raises
``TransportError`` on failure.
"""

from abc import ABC, abstractmethod
from typing import Any


class TransportPort(ABC):
    """Abstract interface for API transports."""

    @abstractmethod
    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """Send a request and return the decoded response body.

        Raises:
            TransportError: non-2xx response or network failure.
        """
        ...

    async def aclose(self) -> None:
        """Release any underlying connections."""

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
