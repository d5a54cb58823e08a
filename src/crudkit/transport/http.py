"""
HTTP transport for the crudkit client.

Issues one request and hands back the status plus the parsed JSON body.
Network failures and unparseable bodies surface as TransportError.
"""

import logging
from typing import Any, Mapping, Optional, Union

import httpx

from crudkit.errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "crudkit/0.1.0"
DEFAULT_TIMEOUT = 30.0


class TransportResponse:
    """Status plus body of one httpx response."""

    __slots__ = ("_response",)

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    def text(self) -> str:
        return self._response.text

    def json(self) -> Any:
        try:
            return self._response.json()
        except ValueError as e:
            raise TransportError(f"Response body is not JSON: {e}", self.status)

    def __repr__(self) -> str:
        return f"TransportResponse(status={self.status}, bytes={len(self._response.content)})"


class HttpTransport:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Union[str, bytes]] = None,
    ) -> TransportResponse:
        logger.debug("%s %s", method, url)
        try:
            resp = await self._client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}")
        return TransportResponse(resp)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
