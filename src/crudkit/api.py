"""
AsyncAPI / API: crudkit CRUD clients.

Requests go to `<base>/api<path>` with JSON headers and the session token as
the `authorization` header. Responses are classified into a parsed body,
None, or an APIError.
"""

import asyncio
import json
import logging
import re
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import quote

import httpx

from crudkit.config import ClientConfig
from crudkit.errors import APIError, ConfigurationError, TransportError
from crudkit.models.options import RequestOptions
from crudkit.session import SessionStore
from crudkit.storage import MemoryStorage, Storage
from crudkit.transport.http import HttpTransport

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

INVALID_SESSION = "Invalid session"
INVALID_TOKEN_FORMAT = "Invalid token format"
SESSION_INVALIDATION_MESSAGES = frozenset({INVALID_SESSION, INVALID_TOKEN_FORMAT})

# Two spellings; callers match on both.
EMPTY_ERROR_MESSAGE = "An unknown error occured"
DEFAULT_ERROR_MESSAGE = "An unknown error occurred"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
# encodeURIComponent leaves these unescaped, on top of quote()'s own "_.-~"
_URI_SAFE = "!*'()"

OptionsArg = Union[RequestOptions, Mapping[str, Any], None]


def query_string(parameters: Optional[Mapping[str, Any]] = None, prefix: str = "?") -> str:
    """Convert a flat mapping to a query string. Booleans become 1/0."""
    parts = []
    for key, value in (parameters or {}).items():
        if isinstance(value, bool):
            value = 1 if value else 0
        elif value is None:
            value = ""
        parts.append(f"{quote(str(key), safe=_URI_SAFE)}={quote(str(value), safe=_URI_SAFE)}")
    return prefix + "&".join(parts)


def _is_success(status: int) -> bool:
    return 200 <= status < 400


def _is_empty(body: Any) -> bool:
    if body is None:
        return True
    return isinstance(body, (bool, int, float, str)) and not body


def _to_options(options: OptionsArg) -> RequestOptions:
    if options is None:
        return RequestOptions()
    if isinstance(options, RequestOptions):
        return options
    return RequestOptions.model_validate(dict(options))


class AsyncAPI:
    """Async CRUD client (primary)."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        storage: Optional[Storage] = None,
        transport: Optional[HttpTransport] = None,
        location: Optional[str] = None,
        reload: Optional[Callable[[], Any]] = None,
    ):
        self.config = config or ClientConfig()
        self._location = location
        self._reload = reload
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport()
        self.session = SessionStore(self.config, storage if storage is not None else MemoryStorage())

    # CRUD

    async def read(self, path: str, options: OptionsArg = None) -> Any:
        """GET `path`."""
        return await self._request("GET", path, _to_options(options))

    async def create(self, path: str, payload: Any = None, options: OptionsArg = None) -> Any:
        """POST `payload` to `path`."""
        return await self._request("POST", path, self._with_payload(payload, options))

    async def update(self, path: str, payload: Any = None, options: OptionsArg = None) -> Any:
        """PUT `payload` to `path`."""
        return await self._request("PUT", path, self._with_payload(payload, options))

    async def destroy(self, path: str, options: OptionsArg = None) -> Any:
        """DELETE `path`."""
        return await self._request("DELETE", path, _to_options(options))

    # Session

    def set_session(self, session: Optional[dict[str, Any]]) -> None:
        self.session.set_session(session)

    def get_session(self) -> Optional[dict[str, Any]]:
        return self.session.get_session()

    def set_session_token(self, token: Optional[str]) -> None:
        self.session.set_session_token(token)

    def get_session_token(self) -> Optional[str]:
        return self.session.get_session_token()

    query_string = staticmethod(query_string)

    # URLs

    def base_url(self) -> str:
        """Configured base URL, else scheme://host[:port] of `location`."""
        if self.config.base_url:
            return self.config.base_url.rstrip("/")
        if self._location:
            loc = httpx.URL(self._location)
            scheme = f"{loc.scheme}:" if loc.scheme else ""
            host = loc.host or "localhost"
            port = f":{loc.port}" if loc.port else ""
            return f"{scheme}//{host}{port}"
        raise ConfigurationError("URL could not be determined")

    def url(self, path: str) -> str:
        if _SCHEME_RE.match(path):
            return path
        return f"{self.base_url()}/api{path}"

    # Internals

    @staticmethod
    def _with_payload(payload: Any, options: OptionsArg) -> RequestOptions:
        opts = _to_options(options)
        if opts.payload is None:
            opts = opts.model_copy(update={"payload": {} if payload is None else payload})
        return opts

    def _headers(self, overrides: Mapping[str, str]) -> httpx.Headers:
        headers = httpx.Headers({"Accept": JSON_CONTENT_TYPE, "Content-Type": JSON_CONTENT_TYPE})
        headers.update(overrides)
        token = self.get_session_token()
        if token:
            headers["authorization"] = token
        return headers

    @staticmethod
    def _body(options: RequestOptions) -> Optional[Union[str, bytes]]:
        if options.payload is not None:
            return json.dumps(options.payload)
        if options.body is None or isinstance(options.body, (str, bytes)):
            return options.body
        return json.dumps(options.body)

    async def _request(self, method: str, path: str, options: RequestOptions) -> Any:
        url = self.url(path)
        try:
            resp = await self._transport.send(method, url, self._headers(options.headers), self._body(options))
            body = resp.json()
        except TransportError as e:
            # A 204 and a broken body look the same from here.
            logger.debug("%s %s returned no usable body: %s", method, url, e)
            return None

        status = resp.status
        if _is_empty(body):
            if not _is_success(status):
                raise APIError(EMPTY_ERROR_MESSAGE, status)
            return None

        if not isinstance(body, dict):
            if not _is_success(status):
                raise APIError(DEFAULT_ERROR_MESSAGE, status)
            return body

        message = body.get("message")
        if isinstance(message, str) and message in SESSION_INVALIDATION_MESSAGES:
            self._invalidate_session(message)

        embedded = body.get("status")
        if isinstance(embedded, int) and not isinstance(embedded, bool) and embedded:
            status = embedded
        if not _is_success(status):
            raise APIError(message or DEFAULT_ERROR_MESSAGE, status, body.get("data"))
        return body

    def _invalidate_session(self, message: str) -> None:
        logger.info("Server rejected the session (%s), clearing it", message)
        self.session.clear()
        if message == INVALID_SESSION and self.config.reload_on_invalid_session and self._reload is not None:
            self._reload()

    # Lifecycle

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "AsyncAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class API:
    """Sync wrapper around AsyncAPI. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncAPI(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def config(self) -> ClientConfig:
        return self._async.config

    @property
    def session(self) -> SessionStore:
        return self._async.session

    def read(self, path: str, options: OptionsArg = None) -> Any:
        return self._run(self._async.read(path, options))

    def create(self, path: str, payload: Any = None, options: OptionsArg = None) -> Any:
        return self._run(self._async.create(path, payload, options))

    def update(self, path: str, payload: Any = None, options: OptionsArg = None) -> Any:
        return self._run(self._async.update(path, payload, options))

    def destroy(self, path: str, options: OptionsArg = None) -> Any:
        return self._run(self._async.destroy(path, options))

    def set_session(self, session: Optional[dict[str, Any]]) -> None:
        self._async.set_session(session)

    def get_session(self) -> Optional[dict[str, Any]]:
        return self._async.get_session()

    def set_session_token(self, token: Optional[str]) -> None:
        self._async.set_session_token(token)

    def get_session_token(self) -> Optional[str]:
        return self._async.get_session_token()

    def url(self, path: str) -> str:
        return self._async.url(path)

    query_string = staticmethod(query_string)

    def close(self) -> None:
        self._run(self._async.aclose())
        self._loop.close()

    def __enter__(self) -> "API":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
