"""
Controller: base class for CRUD endpoints on FastAPI / Starlette.

Subclasses override the operations they support; the rest answer 404.
`handle_collection()` and `handle_item()` build endpoints that dispatch on the
HTTP verb and turn any raised error into a `{statusCode, message}` body.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Optional

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from crudkit.errors import BadRequestError, CrudKitError, NotFoundError, coerce_status
from crudkit.models.envelope import UNKNOWN_ERROR, ErrorEnvelope

logger = logging.getLogger(__name__)

XML_PREFIX = "<?xml"
XML_CONTENT_TYPE = "application/xml"

Handler = Callable[[Request], Awaitable[Response]]
Dispatch = Callable[["Controller", str, dict[str, Any], Any], Awaitable[Any]]


class Controller:
    async def list(self, query: Optional[dict[str, Any]] = None) -> Any:
        raise NotFoundError()

    async def create(self, body: Any = None) -> Any:
        raise NotFoundError()

    async def read(self, query: dict[str, Any]) -> Any:
        raise NotFoundError()

    async def update(self, query: dict[str, Any], body: Any = None) -> Any:
        raise NotFoundError()

    async def delete(self, query: dict[str, Any]) -> Any:
        raise NotFoundError()

    def handle_collection(self) -> Handler:
        """Endpoint for a resource set: GET lists, POST creates."""
        return self._handler(_dispatch_collection)

    def handle_item(self) -> Handler:
        """Endpoint for one resource: GET reads, PUT/PATCH/POST update, DELETE deletes."""
        return self._handler(_dispatch_item)

    def _handler(self, dispatch: Dispatch) -> Handler:
        name = type(self).__name__

        async def handler(request: Request) -> Response:
            if request.method == "OPTIONS":
                return Response(status_code=200)
            try:
                query = {**request.query_params, **request.path_params}
                body = await _read_body(request)
                result = await dispatch(self, request.method, query, body)
                return render(result)
            except Exception as e:
                return _error_response(name, request, e)

        return handler


async def _dispatch_collection(controller: Controller, method: str, query: dict[str, Any], body: Any) -> Any:
    if method == "GET":
        return await controller.list(query)
    if method == "POST":
        return await controller.create(body)
    raise BadRequestError()


async def _dispatch_item(controller: Controller, method: str, query: dict[str, Any], body: Any) -> Any:
    if method == "GET":
        return await controller.read(query)
    if method in ("PUT", "PATCH", "POST"):
        return await controller.update(query, body)
    if method == "DELETE":
        return await controller.delete(query)
    raise BadRequestError()


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    if "json" in request.headers.get("content-type", ""):
        try:
            return json.loads(raw)
        except ValueError:
            raise BadRequestError("Request body is not valid JSON")
    return raw.decode("utf-8", errors="replace")


def render(result: Any) -> Response:
    """200 response for an operation's return value. `<?xml` strings go out as XML."""
    if isinstance(result, str) and result.startswith(XML_PREFIX):
        return Response(content=result, status_code=200, media_type=XML_CONTENT_TYPE)
    return JSONResponse(content=result, status_code=200)


def error_envelope(exc: BaseException) -> ErrorEnvelope:
    if isinstance(exc, CrudKitError):
        return ErrorEnvelope.from_error(exc)
    if isinstance(exc, HTTPException):
        return ErrorEnvelope(
            status_code=coerce_status(exc.status_code),
            message=str(exc.detail) if exc.detail else UNKNOWN_ERROR,
        )
    return ErrorEnvelope()


def _error_response(controller: str, request: Request, exc: Exception) -> JSONResponse:
    envelope = error_envelope(exc)
    if envelope.status_code >= 500:
        logger.error("%s %s %s failed", controller, request.method, request.url.path, exc_info=exc)
    else:
        logger.info("%s %s %s -> %d %s", controller, request.method, request.url.path,
                    envelope.status_code, envelope.message)
    return JSONResponse(content=envelope.to_wire(), status_code=envelope.status_code)
