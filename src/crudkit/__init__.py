"""
crudkit: a small CRUD request/response toolkit.

AsyncAPI / API on the client, Controller on the server, one JSON error
envelope between them.
"""

from crudkit.api import API, AsyncAPI, query_string
from crudkit.config import ClientConfig
from crudkit.controller import Controller
from crudkit.errors import (
    APIError,
    BadRequestError,
    ConfigurationError,
    CrudKitError,
    InternalServerError,
    NotFoundError,
    ResponseError,
    TransportError,
    UnauthorizedError,
    UnprocessableEntityError,
)
from crudkit.models.options import RequestOptions
from crudkit.storage import FileStorage, MemoryStorage

__version__ = "0.1.0"
__all__ = [
    "API",
    "AsyncAPI",
    "query_string",
    "ClientConfig",
    "Controller",
    "RequestOptions",
    "FileStorage",
    "MemoryStorage",
    "CrudKitError",
    "ConfigurationError",
    "TransportError",
    "APIError",
    "ResponseError",
    "BadRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "UnprocessableEntityError",
    "InternalServerError",
]
