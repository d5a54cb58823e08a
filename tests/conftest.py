from typing import Callable

import httpx
import pytest

from crudkit.api import AsyncAPI
from crudkit.config import ClientConfig
from crudkit.storage import MemoryStorage
from crudkit.transport.http import HttpTransport

BASE_URL = "http://localhost:5000"


def mock_transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpTransport:
    return HttpTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, session_key_name="test")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def make_api(config, storage):
    """Build an AsyncAPI whose requests are answered by `handler`."""

    def _make(handler, **kwargs) -> AsyncAPI:
        kwargs.setdefault("config", config)
        kwargs.setdefault("storage", storage)
        return AsyncAPI(transport=mock_transport(handler), **kwargs)

    return _make
