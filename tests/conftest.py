# tests/conftest.py
from __future__ import annotations

import pytest

from reqdeco.core.config import Settings
from reqdeco.core.context import RequestContext
from tests.fakes import FakeHttpClient


@pytest.fixture
def client() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def ctx(client) -> RequestContext:
    context = RequestContext(settings=Settings(app_env="test"))
    context.use_http_client(client)
    return context


@pytest.fixture
def dev_ctx(client) -> RequestContext:
    context = RequestContext(settings=Settings(app_env="development"))
    context.use_http_client(client)
    return context
