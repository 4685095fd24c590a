from __future__ import annotations

import pytest

from reqdeco.core.config import Settings
from reqdeco.core.context import RequestContext
from reqdeco.core.errors import ConfigurationError
from reqdeco.core.metadata import KIND_MOCK, owner_of


class TestMockDecorator:
    @pytest.mark.asyncio
    async def test_method_mock_serves_recorded_payload(self, dev_ctx, client):
        class Api:
            @dev_ctx.mock({"/users": [{"id": 1}]})
            @dev_ctx.get("/users")
            async def users(self):
                return None

        assert await Api().users() == [{"id": 1}]
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_mock_payload_still_runs_pipeline(self, dev_ctx):
        class Api:
            @dev_ctx.mock({"/users": [{"id": 1}, {"id": 2}]})
            @dev_ctx.get("/users", transformers=len)
            async def count(self):
                return None

        assert await Api().count() == 2

    @pytest.mark.asyncio
    async def test_url_without_data_falls_through_with_warning(self, dev_ctx, client, caplog):
        client.responses["/b"] = "real"

        class Api:
            @dev_ctx.mock({"/a": "mocked"})
            @dev_ctx.merge(lambda acc, cur: acc + [cur])
            @dev_ctx.get("/b")
            @dev_ctx.get("/a")
            async def both(self):
                return []

        assert await Api().both() == ["mocked", "real"]
        assert client.urls == ["/b"]
        assert "Can not find mock data for /b" in caplog.text

    @pytest.mark.asyncio
    async def test_inert_outside_development(self, ctx, client):
        client.responses["/users"] = "real"

        class Api:
            @ctx.mock({"/users": "mocked"})
            @ctx.get("/users")
            async def users(self):
                return None

        assert await Api().users() == "real"
        assert ctx.store.get(owner_of(Api.users), None, KIND_MOCK) is None

    @pytest.mark.asyncio
    async def test_class_mock_covers_declared_methods(self, dev_ctx, client):
        @dev_ctx.mock({"/users": ["u"], "/orders": ["o"]})
        class Api:
            @dev_ctx.get("/users")
            async def users(self):
                return None

            @dev_ctx.get("/orders")
            async def orders(self):
                return None

            def helper(self):
                return "not a request"

        api = Api()
        assert await api.users() == ["u"]
        assert await api.orders() == ["o"]
        assert api.helper() == "not a request"
        assert client.calls == []

    def test_mock_below_get_is_rejected(self, dev_ctx):
        with pytest.raises(ConfigurationError, match="Apply @mock above @get"):

            class Api:
                @dev_ctx.get("/users")
                @dev_ctx.mock({"/users": []})
                async def users(self):
                    return None

    @pytest.mark.asyncio
    async def test_bare_mock_reads_configured_files(self, client, tmp_path):
        mocks = tmp_path / "mocks.yaml"
        mocks.write_text("mocks:\n  /users:\n    - id: 7\n", encoding="utf-8")
        context = RequestContext(
            settings=Settings(app_env="development", mock_data_paths=[str(mocks)])
        )
        context.use_http_client(client)

        class Api:
            @context.mock()
            @context.get("/users")
            async def users(self):
                return None

        assert await Api().users() == [{"id": 7}]
