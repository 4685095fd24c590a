# reqdeco/core/transport.py
"""
Transport adapters.

One adapter per :class:`CallingConvention` turns ``(url, params, headers)``
into the call shape the registered client expects. ``HttpxClient`` is a
ready-made positional client backed by ``httpx``.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping

import httpx

from reqdeco.contracts.transport import CallingConvention, TransportBinding
from reqdeco.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TransportAdapter:
    """Base adapter: subclasses shape the call for one convention."""

    convention: CallingConvention

    def __init__(self, client: Any) -> None:
        if not callable(getattr(client, "get", None)):
            raise ConfigurationError(
                f"HTTP client {type(client).__name__} has no callable 'get'"
            )
        self.client = client

    def call(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, Any] | None,
    ) -> Any:
        raise NotImplementedError

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        result = self.call(url, params, headers)
        if result is None:
            raise ConfigurationError(
                f"HTTP client {type(self.client).__name__} returned nothing for {url} "
                f"(convention={self.convention.value})"
            )
        if inspect.isawaitable(result):
            return await result
        return result


class PositionalAdapter(TransportAdapter):
    convention = CallingConvention.BY_POSITION

    def call(self, url, params, headers):
        return self.client.get(url, params, headers)


class NamedAdapter(TransportAdapter):
    convention = CallingConvention.BY_NAME

    def call(self, url, params, headers):
        return self.client.get({"url": url, "params": params, "headers": headers})


class UrlAndConfigAdapter(TransportAdapter):
    convention = CallingConvention.BY_URL_AND_CONFIG

    def call(self, url, params, headers):
        return self.client.get(url, {"params": params, "headers": headers})


_ADAPTERS: dict[CallingConvention, type[TransportAdapter]] = {
    CallingConvention.BY_POSITION: PositionalAdapter,
    CallingConvention.BY_NAME: NamedAdapter,
    CallingConvention.BY_URL_AND_CONFIG: UrlAndConfigAdapter,
}


def parse_convention(signature: str | CallingConvention | None) -> CallingConvention:
    if signature is None:
        return CallingConvention.BY_POSITION
    try:
        return CallingConvention(signature)
    except ValueError:
        raise ConfigurationError(
            f"Unknown client signature '{signature}'. "
            f"Expected one of: {[c.value for c in CallingConvention]}"
        )


def create_adapter(binding: TransportBinding) -> TransportAdapter:
    return _ADAPTERS[binding.convention](binding.client)


class HttpxClient:
    """Async JSON client with the positional ``get(url, params, headers)`` shape.

    Example::

        use_http_client(HttpxClient(base_url="https://api.example.com"))
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = dict(headers or {})

    def _url(self, url: str) -> str:
        if not self._base or url.startswith(("http://", "https://")):
            return url
        return f"{self._base}/{url.lstrip('/')}"

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        merged = {**self._headers, **{k: str(v) for k, v in (headers or {}).items() if v is not None}}
        query = {k: v for k, v in (params or {}).items() if v is not None}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                resp = await client.get(self._url(url), params=query, headers=merged)
                resp.raise_for_status()
            except httpx.HTTPStatusError as ex:
                logger.warning(
                    "Request failed url=%s status=%s reason=%s",
                    url,
                    ex.response.status_code,
                    ex.response.content,
                )
                raise
            except Exception as e:
                logger.warning("Request to %s failed: %s", url, e)
                raise

            if not resp.content:
                return None
            return resp.json()
