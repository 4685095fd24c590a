# reqdeco/core/invoker.py
"""
Runtime behaviour of a ``@get``-decorated callable.

Per call::

    body task started ─┐
    params resolved    │
    sub-requests dispatched (mock table or transport), pipelines started
    body awaited ──────┘ → resolve counter incremented
    sub-results consumed in descriptor order → merged or last one wins

Configuration problems (no transport, no declared requests) are raised
before anything is started.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Hashable, Mapping

from reqdeco.contracts.request import InvocationState, ParamSpec, RequestDescriptor, RequestEntry
from reqdeco.core.errors import ConfigurationError
from reqdeco.core.merge import MergeEntry
from reqdeco.core.metadata import KIND_INFO, KIND_MERGE, KIND_PARAMS, KIND_REQUEST, site_name
from reqdeco.core.mock import find_mock, is_missing
from reqdeco.core.params import bind_arguments, resolve_template
from reqdeco.core.pipeline import ResponsePipeline
from reqdeco.core.transport import TransportAdapter

if TYPE_CHECKING:
    from reqdeco.core.context import RequestContext

logger = logging.getLogger(__name__)


async def _resolved(value: Any) -> Any:
    return value


def _increment(state: InvocationState) -> None:
    state.resolve_count += 1


def _settle(tasks: list[asyncio.Future[Any]]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            # mark the outcome as retrieved; the caller already has the failure
            task.exception()


class RequestInvoker:
    """Orchestrates body, dispatch, pipeline and merge for one declared method."""

    def __init__(
        self,
        context: RequestContext,
        fn: Callable[..., Any],
        owner: Hashable,
        member: str,
    ) -> None:
        self.context = context
        self.fn = fn
        self.owner = owner
        self.member = member
        self.name = site_name(fn)

        declared = list(inspect.signature(inspect.unwrap(fn)).parameters)
        self._implicit_first = bool(declared) and declared[0] in ("self", "cls")

    def _meta(self, kind: str, default: Any = None) -> Any:
        return self.context.store.get(self.owner, self.member, kind, default)

    async def _call_body(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> Any:
        value = self.fn(*args, **kwargs)
        if inspect.isawaitable(value):
            return await value
        return value

    def _dispatch(
        self,
        entry: RequestEntry,
        adapter: TransportAdapter,
        specs: Mapping[str, ParamSpec],
        arguments: Mapping[str, Any],
    ) -> Awaitable[Any]:
        mocked = find_mock(self.context.store, self.owner, self.member, entry.url)
        if not is_missing(mocked):
            logger.debug("Serving mock data for %s url=%s", self.name, entry.url)
            return _resolved(mocked)

        params = resolve_template(entry.params, specs, arguments)
        headers = resolve_template(entry.headers, specs, arguments)
        logger.debug("Dispatching GET %s params=%s", entry.url, params)
        return adapter.get(entry.url, params, headers)

    async def __call__(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> Any:
        descriptor: RequestDescriptor | None = self._meta(KIND_REQUEST)
        if not descriptor:
            raise ConfigurationError(
                f"Request metadata can not be empty for '{self.name}'"
            )
        adapter = self.context.adapter

        merge: MergeEntry | None = self._meta(KIND_MERGE)
        if merge is None and len(descriptor) >= 2:
            self.context.check_unmerged(self.name)

        specs: dict[str, ParamSpec] = self._meta(KIND_PARAMS) or {}
        arguments = bind_arguments(self.fn, args, kwargs)
        call_args = args[1:] if self._implicit_first else args

        body = asyncio.ensure_future(self._call_body(args, kwargs))
        subs: list[asyncio.Future[Any]] = []
        try:
            for entry in descriptor:
                response = self._dispatch(entry, adapter, specs, arguments)
                subs.append(
                    asyncio.ensure_future(
                        ResponsePipeline(entry.response).run(response, call_args, kwargs)
                    )
                )

            body_value = await body
            self.context.store.set(
                self.owner, self.member, KIND_INFO, _increment, InvocationState
            )

            result: Any = None
            if merge is None:
                for task in subs:
                    result = await task
                return result

            acc = merge.seed(body_value, expected=len(subs))
            for task in subs:
                result = await acc.feed(await task)
            return result
        finally:
            _settle([body, *subs])
