# reqdeco/core/context.py
"""
RequestContext – owner of all declaration state.

A context carries the metadata store, the transport binding, settings and
the one-time warning flag. Decorators are methods on the context, so tests
can build isolated contexts::

    ctx = RequestContext()
    ctx.use_http_client(client)

    class Api:
        @ctx.get("/users", params={"page": ref("page")})
        async def users(self, page: Annotated[int, Param("page")]) -> None: ...

The module-level ``get``/``bind``/``mock``/``merge``/``use_http_client``
delegate to :data:`default_context`.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Hashable, Mapping, TypeVar

from reqdeco.contracts.request import (
    InvocationState,
    ParamSpec,
    RequestDescriptor,
    RequestEntry,
    ResponseSpec,
    as_list,
)
from reqdeco.contracts.transport import CallingConvention, TransportBinding
from reqdeco.core.config import Settings, settings as default_settings
from reqdeco.core.errors import ConfigurationError
from reqdeco.core.invoker import RequestInvoker
from reqdeco.core.loader import load_mock_data
from reqdeco.core.merge import MergeEntry
from reqdeco.core.metadata import (
    KIND_INFO,
    KIND_MERGE,
    KIND_PARAMS,
    KIND_REQUEST,
    MetadataStore,
    owner_of,
)
from reqdeco.core.mock import register_mocks
from reqdeco.core.params import annotated_specs, spec_for
from reqdeco.core.transport import TransportAdapter, create_adapter, parse_convention

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

INVOKER_ATTR = "__reqdeco_invoker__"


def invoker_of(obj: Any) -> RequestInvoker | None:
    return getattr(obj, INVOKER_ATTR, None)


class RequestContext:
    """Explicit home for the state shared by declared requests."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: MetadataStore | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store or MetadataStore()
        self._binding: TransportBinding | None = None
        self._adapter: TransportAdapter | None = None
        self._merge_warned = False

    # -- transport -----------------------------------------------------------

    def use_http_client(
        self,
        client: Any,
        signature: str | CallingConvention | None = None,
    ) -> None:
        """Register (or replace) the HTTP client used by every declared request.

        Must happen before the first call; in-flight calls keep the adapter
        they started with.
        """
        convention = parse_convention(signature or self.settings.default_signature)
        binding = TransportBinding(client=client, convention=convention)
        self._adapter = create_adapter(binding)
        self._binding = binding
        logger.info(
            "Registered HTTP client: %s (signature=%s)",
            type(client).__name__,
            convention.value,
        )

    @property
    def binding(self) -> TransportBinding | None:
        return self._binding

    @property
    def adapter(self) -> TransportAdapter:
        if self._adapter is None:
            raise ConfigurationError(
                "No HTTP client! Call use_http_client() before invoking declared requests"
            )
        return self._adapter

    # -- declaration surfaces ------------------------------------------------

    def _add_param(self, owner: Hashable, member: str, key: str, spec: ParamSpec) -> None:
        def _put(current: dict[str, ParamSpec]) -> None:
            current[key] = spec

        self.store.set(owner, member, KIND_PARAMS, _put, dict)

    def get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        validators: Any = None,
        transformers: Any = None,
        before_validate: Any = None,
        after_validate: Any = None,
        before_transform: Any = None,
        after_transform: Any = None,
        catcher: Callable[[BaseException], Any] | None = None,
    ) -> Callable[[F], F]:
        """Declare a GET sub-request on a method.

        Stacking several ``@get`` on one method declares several sub-requests;
        combine their results with ``@merge``.
        """
        entry = RequestEntry(
            url=url,
            params=dict(params) if params is not None else None,
            headers=dict(headers) if headers is not None else None,
            response=ResponseSpec(
                validators=as_list(validators),
                transformers=as_list(transformers),
                before_validate=as_list(before_validate),
                after_validate=as_list(after_validate),
                before_transform=as_list(before_transform),
                after_transform=as_list(after_transform),
                catcher=catcher,
            ),
        )

        def _decorator(fn: F) -> F:
            owner, member = owner_of(fn), fn.__name__
            self.store.set(owner, member, KIND_REQUEST, lambda d: d.add(entry), RequestDescriptor)

            if invoker_of(fn) is not None:
                return fn

            for key, spec in annotated_specs(fn).items():
                self._add_param(owner, member, key, spec)

            def _remember(state: InvocationState) -> None:
                state.original = fn

            self.store.set(owner, member, KIND_INFO, _remember, InvocationState)

            invoker = RequestInvoker(self, fn, owner, member)

            @functools.wraps(fn)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                return await invoker(args, kwargs)

            setattr(wrapper, INVOKER_ATTR, invoker)
            return wrapper  # type: ignore[return-value]

        return _decorator

    def bind(
        self,
        key: str,
        index_or_name: int | str,
        convert: Callable[[Any], Any] | None = None,
    ) -> Callable[[F], F]:
        """Bind placeholder ``key`` to an argument, by position or by name."""

        def _decorator(fn: F) -> F:
            spec = spec_for(fn, index_or_name, convert)
            self._add_param(owner_of(fn), fn.__name__, key, spec)
            return fn

        return _decorator

    def merge(self, reducer: Callable[[Any, Any], Any]) -> Callable[[F], F]:
        """Combine the body result and every sub-request result with ``reducer``."""

        def _decorator(fn: F) -> F:
            self.store.replace(owner_of(fn), fn.__name__, KIND_MERGE, MergeEntry(reducer))
            return fn

        return _decorator

    def mock(self, data: Mapping[str, Any] | None = None) -> Callable[[Any], Any]:
        """Serve recorded payloads instead of real calls in development mode.

        On a method it must sit above that method's ``@get`` decorators; on a
        class it covers every declared method. Without ``data`` the tables in
        ``settings.mock_data_paths`` are used. Outside development mode this
        decorator does nothing.
        """

        def _decorator(target: Any) -> Any:
            if not self.settings.development:
                return target

            table = data if data is not None else load_mock_data(self.settings.mock_data_paths)

            if isinstance(target, type):
                for value in vars(target).values():
                    invoker = invoker_of(value)
                    if invoker is not None:
                        register_mocks(self.store, invoker.owner, [invoker.member], table)
            else:
                register_mocks(self.store, owner_of(target), [target.__name__], table)
            return target

        return _decorator

    # -- merge policy --------------------------------------------------------

    def check_unmerged(self, name: str) -> None:
        if self.settings.strict_merge:
            raise ConfigurationError(
                f"'{name}' declares several requests but no @merge reducer"
            )
        if self._merge_warned:
            return
        self._merge_warned = True
        logger.warning(
            "Use @merge to combine multiple request responses, otherwise the last "
            "request response replaces the others as the final result (%s)",
            name,
        )

    # -- introspection -------------------------------------------------------

    def describe(self, fn: Callable[..., Any]) -> list[dict[str, Any]]:
        descriptor: RequestDescriptor | None = self.store.get(
            owner_of(fn), fn.__name__, KIND_REQUEST
        )
        return [entry.describe() for entry in descriptor or []]

    def resolve_count(self, fn: Callable[..., Any]) -> int:
        state: InvocationState | None = self.store.get(owner_of(fn), fn.__name__, KIND_INFO)
        return state.resolve_count if state else 0

    def original(self, fn: Callable[..., Any]) -> Callable[..., Any] | None:
        """The undecorated body behind a declared method."""
        state: InvocationState | None = self.store.get(owner_of(fn), fn.__name__, KIND_INFO)
        return state.original if state else None


default_context = RequestContext()

use_http_client = default_context.use_http_client
get = default_context.get
bind = default_context.bind
merge = default_context.merge
mock = default_context.mock
