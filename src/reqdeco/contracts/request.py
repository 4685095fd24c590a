# reqdeco/contracts/request.py
"""
Request declaration contracts.

A decorated method owns one :class:`RequestDescriptor`. Every ``@get``
application appends one :class:`RequestEntry` (a sub-request) to it.
Param and header values inside an entry are either literals or
:class:`Placeholder` symbols bound to call arguments through
:class:`ParamSpec`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, TypeVar

T = TypeVar("T")

Hook = Callable[[Any], Any]
Transformer = Callable[..., Any]
Catcher = Callable[[BaseException], Any]
# Schema object, JSON Schema mapping, pydantic model or plain callable.
Validator = Any
Reducer = Callable[[Any, Any], Any]


def as_list(value: T | Sequence[T] | None) -> list[T]:
    """Coerce a single value or a sequence into a list (``None`` → ``[]``)."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]  # type: ignore[list-item]


@dataclass(frozen=True)
class Placeholder:
    """Symbolic stand-in for a call argument inside a request template.

    Two placeholders with the same key are interchangeable.
    """

    key: str

    def __repr__(self) -> str:
        return f"ref({self.key!r})"


def ref(key: str) -> Placeholder:
    return Placeholder(key)


@dataclass(frozen=True)
class Param:
    """Binds the annotated argument to a placeholder key.

    Used as ``Annotated`` metadata::

        async def user(self, user_id: Annotated[int, Param("id", str)]) -> None: ...
    """

    key: str
    convert: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class ParamSpec:
    """Resolved binding of a placeholder to an argument of the decorated callable.

    Attributes:
        index: Ordinal position among the declared arguments (``self``/``cls``
            excluded).
        name: Argument name, used to look the value up regardless of whether
            it was passed positionally or by keyword.
        convert: Optional conversion applied to the raw argument.
    """

    index: int
    name: str
    convert: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class ResponseSpec:
    """Validation and transformation chain applied to one sub-request response."""

    validators: list[Validator] = field(default_factory=list)
    transformers: list[Transformer] = field(default_factory=list)
    before_validate: list[Hook] = field(default_factory=list)
    after_validate: list[Hook] = field(default_factory=list)
    before_transform: list[Hook] = field(default_factory=list)
    after_transform: list[Hook] = field(default_factory=list)
    catcher: Catcher | None = None


@dataclass(frozen=True)
class RequestEntry:
    """One sub-request contributed by one ``@get`` application."""

    url: str
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, Any] | None = None
    response: ResponseSpec = field(default_factory=ResponseSpec)

    def describe(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "params": dict(self.params) if self.params is not None else None,
            "headers": dict(self.headers) if self.headers is not None else None,
        }


@dataclass
class RequestDescriptor:
    """All sub-requests declared on one method, in application order."""

    entries: list[RequestEntry] = field(default_factory=list)

    def add(self, entry: RequestEntry) -> None:
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


@dataclass
class InvocationState:
    """Per-method bookkeeping that lives for the lifetime of its context."""

    original: Callable[..., Any] | None = None
    resolve_count: int = 0


@dataclass(frozen=True)
class MockEntry:
    url: str
    data: Any
