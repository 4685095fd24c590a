# reqdeco/core/metadata.py
"""
Metadata store for declaration sites.

Values are keyed by ``(owner, member, kind)``. ``owner`` is the declaring
function itself (decorator layers peeled off), compared by identity, so
classes rebuilt from the same source never share state. ``member`` is the
function name and ``kind`` one of the ``KIND_*`` constants. Owner-wide data
uses ``member=None``. Entries are never evicted.
"""
from __future__ import annotations

import inspect
import logging
import threading
from typing import Any, Callable, Hashable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

KIND_REQUEST = "request"
KIND_PARAMS = "params"
KIND_MERGE = "merge"
KIND_MOCK = "mock"
KIND_INFO = "info"

Key = tuple[Hashable, "str | None", str]


def owner_of(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Return the declaring function behind ``fn``'s decorator layers.

    Every decorator applied to one method reaches the same owner, whatever
    the stacking order.
    """
    return inspect.unwrap(fn)


def site_name(owner: Any) -> str:
    """Dotted ``module.qualname`` of an owner, for messages."""
    qualname = getattr(owner, "__qualname__", None) or getattr(owner, "__name__", repr(owner))
    module = getattr(owner, "__module__", None) or "<unknown>"
    return f"{module}.{qualname}"


class MetadataStore:
    """Thread-safe key/value store scoped by declaration site."""

    def __init__(self) -> None:
        self._data: dict[Key, Any] = {}
        self._lock = threading.RLock()

    def get(self, owner: Hashable, member: str | None, kind: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get((owner, member, kind), default)

    def set(
        self,
        owner: Hashable,
        member: str | None,
        kind: str,
        mutator: Callable[[T], T | None],
        default: Callable[[], T],
    ) -> T:
        """Apply ``mutator`` to the current value and persist the result.

        The value is created with ``default()`` the first time. A mutator may
        change the value in place and return ``None``.
        """
        with self._lock:
            key = (owner, member, kind)
            current = self._data[key] if key in self._data else default()
            updated = mutator(current)
            value = current if updated is None else updated
            self._data[key] = value
            return value

    def replace(self, owner: Hashable, member: str | None, kind: str, value: Any) -> None:
        with self._lock:
            self._data[(owner, member, kind)] = value
            logger.debug("Metadata replaced: %s.%s [%s]", owner, member, kind)

    def has(self, owner: Hashable, member: str | None, kind: str) -> bool:
        with self._lock:
            return (owner, member, kind) in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: Key) -> bool:
        with self._lock:
            return key in self._data

    def __iter__(self) -> Iterator[Key]:
        with self._lock:
            return iter(list(self._data))
