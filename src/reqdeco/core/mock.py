# reqdeco/core/mock.py
"""
Mock injection for development mode.

A mock table is kept per declaration owner: ``{member: [MockEntry, ...]}``.
It is built from the member's own request descriptor and a
``{url: payload}`` mapping; URLs without recorded data are dropped with a
warning.
"""
from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping

from reqdeco.contracts.request import MockEntry, RequestDescriptor
from reqdeco.core.errors import ConfigurationError
from reqdeco.core.metadata import KIND_MOCK, KIND_REQUEST, MetadataStore, site_name

logger = logging.getLogger(__name__)

_MISSING = object()


def mock_entries(
    store: MetadataStore,
    owner: Hashable,
    member: str,
    data: Mapping[str, Any],
) -> list[MockEntry]:
    descriptor: RequestDescriptor | None = store.get(owner, member, KIND_REQUEST)
    if not descriptor:
        raise ConfigurationError(
            f"No requests declared on '{site_name(owner)}'. Apply @mock above @get"
        )

    entries: list[MockEntry] = []
    for entry in descriptor:
        if entry.url not in data:
            logger.warning("Can not find mock data for %s", entry.url)
            continue
        entries.append(MockEntry(url=entry.url, data=data[entry.url]))
    return entries


def register_mocks(
    store: MetadataStore,
    owner: Hashable,
    members: list[str],
    data: Mapping[str, Any],
) -> None:
    table = {m: mock_entries(store, owner, m, data) for m in members}

    def _update(current: dict[str, list[MockEntry]]) -> None:
        current.update(table)

    store.set(owner, None, KIND_MOCK, _update, dict)
    logger.debug("Mock data registered for %s: %s", site_name(owner), sorted(table))


def find_mock(store: MetadataStore, owner: Hashable, member: str, url: str) -> Any:
    """Return the recorded payload for ``url``, or the ``MISSING`` sentinel."""
    table: dict[str, list[MockEntry]] = store.get(owner, None, KIND_MOCK) or {}
    for entry in table.get(member, []):
        if entry.url == url:
            return entry.data
    return _MISSING


def is_missing(value: Any) -> bool:
    return value is _MISSING
