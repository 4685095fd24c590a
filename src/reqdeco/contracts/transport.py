# reqdeco/contracts/transport.py
"""
Transport capability contracts.

reqdeco never talks to the network itself. It calls ``get`` on a
registered client in one of three argument shapes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Mapping, Protocol, runtime_checkable


class CallingConvention(str, Enum):
    BY_NAME = "name"
    BY_POSITION = "position"
    BY_URL_AND_CONFIG = "mix"


@runtime_checkable
class HttpClient(Protocol):
    """Anything with a ``get`` method. The argument shape is declared at registration."""

    def get(self, *args: Any, **kwargs: Any) -> Any | Awaitable[Any]: ...


@dataclass(frozen=True)
class TransportBinding:
    client: HttpClient
    convention: CallingConvention = CallingConvention.BY_POSITION
