# reqdeco/core/merge.py
"""
Merging the results of a multi-request method.

A :class:`MergeAccumulator` is seeded with the method body's own return
value and folds each sub-request result into it with the user reducer::

    reducer(reducer(body, r1), r2) ...

Until ``expected`` results have been fed, :meth:`MergeAccumulator.feed`
hands back the raw sub-result unmerged.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any

from reqdeco.contracts.request import Reducer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeEntry:
    """The reducer attached to a method by ``@merge``."""

    reducer: Reducer

    def seed(self, value: Any, expected: int) -> MergeAccumulator:
        return MergeAccumulator(reducer=self.reducer, value=value, expected=expected)


@dataclass
class MergeAccumulator:
    """Explicit fold state: ``(value, expected, resolved)``."""

    reducer: Reducer
    value: Any
    expected: int
    resolved: int = 0

    @property
    def complete(self) -> bool:
        return self.resolved >= self.expected

    async def feed(self, result: Any) -> Any:
        """Fold one sub-request result; return the merged value once complete."""
        merged = self.reducer(self.value, result)
        if inspect.isawaitable(merged):
            merged = await merged
        self.value = merged
        self.resolved += 1
        if not self.complete:
            logger.debug("Merge pending: %d/%d results", self.resolved, self.expected)
            return result
        return self.value
