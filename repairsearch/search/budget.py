"""Expansion and wall-clock budgets for cooperative search cancellation."""

from __future__ import annotations

import time
from typing import Any, Callable, MutableSequence

from .astar import NeighboursFn


class SearchBudget:
    """Abort a search once it has used up its expansion or time allowance.

    The search engine has no timer of its own: cancellation happens when
    ``neighbours`` returns ``False``.  :meth:`guard` wraps a ``neighbours``
    callback so that it does exactly that once either limit is reached, and
    records the fact in :attr:`tripped` so callers of the list APIs can tell an
    aborted search from an exhausted one.
    """

    def __init__(
        self,
        *,
        max_expansions: int | None = None,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_expansions is not None and max_expansions < 0:
            raise ValueError("max_expansions must be non-negative")
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")
        self.max_expansions = max_expansions
        self.timeout = timeout
        self._clock = clock
        self._started: float | None = None
        self.expansions = 0
        self.tripped = False

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return self._clock() - self._started

    def exceeded(self) -> bool:
        if self.max_expansions is not None and self.expansions >= self.max_expansions:
            return True
        return self.timeout is not None and self.elapsed >= self.timeout

    def reset(self) -> None:
        self._started = None
        self.expansions = 0
        self.tripped = False

    def guard(self, neighbours: NeighboursFn) -> NeighboursFn:
        """Return ``neighbours`` wrapped with this budget."""

        def _guarded(is_phase1: bool, state: Any, out: MutableSequence[Any]) -> bool:
            if self._started is None:
                self._started = self._clock()
            if self.tripped or self.exceeded():
                self.tripped = True
                return False
            self.expansions += 1
            return neighbours(is_phase1, state, out)

        return _guarded


__all__ = ["SearchBudget"]
