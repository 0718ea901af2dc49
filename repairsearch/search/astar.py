"""Two-phase best-first search returning every least-cost success state.

The first phase explores buckets in increasing priority until a success state
turns up.  At that point every bucket but the current one is released and the
second phase drains the remaining bucket, keeping only neighbours at exactly
the success cost.  Paths are never recorded, which keeps both phases cheap.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, MutableSequence, Tuple

from repairsearch.telemetry import hooks as telemetry_hooks
from repairsearch.telemetry import metrics as telemetry_metrics
from repairsearch.telemetry.logger import get_logger

from .frontier import BucketFrontier, MergeFn

MAX_COST = 0xFFFF

SOLVED = "solved"
EXHAUSTED = "exhausted"
ABORTED = "aborted"

NeighboursFn = Callable[[bool, Any, MutableSequence[Any]], bool]
SuccessFn = Callable[[Any], bool]

_LOGGER = get_logger("repairsearch.search")


class ContractViolation(AssertionError):
    """Raised when the caller's cost model breaks the search invariants."""


@dataclass(slots=True)
class SearchConfig:
    max_cost: int = MAX_COST
    record_telemetry: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.max_cost <= MAX_COST:
            raise ValueError(f"max_cost must lie in [0, {MAX_COST}]")


@dataclass(slots=True)
class SearchOutcome:
    """Result of :func:`search_all`.

    ``reason`` is one of ``"solved"``, ``"exhausted"`` (no success state is
    reachable) or ``"aborted"`` (``neighbours`` returned ``False``).  The list
    APIs report the latter two identically as an empty list.
    """

    successes: List[Any] = field(default_factory=list)
    cost: int | None = None
    reason: str = EXHAUSTED
    expanded: int = 0
    merges: int = 0

    @property
    def found(self) -> bool:
        return self.reason == SOLVED

    @property
    def aborted(self) -> bool:
        return self.reason == ABORTED


def _checked_priority(cost: int, estimate: int, max_cost: int) -> int:
    if cost < 0 or estimate < 0:
        raise ContractViolation(f"negative cost {cost} or heuristic {estimate}")
    priority = cost + estimate
    if priority > max_cost:
        raise ContractViolation(f"priority {priority} overflows the cost limit {max_cost}")
    return priority


def _guided_entry(entry: Tuple[int, int, Any], max_cost: int) -> Tuple[int, Any]:
    cost, estimate, state = entry
    return _checked_priority(cost, estimate, max_cost), state


def _plain_entry(entry: Tuple[int, Any], max_cost: int) -> Tuple[int, Any]:
    cost, state = entry
    return _checked_priority(cost, 0, max_cost), state


def search_all(
    start: Any,
    neighbours: NeighboursFn,
    merge: MergeFn,
    success: SuccessFn,
    *,
    heuristic: bool = True,
    config: SearchConfig | None = None,
) -> SearchOutcome:
    """Collect all success states reachable from ``start`` at minimum cost.

    Parameters
    ----------
    start:
        Initial state.  States must be hashable, comparable and copyable.
    neighbours:
        ``neighbours(is_phase1, state, out)`` appends ``(cost, heuristic,
        state)`` tuples (or ``(cost, state)`` when ``heuristic`` is false) to
        ``out``.  ``cost`` is the candidate's cost accumulated from ``start``.
        Returning ``False`` aborts the search.
    merge:
        ``merge(existing, incoming)`` folds an identity-equal candidate into
        the resident state of the same bucket.
    success:
        Goal predicate.
    heuristic:
        Select the guided tuple shape (cost plus admissible estimate).
    config:
        Cost limit and telemetry switch.
    """

    config = config or SearchConfig()
    unpack = _guided_entry if heuristic else _plain_entry
    variant = "astar" if heuristic else "dijkstra"

    frontier = BucketFrontier(merge)
    frontier.ensure(0)
    frontier.insert_or_merge(0, start)
    successes: List[Any] = []
    out: List[Any] = []
    expanded = 0
    c = 0

    while True:
        if frontier.is_empty(c):
            c += 1
            if c > frontier.highest_allocated():
                return _finish(variant, config, frontier, [], None, EXHAUSTED, expanded)
            continue

        node = frontier.pop_any(c)
        if success(node):
            successes.append(node)
            break

        if not neighbours(True, node, out):
            return _finish(variant, config, frontier, [], None, ABORTED, expanded)
        expanded += 1
        for entry in out:
            priority, candidate = unpack(entry, config.max_cost)
            if priority < c:
                raise ContractViolation(f"neighbour priority {priority} below cursor {c}")
            frontier.ensure(priority)
            frontier.insert_or_merge(priority, candidate)
        out.clear()

    # Successors of a success state could only add zero-cost moves, so success
    # states are collected but never expanded from here on.
    _LOGGER.debug("%s: first success at cost %d after %d expansions", variant, c, expanded)
    frontier.truncate_to_single(c)
    while not frontier.is_empty(c):
        node = frontier.pop_any(c)
        if success(node):
            successes.append(node)
            continue

        if not neighbours(False, node, out):
            return _finish(variant, config, frontier, [], None, ABORTED, expanded)
        expanded += 1
        for entry in out:
            priority, candidate = unpack(entry, config.max_cost)
            if priority < c:
                raise ContractViolation(f"neighbour priority {priority} below cursor {c}")
            if priority == c:
                frontier.insert_or_merge(c, candidate)
        out.clear()

    return _finish(variant, config, frontier, successes, c, SOLVED, expanded)


def astar_all(
    start: Any,
    neighbours: NeighboursFn,
    merge: MergeFn,
    success: SuccessFn,
) -> List[Any]:
    """Return, in arbitrary order, all least-cost success states.

    ``neighbours`` yields ``(cost, heuristic, state)`` tuples.  An empty list
    means either that no success state is reachable or that ``neighbours``
    aborted the search.
    """

    return search_all(start, neighbours, merge, success, heuristic=True).successes


def dijkstra(
    start: Any,
    neighbours: NeighboursFn,
    merge: MergeFn,
    success: SuccessFn,
) -> List[Any]:
    """Heuristic-free counterpart of :func:`astar_all`.

    ``neighbours`` yields ``(cost, state)`` tuples.
    """

    return search_all(start, neighbours, merge, success, heuristic=False).successes


def _finish(
    variant: str,
    config: SearchConfig,
    frontier: BucketFrontier,
    successes: List[Any],
    cost: int | None,
    reason: str,
    expanded: int,
) -> SearchOutcome:
    outcome = SearchOutcome(
        successes=successes,
        cost=cost,
        reason=reason,
        expanded=expanded,
        merges=frontier.merges,
    )
    _LOGGER.debug(
        "%s: %s with %d success states (cost=%s, expanded=%d, merges=%d)",
        variant,
        reason,
        len(successes),
        cost,
        expanded,
        outcome.merges,
    )
    if config.record_telemetry:
        _record_search_telemetry(variant, outcome)
    return outcome


def _record_search_telemetry(variant: str, outcome: SearchOutcome) -> None:
    tags = {"variant": variant, "reason": outcome.reason}
    try:
        telemetry_metrics.emit("repairsearch.search.expanded", outcome.expanded, tags=tags)
        telemetry_metrics.emit("repairsearch.search.merges", outcome.merges, tags=tags)
        telemetry_metrics.emit(
            "repairsearch.search.successes", len(outcome.successes), tags=tags
        )
        if outcome.cost is not None:
            telemetry_metrics.emit("repairsearch.search.min_cost", outcome.cost, tags=tags)
    except Exception:  # metrics sinks must not break a search
        _LOGGER.exception("failed to record search metrics")
    event = telemetry_hooks.SEARCH_ABORTED if outcome.aborted else telemetry_hooks.SEARCH_COMPLETED
    telemetry_hooks.dispatch(
        event,
        {
            "variant": variant,
            "reason": outcome.reason,
            "cost": outcome.cost,
            "successes": len(outcome.successes),
            "expanded": outcome.expanded,
            "merges": outcome.merges,
        },
    )


__all__ = [
    "ABORTED",
    "EXHAUSTED",
    "MAX_COST",
    "SOLVED",
    "ContractViolation",
    "NeighboursFn",
    "SearchConfig",
    "SearchOutcome",
    "SuccessFn",
    "astar_all",
    "dijkstra",
    "search_all",
]
