"""Explicit weighted digraphs driven through the search engine.

Used for synthetic benchmarks and for checking the engine against exhaustive
path enumeration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable, Mapping, MutableSequence, Sequence


@dataclass(unsafe_hash=True)
class GraphState:
    """A graph node reached at an accumulated ``cost``.

    ``merges`` counts how many identity-equal candidates were folded into this
    state; it does not take part in equality or hashing.
    """

    node: Hashable
    cost: int
    merges: int = field(default=0, compare=False)


class WeightedGraph:
    def __init__(
        self,
        edges: Mapping[Hashable, Sequence[tuple[Hashable, int]]],
        goals: Iterable[Hashable],
        *,
        heuristic: Mapping[Hashable, int] | None = None,
    ) -> None:
        for source, targets in edges.items():
            for target, weight in targets:
                if weight < 0:
                    raise ValueError(f"edge {source!r}->{target!r} has negative weight {weight}")
        self.edges = {source: tuple(targets) for source, targets in edges.items()}
        self.goals = frozenset(goals)
        self.heuristic = dict(heuristic or {})
        self.expanded: list[Hashable] = []

    def start(self, node: Hashable) -> GraphState:
        return GraphState(node, 0)

    def success(self, state: GraphState) -> bool:
        return state.node in self.goals

    def merge(self, existing: GraphState, incoming: GraphState) -> None:
        existing.merges += incoming.merges + 1

    def neighbours(
        self, is_phase1: bool, state: GraphState, out: MutableSequence[tuple]
    ) -> bool:
        """Append ``(cost, heuristic, state)`` tuples for each outgoing edge."""

        self.expanded.append(state.node)
        for target, weight in self.edges.get(state.node, ()):
            cost = state.cost + weight
            out.append((cost, self.heuristic.get(target, 0), GraphState(target, cost)))
        return True

    def plain_neighbours(
        self, is_phase1: bool, state: GraphState, out: MutableSequence[tuple]
    ) -> bool:
        """Append ``(cost, state)`` tuples for each outgoing edge."""

        self.expanded.append(state.node)
        for target, weight in self.edges.get(state.node, ()):
            cost = state.cost + weight
            out.append((cost, GraphState(target, cost)))
        return True

    def brute_force_successes(self, start: Hashable) -> tuple[int | None, frozenset[Hashable]]:
        """Enumerate every path from ``start`` and return the cheapest goals.

        The graph must be acyclic.  Returns the minimum success cost (``None``
        if no goal is reachable) and the goal nodes reached at that cost.
        Paths stop at the first goal they reach.
        """

        best: int | None = None
        found: set[Hashable] = set()
        stack: list[tuple[Hashable, int, frozenset[Hashable]]] = [(start, 0, frozenset([start]))]
        while stack:
            node, cost, seen = stack.pop()
            if node in self.goals:
                if best is None or cost < best:
                    best, found = cost, {node}
                elif cost == best:
                    found.add(node)
                continue
            for target, weight in self.edges.get(node, ()):
                if target in seen:
                    raise ValueError(f"cycle through {target!r}")
                stack.append((target, cost + weight, seen | {target}))
        return best, frozenset(found)

    def min_success_cost(self, start: Hashable) -> int | None:
        return self.brute_force_successes(start)[0]


__all__ = ["GraphState", "WeightedGraph"]
