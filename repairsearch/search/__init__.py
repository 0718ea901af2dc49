"""Public entry points for the least-cost search engine."""

from repairsearch.search.astar import (
    MAX_COST,
    ContractViolation,
    SearchConfig,
    SearchOutcome,
    astar_all,
    dijkstra,
    search_all,
)
from repairsearch.search.budget import SearchBudget
from repairsearch.search.frontier import BucketFrontier
from repairsearch.search.interface import RepairSearcher, SearchSettings, build_settings

__all__ = [
    "MAX_COST",
    "BucketFrontier",
    "ContractViolation",
    "RepairSearcher",
    "SearchBudget",
    "SearchConfig",
    "SearchOutcome",
    "SearchSettings",
    "astar_all",
    "build_settings",
    "dijkstra",
    "search_all",
]
