"""Configured entry point combining settings, budgets and the search driver."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from repairsearch.utils.config import load_config

from .astar import MAX_COST, NeighboursFn, SearchConfig, SearchOutcome, SuccessFn, search_all
from .budget import SearchBudget
from .frontier import MergeFn

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "search" / "default.yaml"


@dataclass(slots=True)
class BudgetConfig:
    max_expansions: int | None = None
    timeout_seconds: float | None = None

    def make_budget(self) -> SearchBudget:
        return SearchBudget(max_expansions=self.max_expansions, timeout=self.timeout_seconds)


@dataclass(slots=True)
class SearchSettings:
    search: SearchConfig
    budget: BudgetConfig


class RepairSearcher:
    """Run budgeted searches with settings loaded from YAML.

    Every call to :meth:`run` gets a fresh :class:`SearchBudget`, so one
    searcher may serve several searches, including from different threads.
    """

    def __init__(
        self,
        *,
        settings: SearchSettings | None = None,
        config_path: str | Path | None = None,
    ) -> None:
        if settings is None:
            settings = build_settings(_settings_data(config_path))
        self.settings = settings

    def run(
        self,
        start: Any,
        neighbours: NeighboursFn,
        merge: MergeFn,
        success: SuccessFn,
        *,
        heuristic: bool = True,
    ) -> SearchOutcome:
        budget = self.settings.budget.make_budget()
        return search_all(
            start,
            budget.guard(neighbours),
            merge,
            success,
            heuristic=heuristic,
            config=self.settings.search,
        )


def build_settings(data: Mapping[str, Any]) -> SearchSettings:
    """Build :class:`SearchSettings` from a parsed configuration mapping."""

    search_section = _section(data, "search")
    budget_section = _section(data, "budget")

    search_config = SearchConfig(
        max_cost=int(search_section.get("max_cost", MAX_COST)),
        record_telemetry=bool(search_section.get("record_telemetry", True)),
    )
    max_expansions = budget_section.get("max_expansions")
    timeout = budget_section.get("timeout_seconds")
    budget_config = BudgetConfig(
        max_expansions=None if max_expansions is None else int(max_expansions),
        timeout_seconds=None if timeout is None else float(timeout),
    )
    if budget_config.max_expansions is not None and budget_config.max_expansions < 0:
        raise ValueError("budget.max_expansions must be non-negative")
    if budget_config.timeout_seconds is not None and budget_config.timeout_seconds < 0:
        raise ValueError("budget.timeout_seconds must be non-negative")
    return SearchSettings(search=search_config, budget=budget_config)


def _settings_data(config_path: str | Path | None) -> Mapping[str, Any]:
    # An explicit path must exist; the bundled defaults are absent outside a checkout.
    if config_path is not None:
        return load_config(config_path)
    if not DEFAULT_CONFIG_PATH.exists():
        return {}
    return load_config(DEFAULT_CONFIG_PATH)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"configuration section {name!r} must be a mapping")
    return section


__all__ = [
    "BudgetConfig",
    "DEFAULT_CONFIG_PATH",
    "RepairSearcher",
    "SearchSettings",
    "build_settings",
]
