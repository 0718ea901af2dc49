"""Logging, metrics and hooks used by the search engine."""

from . import exporters, hooks, logger, metrics

__all__ = ["exporters", "hooks", "logger", "metrics"]
