"""Tests for the logging, metrics and hook helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from repairsearch.telemetry import exporters, hooks, logger, metrics


def test_get_logger_returns_named_logger() -> None:
    log = logger.get_logger("repairsearch.search")
    assert isinstance(log, logging.Logger)
    assert log.name == "repairsearch.search"
    with pytest.raises(ValueError):
        logger.get_logger("")


def test_registry_summarises_series() -> None:
    registry = metrics.MetricsRegistry()
    registry.emit("repairsearch.search.expanded", 3, tags={"variant": "astar"})
    registry.emit("repairsearch.search.expanded", 5)

    summary = registry.summaries()["repairsearch.search.expanded"]
    assert summary["kind"] == "counter"
    assert summary["count"] == 2
    assert summary["total"] == 8.0
    assert summary["min"] == 3.0
    assert summary["max"] == 5.0
    assert summary["unit"] == "count"

    registry.reset()
    assert registry.get_series("repairsearch.search.expanded") is None


@pytest.mark.parametrize("value", ["3", None, True])
def test_registry_rejects_non_numeric_values(value: object) -> None:
    with pytest.raises(TypeError):
        metrics.MetricsRegistry().emit("repairsearch.search.expanded", value)


def test_samples_reach_configured_exporter(tmp_path: Path) -> None:
    target = tmp_path / "metrics.jsonl"
    previous = exporters.configure(exporters.JsonlExporter(target))
    try:
        metrics.emit("repairsearch.search.successes", 2, tags={"reason": "solved"})
    finally:
        exporters.configure(previous)

    records = [json.loads(line) for line in target.read_text(encoding="utf-8").splitlines()]
    assert records[-1]["name"] == "repairsearch.search.successes"
    assert records[-1]["value"] == 2.0
    assert records[-1]["tags"] == {"reason": "solved"}


def test_memory_exporter_is_bounded() -> None:
    sink = exporters.MemoryExporter(capacity=2)
    registry = metrics.MetricsRegistry()
    previous = exporters.configure(sink)
    try:
        for value in range(4):
            registry.emit("repairsearch.search.merges", value)
    finally:
        exporters.configure(previous)

    assert [sample.value for sample in sink.samples] == [2.0, 3.0]
    sink.clear()
    assert sink.samples == ()


def test_hooks_register_dispatch_and_close() -> None:
    seen: list[hooks.HookEvent] = []
    handle = hooks.register_hook("test.event", seen.append)
    hooks.dispatch("test.event", {"value": 1})
    handle.close()
    hooks.dispatch("test.event", {"value": 2})

    assert [event.payload["value"] for event in seen] == [1]
    handle.close()


def test_failing_hook_does_not_interrupt_dispatch() -> None:
    seen: list[str] = []

    def broken(event: hooks.HookEvent) -> None:
        raise RuntimeError("boom")

    with hooks.register_hook("test.failing", broken), hooks.register_hook(
        "test.failing", lambda event: seen.append(event.name)
    ):
        hooks.dispatch("test.failing")

    assert seen == ["test.failing"]


def test_series_keep_a_bounded_number_of_samples() -> None:
    registry = metrics.MetricsRegistry()
    for value in range(metrics.SERIES_CAPACITY + 10):
        registry.emit("repairsearch.search.expanded", value)

    series = registry.get_series("repairsearch.search.expanded")
    assert series is not None
    assert len(series.samples) == metrics.SERIES_CAPACITY
    assert series.samples[0].value == 10.0
    assert registry.summaries()["repairsearch.search.expanded"]["count"] == metrics.SERIES_CAPACITY
