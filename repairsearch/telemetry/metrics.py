"""In-memory metrics registry fed by the search driver."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Mapping

from . import exporters

# Samples kept per series; older ones are dropped.
SERIES_CAPACITY = 1024


@dataclass(frozen=True)
class MetricSample:
    """Immutable record representing a single metric observation."""

    name: str
    value: float
    timestamp: float
    kind: str
    tags: Mapping[str, str]
    extra: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "timestamp": self.timestamp,
            "kind": self.kind,
        }
        if self.tags:
            payload["tags"] = dict(self.tags)
        if self.extra:
            payload["extra"] = dict(self.extra)
        return payload


@dataclass
class MetricSeries:
    name: str
    kind: str
    unit: str | None = None
    samples: Deque[MetricSample] = field(default_factory=lambda: deque(maxlen=SERIES_CAPACITY))

    def __post_init__(self) -> None:
        if not isinstance(self.samples, deque) or self.samples.maxlen != SERIES_CAPACITY:
            self.samples = deque(self.samples, maxlen=SERIES_CAPACITY)

    def summary(self) -> Dict[str, Any]:
        if not self.samples:
            return {"name": self.name, "kind": self.kind, "count": 0}
        values = [item.value for item in self.samples]
        summary: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "count": len(values),
            "total": sum(values),
            "min": min(values),
            "max": max(values),
        }
        if self.unit:
            summary["unit"] = self.unit
        return summary


_METRIC_CATALOG: Dict[str, Dict[str, str]] = {
    "repairsearch.search.expanded": {"kind": "counter", "unit": "count"},
    "repairsearch.search.merges": {"kind": "counter", "unit": "count"},
    "repairsearch.search.successes": {"kind": "gauge", "unit": "count"},
    "repairsearch.search.min_cost": {"kind": "gauge", "unit": "cost"},
}


class MetricsRegistry:
    """Thread-safe registry storing metric series in memory."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._series: Dict[str, MetricSeries] = {}

    def emit(
        self,
        name: str,
        value: Any,
        *,
        kind: str | None = None,
        tags: Mapping[str, str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> MetricSample:
        if not isinstance(name, str) or not name:
            raise ValueError("metric name must be a non-empty string")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"metric value for {name!r} must be numeric")
        catalog = _METRIC_CATALOG.get(name, {})
        sample = MetricSample(
            name=name,
            value=float(value),
            timestamp=time.time(),
            kind=kind or catalog.get("kind", "gauge"),
            tags=dict(tags or {}),
            extra=dict(extra or {}),
        )
        with self._lock:
            series = self._series.get(name)
            if series is None:
                series = MetricSeries(name=name, kind=sample.kind, unit=catalog.get("unit"))
                self._series[name] = series
            series.samples.append(sample)
        exporters.export(sample)
        return sample

    def get_series(self, name: str) -> MetricSeries | None:
        with self._lock:
            series = self._series.get(name)
            if series is None:
                return None
            return MetricSeries(
                name=series.name,
                kind=series.kind,
                unit=series.unit,
                samples=deque(series.samples, maxlen=SERIES_CAPACITY),
            )

    def summaries(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {name: series.summary() for name, series in self._series.items()}

    def reset(self) -> None:
        with self._lock:
            self._series.clear()


_REGISTRY = MetricsRegistry()


def emit(
    metric: str,
    value: Any,
    *,
    kind: str | None = None,
    tags: Mapping[str, str] | None = None,
    extra: Mapping[str, Any] | None = None,
) -> MetricSample:
    """Record ``value`` for ``metric`` and forward it to the active exporter."""

    return _REGISTRY.emit(metric, value, kind=kind, tags=tags, extra=extra)


def get_registry() -> MetricsRegistry:
    return _REGISTRY


__all__ = [
    "SERIES_CAPACITY",
    "MetricSample",
    "MetricSeries",
    "MetricsRegistry",
    "emit",
    "get_registry",
]
