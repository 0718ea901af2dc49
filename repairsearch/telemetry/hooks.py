"""Named callback registry notified when searches finish."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping

from . import logger

HookFn = Callable[["HookEvent"], None]

SEARCH_COMPLETED = "search.completed"
SEARCH_ABORTED = "search.aborted"


@dataclass(frozen=True)
class HookEvent:
    """Payload passed to registered hook functions."""

    name: str
    payload: Mapping[str, Any]
    timestamp: float


class HookHandle:
    """Disposable handle returned from :func:`register_hook`."""

    def __init__(self, name: str, fn: HookFn) -> None:
        self._name = name
        self._fn = fn
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        unregister_hook(self._name, self._fn)
        self._closed = True

    def __enter__(self) -> "HookHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


_LOCK = RLock()
_HOOKS: Dict[str, list[HookFn]] = {}
_LOGGER = logger.get_logger("repairsearch.telemetry.hooks")


def register_hook(name: str, fn: HookFn) -> HookHandle:
    """Register ``fn`` for ``name`` and return a disposable handle."""

    if not isinstance(name, str) or not name:
        raise ValueError("hook name must be a non-empty string")
    if not callable(fn):
        raise TypeError("hook callback must be callable")
    with _LOCK:
        _HOOKS.setdefault(name, []).append(fn)
    return HookHandle(name, fn)


def unregister_hook(name: str, fn: HookFn) -> None:
    with _LOCK:
        callbacks = _HOOKS.get(name)
        if not callbacks or fn not in callbacks:
            return
        callbacks.remove(fn)
        if not callbacks:
            _HOOKS.pop(name, None)


def dispatch(name: str, payload: Mapping[str, Any] | None = None) -> None:
    """Call every hook registered for ``name`` with a read-only ``payload``.

    A failing hook is logged and skipped; it never interrupts the caller.
    """

    event = HookEvent(
        name=name,
        payload=MappingProxyType(dict(payload or {})),
        timestamp=time.time(),
    )
    callbacks: Iterable[HookFn]
    with _LOCK:
        callbacks = list(_HOOKS.get(name, ()))
    for fn in callbacks:
        try:
            fn(event)
        except Exception:
            _LOGGER.exception("hook %s failed", name)


__all__ = [
    "HookEvent",
    "HookFn",
    "HookHandle",
    "SEARCH_ABORTED",
    "SEARCH_COMPLETED",
    "dispatch",
    "register_hook",
    "unregister_hook",
]
