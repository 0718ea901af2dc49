"""Cost-bucketed frontier with per-bucket deduplication."""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Hashable

MergeFn = Callable[[Any, Any], None]


class BucketFrontier:
    """Priority structure used by the two-phase search driver.

    Buckets are indexed by integer priority.  Each bucket maps an identity key
    (a duplicate of the state as first inserted) to the resident
    representative, so identity-equal candidates landing in the same bucket are
    folded together with ``merge`` instead of being stored twice.  Pop order
    within a bucket is unspecified.
    """

    def __init__(
        self,
        merge: MergeFn,
        *,
        key_fn: Callable[[Any], Hashable] | None = None,
    ) -> None:
        self._merge = merge
        self._key_fn = key_fn or copy.copy
        self._buckets: list[Dict[Hashable, Any]] = []
        self._offset = 0
        self.merges = 0

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets)

    def __bool__(self) -> bool:
        return any(self._buckets)

    def ensure(self, index: int) -> None:
        """Grow the bucket list so that ``index`` is addressable."""

        if index < self._offset:
            raise IndexError(f"bucket {index} has been released")
        while self._offset + len(self._buckets) <= index:
            self._buckets.append({})

    def insert_or_merge(self, index: int, state: Any) -> bool:
        """Insert ``state`` into bucket ``index`` or merge it into its twin.

        Returns ``True`` when the state became a new resident and ``False``
        when it was merged into an existing one.
        """

        bucket = self._bucket(index)
        key = self._key_fn(state)
        if key not in bucket:
            bucket[key] = state
            return True
        self._merge(bucket[key], state)
        self.merges += 1
        return False

    def pop_any(self, index: int) -> Any:
        bucket = self._bucket(index)
        if not bucket:
            raise IndexError(f"pop from empty bucket {index}")
        return bucket.popitem()[1]

    def is_empty(self, index: int) -> bool:
        return not self._bucket(index)

    def highest_allocated(self) -> int:
        """Return the largest addressable bucket index (``-1`` if none)."""

        return self._offset + len(self._buckets) - 1

    def truncate_to_single(self, index: int) -> None:
        """Release every bucket except ``index``."""

        retained = self._bucket(index)
        self._buckets = [retained]
        self._offset = index

    def _bucket(self, index: int) -> Dict[Hashable, Any]:
        slot = index - self._offset
        if slot < 0 or slot >= len(self._buckets):
            raise IndexError(f"bucket {index} is not allocated")
        return self._buckets[slot]


__all__ = ["BucketFrontier", "MergeFn"]
