"""Unit tests for the cost-bucketed frontier."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from repairsearch.search.frontier import BucketFrontier


@dataclass(unsafe_hash=True)
class Item:
    name: str
    notes: list[str] = field(default_factory=list, compare=False)


def _merge(existing: Item, incoming: Item) -> None:
    existing.notes.extend(incoming.notes)


def test_ensure_grows_buckets() -> None:
    frontier = BucketFrontier(_merge)
    assert frontier.highest_allocated() == -1
    frontier.ensure(3)
    assert frontier.highest_allocated() == 3
    assert all(frontier.is_empty(index) for index in range(4))
    frontier.ensure(1)
    assert frontier.highest_allocated() == 3


def test_insert_or_merge_folds_identity_equal_states() -> None:
    frontier = BucketFrontier(_merge)
    frontier.ensure(2)
    first = Item("a", ["left"])
    assert frontier.insert_or_merge(2, first) is True
    assert frontier.insert_or_merge(2, Item("a", ["right"])) is False
    assert frontier.insert_or_merge(2, Item("b")) is True

    assert len(frontier) == 2
    assert frontier.merges == 1
    assert first.notes == ["left", "right"]


def test_same_identity_in_different_buckets_is_kept_apart() -> None:
    frontier = BucketFrontier(_merge)
    frontier.ensure(1)
    frontier.insert_or_merge(0, Item("a"))
    frontier.insert_or_merge(1, Item("a"))
    assert frontier.merges == 0
    assert len(frontier) == 2


def test_pop_any_drains_bucket() -> None:
    frontier = BucketFrontier(_merge)
    frontier.ensure(0)
    for name in ("a", "b", "c"):
        frontier.insert_or_merge(0, Item(name))

    popped = {frontier.pop_any(0).name for _ in range(3)}
    assert popped == {"a", "b", "c"}
    assert frontier.is_empty(0)
    assert not frontier
    with pytest.raises(IndexError):
        frontier.pop_any(0)


def test_pop_returns_merged_representative() -> None:
    frontier = BucketFrontier(_merge)
    frontier.ensure(0)
    frontier.insert_or_merge(0, Item("a", ["one"]))
    frontier.insert_or_merge(0, Item("a", ["two"]))
    assert frontier.pop_any(0).notes == ["one", "two"]


def test_truncate_to_single_releases_other_buckets() -> None:
    frontier = BucketFrontier(_merge)
    frontier.ensure(4)
    for index in range(5):
        frontier.insert_or_merge(index, Item(f"n{index}"))

    frontier.truncate_to_single(2)

    assert len(frontier) == 1
    assert frontier.highest_allocated() == 2
    assert not frontier.is_empty(2)
    for index in (0, 1, 3, 4):
        with pytest.raises(IndexError):
            frontier.is_empty(index)
    with pytest.raises(IndexError):
        frontier.ensure(1)
    frontier.insert_or_merge(2, Item("extra"))
    assert len(frontier) == 2


def test_unallocated_bucket_is_rejected() -> None:
    frontier = BucketFrontier(_merge)
    with pytest.raises(IndexError):
        frontier.insert_or_merge(0, Item("a"))


def test_custom_key_fn_controls_identity() -> None:
    merged: list[tuple[str, str]] = []

    def merge(existing: str, incoming: str) -> None:
        merged.append((existing, incoming))

    frontier = BucketFrontier(merge, key_fn=str.lower)
    frontier.ensure(0)
    assert frontier.insert_or_merge(0, "X") is True
    assert frontier.insert_or_merge(0, "x") is False

    assert merged == [("X", "x")]
    assert len(frontier) == 1
    assert frontier.merges == 1
    assert frontier.pop_any(0) == "X"
