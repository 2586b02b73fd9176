# ============================================
# File: src/trip_hotspots/pipeline/top_k.py
# Description:
#   Bounded top-K selection over the aggregated counts.
#
#   - ZoneCount / SlotCount: immutable report snapshots
#   - zone_rank / slot_rank: sort keys of the total orders
#       zones: count desc, zone asc
#       slots: count desc, zone asc, hour asc
#   - top_k_by_heap(): min-heap of size <= k whose top is the
#     worst kept entry, then a final sort of the survivors.
# ============================================

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ZoneCount:
    zone: str
    count: int


@dataclass(frozen=True)
class SlotCount:
    zone: str
    hour: int
    count: int


def zone_rank(item: ZoneCount) -> tuple:
    return (-item.count, item.zone)


def slot_rank(item: SlotCount) -> tuple:
    return (-item.count, item.zone, item.hour)


class _Kept(Generic[T]):
    """Heap entry: ordered so that the worst item sits at heap[0]."""

    __slots__ = ("item", "key")

    def __init__(self, item: T, key: tuple):
        self.item = item
        self.key = key

    def __lt__(self, other: "_Kept[T]") -> bool:
        # a larger rank key means a worse item
        return self.key > other.key


def top_k_by_heap(
    items: Iterable[T],
    k: int,
    rank: Callable[[T], tuple],
) -> list[T]:
    """
    Return the k best items, best first.

    rank(item) gives the sort key of the total order (smaller is better).
    Runs in O(n log k) time with O(k) extra space; items may be a
    generator and are consumed once.
    """
    if k <= 0:
        return []

    heap: list[_Kept[T]] = []
    for item in items:
        key = rank(item)
        if len(heap) < k:
            heapq.heappush(heap, _Kept(item, key))
        elif key < heap[0].key:
            heapq.heapreplace(heap, _Kept(item, key))

    # heap order is not output order
    heap.sort(key=lambda kept: kept.key)
    return [kept.item for kept in heap]
