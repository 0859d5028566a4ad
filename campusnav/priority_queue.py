"""Binary min-heap used as the A* open set.

There is no decrease-key. Callers push a fresh entry whenever a cheaper
priority is found and skip stale copies at pop time, so the heap can hold more
entries than there are live nodes (bounded by the number of relaxations).
"""

from __future__ import annotations

import heapq
import itertools
from typing import Generic, TypeVar

T = TypeVar("T")


class MinHeap(Generic[T]):
    """Min-priority queue with O(log n) push and pop."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, T]] = []
        # Insertion counter breaks priority ties so values are never compared.
        self._counter = itertools.count()

    def push(self, priority: float, value: T) -> None:
        heapq.heappush(self._heap, (float(priority), next(self._counter), value))

    def pop_min(self) -> tuple[float, T]:
        """Remove and return the ``(priority, value)`` pair with lowest priority.

        Raises:
            IndexError: If the heap is empty.
        """
        if not self._heap:
            raise IndexError("pop from an empty MinHeap")
        priority, _, value = heapq.heappop(self._heap)
        return priority, value

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)
