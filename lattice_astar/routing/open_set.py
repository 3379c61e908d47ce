"""
Open set for A*: an indexed binary min-heap.

Entries are ordered by f cost, then h cost, then insertion order. A
position index maps each queued cell to its slot, so membership tests are
O(1) and key updates restore heap order in O(log n).
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from ..grid.node import CellId

# (f_cost, h_cost, sequence, cell_id)
HeapEntry = Tuple[float, float, int, CellId]


class OpenSet:
    """Min-heap of cell identities keyed by (f cost, h cost)."""

    def __init__(self):
        self._heap: List[HeapEntry] = []
        self._position: Dict[CellId, int] = {}
        self._counter = 0

    def push(self, cell_id: CellId, f_cost: float, h_cost: float) -> None:
        """Insert a cell. Pushing a queued cell updates its key instead."""
        if cell_id in self._position:
            self.update(cell_id, f_cost, h_cost)
            return
        entry = (f_cost, h_cost, self._counter, cell_id)
        self._counter += 1
        self._heap.append(entry)
        self._position[cell_id] = len(self._heap) - 1
        self._sift_up(len(self._heap) - 1)

    def pop_min(self) -> Optional[CellId]:
        """Remove and return the minimal cell, or None if empty."""
        if not self._heap:
            return None
        top = self._heap[0]
        last = self._heap.pop()
        del self._position[top[3]]
        if self._heap:
            self._heap[0] = last
            self._position[last[3]] = 0
            self._sift_down(0)
        return top[3]

    def peek(self) -> Optional[CellId]:
        return self._heap[0][3] if self._heap else None

    def update(self, cell_id: CellId, f_cost: float, h_cost: float) -> None:
        """Change the key of a queued cell and restore heap order."""
        index = self._position[cell_id]
        _, _, seq, _ = self._heap[index]
        self._heap[index] = (f_cost, h_cost, seq, cell_id)
        # The key may move either way
        self._sift_up(index)
        self._sift_down(self._position[cell_id])

    def contains(self, cell_id: CellId) -> bool:
        return cell_id in self._position

    __contains__ = contains

    def key(self, cell_id: CellId) -> Tuple[float, float]:
        f_cost, h_cost, _, _ = self._heap[self._position[cell_id]]
        return f_cost, h_cost

    def size(self) -> int:
        return len(self._heap)

    __len__ = size

    def is_empty(self) -> bool:
        return not self._heap

    def ids(self) -> List[CellId]:
        """Queued identities in heap (not priority) order."""
        return [entry[3] for entry in self._heap]

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._position[heap[i][3]] = i
        self._position[heap[j][3]] = j

    def _sift_up(self, i: int) -> None:
        heap = self._heap
        while i > 0:
            parent = (i - 1) // 2
            if heap[i] < heap[parent]:
                self._swap(i, parent)
                i = parent
            else:
                break

    def _sift_down(self, i: int) -> None:
        heap = self._heap
        n = len(heap)
        while True:
            left = 2 * i + 1
            right = left + 1
            smallest = i
            if left < n and heap[left] < heap[smallest]:
                smallest = left
            if right < n and heap[right] < heap[smallest]:
                smallest = right
            if smallest == i:
                break
            self._swap(i, smallest)
            i = smallest
