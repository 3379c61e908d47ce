"""Per-search state kept apart from grid topology."""

from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable, Optional

from ..grid.node import CellId


class SearchStatus(Enum):
    """Lifecycle of a single search: READY -> RUNNING -> FOUND | EXHAUSTED."""
    READY = "ready"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in (SearchStatus.FOUND, SearchStatus.EXHAUSTED)


class SearchState:
    """g/h costs and parent link of one cell within one search."""

    __slots__ = ('g_cost', 'h_cost', 'parent')

    def __init__(self):
        self.g_cost = 0.0
        self.h_cost = 0.0
        self.parent: Optional[CellId] = None

    @property
    def f_cost(self) -> float:
        return self.g_cost + self.h_cost

    def __repr__(self) -> str:
        return f"SearchState(g={self.g_cost}, h={self.h_cost}, parent={self.parent})"


def new_arena(cell_ids: Iterable[CellId]) -> Dict[CellId, SearchState]:
    """Fresh state (g=0, h=0, no parent) for every cell."""
    return {cell_id: SearchState() for cell_id in cell_ids}
