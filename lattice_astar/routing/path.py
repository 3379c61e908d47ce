"""Path reconstruction and path utilities."""

from __future__ import annotations
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import numpy as np

from ..errors import NoPath
from ..grid.node import CellId, Vector3
from .search_state import SearchState, SearchStatus

if TYPE_CHECKING:
    from ..grid.grid_3d import Grid
    from .astar import AstarSearch
    from .heuristic import HeuristicModel


def walk_parents(state: Dict[CellId, SearchState], cell_id: CellId) -> List[CellId]:
    """
    Follow parent links from cell_id back to the cell with no parent.

    Returns identities in start -> cell_id order.
    """
    ids = []
    current: Optional[CellId] = cell_id
    # A well-formed arena is acyclic; the bound only guards against corruption
    for _ in range(len(state) + 1):
        if current is None:
            break
        ids.append(current)
        current = state[current].parent
    else:
        raise RuntimeError(f"Parent chain from {cell_id} does not terminate")

    ids.reverse()
    return ids


def extract_path(search: AstarSearch) -> List[CellId]:
    """
    Path from start to goal of a finished search.

    Raises:
        NoPath: if the search is still running or exhausted the open set
    """
    if search.status is not SearchStatus.FOUND:
        raise NoPath(f"No path available while search is {search.status.value}")
    return walk_parents(search.state, search.goal_id)


def path_positions(grid: Grid, path: Sequence[CellId]) -> List[Vector3]:
    """Convert cell identities to cell centers."""
    return [grid.get_cell(cell_id).position for cell_id in path]


def path_cost(grid: Grid, path: Sequence[CellId], heuristic: HeuristicModel) -> float:
    """Sum of edge costs along a path."""
    total = 0.0
    for a, b in zip(path, path[1:]):
        total += heuristic.edge_cost(grid.get_cell(a), grid.get_cell(b))
    return total


def compute_path_length(grid: Grid, path: Sequence[CellId]) -> float:
    """Euclidean world length of a path."""
    if len(path) < 2:
        return 0.0
    points = np.array([p.to_tuple() for p in path_positions(grid, path)])
    diffs = np.diff(points, axis=0)
    return float(np.sum(np.sqrt(np.sum(diffs ** 2, axis=1))))


def is_valid_path(grid: Grid, path: Sequence[CellId]) -> bool:
    """True if consecutive entries are neighbors and no identity repeats."""
    if len(set(path)) != len(path):
        return False
    for a, b in zip(path, path[1:]):
        if a not in grid or b not in grid.get_cell(a).neighbors:
            return False
    return True


def path_to_list(grid: Grid, path: Sequence[CellId]) -> List[List[float]]:
    """Convert path to list of [x, y, z] for JSON serialization."""
    return [p.to_list() for p in path_positions(grid, path)]
