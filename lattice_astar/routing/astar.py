"""
A* search over the lattice.

Each AstarSearch owns its own search-state arena, so several searches may
run over one grid at once. The grid must not be edited while a search
over it is in flight.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from ..config import SearchConfig
from ..errors import InvalidInput
from ..grid.grid_3d import Grid
from ..grid.node import CellId, Vector3
from .heuristic import HeuristicModel
from .open_set import OpenSet
from .path import extract_path, path_positions, walk_parents
from .search_state import SearchState, SearchStatus, new_arena

logger = logging.getLogger(__name__)


class PathStatus(Enum):
    """Outcome of a synchronous search."""
    FOUND = "found"
    NO_PATH = "no_path"
    INVALID_INPUT = "invalid_input"


@dataclass
class ExplorationFrame:
    """
    Snapshot of algorithm state for visualization.

    Used to animate the search in a front end.
    """
    step: int
    current_cell_id: Optional[CellId]
    current_position: List[float]
    closed_ids: List[CellId]
    open_ids: List[CellId]
    current_best_path: List[CellId]  # Path to current cell
    current_cost: float
    status: str

    def to_dict(self) -> dict:
        return {
            'step': self.step,
            'current_cell_id': self.current_cell_id,
            'current_position': self.current_position,
            'closed_ids': self.closed_ids,
            'open_ids': self.open_ids,
            'current_best_path': self.current_best_path,
            'current_cost': self.current_cost,
            'status': self.status,
        }


@dataclass
class PathResult:
    """Result of pathfinding."""
    status: PathStatus
    path_ids: List[CellId] = field(default_factory=list)
    path: List[Vector3] = field(default_factory=list)
    total_cost: float = float('inf')
    nodes_explored: int = 0
    exploration_frames: List[ExplorationFrame] = field(default_factory=list)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is PathStatus.FOUND

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'status': self.status.value,
            'success': self.success,
            'path_ids': self.path_ids,
            'path': [p.to_list() for p in self.path],
            'total_cost': self.total_cost if self.success else None,
            'nodes_explored': self.nodes_explored,
            'exploration_frames': [f.to_dict() for f in self.exploration_frames],
            'message': self.message,
        }


class AstarSearch:
    """
    One A* search between two cells of a grid.

    The search is driven one expansion at a time with step(), or to the end
    with run(). Between steps it holds no resources beyond its own state,
    so a caller can stop stepping at any point.
    """

    def __init__(
        self,
        grid: Grid,
        start_id: CellId,
        goal_id: CellId,
        heuristic: Optional[HeuristicModel] = None
    ):
        """
        Validate endpoints and prepare the search.

        Raises:
            InvalidInput: if start or goal is unknown or blocked, or they
                are the same cell. No search state is allocated then.
        """
        for name, cell_id in (("start", start_id), ("goal", goal_id)):
            if cell_id not in grid:
                raise InvalidInput(f"{name} cell {cell_id} is not in the grid")
            if not grid.cells[cell_id].traversable:
                raise InvalidInput(f"{name} cell {cell_id} is not traversable")
        if start_id == goal_id:
            raise InvalidInput("start and goal are the same cell")

        self.grid = grid
        self.start_id = start_id
        self.goal_id = goal_id
        self.heuristic = heuristic or HeuristicModel.from_dimensions(grid.dimensions)

        self.state: Dict[CellId, SearchState] = new_arena(grid.cells)
        self.open_set = OpenSet()
        self.closed: Set[CellId] = set()
        self.open_set.push(start_id, 0.0, 0.0)

        self.status = SearchStatus.READY
        self.steps = 0
        self.current_id: Optional[CellId] = None

    def step(self) -> SearchStatus:
        """Expand one cell. Calling again after termination is a no-op."""
        if self.status.is_terminal:
            return self.status
        self.status = SearchStatus.RUNNING

        current_id = self.open_set.pop_min()
        if current_id is None:
            return self._finish(SearchStatus.EXHAUSTED)

        self.closed.add(current_id)
        self.current_id = current_id
        self.steps += 1

        if current_id == self.goal_id:
            return self._finish(SearchStatus.FOUND)

        cells = self.grid.cells
        current_cell = cells[current_id]
        current_state = self.state[current_id]
        goal_cell = cells[self.goal_id]

        for neighbor_id in current_cell.neighbors:
            neighbor_cell = cells[neighbor_id]
            if not neighbor_cell.traversable or neighbor_id in self.closed:
                continue

            tentative_g = current_state.g_cost + self.heuristic.edge_cost(current_cell, neighbor_cell)
            queued = neighbor_id in self.open_set
            neighbor_state = self.state[neighbor_id]

            if tentative_g < neighbor_state.g_cost or not queued:
                neighbor_state.g_cost = tentative_g
                neighbor_state.h_cost = self.heuristic.estimate(neighbor_cell, goal_cell)
                neighbor_state.parent = current_id

                if queued:
                    self.open_set.update(neighbor_id, neighbor_state.f_cost, neighbor_state.h_cost)
                else:
                    self.open_set.push(neighbor_id, neighbor_state.f_cost, neighbor_state.h_cost)

        if self.open_set.is_empty():
            return self._finish(SearchStatus.EXHAUSTED)
        return self.status

    def run(self) -> SearchStatus:
        """Step until the goal is found or the open set is exhausted."""
        while not self.status.is_terminal:
            self.step()
        return self.status

    def _finish(self, status: SearchStatus) -> SearchStatus:
        self.status = status
        logger.debug(f"Search {self.start_id} -> {self.goal_id} {status.value} "
                     f"after {self.steps} steps")
        return status

    @property
    def done(self) -> bool:
        return self.status.is_terminal

    @property
    def nodes_explored(self) -> int:
        return len(self.closed)

    def g_cost(self, cell_id: CellId) -> float:
        return self.state[cell_id].g_cost

    def best_path_to(self, cell_id: CellId) -> List[CellId]:
        """Best known path from start to a reached cell."""
        return walk_parents(self.state, cell_id)

    def snapshot(self) -> ExplorationFrame:
        """Capture current algorithm state for visualization."""
        current_id = self.current_id
        if current_id is not None:
            position = self.grid.cells[current_id].position.to_list()
            best_path = self.best_path_to(current_id)
            cost = self.state[current_id].g_cost
        else:
            position = [0.0, 0.0, 0.0]
            best_path = []
            cost = 0.0

        return ExplorationFrame(
            step=self.steps,
            current_cell_id=current_id,
            current_position=position,
            closed_ids=list(self.closed),
            open_ids=self.open_set.ids(),
            current_best_path=best_path,
            current_cost=cost,
            status=self.status.value,
        )

    def __repr__(self) -> str:
        return (f"AstarSearch({self.start_id} -> {self.goal_id}, "
                f"status={self.status.value}, steps={self.steps})")


def find_path(
    grid: Grid,
    start_id: CellId,
    goal_id: CellId,
    heuristic: Optional[HeuristicModel] = None,
    config: Optional[SearchConfig] = None
) -> PathResult:
    """
    Run a search to completion.

    Never raises for bad endpoints; the outcome is reported in
    PathResult.status instead.
    """
    config = config or SearchConfig()
    try:
        search = AstarSearch(grid, start_id, goal_id, heuristic)
    except InvalidInput as e:
        logger.debug(f"Rejected search: {e}")
        return PathResult(status=PathStatus.INVALID_INPUT, message=str(e))

    frames: List[ExplorationFrame] = []
    while not search.done:
        search.step()
        if config.capture_exploration and (search.done or search.steps % config.capture_interval == 0):
            frames.append(search.snapshot())

    return result_from_search(search, frames)


def result_from_search(
    search: AstarSearch,
    frames: Optional[List[ExplorationFrame]] = None
) -> PathResult:
    """Summarize a finished search."""
    frames = frames or []
    if search.status is not SearchStatus.FOUND:
        return PathResult(
            status=PathStatus.NO_PATH,
            nodes_explored=search.nodes_explored,
            exploration_frames=frames,
            message="Open set exhausted before reaching the goal",
        )

    path_ids = extract_path(search)
    return PathResult(
        status=PathStatus.FOUND,
        path_ids=path_ids,
        path=path_positions(search.grid, path_ids),
        total_cost=search.g_cost(search.goal_id),
        nodes_explored=search.nodes_explored,
        exploration_frames=frames,
    )


def begin_stepped(
    grid: Grid,
    start_id: CellId,
    goal_id: CellId,
    heuristic: Optional[HeuristicModel] = None
) -> AstarSearch:
    """Create a search to be advanced by the caller. Raises InvalidInput."""
    return AstarSearch(grid, start_id, goal_id, heuristic)


def step(search: AstarSearch) -> SearchStatus:
    """Advance a stepped search by one expansion."""
    return search.step()
