"""3D lattice structure for pathfinding."""

from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from ..config import GridDimensions
from ..errors import UnknownCell
from .node import Cell, CellId, Vector3

logger = logging.getLogger(__name__)


# 26-connectivity offsets in lattice steps, X outermost and Z innermost
NEIGHBOR_OFFSETS = [
    (dx, dy, dz)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    for dz in (-1, 0, 1)
    if not (dx == 0 and dy == 0 and dz == 0)
]

# Candidates examined when snapping a position to a traversable cell
NEAREST_SEARCH_LIMIT = 125


def axis_centers(width: float, count: int) -> List[float]:
    """
    Centered cell positions along one axis.

    center(i) = width * (i - floor(count/2) + 0.5 * (1 - count mod 2))
    """
    steps = np.arange(count) - count // 2 + 0.5 * (1 - count % 2)
    return (width * steps).tolist()


class Grid:
    """
    Lattice of cells with fixed topology.

    Positions and adjacency never change once built; only the traversable
    flag of a cell may be edited. Search state lives outside the grid, so
    any number of searches can read one grid at the same time.
    """

    def __init__(self, dimensions: GridDimensions):
        self.dimensions = dimensions
        self.widths = dimensions.cell_widths
        self.nx, self.ny, self.nz = (int(n) for n in dimensions.counts)

        self.cells: Dict[CellId, Cell] = {}
        self._index_to_id: Dict[Tuple[int, int, int], CellId] = {}
        self._positions: Optional[np.ndarray] = None
        self._tree: Optional[cKDTree] = None

        self._create_cells()
        self._link_neighbors()

    def _create_cells(self) -> None:
        """Create a cell for every point of the cartesian product of axis centers."""
        xs = axis_centers(self.widths[0], self.nx)
        ys = axis_centers(self.widths[1], self.ny)
        zs = axis_centers(self.widths[2], self.nz)

        for ix, x in enumerate(xs):
            for iy, y in enumerate(ys):
                for iz, z in enumerate(zs):
                    cell = Cell(Vector3(x, y, z), (ix, iy, iz))
                    self.cells[cell.id] = cell
                    self._index_to_id[(ix, iy, iz)] = cell.id

    def _link_neighbors(self) -> None:
        """
        Attach neighbor identities to every cell.

        A candidate at center + offset * width is accepted only if it lies
        within half the extent on every axis and a cell exists at that
        lattice position. Degenerate axes (count == 1) fail the bounds check
        for any non-zero offset and so drop out of the adjacency.
        """
        half = self.dimensions.half_extents
        widths = self.widths

        for cell in self.cells.values():
            ix, iy, iz = cell.grid_index
            pos = cell.position.to_tuple()
            for offset in NEIGHBOR_OFFSETS:
                candidate = [p + d * w for p, d, w in zip(pos, offset, widths)]
                if any(abs(c) > h for c, h in zip(candidate, half)):
                    continue
                dx, dy, dz = offset
                neighbor_id = self._index_to_id.get((ix + dx, iy + dy, iz + dz))
                if neighbor_id is not None:
                    cell.neighbors.append(neighbor_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self.cells

    def __len__(self) -> int:
        return len(self.cells)

    def get_cell(self, cell_id: CellId) -> Cell:
        """Get a cell by identity, raising UnknownCell if absent."""
        try:
            return self.cells[cell_id]
        except KeyError:
            raise UnknownCell(cell_id) from None

    def get_cell_by_index(self, ix: int, iy: int, iz: int) -> Optional[Cell]:
        """Get a cell by its lattice index."""
        cell_id = self._index_to_id.get((ix, iy, iz))
        if cell_id is not None:
            return self.cells[cell_id]
        return None

    def cell_ids(self) -> List[CellId]:
        return list(self.cells)

    def neighbors(self, cell_id: CellId) -> List[CellId]:
        """Identities of all cells adjacent to cell_id, traversable or not."""
        return list(self.get_cell(cell_id).neighbors)

    def traversable_neighbors(self, cell_id: CellId) -> List[CellId]:
        return [n for n in self.get_cell(cell_id).neighbors if self.cells[n].traversable]

    def is_traversable(self, cell_id: CellId) -> bool:
        return self.get_cell(cell_id).traversable

    def traversable_cells(self) -> Iterator[Cell]:
        """Iterate over all traversable cells."""
        for cell in self.cells.values():
            if cell.traversable:
                yield cell

    def positions_array(self) -> np.ndarray:
        """(N, 3) array of cell centers, in the same order as cell_ids()."""
        if self._positions is None:
            self._positions = np.array(
                [c.position.to_tuple() for c in self.cells.values()], dtype=float
            ).reshape(-1, 3)
        return self._positions

    def traversable_mask(self) -> np.ndarray:
        """Boolean array aligned with positions_array()."""
        return np.fromiter(
            (c.traversable for c in self.cells.values()), dtype=bool, count=len(self.cells)
        )

    def cell_at_position(self, position: Vector3,
                         prefer_traversable: bool = True) -> Cell:
        """
        Get the cell nearest to a world position.

        Args:
            position: World position to snap
            prefer_traversable: If True and the nearest cell is blocked,
                return the nearest traversable cell among nearby candidates
        """
        if self._tree is None:
            self._tree = cKDTree(self.positions_array())

        ids = list(self.cells)
        k = min(len(ids), NEAREST_SEARCH_LIMIT if prefer_traversable else 1)
        _, indices = self._tree.query(position.to_tuple(), k=k)
        indices = np.atleast_1d(indices)

        nearest = self.cells[ids[int(indices[0])]]
        if prefer_traversable and not nearest.traversable:
            for idx in indices[1:]:
                cell = self.cells[ids[int(idx)]]
                if cell.traversable:
                    return cell
        return nearest

    # ------------------------------------------------------------------
    # Traversability edits
    # ------------------------------------------------------------------

    def set_traversable(self, cell_id: CellId, traversable: bool) -> None:
        """Set one cell's traversable flag. Raises UnknownCell before mutating."""
        self.get_cell(cell_id).traversable = bool(traversable)

    def set_traversable_many(self, cell_ids: Iterable[CellId], traversable: bool) -> None:
        """Set the flag for a group of cells; nothing changes if any id is unknown."""
        cells = [self.get_cell(cell_id) for cell_id in cell_ids]
        for cell in cells:
            cell.traversable = bool(traversable)

    def set_traversable_in_volume(self, min_corner: Vector3, max_corner: Vector3,
                                  traversable: bool = False) -> List[CellId]:
        """Set the flag for every cell whose center lies inside an axis-aligned box."""
        positions = self.positions_array()
        lo = np.minimum(min_corner.to_tuple(), max_corner.to_tuple())
        hi = np.maximum(min_corner.to_tuple(), max_corner.to_tuple())
        inside = np.all((positions >= lo) & (positions <= hi), axis=1)

        ids = list(self.cells)
        changed = [ids[i] for i in np.flatnonzero(inside)]
        for cell_id in changed:
            self.cells[cell_id].traversable = bool(traversable)
        return changed

    def reset_traversable(self) -> None:
        """Make every cell traversable again."""
        for cell in self.cells.values():
            cell.traversable = True

    @property
    def total_cells(self) -> int:
        """Total number of cells in the grid."""
        return len(self.cells)

    @property
    def traversable_count(self) -> int:
        """Number of traversable cells."""
        return sum(1 for c in self.cells.values() if c.traversable)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'size': list(self.dimensions.size),
            'counts': list(self.dimensions.counts),
            'cell_widths': list(self.widths),
            'cells': [
                {
                    'id': c.id,
                    'position': c.position.to_list(),
                    'traversable': c.traversable,
                }
                for c in self.cells.values()
            ],
        }

    def __repr__(self) -> str:
        return (f"Grid({self.nx}x{self.ny}x{self.nz}, "
                f"traversable={self.traversable_count}/{self.total_cells})")


def build_grid(dimensions: GridDimensions) -> Grid:
    """
    Build a lattice from grid dimensions.

    Raises:
        InvalidDimensions: if any extent is non-positive or any count < 1.
            No cells are created in that case.
    """
    dimensions.validate()
    grid = Grid(dimensions)
    logger.info(f"Grid: {grid.nx}x{grid.ny}x{grid.nz} = {grid.total_cells} cells")
    return grid


def set_traversable(grid: Grid, cell_id: CellId, traversable: bool) -> None:
    """Set a cell's traversable flag. Raises UnknownCell for unknown ids."""
    grid.set_traversable(cell_id, traversable)


def select_random_cell(
    grid: Grid,
    condition: Optional[Callable[[Cell], bool]] = None,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Cell]:
    """
    Pick a random cell, optionally one satisfying `condition`.

    Returns None when no cell qualifies.
    """
    rng = rng if rng is not None else np.random.default_rng()
    candidates = [c for c in grid.cells.values() if condition is None or condition(c)]
    if not candidates:
        return None
    return candidates[int(rng.integers(len(candidates)))]


def scatter_obstacles(
    grid: Grid,
    fraction: float,
    rng: Optional[np.random.Generator] = None,
    keep: Iterable[CellId] = (),
) -> List[CellId]:
    """
    Make a random fraction of the traversable cells non-traversable.

    Cells listed in `keep` (typically start and goal) are never blocked.
    Returns the identities that were blocked.
    """
    rng = rng if rng is not None else np.random.default_rng()
    keep = set(keep)
    candidates = [c.id for c in grid.traversable_cells() if c.id not in keep]
    n_block = int(round(fraction * len(candidates)))
    if n_block <= 0:
        return []

    chosen = rng.choice(len(candidates), size=n_block, replace=False)
    blocked = [candidates[int(i)] for i in sorted(chosen)]
    grid.set_traversable_many(blocked, False)
    logger.debug(f"Blocked {len(blocked)} of {grid.total_cells} cells")
    return blocked
