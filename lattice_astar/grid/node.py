"""Vector3 and Cell classes for the 3D lattice."""

from __future__ import annotations
import json
from typing import List, Tuple

CellId = str


class Vector3:
    """3D position with per-axis access."""

    __slots__ = ('x', 'y', 'z')

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __repr__(self) -> str:
        return f"Vector3({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"

    def __getitem__(self, axis: int) -> float:
        return (self.x, self.y, self.z)[axis]

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    def to_list(self) -> list:
        """Convert to list."""
        return [self.x, self.y, self.z]


def cell_id_for(position: Tuple[float, float, float]) -> CellId:
    """
    Canonical identity for a cell center.

    Floats are serialized with their shortest round-trip repr, so equal
    triples always give equal identities and distinct triples never collide.
    Negative zero is folded into zero.
    """
    return json.dumps([float(v) + 0.0 for v in position])


class Cell:
    """A cell in the lattice. Only `traversable` changes after the grid is built."""

    __slots__ = ('id', 'position', 'grid_index', 'neighbors', 'traversable')

    def __init__(self, position: Vector3, grid_index: Tuple[int, int, int],
                 traversable: bool = True):
        self.id: CellId = cell_id_for(position.to_tuple())
        self.position = position
        self.grid_index = grid_index  # (ix, iy, iz) in grid
        self.neighbors: List[CellId] = []
        self.traversable = traversable

    def __repr__(self) -> str:
        status = "traversable" if self.traversable else "blocked"
        return f"Cell({self.id}, {status}, {len(self.neighbors)} neighbors)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
