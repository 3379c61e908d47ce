"""
Octile-style movement cost on the lattice.

Distances are measured in unit grid steps and scaled by 10 to avoid
fractions: a straight step costs 10, a diagonal step costs 14.

X (axis 0) and Z (axis 2) form the diagonal-capable pair; Y (axis 1) is
always travelled in straight steps:

    cost = 14 * min(dx, dz) + 10 * (|dx - dz| + dy)

The same function is the heuristic estimate to the goal and the exact
weight of an edge between two adjacent cells.
"""

from __future__ import annotations
from typing import Sequence, Tuple

from ..config import GridDimensions
from ..grid.node import Cell, Vector3

DIAGONAL_COST = 14
STRAIGHT_COST = 10

DIAGONAL_AXES = (0, 2)
STRAIGHT_AXIS = 1


class HeuristicModel:
    """Closed-form movement cost between two cell centers."""

    def __init__(self, widths: Sequence[float]):
        """
        Args:
            widths: Cell width along each axis (X, Y, Z)
        """
        if len(widths) != 3 or any(w <= 0 for w in widths):
            raise ValueError(f"Expected three positive cell widths, got {widths}")
        self.widths: Tuple[float, float, float] = tuple(float(w) for w in widths)

    @classmethod
    def from_dimensions(cls, dimensions: GridDimensions) -> HeuristicModel:
        return cls(dimensions.cell_widths)

    def step_distances(self, pos_a: Vector3, pos_b: Vector3) -> Tuple[float, float, float]:
        """Per-axis distance in unit grid steps."""
        return tuple(abs(pos_a[i] - pos_b[i]) / self.widths[i] for i in range(3))

    def distance(self, pos_a: Vector3, pos_b: Vector3) -> float:
        """Movement cost between two positions."""
        d = self.step_distances(pos_a, pos_b)
        a, b = DIAGONAL_AXES
        diag_pair = min(d[a], d[b])
        direct_pair = abs(d[a] - d[b])
        return DIAGONAL_COST * diag_pair + STRAIGHT_COST * (direct_pair + d[STRAIGHT_AXIS])

    def cell_distance(self, cell_a: Cell, cell_b: Cell) -> float:
        return self.distance(cell_a.position, cell_b.position)

    # Both roles use the same metric
    edge_cost = cell_distance
    estimate = cell_distance

    def __repr__(self) -> str:
        return f"HeuristicModel(widths={self.widths})"
