from .node import Vector3, Cell, CellId, cell_id_for
from .grid_3d import (
    Grid,
    NEIGHBOR_OFFSETS,
    axis_centers,
    build_grid,
    set_traversable,
    select_random_cell,
    scatter_obstacles,
)
