import pytest

from lattice_astar.config import GridDimensions
from lattice_astar.grid.grid_3d import build_grid
from lattice_astar.grid.node import cell_id_for


def cid(x, y, z):
    return cell_id_for((x, y, z))


@pytest.fixture
def flat_dims():
    """3x3 in X/Z with the Y axis collapsed."""
    return GridDimensions(size=(3.0, 1.0, 3.0), counts=(3, 1, 3))


@pytest.fixture
def flat_grid(flat_dims):
    return build_grid(flat_dims)


@pytest.fixture
def cube_grid():
    return build_grid(GridDimensions(size=(3.0, 3.0, 3.0), counts=(3, 3, 3)))


@pytest.fixture
def corners():
    return cid(-1.0, 0.0, -1.0), cid(1.0, 0.0, 1.0)
