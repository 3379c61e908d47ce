import numpy as np
import pytest

from lattice_astar.config import GridDimensions
from lattice_astar.errors import InvalidDimensions, UnknownCell
from lattice_astar.grid.grid_3d import (
    axis_centers,
    build_grid,
    scatter_obstacles,
    select_random_cell,
    set_traversable,
)
from lattice_astar.grid.node import Vector3, cell_id_for

from conftest import cid


def test_axis_centers_odd_and_even():
    assert axis_centers(1.0, 3) == [-1.0, 0.0, 1.0]
    assert axis_centers(1.0, 4) == [-1.5, -0.5, 0.5, 1.5]
    assert axis_centers(2.0, 1) == [0.0]


def test_build_creates_cartesian_product(flat_grid):
    assert flat_grid.total_cells == 9
    assert (flat_grid.nx, flat_grid.ny, flat_grid.nz) == (3, 1, 3)
    assert cid(-1.0, 0.0, -1.0) in flat_grid
    assert cid(0.0, 0.0, 0.0) in flat_grid


def test_cell_identity_is_canonical():
    assert cell_id_for((1, 0, -0.0)) == cell_id_for((1.0, 0.0, 0.0))
    assert cell_id_for((0.1, 0.2, 0.3)) != cell_id_for((0.1, 0.2, 0.30000000000000004))
    grid = build_grid(GridDimensions(size=(4.0, 1.0, 1.0), counts=(4, 1, 1)))
    for cell in grid.cells.values():
        assert cell.id == cell_id_for(cell.position.to_tuple())


@pytest.mark.parametrize("size,counts", [
    ((0.0, 1.0, 1.0), (1, 1, 1)),
    ((1.0, -2.0, 1.0), (1, 1, 1)),
    ((1.0, 1.0, 1.0), (0, 1, 1)),
    ((1.0, 1.0, 1.0), (1, 1, -3)),
    ((float("inf"), 1.0, 1.0), (3, 1, 1)),
    ((1.0, float("nan"), 1.0), (1, 1, 1)),
    ((1.0, 1.0, 1.0), (1, 1.5, 1)),
])
def test_invalid_dimensions_rejected(size, counts):
    with pytest.raises(InvalidDimensions):
        build_grid(GridDimensions(size=size, counts=counts))


def test_invalid_dimensions_is_value_error():
    with pytest.raises(ValueError):
        build_grid(GridDimensions(size=(1.0, 1.0, 1.0), counts=(0, 0, 0)))


def test_neighbor_counts_flat(flat_grid):
    assert len(flat_grid.neighbors(cid(-1.0, 0.0, -1.0))) == 3
    assert len(flat_grid.neighbors(cid(0.0, 0.0, -1.0))) == 5
    assert len(flat_grid.neighbors(cid(0.0, 0.0, 0.0))) == 8


def test_degenerate_axis_collapses(flat_grid):
    for cell in flat_grid.cells.values():
        for n in cell.neighbors:
            assert flat_grid.cells[n].position.y == cell.position.y


def test_center_of_cube_has_26_neighbors(cube_grid):
    assert len(cube_grid.neighbors(cid(0.0, 0.0, 0.0))) == 26
    assert len(cube_grid.neighbors(cid(-1.0, -1.0, -1.0))) == 7


@pytest.mark.parametrize("size,counts", [
    ((3.0, 3.0, 3.0), (3, 3, 3)),
    ((1.0, 1.0, 1.0), (10, 3, 7)),
    ((2.0, 5.0, 0.7), (4, 1, 2)),
])
def test_adjacency_symmetric_without_self_loops(size, counts):
    grid = build_grid(GridDimensions(size=size, counts=counts))
    for cell in grid.cells.values():
        assert cell.id not in cell.neighbors
        assert len(set(cell.neighbors)) == len(cell.neighbors)
        for n in cell.neighbors:
            assert cell.id in grid.cells[n].neighbors


def test_interior_cell_with_fractional_widths_is_fully_connected():
    grid = build_grid(GridDimensions(size=(1.0, 1.0, 1.0), counts=(10, 3, 7)))
    interior = grid.get_cell_by_index(5, 1, 3)
    assert len(interior.neighbors) == 26


def test_set_traversable(flat_grid):
    center = cid(0.0, 0.0, 0.0)
    set_traversable(flat_grid, center, False)
    assert not flat_grid.is_traversable(center)
    assert flat_grid.traversable_count == 8
    assert center not in flat_grid.traversable_neighbors(cid(-1.0, 0.0, -1.0))
    # Topology is unchanged
    assert center in flat_grid.neighbors(cid(-1.0, 0.0, -1.0))

    set_traversable(flat_grid, center, True)
    assert flat_grid.traversable_count == 9


def test_set_traversable_unknown_cell(flat_grid):
    with pytest.raises(UnknownCell):
        set_traversable(flat_grid, cid(5.0, 0.0, 5.0), False)
    with pytest.raises(KeyError):
        flat_grid.get_cell("nope")


def test_set_traversable_many_is_all_or_nothing(flat_grid):
    with pytest.raises(UnknownCell):
        flat_grid.set_traversable_many([cid(0.0, 0.0, 0.0), "missing"], False)
    assert flat_grid.traversable_count == 9

    flat_grid.set_traversable_many([cid(0.0, 0.0, 0.0), cid(1.0, 0.0, 0.0)], False)
    assert flat_grid.traversable_count == 7


def test_set_traversable_in_volume_and_reset(cube_grid):
    changed = cube_grid.set_traversable_in_volume(
        Vector3(-0.5, -2.0, -2.0), Vector3(0.5, 2.0, 2.0), traversable=False
    )
    assert len(changed) == 9
    assert all(cube_grid.cells[c].position.x == 0.0 for c in changed)
    assert cube_grid.traversable_count == 18

    cube_grid.reset_traversable()
    assert cube_grid.traversable_count == 27


def test_positions_array_and_mask(flat_grid):
    positions = flat_grid.positions_array()
    assert positions.shape == (9, 3)
    assert np.allclose(positions[:, 1], 0.0)

    flat_grid.set_traversable(cid(0.0, 0.0, 0.0), False)
    mask = flat_grid.traversable_mask()
    assert mask.dtype == bool
    assert mask.sum() == 8
    index = flat_grid.cell_ids().index(cid(0.0, 0.0, 0.0))
    assert not mask[index]


def test_cell_at_position(flat_grid):
    assert flat_grid.cell_at_position(Vector3(0.9, 0.3, 0.8)).id == cid(1.0, 0.0, 1.0)
    assert flat_grid.cell_at_position(Vector3(-7.0, 0.0, 0.1)).id == cid(-1.0, 0.0, 0.0)


def test_cell_at_position_prefers_traversable(flat_grid):
    center = cid(0.0, 0.0, 0.0)
    flat_grid.set_traversable(center, False)

    assert flat_grid.cell_at_position(Vector3(0.0, 0.0, 0.0), prefer_traversable=False).id == center
    snapped = flat_grid.cell_at_position(Vector3(0.1, 0.0, 0.0))
    assert snapped.id == cid(1.0, 0.0, 0.0)


def test_select_random_cell():
    grid = build_grid(GridDimensions(size=(4.0, 1.0, 4.0), counts=(4, 1, 4)))
    rng = np.random.default_rng(7)
    for _ in range(20):
        cell = select_random_cell(grid, lambda c: c.position.x > 0, rng)
        assert cell.position.x > 0

    assert select_random_cell(grid, lambda c: c.position.x > 10, rng) is None


def test_select_random_cell_deterministic_with_seed(cube_grid):
    a = select_random_cell(cube_grid, rng=np.random.default_rng(3))
    b = select_random_cell(cube_grid, rng=np.random.default_rng(3))
    assert a.id == b.id


def test_scatter_obstacles_keeps_endpoints():
    grid = build_grid(GridDimensions(size=(10.0, 1.0, 10.0), counts=(10, 1, 10)))
    keep = {grid.get_cell_by_index(0, 0, 0).id, grid.get_cell_by_index(9, 0, 9).id}
    blocked = scatter_obstacles(grid, 0.5, np.random.default_rng(1), keep=keep)

    assert len(blocked) == 49
    assert grid.traversable_count == 51
    assert not keep & set(blocked)
    assert all(grid.is_traversable(k) for k in keep)


def test_scatter_obstacles_zero_fraction(flat_grid):
    assert scatter_obstacles(flat_grid, 0.0) == []
    assert flat_grid.traversable_count == 9


def test_grid_to_dict(flat_grid):
    data = flat_grid.to_dict()
    assert data['counts'] == [3, 1, 3]
    assert len(data['cells']) == 9
    assert all(c['traversable'] for c in data['cells'])
