"""Shortest-path search on a 3D lattice."""

from .config import GridDimensions, SearchConfig, ScenarioConfig, ServerConfig, DemoConfig, PRESETS
from .errors import PathfindingError, InvalidDimensions, UnknownCell, InvalidInput, NoPath
from .grid import Cell, CellId, Grid, Vector3, build_grid, set_traversable
from .routing import (
    AstarSearch,
    ExplorationFrame,
    HeuristicModel,
    OpenSet,
    PathResult,
    PathStatus,
    SearchStatus,
    begin_stepped,
    extract_path,
    find_path,
    step,
)

__version__ = "0.1.0"
