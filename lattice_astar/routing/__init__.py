from .heuristic import HeuristicModel, DIAGONAL_COST, STRAIGHT_COST
from .open_set import OpenSet
from .search_state import SearchState, SearchStatus
from .astar import (
    AstarSearch,
    ExplorationFrame,
    PathResult,
    PathStatus,
    begin_stepped,
    find_path,
    result_from_search,
    step,
)
from .path import (
    compute_path_length,
    extract_path,
    is_valid_path,
    path_cost,
    path_positions,
    path_to_list,
)
