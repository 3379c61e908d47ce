#!/usr/bin/env python3


import argparse
import json
import os
import time
from typing import List, Optional, Tuple

import numpy as np

from .config import DemoConfig, ScenarioConfig, PRESETS
from .errors import InvalidInput
from .grid.grid_3d import Grid, build_grid, scatter_obstacles, select_random_cell
from .grid.node import Vector3
from .routing.astar import PathResult, PathStatus, begin_stepped, find_path, result_from_search
from .routing.heuristic import HeuristicModel
from .routing.path import compute_path_length


def print_header(text: str) -> None:
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_step(text: str) -> None:
    """Print a step indicator."""
    print(f"\n>> {text}")


def parse_position(text: str) -> Tuple[float, float, float]:
    """Parse "x,y,z" into a position tuple."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"Expected x,y,z but got '{text}'")
    try:
        return tuple(float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid coordinates: '{text}'")


def setup_grid(config: DemoConfig) -> Grid:
    """Build the grid and scatter random obstacles, keeping scenario endpoints free."""
    print_step("Building grid...")
    grid = build_grid(config.dimensions)
    print(f"   Grid: {grid.nx}x{grid.ny}x{grid.nz} = {grid.total_cells} cells")

    if config.obstacle_fraction > 0:
        keep = set()
        for scenario in config.scenarios:
            keep.add(grid.cell_at_position(Vector3(*scenario.start), prefer_traversable=False).id)
            keep.add(grid.cell_at_position(Vector3(*scenario.goal), prefer_traversable=False).id)

        rng = np.random.default_rng(config.random_seed)
        blocked = scatter_obstacles(grid, config.obstacle_fraction, rng, keep=keep)
        print(f"   Obstacles: {len(blocked)} cells blocked (seed={config.random_seed})")

    return grid


def random_scenario(grid: Grid, rng: np.random.Generator) -> Optional[ScenarioConfig]:
    """Pick two distinct traversable cells as start and goal."""
    start = select_random_cell(grid, lambda c: c.traversable, rng)
    if start is None:
        return None
    goal = select_random_cell(grid, lambda c: c.traversable and c.id != start.id, rng)
    if goal is None:
        return None
    return ScenarioConfig(
        start=start.position.to_tuple(),
        goal=goal.position.to_tuple(),
        name="random",
    )


def run_stepped(grid: Grid, start_id: str, goal_id: str,
                heuristic: HeuristicModel, report_every: int) -> PathResult:
    """Run a search one step at a time, printing progress."""
    search = begin_stepped(grid, start_id, goal_id, heuristic)
    while not search.done:
        search.step()
        if search.steps % report_every == 0:
            print(f"   step {search.steps}: open={len(search.open_set)} closed={len(search.closed)}")
    print(f"   {search.status.value} after {search.steps} steps")
    return result_from_search(search)


def run_scenario(
    scenario: ScenarioConfig,
    grid: Grid,
    heuristic: HeuristicModel,
    config: DemoConfig,
    stepped: bool = False,
) -> Optional[dict]:
    """
    Run a single start/goal scenario.

    Returns:
        Serializable result or None if the endpoints were rejected
    """
    name = scenario.name or "scenario"
    start_cell = grid.cell_at_position(Vector3(*scenario.start), prefer_traversable=False)
    goal_cell = grid.cell_at_position(Vector3(*scenario.goal), prefer_traversable=False)

    print(f"\n   [{name}] {start_cell.id} -> {goal_cell.id}")

    if stepped:
        try:
            result = run_stepped(grid, start_cell.id, goal_cell.id, heuristic,
                                 report_every=config.search.capture_interval)
        except InvalidInput as e:
            result = PathResult(status=PathStatus.INVALID_INPUT, message=str(e))
    else:
        result = find_path(grid, start_cell.id, goal_cell.id, heuristic, config.search)

    if result.status is PathStatus.INVALID_INPUT:
        print(f"   [{name}] REJECTED - {result.message}")
        return None

    if not result.success:
        print(f"   [{name}] NO PATH after exploring {result.nodes_explored} cells")
    else:
        length = compute_path_length(grid, result.path_ids)
        print(f"   [{name}] cost={result.total_cost:.1f} cells={len(result.path_ids)} "
              f"length={length:.2f} explored={result.nodes_explored}")

    data = result.to_dict()
    data['name'] = name
    return data


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="3D Lattice A* Pathfinding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  Run the default scenario:
    python -m lattice_astar.main --preset demo

  Custom endpoints, stepped search:
    python -m lattice_astar.main --preset flat --start -9,0,-9 --goal 9,0,9 --stepped

  Random start and goal among free cells:
    python -m lattice_astar.main --preset demo --random-endpoints --seed 7

Presets: demo, flat, small
        """
    )

    parser.add_argument(
        "--preset",
        choices=list(PRESETS.keys()),
        default="demo",
        help="Configuration preset (default: demo)"
    )

    parser.add_argument("--start", type=parse_position, help="Start position x,y,z")
    parser.add_argument("--goal", type=parse_position, help="Goal position x,y,z")

    parser.add_argument(
        "--obstacles",
        type=float,
        default=None,
        help="Fraction of cells to block at random (overrides preset)"
    )

    parser.add_argument("--seed", type=int, default=None, help="Random seed for obstacles")

    parser.add_argument(
        "--random-endpoints",
        action="store_true",
        help="Pick start and goal at random among traversable cells"
    )

    parser.add_argument(
        "--stepped",
        action="store_true",
        help="Drive the search one step at a time and print progress"
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Write results as JSON to this file"
    )

    args = parser.parse_args()

    preset = PRESETS[args.preset]
    scenarios = preset.scenarios
    if args.start and args.goal:
        scenarios = [ScenarioConfig(start=args.start, goal=args.goal, name="custom")]
    elif args.start or args.goal:
        parser.error("--start and --goal must be given together")
    if args.random_endpoints and args.start:
        parser.error("--random-endpoints cannot be combined with --start/--goal")

    config = DemoConfig(
        dimensions=preset.dimensions,
        search=preset.search,
        scenarios=scenarios,
        obstacle_fraction=preset.obstacle_fraction if args.obstacles is None else args.obstacles,
        random_seed=preset.random_seed if args.seed is None else args.seed,
    )

    print_header("3D Lattice A*")
    print(f"Preset: {args.preset}")

    start_time = time.time()

    grid = setup_grid(config)
    heuristic = HeuristicModel.from_dimensions(config.dimensions)

    scenarios = config.scenarios
    if args.random_endpoints:
        scenario = random_scenario(grid, np.random.default_rng(config.random_seed))
        if scenario is None:
            parser.error("fewer than two traversable cells to choose endpoints from")
        print(f"   Random endpoints: {scenario.start} -> {scenario.goal}")
        scenarios = [scenario]

    print_header("Running Pathfinding")
    results: List[dict] = []
    for scenario in scenarios:
        data = run_scenario(scenario, grid, heuristic, config, stepped=args.stepped)
        if data:
            results.append(data)

    if args.output:
        print_step("Saving output...")
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w") as f:
            json.dump({"grid": grid.to_dict(), "scenarios": results}, f, indent=2)
        print(f"   Saved: {args.output} ({os.path.getsize(args.output):,} bytes)")

    elapsed = time.time() - start_time
    print_header("Complete")
    print(f"Total time: {elapsed:.2f}s")


if __name__ == "__main__":
    main()
