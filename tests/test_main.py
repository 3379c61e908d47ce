import json
import sys

import numpy as np
import pytest

from lattice_astar import main as cli
from lattice_astar.config import DemoConfig, GridDimensions, PRESETS, SearchConfig

from conftest import cid


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["lattice-astar", *argv])
    cli.main()


def test_parse_position():
    assert cli.parse_position("1, -2.5,3") == (1.0, -2.5, 3.0)
    with pytest.raises(Exception):
        cli.parse_position("1,2")


def test_small_preset_writes_output(monkeypatch, tmp_path, capsys):
    out = tmp_path / "routes.json"
    run_cli(monkeypatch, "--preset", "small", "--output", str(out))

    data = json.loads(out.read_text())
    [scenario] = data["scenarios"]
    assert scenario["name"] == "diagonal"
    assert scenario["status"] == "found"
    assert scenario["total_cost"] == 28
    assert len(data["grid"]["cells"]) == 9
    assert "cost=28.0" in capsys.readouterr().out


def test_custom_endpoints_stepped(monkeypatch, capsys):
    run_cli(monkeypatch, "--preset", "flat", "--start", "-9,0,-9", "--goal", "9,0,9",
            "--obstacles", "0", "--stepped")
    out = capsys.readouterr().out
    assert "[custom]" in out
    # 9 diagonal steps across a 10x10 grid
    assert "cost=126.0" in out
    assert "found after" in out


def test_demo_preset_runs(monkeypatch, capsys):
    run_cli(monkeypatch, "--preset", "demo", "--seed", "3")
    out = capsys.readouterr().out
    assert "[diagonal]" in out
    assert "Complete" in out


def test_start_without_goal_is_rejected(monkeypatch):
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "--preset", "small", "--start", "0,0,0")


def test_run_scenario_rejects_same_endpoints(capsys):
    config = DemoConfig(dimensions=GridDimensions(size=(3.0, 1.0, 3.0), counts=(3, 1, 3)),
                        search=SearchConfig())
    grid = cli.setup_grid(config)
    heuristic = cli.HeuristicModel.from_dimensions(config.dimensions)
    same = cli.ScenarioConfig(start=(0, 0, 0), goal=(0.1, 0, 0), name="same")

    assert cli.run_scenario(same, grid, heuristic, config) is None
    assert cli.run_scenario(same, grid, heuristic, config, stepped=True) is None
    assert "REJECTED" in capsys.readouterr().out


def test_presets_do_not_share_state(monkeypatch):
    before = PRESETS["small"].obstacle_fraction
    run_cli(monkeypatch, "--preset", "small", "--obstacles", "0.5")
    assert PRESETS["small"].obstacle_fraction == before


def test_random_endpoints(monkeypatch, tmp_path, capsys):
    out = tmp_path / "random.json"
    run_cli(monkeypatch, "--preset", "small", "--random-endpoints", "--seed", "5",
            "--output", str(out))

    [scenario] = json.loads(out.read_text())["scenarios"]
    assert scenario["name"] == "random"
    assert scenario["status"] == "found"
    assert scenario["path_ids"][0] != scenario["path_ids"][-1]
    assert "Random endpoints" in capsys.readouterr().out


def test_random_endpoints_with_start_is_rejected(monkeypatch):
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "--preset", "small", "--random-endpoints",
                "--start", "0,0,0", "--goal", "1,0,1")


def test_random_scenario_picks_distinct_traversable_cells():
    grid = cli.build_grid(GridDimensions(size=(3.0, 1.0, 3.0), counts=(3, 1, 3)))
    ids = grid.cell_ids()
    grid.set_traversable_many(ids[2:], False)

    scenario = cli.random_scenario(grid, np.random.default_rng(0))
    endpoints = {cid(*scenario.start), cid(*scenario.goal)}
    assert endpoints == set(ids[:2])

    grid.set_traversable(ids[1], False)
    assert cli.random_scenario(grid, np.random.default_rng(0)) is None


def test_run_scenario_rejects_blocked_goal(capsys):
    config = DemoConfig(dimensions=GridDimensions(size=(3.0, 1.0, 3.0), counts=(3, 1, 3)))
    grid = cli.setup_grid(config)
    heuristic = cli.HeuristicModel.from_dimensions(config.dimensions)
    grid.set_traversable(cid(1.0, 0.0, 1.0), False)
    blocked = cli.ScenarioConfig(start=(-1, 0, -1), goal=(1, 0, 1), name="blocked")

    assert cli.run_scenario(blocked, grid, heuristic, config) is None
    assert "not traversable" in capsys.readouterr().out
