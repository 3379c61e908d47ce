"""
WebSocket server for live search streaming.

Streams A* exploration state to a front end one step at a time.

Protocol:
---------
1. Client connects
2. Client sends: {"type": "get_grid"}
3. Server sends: {"type": "grid", "data": {"cells": [...], ...}}
4. Client edits obstacles: {"type": "set_traversable", "cell": id | [x,y,z], "traversable": false}
5. Client sends: {"type": "start_search", "start": id | [x,y,z], "goal": id | [x,y,z]}
6. Server streams: {"type": "frame", "data": {...}} once per search step
7. Server sends: {"type": "complete", "data": {"status": ..., "path_ids": [...], ...}}

Usage:
------
    python -m lattice_astar.server.websocket_server --port 8765 --preset demo
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union

import numpy as np
import websockets

from ..config import PRESETS, ServerConfig
from ..errors import PathfindingError, UnknownCell
from ..grid.grid_3d import Grid, build_grid, scatter_obstacles
from ..grid.node import Cell, Vector3
from ..routing.astar import begin_stepped, find_path
from ..routing.heuristic import HeuristicModel
from ..routing.path import extract_path, path_to_list
from ..routing.search_state import SearchStatus

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""
    def default(self, obj):
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


CellRef = Union[str, list]


class WebSocketServer:
    """
    WebSocket server for interactive pathfinding.

    Owns one grid shared by all clients. Each search gets its own state, so
    searches from several clients may stream at once; obstacle edits are
    refused while any search is streaming.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """Initialize server with configuration."""
        self.config = config or ServerConfig()
        self.grid: Optional[Grid] = None
        self.heuristic: Optional[HeuristicModel] = None
        self._active_searches = 0
        self._initialized = False

    def initialize(self, obstacle_fraction: float = 0.0) -> None:
        """Build the grid and cost model."""
        if self._initialized:
            return

        logger.info("Initializing server...")
        self.grid = build_grid(self.config.dimensions)
        self.heuristic = HeuristicModel.from_dimensions(self.config.dimensions)

        if obstacle_fraction > 0:
            rng = np.random.default_rng(self.config.random_seed)
            blocked = scatter_obstacles(self.grid, obstacle_fraction, rng)
            logger.info(f"Placed {len(blocked)} obstacles")

        self._initialized = True
        logger.info(f"Server initialization complete: {self.grid}")

    async def handle_client(self, websocket: Any) -> None:
        """Handle a single client connection."""
        client_id = id(websocket)
        logger.info(f"Client {client_id} connected")

        try:
            async for message in websocket:
                try:
                    data = json.loads(message)
                    await self.handle_message(websocket, data)
                except json.JSONDecodeError:
                    await self.send_error(websocket, "Invalid JSON")
                except PathfindingError as e:
                    await self.send_error(websocket, str(e))
                except Exception as e:
                    logger.error(f"Error handling message: {e}")
                    await self.send_error(websocket, str(e))
        except websockets.exceptions.ConnectionClosed:
            logger.info(f"Client {client_id} disconnected")

    async def handle_message(self, websocket: Any, data: Dict) -> None:
        """Handle incoming message from client."""
        msg_type = data.get("type")

        if msg_type == "get_grid":
            await self.send_json(websocket, {
                "type": "grid",
                "data": self.grid.to_dict()
            })

        elif msg_type == "set_traversable":
            if self._active_searches:
                await self.send_error(websocket, "Grid is busy: a search is in progress")
                return
            if "cell" not in data or "traversable" not in data:
                await self.send_error(websocket, "Missing cell or traversable")
                return

            cell = self._resolve_cell(data["cell"], prefer_traversable=False)
            self.grid.set_traversable(cell.id, bool(data["traversable"]))
            await self.send_json(websocket, {
                "type": "cell_updated",
                "data": {"id": cell.id, "traversable": cell.traversable}
            })

        elif msg_type == "reset":
            if self._active_searches:
                await self.send_error(websocket, "Grid is busy: a search is in progress")
                return
            self.grid.reset_traversable()
            await self.send_json(websocket, {"type": "reset_done"})

        elif msg_type in ("find_path", "start_search"):
            start = data.get("start")
            goal = data.get("goal")

            if start is None or goal is None:
                await self.send_error(websocket, "Missing start or goal")
                return

            start_cell = self._resolve_cell(start, prefer_traversable=False)
            goal_cell = self._resolve_cell(goal, prefer_traversable=False)

            if msg_type == "find_path":
                result = find_path(self.grid, start_cell.id, goal_cell.id, self.heuristic)
                await self.send_json(websocket, {
                    "type": "path",
                    "data": result.to_dict()
                })
            else:
                await self.stream_search(websocket, start_cell.id, goal_cell.id)

        elif msg_type == "ping":
            await self.send_json(websocket, {"type": "pong"})

        else:
            await self.send_error(websocket, f"Unknown message type: {msg_type}")

    async def stream_search(self, websocket: Any, start_id: str, goal_id: str) -> None:
        """Run a stepped search, sending one frame per step."""
        search = begin_stepped(self.grid, start_id, goal_id, self.heuristic)
        logger.info(f"Streaming search: {start_id} -> {goal_id}")

        self._active_searches += 1
        try:
            while not search.done:
                search.step()
                await self.send_json(websocket, {
                    "type": "frame",
                    "data": search.snapshot().to_dict()
                })
                if self.config.step_delay > 0:
                    await asyncio.sleep(self.config.step_delay)
        finally:
            self._active_searches -= 1

        completion = {
            "status": search.status.value,
            "steps": search.steps,
            "nodes_explored": search.nodes_explored,
            "path_ids": [],
            "path": [],
            "total_cost": None,
        }
        if search.status is SearchStatus.FOUND:
            path_ids = extract_path(search)
            completion["path_ids"] = path_ids
            completion["path"] = path_to_list(self.grid, path_ids)
            completion["total_cost"] = search.g_cost(goal_id)

        logger.info(f"Search {search.status.value} after {search.steps} steps")
        await self.send_json(websocket, {"type": "complete", "data": completion})

    def _resolve_cell(self, ref: CellRef, prefer_traversable: bool = True) -> Cell:
        """Accept a cell identity or an [x, y, z] world position."""
        if isinstance(ref, str):
            return self.grid.get_cell(ref)
        if isinstance(ref, (list, tuple)) and len(ref) == 3:
            return self.grid.cell_at_position(Vector3(*ref), prefer_traversable=prefer_traversable)
        raise UnknownCell(ref)

    async def send_json(self, websocket: Any, data: Dict) -> None:
        """Send JSON message to client."""
        await websocket.send(json.dumps(data, cls=NumpyEncoder))

    async def send_error(self, websocket: Any, message: str) -> None:
        """Send error message to client."""
        await self.send_json(websocket, {
            "type": "error",
            "message": message
        })

    async def start(self, obstacle_fraction: float = 0.0) -> None:
        """Start the WebSocket server."""
        self.initialize(obstacle_fraction)

        logger.info(f"Starting WebSocket server on ws://{self.config.host}:{self.config.port}")

        async with websockets.serve(
            self.handle_client,
            self.config.host,
            self.config.port,
        ):
            logger.info("Server running. Press Ctrl+C to stop.")
            await asyncio.Future()  # Run forever


def run_server(host: str = "localhost", port: int = 8765,
               obstacle_fraction: float = 0.0, **kwargs) -> None:
    """Run the WebSocket server."""
    config = ServerConfig(host=host, port=port, **kwargs)
    server = WebSocketServer(config)
    asyncio.run(server.start(obstacle_fraction))


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Lattice A* WebSocket Server")
    parser.add_argument("--host", default="localhost", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8765, help="Port to bind to")
    parser.add_argument("--preset", choices=list(PRESETS.keys()), default="demo",
                        help="Grid preset (default: demo)")
    parser.add_argument("--step-delay", type=float, default=0.01,
                        help="Delay between streamed search steps (seconds)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for obstacle placement")

    args = parser.parse_args()
    preset = PRESETS[args.preset]

    run_server(
        host=args.host,
        port=args.port,
        obstacle_fraction=preset.obstacle_fraction,
        dimensions=preset.dimensions,
        step_delay=args.step_delay,
        random_seed=args.seed,
    )
