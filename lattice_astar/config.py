"""
Configuration for the lattice pathfinding system.

Every setting is passed explicitly into the calls that need it; nothing
here is read as process-wide state.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import InvalidDimensions


@dataclass(frozen=True)
class GridDimensions:
    """World extent and cell count per axis.

    Coordinate system (Y-up):
    - X: width
    - Y: height
    - Z: depth

    The grid is centered on the origin, so every cell center lies within
    half the extent on each axis.
    """
    size: Tuple[float, float, float] = (20.0, 2.0, 20.0)
    counts: Tuple[int, int, int] = (20, 2, 20)

    def validate(self) -> None:
        """Raise InvalidDimensions unless all extents are finite and positive and all counts are integers >= 1."""
        if len(self.size) != 3 or len(self.counts) != 3:
            raise InvalidDimensions(
                f"Expected 3 extents and 3 counts, got {self.size} and {self.counts}"
            )
        for axis, extent in enumerate(self.size):
            if not (math.isfinite(extent) and extent > 0):
                raise InvalidDimensions(f"Extent on axis {axis} must be positive and finite, got {extent}")
        for axis, count in enumerate(self.counts):
            if isinstance(count, bool) or int(count) != count or count < 1:
                raise InvalidDimensions(f"Cell count on axis {axis} must be an integer >= 1, got {count}")

    @property
    def cell_widths(self) -> Tuple[float, float, float]:
        """Width of a single cell along each axis."""
        return tuple(float(s) / int(n) for s, n in zip(self.size, self.counts))

    @property
    def half_extents(self) -> Tuple[float, float, float]:
        return tuple(float(s) / 2.0 for s in self.size)

    @property
    def total_cells(self) -> int:
        nx, ny, nz = self.counts
        return int(nx) * int(ny) * int(nz)


@dataclass
class SearchConfig:
    """Search configuration."""
    capture_exploration: bool = False
    capture_interval: int = 20  # exploration frame capture interval (steps)

    def __post_init__(self):
        if self.capture_interval < 1:
            raise ValueError("capture_interval must be >= 1")


@dataclass
class ScenarioConfig:
    """A single start/goal scenario, in world coordinates."""
    start: Tuple[float, float, float]
    goal: Tuple[float, float, float]
    name: Optional[str] = None


@dataclass
class ServerConfig:
    """WebSocket server configuration."""
    host: str = "localhost"
    port: int = 8765
    dimensions: GridDimensions = field(default_factory=GridDimensions)
    step_delay: float = 0.01  # Seconds between streamed search steps
    random_seed: Optional[int] = None


@dataclass
class DemoConfig:
    """Complete demo configuration."""
    dimensions: GridDimensions = field(default_factory=GridDimensions)
    search: SearchConfig = field(default_factory=SearchConfig)
    scenarios: List[ScenarioConfig] = field(default_factory=list)
    obstacle_fraction: float = 0.0  # fraction of cells made non-traversable
    random_seed: int = 42

    def __post_init__(self):
        if not 0.0 <= self.obstacle_fraction < 1.0:
            raise ValueError("obstacle_fraction must be in [0, 1)")

        # Default scenario: opposite corners of the bottom layer
        if not self.scenarios:
            hx, hy, hz = self.dimensions.half_extents
            wx, wy, wz = self.dimensions.cell_widths
            low_y = -hy + wy / 2
            self.scenarios = [
                ScenarioConfig(
                    start=(-hx + wx / 2, low_y, -hz + wz / 2),
                    goal=(hx - wx / 2, low_y, hz - wz / 2),
                    name="diagonal",
                ),
            ]


# Preset configurations
PRESETS = {
    "demo": DemoConfig(
        dimensions=GridDimensions(size=(20.0, 2.0, 20.0), counts=(20, 2, 20)),
        obstacle_fraction=0.2,
    ),
    "flat": DemoConfig(
        dimensions=GridDimensions(size=(20.0, 1.0, 20.0), counts=(10, 1, 10)),
        obstacle_fraction=0.2,
    ),
    "small": DemoConfig(
        dimensions=GridDimensions(size=(3.0, 1.0, 3.0), counts=(3, 1, 3)),
    ),
}
