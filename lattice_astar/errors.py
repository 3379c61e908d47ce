"""Error kinds raised by the pathfinding core."""


class PathfindingError(Exception):
    """Base class for all pathfinding errors."""


class InvalidDimensions(PathfindingError, ValueError):
    """Grid dimensions with a non-positive extent or a cell count below 1."""


class UnknownCell(PathfindingError, KeyError):
    """A cell identity that is not present in the grid."""

    def __init__(self, cell_id):
        super().__init__(cell_id)
        self.cell_id = cell_id

    def __str__(self) -> str:
        return f"Unknown cell: {self.cell_id}"


class InvalidInput(PathfindingError, ValueError):
    """Start/goal unknown, non-traversable, or identical."""


class NoPath(PathfindingError):
    """Raised when a path is requested from a search that has not found one."""
