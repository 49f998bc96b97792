"""Edge synchronization between tiles that share a border.

A tile's ``bottom`` edge and the ``top`` edge of the tile below it describe
the same wall, so every change made here is written to both sides.
"""

from typing import Iterable, Optional

from src.core import config
from src.mapgrid.errors import InvalidEdge
from src.mapgrid.grid import OPPOSITE_EDGE, Grid


def _check_edge(position: str, edge_type: Optional[str]) -> None:
    if position not in config.EDGE_POSITIONS:
        raise InvalidEdge(position, edge_type)
    if edge_type is not None and edge_type not in config.EDGE_TYPES:
        raise InvalidEdge(position, edge_type)


def _write_edge(grid: Grid, x: int, y: int, position: str, value: Optional[str]) -> None:
    tile = grid.get(x, y).copy()
    tile.edges[position] = value
    grid.set(x, y, tile)


def toggle_edge(grid: Grid, x: int, y: int, position: str, edge_type: str) -> Optional[str]:
    """Toggle ``edge_type`` on one side of (x, y) and mirror it onto the neighbour.

    Setting the type a side already has clears it. The neighbour's facing
    side always ends up equal to the new value, including when it is
    cleared. Returns the new value of the side.
    """
    _check_edge(position, edge_type)
    if edge_type is None:
        raise InvalidEdge(position, edge_type)
    current = grid.get(x, y).edges.get(position)
    new_value = None if current == edge_type else edge_type
    _write_edge(grid, x, y, position, new_value)

    neighbor = grid.neighbor(x, y, position)
    if neighbor is not None:
        _write_edge(grid, neighbor[0], neighbor[1], OPPOSITE_EDGE[position], new_value)
    return new_value


def mirror_edges(grid: Grid, x: int, y: int, positions: Iterable[str] = config.EDGE_POSITIONS) -> None:
    """Copy the given sides of (x, y) onto the facing sides of its neighbours."""
    tile = grid.get(x, y)
    for position in positions:
        _check_edge(position, tile.edges.get(position))
        neighbor = grid.neighbor(x, y, position)
        if neighbor is None:
            continue
        facing = OPPOSITE_EDGE[position]
        if grid.get(*neighbor).edges.get(facing) != tile.edges.get(position):
            _write_edge(grid, neighbor[0], neighbor[1], facing, tile.edges.get(position))
