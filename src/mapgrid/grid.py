"""In-memory dungeon map: a rectangular, row-major grid of tiles.

(0, 0) is the top-left tile. Every read and write goes through
:meth:`Grid.get` / :meth:`Grid.set`, which bounds-check the coordinate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from src.core import config
from src.mapgrid.errors import InvalidDimensions, OutOfBounds

EMPTY = "empty"
FILL = "fill"
ASSET = "asset"
BLOCKED = "blocked"
TILE_KINDS = (EMPTY, FILL, ASSET, BLOCKED)

Coord = Tuple[int, int]
Size = Tuple[int, int]
Edges = Dict[str, Optional[str]]

OPPOSITE_EDGE = {"top": "bottom", "bottom": "top", "left": "right", "right": "left"}
EDGE_OFFSETS: Dict[str, Coord] = {
    "top": (0, -1),
    "right": (1, 0),
    "bottom": (0, 1),
    "left": (-1, 0),
}


def empty_edges() -> Edges:
    return {position: None for position in config.EDGE_POSITIONS}


@dataclass
class Tile:
    """One grid cell.

    ``footprint`` and ``native_size`` are only set on an asset anchor;
    ``blocked_by`` only on a blocked cell. ``edges`` always holds the four
    side slots, each ``None`` or an edge type tag.
    """

    kind: str = EMPTY
    asset_name: Optional[str] = None
    rotation: int = 0
    footprint: Optional[Size] = None
    native_size: Optional[Size] = None
    blocked_by: Optional[Coord] = None
    edges: Edges = field(default_factory=empty_edges)

    @classmethod
    def empty(cls, edges: Optional[Edges] = None) -> "Tile":
        return cls(kind=EMPTY, edges=dict(edges) if edges else empty_edges())

    @property
    def is_anchor(self) -> bool:
        return self.kind == ASSET

    def copy(self) -> "Tile":
        return Tile(
            kind=self.kind,
            asset_name=self.asset_name,
            rotation=self.rotation,
            footprint=self.footprint,
            native_size=self.native_size,
            blocked_by=self.blocked_by,
            edges=dict(self.edges),
        )

    def covers(self, anchor: Coord, cell: Coord) -> bool:
        """True when this anchor tile, sitting at ``anchor``, occupies ``cell``."""
        if self.kind != ASSET:
            return False
        width, height = self.footprint or (1, 1)
        return anchor[0] <= cell[0] < anchor[0] + width and anchor[1] <= cell[1] < anchor[1] + height

    # Wire format ----------------------------------------------------------
    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "type": self.kind,
            "asset": self.asset_name if self.kind == ASSET else None,
            "rotation": self.rotation,
            "edges": dict(self.edges),
        }
        if self.kind == ASSET:
            native = self.native_size or (1, 1)
            footprint = self.footprint or native
            data["originalWidth"], data["originalHeight"] = native
            data["placementWidth"], data["placementHeight"] = footprint
        if self.kind == BLOCKED and self.blocked_by is not None:
            data["blockedBy"] = {"x": self.blocked_by[0], "y": self.blocked_by[1]}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Tile":
        kind = data.get("type") or EMPTY
        edges = empty_edges()
        for position, value in (data.get("edges") or {}).items():
            if position in edges:
                edges[position] = value or None
        tile = cls(kind=kind, rotation=int(data.get("rotation") or 0) % 360, edges=edges)
        if kind == ASSET:
            tile.asset_name = data.get("asset")
            native = (int(data.get("originalWidth") or 1), int(data.get("originalHeight") or 1))
            turned = native[::-1] if tile.rotation in (90, 270) else native
            tile.native_size = native
            tile.footprint = (
                int(data.get("placementWidth") or turned[0]),
                int(data.get("placementHeight") or turned[1]),
            )
        elif kind == BLOCKED:
            blocked_by = data.get("blockedBy") or {}
            if "x" in blocked_by and "y" in blocked_by:
                tile.blocked_by = (int(blocked_by["x"]), int(blocked_by["y"]))
        if kind != ASSET:
            tile.rotation = 0
        return tile


class Grid:
    """The authoritative map model: dimensions, tiles, theme and tile size."""

    def __init__(
        self,
        width: int,
        height: int,
        tiles: List[List[Tile]],
        theme: str = config.DEFAULT_THEME,
        tile_size: int = config.DEFAULT_TILE_SIZE,
    ) -> None:
        self.width = width
        self.height = height
        self._tiles = tiles
        self.theme = theme
        # Pixel size is opaque to the engine; it is stored for the renderer and documents.
        self.tile_size = tile_size

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        theme: str = config.DEFAULT_THEME,
        tile_size: int = config.DEFAULT_TILE_SIZE,
    ) -> "Grid":
        if not isinstance(width, int) or not isinstance(height, int) or width < 1 or height < 1:
            raise InvalidDimensions(width, height)
        tiles = [[Tile.empty() for _ in range(width)] for _ in range(height)]
        return cls(width, height, tiles, theme=theme, tile_size=tile_size)

    # Accessors ------------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Tile:
        """Return the live tile at (x, y); replace it with :meth:`set`."""
        if not self.in_bounds(x, y):
            raise OutOfBounds(x, y, self.width, self.height)
        return self._tiles[y][x]

    def set(self, x: int, y: int, tile: Tile) -> None:
        if not self.in_bounds(x, y):
            raise OutOfBounds(x, y, self.width, self.height)
        self._tiles[y][x] = tile

    def neighbor(self, x: int, y: int, position: str) -> Optional[Coord]:
        """Coordinate of the tile sharing ``position`` side of (x, y), if any."""
        dx, dy = EDGE_OFFSETS[position]
        nx, ny = x + dx, y + dy
        if self.in_bounds(nx, ny):
            return nx, ny
        return None

    def cells(self) -> Iterator[Tuple[int, int, Tile]]:
        for y, row in enumerate(self._tiles):
            for x, tile in enumerate(row):
                yield x, y, tile

    def rows(self) -> List[List[Tile]]:
        """Deep copy of the tile rows."""
        return [[tile.copy() for tile in row] for row in self._tiles]

    def clone(self) -> "Grid":
        return Grid(self.width, self.height, self.rows(), theme=self.theme, tile_size=self.tile_size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.theme == other.theme
            and self.tile_size == other.tile_size
            and self._tiles == other._tiles
        )

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, theme={self.theme!r}, tile_size={self.tile_size})"


def find_invariant_violations(grid: Grid) -> List[str]:
    """List every broken occupancy or edge-mirror invariant in ``grid``."""
    problems: List[str] = []
    for x, y, tile in grid.cells():
        if tile.kind == ASSET:
            width, height = tile.footprint or (1, 1)
            if x + width > grid.width or y + height > grid.height:
                problems.append(f"({x}, {y}) footprint {width}x{height} leaves the map")
                continue
            for dy in range(height):
                for dx in range(width):
                    if dx == 0 and dy == 0:
                        continue
                    cell = grid.get(x + dx, y + dy)
                    if cell.kind != BLOCKED or cell.blocked_by != (x, y):
                        problems.append(f"({x + dx}, {y + dy}) is not blocked by anchor ({x}, {y})")
        elif tile.kind == BLOCKED:
            anchor = tile.blocked_by
            if anchor is None or not grid.in_bounds(*anchor):
                problems.append(f"({x}, {y}) blocked by missing anchor {anchor}")
            elif not grid.get(*anchor).covers(anchor, (x, y)):
                problems.append(f"({x}, {y}) blocked by {anchor}, which does not cover it")

        for position in ("right", "bottom"):
            neighbor = grid.neighbor(x, y, position)
            if neighbor is None:
                continue
            facing = grid.get(*neighbor).edges.get(OPPOSITE_EDGE[position])
            if tile.edges.get(position) != facing:
                problems.append(f"({x}, {y}) {position} edge does not mirror {neighbor}")
    return problems
