"""Copy, cut, paste and delete of rectangular map regions.

Regions are handled asset-aware: an asset is always copied, pasted or
removed as a whole, never split at the rectangle boundary.
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from src.editor.selection_manager import SelectionRect
from src.mapgrid.edges import mirror_edges
from src.mapgrid.grid import ASSET, BLOCKED, Grid, Tile
from src.mapgrid.placement import clear_tile, footprint_cells, resolve_anchor

Cell = Tuple[int, int]


@dataclass
class ClipboardEntry:
    """Deep copy of a region; ``blocked_by`` in ``cells`` is relative to the region."""

    width: int
    height: int
    cells: List[List[Tile]]

    def copy_cells(self) -> List[List[Tile]]:
        return [[tile.copy() for tile in row] for row in self.cells]


def _inside(rect: SelectionRect, anchor: Cell, footprint: Tuple[int, int]) -> bool:
    return all(rect.contains(x, y) for x, y in footprint_cells(anchor, footprint))


def delete_region(grid: Grid, rect: SelectionRect) -> Set[Cell]:
    """Clear every tile in ``rect``; assets reaching into it are removed whole."""
    cleared: Set[Cell] = set()
    for x, y in rect.cells():
        if (x, y) in cleared or not grid.in_bounds(x, y):
            continue
        cleared |= clear_tile(grid, x, y)
    return cleared


class ClipboardManager:
    """Holds the last copied region and applies it back onto a grid."""

    def __init__(self):
        self.entry: Optional[ClipboardEntry] = None

    def has_content(self) -> bool:
        return self.entry is not None

    def clear(self) -> None:
        self.entry = None

    def copy(self, grid: Grid, rect: SelectionRect) -> ClipboardEntry:
        """Snapshot ``rect``. Cells of assets only partly inside become empty."""
        rows: List[List[Tile]] = []
        for y in range(rect.y, rect.y + rect.height):
            row: List[Tile] = []
            for x in range(rect.x, rect.x + rect.width):
                tile = grid.get(x, y)
                anchor = resolve_anchor(grid, x, y)
                if anchor is None:
                    # Blocked cells with a corrupt anchor reference are not carried over
                    row.append(Tile.empty(tile.edges) if tile.kind == BLOCKED else tile.copy())
                    continue
                footprint = grid.get(*anchor).footprint or (1, 1)
                if not _inside(rect, anchor, footprint):
                    row.append(Tile.empty(tile.edges))
                    continue
                copied = tile.copy()
                if copied.kind == BLOCKED:
                    copied.blocked_by = (anchor[0] - rect.x, anchor[1] - rect.y)
                row.append(copied)
            rows.append(row)
        self.entry = ClipboardEntry(width=rect.width, height=rect.height, cells=rows)
        return self.entry

    def cut(self, grid: Grid, rect: SelectionRect) -> ClipboardEntry:
        entry = self.copy(grid, rect)
        delete_region(grid, rect)
        return entry

    def paste(self, grid: Grid, target: Cell) -> Optional[SelectionRect]:
        """Stamp the clipboard with its top-left at ``target``.

        The region is clipped to the map; assets that would be cut by the
        clip are dropped. Returns the pasted (clipped) rectangle, or None
        when there is nothing to paste or the target is off the map.
        """
        if self.entry is None or not grid.in_bounds(*target):
            return None
        tx, ty = target
        width = min(self.entry.width, grid.width - tx)
        height = min(self.entry.height, grid.height - ty)
        region = SelectionRect(tx, ty, width, height)
        cells = self.entry.copy_cells()

        def keeps_asset(anchor: Cell) -> bool:
            ax, ay = anchor
            fw, fh = cells[ay][ax].footprint or (1, 1)
            return ax + fw <= width and ay + fh <= height

        delete_region(grid, region)
        for cy in range(height):
            for cx in range(width):
                tile = cells[cy][cx]
                if tile.kind == ASSET and not keeps_asset((cx, cy)):
                    tile = Tile.empty(tile.edges)
                elif tile.kind == BLOCKED:
                    rel = tile.blocked_by
                    if rel is None or cells[rel[1]][rel[0]].kind != ASSET or not keeps_asset(rel):
                        tile = Tile.empty(tile.edges)
                    else:
                        tile.blocked_by = (tx + rel[0], ty + rel[1])
                grid.set(tx + cx, ty + cy, tile)

        for x, y in region.cells():
            outward = []
            if x == region.x:
                outward.append("left")
            if x == region.right:
                outward.append("right")
            if y == region.y:
                outward.append("top")
            if y == region.bottom:
                outward.append("bottom")
            if outward:
                mirror_edges(grid, x, y, outward)
        return region
