"""Placing, clearing and rotating fills and multi-tile assets.

An asset occupies a rectangular footprint whose top-left cell is the
*anchor* (kind ``asset``); every other cell of the footprint is ``blocked``
and points back at the anchor. Edges are never touched by anything in this
module.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Set, Tuple

from src.core import config
from src.mapgrid.errors import (
    AssetNotFound,
    InvalidRotation,
    PlacementOutOfBounds,
    RotationOutOfBounds,
)
from src.mapgrid.grid import ASSET, BLOCKED, EMPTY, FILL, Coord, Grid, Size, Tile

# (theme, name) -> catalog entry with ``name``, ``width`` and ``height`` attributes, or None
AssetLookup = Callable[[str, str], Optional[object]]


def normalize_rotation(rotation: int) -> int:
    if not isinstance(rotation, int) or rotation % 360 not in config.ROTATIONS:
        raise InvalidRotation(rotation)
    return rotation % 360


def next_rotation(rotation: int) -> int:
    return (normalize_rotation(rotation) + 90) % 360


def footprint_for(native_size: Size, rotation: int) -> Size:
    """Occupied width/height after rotation: quarter turns swap the sides."""
    width, height = native_size
    if normalize_rotation(rotation) in (90, 270):
        return height, width
    return width, height


def footprint_cells(anchor: Coord, footprint: Size) -> List[Coord]:
    x, y = anchor
    width, height = footprint
    return [(x + dx, y + dy) for dy in range(height) for dx in range(width)]


def fits(grid: Grid, x: int, y: int, footprint: Size) -> bool:
    width, height = footprint
    return grid.in_bounds(x, y) and x + width <= grid.width and y + height <= grid.height


def resolve_anchor(grid: Grid, x: int, y: int) -> Optional[Coord]:
    """Anchor coordinate of the asset occupying (x, y), or None.

    A blocked cell's back-reference is validated: it must point inside the
    map at an asset whose footprint covers (x, y).
    """
    tile = grid.get(x, y)
    if tile.kind == ASSET:
        return x, y
    if tile.kind != BLOCKED or tile.blocked_by is None:
        return None
    anchor = tile.blocked_by
    if not grid.in_bounds(*anchor):
        return None
    if not grid.get(*anchor).covers(anchor, (x, y)):
        return None
    return anchor


def _clear_cell(grid: Grid, x: int, y: int) -> None:
    grid.set(x, y, Tile.empty(grid.get(x, y).edges))


def clear_tile(grid: Grid, x: int, y: int) -> Set[Coord]:
    """Reset (x, y) to empty; a cell of a multi-tile asset clears the whole asset.

    Returns the set of cleared coordinates; empty when (x, y) was already empty.
    """
    tile = grid.get(x, y)
    anchor = resolve_anchor(grid, x, y)
    if anchor is None:
        if tile.kind == EMPTY:
            return set()
        # Plain cells, and blocked cells whose anchor reference is corrupt
        _clear_cell(grid, x, y)
        return {(x, y)}

    footprint = grid.get(*anchor).footprint or (1, 1)
    cleared: Set[Coord] = set()
    for cx, cy in footprint_cells(anchor, footprint):
        if grid.in_bounds(cx, cy):
            _clear_cell(grid, cx, cy)
            cleared.add((cx, cy))
    return cleared


def place_fill(grid: Grid, x: int, y: int) -> None:
    clear_tile(grid, x, y)
    tile = grid.get(x, y).copy()
    tile.kind = FILL
    grid.set(x, y, tile)


def _stamp_blocked(grid: Grid, anchor: Coord, footprint: Size) -> None:
    for cx, cy in footprint_cells(anchor, footprint):
        if (cx, cy) == anchor:
            continue
        grid.set(cx, cy, Tile(kind=BLOCKED, blocked_by=anchor, edges=dict(grid.get(cx, cy).edges)))


def place_asset(
    grid: Grid,
    x: int,
    y: int,
    asset_name: str,
    rotation: int,
    lookup: AssetLookup,
) -> Tile:
    """Place ``asset_name`` with its anchor at (x, y).

    Raises AssetNotFound or PlacementOutOfBounds without touching the grid.
    Returns the new anchor tile.
    """
    rotation = normalize_rotation(rotation)
    asset = lookup(grid.theme, asset_name)
    if asset is None:
        raise AssetNotFound(grid.theme, asset_name)

    native_size = (max(1, int(asset.width or 1)), max(1, int(asset.height or 1)))
    footprint = footprint_for(native_size, rotation)
    if not fits(grid, x, y, footprint):
        raise PlacementOutOfBounds(x, y, footprint)

    for cx, cy in footprint_cells((x, y), footprint):
        clear_tile(grid, cx, cy)

    anchor = Tile(
        kind=ASSET,
        asset_name=asset.name,
        rotation=rotation,
        footprint=footprint,
        native_size=native_size,
        edges=dict(grid.get(x, y).edges),
    )
    grid.set(x, y, anchor)
    _stamp_blocked(grid, (x, y), footprint)
    return anchor


def rotate_asset_at(grid: Grid, x: int, y: int) -> Optional[Tuple[Coord, int]]:
    """Turn the asset occupying (x, y) a quarter turn clockwise in place.

    Returns ``(anchor, new_rotation)``, or None when no asset is there.
    Raises RotationOutOfBounds, leaving the grid unchanged, when the rotated
    footprint would leave the map.
    """
    anchor = resolve_anchor(grid, x, y)
    if anchor is None:
        return None

    tile = grid.get(*anchor)
    native_size = tile.native_size or tile.footprint or (1, 1)
    current = footprint_for(native_size, tile.rotation)
    new_rotation = next_rotation(tile.rotation)
    new_footprint = footprint_for(native_size, new_rotation)

    if native_size == (1, 1):
        updated = tile.copy()
        updated.rotation = new_rotation
        updated.footprint = (1, 1)
        grid.set(anchor[0], anchor[1], updated)
        return anchor, new_rotation

    if not fits(grid, anchor[0], anchor[1], new_footprint):
        raise RotationOutOfBounds(anchor[0], anchor[1], new_footprint)

    for cx, cy in footprint_cells(anchor, current):
        if (cx, cy) == anchor or not grid.in_bounds(cx, cy):
            continue
        cell = grid.get(cx, cy)
        if cell.kind == BLOCKED and cell.blocked_by == anchor:
            _clear_cell(grid, cx, cy)
    # Assets in the way of the turned footprint are removed whole, as placement does
    for cx, cy in footprint_cells(anchor, new_footprint):
        if (cx, cy) != anchor and resolve_anchor(grid, cx, cy) not in (None, anchor):
            clear_tile(grid, cx, cy)

    updated = tile.copy()
    updated.rotation = new_rotation
    updated.footprint = new_footprint
    updated.native_size = native_size
    grid.set(anchor[0], anchor[1], updated)
    _stamp_blocked(grid, anchor, new_footprint)
    return anchor, new_rotation
