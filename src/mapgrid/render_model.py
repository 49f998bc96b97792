from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.core import config
from src.mapgrid.grid import ASSET, BLOCKED, FILL, Grid, Size
from src.mapgrid.placement import AssetLookup


@dataclass
class RenderTile:
    """Everything a renderer needs to draw one visible tile."""

    x: int
    y: int
    kind: str
    fill_color: Optional[Tuple[int, int, int]] = None
    asset_name: Optional[str] = None
    asset_path: Optional[str] = None
    native_size: Size = (1, 1)
    rotation: int = 0
    edges: Dict[str, str] = field(default_factory=dict)


def theme_color(theme: str) -> Tuple[int, int, int]:
    return config.THEME_COLORS.get(theme, config.THEME_COLORS[config.DEFAULT_THEME])


def build_render_model(grid: Grid, lookup: Optional[AssetLookup] = None) -> List[RenderTile]:
    """Visible tiles of ``grid`` in row-major order.

    Blocked cells are skipped since their anchor draws the whole asset.
    Assets missing from the catalog keep ``asset_path=None``.
    """
    color = theme_color(grid.theme)
    items: List[RenderTile] = []
    for x, y, tile in grid.cells():
        if tile.kind == BLOCKED:
            continue
        edges = {position: value for position, value in tile.edges.items() if value}
        item = RenderTile(x=x, y=y, kind=tile.kind, edges=edges)
        if tile.kind == FILL:
            item.fill_color = color
        elif tile.kind == ASSET:
            item.asset_name = tile.asset_name
            item.native_size = tile.native_size or tile.footprint or (1, 1)
            item.rotation = tile.rotation
            asset = lookup(grid.theme, tile.asset_name) if lookup else None
            if asset is not None:
                item.asset_path = asset.path
        items.append(item)
    return items
