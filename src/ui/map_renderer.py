"""Draws a map from its render model onto a pygame surface."""

import math
from typing import Dict, Optional, Tuple

import pygame

from src.core import config
from src.core.resource_manager import ResourceManager, get_resource_manager
from src.editor.selection_manager import SelectionRect
from src.mapgrid.grid import ASSET, FILL, Grid
from src.mapgrid.placement import AssetLookup
from src.mapgrid.render_model import RenderTile, build_render_model, theme_color

EDGE_WIDTH = 3


def _edge_line(position: str, rect: pygame.Rect) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    if position == "top":
        return rect.topleft, (rect.right - 1, rect.top)
    if position == "bottom":
        return (rect.left, rect.bottom - 1), (rect.right - 1, rect.bottom - 1)
    if position == "left":
        return rect.topleft, (rect.left, rect.bottom - 1)
    return (rect.right - 1, rect.top), (rect.right - 1, rect.bottom - 1)


def _dashed(surface, color, start, end, width, dash, gap):
    length = math.dist(start, end)
    if length == 0:
        return
    dx = (end[0] - start[0]) / length
    dy = (end[1] - start[1]) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        a = (start[0] + dx * pos, start[1] + dy * pos)
        b = (start[0] + dx * seg_end, start[1] + dy * seg_end)
        pygame.draw.line(surface, color, a, b, width)
        pos = seg_end + gap


def draw_edge(surface: pygame.Surface, position: str, edge_type: str, rect: pygame.Rect, color) -> None:
    start, end = _edge_line(position, rect)
    mid = ((start[0] + end[0]) // 2, (start[1] + end[1]) // 2)
    size = rect.width
    if edge_type == "cracked":
        _dashed(surface, color, start, end, EDGE_WIDTH, max(2, size // 6), max(1, size // 12))
    elif edge_type == "secret":
        pygame.draw.line(surface, color, start, end, EDGE_WIDTH)
        pygame.draw.circle(surface, config.WHITE, mid, max(2, size // 8))
        pygame.draw.circle(surface, color, mid, max(2, size // 8), 1)
    elif edge_type == "door":
        pygame.draw.line(surface, color, start, end, EDGE_WIDTH)
        door = pygame.Rect(0, 0, size // 3, size // 3)
        door.center = mid
        pygame.draw.rect(surface, config.WHITE, door)
        pygame.draw.rect(surface, color, door, 1)
    elif edge_type == "window":
        pygame.draw.line(surface, color, start, end, EDGE_WIDTH)
        pane = pygame.Rect(0, 0, size // 2, max(2, size // 8))
        if position in ("left", "right"):
            pane.size = (pane.height, pane.width)
        pane.center = mid
        pygame.draw.rect(surface, config.WHITE, pane)
        pygame.draw.rect(surface, color, pane, 1)
    elif edge_type == "trap":
        _dashed(surface, config.RED, start, end, EDGE_WIDTH, max(2, size // 8), max(2, size // 8))
    elif edge_type == "lever":
        pygame.draw.line(surface, color, start, end, EDGE_WIDTH)
        pygame.draw.circle(surface, color, mid, max(2, size // 10))
    else:
        pygame.draw.line(surface, color, start, end, EDGE_WIDTH)


class MapRenderer:
    """Paints tiles, edges, grid lines and the selection outline.

    Asset images come from the shared :class:`ResourceManager` through
    ``request_image``; while an image is still loading its footprint is left
    blank, and ``needs_redraw`` is raised once it arrives.
    """

    def __init__(self, resources: Optional[ResourceManager] = None, lookup: Optional[AssetLookup] = None):
        self.resources = resources or get_resource_manager()
        self.lookup = lookup
        self.needs_redraw = True
        self._scaled: Dict[Tuple[str, Tuple[int, int], int], pygame.Surface] = {}

    def _image_ready(self, _path: str, _image: pygame.Surface) -> None:
        self.needs_redraw = True

    def clear_cache(self) -> None:
        self._scaled.clear()

    def _asset_surface(self, item: RenderTile, tile_px: int) -> Optional[pygame.Surface]:
        if item.asset_path is None:
            return None
        native_w, native_h = item.native_size
        size = (native_w * tile_px, native_h * tile_px)
        key = (item.asset_path, size, item.rotation)
        if key in self._scaled:
            return self._scaled[key]
        image = self.resources.request_image(item.asset_path, self._image_ready)
        if image is None:
            return None
        if image.get_size() != size:
            image = pygame.transform.scale(image, size)
        if item.rotation:
            # pygame rotates counter-clockwise
            image = pygame.transform.rotate(image, -item.rotation)
        self._scaled[key] = image
        return image

    def draw(
        self,
        surface: pygame.Surface,
        grid: Grid,
        origin: Tuple[int, int] = (0, 0),
        zoom: float = 1.0,
        show_grid: bool = True,
        selection: Optional[SelectionRect] = None,
    ) -> pygame.Rect:
        """Draw ``grid`` with its top-left at ``origin``; returns the map's screen rect."""
        tile_px = max(1, int(round(grid.tile_size * zoom)))
        ox, oy = origin
        map_rect = pygame.Rect(ox, oy, grid.width * tile_px, grid.height * tile_px)
        surface.fill(config.MAP_BG_COLOR, map_rect)
        color = theme_color(grid.theme)
        model = build_render_model(grid, self.lookup)

        for item in model:
            rect = pygame.Rect(ox + item.x * tile_px, oy + item.y * tile_px, tile_px, tile_px)
            if item.kind == FILL:
                surface.fill(item.fill_color or color, rect)
            elif item.kind == ASSET:
                image = self._asset_surface(item, tile_px)
                if image is not None:
                    surface.blit(image, rect.topleft)
                elif item.asset_path is None:
                    surface.blit(self.resources.placeholder((tile_px, tile_px)), rect.topleft)

        if show_grid:
            for x in range(grid.width + 1):
                px = ox + x * tile_px
                pygame.draw.line(surface, config.GRID_LINE_COLOR, (px, oy), (px, map_rect.bottom))
            for y in range(grid.height + 1):
                py = oy + y * tile_px
                pygame.draw.line(surface, config.GRID_LINE_COLOR, (ox, py), (map_rect.right, py))

        # Edges are drawn for every cell, including those covered by an asset
        for x, y, tile in grid.cells():
            rect = pygame.Rect(ox + x * tile_px, oy + y * tile_px, tile_px, tile_px)
            for position, edge_type in tile.edges.items():
                if edge_type:
                    draw_edge(surface, position, edge_type, rect, color)

        if selection is not None:
            sel = pygame.Rect(
                ox + selection.x * tile_px,
                oy + selection.y * tile_px,
                selection.width * tile_px,
                selection.height * tile_px,
            )
            pygame.draw.rect(surface, config.SELECTION_OUTLINE_COLOR, sel, 2)

        self.needs_redraw = False
        return map_rect

    def render_to_surface(self, grid: Grid, show_grid: bool = False) -> pygame.Surface:
        """Full-size image of the map for PNG export; images are loaded synchronously."""
        for item in build_render_model(grid, self.lookup):
            if item.asset_path is not None:
                self.resources.get_image(item.asset_path)
        surface = pygame.Surface((grid.width * grid.tile_size, grid.height * grid.tile_size))
        self.draw(surface, grid, show_grid=show_grid)
        return surface

    def cell_at(
        self,
        grid: Grid,
        pos: Tuple[int, int],
        origin: Tuple[int, int] = (0, 0),
        zoom: float = 1.0,
    ) -> Optional[Tuple[Tuple[int, int], Tuple[float, float]]]:
        """Map a screen position to ``(cell, offset)``; offset is in unzoomed tile pixels."""
        tile_px = grid.tile_size * zoom
        rel_x = (pos[0] - origin[0]) / tile_px
        rel_y = (pos[1] - origin[1]) / tile_px
        x, y = math.floor(rel_x), math.floor(rel_y)
        if not grid.in_bounds(x, y):
            return None
        offset = ((rel_x - x) * grid.tile_size, (rel_y - y) * grid.tile_size)
        return (x, y), offset
