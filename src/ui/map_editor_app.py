import argparse
from typing import List, Optional, Sequence, Tuple

import pygame

from src.core import config
from src.core.asset_catalog import AssetCatalog, display_name
from src.core.input_actions import InputActionMap, load_action_map
from src.core.resource_manager import get_resource_manager
from src.editor.file_io import FileIOManager
from src.editor.map_commands import MapEditorSession
from src.editor.tool_manager import ToolManager
from src.mapgrid.errors import InvalidDocument
from src.ui.map_renderer import MapRenderer

PALETTE_WIDTH = 220
TOOLBAR_HEIGHT = 74
STATUS_HEIGHT = 24
CANVAS_MARGIN = 8
PALETTE_ROW_HEIGHT = 22


def prompt_text(screen: pygame.Surface, font: pygame.font.Font, message: str, default: str = "") -> Optional[str]:
    """Blocking text input prompt rendered over the editor."""
    input_text = default
    clock = pygame.time.Clock()
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return None
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    return input_text
                if event.key == pygame.K_ESCAPE:
                    return None
                if event.key == pygame.K_BACKSPACE:
                    input_text = input_text[:-1]
                elif event.unicode:
                    input_text += event.unicode

        overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        screen.blit(overlay, (0, 0))
        lines = [message, "> " + input_text, "Enter to confirm, Esc to cancel"]
        for idx, line in enumerate(lines):
            surf = font.render(line, True, config.PANEL_TEXT)
            rect = surf.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2 + idx * 24))
            screen.blit(surf, rect)
        pygame.display.flip()
        clock.tick(30)


def parse_size(text: str) -> Optional[Tuple[int, int]]:
    """Parse ``"WxH"`` into a size; None when malformed."""
    parts = (text or "").lower().replace(" ", "").split("x")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return None
    return int(parts[0]), int(parts[1])


class MapEditorApp:
    def __init__(
        self,
        session: Optional[MapEditorSession] = None,
        action_map: Optional[InputActionMap] = None,
        file_io: Optional[FileIOManager] = None,
    ) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((config.EDITOR_WIDTH, config.EDITOR_HEIGHT))
        pygame.display.set_caption("Dungeon Map Editor")
        self.clock = pygame.time.Clock()
        self.resources = get_resource_manager()
        self.font = self.resources.get_font(config.DEFAULT_FONT, config.STATUS_FONT_SIZE)
        self.font_small = self.resources.get_font(config.DEFAULT_FONT, config.PANEL_FONT_SIZE)

        self.session = session or MapEditorSession(catalog=AssetCatalog())
        self.state = self.session.state
        self.tools = ToolManager(self.session)
        self.renderer = MapRenderer(self.resources, self.session.lookup)
        self.file_io = file_io or FileIOManager()
        self.actions = action_map or load_action_map()

        self.save_name = config.DEFAULT_SAVE_NAME
        self.search_text = ""
        self.palette_scroll = 0
        self.pan_start: Optional[Tuple[int, int]] = None
        self.pointer_in_canvas = False
        self.button_rects: List[Tuple[pygame.Rect, str]] = []
        self.palette_rects: List[Tuple[pygame.Rect, str]] = []

    # Main loop ------------------------------------------------------------
    def run(self) -> None:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event)
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    self._handle_mouse_down(event)
                elif event.type == pygame.MOUSEBUTTONUP:
                    self._handle_mouse_up(event)
                elif event.type == pygame.MOUSEMOTION:
                    self._handle_mouse_motion(event)
                elif event.type == pygame.MOUSEWHEEL:
                    self._handle_wheel(event)
                elif event.type == pygame.WINDOWLEAVE:
                    self.tools.pointer_leave()

            self.resources.pump(limit=8)
            self._draw()
            pygame.display.flip()
            self.clock.tick(config.FPS)

        pygame.quit()

    # Input ----------------------------------------------------------------
    def _handle_key(self, event: pygame.event.Event) -> None:
        actions = self.actions.actions_for_event(event)
        if not actions:
            return
        session = self.session
        if "undo" in actions:
            session.undo()
        elif "redo" in actions:
            session.redo()
        elif "copy" in actions:
            session.copy()
        elif "cut" in actions:
            session.cut()
        elif "paste" in actions:
            session.paste()
        elif "delete" in actions:
            session.delete_selection()
        elif "rotate" in actions:
            session.rotate()
        elif "deselect" in actions:
            session.clear_selection()
        elif "zoom_in" in actions:
            self._zoom(config.ZOOM_STEP)
        elif "zoom_out" in actions:
            self._zoom(-config.ZOOM_STEP)
        elif "reset_view" in actions:
            self.state.reset_view()
            self.renderer.clear_cache()
        elif "toggle_grid" in actions:
            self.state.toggle_grid()
        elif "save" in actions:
            self._save_map()
        elif "download" in actions:
            self._download_map()
        elif "export_png" in actions:
            self._export_png()
        else:
            for action in actions:
                if action.startswith("tool_"):
                    self.tools.set_active_tool(action[len("tool_"):])
                elif action.startswith("pan_"):
                    self._pan_by_key(action)

    def _pan_by_key(self, action: str) -> None:
        dx, dy = {
            "pan_up": (0, config.PAN_SPEED_PIXELS),
            "pan_down": (0, -config.PAN_SPEED_PIXELS),
            "pan_left": (config.PAN_SPEED_PIXELS, 0),
            "pan_right": (-config.PAN_SPEED_PIXELS, 0),
        }[action]
        self.state.view_offset_x += dx
        self.state.view_offset_y += dy

    def _zoom(self, delta: float) -> None:
        if self.state.adjust_zoom(delta):
            self.renderer.clear_cache()
            self.state.status_message = f"Zoom {int(round(self.state.zoom * 100))}%"

    def _handle_wheel(self, event: pygame.event.Event) -> None:
        if self._palette_rect().collidepoint(pygame.mouse.get_pos()):
            self.palette_scroll = max(0, self.palette_scroll - event.y * PALETTE_ROW_HEIGHT)
            return
        if event.y:
            self._zoom(config.ZOOM_STEP if event.y > 0 else -config.ZOOM_STEP)

    def _handle_mouse_down(self, event: pygame.event.Event) -> None:
        if event.button in (4, 5):
            return
        if event.button == 1:
            for rect, key in self.button_rects:
                if rect.collidepoint(event.pos):
                    self._handle_button(key)
                    return
            if self._palette_rect().collidepoint(event.pos):
                self._handle_palette_click(event.pos)
                return
        alt_held = pygame.key.get_mods() & pygame.KMOD_ALT
        if event.button == 2 or (event.button == 1 and alt_held):
            self.state.panning = True
            self.pan_start = event.pos
            return
        if event.button == 1:
            hit = self._cell_from_mouse(event.pos)
            if hit:
                self.tools.pointer_down(*hit)

    def _handle_mouse_up(self, event: pygame.event.Event) -> None:
        if self.state.panning and event.button in (1, 2):
            self.state.panning = False
            self.pan_start = None
            return
        if event.button == 1:
            self.tools.pointer_up()

    def _handle_mouse_motion(self, event: pygame.event.Event) -> None:
        if self.state.panning and self.pan_start:
            self.state.view_offset_x += event.pos[0] - self.pan_start[0]
            self.state.view_offset_y += event.pos[1] - self.pan_start[1]
            self.pan_start = event.pos
            return
        hit = self._cell_from_mouse(event.pos)
        if hit is None:
            if self.pointer_in_canvas:
                self.tools.pointer_leave()
            self.pointer_in_canvas = False
            return
        self.pointer_in_canvas = True
        self.tools.pointer_move(*hit)

    # Layout ---------------------------------------------------------------
    def _canvas_rect(self) -> pygame.Rect:
        return pygame.Rect(
            PALETTE_WIDTH + CANVAS_MARGIN,
            TOOLBAR_HEIGHT + CANVAS_MARGIN,
            self.screen.get_width() - PALETTE_WIDTH - CANVAS_MARGIN * 2,
            self.screen.get_height() - TOOLBAR_HEIGHT - STATUS_HEIGHT - CANVAS_MARGIN * 2,
        )

    def _palette_rect(self) -> pygame.Rect:
        return pygame.Rect(0, 0, PALETTE_WIDTH, self.screen.get_height())

    def _map_origin(self) -> Tuple[int, int]:
        canvas = self._canvas_rect()
        return canvas.x + self.state.view_offset_x, canvas.y + self.state.view_offset_y

    def _cell_from_mouse(self, pos: Tuple[int, int]):
        if not self._canvas_rect().collidepoint(pos):
            return None
        return self.renderer.cell_at(self.session.grid, pos, self._map_origin(), self.state.zoom)

    # Buttons and palette --------------------------------------------------
    def _handle_button(self, key: str) -> None:
        if key.startswith("tool:"):
            self.tools.set_active_tool(key.split(":", 1)[1])
        elif key.startswith("edge:"):
            self.tools.end_stroke()
            self.state.set_edge_type(key.split(":", 1)[1])
        elif key == "theme":
            themes = list(config.THEME_COLORS)
            current = themes.index(self.session.grid.theme) if self.session.grid.theme in themes else -1
            self.session.set_theme(themes[(current + 1) % len(themes)])
            self.renderer.clear_cache()
        elif key == "new":
            self._new_map_dialog()
        elif key == "save":
            self._save_map()
        elif key == "load":
            self._load_map_prompt()
        elif key == "open":
            self._open_file_prompt()
        elif key == "download":
            self._download_map()
        elif key == "export":
            self._export_png()
        elif key == "search":
            text = prompt_text(self.screen, self.font, "Filter assets:", self.search_text)
            if text is not None:
                self.search_text = text
                self.palette_scroll = 0

    def _visible_assets(self):
        return self.session.catalog.search(self.session.grid.theme, self.search_text)

    def _handle_palette_click(self, pos: Tuple[int, int]) -> None:
        for rect, name in self.palette_rects:
            if rect.collidepoint(pos):
                self.tools.end_stroke()
                self.state.select_asset(name)
                self.state.status_message = f"Selected {display_name(name)}"
                return
        if pos[1] > self._palette_rect().bottom - 40:
            # "Plain fill" row at the bottom of the palette
            self.state.select_asset(None)
            self.state.status_message = "Fill tool: plain fill"

    # Persistence ----------------------------------------------------------
    def _save_map(self) -> None:
        name = prompt_text(self.screen, self.font, "Save map as:", self.save_name)
        if not name:
            return
        if self.file_io.save_map(name, self.session.grid):
            self.save_name = name
            self.state.status_message = f"Map saved as '{name}'."

    def _load_map_prompt(self) -> None:
        saved = self.file_io.list_saved_maps()
        if not saved:
            self.state.status_message = "No saved maps."
            return
        hint = ", ".join(entry["name"] for entry in saved[:5])
        name = prompt_text(self.screen, self.font, f"Load map ({hint}):", saved[0]["name"])
        if not name:
            return
        grid = self.file_io.load_saved_map(name)
        if grid is None:
            self.state.status_message = f"Map '{name}' could not be loaded."
            return
        self.session.load_grid(grid, source=f"saved map '{name}'")
        self.save_name = name
        self.renderer.clear_cache()

    def _open_file_prompt(self) -> None:
        path = prompt_text(self.screen, self.font, "Map file path:")
        if not path:
            return
        self.open_file(path)

    def open_file(self, path: str) -> None:
        try:
            grid = self.file_io.read_map_file(path)
        except InvalidDocument as e:
            print(f"Error loading map file: {e}")
            self.state.status_message = str(e)
            return
        self.session.load_grid(grid, source=path)
        self.renderer.clear_cache()

    def _download_map(self) -> None:
        path = self.file_io.download_map(self.session.grid, self.save_name)
        if path:
            self.state.status_message = f"Map written to {path}"

    def _export_png(self) -> None:
        surface = self.renderer.render_to_surface(self.session.grid)
        path = self.file_io.export_png(surface, self.save_name)
        if path:
            self.state.status_message = f"Image exported to {path}"

    def _new_map_dialog(self) -> None:
        text = prompt_text(
            self.screen,
            self.font,
            "New map size (WxH):",
            f"{self.session.grid.width}x{self.session.grid.height}",
        )
        if text is None:
            return
        size = parse_size(text)
        if size is None:
            self.state.status_message = "Size must look like 20x15."
            return
        self.tools.end_stroke()
        theme = self.session.grid.theme
        if theme not in config.THEME_COLORS:
            theme = config.DEFAULT_THEME
        self.session.new_map(size[0], size[1], theme=theme, tile_size=self.session.grid.tile_size)
        self.state.reset_view()
        self.renderer.clear_cache()

    # Drawing --------------------------------------------------------------
    def _draw(self) -> None:
        self.screen.fill(config.EDITOR_BG_COLOR)
        self._draw_canvas()
        self._draw_toolbar()
        self._draw_palette()
        self._draw_status()

    def _draw_canvas(self) -> None:
        canvas = self._canvas_rect()
        self.screen.set_clip(canvas)
        self.renderer.draw(
            self.screen,
            self.session.grid,
            origin=self._map_origin(),
            zoom=self.state.zoom,
            show_grid=self.state.show_grid,
            selection=self.session.selection.rect,
        )
        self.screen.set_clip(None)

    def _draw_button(self, rect: pygame.Rect, label: str, key: str, active: bool = False) -> None:
        pygame.draw.rect(self.screen, config.PANEL_BG, rect)
        pygame.draw.rect(self.screen, config.HIGHLIGHT if active else config.GRAY_DARK, rect, 2 if active else 1)
        text = self.font_small.render(label, True, config.PANEL_TEXT)
        self.screen.blit(text, text.get_rect(center=rect.center))
        self.button_rects.append((rect, key))

    def _draw_toolbar(self) -> None:
        toolbar = pygame.Rect(PALETTE_WIDTH, 0, self.screen.get_width() - PALETTE_WIDTH, TOOLBAR_HEIGHT)
        pygame.draw.rect(self.screen, config.PANEL_BG, toolbar)
        self.button_rects = []
        x = toolbar.x + 8
        y = toolbar.y + 8
        for label, tool in (("Select", "select"), ("Fill", "fill"), ("Empty", "empty"), ("Edge", "edge")):
            self._draw_button(pygame.Rect(x, y, 70, 26), label, f"tool:{tool}", self.state.tool == tool)
            x += 78
        x += 12
        for label, key in (
            ("New", "new"),
            ("Save", "save"),
            ("Load", "load"),
            ("Open", "open"),
            ("Download", "download"),
            ("Export", "export"),
        ):
            self._draw_button(pygame.Rect(x, y, 74, 26), label, key)
            x += 82
        self._draw_button(pygame.Rect(x, y, 170, 26), self.session.grid.theme, "theme")

        x = toolbar.x + 8
        y += 34
        for edge_type in config.EDGE_TYPES:
            active = self.state.tool == "edge" and self.state.edge_type == edge_type
            self._draw_button(pygame.Rect(x, y, 70, 26), edge_type.title(), f"edge:{edge_type}", active)
            x += 78

    def _draw_palette(self) -> None:
        panel = self._palette_rect()
        pygame.draw.rect(self.screen, config.PANEL_BG, panel)
        self.palette_rects = []
        header = f"Assets: {self.search_text}" if self.search_text else "Assets"
        search_rect = pygame.Rect(8, 8, PALETTE_WIDTH - 16, 24)
        self._draw_button(search_rect, header, "search")

        list_top = search_rect.bottom + 8
        list_bottom = panel.bottom - 48
        self.screen.set_clip(pygame.Rect(0, list_top, PALETTE_WIDTH, list_bottom - list_top))
        y = list_top - self.palette_scroll
        for asset in self._visible_assets():
            rect = pygame.Rect(8, y, PALETTE_WIDTH - 16, PALETTE_ROW_HEIGHT - 2)
            if rect.bottom >= list_top and rect.top <= list_bottom:
                active = asset.name == self.state.selected_asset
                if active:
                    pygame.draw.rect(self.screen, config.HIGHLIGHT, rect, 1)
                label = display_name(asset.name)
                if (asset.width, asset.height) != (1, 1):
                    label += f" ({asset.width}x{asset.height})"
                text = self.font_small.render(label, True, config.PANEL_TEXT)
                self.screen.blit(text, (rect.x + 4, rect.y + 3))
                self.palette_rects.append((rect, asset.name))
            y += PALETTE_ROW_HEIGHT
        self.screen.set_clip(None)

        fill_rect = pygame.Rect(8, panel.bottom - 40, PALETTE_WIDTH - 16, 26)
        active = self.state.tool == "fill" and not self.state.selected_asset
        pygame.draw.rect(self.screen, config.HIGHLIGHT if active else config.GRAY_DARK, fill_rect, 2 if active else 1)
        text = self.font_small.render("Plain fill", True, config.PANEL_TEXT)
        self.screen.blit(text, text.get_rect(center=fill_rect.center))

    def _draw_status(self) -> None:
        bar_rect = pygame.Rect(
            PALETTE_WIDTH,
            self.screen.get_height() - STATUS_HEIGHT,
            self.screen.get_width() - PALETTE_WIDTH,
            STATUS_HEIGHT,
        )
        pygame.draw.rect(self.screen, config.PANEL_BG, bar_rect)
        brush = self.state.selected_asset or "plain fill"
        summary = f"{self.state.tool} | {brush} {self.state.asset_rotation}° | zoom {self.state.zoom:.2f}"
        text = self.font_small.render(f"{summary} | {self.state.status_message}", True, config.PANEL_TEXT)
        self.screen.blit(text, (bar_rect.x + 6, bar_rect.y + 4))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grid-based dungeon map editor.")
    parser.add_argument("--width", type=int, default=config.DEFAULT_MAP_WIDTH, help="Map width in tiles.")
    parser.add_argument("--height", type=int, default=config.DEFAULT_MAP_HEIGHT, help="Map height in tiles.")
    parser.add_argument(
        "--tile-size",
        type=int,
        default=config.DEFAULT_TILE_SIZE,
        choices=config.TILE_SIZE_CHOICES,
        help="Tile size in pixels.",
    )
    parser.add_argument(
        "--theme",
        default=config.DEFAULT_THEME,
        choices=list(config.THEME_COLORS),
        help="Asset theme.",
    )
    parser.add_argument("--load", metavar="PATH", help="Open a map document (.json).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    session = MapEditorSession(catalog=AssetCatalog())
    result = session.new_map(args.width, args.height, theme=args.theme, tile_size=args.tile_size)
    if not result.ok:
        raise SystemExit(result.message)
    app = MapEditorApp(session=session)
    if args.load:
        app.open_file(args.load)
    app.run()


if __name__ == "__main__":
    main()
