"""Command surface of the map editor.

Every command is one atomic grid transition. Rejected commands leave the
grid untouched and come back as ``CommandResult(ok=False)`` carrying the
message to show the user; committed changes are recorded in the history.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.core import config
from src.core.asset_catalog import AssetCatalog
from src.core.map_document import grid_from_document, grid_to_document
from src.editor.clipboard_manager import ClipboardManager, delete_region
from src.editor.editor_state import EditorState
from src.editor.selection_manager import SelectionRect, SelectionTool
from src.editor.undo_redo_manager import UndoRedoManager
from src.mapgrid import edges, placement
from src.mapgrid.errors import MapEditError
from src.mapgrid.grid import Grid
from src.mapgrid.placement import AssetLookup
from src.mapgrid.render_model import RenderTile, build_render_model


@dataclass
class CommandResult:
    ok: bool
    changed: bool = False
    message: str = ""


class MapEditorSession:
    """Owns the live grid plus selection, clipboard and history for one editor."""

    def __init__(
        self,
        grid: Optional[Grid] = None,
        catalog: Optional[AssetCatalog] = None,
        lookup: Optional[AssetLookup] = None,
        state: Optional[EditorState] = None,
        history_limit: int = config.HISTORY_LIMIT,
    ) -> None:
        self.catalog = catalog or AssetCatalog()
        self.lookup: AssetLookup = lookup or self.catalog.lookup
        self.state = state or EditorState()
        self.selection = SelectionTool()
        self.clipboard = ClipboardManager()
        self.history = UndoRedoManager(history_limit)
        self.grid = grid or Grid.create(config.DEFAULT_MAP_WIDTH, config.DEFAULT_MAP_HEIGHT)
        self.history.reset(self.grid)

    # Helpers --------------------------------------------------------------
    def _report(self, result: CommandResult) -> CommandResult:
        if result.message:
            self.state.status_message = result.message
        if not result.ok:
            print(result.message)
        return result

    def _run(self, action: Callable[[], Any], message: str = "", record: bool = True) -> CommandResult:
        """Apply ``action`` to the grid; a truthy return means the grid changed."""
        try:
            changed = bool(action())
        except MapEditError as e:
            return self._report(CommandResult(ok=False, message=str(e)))
        if changed and record:
            self.history.save_state(self.grid)
        return self._report(CommandResult(ok=True, changed=changed, message=message if changed else ""))

    def commit(self) -> None:
        """Record the current grid, closing a stroke applied with ``record=False``."""
        self.history.save_state(self.grid)

    # Map lifecycle --------------------------------------------------------
    def new_map(
        self,
        width: int,
        height: int,
        theme: str = config.DEFAULT_THEME,
        tile_size: int = config.DEFAULT_TILE_SIZE,
    ) -> CommandResult:
        if theme not in config.THEME_COLORS:
            return self._report(CommandResult(ok=False, message=f"Unknown theme '{theme}'."))
        if not isinstance(tile_size, int) or tile_size < 1:
            return self._report(CommandResult(ok=False, message=f"Tile size must be at least 1 (got {tile_size})."))
        try:
            grid = Grid.create(width, height, theme=theme, tile_size=tile_size)
        except MapEditError as e:
            return self._report(CommandResult(ok=False, message=str(e)))
        self._replace_grid(grid)
        return self._report(CommandResult(ok=True, changed=True, message=f"Created {width}x{height} map."))

    def load_document(self, payload: Any, source: str = "map document") -> CommandResult:
        """Replace the map with a persisted document; an invalid one keeps the current map."""
        try:
            grid = grid_from_document(payload, source=source)
        except MapEditError as e:
            return self._report(CommandResult(ok=False, message=str(e)))
        return self.load_grid(grid, source)

    def load_grid(self, grid: Grid, source: str = "map") -> CommandResult:
        self._replace_grid(grid)
        return self._report(CommandResult(ok=True, changed=True, message=f"Loaded {source}."))

    def _replace_grid(self, grid: Grid) -> None:
        self.grid = grid
        self.history.reset(grid)
        self.selection.clear()

    def set_theme(self, theme: str) -> CommandResult:
        if theme not in config.THEME_COLORS:
            return self._report(CommandResult(ok=False, message=f"Unknown theme '{theme}'."))
        if theme == self.grid.theme:
            return CommandResult(ok=True)

        def action():
            self.grid.theme = theme
            return True

        return self._run(action, f"Theme set to {theme}.")

    def to_document(self) -> Dict[str, Any]:
        return grid_to_document(self.grid)

    def render_model(self) -> List[RenderTile]:
        return build_render_model(self.grid, self.lookup)

    # Placement ------------------------------------------------------------
    def place_asset(
        self,
        x: int,
        y: int,
        asset_name: Optional[str] = None,
        rotation: Optional[int] = None,
        record: bool = True,
    ) -> CommandResult:
        name = asset_name or self.state.selected_asset
        if not name:
            return self._report(CommandResult(ok=False, message="No asset selected."))
        turn = self.state.asset_rotation if rotation is None else rotation

        def action():
            placement.place_asset(self.grid, x, y, name, turn, self.lookup)
            return True

        return self._run(action, f"Placed {name} at ({x}, {y}).", record)

    def asset_fits(self, x: int, y: int) -> bool:
        """Whether the brush asset, with its pending rotation, fits with its anchor at (x, y)."""
        asset = self.lookup(self.grid.theme, self.state.selected_asset or "")
        if asset is None:
            return False
        footprint = placement.footprint_for((asset.width, asset.height), self.state.asset_rotation)
        return placement.fits(self.grid, x, y, footprint)

    def place_fill(self, x: int, y: int, record: bool = True) -> CommandResult:
        def action():
            placement.place_fill(self.grid, x, y)
            return True

        return self._run(action, record=record)

    def clear_tile(self, x: int, y: int, record: bool = True) -> CommandResult:
        def action():
            return placement.clear_tile(self.grid, x, y)

        return self._run(action, record=record)

    def set_edge(
        self,
        x: int,
        y: int,
        position: str,
        edge_type: Optional[str] = None,
        record: bool = True,
    ) -> CommandResult:
        kind = edge_type or self.state.edge_type

        def action():
            edges.toggle_edge(self.grid, x, y, position, kind)
            return True

        return self._run(action, record=record)

    def rotate_asset_at(self, x: int, y: int) -> CommandResult:
        outcome: Dict[str, Tuple] = {}

        def action():
            rotated = placement.rotate_asset_at(self.grid, x, y)
            if rotated is None:
                return False
            outcome["rotated"] = rotated
            return True

        result = self._run(action)
        if result.changed:
            anchor, rotation = outcome["rotated"]
            result.message = f"Rotated asset at {anchor} to {rotation}°."
            self.state.status_message = result.message
        return result

    def rotate_next_placement(self) -> CommandResult:
        if not self.state.selected_asset:
            return CommandResult(ok=True)
        rotation = self.state.rotate_pending()
        return self._report(CommandResult(ok=True, message=f"Next placement rotated {rotation}°."))

    def rotate(self) -> CommandResult:
        """Rotate the single selected tile's asset, or else the pending brush rotation."""
        cell = self.selection.single_tile()
        if cell is not None:
            return self.rotate_asset_at(*cell)
        return self.rotate_next_placement()

    # Selection ------------------------------------------------------------
    def begin_selection(self, x: int, y: int) -> None:
        self.selection.start((x, y))

    def update_selection(self, x: int, y: int) -> None:
        self.selection.update((x, y))

    def end_selection(self, x: Optional[int] = None, y: Optional[int] = None) -> None:
        self.selection.end_selection(None if x is None or y is None else (x, y))

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_region(self) -> Optional[SelectionRect]:
        """The selection clipped to the map, or None when nothing on the map is selected."""
        rect = self.selection.rect
        if rect is None:
            return None
        return rect.clipped(self.grid.width, self.grid.height)

    # Clipboard ------------------------------------------------------------
    def copy(self) -> CommandResult:
        rect = self.selected_region()
        if rect is None:
            return CommandResult(ok=True)
        self.clipboard.copy(self.grid, rect)
        return self._report(CommandResult(ok=True, message=f"Copied {rect.width}x{rect.height} tiles."))

    def cut(self) -> CommandResult:
        rect = self.selected_region()
        if rect is None:
            return CommandResult(ok=True)

        def action():
            self.clipboard.cut(self.grid, rect)
            return True

        return self._run(action, f"Cut {rect.width}x{rect.height} tiles.")

    def paste(self, target: Optional[Tuple[int, int]] = None) -> CommandResult:
        if not self.clipboard.has_content():
            return CommandResult(ok=True)
        if target is None:
            rect = self.selected_region()
            target = (rect.x, rect.y) if rect else (0, 0)
        pasted = {}

        def action():
            region = self.clipboard.paste(self.grid, target)
            if region is None:
                return False
            pasted["region"] = region
            return True

        result = self._run(action, f"Pasted at {target}.")
        if result.changed:
            region = pasted["region"]
            self.selection.select((region.x, region.y), (region.right, region.bottom))
        return result

    def delete_selection(self) -> CommandResult:
        rect = self.selected_region()
        if rect is None:
            return CommandResult(ok=True)
        return self._run(lambda: delete_region(self.grid, rect))

    # History --------------------------------------------------------------
    def undo(self) -> CommandResult:
        restored = self.history.undo()
        if restored is None:
            return CommandResult(ok=True)
        self.grid = restored
        return self._report(CommandResult(ok=True, changed=True, message="Undo."))

    def redo(self) -> CommandResult:
        restored = self.history.redo()
        if restored is None:
            return CommandResult(ok=True)
        self.grid = restored
        return self._report(CommandResult(ok=True, changed=True, message="Redo."))
