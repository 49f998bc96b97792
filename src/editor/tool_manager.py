# tool_manager.py

"""Pointer tools (Select, Fill, Empty, Edge) for the map editor.

A press starts a stroke, every tile entered while the pointer is held
continues it, and release or leaving the canvas ends it. Fill and Empty
strokes are recorded in the history once, when the stroke ends.
"""

from typing import Optional, Tuple

from src.core import config
from src.editor.map_commands import CommandResult, MapEditorSession

Cell = Tuple[int, int]
Offset = Tuple[float, float]


def resolve_edge(rel_x: float, rel_y: float, tile_size: float) -> Optional[str]:
    """Which side of a tile a click at (rel_x, rel_y) inside it targets.

    The tile is split along its diagonals into four triangles; the click
    picks its triangle's side only when it lands within
    ``EDGE_HIT_FRACTION`` of the tile size from that side.
    """
    near = tile_size * config.EDGE_HIT_FRACTION
    far = tile_size - near
    if rel_y < rel_x and rel_y < tile_size - rel_x:
        return "top" if rel_y < near else None
    if rel_y > rel_x and rel_y > tile_size - rel_x:
        return "bottom" if rel_y > far else None
    if rel_y < rel_x and rel_y > tile_size - rel_x:
        return "right" if rel_x > far else None
    if rel_y > rel_x and rel_y < tile_size - rel_x:
        return "left" if rel_x < near else None
    return None


# --- Base Tool ---
class BaseTool:
    def __init__(self, name):
        self.name = name

    def press(self, session: MapEditorSession, cell: Cell, offset: Offset) -> Optional[CommandResult]:
        """Handles the pointer going down on ``cell`` (``offset`` is the pixel position inside it)."""
        raise NotImplementedError

    def drag(self, session: MapEditorSession, cell: Cell, offset: Offset) -> Optional[CommandResult]:
        """Handles the pointer entering ``cell`` while held."""
        return None

    def release(self, session: MapEditorSession) -> None:
        return None

    def activate(self, session):
        print(f"{self.name} tool activated.")

    def deactivate(self, session):
        print(f"{self.name} tool deactivated.")


# --- Select Tool ---
class SelectTool(BaseTool):
    def __init__(self):
        super().__init__("Select")

    def press(self, session, cell, offset):
        session.begin_selection(*cell)
        return None

    def drag(self, session, cell, offset):
        session.update_selection(*cell)
        return None

    def release(self, session):
        session.end_selection()


# --- Fill Tool ---
class FillTool(BaseTool):
    """Paints the brush asset, or a plain fill when no asset is selected."""

    def __init__(self):
        super().__init__("Fill")

    def press(self, session, cell, offset):
        if session.state.selected_asset:
            return session.place_asset(*cell, record=False)
        return session.place_fill(*cell, record=False)

    def drag(self, session, cell, offset):
        if session.state.selected_asset:
            # Tiles where the asset does not fit are skipped while dragging
            if not session.asset_fits(*cell):
                return None
            return session.place_asset(*cell, record=False)
        return session.place_fill(*cell, record=False)


# --- Empty Tool ---
class EmptyTool(BaseTool):
    def __init__(self):
        super().__init__("Empty")

    def press(self, session, cell, offset):
        return session.clear_tile(*cell, record=False)

    def drag(self, session, cell, offset):
        return session.clear_tile(*cell, record=False)


# --- Edge Tool ---
class EdgeTool(BaseTool):
    def __init__(self):
        super().__init__("Edge")

    def press(self, session, cell, offset):
        position = resolve_edge(offset[0], offset[1], session.grid.tile_size)
        if position is None:
            return None
        return session.set_edge(cell[0], cell[1], position)


# --- Tool Manager ---
class ToolManager:
    def __init__(self, session: MapEditorSession):
        self.session = session
        self.tools = {
            'select': SelectTool(),
            'fill': FillTool(),
            'empty': EmptyTool(),
            'edge': EdgeTool(),
        }
        self.drawing = False
        self.stroke_dirty = False
        self.last_cell: Optional[Cell] = None

    @property
    def active_tool_name(self) -> str:
        return self.session.state.tool

    @property
    def active_tool(self) -> BaseTool:
        return self.tools[self.active_tool_name]

    def set_active_tool(self, tool_name):
        if tool_name in self.tools and tool_name != self.active_tool_name:
            self.end_stroke()
            self.active_tool.deactivate(self.session)
            self.session.state.set_tool(tool_name)
            self.active_tool.activate(self.session)

    def _track(self, result: Optional[CommandResult]) -> Optional[CommandResult]:
        if result is not None and result.changed:
            self.stroke_dirty = True
        return result

    def pointer_down(self, cell: Optional[Cell], offset: Offset = (0.0, 0.0)) -> Optional[CommandResult]:
        if cell is None or not self.session.grid.in_bounds(*cell):
            return None
        self.drawing = True
        self.stroke_dirty = False
        self.last_cell = cell
        return self._track(self.active_tool.press(self.session, cell, offset))

    def pointer_move(self, cell: Optional[Cell], offset: Offset = (0.0, 0.0)) -> Optional[CommandResult]:
        if not self.drawing or cell is None or not self.session.grid.in_bounds(*cell):
            return None
        if cell == self.last_cell:
            return None
        self.last_cell = cell
        return self._track(self.active_tool.drag(self.session, cell, offset))

    def pointer_up(self) -> None:
        self.end_stroke()

    def pointer_leave(self) -> None:
        # Tiles already changed by the stroke stay changed
        self.end_stroke()

    def end_stroke(self) -> None:
        if not self.drawing:
            return
        self.active_tool.release(self.session)
        if self.stroke_dirty:
            self.session.commit()
        self.drawing = False
        self.stroke_dirty = False
        self.last_cell = None
