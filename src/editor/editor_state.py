from dataclasses import dataclass
from typing import Optional

from src.core import config

TOOLS = ("select", "fill", "empty", "edge")


@dataclass
class EditorState:
    """Container for editor state that changes during interaction."""

    # Tool state
    tool: str = "select"
    edge_type: str = config.DEFAULT_EDGE_TYPE
    selected_asset: Optional[str] = None
    # Rotation applied to the next asset placement
    asset_rotation: int = 0

    # View state
    zoom: float = 1.0
    view_offset_x: int = 0
    view_offset_y: int = 0
    panning: bool = False
    show_grid: bool = True

    status_message: str = ""

    def set_tool(self, tool: str) -> None:
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool '{tool}'.")
        self.tool = tool

    def set_edge_type(self, edge_type: str) -> None:
        if edge_type not in config.EDGE_TYPES:
            raise ValueError(f"Unknown edge type '{edge_type}'.")
        self.edge_type = edge_type
        self.tool = "edge"

    def select_asset(self, asset_name: Optional[str]) -> None:
        """Pick the brush asset; rotation starts over and the fill tool is armed."""
        self.selected_asset = asset_name
        self.asset_rotation = 0
        self.tool = "fill"

    def rotate_pending(self) -> int:
        self.asset_rotation = (self.asset_rotation + 90) % 360
        return self.asset_rotation

    def adjust_zoom(self, delta: float) -> bool:
        new_zoom = max(config.ZOOM_MIN, min(config.ZOOM_MAX, round(self.zoom + delta, 2)))
        if new_zoom == self.zoom:
            return False
        self.zoom = new_zoom
        return True

    def toggle_grid(self) -> bool:
        self.show_grid = not self.show_grid
        return self.show_grid

    def reset_view(self) -> None:
        self.zoom = 1.0
        self.view_offset_x = 0
        self.view_offset_y = 0
        self.panning = False
