# config.py
import os

# General
FPS = 60

# Screen Dimensions
EDITOR_WIDTH = 1300
EDITOR_HEIGHT = 800

# Map Defaults
DEFAULT_MAP_WIDTH = 20
DEFAULT_MAP_HEIGHT = 15
DEFAULT_TILE_SIZE = 32
TILE_SIZE_CHOICES = (16, 24, 32, 48, 64)
# Largest width/height accepted from a loaded document
MAX_MAP_DIMENSION = 512

# Undo/redo
HISTORY_LIMIT = 50

# Themes (fill colour used for filled tiles and edge strokes)
DEFAULT_THEME = "Classic Dungeon"
THEME_COLORS = {
    "Classic Dungeon": (0, 0, 0),
    "Old School Blue Dungeon": (86, 146, 186),  # #5692ba
}

# Edges
EDGE_POSITIONS = ("top", "right", "bottom", "left")
EDGE_TYPES = ("wall", "cracked", "door", "window", "secret", "trap", "lever")
DEFAULT_EDGE_TYPE = "wall"
# A click only hits an edge when it lands within this fraction of the tile from that side
EDGE_HIT_FRACTION = 0.25

# Rotation steps in degrees
ROTATIONS = (0, 90, 180, 270)

# View
ZOOM_MIN = 0.25
ZOOM_MAX = 3.0
ZOOM_STEP = 0.1

# Directory Paths (relative to project root)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
ASSET_DIR = os.path.join(PROJECT_ROOT, "assets")
EXPORT_DIR = os.path.join(PROJECT_ROOT, "exports")
SAVED_MAPS_PATH = os.path.join(DATA_DIR, "saved_maps.json")
DEFAULT_SAVE_NAME = "Dungeon Map"

# UI Elements Fonts (Using None uses default pygame font)
DEFAULT_FONT = None
STATUS_FONT_SIZE = 16
PANEL_FONT_SIZE = 14

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (255, 0, 0)
BLUE = (0, 0, 255)
GRAY_LIGHT = (200, 200, 200)
GRAY_MEDIUM = (170, 170, 170)
GRAY_DARK = (100, 100, 100)

EDITOR_BG_COLOR = GRAY_LIGHT
MAP_BG_COLOR = WHITE
GRID_LINE_COLOR = (220, 220, 220)
SELECTION_OUTLINE_COLOR = (0, 127, 255)
MISSING_ASSET_COLOR = (255, 0, 255, 255)
PANEL_BG = (40, 40, 50)
PANEL_TEXT = (235, 235, 235)
HIGHLIGHT = (90, 160, 255)

# Panning Speed
PAN_SPEED_PIXELS = 20
