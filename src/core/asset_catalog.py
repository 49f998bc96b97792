import json
import os
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from src.core import config

# Names ending in e.g. "2x2" or "1x1_01" carry their footprint
SIZE_SUFFIX_RE = re.compile(r"(\d+)x(\d+)(?:_\d+)?$")

DEFAULT_ASSET_NAMES: Tuple[str, ...] = (
    "Altar1x1", "Arrow1x1", "Bed1x1", "BedDouble1x1", "Bench1x1", "Bookcase1x1",
    "Cage1x1", "Cask1x1", "Chair1x1", "Chest1x1", "Circle1x1", "CircleDotted1x1",
    "CircleFilled1x1", "CoffinClosed1x1", "CoffinOpen1x1", "Cross1x1", "Curtain1x1",
    "CurtainCorner1x1", "Danger1x1", "Door1x1", "DoorArchway1x1", "DoorConcealed1x1",
    "DoorDouble1x1", "DoorFalse1x1", "DoorGate1x1", "DoorLocked1x1", "DoorMagic1x1",
    "DoorPortcullis1x1", "DoorRevolve1way1x1", "DoorRevolving1x1", "DoorSecret1x1",
    "DoorSlides1x1", "Fire1x1", "FireCamp1x1", "Fireplace1x1", "Fountain1x1",
    "Grave1x1", "Illusion1x1", "Key1x1", "LadderDown1x1", "LadderUp1x1", "Light1x1",
    "Loot1x1", "Lounge1x1", "PitCircle1x1", "PitClosedCircle1x1", "PitClosedSquare1x1",
    "PitSquare1x1", "Railing1x1", "RailingCorner1x1", "RailingCurve1x1",
    "RailingHalf1x1", "Square1x1", "SquareDotted1x1", "SquareFilled1x1",
    "StairSpiralCircleBig2x2", "StairSpiralCircleDown1x1", "StairSpiralCircleUp1x1",
    "StairSpiralSquareBig2x2", "StairSpiralSquareDown1x1", "StairSpiralSquareUp1x1",
    "Stairs1x1_01", "Statue1x1", "StatueSmall1x1", "Stool1x1", "TableLong2x1",
    "TableRectangle1x1", "TableRound1x1", "TableSet2x1", "TableSet3x1",
    "TableSetCircle1x1", "TableSetRect2x1", "TableSetSquare1x1", "TableSetTwo3x1",
    "TableSquare1x1", "Throne1x1", "Trap1x1", "TrapdoorCieling1x1", "TrapdoorFloor1x1",
    "TrapdoorSecret1x1", "TriangleArrowhead1x1", "Trigger1x1", "Unknown1x1",
    "WellCircle1x1", "WellSquare1x1", "Window1x1",
)


def size_from_name(name: str) -> Tuple[int, int]:
    match = SIZE_SUFFIX_RE.search(name)
    if not match:
        return 1, 1
    return max(1, int(match.group(1))), max(1, int(match.group(2)))


def display_name(name: str) -> str:
    """Human label for an asset: size suffix dropped, camelCase split into words."""
    base = SIZE_SUFFIX_RE.sub("", name)
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", base).strip() or name


@dataclass
class AssetDefinition:
    """Catalog entry; ``width``/``height`` are the unrotated footprint in tiles."""
    name: str
    path: str
    width: int = 1
    height: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, object], theme_dir: str) -> "AssetDefinition":
        name = str(data.get("name", ""))
        filename = data.get("filename") or f"{name}.png"
        return cls(
            name=name,
            path=os.path.join(theme_dir, str(filename)),
            width=int(data.get("width") or 1),
            height=int(data.get("height") or 1),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "filename": os.path.basename(self.path),
            "width": self.width,
            "height": self.height,
        }


class AssetCatalog:
    """Per-theme asset lists read from ``<asset_dir>/<theme>/index.json``."""

    def __init__(self, asset_dir: Optional[str] = None):
        self.asset_dir = asset_dir or config.ASSET_DIR
        self.themes: Dict[str, List[AssetDefinition]] = {}

    def theme_dir(self, theme: str) -> str:
        return os.path.join(self.asset_dir, theme)

    def load_theme(self, theme: str) -> List[AssetDefinition]:
        index_path = os.path.join(self.theme_dir(theme), "index.json")
        assets: Optional[List[AssetDefinition]] = None
        if os.path.exists(index_path):
            try:
                with open(index_path, "r", encoding="utf-8") as f:
                    index = json.load(f)
                assets = [
                    AssetDefinition.from_dict(entry, self.theme_dir(theme))
                    for entry in index.get("files", [])
                    if isinstance(entry, dict) and entry.get("name")
                ]
            except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
                print(f"Error loading assets for theme {theme}: {e}")
                assets = None
        if assets is None:
            assets = self.default_assets(theme)
        self.themes[theme] = assets
        return assets

    def load_all(self, themes: Iterable[str] = tuple(config.THEME_COLORS)) -> Dict[str, List[AssetDefinition]]:
        for theme in themes:
            self.load_theme(theme)
        return self.themes

    def default_assets(self, theme: str) -> List[AssetDefinition]:
        assets = []
        for name in DEFAULT_ASSET_NAMES:
            width, height = size_from_name(name)
            assets.append(
                AssetDefinition(
                    name=name,
                    path=os.path.join(self.theme_dir(theme), f"{name}.png"),
                    width=width,
                    height=height,
                )
            )
        return assets

    def assets_for(self, theme: str) -> List[AssetDefinition]:
        if theme not in self.themes:
            self.load_theme(theme)
        return self.themes[theme]

    def lookup(self, theme: str, name: str) -> Optional[AssetDefinition]:
        for asset in self.assets_for(theme):
            if asset.name == name:
                return asset
        return None

    def search(self, theme: str, query: str) -> List[AssetDefinition]:
        needle = (query or "").strip().lower()
        if not needle:
            return list(self.assets_for(theme))
        return [asset for asset in self.assets_for(theme) if needle in asset.name.lower()]
