from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from src.core import config
from src.mapgrid.errors import InvalidDocument
from src.mapgrid.grid import TILE_KINDS, Grid, Tile
from src.mapgrid.placement import footprint_for


class _SchemaModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class _CoordModel(_SchemaModel):
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class _EdgesModel(_SchemaModel):
    top: str | None = None
    right: str | None = None
    bottom: str | None = None
    left: str | None = None

    @field_validator("top", "right", "bottom", "left")
    @classmethod
    def _known_edge_type(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if value not in config.EDGE_TYPES:
            raise ValueError(f"unknown edge type '{value}'.")
        return value


class _TileModel(_SchemaModel):
    type: str
    asset: str | None = None
    rotation: int = 0
    edges: _EdgesModel = Field(default_factory=_EdgesModel)
    originalWidth: int | None = Field(default=None, ge=1)
    originalHeight: int | None = Field(default=None, ge=1)
    placementWidth: int | None = Field(default=None, ge=1)
    placementHeight: int | None = Field(default=None, ge=1)
    blockedBy: _CoordModel | None = None

    @field_validator("type")
    @classmethod
    def _known_kind(cls, value: str) -> str:
        if value not in TILE_KINDS:
            raise ValueError(f"tile type must be one of {', '.join(TILE_KINDS)}.")
        return value

    @field_validator("rotation", mode="before")
    @classmethod
    def _quarter_turn(cls, value: Any) -> int:
        if value is None:
            return 0
        if not isinstance(value, int) or value % 360 not in config.ROTATIONS:
            raise ValueError("rotation must be 0, 90, 180 or 270.")
        return value % 360

    @model_validator(mode="after")
    def _kind_fields(self) -> "_TileModel":
        if self.type == "asset" and not (self.asset or "").strip():
            raise ValueError("asset tiles must name their asset.")
        if self.type == "blocked" and self.blockedBy is None:
            raise ValueError("blocked tiles must reference their anchor in blockedBy.")
        return self


class _MapDocumentModel(_SchemaModel):
    map: list[list[_TileModel]]
    theme: str = Field(min_length=1)
    tileSize: int = Field(ge=1)
    timestamp: str | None = None

    @field_validator("theme")
    @classmethod
    def _strip_theme(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("theme must be a non-empty string.")
        return stripped

    @field_validator("map")
    @classmethod
    def _rectangular(cls, rows: list[list[_TileModel]]) -> list[list[_TileModel]]:
        if not rows or not rows[0]:
            raise ValueError("map must contain at least one row and one column.")
        width = len(rows[0])
        if len(rows) > config.MAX_MAP_DIMENSION or width > config.MAX_MAP_DIMENSION:
            raise ValueError(f"map may not exceed {config.MAX_MAP_DIMENSION} tiles per side.")
        for row_index, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(
                    f"map[{row_index}] must contain {width} columns (got {len(row)})."
                )
        return rows

    @model_validator(mode="after")
    def _references_in_bounds(self) -> "_MapDocumentModel":
        height = len(self.map)
        width = len(self.map[0])
        for y, row in enumerate(self.map):
            for x, tile in enumerate(row):
                ref = tile.blockedBy
                if tile.type == "blocked" and ref is not None and (ref.x >= width or ref.y >= height):
                    raise ValueError(
                        f"map[{y}][{x}].blockedBy is outside map bounds "
                        f"(width={width}, height={height})."
                    )
                if tile.type == "asset":
                    _check_footprint(tile, x, y, width, height)
        return self


def _check_footprint(tile: _TileModel, x: int, y: int, width: int, height: int) -> None:
    native = (tile.originalWidth or 1, tile.originalHeight or 1)
    expected = footprint_for(native, tile.rotation)
    placed = (tile.placementWidth or expected[0], tile.placementHeight or expected[1])
    if placed != expected:
        raise ValueError(
            f"map[{y}][{x}] placement {placed[0]}x{placed[1]} does not match "
            f"{native[0]}x{native[1]} rotated {tile.rotation}."
        )
    if x + placed[0] > width or y + placed[1] > height:
        raise ValueError(
            f"map[{y}][{x}] footprint {placed[0]}x{placed[1]} is outside map bounds "
            f"(width={width}, height={height})."
        )


def _validate_model(model: Any, payload: Any, *, source: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidDocument.from_pydantic(source, exc) from exc


def validate_map_document(payload: Any, *, source: str = "map document") -> Dict[str, Any]:
    model = _validate_model(_MapDocumentModel, payload, source=source)
    return model.model_dump(exclude_none=True)


def grid_from_document(payload: Any, *, source: str = "map document") -> Grid:
    """Build a Grid from a persisted document, raising InvalidDocument if malformed."""
    document = validate_map_document(payload, source=source)
    tiles = [[Tile.from_dict(cell) for cell in row] for row in document["map"]]
    return Grid(
        width=len(tiles[0]),
        height=len(tiles),
        tiles=tiles,
        theme=document["theme"],
        tile_size=document["tileSize"],
    )


def grid_to_document(grid: Grid) -> Dict[str, Any]:
    return {
        "map": [[tile.to_dict() for tile in row] for row in grid.rows()],
        "theme": grid.theme,
        "tileSize": grid.tile_size,
    }


def load_map_document(path: str) -> Grid:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise InvalidDocument("Invalid JSON file") from exc
    return grid_from_document(payload, source=path)
