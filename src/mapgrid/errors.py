from __future__ import annotations

from typing import Any, Dict, Sequence, Tuple


class MapEditError(Exception):
    """Base class for every rejected grid operation."""


class InvalidDimensions(MapEditError, ValueError):
    def __init__(self, width: Any, height: Any) -> None:
        self.width = width
        self.height = height
        super().__init__(f"Map dimensions must be at least 1x1 (got {width}x{height}).")


class OutOfBounds(MapEditError, IndexError):
    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        self.x = x
        self.y = y
        super().__init__(f"Tile ({x}, {y}) is outside the {width}x{height} map.")


class PlacementOutOfBounds(MapEditError):
    def __init__(self, x: int, y: int, footprint: Tuple[int, int]) -> None:
        self.x = x
        self.y = y
        self.footprint = footprint
        width, height = footprint
        super().__init__(
            f"This asset needs {width}x{height} tiles of space after rotation, "
            "which exceeds the map boundaries at this position."
        )


class RotationOutOfBounds(MapEditError):
    def __init__(self, x: int, y: int, footprint: Tuple[int, int]) -> None:
        self.x = x
        self.y = y
        self.footprint = footprint
        width, height = footprint
        super().__init__(
            f"Cannot rotate this asset: it would need {width}x{height} tiles "
            "and exceed the map boundaries."
        )


class AssetNotFound(MapEditError, KeyError):
    def __init__(self, theme: str, name: str) -> None:
        self.theme = theme
        self.name = name
        super().__init__(f"Asset '{name}' not found in theme '{theme}'.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidDocument(MapEditError, ValueError):
    """Raised when a map document fails validation; the live grid is kept."""

    def __init__(self, source: str, errors: Sequence[Dict[str, Any]] = ()) -> None:
        self.source = source
        self.errors = [self._normalize_error(error) for error in errors]
        super().__init__(self._build_message())

    @staticmethod
    def _normalize_error(error: Dict[str, Any]) -> Dict[str, Any]:
        loc = error.get("loc", ())
        if not isinstance(loc, tuple):
            if isinstance(loc, list):
                loc = tuple(loc)
            else:
                loc = (loc,)
        msg = str(error.get("msg", "Unknown validation error."))
        return {"loc": loc, "msg": msg}

    @staticmethod
    def _format_loc(loc: Tuple[Any, ...]) -> str:
        if not loc:
            return "<root>"
        parts = []
        for item in loc:
            if isinstance(item, int):
                parts.append(f"[{item}]")
            else:
                text = str(item)
                if not parts:
                    parts.append(text)
                else:
                    parts.append(f".{text}")
        return "".join(parts)

    @classmethod
    def from_pydantic(cls, source: str, exc: Exception) -> "InvalidDocument":
        return cls(source=source, errors=exc.errors())

    def _build_message(self) -> str:
        if not self.errors:
            return self.source
        lines = [f"{self.source} validation failed ({len(self.errors)} error(s))."]
        for error in self.errors:
            lines.append(f"- {self._format_loc(error['loc'])}: {error['msg']}")
        return "\n".join(lines)


class InvalidEdge(MapEditError, ValueError):
    def __init__(self, position: str, edge_type: Any) -> None:
        self.position = position
        self.edge_type = edge_type
        super().__init__(f"Unknown edge '{edge_type}' on side '{position}'.")


class InvalidRotation(MapEditError, ValueError):
    def __init__(self, rotation: Any) -> None:
        self.rotation = rotation
        super().__init__(f"Rotation must be one of 0, 90, 180 or 270 degrees (got {rotation}).")
