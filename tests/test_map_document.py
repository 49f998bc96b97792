import json

import pytest

from src.core.map_document import (
    grid_from_document,
    grid_to_document,
    load_map_document,
    validate_map_document,
)
from src.mapgrid.errors import InvalidDocument
from src.mapgrid.grid import ASSET, BLOCKED, Grid, Tile, find_invariant_violations


def _empty_tile(**overrides):
    tile = {"type": "empty", "asset": None, "rotation": 0, "edges": {}}
    tile.update(overrides)
    return tile


def _document(rows, **overrides):
    document = {"map": rows, "theme": "Classic Dungeon", "tileSize": 32}
    document.update(overrides)
    return document


def test_valid_document_builds_grid_with_assets_and_edges():
    rows = [
        [
            _empty_tile(
                type="asset",
                asset="TableLong2x1",
                originalWidth=2,
                originalHeight=1,
                placementWidth=2,
                placementHeight=1,
                edges={"left": "door"},
            ),
            _empty_tile(type="blocked", blockedBy={"x": 0, "y": 0}),
        ]
    ]
    grid = grid_from_document(_document(rows))

    assert (grid.width, grid.height) == (2, 1)
    assert grid.get(0, 0).kind == ASSET
    assert grid.get(0, 0).footprint == (2, 1)
    assert grid.get(0, 0).edges["left"] == "door"
    assert grid.get(1, 0).kind == BLOCKED
    assert grid.get(1, 0).blocked_by == (0, 0)


def test_document_round_trip_preserves_grid():
    grid = Grid.create(3, 2, theme="Old School Blue Dungeon", tile_size=48)
    grid.set(1, 1, Tile(kind="fill", edges={"top": "wall", "right": None, "bottom": None, "left": None}))
    grid.get(1, 0).edges["bottom"] = "wall"

    document = json.loads(json.dumps(grid_to_document(grid)))
    assert document["theme"] == "Old School Blue Dungeon"
    assert document["tileSize"] == 48
    assert grid_from_document(document) == grid


def test_ragged_rows_are_rejected_with_location():
    rows = [[_empty_tile(), _empty_tile()], [_empty_tile()]]
    with pytest.raises(InvalidDocument) as excinfo:
        validate_map_document(_document(rows), source="dungeon.json")

    message = str(excinfo.value)
    assert "dungeon.json validation failed" in message
    assert "map[1] must contain 2 columns" in message


@pytest.mark.parametrize(
    "document",
    [
        {"theme": "Classic Dungeon", "tileSize": 32},
        _document([]),
        _document([[_empty_tile()]], tileSize=0),
        _document([[_empty_tile()]], theme="  "),
        _document([[_empty_tile(type="lava")]]),
        _document([[_empty_tile(rotation=45)]]),
        _document([[_empty_tile(edges={"top": "moat"})]]),
        _document([[_empty_tile(type="asset")]]),
        _document([[_empty_tile(type="blocked")]]),
        _document([[_empty_tile(type="blocked", blockedBy={"x": 4, "y": 0})]]),
        # 2x1 anchor in the last column runs off a 2x2 map
        _document(
            [
                [_empty_tile(), _empty_tile()],
                [
                    _empty_tile(),
                    _empty_tile(
                        type="asset",
                        asset="TableLong2x1",
                        originalWidth=2,
                        originalHeight=1,
                        placementWidth=2,
                        placementHeight=1,
                    ),
                ],
            ]
        ),
        # placement size disagrees with the rotated native size
        _document(
            [
                [
                    _empty_tile(
                        type="asset",
                        asset="TableLong2x1",
                        rotation=90,
                        originalWidth=2,
                        originalHeight=1,
                        placementWidth=2,
                        placementHeight=1,
                    ),
                    _empty_tile(type="blocked", blockedBy={"x": 0, "y": 0}),
                ],
                [_empty_tile(), _empty_tile()],
            ]
        ),
    ],
)
def test_invalid_documents_raise(document):
    with pytest.raises(InvalidDocument) as excinfo:
        grid_from_document(document)
    assert excinfo.value.errors


def test_missing_placement_size_follows_rotation():
    rows = [
        [_empty_tile(type="asset", asset="TableLong2x1", rotation=90, originalWidth=2, originalHeight=1)],
        [_empty_tile(type="blocked", blockedBy={"x": 0, "y": 0})],
    ]
    grid = grid_from_document(_document(rows))
    assert grid.get(0, 0).footprint == (1, 2)
    assert find_invariant_violations(grid) == []


def test_blank_edge_values_are_treated_as_absent():
    grid = grid_from_document(_document([[_empty_tile(edges={"top": "", "left": None})]]))
    assert grid.get(0, 0).edges == {"top": None, "right": None, "bottom": None, "left": None}


def test_load_map_document_reports_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidDocument) as excinfo:
        load_map_document(str(path))
    assert str(excinfo.value) == "Invalid JSON file"


def test_load_map_document_reads_file(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps(grid_to_document(Grid.create(2, 2))), encoding="utf-8")
    assert load_map_document(str(path)) == Grid.create(2, 2)
