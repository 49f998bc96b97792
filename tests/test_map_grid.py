import unittest

from src.core import config
from src.mapgrid.errors import InvalidDimensions, MapEditError, OutOfBounds
from src.mapgrid.grid import ASSET, BLOCKED, EMPTY, FILL, Grid, Tile, find_invariant_violations


class TestGridCreate(unittest.TestCase):
    def test_create_fills_every_cell_with_empty_tiles(self):
        grid = Grid.create(4, 3)
        self.assertEqual((grid.width, grid.height), (4, 3))
        self.assertEqual(grid.theme, config.DEFAULT_THEME)
        self.assertEqual(grid.tile_size, config.DEFAULT_TILE_SIZE)
        for _x, _y, tile in grid.cells():
            self.assertEqual(tile.kind, EMPTY)
            self.assertEqual(tile.edges, {"top": None, "right": None, "bottom": None, "left": None})
        self.assertEqual(len(list(grid.cells())), 12)

    def test_create_one_by_one_is_valid(self):
        grid = Grid.create(1, 1)
        self.assertEqual(grid.get(0, 0).kind, EMPTY)

    def test_create_rejects_non_positive_dimensions(self):
        for width, height in ((0, 5), (5, 0), (-1, 3), (2.5, 2)):
            with self.subTest(width=width, height=height):
                with self.assertRaises(InvalidDimensions):
                    Grid.create(width, height)

    def test_tiles_are_independent_objects(self):
        grid = Grid.create(2, 1)
        grid.get(0, 0).edges["top"] = "wall"
        self.assertIsNone(grid.get(1, 0).edges["top"])


class TestGridAccess(unittest.TestCase):
    def setUp(self):
        self.grid = Grid.create(3, 2)

    def test_get_out_of_bounds_raises(self):
        for x, y in ((-1, 0), (0, -1), (3, 0), (0, 2)):
            with self.subTest(x=x, y=y):
                with self.assertRaises(OutOfBounds):
                    self.grid.get(x, y)

    def test_out_of_bounds_is_a_map_edit_error_and_index_error(self):
        with self.assertRaises(MapEditError):
            self.grid.set(5, 5, Tile())
        with self.assertRaises(IndexError):
            self.grid.get(5, 5)

    def test_neighbor_respects_map_edges(self):
        self.assertEqual(self.grid.neighbor(0, 0, "right"), (1, 0))
        self.assertEqual(self.grid.neighbor(0, 0, "bottom"), (0, 1))
        self.assertIsNone(self.grid.neighbor(0, 0, "top"))
        self.assertIsNone(self.grid.neighbor(2, 1, "right"))

    def test_clone_is_deep(self):
        self.grid.set(1, 1, Tile(kind=FILL))
        clone = self.grid.clone()
        self.assertEqual(clone, self.grid)
        clone.get(1, 1).edges["left"] = "door"
        clone.set(0, 0, Tile(kind=FILL))
        self.assertIsNone(self.grid.get(1, 1).edges["left"])
        self.assertEqual(self.grid.get(0, 0).kind, EMPTY)
        self.assertNotEqual(clone, self.grid)


class TestTileWireFormat(unittest.TestCase):
    def test_asset_anchor_round_trips_with_original_field_names(self):
        tile = Tile(
            kind=ASSET,
            asset_name="TableLong2x1",
            rotation=90,
            footprint=(1, 2),
            native_size=(2, 1),
        )
        data = tile.to_dict()
        self.assertEqual(data["type"], "asset")
        self.assertEqual(data["asset"], "TableLong2x1")
        self.assertEqual((data["originalWidth"], data["originalHeight"]), (2, 1))
        self.assertEqual((data["placementWidth"], data["placementHeight"]), (1, 2))
        self.assertEqual(Tile.from_dict(data), tile)

    def test_blocked_tile_serializes_anchor_reference(self):
        tile = Tile(kind=BLOCKED, blocked_by=(3, 4))
        data = tile.to_dict()
        self.assertEqual(data["blockedBy"], {"x": 3, "y": 4})
        self.assertEqual(Tile.from_dict(data).blocked_by, (3, 4))

    def test_from_dict_treats_blank_edges_as_absent(self):
        tile = Tile.from_dict({"type": "fill", "edges": {"top": "", "left": "wall"}})
        self.assertEqual(tile.edges, {"top": None, "right": None, "bottom": None, "left": "wall"})


class TestInvariantCheck(unittest.TestCase):
    def test_fresh_grid_has_no_violations(self):
        self.assertEqual(find_invariant_violations(Grid.create(5, 5)), [])

    def test_orphan_blocked_cell_is_reported(self):
        grid = Grid.create(3, 3)
        grid.set(1, 1, Tile(kind=BLOCKED, blocked_by=(0, 0)))
        problems = find_invariant_violations(grid)
        self.assertTrue(any("(1, 1)" in problem for problem in problems))

    def test_unmirrored_edge_is_reported(self):
        grid = Grid.create(2, 1)
        grid.get(0, 0).edges["right"] = "wall"
        problems = find_invariant_violations(grid)
        self.assertEqual(len(problems), 1)
        self.assertIn("right edge", problems[0])


if __name__ == "__main__":
    unittest.main()
