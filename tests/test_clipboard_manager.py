import unittest

from src.core.asset_catalog import AssetDefinition
from src.editor.clipboard_manager import ClipboardManager, delete_region
from src.editor.selection_manager import SelectionRect
from src.mapgrid import placement
from src.mapgrid.edges import toggle_edge
from src.mapgrid.grid import ASSET, BLOCKED, EMPTY, FILL, Grid, find_invariant_violations

ASSET_SIZES = {"Chest1x1": (1, 1), "TableLong2x1": (2, 1), "StairSpiralSquareBig2x2": (2, 2)}


def lookup(theme, name):
    if name not in ASSET_SIZES:
        return None
    width, height = ASSET_SIZES[name]
    return AssetDefinition(name=name, path=f"{name}.png", width=width, height=height)


class TestClipboardManager(unittest.TestCase):
    def setUp(self):
        self.grid = Grid.create(6, 6)
        self.manager = ClipboardManager()

    def test_empty_clipboard_paste_is_a_no_op(self):
        before = self.grid.clone()
        self.assertFalse(self.manager.has_content())
        self.assertIsNone(self.manager.paste(self.grid, (0, 0)))
        self.assertEqual(self.grid, before)

    def test_copy_is_a_deep_snapshot(self):
        placement.place_fill(self.grid, 0, 0)
        self.manager.copy(self.grid, SelectionRect(0, 0, 2, 2))
        placement.clear_tile(self.grid, 0, 0)
        self.assertEqual(self.manager.entry.cells[0][0].kind, FILL)

    def test_copy_paste_moves_whole_asset_to_new_anchor(self):
        placement.place_asset(self.grid, 0, 0, "StairSpiralSquareBig2x2", 0, lookup)
        self.manager.copy(self.grid, SelectionRect(0, 0, 2, 2))
        region = self.manager.paste(self.grid, (3, 3))

        self.assertEqual(region, SelectionRect(3, 3, 2, 2))
        self.assertEqual(self.grid.get(3, 3).kind, ASSET)
        self.assertEqual(self.grid.get(4, 4).blocked_by, (3, 3))
        # The source is untouched by copy
        self.assertEqual(self.grid.get(0, 0).kind, ASSET)
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_copy_drops_assets_partly_outside_selection(self):
        placement.place_asset(self.grid, 1, 0, "TableLong2x1", 0, lookup)
        toggle_edge(self.grid, 1, 0, "bottom", "wall")
        self.manager.copy(self.grid, SelectionRect(0, 0, 2, 1))
        cell = self.manager.entry.cells[0][1]
        self.assertEqual(cell.kind, EMPTY)
        self.assertEqual(cell.edges["bottom"], "wall")

    def test_paste_drops_asset_clipped_by_map_edge(self):
        placement.place_asset(self.grid, 0, 0, "TableLong2x1", 0, lookup)
        self.manager.copy(self.grid, SelectionRect(0, 0, 2, 1))
        region = self.manager.paste(self.grid, (5, 2))
        self.assertEqual(region, SelectionRect(5, 2, 1, 1))
        self.assertEqual(self.grid.get(5, 2).kind, EMPTY)
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_paste_clears_assets_overlapping_destination(self):
        placement.place_fill(self.grid, 0, 0)
        self.manager.copy(self.grid, SelectionRect(0, 0, 1, 1))
        placement.place_asset(self.grid, 2, 2, "StairSpiralSquareBig2x2", 0, lookup)
        self.manager.paste(self.grid, (3, 3))
        self.assertEqual(self.grid.get(2, 2).kind, EMPTY)
        self.assertEqual(self.grid.get(3, 3).kind, FILL)
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_paste_mirrors_border_edges_onto_neighbors(self):
        toggle_edge(self.grid, 0, 0, "right", "door")
        self.manager.copy(self.grid, SelectionRect(0, 0, 1, 1))
        self.manager.paste(self.grid, (2, 2))
        self.assertEqual(self.grid.get(2, 2).edges["right"], "door")
        self.assertEqual(self.grid.get(3, 2).edges["left"], "door")
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_paste_off_map_is_ignored(self):
        placement.place_fill(self.grid, 0, 0)
        self.manager.copy(self.grid, SelectionRect(0, 0, 1, 1))
        self.assertIsNone(self.manager.paste(self.grid, (6, 0)))

    def test_cut_copies_then_clears(self):
        placement.place_asset(self.grid, 2, 2, "Chest1x1", 0, lookup)
        self.manager.cut(self.grid, SelectionRect(2, 2, 1, 1))
        self.assertEqual(self.grid.get(2, 2).kind, EMPTY)
        self.assertEqual(self.manager.entry.cells[0][0].asset_name, "Chest1x1")


class TestDeleteRegion(unittest.TestCase):
    def test_delete_removes_every_intersecting_asset_whole(self):
        grid = Grid.create(5, 5)
        placement.place_asset(grid, 0, 0, "StairSpiralSquareBig2x2", 0, lookup)
        placement.place_fill(grid, 4, 4)
        cleared = delete_region(grid, SelectionRect(1, 1, 1, 1))
        self.assertEqual(cleared, {(0, 0), (1, 0), (0, 1), (1, 1)})
        self.assertEqual(grid.get(0, 0).kind, EMPTY)
        self.assertEqual(grid.get(4, 4).kind, FILL)
        self.assertFalse(any(tile.kind == BLOCKED for _x, _y, tile in grid.cells()))


if __name__ == "__main__":
    unittest.main()
