import unittest

from src.mapgrid.edges import mirror_edges, toggle_edge
from src.mapgrid.errors import InvalidEdge, OutOfBounds
from src.mapgrid.grid import Grid, find_invariant_violations


class TestToggleEdge(unittest.TestCase):
    def setUp(self):
        self.grid = Grid.create(3, 3)

    def test_setting_an_edge_mirrors_onto_neighbor(self):
        result = toggle_edge(self.grid, 1, 1, "bottom", "wall")
        self.assertEqual(result, "wall")
        self.assertEqual(self.grid.get(1, 1).edges["bottom"], "wall")
        self.assertEqual(self.grid.get(1, 2).edges["top"], "wall")
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_toggling_same_type_clears_both_sides(self):
        toggle_edge(self.grid, 1, 1, "left", "door")
        result = toggle_edge(self.grid, 1, 1, "left", "door")
        self.assertIsNone(result)
        self.assertIsNone(self.grid.get(1, 1).edges["left"])
        self.assertIsNone(self.grid.get(0, 1).edges["right"])

    def test_different_type_replaces_existing_edge(self):
        toggle_edge(self.grid, 0, 0, "right", "wall")
        toggle_edge(self.grid, 0, 0, "right", "window")
        self.assertEqual(self.grid.get(0, 0).edges["right"], "window")
        self.assertEqual(self.grid.get(1, 0).edges["left"], "window")

    def test_toggling_from_the_other_side_affects_the_same_border(self):
        toggle_edge(self.grid, 1, 1, "top", "secret")
        toggle_edge(self.grid, 1, 0, "bottom", "secret")
        self.assertIsNone(self.grid.get(1, 1).edges["top"])
        self.assertIsNone(self.grid.get(1, 0).edges["bottom"])

    def test_clear_overrides_mismatched_neighbor(self):
        # A mismatched pair (e.g. from an old document) is healed by the next toggle
        self.grid.get(1, 1).edges["right"] = "wall"
        self.grid.get(2, 1).edges["left"] = "door"
        toggle_edge(self.grid, 1, 1, "right", "wall")
        self.assertIsNone(self.grid.get(1, 1).edges["right"])
        self.assertIsNone(self.grid.get(2, 1).edges["left"])

    def test_map_border_edge_has_no_neighbor(self):
        toggle_edge(self.grid, 0, 0, "top", "wall")
        self.assertEqual(self.grid.get(0, 0).edges["top"], "wall")
        self.assertEqual(find_invariant_violations(self.grid), [])

    def test_edges_do_not_change_tile_kind(self):
        toggle_edge(self.grid, 2, 2, "left", "lever")
        self.assertEqual(self.grid.get(2, 2).kind, "empty")

    def test_invalid_arguments_leave_grid_untouched(self):
        before = self.grid.clone()
        with self.assertRaises(InvalidEdge):
            toggle_edge(self.grid, 1, 1, "diagonal", "wall")
        with self.assertRaises(InvalidEdge):
            toggle_edge(self.grid, 1, 1, "top", "portcullis")
        with self.assertRaises(OutOfBounds):
            toggle_edge(self.grid, 3, 0, "top", "wall")
        self.assertEqual(self.grid, before)


class TestMirrorEdges(unittest.TestCase):
    def test_copies_selected_sides_only(self):
        grid = Grid.create(3, 1)
        grid.get(1, 0).edges["left"] = "wall"
        grid.get(1, 0).edges["right"] = "door"
        mirror_edges(grid, 1, 0, ["left"])
        self.assertEqual(grid.get(0, 0).edges["right"], "wall")
        self.assertIsNone(grid.get(2, 0).edges["left"])


if __name__ == "__main__":
    unittest.main()
