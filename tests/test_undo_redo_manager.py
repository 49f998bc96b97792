import unittest
from unittest.mock import patch

from src.core import config
from src.editor.undo_redo_manager import UndoRedoManager
from src.mapgrid.grid import FILL, Grid, Tile


def _filled(grid, x, y):
    grid.set(x, y, Tile(kind=FILL))
    return grid


class TestUndoRedoManager(unittest.TestCase):
    def setUp(self):
        self.grid = Grid.create(3, 3)
        self.manager = UndoRedoManager()
        self.manager.reset(self.grid)

    def test_reset_leaves_single_entry(self):
        self.assertEqual(len(self.manager), 1)
        self.assertEqual(self.manager.index, 0)
        self.assertFalse(self.manager.can_undo())
        self.assertFalse(self.manager.can_redo())

    def test_undo_and_redo_restore_snapshots(self):
        _filled(self.grid, 0, 0)
        self.manager.save_state(self.grid)

        restored = self.manager.undo()
        self.assertEqual(restored, Grid.create(3, 3))
        self.assertTrue(self.manager.can_redo())

        redone = self.manager.redo()
        self.assertEqual(redone, self.grid)

    def test_restored_grids_are_copies(self):
        _filled(self.grid, 0, 0)
        self.manager.save_state(self.grid)
        restored = self.manager.undo()
        _filled(restored, 2, 2)
        again = self.manager.redo()
        self.assertNotEqual(again.get(2, 2).kind, FILL)

    def test_snapshot_is_taken_at_save_time(self):
        _filled(self.grid, 0, 0)
        self.manager.save_state(self.grid)
        _filled(self.grid, 1, 1)
        self.assertNotEqual(self.manager.entries[-1], self.grid)

    def test_recording_after_undo_discards_redo_branch(self):
        _filled(self.grid, 0, 0)
        self.manager.save_state(self.grid)
        self.manager.undo()
        other = _filled(Grid.create(3, 3), 2, 2)
        self.manager.save_state(other)
        self.assertFalse(self.manager.can_redo())
        self.assertEqual(len(self.manager), 2)
        self.assertEqual(self.manager.entries[-1], other)

    def test_history_is_capped_by_evicting_oldest(self):
        for i in range(config.HISTORY_LIMIT + 10):
            _filled(self.grid, i % 3, (i // 3) % 3)
            self.manager.save_state(self.grid)
        self.assertEqual(len(self.manager), config.HISTORY_LIMIT)
        self.assertEqual(self.manager.index, config.HISTORY_LIMIT - 1)

        undone = 0
        while self.manager.undo() is not None:
            undone += 1
        self.assertEqual(undone, config.HISTORY_LIMIT - 1)

    def test_undo_at_start_reports_and_returns_none(self):
        with patch("builtins.print") as mock_print:
            self.assertIsNone(self.manager.undo())
            self.assertIsNone(self.manager.redo())
        mock_print.assert_any_call("Nothing to undo.")
        mock_print.assert_any_call("Nothing to redo.")


if __name__ == "__main__":
    unittest.main()
