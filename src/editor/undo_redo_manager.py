from typing import List, Optional

from src.core import config
from src.mapgrid.grid import Grid


class UndoRedoManager:
    """Linear history of full map snapshots with a cursor.

    ``entries[index]`` always equals the live grid after the last recorded
    change. Recording after an undo discards the redo branch.
    """

    def __init__(self, limit: int = config.HISTORY_LIMIT):
        self.limit = max(1, int(limit))
        self.entries: List[Grid] = []
        self.index: int = -1

    def __len__(self) -> int:
        return len(self.entries)

    def reset(self, grid: Grid) -> None:
        """Start a fresh history whose only entry is ``grid`` (new map / load)."""
        self.entries = [grid.clone()]
        self.index = 0

    def save_state(self, grid: Grid) -> None:
        """Record a snapshot of ``grid`` after a committed change."""
        if self.index < len(self.entries) - 1:
            del self.entries[self.index + 1:]
        self.entries.append(grid.clone())
        self.index = len(self.entries) - 1
        if len(self.entries) > self.limit:
            del self.entries[0]
            self.index -= 1

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return 0 <= self.index < len(self.entries) - 1

    def undo(self) -> Optional[Grid]:
        """Step back; returns a copy of the restored grid or None at the start."""
        if not self.can_undo():
            print("Nothing to undo.")
            return None
        self.index -= 1
        return self.entries[self.index].clone()

    def redo(self) -> Optional[Grid]:
        """Step forward; returns a copy of the restored grid or None at the end."""
        if not self.can_redo():
            print("Nothing to redo.")
            return None
        self.index += 1
        return self.entries[self.index].clone()
