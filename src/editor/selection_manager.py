from typing import Iterator, NamedTuple, Optional, Tuple

Cell = Tuple[int, int]


class SelectionRect(NamedTuple):
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Last column inside the rectangle."""
        return self.x + self.width - 1

    @property
    def bottom(self) -> int:
        """Last row inside the rectangle."""
        return self.y + self.height - 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def cells(self) -> Iterator[Cell]:
        for y in range(self.y, self.y + self.height):
            for x in range(self.x, self.x + self.width):
                yield x, y

    def clipped(self, width: int, height: int) -> Optional["SelectionRect"]:
        """The part of the rectangle inside a ``width`` x ``height`` map, or None."""
        left, top = max(self.x, 0), max(self.y, 0)
        right, bottom = min(self.right, width - 1), min(self.bottom, height - 1)
        if left > right or top > bottom:
            return None
        return SelectionRect(left, top, right - left + 1, bottom - top + 1)


def normalize(start: Cell, end: Cell) -> SelectionRect:
    x1, y1 = start
    x2, y2 = end
    left = min(x1, x2)
    top = min(y1, y2)
    width = abs(x2 - x1) + 1
    height = abs(y2 - y1) + 1
    return SelectionRect(left, top, width, height)


class SelectionTool:
    """
    Rectangular tile selection on the map.

    The selection is defined by two inclusive corner tiles in any order and
    is normalized to a top-left based rectangle whenever it is read.

    Attributes:
        selecting (bool): True while the pointer is dragging out a selection.
        active (bool): True when a selection exists.
        start_pos (tuple): The tile where the selection started.
        end_pos (tuple): The tile where the selection currently ends.
    """

    def __init__(self):
        self.selecting = False
        self.active = False
        self.start_pos: Optional[Cell] = None
        self.end_pos: Optional[Cell] = None

    def start(self, cell: Cell) -> None:
        """Begin a new selection anchored at ``cell``."""
        self.start_pos = cell
        self.end_pos = cell
        self.selecting = True
        self.active = True

    def update(self, cell: Cell) -> None:
        """Move the free corner of the selection while dragging."""
        if not self.selecting or self.start_pos is None:
            return
        self.end_pos = cell

    def end_selection(self, cell: Optional[Cell] = None) -> None:
        """Finish dragging; the last corner is kept when ``cell`` is None."""
        if cell is not None and self.start_pos is not None:
            self.end_pos = cell
        self.selecting = False

    def select(self, start: Cell, end: Cell) -> None:
        self.start_pos = start
        self.end_pos = end
        self.selecting = False
        self.active = True

    def clear(self) -> None:
        self.selecting = False
        self.active = False
        self.start_pos = None
        self.end_pos = None

    @property
    def rect(self) -> Optional[SelectionRect]:
        if not self.active or self.start_pos is None or self.end_pos is None:
            return None
        return normalize(self.start_pos, self.end_pos)

    def single_tile(self) -> Optional[Cell]:
        """The selected tile when exactly one tile is selected."""
        rect = self.rect
        if rect is None or rect.width != 1 or rect.height != 1:
            return None
        return rect.x, rect.y
