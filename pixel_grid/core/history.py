import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from pixel_grid.core.color import WHITE, normalize_color
from pixel_grid.core.errors import InvalidColorError, InvalidGridError, OutOfBoundsError
from pixel_grid.utils.config import Settings, is_structural_change

logger = logging.getLogger(__name__)

Row = tuple[str, ...]
Grid = tuple[Row, ...]


def make_grid(rows: int, cols: int, color: str = WHITE) -> Grid:
    if rows < 1 or cols < 1:
        raise InvalidGridError(f"Grid must be at least 1x1, got {rows}x{cols}")
    row = (normalize_color(color),) * cols
    # rows are immutable, so every row may be the same tuple
    return (row,) * rows


def grid_size(grid: Grid) -> tuple[int, int]:
    return len(grid), len(grid[0])


def validate_grid(value) -> Grid:
    """
    Check that value is a non-empty rectangular sequence of rows of valid colors.
    Returns the grid as nested tuples of canonical colors.
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise InvalidGridError(f"Grid must be a list of rows, got {type(value).__name__}")
    if not value:
        raise InvalidGridError("Grid must have at least one row")
    out = []
    width = None
    for r, row in enumerate(value):
        if isinstance(row, (str, bytes)) or not isinstance(row, (list, tuple)):
            raise InvalidGridError(f"Row {r} must be a list of colors, got {type(row).__name__}")
        if width is None:
            width = len(row)
            if width == 0:
                raise InvalidGridError("Grid must have at least one column")
        elif len(row) != width:
            raise InvalidGridError(f"Row {r} has {len(row)} cells, expected {width}")
        try:
            out.append(tuple(normalize_color(c) for c in row))
        except InvalidColorError as e:
            raise InvalidGridError(f"Row {r}: {e}") from e
    return tuple(out)


def _trim(past: tuple[Grid, ...], limit: Optional[int]) -> tuple[Grid, ...]:
    if limit is not None and len(past) > limit:
        return past[len(past) - limit:]
    return past


@dataclass(frozen=True)
class History:
    """
    Linear undo/redo history: past (oldest first), present, future (nearest redo first).
    Every transition returns a new History; grids are never mutated.
    """
    present: Grid
    past: tuple[Grid, ...] = ()
    future: tuple[Grid, ...] = ()

    @classmethod
    def initial(cls, rows: int, cols: int, default_color: str = WHITE) -> "History":
        return cls(present=make_grid(rows, cols, default_color))

    @classmethod
    def from_grids(cls, present, past=(), future=()) -> "History":
        """Build a History from untrusted nested sequences, validating every grid."""
        grid = validate_grid(present)
        size = grid_size(grid)
        stacks = []
        for name, seq in (("past", past), ("future", future)):
            if isinstance(seq, (str, bytes)) or not isinstance(seq, (list, tuple)):
                raise InvalidGridError(f"'{name}' must be a list of grids")
            grids = []
            for i, g in enumerate(seq):
                try:
                    checked = validate_grid(g)
                except InvalidGridError as e:
                    raise InvalidGridError(f"{name}[{i}]: {e}") from e
                if grid_size(checked) != size:
                    raise InvalidGridError(
                        f"{name}[{i}] is {grid_size(checked)[0]}x{grid_size(checked)[1]}, "
                        f"expected {size[0]}x{size[1]}"
                    )
                grids.append(checked)
            stacks.append(tuple(grids))
        return cls(present=grid, past=stacks[0], future=stacks[1])

    @property
    def rows(self) -> int:
        return len(self.present)

    @property
    def cols(self) -> int:
        return len(self.present[0])

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def _check_bounds(self, row: int, col: int):
        ok = (
            isinstance(row, int) and isinstance(col, int)
            and not isinstance(row, bool) and not isinstance(col, bool)
            and 0 <= row < self.rows and 0 <= col < self.cols
        )
        if not ok:
            raise OutOfBoundsError(row, col, self.rows, self.cols)

    def paint(self, row: int, col: int, color: str, limit: Optional[int] = None) -> "History":
        self._check_bounds(row, col)
        color = normalize_color(color)
        old_row = self.present[row]
        new_row = old_row[:col] + (color,) + old_row[col + 1:]
        # only the edited row is copied; the others are shared with the old grid
        present = self.present[:row] + (new_row,) + self.present[row + 1:]
        return History(present=present, past=_trim(self.past + (self.present,), limit), future=())

    def undo(self) -> "History":
        if not self.past:
            return self
        return History(present=self.past[-1], past=self.past[:-1], future=(self.present,) + self.future)

    def redo(self) -> "History":
        if not self.future:
            return self
        return History(present=self.future[0], past=self.past + (self.present,), future=self.future[1:])

    def reset(self, default_color: str = WHITE, limit: Optional[int] = None) -> "History":
        fresh = make_grid(self.rows, self.cols, default_color)
        return History(present=fresh, past=_trim(self.past + (self.present,), limit), future=())

    def reset_with_dimensions(self, rows: int, cols: int, default_color: str) -> "History":
        return History.initial(rows, cols, default_color)


class GridHistory:
    """
    Stateful owner of one History value.

    Commands are applied under a lock so concurrent callers never interleave
    the read-modify-write of the current History. Returned History objects are
    immutable and safe to hand to an exporter running elsewhere.
    """

    def __init__(self, settings: Optional[Settings] = None, limit: Optional[int] = None):
        settings = settings or Settings()
        if limit is not None and limit < 0:
            raise ValueError("History limit must be >= 0")
        self.limit = limit
        self._lock = threading.Lock()
        self._settings = settings
        self._default_color = normalize_color(settings.default_color)
        self._history = History.initial(settings.rows, settings.cols, self._default_color)

    @property
    def history(self) -> History:
        return self._history

    @property
    def present(self) -> Grid:
        return self._history.present

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def _apply(self, step: Callable[[History], History]) -> History:
        with self._lock:
            self._history = step(self._history)
            return self._history

    def paint(self, row: int, col: int, color: str) -> History:
        h = self._apply(lambda h: h.paint(row, col, color, limit=self.limit))
        logger.debug(f"paint ({row}, {col}) -> {h.present[row][col]}; {len(h.past)} undo step(s)")
        return h

    def undo(self) -> History:
        h = self._apply(History.undo)
        logger.debug(f"undo: {len(h.past)} past, {len(h.future)} future")
        return h

    def redo(self) -> History:
        h = self._apply(History.redo)
        logger.debug(f"redo: {len(h.past)} past, {len(h.future)} future")
        return h

    def reset(self) -> History:
        h = self._apply(lambda h: h.reset(self._default_color, limit=self.limit))
        logger.info(f"Grid reset to {self._default_color}")
        return h

    def _reset_with_dimensions_locked(self, rows: int, cols: int, color: str) -> History:
        self._history = self._history.reset_with_dimensions(rows, cols, color)
        self._default_color = color
        return self._history

    def reset_with_dimensions(self, rows: int, cols: int, default_color: str) -> History:
        color = normalize_color(default_color)
        with self._lock:
            h = self._reset_with_dimensions_locked(rows, cols, color)
        logger.info(f"Grid reset to {rows}x{cols} filled with {color}; history cleared")
        return h

    def load_snapshot(self, external: History) -> History:
        """
        Replace the whole history. The snapshot is fully re-validated before it
        is installed; on error the current history is left as it was.
        """
        checked = History.from_grids(external.present, external.past, external.future)
        h = self._apply(lambda _: checked)
        logger.info(f"Loaded {h.rows}x{h.cols} history ({len(h.past)} past, {len(h.future)} future)")
        return h

    def apply_settings(self, settings: Settings) -> bool:
        """
        React to a settings change. Structural changes (dimensions, default color)
        reset the grid and clear history; cosmetic ones are ignored.
        Returns True when a reset happened.
        """
        color = normalize_color(settings.default_color)
        with self._lock:
            structural = is_structural_change(self._settings, settings)
            if structural:
                self._reset_with_dimensions_locked(settings.rows, settings.cols, color)
            self._settings = settings
        if not structural:
            return False
        logger.info(f"Settings changed to {settings.rows}x{settings.cols} filled with {color}; history cleared")
        return True
