import threading

import pytest

from pixel_grid.core.errors import InvalidColorError, InvalidGridError, OutOfBoundsError
from pixel_grid.core.history import GridHistory, History, make_grid, validate_grid
from pixel_grid.utils.config import Settings

W = "#FFFFFF"
R = "#FF0000"
B = "#0000FF"


def test_initial_state(engine):
    h = engine.history
    assert h.present == ((W, W), (W, W))
    assert h.past == ()
    assert h.future == ()
    assert not engine.can_undo and not engine.can_redo


def test_default_engine_uses_default_settings():
    h = GridHistory().history
    assert (h.rows, h.cols) == (16, 16)
    assert h.present[0][0] == W


def test_paint_undo_redo_scenario(engine):
    h = engine.paint(0, 0, "#ff0000")
    assert h.present == ((R, W), (W, W))
    assert h.past == (((W, W), (W, W)),)
    assert h.future == ()

    h = engine.undo()
    assert h.present == ((W, W), (W, W))
    assert h.past == ()
    assert h.future == (((R, W), (W, W)),)

    h = engine.redo()
    assert h.present == ((R, W), (W, W))
    assert len(h.past) == 1
    assert h.future == ()


def test_undo_is_inverse_of_paint():
    h = History.initial(3, 4, W).paint(1, 1, B).paint(2, 3, R)
    painted = h.paint(0, 2, B)
    undone = painted.undo()
    assert undone.present == h.present
    assert undone.past == h.past
    assert undone.redo() == painted


def test_new_paint_clears_redo(engine):
    engine.paint(0, 0, R)
    engine.paint(0, 1, B)
    engine.undo()
    assert engine.can_redo
    h = engine.paint(1, 1, B)
    assert h.future == ()
    assert not engine.can_redo


def test_undo_redo_noop_on_empty_stacks():
    h = History.initial(2, 2, W)
    assert h.undo() is h
    assert h.redo() is h


def test_paint_same_color_still_records_step(engine):
    h = engine.paint(0, 0, W)
    assert len(h.past) == 1


def test_paint_does_not_mutate_previous_snapshot(engine):
    before = engine.history
    engine.paint(1, 0, R)
    assert before.present == ((W, W), (W, W))
    assert engine.present[1][0] == R


def test_paint_shares_untouched_rows():
    h = History.initial(3, 3, W).paint(1, 1, R)
    after = h.paint(0, 0, B)
    assert after.present[1] is h.present[1]
    assert after.present[2] is h.present[2]


@pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (2, 0), (0, 2), (5, 5)])
def test_paint_out_of_bounds_raises(engine, row, col):
    before = engine.history
    with pytest.raises(OutOfBoundsError):
        engine.paint(row, col, R)
    assert engine.history is before


def test_paint_invalid_color_raises(engine):
    with pytest.raises(InvalidColorError):
        engine.paint(0, 0, "red")
    assert engine.history.past == ()


def test_reset_is_undoable(engine):
    engine.paint(0, 0, R)
    engine.paint(1, 1, B)
    engine.undo()
    painted = engine.present
    h = engine.reset()
    assert h.present == ((W, W), (W, W))
    assert h.future == ()
    assert engine.undo().present == painted


def test_reset_with_dimensions_clears_history(engine):
    for i in range(2):
        engine.paint(i, i, R)
    engine.undo()
    h = engine.reset_with_dimensions(3, 5, "#00ff00")
    assert (h.rows, h.cols) == (3, 5)
    assert h.present[2][4] == "#00FF00"
    assert h.past == () and h.future == ()
    # later resets use the new default color
    engine.paint(0, 0, R)
    assert engine.reset().present[0][0] == "#00FF00"


def test_load_snapshot_replaces_history(engine):
    external = History.from_grids([["#aaaaaa"]], past=[[["#bbbbbb"]]], future=[])
    h = engine.load_snapshot(external)
    assert h.present == (("#AAAAAA",),)
    assert engine.undo().present == (("#BBBBBB",),)


def test_load_snapshot_rejects_malformed_and_keeps_state(engine):
    engine.paint(0, 0, R)
    before = engine.history
    bad = History(present=((W, W), (W,)))
    with pytest.raises(InvalidGridError):
        engine.load_snapshot(bad)
    assert engine.history is before


def test_history_limit_drops_oldest():
    engine = GridHistory(Settings(rows=1, cols=3), limit=2)
    engine.paint(0, 0, R)
    engine.paint(0, 1, R)
    h = engine.paint(0, 2, R)
    assert len(h.past) == 2
    assert h.past[0] == ((R, W, W),)


def test_apply_settings_structural_vs_cosmetic(engine):
    engine.paint(0, 0, R)
    assert engine.apply_settings(Settings(rows=2, cols=2, default_color="#ffffff", active_color=R,
                                          show_grid_lines=False)) is False
    assert engine.can_undo
    assert engine.apply_settings(Settings(rows=4, cols=2)) is True
    assert engine.history.past == ()
    assert engine.history.rows == 4


def test_make_grid_requires_positive_size():
    with pytest.raises(InvalidGridError):
        make_grid(0, 3)
    with pytest.raises(InvalidGridError):
        make_grid(3, 0)


@pytest.mark.parametrize("value", [
    [],
    [[]],
    [["#FFFFFF", "#FFFFFF"], ["#FFFFFF"]],
    [["#FFFFFF", "nope"]],
    "#FFFFFF",
    [["#FFFFFF"], "#FFFFFF"],
    None,
])
def test_validate_grid_rejects(value):
    with pytest.raises(InvalidGridError):
        validate_grid(value)


def test_from_grids_rejects_mismatched_stack_sizes():
    with pytest.raises(InvalidGridError, match="past"):
        History.from_grids([[W, W]], past=[[[W]]], future=[])


def test_concurrent_paints_are_all_recorded():
    engine = GridHistory(Settings(rows=8, cols=8))

    def worker(row):
        for col in range(8):
            engine.paint(row, col, R)

    threads = [threading.Thread(target=worker, args=(r,)) for r in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(engine.history.past) == 64
    assert all(c == R for row in engine.present for c in row)


def test_failed_settings_change_keeps_previous_settings(engine):
    engine.paint(0, 0, R)
    with pytest.raises(InvalidGridError):
        engine.apply_settings(Settings(rows=0, cols=2))
    assert engine.can_undo
    # the rejected settings were not recorded, so the same valid change still resets
    assert engine.apply_settings(Settings(rows=3, cols=2)) is True
    assert engine.history.rows == 3


def test_concurrent_settings_changes_end_consistent():
    engine = GridHistory(Settings(rows=2, cols=2))
    sizes = [Settings(rows=n, cols=n) for n in range(3, 11)]

    def worker(settings):
        for _ in range(20):
            engine.apply_settings(settings)
            engine.paint(0, 0, R)

    threads = [threading.Thread(target=worker, args=(s,)) for s in sizes]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    h = engine.history
    assert h.rows == h.cols
    assert all(len(g) == h.rows and len(g[0]) == h.cols for g in h.past)
