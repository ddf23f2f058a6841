import json

import pytest

from pixel_grid.core.errors import InvalidColorError
from pixel_grid.core.history import GridHistory
from pixel_grid.utils.config import Settings, SettingsStore, is_structural_change


def test_defaults_when_file_missing(settings_path):
    store = SettingsStore(settings_path)
    assert store.settings == Settings(16, 16, 32, "#FFFFFF", "#000000", True)
    assert not settings_path.exists()


def test_partial_and_invalid_keys_fall_back(settings_path):
    settings_path.write_text(json.dumps({"gridRows": 8, "cellSize": "big", "selectedColor": "#00ff00"}))
    s = SettingsStore(settings_path).settings
    assert s.rows == 8
    assert s.cols == 16
    assert s.cell_size == 32
    assert s.active_color == "#00FF00"


def test_unreadable_file_gives_defaults(settings_path):
    settings_path.write_text("[1, 2")
    assert SettingsStore(settings_path).settings == Settings()


def test_update_persists(settings_path):
    store = SettingsStore(settings_path)
    store.set_rows(10)
    store.toggle_grid_lines()
    data = json.loads(settings_path.read_text())
    assert data["gridRows"] == 10
    assert data["showGridLines"] is False
    assert SettingsStore(settings_path).settings.rows == 10


def test_invalid_update_changes_nothing(settings_path):
    store = SettingsStore(settings_path)
    with pytest.raises(InvalidColorError):
        store.update(rows=4, default_color="white")
    with pytest.raises(ValueError):
        store.set_cols(0)
    with pytest.raises(ValueError):
        store.update(zoom=2)
    assert store.settings == Settings()


def test_structural_vs_cosmetic():
    base = Settings()
    assert is_structural_change(base, Settings(rows=8))
    assert is_structural_change(base, Settings(default_color="#000000"))
    assert not is_structural_change(base, Settings(default_color="#ffffff"))
    assert not is_structural_change(base, Settings(active_color="#FF0000", show_grid_lines=False, cell_size=8))


def test_store_drives_engine_resets(settings_path):
    store = SettingsStore(settings_path)
    engine = GridHistory(store.settings)
    store.subscribe(engine.apply_settings)

    engine.paint(0, 0, "#FF0000")
    store.set_active_color("#00FF00")
    store.set_cell_size(8)
    store.toggle_grid_lines()
    assert engine.can_undo

    store.set_default_color("#112233")
    assert not engine.can_undo
    assert engine.present[0][0] == "#112233"

    engine.paint(0, 0, "#FF0000")
    store.set_cols(4)
    assert engine.history.cols == 4
    assert not engine.can_undo


def test_unsubscribe(settings_path):
    store = SettingsStore(settings_path)
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.set_rows(3)
    unsubscribe()
    store.set_rows(4)
    assert [s.rows for s in seen] == [3]
