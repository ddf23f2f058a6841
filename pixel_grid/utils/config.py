import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Callable

from pixel_grid.core.color import BLACK, WHITE, normalize_color
from pixel_grid.utils.validators import validate_cell_size, validate_dimension

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path.home() / ".pixel_grid_settings.json"

# attribute name -> key in the persisted document
_KEYS = {
    "rows": "gridRows",
    "cols": "gridCols",
    "cell_size": "cellSize",
    "default_color": "defaultCellColor",
    "active_color": "selectedColor",
    "show_grid_lines": "showGridLines",
}


@dataclass(frozen=True)
class Settings:
    rows: int = 16
    cols: int = 16
    cell_size: int = 32
    default_color: str = WHITE
    active_color: str = BLACK
    show_grid_lines: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """
        Read a persisted settings document. Missing or invalid keys fall back
        to their defaults instead of failing the whole load.
        """
        defaults = cls()
        values = {}
        for name, key in _KEYS.items():
            if key not in data:
                continue
            raw = data[key]
            try:
                values[name] = _check_field(name, raw)
            except ValueError as e:
                logger.warning(f"Ignoring persisted setting '{key}': {e}")
        return replace(defaults, **values)

    def to_dict(self) -> dict:
        return {key: getattr(self, name) for name, key in _KEYS.items()}


def _check_field(name: str, value):
    if name in ("rows", "cols"):
        return validate_dimension(value, name)
    if name == "cell_size":
        return validate_cell_size(value)
    if name in ("default_color", "active_color"):
        return normalize_color(value)
    if name == "show_grid_lines":
        if not isinstance(value, bool):
            raise ValueError(f"show_grid_lines must be a boolean, got {value!r}")
        return value
    raise ValueError(f"Unknown setting: {name}")


def is_structural_change(old: Settings, new: Settings) -> bool:
    """True when the change invalidates grid history (dimensions or default color)."""
    return (old.rows, old.cols, old.default_color.upper()) != (new.rows, new.cols, new.default_color.upper())


class SettingsStore:
    """
    Holds the current Settings and persists them as JSON on every change.
    Listeners get the new Settings value after each change.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path else DEFAULT_PATH
        self.settings = Settings()
        self._listeners: list[Callable[[Settings], None]] = []
        self._load()

    def _load(self):
        try:
            if self.path.exists():
                data = json.loads(self.path.read_text(encoding="utf-8"))
                if not isinstance(data, dict):
                    raise ValueError("settings document is not an object")
                self.settings = Settings.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read settings from '{self.path}', using defaults: {e}")
            self.settings = Settings()

    def save(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.settings.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write settings to '{self.path}': {e}")

    def subscribe(self, listener: Callable[[Settings], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def update(self, **changes) -> Settings:
        known = {f.name for f in fields(Settings)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        # validate everything before touching the current value
        checked = {name: _check_field(name, value) for name, value in changes.items()}
        new = replace(self.settings, **checked)
        if new == self.settings:
            return new
        self.settings = new
        self.save()
        for listener in list(self._listeners):
            listener(new)
        return new

    def set_rows(self, rows: int) -> Settings:
        return self.update(rows=rows)

    def set_cols(self, cols: int) -> Settings:
        return self.update(cols=cols)

    def set_cell_size(self, size: int) -> Settings:
        return self.update(cell_size=size)

    def set_default_color(self, color: str) -> Settings:
        return self.update(default_color=color)

    def set_active_color(self, color: str) -> Settings:
        return self.update(active_color=color)

    def toggle_grid_lines(self) -> Settings:
        return self.update(show_grid_lines=not self.settings.show_grid_lines)
