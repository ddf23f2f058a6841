import json
import logging
from pathlib import Path

from pixel_grid.core.errors import ImportDocumentError, InvalidGridError
from pixel_grid.core.history import Grid, History

logger = logging.getLogger(__name__)

FIELDS = ("present", "past", "future")


def _grid_to_lists(grid: Grid) -> list[list[str]]:
    return [list(row) for row in grid]


def history_to_dict(history: History) -> dict:
    return {
        "present": _grid_to_lists(history.present),
        "past": [_grid_to_lists(g) for g in history.past],
        "future": [_grid_to_lists(g) for g in history.future],
    }


def history_to_json(history: History, indent: int | None = 2) -> str:
    return json.dumps(history_to_dict(history), indent=indent)


def history_from_dict(data) -> History:
    """
    Rebuild a History from a plain document. Nothing is coerced: ragged rows,
    bad colors, missing fields or grids of mixed sizes raise ImportDocumentError.
    """
    if not isinstance(data, dict):
        raise ImportDocumentError(f"Document must be an object, got {type(data).__name__}")
    missing = [k for k in FIELDS if k not in data]
    if missing:
        raise ImportDocumentError(f"Document is missing field(s): {', '.join(missing)}")
    try:
        return History.from_grids(data["present"], data["past"], data["future"])
    except InvalidGridError as e:
        raise ImportDocumentError(str(e)) from e


def history_from_json(text: str | bytes) -> History:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportDocumentError(f"Not valid JSON: {e}") from e
    return history_from_dict(data)


def save_history(history: History, out_path: str | Path):
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(history_to_json(history), encoding="utf-8")
    logger.info(f"Saved {history.rows}x{history.cols} history to: {p}")


def load_history(path: str | Path) -> History:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    history = history_from_json(p.read_bytes())
    logger.info(f"Loaded {history.rows}x{history.cols} history from: {p}")
    return history
