import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from pixel_grid.core.errors import ExportContractError, ExportError, SerializationError
from pixel_grid.core.history import History
from pixel_grid.core.renderer import PillowRenderer, RenderSurface, Renderer
from pixel_grid.core.serializer import history_to_json

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    PNG = "png"
    SVG = "svg"
    JSON = "json"


@dataclass(frozen=True)
class GridData:
    """Structured-data export source: a whole history snapshot."""
    history: History


ExportSource = Union[GridData, RenderSurface]


@dataclass(frozen=True)
class ExportOption:
    format: ExportFormat
    label: str
    extension: str
    converter: Callable[[ExportSource, Renderer], bytes]


def _to_json(source: ExportSource, renderer: Renderer) -> bytes:
    if not isinstance(source, GridData):
        raise ExportContractError("JSON export requires grid data, not a render surface")
    try:
        return history_to_json(source.history).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to serialize history: {e}") from e


def _render(source: ExportSource, draw: Callable[[RenderSurface], bytes], kind: str) -> bytes:
    if not isinstance(source, RenderSurface):
        raise ExportContractError(f"{kind} export requires a render surface, not grid data")
    try:
        return draw(source)
    except Exception as e:
        raise ExportError(f"Failed to render {kind}: {e}") from e


def _to_png(source: ExportSource, renderer: Renderer) -> bytes:
    return _render(source, renderer.render_png, "PNG")


def _to_svg(source: ExportSource, renderer: Renderer) -> bytes:
    return _render(source, renderer.render_svg, "SVG")


EXPORT_OPTIONS: tuple[ExportOption, ...] = (
    ExportOption(ExportFormat.PNG, "PNG Image", ".png", _to_png),
    ExportOption(ExportFormat.SVG, "SVG Vector", ".svg", _to_svg),
    ExportOption(ExportFormat.JSON, "JSON", ".json", _to_json),
)


def get_export_option(fmt: ExportFormat | str) -> ExportOption:
    try:
        fmt = ExportFormat(fmt.lower() if isinstance(fmt, str) else fmt)
    except ValueError:
        raise ValueError(f"Unsupported export format: {fmt}") from None
    for option in EXPORT_OPTIONS:
        if option.format is fmt:
            return option
    raise ValueError(f"Unsupported export format: {fmt}")


def format_for_path(path: str | Path) -> ExportFormat:
    suffix = Path(path).suffix.lower()
    for option in EXPORT_OPTIONS:
        if option.extension == suffix:
            return option.format
    raise ValueError(f"Cannot infer export format from extension: {suffix or '(none)'}")


def export(fmt: ExportFormat | str, source: ExportSource, renderer: Optional[Renderer] = None) -> bytes:
    """
    Convert source to the bytes of the requested format.

    JSON takes GridData; PNG and SVG take a RenderSurface and are drawn by
    renderer (PillowRenderer by default). Asking a format for the other kind
    of source raises ExportContractError.
    """
    option = get_export_option(fmt)
    data = option.converter(source, renderer or PillowRenderer())
    logger.debug(f"Exported {option.label}: {len(data)} bytes")
    return data


def export_to_file(fmt: ExportFormat | str, source: ExportSource, out_path: str | Path,
                   renderer: Optional[Renderer] = None) -> Path:
    data = export(fmt, source, renderer)
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    logger.info(f"Wrote {p}")
    return p
