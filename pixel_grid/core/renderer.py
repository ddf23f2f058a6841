from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from PIL import Image, ImageDraw

from pixel_grid.core.color import color_to_rgb
from pixel_grid.core.history import Grid, History, validate_grid
from pixel_grid.utils.config import Settings
from pixel_grid.utils.validators import validate_cell_size

GRID_LINE_COLOR = "#CCCCCC"


@dataclass(frozen=True)
class RenderSurface:
    """
    What an image renderer draws: one present grid plus the cosmetic settings.
    The grid is an immutable snapshot, so a render can run while editing goes on.
    """
    grid: Grid
    cell_size: int = 32
    show_grid_lines: bool = True

    def __post_init__(self):
        validate_cell_size(self.cell_size)
        object.__setattr__(self, "grid", validate_grid(self.grid))

    @classmethod
    def from_history(cls, history: History, settings: Settings) -> "RenderSurface":
        return cls(history.present, settings.cell_size, settings.show_grid_lines)

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0])

    @property
    def size(self) -> tuple[int, int]:
        """Pixel size as (width, height)."""
        return self.cols * self.cell_size, self.rows * self.cell_size


class Renderer(Protocol):
    def render_png(self, surface: RenderSurface) -> bytes: ...

    def render_svg(self, surface: RenderSurface) -> bytes: ...


def render_image(surface: RenderSurface) -> Image.Image:
    w, h = surface.size
    cs = surface.cell_size
    img = Image.new("RGB", (w, h))
    draw = ImageDraw.Draw(img)
    for r, row in enumerate(surface.grid):
        for c, color in enumerate(row):
            x0, y0 = c * cs, r * cs
            draw.rectangle((x0, y0, x0 + cs - 1, y0 + cs - 1), fill=color_to_rgb(color))
    if surface.show_grid_lines:
        line = color_to_rgb(GRID_LINE_COLOR)
        for c in range(surface.cols + 1):
            x = min(c * cs, w - 1)
            draw.line((x, 0, x, h - 1), fill=line)
        for r in range(surface.rows + 1):
            y = min(r * cs, h - 1)
            draw.line((0, y, w - 1, y), fill=line)
    return img


def render_svg_text(surface: RenderSurface) -> str:
    w, h = surface.size
    cs = surface.cell_size
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
        f'viewBox="0 0 {w} {h}" shape-rendering="crispEdges">'
    ]
    for r, row in enumerate(surface.grid):
        for c, color in enumerate(row):
            parts.append(f'<rect x="{c * cs}" y="{r * cs}" width="{cs}" height="{cs}" fill="{color}"/>')
    if surface.show_grid_lines:
        d = [f"M{c * cs} 0V{h}" for c in range(surface.cols + 1)]
        d += [f"M0 {r * cs}H{w}" for r in range(surface.rows + 1)]
        parts.append(f'<path d="{" ".join(d)}" stroke="{GRID_LINE_COLOR}" stroke-width="1" fill="none"/>')
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


class PillowRenderer:
    """Default renderer: PNG through Pillow, SVG as one rect per cell."""

    def render_png(self, surface: RenderSurface) -> bytes:
        buf = BytesIO()
        render_image(surface).save(buf, format="PNG", optimize=True)
        return buf.getvalue()

    def render_svg(self, surface: RenderSurface) -> bytes:
        return render_svg_text(surface).encode("utf-8")
