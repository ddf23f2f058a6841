import re

from pixel_grid.core.errors import InvalidColorError

_HEX_RE = re.compile(r"#[0-9a-fA-F]{6}")

WHITE = "#FFFFFF"
BLACK = "#000000"


def is_valid_color(value) -> bool:
    return isinstance(value, str) and _HEX_RE.fullmatch(value) is not None


def normalize_color(value) -> str:
    """
    Return the canonical '#RRGGBB' (uppercase) form of a hex color string.
    Input is case-insensitive; anything else is rejected rather than coerced.
    """
    if not is_valid_color(value):
        raise InvalidColorError(f"Invalid color: {value!r} (expected '#RRGGBB')")
    return value.upper()


def color_to_rgb(value: str) -> tuple[int, int, int]:
    c = normalize_color(value)
    return int(c[1:3], 16), int(c[3:5], 16), int(c[5:7], 16)


def color_to_rgba(value: str, alpha: int = 255) -> tuple[int, int, int, int]:
    r, g, b = color_to_rgb(value)
    return r, g, b, alpha
