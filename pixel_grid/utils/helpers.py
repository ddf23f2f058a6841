from pixel_grid.core.color import normalize_color


def human_readable_size(bytes_count: int) -> str:
    units = ["B", "KB", "MB", "GB"]
    i = 0
    v = float(bytes_count)
    while v >= 1024 and i < len(units) - 1:
        v /= 1024.0
        i += 1
    return f"{v:.2f} {units[i]}"


def parse_dimensions(s: str) -> tuple[int, int]:
    """Parse 'ROWSxCOLS' (e.g. '16x16' or '8X12')."""
    parts = (s or "").lower().replace(" ", "").split("x")
    if len(parts) != 2:
        raise ValueError(f"Expected ROWSxCOLS, got {s!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Expected ROWSxCOLS, got {s!r}") from None


def parse_paint_command(s: str, default_color: str) -> tuple[int, int, str]:
    """Parse 'ROW,COL[,#RRGGBB]'; the color falls back to default_color."""
    tokens = [t.strip() for t in (s or "").replace(";", ",").split(",")]
    if len(tokens) not in (2, 3):
        raise ValueError(f"Expected ROW,COL[,COLOR], got {s!r}")
    try:
        row, col = int(tokens[0]), int(tokens[1])
    except ValueError:
        raise ValueError(f"Row and column must be integers in {s!r}") from None
    color = tokens[2] if len(tokens) == 3 and tokens[2] else default_color
    return row, col, normalize_color(color)
