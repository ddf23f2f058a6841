MAX_DIMENSION = 256
MAX_CELL_SIZE = 256


def validate_dimension(value, name: str = "dimension") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 1 <= value <= MAX_DIMENSION:
        raise ValueError(f"{name} must be between 1 and {MAX_DIMENSION}, got {value}")
    return value


def validate_cell_size(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"cell size must be an integer, got {value!r}")
    if not 1 <= value <= MAX_CELL_SIZE:
        raise ValueError(f"cell size must be between 1 and {MAX_CELL_SIZE}, got {value}")
    return value
