class InvalidColorError(ValueError):
    pass


class InvalidGridError(ValueError):
    pass


class OutOfBoundsError(IndexError):
    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(f"Cell ({row}, {col}) is outside the {rows}x{cols} grid")
        self.row = row
        self.col = col


class SerializationError(ValueError):
    pass


class ImportDocumentError(SerializationError):
    """Raised when a history document cannot be turned back into a History."""


class ExportError(RuntimeError):
    """Raised when the renderer fails to produce an image."""


class ExportContractError(TypeError):
    """Raised when an export format is asked to convert the wrong kind of source."""
