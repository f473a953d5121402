"""Exception hierarchy for the import pipeline."""


class ImportPipelineError(Exception):
    """Base exception for all import pipeline errors."""

    def __init__(self, message: str, *args):
        self.message = message
        super().__init__(message, *args)


class SheetParseError(ImportPipelineError):
    """Raised when an uploaded file cannot be read as a sheet, or holds no data rows."""
    pass


class UnknownSupplierError(ImportPipelineError):
    """Raised when an import is pinned to a supplier that does not exist."""

    def __init__(self, supplier_id: int):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier not found: {supplier_id}")


class ImportConfirmError(ImportPipelineError):
    """Raised when persisting a confirmed row fails. The whole confirm is rolled back."""

    def __init__(self, row: int, message: str):
        self.row = row
        super().__init__(f"Import failed at row {row}: {message}")
