"""Exceptions raised by report_uploader."""
from typing import Optional


class ReportUploaderError(RuntimeError):
    """Base class for all report_uploader failures."""


class ConfigError(ReportUploaderError):
    """Raised when settings or the configuration document are invalid."""


class CatalogStateError(ReportUploaderError):
    """Raised when the remote catalog is in a state the sync cannot realize."""


class ReportFileError(ReportUploaderError):
    """Raised when a local report file is missing or cannot be read/written."""


class RemoteCatalogError(ReportUploaderError):
    """Raised when a call to the report server fails."""

    def __init__(self, operation: str, message: str, fault_code: Optional[str] = None):
        self.operation = operation
        self.fault_code = fault_code
        super().__init__(f"{operation} failed: {message}")
