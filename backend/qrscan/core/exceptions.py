from __future__ import annotations

from typing import Any, Optional


class ScanError(Exception):
    """Base class for errors rendered as a ``{"success": false}`` envelope."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[list[dict[str, Any]]] = None):
        super().__init__(message or self.error)
        self.message = message
        self.details = details


class InvalidScanIdError(ScanError):
    status_code = 400
    error = "Invalid scan ID"


class InvalidScanDataError(ScanError):
    status_code = 400
    error = "Invalid scan data"


class ScanNotFoundError(ScanError):
    status_code = 404
    error = "Scan not found"


class StorageError(ScanError):
    status_code = 500

    def __init__(self, action: str, message: Optional[str] = None):
        super().__init__(message)
        self.action = action
        self.error = f"Failed to {action} scan"


class LocationPermissionError(RuntimeError):
    pass
