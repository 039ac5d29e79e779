from __future__ import annotations

from qrscan.schemas.scan import (
    ErrorResponse,
    GeoPoint,
    ScanCreate,
    ScanCreatedResponse,
    ScanDeletedResponse,
    ScanDetailResponse,
    ScanListResponse,
    ScanOut,
    ScanUpdate,
    ScanUpdatedResponse,
)

__all__ = [
    "GeoPoint",
    "ScanCreate",
    "ScanUpdate",
    "ScanOut",
    "ScanListResponse",
    "ScanCreatedResponse",
    "ScanDetailResponse",
    "ScanDeletedResponse",
    "ScanUpdatedResponse",
    "ErrorResponse",
]
