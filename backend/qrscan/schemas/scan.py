from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from qrscan.services import history

# SQLite INTEGER is a signed 64-bit value.
SQLITE_INT_MAX = 2**63 - 1
SQLITE_INT_MIN = -(2**63)


def _check_coordinate_pair(latitude: Optional[float], longitude: Optional[float]) -> None:
    if (latitude is None) != (longitude is None):
        raise ValueError("latitude and longitude must be provided together")


class GeoPoint(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    latitude: float
    longitude: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None


class ScanCreate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    qr_data: str = Field(min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    timestamp: int = Field(ge=0, le=SQLITE_INT_MAX, description="Capture time in epoch milliseconds")

    @model_validator(mode="after")
    def _paired_coordinates(self) -> "ScanCreate":
        _check_coordinate_pair(self.latitude, self.longitude)
        return self


class ScanUpdate(BaseModel):
    """Partial update. Only fields sent with a non-null value are changed."""

    model_config = ConfigDict(allow_inf_nan=False)

    qr_data: Optional[str] = Field(default=None, min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None

    def changed_fields(self) -> dict[str, Any]:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class ScanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    qr_data: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    timestamp: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset; stored values are always UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_url(self) -> bool:
        return history.is_url(self.qr_data)


class ScanListResponse(BaseModel):
    success: bool = True
    scans: list[ScanOut]


class ScanCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Scan saved successfully"
    id: int
    scan: ScanOut


class ScanDetailResponse(BaseModel):
    success: bool = True
    scan: ScanOut


class ScanDeletedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Scan deleted successfully"
    deleted_id: int = Field(alias="deletedId")
    changes: int


class ScanUpdatedResponse(BaseModel):
    success: bool = True
    message: str = "Scan updated successfully"
    scan: ScanOut
    changes: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None
    details: Optional[list[dict[str, Any]]] = None
