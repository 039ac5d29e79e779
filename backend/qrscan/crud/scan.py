from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from qrscan.core.exceptions import InvalidScanDataError, ScanNotFoundError
from qrscan.models.scan import Scan

UPDATABLE_FIELDS = ("qr_data", "latitude", "longitude", "altitude", "accuracy")


def create_scan(
    db: Session,
    *,
    qr_data: str,
    timestamp: int,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    altitude: Optional[float] = None,
    accuracy: Optional[float] = None,
) -> Scan:
    scan = Scan(
        qr_data=qr_data,
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
        accuracy=accuracy,
        timestamp=timestamp,
    )
    db.add(scan)
    db.commit()
    db.refresh(scan)
    return scan


def list_scans(db: Session) -> list[Scan]:
    stmt = select(Scan).order_by(Scan.timestamp.desc(), Scan.id.desc())
    return list(db.execute(stmt).scalars().all())


def get_scan_by_id(db: Session, *, scan_id: int) -> Optional[Scan]:
    return db.execute(select(Scan).where(Scan.id == scan_id)).scalar_one_or_none()


def delete_scan(db: Session, *, scan_id: int) -> int:
    """Delete a scan and return how many rows were removed (0 if it did not exist)."""
    result = db.execute(delete(Scan).where(Scan.id == scan_id))
    db.commit()
    return result.rowcount or 0


def update_scan(db: Session, *, scan_id: int, fields: dict[str, Any]) -> tuple[Scan, int]:
    """Overwrite the given fields of a scan, keeping the stored value for the rest.

    ``None`` means "leave unchanged", so a real value of ``0`` is written as-is.
    Returns the refreshed scan and the number of rows changed.
    """
    scan = get_scan_by_id(db, scan_id=scan_id)
    if scan is None:
        raise ScanNotFoundError()

    changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
    if not changes:
        return scan, 0

    latitude = changes.get("latitude", scan.latitude)
    longitude = changes.get("longitude", scan.longitude)
    if (latitude is None) != (longitude is None):
        raise InvalidScanDataError("latitude and longitude must be provided together")

    for key, value in changes.items():
        setattr(scan, key, value)
    db.commit()
    db.refresh(scan)
    return scan, 1
