from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from qrscan.core.exceptions import LocationPermissionError
from qrscan.crud.scan import create_scan
from qrscan.db.session import Database
from qrscan.schemas.scan import GeoPoint, ScanCreate

logger = logging.getLogger(__name__)

LocationProvider = Callable[[], Optional[GeoPoint]]

SCAN_SAVED = "QR code scanned successfully"
SCAN_NOT_SAVED = "Could not save the scan"
SCAN_INVALID = "Could not process the QR code"


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class CaptureResult:
    scan: Optional[ScanCreate]
    scan_id: Optional[int]
    notification: str

    @property
    def saved(self) -> bool:
        return self.scan_id is not None


class ScanCapture:
    """Turns decoded QR payloads into stored scan records.

    Location is best effort: a denied permission or a failing provider only
    leaves the coordinates empty. Storage failures are logged and reported in
    the returned notification, never raised, so scanning can carry on.
    """

    def __init__(
        self,
        database: Database,
        location_provider: Optional[LocationProvider] = None,
        clock: Callable[[], int] = _now_millis,
    ) -> None:
        self.database = database
        self.location_provider = location_provider
        self.clock = clock
        self.scan_count = 0
        self.last_scan: Optional[ScanCreate] = None

    def current_location(self) -> Optional[GeoPoint]:
        if self.location_provider is None:
            return None
        try:
            return self.location_provider()
        except LocationPermissionError:
            logger.warning("Location permission denied, saving scan without coordinates")
        except Exception:
            logger.exception("Error getting location")
        return None

    def build_scan(self, data: str) -> ScanCreate:
        location = self.current_location()
        return ScanCreate(
            qr_data=data,
            latitude=location.latitude if location is not None else None,
            longitude=location.longitude if location is not None else None,
            altitude=location.altitude if location is not None else None,
            accuracy=location.accuracy if location is not None else None,
            timestamp=self.clock(),
        )

    def handle_decoded(self, data: str) -> CaptureResult:
        try:
            scan_in = self.build_scan(data)
        except ValidationError:
            logger.warning("Ignoring unusable QR payload %r", data)
            return CaptureResult(scan=None, scan_id=None, notification=SCAN_INVALID)

        self.scan_count += 1
        self.last_scan = scan_in

        try:
            with self.database.session() as db:
                scan = create_scan(db, **scan_in.model_dump())
        except SQLAlchemyError:
            logger.exception("Error saving scan")
            return CaptureResult(scan=scan_in, scan_id=None, notification=SCAN_NOT_SAVED)

        logger.info("Scan saved successfully: %s", scan.id)
        return CaptureResult(scan=scan_in, scan_id=scan.id, notification=SCAN_SAVED)
