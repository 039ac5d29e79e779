from __future__ import annotations

import pytest
from pydantic import ValidationError

from qrscan.core.exceptions import LocationPermissionError
from qrscan.crud.scan import list_scans
from qrscan.db.session import Database
from qrscan.schemas.scan import GeoPoint
from qrscan.services.capture import SCAN_INVALID, SCAN_NOT_SAVED, SCAN_SAVED, ScanCapture


def _clock():
    return 1700000000000


def _stored(database):
    with database.session() as db:
        return list_scans(db)


def test_capture_with_location(database):
    capture = ScanCapture(
        database,
        location_provider=lambda: GeoPoint(latitude=40.4168, longitude=-3.7038, altitude=650.0, accuracy=12.0),
        clock=_clock,
    )
    result = capture.handle_decoded("https://example.com")

    assert result.saved
    assert result.notification == SCAN_SAVED
    [scan] = _stored(database)
    assert scan.id == result.scan_id
    assert (scan.latitude, scan.longitude, scan.altitude, scan.accuracy) == (40.4168, -3.7038, 650.0, 12.0)
    assert scan.timestamp == 1700000000000


def test_capture_without_provider(database):
    result = ScanCapture(database, clock=_clock).handle_decoded("hello")
    assert result.saved
    [scan] = _stored(database)
    assert scan.latitude is None and scan.longitude is None


def test_permission_denied_degrades_to_no_location(database):
    def denied():
        raise LocationPermissionError("denied")

    result = ScanCapture(database, location_provider=denied, clock=_clock).handle_decoded("hello")
    assert result.saved
    assert result.scan.latitude is None
    assert result.scan.longitude is None


def test_provider_failure_degrades_to_no_location(database):
    def broken():
        raise RuntimeError("gps unavailable")

    result = ScanCapture(database, location_provider=broken, clock=_clock).handle_decoded("hello")
    assert result.saved
    assert _stored(database)[0].latitude is None


def test_zero_coordinates_are_kept(database):
    capture = ScanCapture(database, location_provider=lambda: GeoPoint(latitude=0.0, longitude=0.0), clock=_clock)
    capture.handle_decoded("equator")
    scan = _stored(database)[0]
    assert (scan.latitude, scan.longitude) == (0.0, 0.0)


def test_every_decode_is_recorded(database):
    capture = ScanCapture(database, clock=_clock)
    capture.handle_decoded("same")
    capture.handle_decoded("same")
    assert capture.scan_count == 2
    assert capture.last_scan.qr_data == "same"
    assert len(_stored(database)) == 2


def test_storage_failure_is_not_raised(tmp_path):
    unreachable = Database(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'qr.db'}")
    capture = ScanCapture(unreachable, clock=_clock)

    result = capture.handle_decoded("hello")

    assert not result.saved
    assert result.notification == SCAN_NOT_SAVED
    assert result.scan.qr_data == "hello"
    assert capture.scan_count == 1

    # Scanning continues after the failure.
    assert capture.handle_decoded("again").notification == SCAN_NOT_SAVED
    assert capture.scan_count == 2


def test_empty_payload_is_ignored(database):
    capture = ScanCapture(database, clock=_clock)
    result = capture.handle_decoded("")
    assert result.scan is None
    assert result.notification == SCAN_INVALID
    assert capture.scan_count == 0
    assert _stored(database) == []


def test_non_finite_location_is_dropped(database):
    def bad_fix():
        return GeoPoint(latitude=float("nan"), longitude=1.0)

    with pytest.raises(ValidationError):
        bad_fix()

    result = ScanCapture(database, location_provider=bad_fix, clock=_clock).handle_decoded("hello")
    assert result.saved
    scan = _stored(database)[0]
    assert (scan.latitude, scan.longitude) == (None, None)
