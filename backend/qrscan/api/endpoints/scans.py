from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qrscan.core.exceptions import InvalidScanIdError, ScanNotFoundError, StorageError
from qrscan.crud.scan import create_scan, delete_scan, get_scan_by_id, list_scans, update_scan
from qrscan.db.session import get_db
from qrscan.schemas.scan import (
    SQLITE_INT_MAX,
    SQLITE_INT_MIN,
    ErrorResponse,
    ScanCreate,
    ScanCreatedResponse,
    ScanDeletedResponse,
    ScanDetailResponse,
    ScanListResponse,
    ScanOut,
    ScanUpdate,
    ScanUpdatedResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scans", tags=["scans"])

_SCAN_ID_RE = re.compile(r"-?[0-9]+")

_ID_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _parse_scan_id(scan_id: str) -> int:
    value = scan_id.strip()
    if not _SCAN_ID_RE.fullmatch(value):
        raise InvalidScanIdError()
    scan_pk = int(value)
    # No row can carry an id outside the storage integer range.
    if not SQLITE_INT_MIN <= scan_pk <= SQLITE_INT_MAX:
        raise ScanNotFoundError()
    return scan_pk


@router.get("", response_model=ScanListResponse, responses={500: {"model": ErrorResponse}})
def read_scans(db: Session = Depends(get_db)) -> ScanListResponse:
    try:
        scans = list_scans(db)
    except SQLAlchemyError as e:
        logger.exception("Error fetching scans")
        raise StorageError("fetch", str(e)) from e
    return ScanListResponse(scans=[ScanOut.model_validate(s) for s in scans])


@router.post(
    "",
    response_model=ScanCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_new_scan(scan_in: ScanCreate, db: Session = Depends(get_db)) -> ScanCreatedResponse:
    try:
        scan = create_scan(db, **scan_in.model_dump())
    except SQLAlchemyError as e:
        logger.exception("Error saving scan")
        raise StorageError("save", str(e)) from e
    logger.info("Saved scan %s", scan.id)
    return ScanCreatedResponse(id=scan.id, scan=ScanOut.model_validate(scan))


@router.get("/{scan_id}", response_model=ScanDetailResponse, responses=_ID_RESPONSES)
def read_scan(scan_id: str, db: Session = Depends(get_db)) -> ScanDetailResponse:
    scan_pk = _parse_scan_id(scan_id)
    try:
        scan = get_scan_by_id(db, scan_id=scan_pk)
    except SQLAlchemyError as e:
        logger.exception("Error fetching scan %s", scan_pk)
        raise StorageError("fetch", str(e)) from e
    if scan is None:
        raise ScanNotFoundError()
    return ScanDetailResponse(scan=ScanOut.model_validate(scan))


@router.delete("/{scan_id}", response_model=ScanDeletedResponse, responses=_ID_RESPONSES)
def remove_scan(scan_id: str, db: Session = Depends(get_db)) -> ScanDeletedResponse:
    scan_pk = _parse_scan_id(scan_id)
    try:
        changes = delete_scan(db, scan_id=scan_pk)
    except SQLAlchemyError as e:
        logger.exception("Error deleting scan %s", scan_pk)
        raise StorageError("delete", str(e)) from e
    if changes == 0:
        raise ScanNotFoundError()
    logger.info("Deleted scan %s", scan_pk)
    return ScanDeletedResponse(deleted_id=scan_pk, changes=changes)


@router.put("/{scan_id}", response_model=ScanUpdatedResponse, responses=_ID_RESPONSES)
def modify_scan(scan_id: str, scan_in: ScanUpdate, db: Session = Depends(get_db)) -> ScanUpdatedResponse:
    scan_pk = _parse_scan_id(scan_id)
    try:
        scan, changes = update_scan(db, scan_id=scan_pk, fields=scan_in.changed_fields())
    except SQLAlchemyError as e:
        logger.exception("Error updating scan %s", scan_pk)
        raise StorageError("update", str(e)) from e
    return ScanUpdatedResponse(scan=ScanOut.model_validate(scan), changes=changes)
