from __future__ import annotations

from fastapi import APIRouter

from qrscan.api.endpoints import scans

api_router = APIRouter()

api_router.include_router(scans.router)
