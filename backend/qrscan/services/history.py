from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo
from typing import Optional

_URL_PATTERN = re.compile(r"^(https?://)|(www\.)", re.IGNORECASE)

LOCATION_UNAVAILABLE = "Location unavailable"


def is_url(text: str) -> bool:
    return bool(_URL_PATTERN.search(text or ""))


def format_timestamp(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Render an epoch-millis capture time as ``DD/MM/YYYY HH:MM``.

    Uses UTC unless a timezone is given.
    """
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz or timezone.utc)
    return moment.strftime("%d/%m/%Y %H:%M")


def format_location(latitude: Optional[float], longitude: Optional[float]) -> str:
    if latitude is None or longitude is None:
        return LOCATION_UNAVAILABLE
    return f"{latitude:.4f}, {longitude:.4f}"


def share_message(qr_data: str) -> str:
    return f"Scanned QR code: {qr_data}"
