from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from qrscan.services.history import (
    LOCATION_UNAVAILABLE,
    format_location,
    format_timestamp,
    is_url,
    share_message,
)


def test_format_timestamp_utc():
    assert format_timestamp(1700000000000) == "14/11/2023 22:13"


def test_format_timestamp_with_zone():
    madrid_winter = timezone(timedelta(hours=1))
    assert format_timestamp(1700000000000, tz=madrid_winter) == "14/11/2023 23:13"


@pytest.mark.parametrize(
    "lat, lng, expected",
    [
        (40.4168, -3.7038, "40.4168, -3.7038"),
        (0.0, 0.0, "0.0000, 0.0000"),
        (None, None, LOCATION_UNAVAILABLE),
        (12.5, None, LOCATION_UNAVAILABLE),
    ],
)
def test_format_location(lat, lng, expected):
    assert format_location(lat, lng) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("https://example.com", True),
        ("HTTP://EXAMPLE.COM", True),
        ("www.example.com", True),
        ("visit www.example.com", True),
        ("ftp://example.com", False),
        ("just some text", False),
        ("", False),
    ],
)
def test_is_url(text, expected):
    assert is_url(text) is expected


def test_share_message():
    assert share_message("abc") == "Scanned QR code: abc"
