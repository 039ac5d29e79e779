from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from qrscan.db.session import Database
from qrscan.main import create_app


@pytest.fixture
def database(tmp_path) -> Iterator[Database]:
    db = Database(f"sqlite:///{tmp_path / 'qr_scanner.db'}")
    yield db
    db.dispose()


@pytest.fixture
def client(database: Database) -> Iterator[TestClient]:
    app = create_app(database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sample_scan() -> dict:
    return {
        "qr_data": "https://example.com",
        "latitude": 40.4168,
        "longitude": -3.7038,
        "timestamp": 1700000000000,
    }
