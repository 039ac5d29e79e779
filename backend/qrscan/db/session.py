from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from qrscan.core.exceptions import StorageError
from qrscan.db.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Storage client for the scan history database.

    Owns the engine and session factory for one database URL. The schema is
    created lazily the first time a session is opened, so callers never have
    to remember to call :meth:`init` themselves.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            # Import models so their tables are registered on Base.metadata.
            import qrscan.models  # noqa: F401

            Base.metadata.create_all(bind=self.engine)
            self._initialized = True
            logger.info("Database ready at %s", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session, rolling back on error and always closing it."""
        self.init()
        db = self._session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


_ACTIONS = {"GET": "fetch", "POST": "save", "PUT": "update", "DELETE": "delete"}


def get_db(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.database
    try:
        database.init()
    except SQLAlchemyError as e:
        logger.exception("Error initializing database")
        raise StorageError(_ACTIONS.get(request.method, "access"), str(e)) from e
    with database.session() as db:
        yield db
