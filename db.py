import logging
from contextlib import contextmanager
from typing import Iterator, Tuple
from urllib.parse import urlsplit, parse_qs, urlunsplit

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from schema import Base

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> Tuple[str, dict]:
    """Return (url, connect_args) ready for ``create_engine``.

    Generic ``mysql://`` URLs are pointed at the pymysql driver, which is
    pure-Python; otherwise SQLAlchemy tries to import MySQLdb.

    Some provider URLs (e.g. Aiven) append query parameters like
    ``ssl-mode=REQUIRED``. SQLAlchemy would pass these as keyword args to the
    DBAPI connect function, which fails since ``ssl-mode`` is not a valid
    Python identifier. The query string is stripped and known params are
    translated into connect_args.
    """
    connect_args = {}
    if url.startswith("mysql://"):
        url = url.replace("mysql://", "mysql+pymysql://", 1)

    if url.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool
        connect_args["check_same_thread"] = False
        return url, connect_args

    parts = urlsplit(url)
    if parts.query:
        qs = parse_qs(parts.query)
        ssl_mode = qs.get("ssl-mode") or qs.get("ssl_mode")
        if ssl_mode:
            # an empty dict asks pymysql for TLS; pass {'ca': ...} if the
            # provider needs a CA file
            connect_args["ssl"] = {}
        url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))
    return url, connect_args


class Database:
    """Storage client owning one engine and its session factory."""

    def __init__(self, url: str):
        self.url, connect_args = normalize_database_url(url)
        engine_kwargs = {"pool_pre_ping": True, "connect_args": connect_args}
        if self.url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, or every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(self.url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        """Create tables if missing."""
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Unit of work: commit on success, roll back everything on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            logger.warning("Rolling back transaction")
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
