"""Per-invocation database connection management.

Each request opens its own connection, makes sure the ``users`` table
exists, seeds the demo rows into an empty table and hands back a
SQLAlchemy session bound to that single connection. The caller must
release the session on every exit path; ``connection()`` does that.

No pooling is used: the engine is created with NullPool and disposed
on release.

SECURITY NOTES:
- ``sslmode=require`` encrypts the transport but does not verify the
  server certificate (no CA bundle is shipped with the function)
- Credentials are never logged
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any
from typing import Callable
from typing import Iterator
from typing import Optional
from urllib.parse import quote_plus

from sqlalchemy import create_engine
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.engine import Connection
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from app.config import Settings
from app.db.base import Base
from app.db.models import User
from app.exceptions import DatabaseConnectionError
from app.services.secrets import CredentialResolver
from app.services.secrets import DbCredentials
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_USERS: tuple[dict[str, str], ...] = (
    {
        "cognito_sub": "demo-sub-1",
        "username": "Alice",
        "email": "alice@example.com",
        "role": "admin",
        "phone_number": "1234567890",
    },
    {
        "cognito_sub": "demo-sub-2",
        "username": "Bob",
        "email": "bob@example.com",
        "role": "user",
        "phone_number": "0987654321",
    },
)


def build_database_url(credentials: DbCredentials) -> str:
    """Build a psycopg SQLAlchemy URL from resolved credentials."""
    return (
        "postgresql+psycopg://"
        f"{quote_plus(credentials.username)}:{quote_plus(credentials.password)}"
        f"@{credentials.host}:{credentials.port}/{credentials.dbname}"
    )


def _get_connect_args(database_url: str, timeout: int) -> dict[str, Any]:
    """Return driver connection arguments for the URL's dialect."""
    if database_url.startswith("postgresql"):
        return {"connect_timeout": timeout, "sslmode": "require"}
    if database_url.startswith("sqlite"):
        return {"timeout": timeout}
    return {}


def _insert_ignoring_conflicts(dialect_name: str) -> Callable[..., Any]:
    """Return the dialect's ``insert`` construct supporting ON CONFLICT."""
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise DatabaseConnectionError(f"Unsupported database dialect: {dialect_name}")
    return insert


def ensure_schema(connection: Connection) -> None:
    """Create the users table if it does not exist."""
    Base.metadata.create_all(connection, tables=[User.__table__], checkfirst=True)


def seed_demo_users(connection: Connection) -> int:
    """Insert the demo rows when the users table is empty.

    Conflicting rows are skipped, so two cold starts racing on an empty
    table cannot insert duplicates.

    Returns:
        Number of rows inserted.
    """
    count = connection.execute(select(func.count()).select_from(User)).scalar() or 0
    if count:
        return 0

    insert = _insert_ignoring_conflicts(connection.dialect.name)
    statement = insert(User).values(list(DEMO_USERS)).on_conflict_do_nothing()
    result = connection.execute(statement)
    inserted = max(result.rowcount or 0, 0)
    logger.info(f"Inserted {inserted} demo users")
    return inserted


def _discard(engine: Optional[Engine], connection: Optional[Connection]) -> None:
    if connection is not None:
        connection.close()
    if engine is not None:
        engine.dispose()


class ConnectionManager:
    """Open, prepare and release one database connection per request."""

    def __init__(
        self,
        settings: Settings,
        resolver: Optional[CredentialResolver] = None,
    ):
        self._settings = settings
        self._resolver = resolver or CredentialResolver(settings)

    def _database_url(self) -> str:
        if self._settings.database_url:
            return self._settings.database_url
        self._settings.validate()
        return build_database_url(self._resolver.resolve())

    def _create_engine(self, database_url: str) -> Engine:
        return create_engine(
            database_url,
            poolclass=NullPool,
            connect_args=_get_connect_args(
                database_url, self._settings.connect_timeout
            ),
        )

    def acquire(self) -> Session:
        """Open a connection and return a session bound to it.

        Raises:
            ConfigurationError: If required settings are missing.
            DatabaseConnectionError: If credentials cannot be fetched or the
                connection or schema setup fails.
        """
        database_url = self._database_url()
        engine: Optional[Engine] = None
        connection: Optional[Connection] = None
        try:
            engine = self._create_engine(database_url)
            connection = engine.connect()
            with connection.begin():
                ensure_schema(connection)
                seed_demo_users(connection)
        except SQLAlchemyError as exc:
            logger.error(f"Database connection failed: {type(exc).__name__}")
            _discard(engine, connection)
            raise DatabaseConnectionError(
                "Database connection failed", detail=str(exc)
            ) from exc
        except Exception:
            _discard(engine, connection)
            raise

        logger.debug("Database connection opened")
        return Session(bind=connection, expire_on_commit=False)

    def release(self, session: Session) -> None:
        """Close the session, its connection and its engine."""
        bind = session.bind
        session.close()
        if isinstance(bind, Connection):
            engine = bind.engine
            bind.close()
            engine.dispose()
        logger.debug("Database connection closed")

    @contextmanager
    def connection(self) -> Iterator[Session]:
        """Yield a prepared session and always release it."""
        session = self.acquire()
        try:
            yield session
        finally:
            self.release(session)
