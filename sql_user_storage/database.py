"""Open and release the single connection a provider owns."""
import logging

from sqlalchemy import URL, Connection, create_engine, make_url
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

JDBC_PREFIX = "jdbc:"


def build_url(url: str, username: str, password: str) -> URL:
    """Build a SQLAlchemy URL from the configured connection settings.

    A leading ``jdbc:`` prefix is dropped. The configured username and password
    replace any credentials in the URL, except for SQLite which takes none.

    Args:
        url (str): Connection URL.
        username (str): Connection username.
        password (str): Connection password.

    Returns:
        URL: URL to create the engine with.

    """
    parsed = make_url(url.strip().removeprefix(JDBC_PREFIX))
    if parsed.get_backend_name() == "sqlite":
        return parsed
    return parsed.set(username=username, password=password)


def open_connection(url: str, username: str, password: str) -> Connection:
    """Open a new, unpooled connection.

    Raises:
        Exception: Whatever the driver raises when the database cannot be reached.

    """
    engine = create_engine(build_url(url, username, password), poolclass=NullPool)
    try:
        connection = engine.connect()
    except Exception:
        engine.dispose()
        raise
    logger.debug(f"Connection succeeded: url={engine.url!r}")
    return connection


def close_connection(connection: Connection) -> None:
    """Close a connection opened by open_connection and dispose of its engine."""
    engine = connection.engine
    try:
        connection.close()
    finally:
        engine.dispose()
