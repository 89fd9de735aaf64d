"""
SQLAlchemy engine singleton with production-ready connection pooling.

PostgreSQL deployments get a sized QueuePool. SQLite URLs (local runs and the
test suite) share one connection through StaticPool so an in-memory database
survives across transactions.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from front_desk.config import DATABASE_URL


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine with pool settings suited to the database backend.

    Args:
        url: SQLAlchemy database URL
        echo: Log emitted SQL (development only)

    Returns:
        Configured Engine

    Example:
        >>> test_engine = make_engine("sqlite+pysqlite:///:memory:")
        >>> test_engine.dialect.name
        'sqlite'
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )

    return create_engine(
        url,
        future=True,
        pool_size=10,  # Number of connections to maintain in the pool
        max_overflow=20,  # Additional connections when pool is exhausted
        pool_pre_ping=True,  # Detect stale connections before use
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=echo,
    )


if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = make_engine(DATABASE_URL)


def check_engine_health(target: Engine | None = None) -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint to verify database connectivity before allowing
    traffic to the service.

    Args:
        target: Engine to probe, defaults to the application engine

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with (target or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
