"""Database engine utilities.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(
    database_url: str,
    pool_size: int = 5,
    max_overflow: int = 20,
    pool_recycle_seconds: int = 600,
) -> Engine:
    """Create the pooled SQLAlchemy engine shared by every invocation path.

    Args:
        database_url: SQLAlchemy database URL.
        pool_size: Persistent pooled connections.
        max_overflow: Extra connections allowed above `pool_size`.
        pool_recycle_seconds: Connection age after which it is replaced on checkout.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or pool bounds are invalid.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")
    if pool_size < 1:
        raise ValueError("pool_size must be >= 1")
    if max_overflow < 0:
        raise ValueError("max_overflow must be >= 0")

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle_seconds,
    )
