"""
Database configuration and connection management.

This module provides:
- An explicit `Database` handle (engine + session factory) with open/close lifecycle
- Connection pooling with sane defaults
- FastAPI dependency that hands the app's handle to route functions
- SQLAlchemy Core table definitions
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import (
    create_engine,
    MetaData,
    Table,
    Column,
    Integer,
    Numeric,
    String,
    DateTime,
    Boolean,
    JSON,
    Text,
    Index,
    ForeignKey,
    UniqueConstraint,
    false,
    text,
    true,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger("creatorhub")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:", "sqlite+pysqlite://", "sqlite+pysqlite:///:memory:")


class Database:
    """
    Explicitly constructed database handle.

    The application opens it at startup and closes it at shutdown; route
    functions receive it through `get_database` instead of importing a
    process-wide client.

    Usage:
        db = Database("postgresql://...")
        db.open()
        with db.session() as session:
            session.execute(...)
        db.close()
    """

    def __init__(self, url: str, *, echo: bool = False):
        if not url:
            raise ValueError(
                "DATABASE_URL is not configured. "
                "Set DATABASE_URL in environment or .env file."
            )
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "Database":
        """Create the engine and session factory (idempotent)."""
        if self._engine is not None:
            return self

        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if _is_memory_sqlite(self.url):
                # One shared connection, otherwise every checkout sees an empty DB
                kwargs["poolclass"] = StaticPool
            self._engine = create_engine(self.url, echo=self.echo, **kwargs)
        else:
            self._engine = create_engine(
                self.url,
                poolclass=QueuePool,
                pool_size=POOL_SIZE,
                max_overflow=MAX_OVERFLOW,
                pool_timeout=POOL_TIMEOUT,
                pool_recycle=POOL_RECYCLE,
                pool_pre_ping=True,
                echo=self.echo,
            )

        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self._engine,
        )
        logger.info("database.open", extra={"event_type": "database.open"})
        return self

    def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("database.close", extra={"event_type": "database.close"})

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._engine

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Transactional session scope.

        Commits on success, rolls back and re-raises on error.
        """
        if self._session_factory is None:
            raise RuntimeError("Database is not open. Call open() first.")
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """
        Create all tables defined in metadata.

        This is idempotent - tables that already exist will not be recreated.
        """
        metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        """
        Drop all tables defined in metadata.

        WARNING: This is destructive! Only use in tests or development.
        """
        metadata.drop_all(bind=self.engine)

    def check_connection(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database connection check failed: {e}")
            return False


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the app-scoped Database handle."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("No Database attached to app.state.db")
    return db


# Users table
users = Table(
    'users',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('email', String(320), nullable=False, unique=True),
    Column('password_hash', Text, nullable=True),
    Column('display_name', Text, nullable=True),
    Column('role', String(20), nullable=False, server_default='SUBSCRIBER'),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    Index('idx_users_role', 'role'),
)

# Subscription plans owned by creators
subscription_plans = Table(
    'subscription_plans',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('creator_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('name', String(200), nullable=False),
    Column('price', Numeric(10, 2, asdecimal=False), nullable=False),
    Column('description', Text, nullable=True),
    Column('features', JSON, nullable=False),
    Column('interval_in_days', Integer, nullable=False),
    Column('is_active', Boolean, nullable=False, server_default=true()),
    # Six capability flags: regularContent, premiumVideos, vrContent, ...
    Column('content_access', JSON, nullable=False),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    # Composite index for list_plans pattern: (creator_id, created_at)
    Index('idx_subscription_plans_creator_created', 'creator_id', 'created_at'),
)

# Subscriptions (subscriber -> plan)
subscriptions = Table(
    'subscriptions',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('subscriber_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    # SET NULL keeps cancelled history when a plan is deleted
    Column('plan_id', String(36), ForeignKey('subscription_plans.id', ondelete='SET NULL'), nullable=True),
    Column('creator_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('status', String(20), nullable=False),  # ACTIVE, CANCELLED, EXPIRED
    Column('start_date', DateTime(timezone=True), nullable=False),
    Column('end_date', DateTime(timezone=True), nullable=True),
    Column('cancelled_at', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), nullable=False),
    # Delete guard and access checks filter on (plan_id, status)
    Index('idx_subscriptions_plan_status', 'plan_id', 'status'),
    Index('idx_subscriptions_subscriber_creator_status', 'subscriber_id', 'creator_id', 'status'),
)

# Content items (posts, videos, VR scenes, ...)
content_items = Table(
    'content_items',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('creator_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('title', String(300), nullable=False),
    Column('description', Text, nullable=True),
    Column('content_type', String(30), nullable=False),
    Column('is_premium', Boolean, nullable=False, server_default=false()),
    Column('price', Numeric(10, 2, asdecimal=False), nullable=True),
    Column('media_url', Text, nullable=False),
    Column('thumbnail_url', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Index('idx_content_items_creator_created', 'creator_id', 'created_at'),
)

# Plans permitted to unlock a content item (empty = any plan of the creator)
content_item_plans = Table(
    'content_item_plans',
    metadata,
    Column('content_id', String(36), ForeignKey('content_items.id', ondelete='CASCADE'), primary_key=True),
    Column('plan_id', String(36), ForeignKey('subscription_plans.id', ondelete='CASCADE'), primary_key=True),
)

# One-off purchases of individual items
content_purchases = Table(
    'content_purchases',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('content_id', String(36), ForeignKey('content_items.id', ondelete='CASCADE'), nullable=False),
    Column('buyer_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('amount', Numeric(10, 2, asdecimal=False), nullable=False),
    Column('status', String(20), nullable=False),  # COMPLETED, REFUNDED
    Column('created_at', DateTime(timezone=True), nullable=False),
    UniqueConstraint('content_id', 'buyer_id', name='uq_content_purchases_content_buyer'),
    Index('idx_content_purchases_buyer', 'buyer_id'),
)
