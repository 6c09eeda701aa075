"""
Survey Backend — Persistence Gateway
=====================================

What:  The declarative Base, the `Database` lifecycle object that owns the
       async engine, and the `PersistenceGateway` that exposes the record
       operations used by the services.
Why:   One place owns the connection pool; everything else receives the
       gateway explicitly (FastAPI dependency or function argument).
How:   Async SQLAlchemy 2.0. Each gateway operation opens its own session
       and transaction; driver errors are translated into PersistenceError,
       unique-constraint violations into DuplicateKeyError.
Who:   The lifespan in main.py creates one Database per process; routes get
       the gateway through `get_gateway`.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and only
    apply to server databases. SQLite (tests, local runs) uses SQLAlchemy's
    default pool for the aiosqlite dialect.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Type, TypeVar

from fastapi import Request
from sqlalchemy import UniqueConstraint, delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings
from app.exceptions import DuplicateKeyError, FatalStartupError, PersistenceError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on this metadata; `Database.connect()`
    creates missing tables from it.
    """
    pass


ModelT = TypeVar("ModelT", bound=Base)


# ══════════════════════════════════════════════════════════════════════════
# Connection Lifecycle
# ══════════════════════════════════════════════════════════════════════════

class Database:
    """
    Owns the async engine and session factory for one process.

    Lifecycle:
        connect()    → create engine, create missing tables, verify connectivity
        disconnect() → dispose the pool (called on shutdown)
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        self._engine_options: Dict[str, Any] = {"echo": echo}
        if not url.startswith("sqlite"):
            self._engine_options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a Database from settings; missing DATABASE_URL is fatal."""
        if not settings.database_url:
            raise FatalStartupError("DATABASE_URL no está configurada")
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise PersistenceError("La conexión a la base de datos no está abierta")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise PersistenceError("La conexión a la base de datos no está abierta")
        return self._session_factory

    async def connect(self) -> None:
        """
        Open the pool and make sure the tables exist.

        Raises:
            FatalStartupError: the store is unreachable or rejected the schema.
        """
        # Models must be imported so their tables are registered on Base.metadata
        from app.models import admin_user, survey  # noqa: F401

        engine = create_async_engine(self.url, **self._engine_options)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            raise FatalStartupError(
                f"No se pudo conectar a la base de datos: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        self._engine = engine
        # expire_on_commit=False: records stay readable after their session closes
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("Connected to database (dialect=%s)", engine.dialect.name)

    async def disconnect(self) -> None:
        """Dispose every pooled connection. Safe to call when never connected."""
        if self._engine is None:
            return
        engine, self._engine, self._session_factory = self._engine, None, None
        await engine.dispose()
        logger.info("Database connection closed")


# ══════════════════════════════════════════════════════════════════════════
# Record Operations
# ══════════════════════════════════════════════════════════════════════════

def _coerce_id(value: Any) -> Optional[uuid.UUID]:
    """Parse an identifier; malformed ids behave like missing records."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _duplicate_field(model: Type[Base], error: IntegrityError) -> Optional[str]:
    """
    Find which unique column an IntegrityError refers to.

    SQLite reports "UNIQUE constraint failed: users.usuario"; PostgreSQL
    reports the constraint name and "Key (usuario)=(...)". Both are matched.
    """
    table = model.__table__
    message = str(error.orig)
    for constraint in table.constraints:
        if not isinstance(constraint, UniqueConstraint):
            continue
        for column in constraint.columns:
            patterns = (f"{table.name}.{column.name}", f"({column.name})")
            if constraint.name:
                patterns += (str(constraint.name),)
            if any(pattern in message for pattern in patterns):
                return column.name
    return None


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class PersistenceGateway:
    """
    Record operations over the two collections (survey responses, admins).

    Every method is one transaction. Callers pass the model class as the
    collection and SQLAlchemy expressions as filters, e.g.:

        await gateway.count(SurveyResponse, SurveyResponse.created_at >= cutoff)
        await gateway.find_one(AdminUser, AdminUser.usuario == "admin")
    """

    def __init__(self, database: Database):
        self._database = database

    @asynccontextmanager
    async def _transaction(
        self, model: Type[Base], operation: str
    ) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self._database.session_factory() as session:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            if _is_unique_violation(e):
                field = _duplicate_field(model, e)
                logger.info("Duplicate key on %s.%s", model.__tablename__, field)
                raise DuplicateKeyError(field=field, table=model.__tablename__) from e
            logger.error("Integrity error during %s on %s: %s", operation, model.__tablename__, e)
            raise PersistenceError(
                context={"operation": operation, "error_type": type(e).__name__}
            ) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error during %s on %s: %s", operation, model.__tablename__, e)
            raise PersistenceError(
                context={"operation": operation, "error_type": type(e).__name__}
            ) from e

    async def create(self, model: Type[ModelT], values: Dict[str, Any]) -> uuid.UUID:
        """Insert one record and return its generated id."""
        record = model(**values)
        async with self._transaction(model, "create") as session:
            session.add(record)
            await session.flush()
        return record.id

    async def find_all(self, model: Type[ModelT], *order_by: Any) -> List[ModelT]:
        async with self._transaction(model, "find_all") as session:
            result = await session.execute(select(model).order_by(*order_by))
            return list(result.scalars().all())

    async def find_by_id(self, model: Type[ModelT], record_id: Any) -> Optional[ModelT]:
        key = _coerce_id(record_id)
        if key is None:
            return None
        async with self._transaction(model, "find_by_id") as session:
            return await session.get(model, key)

    async def delete_by_id(self, model: Type[ModelT], record_id: Any) -> bool:
        """Delete one record. Returns False when nothing matched."""
        key = _coerce_id(record_id)
        if key is None:
            return False
        async with self._transaction(model, "delete_by_id") as session:
            result = await session.execute(delete(model).where(model.id == key))
            return result.rowcount > 0

    async def delete_all(self, model: Type[ModelT]) -> int:
        """Delete every record of a collection and return how many were removed."""
        async with self._transaction(model, "delete_all") as session:
            result = await session.execute(delete(model))
            return result.rowcount or 0

    async def count(self, model: Type[ModelT], *criteria: Any) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        async with self._transaction(model, "count") as session:
            result = await session.execute(query)
            return result.scalar_one()

    async def find_one(self, model: Type[ModelT], *criteria: Any) -> Optional[ModelT]:
        async with self._transaction(model, "find_one") as session:
            result = await session.execute(select(model).where(*criteria).limit(1))
            return result.scalars().first()

    async def ping(self) -> bool:
        """Lightweight connectivity probe (SELECT 1) for the health check."""
        if not self._database.is_connected:
            return False
        try:
            async with self._database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Health check: database unreachable: %s", e)
            return False


# ── Dependency ────────────────────────────────────────────────────────────
def get_gateway(request: Request) -> PersistenceGateway:
    """
    FastAPI dependency providing the process-wide gateway.

    Example usage in a route:
        @router.get("/respuestas")
        async def list_surveys(gateway: PersistenceGateway = Depends(get_gateway)):
            ...
    """
    return request.app.state.gateway
