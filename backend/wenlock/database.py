from typing import Annotated, AsyncIterator

from fastapi import Path, Request
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from wenlock.config import get_settings

Base = declarative_base()

# Largest value a 32-bit INTEGER primary key can hold.
MAX_ROW_ID = 2**31 - 1

# Primary-key path parameter, bounded to what the column can store.
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def make_engine(database_url: str, **kwargs):
    return create_async_engine(database_url, pool_pre_ping=True, **kwargs)


def make_session_factory(bind) -> async_sessionmaker[AsyncSession]:
    # Services commit before auditing and broadcasting, so loaded rows must stay readable.
    return async_sessionmaker(bind, expire_on_commit=False, autoflush=False)


engine = make_engine(get_settings().database_url)
async_session = make_session_factory(engine)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Per-request session from the application's session factory."""
    session_factory = getattr(request.app.state, "session_factory", async_session)
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def upsert(db: AsyncSession, model):
    """Dialect-specific INSERT supporting ON CONFLICT for the session's database."""
    dialect = db.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Atomic upsert is not supported on {dialect}")
