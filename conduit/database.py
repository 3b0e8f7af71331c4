from typing import Awaitable, Callable

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from conduit.config import settings
from conduit.middleware import install_query_counter


def enable_sqlite_foreign_keys(engine) -> None:
    """
    SQLite ships with foreign-key enforcement off; turn it on for every new
    connection so ``ON DELETE CASCADE`` behaves as it does on PostgreSQL.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

enable_sqlite_foreign_keys(engine)
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


AFTER_COMMIT_KEY = "after_commit"


def call_after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """
    Queue *callback* to run once the request transaction has committed.

    Used for side effects outside the database (cache invalidation) that
    must not become visible before the rows they describe.  Callbacks are
    discarded when the transaction rolls back.
    """
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(callback)


async def commit(session: AsyncSession) -> None:
    """Commit *session*, then run the callbacks queued by ``call_after_commit``."""
    await session.commit()
    for callback in session.info.pop(AFTER_COMMIT_KEY, []):
        await callback()


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            session.info.pop(AFTER_COMMIT_KEY, None)
            await session.rollback()
            raise
