from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


async def insert_ignore(db: AsyncSession, model, **values) -> None:
    """
    ``INSERT ... ON CONFLICT DO NOTHING`` for composite-key join rows, so
    concurrent duplicates are absorbed by the store instead of raising.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values).on_conflict_do_nothing()
    else:  # pragma: no cover
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}")
    await db.execute(stmt)


def integrity_detail(exc: IntegrityError) -> str:
    """Lower-cased driver message, which names the violated constraint or column."""
    return str(exc.orig).lower()
