from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Tag
from conduit.repositories.common import insert_ignore


def normalize_tag_names(tag_names: list[str]) -> list[str]:
    """Strip whitespace, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for name in tag_names:
        name = name.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


async def _tags_by_name(db: AsyncSession, names: list[str]) -> dict[str, Tag]:
    result = await db.execute(select(Tag).where(Tag.name.in_(names)))
    return {tag.name: tag for tag in result.scalars().all()}


async def get_or_create_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """
    Return Tag rows for each name in *tag_names*, creating any that do not
    yet exist.  Creation is conflict-tolerant so two requests introducing
    the same tag at once both succeed.
    """
    names = normalize_tag_names(tag_names)
    if not names:
        return []
    existing = await _tags_by_name(db, names)
    missing = [name for name in names if name not in existing]
    if missing:
        for name in missing:
            await insert_ignore(db, Tag, name=name)
        existing = await _tags_by_name(db, names)
    return [existing[name] for name in names]


async def list_tag_names(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Tag.name).order_by(Tag.name))
    return list(result.scalars().all())
