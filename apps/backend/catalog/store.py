"""Local store: filtered queries and keyed upserts over the platform/modpack tables."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select

from catalog.models import SortKey, StoredModpackRecord
from exceptions import StorageUnavailableError
from models import Modpack, Platform, utcnow

SORT_COLUMNS = {
    SortKey.DOWNLOADS: Modpack.download_count,
    SortKey.FOLLOWS: Modpack.follow_count,
    SortKey.UPDATED: Modpack.last_updated,
    SortKey.CREATED: Modpack.created_at,
}

MODPACK_KEY = ("platform_id", "external_id")

RECENT_MODPACKS_LIMIT = 5


def _insert_for(session):
    """Dialect-specific INSERT supporting ON CONFLICT DO UPDATE."""
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise StorageUnavailableError(f"Unsupported database dialect for upserts: {dialect}")


def _record(modpack: Modpack, platform_name: Optional[str]) -> StoredModpackRecord:
    return StoredModpackRecord(
        external_id=modpack.external_id,
        name=modpack.name,
        slug=modpack.slug,
        description=modpack.description,
        author=modpack.author,
        icon_url=modpack.icon_url,
        download_count=modpack.download_count,
        follow_count=modpack.follow_count,
        minecraft_version=modpack.minecraft_version,
        mod_loader=modpack.mod_loader,
        version=modpack.version,
        categories=list(modpack.categories or []),
        last_updated=modpack.last_updated,
        updated_at=modpack.updated_at,
        platform_name=platform_name,
    )


class CatalogStore:
    """Durable store for reconciled modpacks. Every mutation is a single-row upsert."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    def _conditions(self, filters: Mapping[str, Any]) -> List[Any]:
        conditions = []
        text = str(filters.get("query") or "").strip()
        if text:
            conditions.append(
                or_(
                    Modpack.name.icontains(text, autoescape=True),
                    Modpack.description.icontains(text, autoescape=True),
                    Modpack.author.icontains(text, autoescape=True),
                )
            )
        mod_loader = filters.get("mod_loader")
        if mod_loader:
            conditions.append(func.lower(Modpack.mod_loader) == str(mod_loader).lower())
        minecraft_version = filters.get("minecraft_version")
        if minecraft_version:
            conditions.append(Modpack.minecraft_version.contains(str(minecraft_version), autoescape=True))
        return conditions

    async def query(
        self,
        filters: Mapping[str, Any],
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> Tuple[List[StoredModpackRecord], int]:
        """Filtered, sorted window of stored modpacks plus the unwindowed total."""
        conditions = self._conditions(filters)
        sort_column = SORT_COLUMNS[SortKey(sort)]

        statement = (
            select(Modpack, Platform.name)
            .join(Platform, Modpack.platform_id == Platform.id)
            .where(*conditions)
            .order_by(sort_column.desc().nulls_last(), Modpack.id)
            .offset(offset)
            .limit(limit)
        )
        count_statement = select(func.count()).select_from(Modpack).where(*conditions)

        try:
            async with self.session_factory() as session:
                rows = (await session.exec(statement)).all()
                total = (await session.exec(count_statement)).one()
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError("Failed to query modpacks", cause=e) from e

        return [_record(modpack, platform_name) for modpack, platform_name in rows], int(total)

    async def upsert_platform(self, name: str, fields: Mapping[str, Any]) -> Platform:
        """Create the platform named `name` or refresh its fields and updated_at."""
        now = utcnow()
        values: Dict[str, Any] = {**fields, "updated_at": now}

        try:
            async with self.session_factory() as session:
                insert = _insert_for(session)
                statement = insert(Platform).values(name=name, created_at=now, **values)
                statement = statement.on_conflict_do_update(index_elements=["name"], set_=values)
                await session.execute(statement)
                await session.commit()

                result = await session.exec(select(Platform).where(Platform.name == name))
                return result.one()
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(
                f"Failed to upsert platform {name}", detail={"platform": name}, cause=e
            ) from e

    async def upsert_modpack(
        self, platform_id: int, external_id: str, fields: Mapping[str, Any]
    ) -> Modpack:
        """Insert or update the modpack keyed by (platform_id, external_id); commits on its own."""
        now = utcnow()
        values: Dict[str, Any] = {**fields, "updated_at": now}

        try:
            async with self.session_factory() as session:
                insert = _insert_for(session)
                statement = insert(Modpack).values(
                    platform_id=platform_id, external_id=external_id, created_at=now, **values
                )
                statement = statement.on_conflict_do_update(index_elements=list(MODPACK_KEY), set_=values)
                await session.execute(statement)
                await session.commit()

                result = await session.exec(
                    select(Modpack).where(
                        Modpack.platform_id == platform_id,
                        Modpack.external_id == external_id,
                    )
                )
                return result.one()
        except (SQLAlchemyError, OSError) as e:
            reason = getattr(e, "orig", None) or e
            raise StorageUnavailableError(
                f"Failed to upsert modpack {external_id}: {reason}",
                detail={"platform_id": platform_id, "external_id": external_id},
                cause=e,
            ) from e

    async def count_modpacks(self, platform_id: Optional[int] = None) -> int:
        statement = select(func.count()).select_from(Modpack)
        if platform_id is not None:
            statement = statement.where(Modpack.platform_id == platform_id)
        try:
            async with self.session_factory() as session:
                return int((await session.exec(statement)).one())
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError("Failed to count modpacks", cause=e) from e

    async def catalog_status(self) -> Dict[str, Any]:
        """Row counts, registered platforms and the most recently created modpacks."""
        try:
            async with self.session_factory() as session:
                platform_count = (await session.exec(select(func.count()).select_from(Platform))).one()
                modpack_count = (await session.exec(select(func.count()).select_from(Modpack))).one()
                platforms = (await session.exec(select(Platform).order_by(Platform.name))).all()
                recent = (
                    await session.exec(
                        select(Modpack, Platform.name)
                        .join(Platform, Modpack.platform_id == Platform.id)
                        .order_by(Modpack.created_at.desc(), Modpack.id.desc())
                        .limit(RECENT_MODPACKS_LIMIT)
                    )
                ).all()
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError("Failed to read catalog status", cause=e) from e

        return {
            "counts": {"platforms": int(platform_count), "modpacks": int(modpack_count)},
            "platforms": [
                {
                    "id": platform.id,
                    "name": platform.name,
                    "base_url": platform.base_url,
                    "updated_at": platform.updated_at.isoformat() if platform.updated_at else None,
                }
                for platform in platforms
            ],
            "recent_modpacks": [
                {
                    "id": modpack.id,
                    "external_id": modpack.external_id,
                    "name": modpack.name,
                    "platform": platform_name,
                    "download_count": modpack.download_count,
                    "created_at": modpack.created_at.isoformat() if modpack.created_at else None,
                }
                for modpack, platform_name in recent
            ],
        }
