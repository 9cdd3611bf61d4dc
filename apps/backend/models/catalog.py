"""Catalog models: platforms and the modpacks reconciled from them."""

from typing import List, Optional
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlmodel import Field, SQLModel, Relationship, Column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Platform(SQLModel, table=True):
    """One upstream catalog (Modrinth, CurseForge). Upserted by name."""
    __tablename__ = "platform"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(sa.String, unique=True, nullable=False))
    base_url: str = ""
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(sa.DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(sa.DateTime(timezone=True), nullable=False))

    modpacks: List["Modpack"] = Relationship(back_populates="platform")


class Modpack(SQLModel, table=True):
    """A modpack listing persisted from one platform; unique per (platform_id, external_id)."""
    __tablename__ = "modpack"
    __table_args__ = (
        sa.UniqueConstraint("platform_id", "external_id", name="uq_modpack_platform_external"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    platform_id: int = Field(foreign_key="platform.id", index=True)
    external_id: str = Field(index=True)

    name: str
    slug: Optional[str] = None
    description: str = ""
    author: Optional[str] = Field(default=None, index=True)
    icon_url: Optional[str] = None

    download_count: int = Field(default=0, index=True)
    follow_count: int = 0

    minecraft_version: Optional[str] = None  # latest supported game version
    mod_loader: Optional[str] = None  # Forge, Fabric, Quilt, NeoForge
    version: Optional[str] = None  # upstream's latest modpack version label
    categories: List[str] = Field(default_factory=list, sa_column=Column(sa.JSON, nullable=False, default=list))

    last_updated: Optional[datetime] = Field(default=None, sa_column=Column(sa.DateTime(timezone=True), nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(sa.DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(sa.DateTime(timezone=True), nullable=False))

    platform: Optional[Platform] = Relationship(back_populates="modpacks")
