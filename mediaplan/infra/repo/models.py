"""SQLAlchemy models for the catalog (platforms, assets)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    MetaData,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class PlatformORM(Base):
    """Modèle ORM pour les plateformes (lecture seule pour le cœur)."""

    __tablename__ = "platforms"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    industry = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    audience_data = Column(JSON, nullable=True)
    device_split = Column(JSON, nullable=True)
    campaign_data = Column(JSON, nullable=True)
    embedding = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AssetORM(Base):
    """Modèle ORM pour les assets; `embedding` est un tableau de flottants nullable."""

    __tablename__ = "assets"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    type = Column(String(128), nullable=True)
    category = Column(String(128), nullable=True)
    placement = Column(String(255), nullable=True)
    tags = Column(JSON, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    file_url = Column(Text, nullable=True)
    platform_id = Column(String(64), ForeignKey("platforms.id"), nullable=True, index=True)
    embedding = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    platform = relationship(PlatformORM, lazy="joined")
