"""
Entités du domaine métier.

Ce module définit les modèles de données du catalogue média: plateformes (contexte en lecture
seule) et assets créatifs porteurs d'un vecteur d'embedding.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Platform(BaseModel):
    """Plateforme média; ses attributs imbriqués sont traités de façon opaque."""

    id: str
    name: str
    industry: str | None = None
    description: str | None = None
    audience_data: Any = None
    device_split: Any = None
    campaign_data: Any = None
    embedding: list[float] | None = None
    updated_at: datetime | None = None


class Asset(BaseModel):
    """Asset créatif rattaché (optionnellement) à une plateforme."""

    id: str
    name: str = ""
    description: str | None = None
    type: str | None = None
    category: str | None = None
    placement: str | None = None
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: str | None = None
    file_url: str | None = None
    platform_id: str | None = None
    embedding: list[float] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
