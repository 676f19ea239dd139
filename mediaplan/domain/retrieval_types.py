"""
Types de données pour la recherche hybride d'assets.

Ce module définit les modèles Pydantic des correspondances renvoyées par le classement hybride,
avant leur normalisation pour l'extérieur.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetrievalMatch(BaseModel):
    """
    Correspondance issue du classement hybride.

    Les scores sont optionnels au niveau du magasin; l'adaptateur de résultats les remplace par 0
    lorsqu'ils sont absents.
    """

    asset_id: str
    name: str = ""
    description: str | None = None
    type: str | None = None
    category: str | None = None
    placement: str | None = None
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: str | None = None
    file_url: str | None = None
    platform_id: str | None = None
    platform_name: str | None = None
    platform_industry: str | None = None
    similarity: float | None = None
    lexical_score: float | None = None
    combined_score: float | None = None
    combined_rank: int | None = None


class SearchQuery(BaseModel):
    """Requête de recherche hybride déjà validée."""

    text: str
    threshold: float
    limit: int
