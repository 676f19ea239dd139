"""Protocole du magasin relationnel utilisé par la synchronisation et la recherche.

`AssetRepository` l'implémente; les tests peuvent fournir leurs propres doubles.
"""

from __future__ import annotations

from typing import Protocol

from mediaplan.domain.entities import Asset, Platform
from mediaplan.domain.retrieval_types import RetrievalMatch
from mediaplan.domain.scoring import ThresholdGate


class CatalogStore(Protocol):
    """Protocole du magasin d'assets."""

    def get_with_platform(self, asset_id: str) -> tuple[Asset, Platform | None] | None:
        """Retourne l'asset et sa plateforme liée, ou None."""

    def get_platform(self, platform_id: str) -> Platform | None:
        """Retourne la plateforme, ou None."""

    def list_asset_ids(self, page_size: int = 500) -> list[str]:
        """Liste tous les identifiants d'assets dans un ordre stable."""

    def save_embedding(self, asset_id: str, vector: list[float]) -> None:
        """Écrase le vecteur d'un asset (transaction unique)."""

    def save_platform_embedding(self, platform_id: str, vector: list[float]) -> None:
        """Écrase le vecteur d'une plateforme (transaction unique)."""

    def hybrid_match(
        self,
        query_vector: list[float],
        query_text: str,
        threshold: float,
        limit: int,
        *,
        vector_weight: float = 0.7,
        lexical_weight: float = 0.3,
        gate: ThresholdGate = "similarity",
    ) -> list[RetrievalMatch]:
        """Classe les assets par score hybride."""
