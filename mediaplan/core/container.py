"""
Conteneur d'injection de dépendances.

Assemble explicitement les composants (settings, moteur SQL, magasin, fournisseur d'embeddings)
et fabrique les services du cœur. Aucune instance globale: l'application FastAPI, les tâches
Celery et les scripts construisent chacun leur conteneur via `build_container`.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from mediaplan.core.settings import Settings, get_settings, validate_provider_config
from mediaplan.domain.bulk_sync import BulkSyncJob
from mediaplan.domain.retriever import HybridRetriever
from mediaplan.domain.syncer import SingleItemSyncer
from mediaplan.infra.embeddings.base import Embeddings
from mediaplan.infra.embeddings.openai_embedder import build_embedder
from mediaplan.infra.repo.asset_repo import AssetRepository
from mediaplan.infra.repo.base import CatalogStore
from mediaplan.infra.repo.db import get_engine


class Container:
    """Dépendances du catalogue, construites une fois par processus."""

    def __init__(
        self,
        settings: Settings,
        engine: Engine | None = None,
        store: CatalogStore | None = None,
        embedder: Embeddings | None = None,
    ) -> None:
        self.settings = settings
        self.engine = engine or get_engine(
            settings.DATABASE_URL, statement_timeout_ms=settings.STORE_STATEMENT_TIMEOUT_MS
        )
        self.store: CatalogStore = store or AssetRepository(
            self.engine, dimensions=settings.EMBEDDINGS_DIM
        )
        self._embedder = embedder

    @property
    def embedder(self) -> Embeddings:
        """Fournisseur d'embeddings (construit à la première utilisation).

        Raises:
            ConfigError: identifiants du fournisseur absents.
        """
        if self._embedder is None:
            self._embedder = build_embedder(self.settings)
        return self._embedder

    def close(self) -> None:
        """Libère le pool de connexions du moteur (fin de tâche, fin de CLI)."""
        self.engine.dispose()

    def validate(self) -> None:
        """Contrôle de démarrage: lève `ConfigError` si le fournisseur n'est pas configuré."""
        if self._embedder is None:
            validate_provider_config(self.settings)

    def syncer(self) -> SingleItemSyncer:
        return SingleItemSyncer(self.store, self.embedder)

    def bulk_job(self) -> BulkSyncJob:
        return BulkSyncJob(
            self.store,
            self.syncer(),
            max_workers=self.settings.SYNC_MAX_WORKERS,
            page_size=self.settings.SYNC_PAGE_SIZE,
        )

    def retriever(self) -> HybridRetriever:
        s = self.settings
        return HybridRetriever(
            self.store,
            self.embedder,
            default_threshold=s.SEARCH_MATCH_THRESHOLD,
            default_limit=s.SEARCH_MATCH_COUNT,
            vector_weight=s.SEARCH_VECTOR_WEIGHT,
            lexical_weight=s.SEARCH_LEXICAL_WEIGHT,
            gate=s.SEARCH_THRESHOLD_GATE,  # type: ignore[arg-type]
        )


def build_container(settings: Settings | None = None, **overrides) -> Container:
    """Construit un conteneur à partir des settings (ou de l'environnement)."""
    return Container(settings or get_settings(), **overrides)
