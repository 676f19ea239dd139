"""Synchronisation du vecteur d'un élément unique: composer -> vectoriser -> persister.

Le syncer ne fait aucun retry: un échec transitoire du fournisseur remonte tel quel et c'est à
l'appelant (tâche Celery, job de masse, route) de décider.
"""

from __future__ import annotations

import structlog

from mediaplan.app.metrics import EMBEDDING_SYNC_TOTAL
from mediaplan.domain.content import compose, compose_platform, has_content, platform_has_content
from mediaplan.domain.errors import (
    AssetNotFoundError,
    EmptyContentError,
    PlatformNotFoundError,
    SyncError,
)
from mediaplan.infra.embeddings.base import Embeddings
from mediaplan.infra.repo.base import CatalogStore


class SingleItemSyncer:
    """Rafraîchit le vecteur stocké d'un asset (ou d'une plateforme).

    Exactement une écriture en cas de succès, aucune sur tout chemin d'échec.
    """

    def __init__(self, store: CatalogStore, embedder: Embeddings) -> None:
        self.store = store
        self.embedder = embedder
        self._log = structlog.get_logger(__name__).bind(component="single_item_syncer")

    def sync(self, asset_id: str) -> None:
        """Resynchronise le vecteur d'un asset.

        Args:
            asset_id: Identifiant de l'asset.

        Raises:
            AssetNotFoundError: l'asset n'existe plus.
            EmptyContentError: ni nom, ni description, ni type.
            ProviderTransientError / ProviderPermanentError: échec du fournisseur.
            PersistError: échec d'écriture; le vecteur précédent est conservé.
        """
        try:
            loaded = self.store.get_with_platform(asset_id)
            if loaded is None:
                raise AssetNotFoundError(asset_id)
            asset, platform = loaded
            if not has_content(asset):
                raise EmptyContentError(f"asset {asset_id} sans contenu à vectoriser")
            content = compose(asset, platform)
            vector = self.embedder.embed_one(content)
            self.store.save_embedding(asset_id, vector)
        except SyncError as err:
            EMBEDDING_SYNC_TOTAL.labels("asset", err.code).inc()
            self._log.warning("embedding_sync_failed", asset_id=asset_id, code=err.code)
            raise
        EMBEDDING_SYNC_TOTAL.labels("asset", "success").inc()
        self._log.info("embedding_sync_ok", asset_id=asset_id, dims=len(vector))

    def sync_platform(self, platform_id: str) -> None:
        """Resynchronise le vecteur propre d'une plateforme."""
        try:
            platform = self.store.get_platform(platform_id)
            if platform is None:
                raise PlatformNotFoundError(platform_id)
            if not platform_has_content(platform):
                raise EmptyContentError(f"plateforme {platform_id} sans contenu à vectoriser")
            vector = self.embedder.embed_one(compose_platform(platform))
            self.store.save_platform_embedding(platform_id, vector)
        except SyncError as err:
            EMBEDDING_SYNC_TOTAL.labels("platform", err.code).inc()
            self._log.warning("embedding_sync_failed", platform_id=platform_id, code=err.code)
            raise
        EMBEDDING_SYNC_TOTAL.labels("platform", "success").inc()
        self._log.info("embedding_sync_ok", platform_id=platform_id, dims=len(vector))
