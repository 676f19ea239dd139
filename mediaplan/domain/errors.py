"""Taxonomie des erreurs du catalogue (synchronisation et recherche).

Chaque erreur porte un `code` stable (exposé aux appelants) et un indicateur `retryable` qui
distingue les problèmes d'exploitation (configuration), les échecs transitoires (ré-invoquer
suffit) et les échecs permanents (pas de retry automatique).
"""

from __future__ import annotations


class CatalogError(Exception):
    """Racine de toutes les erreurs métier du catalogue."""

    code = "CATALOG_ERROR"
    retryable = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ConfigError(CatalogError):
    """Configuration absente ou invalide (identifiants du fournisseur, etc.)."""

    code = "CONFIG_ERROR"


class SyncError(CatalogError):
    """Échec de synchronisation d'un élément unique."""

    code = "SYNC_ERROR"


class NotFoundError(SyncError):
    """L'élément a disparu entre l'énumération et la synchronisation."""

    code = "NOT_FOUND"


class AssetNotFoundError(NotFoundError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(f"asset introuvable: {asset_id}")
        self.asset_id = asset_id


class PlatformNotFoundError(NotFoundError):
    def __init__(self, platform_id: str) -> None:
        super().__init__(f"plateforme introuvable: {platform_id}")
        self.platform_id = platform_id


class EmptyContentError(SyncError):
    """Aucun contenu à vectoriser."""

    code = "EMPTY_CONTENT"


class EmbeddingProviderError(SyncError):
    """Échec de l'appel au fournisseur d'embeddings."""

    code = "EMBEDDING_FAILURE"


class ProviderTransientError(EmbeddingProviderError):
    """Timeout, limitation de débit ou erreur 5xx: ré-invocable."""

    code = "PROVIDER_TRANSIENT"
    retryable = True


class ProviderPermanentError(EmbeddingProviderError):
    """Authentification, configuration, entrée invalide ou dimension inattendue."""

    code = "PROVIDER_PERMANENT"


class StoreError(CatalogError):
    """Échec du magasin relationnel."""

    code = "STORE_ERROR"
    retryable = True


class PersistError(StoreError, SyncError):
    """L'écriture du vecteur a échoué; le vecteur précédent est conservé."""

    code = "PERSIST_ERROR"


class EnumerationError(StoreError):
    """Impossible de lister le catalogue: le job de masse refuse de démarrer."""

    code = "ENUMERATION_ERROR"


class RetrievalBackendError(StoreError):
    """La requête de classement hybride a échoué."""

    code = "RETRIEVAL_BACKEND_ERROR"


class EmptyQueryError(CatalogError):
    """Requête vide ou composée uniquement d'espaces."""

    code = "EMPTY_QUERY"
