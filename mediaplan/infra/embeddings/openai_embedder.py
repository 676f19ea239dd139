"""
Fournisseurs d'embeddings OpenAI et Azure OpenAI.

Ce module implémente l'interface `Embeddings` via le SDK OpenAI. Les retries du SDK sont
désactivés et chaque appel est borné par un timeout; les erreurs du SDK sont converties en
`ProviderTransientError` (timeout, 429, 5xx) ou `ProviderPermanentError` (le reste).
"""

from __future__ import annotations

import time

import openai
import structlog
from openai import AzureOpenAI, OpenAI

from mediaplan.app.metrics import EMBEDDING_PROVIDER_ERRORS, EMBEDDING_PROVIDER_LATENCY
from mediaplan.core.settings import Settings, validate_provider_config
from mediaplan.domain.errors import (
    EmbeddingProviderError,
    ProviderPermanentError,
    ProviderTransientError,
)
from mediaplan.infra.embeddings.base import Embeddings, check_inputs, check_vectors

HTTP_STATUS_REQUEST_TIMEOUT = 408
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_SERVER_ERROR_MIN = 500


def classify_openai_error(exc: Exception) -> EmbeddingProviderError:
    """Traduit une exception du SDK OpenAI en erreur typée du catalogue."""
    if isinstance(exc, (openai.APITimeoutError, openai.APIConnectionError)):
        return ProviderTransientError(f"{type(exc).__name__}: {exc}")
    if isinstance(exc, openai.RateLimitError):
        return ProviderTransientError("rate limited")
    if isinstance(exc, openai.APIStatusError):
        code = exc.status_code
        if code >= HTTP_STATUS_SERVER_ERROR_MIN or code in (
            HTTP_STATUS_REQUEST_TIMEOUT,
            HTTP_STATUS_CONFLICT,
        ):
            return ProviderTransientError(f"provider http {code}")
        return ProviderPermanentError(f"provider http {code}: {type(exc).__name__}")
    return ProviderPermanentError(f"{type(exc).__name__}: {exc}")


class OpenAIEmbedder(Embeddings):
    """
    Embedder OpenAI pour la génération d'embeddings.

    Le client est construit explicitement à partir des paramètres fournis (aucun état global).
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-ada-002",
        dimensions: int = 1536,
        timeout: float = 30.0,
        client: OpenAI | None = None,
    ) -> None:
        """
        Initialise l'embedder OpenAI.

        Args:
            api_key: Clé API (jamais journalisée).
            model: Modèle d'embedding.
            dimensions: Dimension attendue des vecteurs.
            timeout: Timeout par appel, en secondes.
            client: Client pré-construit (tests).
        """
        self.model = model
        self.dimensions = dimensions
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._log = structlog.get_logger(__name__).bind(component="embedder", provider=self.name)

    def _request_kwargs(self) -> dict:
        # seuls les modèles text-embedding-3 acceptent une dimension explicite
        if self.model.startswith("text-embedding-3"):
            return {"dimensions": self.dimensions}
        return {}

    def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Génère des embeddings vectoriels via l'API.

        Args:
            texts: Liste des textes à convertir en embeddings.

        Returns:
            list[list[float]]: Un vecteur par texte, dans l'ordre d'entrée.

        Raises:
            ProviderTransientError: timeout, limitation de débit, 5xx.
            ProviderPermanentError: authentification, entrée invalide, dimension inattendue.
        """
        check_inputs(texts)
        start = time.perf_counter()
        try:
            resp = self.client.embeddings.create(
                model=self.model, input=texts, **self._request_kwargs()
            )
        except openai.OpenAIError as exc:
            err = classify_openai_error(exc)
            EMBEDDING_PROVIDER_ERRORS.labels(self.name, err.code).inc()
            self._log.warning("embedding_call_failed", kind=err.code, error_type=type(exc).__name__)
            raise err from exc
        finally:
            EMBEDDING_PROVIDER_LATENCY.labels(self.name).observe(time.perf_counter() - start)
        data = sorted(resp.data, key=lambda d: d.index)
        vectors = [list(d.embedding) for d in data]
        try:
            check_vectors(vectors, len(texts), self.dimensions)
        except ProviderPermanentError as err:
            EMBEDDING_PROVIDER_ERRORS.labels(self.name, err.code).inc()
            raise
        return vectors


class AzureOpenAIEmbedder(OpenAIEmbedder):
    """Embedder Azure OpenAI (déploiement nommé sur une instance Azure)."""

    name = "azure"

    def __init__(
        self,
        api_key: str,
        instance: str,
        deployment: str,
        api_version: str = "2023-05-15",
        dimensions: int = 1536,
        timeout: float = 30.0,
        client: AzureOpenAI | None = None,
    ) -> None:
        client = client or AzureOpenAI(
            api_key=api_key,
            azure_endpoint=f"https://{instance}.openai.azure.com",
            api_version=api_version,
            timeout=timeout,
            max_retries=0,
        )
        # côté Azure, `model` désigne le nom du déploiement
        super().__init__(
            api_key=api_key,
            model=deployment,
            dimensions=dimensions,
            timeout=timeout,
            client=client,
        )


def build_embedder(settings: Settings) -> OpenAIEmbedder:
    """Construit le fournisseur configuré.

    Raises:
        ConfigError: si les identifiants du fournisseur sont absents.
    """
    validate_provider_config(settings)
    if settings.EMBEDDINGS_PROVIDER == "azure":
        return AzureOpenAIEmbedder(
            api_key=settings.AZURE_OPENAI_API_KEY or "",
            instance=settings.AZURE_OPENAI_INSTANCE or "",
            deployment=settings.AZURE_OPENAI_DEPLOYMENT or "",
            api_version=settings.AZURE_OPENAI_API_VERSION,
            dimensions=settings.EMBEDDINGS_DIM,
            timeout=settings.EMBEDDINGS_TIMEOUT_S,
        )
    return OpenAIEmbedder(
        api_key=settings.OPENAI_API_KEY or "",
        model=settings.EMBEDDINGS_MODEL,
        dimensions=settings.EMBEDDINGS_DIM,
        timeout=settings.EMBEDDINGS_TIMEOUT_S,
    )
