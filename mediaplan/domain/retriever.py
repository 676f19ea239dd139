"""Service de recherche hybride d'assets (similarité vectorielle + correspondance lexicale).

Étapes: validation de la requête, embedding de la requête, une opération de classement hybride
sur le magasin, puis application locale du seuil, du départage et de la limite pour garantir un
résultat déterministe quel que soit le magasin.

Si l'embedding de la requête échoue, la recherche échoue: il n'y a pas de repli lexical seul,
le seuil portant sur la similarité vectorielle.
"""

from __future__ import annotations

import time

import structlog

from mediaplan.app.metrics import (
    SEARCH_ERRORS_TOTAL,
    SEARCH_HITS_TOTAL,
    SEARCH_LATENCY,
    SEARCH_REQUESTS_TOTAL,
)
from mediaplan.domain.errors import CatalogError, EmptyQueryError, RetrievalBackendError
from mediaplan.domain.retrieval_types import RetrievalMatch, SearchQuery
from mediaplan.domain.scoring import ThresholdGate, passes_threshold, ranking_key
from mediaplan.infra.embeddings.base import Embeddings
from mediaplan.infra.repo.base import CatalogStore


class HybridRetriever:
    """Recherche hybride sur le corpus persisté.

    Fournit une interface unique `search`; le magasin est relu à chaque appel (aucun cache).
    """

    def __init__(
        self,
        store: CatalogStore,
        embedder: Embeddings,
        default_threshold: float = 0.5,
        default_limit: int = 20,
        vector_weight: float = 0.7,
        lexical_weight: float = 0.3,
        gate: ThresholdGate = "similarity",
    ) -> None:
        """Initialise le retriever.

        Args:
            store: Magasin exposant `hybrid_match`.
            embedder: Fournisseur d'embeddings pour la requête.
            default_threshold: Seuil par défaut, dans [0, 1].
            default_limit: Nombre maximal de résultats par défaut.
            vector_weight: Poids de la similarité cosinus dans le score combiné.
            lexical_weight: Poids du score lexical dans le score combiné.
            gate: Composante soumise au seuil ("similarity" ou "combined").
        """
        self.store = store
        self.embedder = embedder
        self.default_threshold = default_threshold
        self.default_limit = default_limit
        self.vector_weight = vector_weight
        self.lexical_weight = lexical_weight
        self.gate = gate
        self._log = structlog.get_logger(__name__).bind(component="hybrid_retriever")

    def build_query(
        self, query_text: str | None, threshold: float | None = None, limit: int | None = None
    ) -> SearchQuery:
        """Valide et normalise les paramètres de recherche.

        Raises:
            EmptyQueryError: requête absente ou composée d'espaces.
            ValueError: seuil hors de [0, 1] ou limite <= 0.
        """
        text = (query_text or "").strip()
        if not text:
            raise EmptyQueryError("la requête est vide")
        th = self.default_threshold if threshold is None else float(threshold)
        lim = self.default_limit if limit is None else int(limit)
        if not 0.0 <= th <= 1.0:
            raise ValueError("threshold doit être dans [0, 1]")
        if lim <= 0:
            raise ValueError("limit doit être > 0")
        return SearchQuery(text=text, threshold=th, limit=lim)

    def search(
        self, query_text: str | None, threshold: float | None = None, limit: int | None = None
    ) -> list[RetrievalMatch]:
        """Recherche les assets les plus pertinents pour un brief en langage naturel.

        Returns:
            list[RetrievalMatch]: Au plus `limit` correspondances, score combiné décroissant,
            identifiant croissant en cas d'égalité, `combined_rank` à partir de 1.

        Raises:
            EmptyQueryError: requête vide (aucun appel au fournisseur).
            ProviderTransientError / ProviderPermanentError: échec de l'embedding de la requête.
            RetrievalBackendError: échec du classement.
        """
        SEARCH_REQUESTS_TOTAL.inc()
        start = time.perf_counter()
        try:
            q = self.build_query(query_text, threshold, limit)
            query_vector = self.embedder.embed_one(q.text)
            rows = self._rank(query_vector, q)
        except CatalogError as err:
            SEARCH_ERRORS_TOTAL.labels(err.code).inc()
            raise
        finally:
            SEARCH_LATENCY.observe(time.perf_counter() - start)

        kept = [
            m
            for m in rows
            if passes_threshold(m.similarity or 0.0, m.combined_score or 0.0, q.threshold, self.gate)
        ]
        kept.sort(key=lambda m: ranking_key(m.combined_score, m.asset_id))
        ranked = [
            m.model_copy(update={"combined_rank": pos})
            for pos, m in enumerate(kept[: q.limit], start=1)
        ]
        if ranked:
            SEARCH_HITS_TOTAL.inc()
        self._log.info(
            "hybrid_search", results=len(ranked), threshold=q.threshold, limit=q.limit
        )
        return ranked

    def _rank(self, query_vector: list[float], q: SearchQuery) -> list[RetrievalMatch]:
        try:
            return self.store.hybrid_match(
                query_vector,
                q.text,
                q.threshold,
                q.limit,
                vector_weight=self.vector_weight,
                lexical_weight=self.lexical_weight,
                gate=self.gate,
            )
        except RetrievalBackendError:
            raise
        except Exception as exc:
            raise RetrievalBackendError(f"classement hybride: {type(exc).__name__}") from exc
