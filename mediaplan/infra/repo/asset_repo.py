# ============================================================
# Module : mediaplan/infra/repo/asset_repo.py
# Objet  : Accès SQL aux assets/plateformes et classement hybride.
# Notes  : une session courte par opération; le magasin reste la seule source de vérité
#          (aucun cache de vecteurs en mémoire).
# ============================================================

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

import numpy as np
from sqlalchemy import select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from mediaplan.domain.entities import Asset, Platform
from mediaplan.domain.errors import (
    AssetNotFoundError,
    EnumerationError,
    PersistError,
    PlatformNotFoundError,
    RetrievalBackendError,
)
from mediaplan.domain.retrieval_types import RetrievalMatch
from mediaplan.domain.scoring import (
    ThresholdGate,
    combine,
    cosine_similarities,
    lexical_score,
    passes_threshold,
    ranking_key,
    tokenize,
)
from mediaplan.infra.repo.db import session_scope
from mediaplan.infra.repo.models import AssetORM, PlatformORM


def _tags(value: Any) -> list[str]:
    """Étiquettes en JSON libre: une chaîne isolée devient une liste, le reste est ignoré."""
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [str(t) for t in value if t is not None]


def _vector(value: Any) -> list[float] | None:
    """Vecteur stocké, ou None s'il n'est pas une liste de nombres finis."""
    if not isinstance(value, (list, tuple)) or not value:
        return None
    try:
        vec = [float(x) for x in value]
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(x) for x in vec):
        return None
    return vec


def _platform(row: PlatformORM | None) -> Platform | None:
    if row is None:
        return None
    return Platform(
        id=row.id,
        name=row.name,
        industry=row.industry,
        description=row.description,
        audience_data=row.audience_data,
        device_split=row.device_split,
        campaign_data=row.campaign_data,
        embedding=_vector(row.embedding),
        updated_at=row.updated_at,
    )


def _asset(row: AssetORM) -> Asset:
    return Asset(
        id=row.id,
        name=row.name or "",
        description=row.description,
        type=row.type,
        category=row.category,
        placement=row.placement,
        tags=_tags(row.tags),
        thumbnail_url=row.thumbnail_url,
        file_url=row.file_url,
        platform_id=row.platform_id,
        embedding=_vector(row.embedding),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class AssetRepository:
    """Lecture des assets/plateformes, écriture des vecteurs, opération `hybrid_match`."""

    def __init__(self, engine: Engine, dimensions: int | None = None) -> None:
        """Construit le repo sur un moteur SQLAlchemy.

        Args:
            engine: Moteur de la base relationnelle.
            dimensions: Dimension attendue des vecteurs (les vecteurs d'une autre dimension sont
                ignorés par le classement).
        """
        self._engine = engine
        self._dimensions = dimensions

    # -------------------- Lecture --------------------

    def get_with_platform(self, asset_id: str) -> tuple[Asset, Platform | None] | None:
        """Retourne l'asset et sa plateforme liée, ou None s'il n'existe pas."""
        with session_scope(self._engine) as session:
            row = session.get(AssetORM, asset_id)
            if row is None:
                return None
            return _asset(row), _platform(row.platform)

    def get_platform(self, platform_id: str) -> Platform | None:
        with session_scope(self._engine) as session:
            return _platform(session.get(PlatformORM, platform_id))

    def list_asset_ids(self, page_size: int = 500) -> list[str]:
        """Liste tous les identifiants d'assets (created_at décroissant, puis id).

        La pagination est interne; le résultat ne dépend pas de `page_size`.

        Raises:
            EnumerationError: si la lecture échoue.
        """
        ids: list[str] = []
        offset = 0
        size = max(1, page_size)
        try:
            while True:
                stmt = (
                    select(AssetORM.id)
                    .order_by(AssetORM.created_at.desc(), AssetORM.id.asc())
                    .offset(offset)
                    .limit(size)
                )
                with session_scope(self._engine) as session:
                    page = list(session.execute(stmt).scalars().all())
                ids.extend(page)
                if len(page) < size:
                    return ids
                offset += size
        except SQLAlchemyError as exc:
            raise EnumerationError(f"énumération des assets impossible: {type(exc).__name__}") from exc

    # -------------------- Écriture --------------------

    def save_embedding(self, asset_id: str, vector: list[float]) -> None:
        """Écrase le vecteur de l'asset dans une transaction unique.

        Raises:
            AssetNotFoundError: si l'asset a disparu.
            PersistError: si l'écriture échoue (rollback, vecteur précédent conservé).
        """
        stmt = (
            update(AssetORM)
            .where(AssetORM.id == asset_id)
            .values(embedding=[float(x) for x in vector], updated_at=datetime.now(UTC))
        )
        try:
            with session_scope(self._engine) as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    raise AssetNotFoundError(asset_id)
        except SQLAlchemyError as exc:
            raise PersistError(f"écriture du vecteur impossible: {type(exc).__name__}") from exc

    def save_platform_embedding(self, platform_id: str, vector: list[float]) -> None:
        stmt = (
            update(PlatformORM)
            .where(PlatformORM.id == platform_id)
            .values(embedding=[float(x) for x in vector], updated_at=datetime.now(UTC))
        )
        try:
            with session_scope(self._engine) as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    raise PlatformNotFoundError(platform_id)
        except SQLAlchemyError as exc:
            raise PersistError(f"écriture du vecteur impossible: {type(exc).__name__}") from exc

    # -------------------- Classement hybride --------------------

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
        """Classe les assets vectorisés par score hybride.

        Args:
            query_vector: Vecteur de la requête.
            query_text: Texte brut de la requête (score lexical).
            threshold: Seuil appliqué selon `gate`.
            limit: Nombre maximal de lignes.
            vector_weight: Poids de la similarité cosinus.
            lexical_weight: Poids du score lexical.
            gate: Composante soumise au seuil.

        Returns:
            list[RetrievalMatch]: Lignes triées par score combiné décroissant.

        Raises:
            RetrievalBackendError: si la lecture du corpus échoue.
        """
        dim = self._dimensions or len(query_vector)
        if len(query_vector) != dim:
            raise RetrievalBackendError(f"dimension de requête {len(query_vector)} != {dim}")
        try:
            with session_scope(self._engine) as session:
                rows = (
                    session.execute(select(AssetORM).where(AssetORM.embedding.is_not(None)))
                    .unique()
                    .scalars()
                    .all()
                )
                candidates = []
                for r in rows:
                    asset = _asset(r)
                    # vecteur non numérique ou d'une autre dimension (modèle précédent): ignoré
                    if asset.embedding is None or len(asset.embedding) != dim:
                        continue
                    candidates.append((asset, _platform(r.platform)))
        except SQLAlchemyError as exc:
            raise RetrievalBackendError(
                f"classement hybride impossible: {type(exc).__name__}"
            ) from exc

        if not candidates:
            return []
        matrix = np.asarray([a.embedding for a, _ in candidates], dtype="float64")
        sims = cosine_similarities(query_vector, matrix)
        terms = tokenize(query_text)

        matches: list[RetrievalMatch] = []
        for (asset, platform), sim in zip(candidates, sims, strict=True):
            lex = lexical_score(
                terms,
                [
                    asset.name,
                    asset.description,
                    asset.type,
                    asset.category,
                    asset.placement,
                    " ".join(asset.tags),
                ],
            )
            similarity = float(sim)
            combined = combine(similarity, lex, vector_weight, lexical_weight)
            if not passes_threshold(similarity, combined, threshold, gate):
                continue
            matches.append(
                RetrievalMatch(
                    asset_id=asset.id,
                    name=asset.name,
                    description=asset.description,
                    type=asset.type,
                    category=asset.category,
                    placement=asset.placement,
                    tags=asset.tags,
                    thumbnail_url=asset.thumbnail_url,
                    file_url=asset.file_url,
                    platform_id=asset.platform_id,
                    platform_name=platform.name if platform else None,
                    platform_industry=platform.industry if platform else None,
                    similarity=similarity,
                    lexical_score=lex,
                    combined_score=combined,
                )
            )
        matches.sort(key=lambda m: ranking_key(m.combined_score, m.asset_id))
        return matches[: max(0, limit)]
