"""Normalisation des correspondances de recherche vers la forme externe.

Les champs de plateforme sont dénormalisés sur chaque ligne et les scores/rangs absents valent 0
(jamais None), pour que les consommateurs n'aient pas à tester leur présence.
"""

from __future__ import annotations

from typing import Any

from mediaplan.domain.retrieval_types import RetrievalMatch

MISSING_SCORE = 0


def to_external(matches: list[RetrievalMatch]) -> list[dict[str, Any]]:
    """Convertit des correspondances en lignes de résultat externes (ordre conservé)."""
    return [_row(m) for m in matches]


def _row(m: RetrievalMatch) -> dict[str, Any]:
    return {
        "id": m.asset_id,
        "name": m.name,
        "description": m.description,
        "type": m.type,
        "category": m.category,
        "placement": m.placement,
        "tags": list(m.tags),
        "thumbnail_url": m.thumbnail_url,
        "file_url": m.file_url,
        "platform_id": m.platform_id,
        "platform_name": m.platform_name,
        "platform_industry": m.platform_industry,
        "similarity": m.similarity if m.similarity is not None else MISSING_SCORE,
        "lexical_score": m.lexical_score if m.lexical_score is not None else MISSING_SCORE,
        "combined_score": m.combined_score if m.combined_score is not None else MISSING_SCORE,
        "rank": m.combined_rank if m.combined_rank is not None else MISSING_SCORE,
    }
