# ============================================================
# Module : mediaplan/domain/scoring.py
# Objet  : Briques de score de la recherche hybride (vecteur + lexical).
# Invariants :
#  - Le seuil ne filtre que via `passes_threshold` (politique isolée).
#  - Égalité de score combiné -> identifiant d'asset croissant.
# ============================================================
"""Fonctions de score partagées par le magasin et le retriever."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Literal

import numpy as np

ThresholdGate = Literal["similarity", "combined"]

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str | None) -> set[str]:
    """Termes distincts en minuscules (mots alphanumériques)."""
    if not text:
        return set()
    return {t for t in _TOKEN_RE.findall(text.lower()) if t}


def lexical_score(query_terms: set[str], fields: Iterable[str | None]) -> float:
    """Part des termes distincts de la requête présents dans les champs textuels, dans [0, 1]."""
    if not query_terms:
        return 0.0
    doc_terms: set[str] = set()
    for f in fields:
        doc_terms |= tokenize(f)
    return len(query_terms & doc_terms) / len(query_terms)


def cosine_similarities(query: list[float], matrix: np.ndarray) -> np.ndarray:
    """Similarité cosinus entre un vecteur requête et chaque ligne de `matrix`.

    Les vecteurs de norme nulle ont une similarité de 0.
    """
    q = np.asarray(query, dtype="float64")
    if matrix.size == 0:
        return np.zeros(0, dtype="float64")
    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    dots = matrix @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(denom > 0, dots / denom, 0.0)
    return np.clip(sims, -1.0, 1.0)


def combine(similarity: float, lexical: float, vector_weight: float, lexical_weight: float) -> float:
    return vector_weight * similarity + lexical_weight * lexical


def passes_threshold(
    similarity: float, combined: float, threshold: float, gate: ThresholdGate = "similarity"
) -> bool:
    """Politique de seuil: porte sur la similarité vectorielle (défaut) ou sur le score combiné."""
    value = combined if gate == "combined" else similarity
    return value >= threshold


def ranking_key(combined: float | None, asset_id: str) -> tuple[float, str]:
    """Clé de tri: score combiné décroissant puis identifiant croissant."""
    return (-(combined or 0.0), asset_id)
