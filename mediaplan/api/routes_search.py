# ============================================================
# Module : mediaplan/api/routes_search.py
# Objet  : Endpoint de recherche hybride d'assets.
# Notes  : requête manquante -> 400; échec embedding/classement -> 500 avec code.
# ============================================================
"""Route de recherche hybride."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mediaplan.api.deps import get_container
from mediaplan.api.errors import error_response
from mediaplan.core.container import Container
from mediaplan.core.http_constants import HTTP_BAD_REQUEST
from mediaplan.domain.result_adapter import to_external

router = APIRouter(prefix="/search", tags=["search"])
log = structlog.get_logger(__name__)


class HybridSearchRequest(BaseModel):
    """Payload de recherche; seuil et limite reprennent les valeurs configurées par défaut."""

    query: str | None = None
    threshold: float | None = None
    limit: int | None = None


@router.post("/hybrid")
def hybrid_search(req: HybridSearchRequest, container: Container = Depends(get_container)):
    """Recherche hybride: retourne un tableau ordonné de lignes de résultat."""
    if not (req.query or "").strip():
        return error_response(HTTP_BAD_REQUEST, "Query parameter is required", "EMPTY_QUERY")
    retriever = container.retriever()
    try:
        matches = retriever.search(req.query, threshold=req.threshold, limit=req.limit)
    except ValueError as exc:
        return error_response(HTTP_BAD_REQUEST, str(exc))
    log.info("hybrid_search_served", results=len(matches))
    return to_external(matches)
