# ============================================================
# Module : mediaplan/api/routes_embeddings.py
# Objet  : Resynchronisation des vecteurs (unitaire, en masse) et embedding de texte.
# Notes  : le contenu vectorisé est toujours recomposé depuis le magasin.
# ============================================================
"""Routes de génération et de régénération des embeddings."""

from __future__ import annotations

from typing import Literal

import structlog
from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from mediaplan.api.deps import get_container
from mediaplan.api.errors import error_response
from mediaplan.core.container import Container
from mediaplan.core.http_constants import HTTP_BAD_REQUEST

router = APIRouter(prefix="/embeddings", tags=["embeddings"])
log = structlog.get_logger(__name__)


class GenerateRequest(BaseModel):
    """Payload de resynchronisation unitaire."""

    id: str = Field(validation_alias=AliasChoices("id", "asset_id"))
    type: Literal["asset", "platform"] = "asset"
    # accepté pour compatibilité; le texte est recomposé depuis le magasin
    content: str | None = Field(
        default=None, validation_alias=AliasChoices("content", "content_text")
    )


class QueryEmbeddingRequest(BaseModel):
    text: str = ""


@router.post("/generate")
def generate(req: GenerateRequest, container: Container = Depends(get_container)) -> dict:
    """Resynchronise le vecteur d'un asset (ou d'une plateforme).

    Returns:
        dict: {"success": true}; les échecs passent par le handler d'erreurs du catalogue.
    """
    log.info("embedding_generate", item_type=req.type, item_id=req.id)
    syncer = container.syncer()
    if req.type == "platform":
        syncer.sync_platform(req.id)
    else:
        syncer.sync(req.id)
    return {"success": True}


@router.post("/regenerate")
def regenerate(container: Container = Depends(get_container)) -> dict:
    """Régénère les vecteurs de tous les assets.

    Statut 200 même si des assets ont échoué (succès au niveau du lot); 500 uniquement si le job
    refuse de démarrer (configuration, énumération).

    Returns:
        dict: {"message", "processed_count", "failed_count", "skipped_count", "results"}
    """
    ledger = container.bulk_job().run()
    log.info("embedding_regenerate", succeeded=ledger.succeeded, failed=ledger.failed)
    return ledger.summary()


@router.post("/query")
def embed_query(req: QueryEmbeddingRequest, container: Container = Depends(get_container)):
    """Retourne l'embedding d'un texte libre (brief de recherche)."""
    text = req.text.strip()
    if not text:
        return error_response(HTTP_BAD_REQUEST, "Text input is required")
    return {"embedding": container.embedder.embed_one(text)}
