"""
Endpoint de santé pour vérifier la disponibilité de l'API et du magasin.

Expose `/health` pour signaler l'état général de l'application.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mediaplan.api.deps import get_container
from mediaplan.core.container import Container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: Container = Depends(get_container)):
    """Vérifie la disponibilité de l'API et de la base relationnelle."""
    try:
        with container.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        storage = "ok"
    except SQLAlchemyError:
        storage = "unavailable"
    return {
        "status": "ok",
        "storage": storage,
        "embeddings_provider": container.settings.EMBEDDINGS_PROVIDER,
    }
