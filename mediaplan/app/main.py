"""
Application principale FastAPI.

Ce module assemble les composants de l'API du catalogue média: middlewares, routes de
synchronisation des embeddings, recherche hybride, santé et métriques.

Responsabilités du module:
- Initialiser le logging structuré et le tracing
- Construire (ou recevoir) le conteneur de dépendances et valider la config du fournisseur
- Ajouter les middlewares (request id, métriques, timing) et les handlers d'erreurs
- Monter les routers

Lancement: `uvicorn mediaplan.app.main:create_app --factory`.
"""

from __future__ import annotations

from fastapi import FastAPI

from mediaplan.api.errors import register_error_handlers
from mediaplan.api.routes_embeddings import router as embeddings_router
from mediaplan.api.routes_health import router as health_router
from mediaplan.api.routes_search import router as search_router
from mediaplan.app.metrics import PrometheusMiddleware, metrics_router
from mediaplan.app.tracing import setup_tracing
from mediaplan.core.container import Container, build_container
from mediaplan.core.logging import setup_logging
from mediaplan.middlewares.request_id import RequestIDMiddleware
from mediaplan.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Construit le conteneur depuis l'environnement si aucun n'est fourni
    - Refuse de démarrer si le fournisseur d'embeddings n'est pas configuré (`ConfigError`)
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes
    """
    container = container or build_container()
    settings = container.settings
    setup_logging(settings.APP_ENV, settings.APP_DEBUG)
    setup_tracing(settings)
    container.validate()

    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(embeddings_router)
    app.include_router(search_router)
    app.include_router(metrics_router)
    return app
