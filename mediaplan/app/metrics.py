"""
Métriques Prometheus pour l'application.

Ce module définit les métriques Prometheus du catalogue: HTTP, fournisseur d'embeddings,
synchronisation des vecteurs et recherche hybride.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Embedding provider
EMBEDDING_PROVIDER_LATENCY = Histogram(
    "embedding_provider_latency_seconds",
    "Latency of embedding provider calls",
    ["provider"],
)
EMBEDDING_PROVIDER_ERRORS = Counter(
    "embedding_provider_errors_total",
    "Embedding provider failures by kind",
    ["provider", "kind"],
)

# Synchronisation des vecteurs
EMBEDDING_SYNC_TOTAL = Counter(
    "embedding_sync_total",
    "Single-item embedding synchronizations",
    ["kind", "result"],
)
BULK_SYNC_ITEMS = Counter(
    "bulk_sync_items_total",
    "Items processed by bulk embedding regeneration",
    ["result"],
)
BULK_SYNC_DURATION = Histogram(
    "bulk_sync_duration_seconds",
    "Duration of bulk embedding regeneration runs",
    buckets=[1, 5, 15, 30, 60, 120, 300, 600, 1200],
)

# Recherche hybride
SEARCH_REQUESTS_TOTAL = Counter(
    "search_requests_total",
    "Total hybrid search requests",
)
SEARCH_HITS_TOTAL = Counter(
    "search_hits_total",
    "Hybrid search requests that returned at least one match",
)
SEARCH_ERRORS_TOTAL = Counter(
    "search_errors_total",
    "Hybrid search failures",
    ["code"],
)
SEARCH_LATENCY = Histogram(
    "search_latency_seconds",
    "Latency of hybrid search (embedding + ranking)",
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Traite une requête HTTP et collecte les métriques.

        Args:
            request: Requête HTTP entrante.
            call_next: Fonction pour appeler le middleware suivant.

        Returns:
            Response: Réponse HTTP avec métriques collectées.
        """
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = request.scope.get("path", "unknown")
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
