"""Configuration du tracing OpenTelemetry pour l'observabilité.

Exporte les traces vers l'endpoint OTLP configuré; no-op si `OTLP_ENDPOINT` est absent.
"""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from mediaplan.core.settings import Settings


def setup_tracing(settings: Settings) -> bool:
    """Initialise le provider de tracing si un endpoint OTLP est configuré.

    Returns:
        bool: True si l'exporteur a été branché.
    """
    if not settings.OTLP_ENDPOINT:
        return False

    provider = TracerProvider(resource=Resource.create({"service.name": settings.APP_NAME}))
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    return True
