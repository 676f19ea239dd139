"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Fournir des logs structurés lisibles en développement, JSON en production.
- Propager les variables de contexte (ex: `request_id`) liées par les middlewares.
"""

import logging
from typing import TextIO

import structlog


def setup_logging(app_env: str = "dev", debug: bool = False, stream: TextIO | None = None) -> None:
    """Configure structlog pour l'API, les workers Celery et les scripts.

    Args:
        app_env: environnement courant; hors "dev"/"test" les événements sont rendus en JSON.
        debug: abaisse le niveau minimal à DEBUG.
        stream: flux de sortie (stdout par défaut; la CLI écrit ses logs sur stderr).
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if app_env in ("dev", "test")
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        # sans flux explicite, stdout est résolu à la création de chaque logger
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        # en test le flux de sortie change d'un test à l'autre
        cache_logger_on_first_use=app_env != "test",
    )
