"""
Module: celery_app.

But: Initialiser l'instance Celery du catalogue et charger la config runtime.
Notes:
- Aucun secret loggé.
- Les tâches construisent leur propre conteneur (pas d'état global partagé avec l'API).
"""

from celery import Celery

from mediaplan.core.settings import get_settings

_settings = get_settings()

celery_app = Celery(
    "mediaplan",
    broker=_settings.CELERY_BROKER_URL,
    backend=_settings.CELERY_RESULT_BACKEND,
    include=["mediaplan.tasks.embedding_tasks"],
)
# Load configuration from module (retries, timeouts, acks)
celery_app.config_from_object("mediaplan.app.celeryconfig")
celery_app.conf.task_routes = {"mediaplan.tasks.*": {"queue": "default"}}

__all__ = ["celery_app"]
