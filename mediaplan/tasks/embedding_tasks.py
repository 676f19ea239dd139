"""
Tâches Celery pour la synchronisation des vecteurs du catalogue.

- `resync_asset`: régénère le vecteur d'un asset (ou d'une plateforme) après modification.
  Seules les erreurs transitoires du fournisseur déclenchent un retry (backoff exponentiel).
- `regenerate_all_embeddings`: régénération complète; retourne le résumé du lot.
"""

from __future__ import annotations

import structlog

from mediaplan.app.celery_app import celery_app
from mediaplan.core.container import build_container
from mediaplan.domain.errors import ProviderTransientError, StoreError

log = structlog.get_logger(__name__)


@celery_app.task(
    name="mediaplan.tasks.resync_asset",
    autoretry_for=(ProviderTransientError, StoreError),
    retry_backoff=True,
    retry_backoff_max=60,
    max_retries=5,
)
def resync_asset(item_id: str, item_type: str = "asset") -> str:
    container = build_container()
    try:
        syncer = container.syncer()
        if item_type == "platform":
            syncer.sync_platform(item_id)
        else:
            syncer.sync(item_id)
    finally:
        container.close()
    return "ok"


@celery_app.task(name="mediaplan.tasks.regenerate_all_embeddings")
def regenerate_all_embeddings() -> dict:
    container = build_container()
    try:
        ledger = container.bulk_job().run()
    finally:
        container.close()
    log.info(
        "regenerate_all_done",
        succeeded=ledger.succeeded,
        failed=ledger.failed,
        skipped=ledger.skipped,
    )
    return ledger.summary()
