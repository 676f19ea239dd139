# ============================================================
# Module : mediaplan/domain/bulk_sync.py
# Objet  : Régénération des vecteurs de tout le catalogue.
# Invariants :
#  - Nombre fixe de workers (jamais un thread par asset).
#  - Un échec d'asset n'interrompt jamais le lot; une entrée par asset, ordre d'énumération.
#  - Après annulation, aucun nouvel asset n'est planifié; les appels en cours se terminent.
# ============================================================
"""Job de resynchronisation en masse avec concurrence bornée."""

from __future__ import annotations

import queue as _queue
import threading as _th
import time as _t

import structlog

from mediaplan.app.metrics import BULK_SYNC_DURATION, BULK_SYNC_ITEMS
from mediaplan.domain.errors import ConfigError, SyncError
from mediaplan.domain.sync_types import SyncLedger, SyncResult
from mediaplan.domain.syncer import SingleItemSyncer
from mediaplan.infra.repo.base import CatalogStore


class BulkSyncJob:
    """Pilote `SingleItemSyncer` sur l'ensemble des assets.

    Les workers consomment une file d'indices; chaque résultat est écrit à l'indice de l'asset
    sous verrou, ce qui préserve l'ordre d'énumération quel que soit le nombre de workers.
    """

    def __init__(
        self,
        store: CatalogStore,
        syncer: SingleItemSyncer,
        max_workers: int = 4,
        page_size: int = 500,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers doit être >= 1")
        self.store = store
        self.syncer = syncer
        self.max_workers = max_workers
        self.page_size = page_size
        self._log = structlog.get_logger(__name__).bind(component="bulk_sync_job")

    def run(self, cancel_event: _th.Event | None = None) -> SyncLedger:
        """Exécute le job et retourne le registre ordonné.

        Args:
            cancel_event: Événement d'annulation optionnel; une fois positionné, plus aucun asset
                n'est planifié et les restants sont marqués `skipped`.

        Raises:
            ConfigError: fournisseur d'embeddings absent.
            EnumerationError: impossible de lister les assets.
        """
        if self.syncer.embedder is None:
            raise ConfigError("fournisseur d'embeddings non configuré")
        cancel = cancel_event or _th.Event()
        asset_ids = self.store.list_asset_ids(page_size=self.page_size)
        start = _t.perf_counter()
        self._log.info("bulk_sync_started", count=len(asset_ids), workers=self.max_workers)

        results: list[SyncResult | None] = [None] * len(asset_ids)
        lock = _th.Lock()
        work: _queue.Queue[tuple[int, str]] = _queue.Queue()
        for item in enumerate(asset_ids):
            work.put_nowait(item)

        def _worker() -> None:
            while not cancel.is_set():
                try:
                    idx, asset_id = work.get_nowait()
                except _queue.Empty:
                    return
                result = self._sync_one(asset_id)
                with lock:
                    results[idx] = result

        threads = [
            _th.Thread(target=_worker, name=f"bulk-sync-{n}", daemon=True)
            for n in range(min(self.max_workers, len(asset_ids)))
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ledger = SyncLedger(
            entries=[
                r if r is not None else SyncResult.skipped(asset_ids[i])
                for i, r in enumerate(results)
            ],
            cancelled=cancel.is_set(),
        )
        BULK_SYNC_ITEMS.labels("success").inc(ledger.succeeded)
        BULK_SYNC_ITEMS.labels("error").inc(ledger.failed)
        BULK_SYNC_ITEMS.labels("skipped").inc(ledger.skipped)
        BULK_SYNC_DURATION.observe(_t.perf_counter() - start)
        self._log.info(
            "bulk_sync_done",
            succeeded=ledger.succeeded,
            failed=ledger.failed,
            skipped=ledger.skipped,
            cancelled=ledger.cancelled,
        )
        return ledger

    def _sync_one(self, asset_id: str) -> SyncResult:
        try:
            self.syncer.sync(asset_id)
        except SyncError as err:
            return SyncResult.failure(asset_id, err.code, err.message)
        except Exception as exc:
            # un défaut inattendu reste local à l'asset, mais il est tracé et consigné
            self._log.exception("bulk_sync_unexpected_error", asset_id=asset_id)
            return SyncResult.failure(asset_id, "UNEXPECTED_ERROR", type(exc).__name__)
        return SyncResult.success(asset_id)
