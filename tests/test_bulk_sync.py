"""Tests du job de resynchronisation en masse (isolation, ordre, annulation)."""

import threading

import pytest

from mediaplan.domain.bulk_sync import BulkSyncJob
from mediaplan.domain.errors import ConfigError, EnumerationError, PersistError
from mediaplan.domain.sync_types import SyncStatus
from mediaplan.domain.syncer import SingleItemSyncer
from mediaplan.infra.repo.asset_repo import AssetRepository
from mediaplan.infra.repo.db import get_engine
from tests.fakes import TEST_DIM, FakeEmbeddings, seed, stored_embedding

ASSET_COUNT = 10
BROKEN_INDEX = 4


def _seed_catalog(engine):
    seed(
        engine,
        assets=[
            {"id": f"a{i:02d}", "name": "broken asset" if i == BROKEN_INDEX else f"asset {i}"}
            for i in range(ASSET_COUNT)
        ],
    )


class _Store:
    """Délègue au repository réel, avec des pannes ciblées."""

    def __init__(self, repo, persist_fail=(), crash_on=()):
        self._repo = repo
        self._persist_fail = set(persist_fail)
        self._crash_on = set(crash_on)

    def __getattr__(self, name):
        return getattr(self._repo, name)

    def get_with_platform(self, asset_id):
        if asset_id in self._crash_on:
            raise RuntimeError("unexpected")
        return self._repo.get_with_platform(asset_id)

    def save_embedding(self, asset_id, vector):
        if asset_id in self._persist_fail:
            raise PersistError("write failed")
        self._repo.save_embedding(asset_id, vector)


@pytest.mark.parametrize("workers", [1, 2, 4])
def test_one_failure_never_aborts_the_batch(engine, repo, workers):
    _seed_catalog(engine)
    embedder = FakeEmbeddings(fail_on={"broken"})
    job = BulkSyncJob(repo, SingleItemSyncer(repo, embedder), max_workers=workers)

    ledger = job.run()

    expected_order = repo.list_asset_ids()
    assert [e.asset_id for e in ledger.entries] == expected_order
    assert ledger.succeeded == ASSET_COUNT - 1
    assert ledger.failed == 1
    failed = [e for e in ledger.entries if not e.ok]
    assert failed[0].asset_id == f"a{BROKEN_INDEX:02d}"
    assert failed[0].code == "PROVIDER_PERMANENT"
    assert stored_embedding(engine, f"a{BROKEN_INDEX:02d}") is None
    assert all(stored_embedding(engine, e.asset_id) is not None for e in ledger.entries if e.ok)


def test_summary_shape(engine, repo, fake_embedder):
    _seed_catalog(engine)
    summary = BulkSyncJob(repo, SingleItemSyncer(repo, fake_embedder)).run().summary()
    assert summary["processed_count"] == ASSET_COUNT
    assert summary["failed_count"] == 0
    assert summary["message"] == f"Successfully processed {ASSET_COUNT} assets (0 failed)"
    assert summary["results"][0] == {"id": repo.list_asset_ids()[0], "status": "success"}


def test_empty_catalog(repo, fake_embedder):
    ledger = BulkSyncJob(repo, SingleItemSyncer(repo, fake_embedder)).run()
    assert len(ledger) == 0
    assert ledger.message == "No assets found to process"


def test_persist_and_unexpected_failures_are_isolated(engine, repo, fake_embedder):
    _seed_catalog(engine)
    store = _Store(repo, persist_fail={"a01"}, crash_on={"a02"})
    ledger = BulkSyncJob(store, SingleItemSyncer(store, fake_embedder), max_workers=3).run()
    by_id = {e.asset_id: e for e in ledger.entries}
    assert by_id["a01"].code == "PERSIST_ERROR"
    assert by_id["a02"].code == "UNEXPECTED_ERROR"
    assert ledger.succeeded == ASSET_COUNT - 2
    assert by_id["a02"].to_dict()["status"] == "error"


def test_cancel_before_start_skips_everything(engine, repo, fake_embedder):
    _seed_catalog(engine)
    cancel = threading.Event()
    cancel.set()
    ledger = BulkSyncJob(repo, SingleItemSyncer(repo, fake_embedder)).run(cancel_event=cancel)
    assert ledger.cancelled
    assert ledger.skipped == ASSET_COUNT
    assert fake_embedder.calls == []


class _CancellingEmbeddings(FakeEmbeddings):
    def __init__(self, event, **kw):
        super().__init__(**kw)
        self.event = event

    def embed(self, texts):
        out = super().embed(texts)
        self.event.set()
        return out


def test_cancel_midway_finishes_inflight_and_skips_rest(engine, repo):
    _seed_catalog(engine)
    cancel = threading.Event()
    embedder = _CancellingEmbeddings(cancel)
    ledger = BulkSyncJob(repo, SingleItemSyncer(repo, embedder), max_workers=1).run(
        cancel_event=cancel
    )
    statuses = [e.status for e in ledger.entries]
    assert statuses[0] is SyncStatus.SUCCESS
    assert all(s is SyncStatus.SKIPPED for s in statuses[1:])
    assert len(ledger) == ASSET_COUNT
    assert len(embedder.calls) == 1


def test_enumeration_failure_refuses_to_start(tmp_path, fake_embedder):
    # base sans tables: la lecture échoue
    broken = AssetRepository(get_engine(f"sqlite+pysqlite:///{tmp_path / 'empty.db'}"), TEST_DIM)
    with pytest.raises(EnumerationError):
        BulkSyncJob(broken, SingleItemSyncer(broken, fake_embedder)).run()
    assert fake_embedder.calls == []


def test_missing_provider_is_config_error(repo):
    with pytest.raises(ConfigError):
        BulkSyncJob(repo, SingleItemSyncer(repo, None)).run()


def test_invalid_worker_count(repo, fake_embedder):
    with pytest.raises(ValueError):
        BulkSyncJob(repo, SingleItemSyncer(repo, fake_embedder), max_workers=0)


class _GatedEmbeddings(FakeEmbeddings):
    """Retient chaque appel sur une barrière et mesure le nombre d'appels simultanés."""

    def __init__(self, parties, **kw):
        super().__init__(**kw)
        self.barrier = threading.Barrier(parties, timeout=5)
        self.in_flight = 0
        self.peak = 0
        self._gauge = threading.Lock()

    def embed(self, texts):
        with self._gauge:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            self.barrier.wait()
            return super().embed(texts)
        finally:
            with self._gauge:
                self.in_flight -= 1


@pytest.mark.parametrize(
    ("workers", "count"),
    [(1, 12), (2, 12), (4, 12), (4, 2)],
)
def test_concurrency_is_bounded_by_worker_count(engine, repo, workers, count):
    seed(engine, assets=[{"id": f"a{i:02d}", "name": f"asset {i}"} for i in range(count)])
    embedder = _GatedEmbeddings(min(workers, count))
    job = BulkSyncJob(repo, SingleItemSyncer(repo, embedder), max_workers=workers)

    ledger = job.run()

    assert embedder.peak == min(workers, count)
    assert ledger.succeeded == count
    assert ledger.failed == 0
