"""Tests des tâches Celery d'embeddings (exécution directe, sans broker)."""

import pytest

from mediaplan.domain.errors import AssetNotFoundError, ProviderTransientError
from mediaplan.tasks import embedding_tasks
from tests.fakes import seed, stored_embedding


@pytest.fixture(autouse=True)
def closed(monkeypatch, container):
    """Compte les libérations du conteneur construit par chaque tâche."""
    calls = []
    monkeypatch.setattr(embedding_tasks, "build_container", lambda: container)
    monkeypatch.setattr(container, "close", lambda: calls.append(True))
    return calls


def test_resync_asset(engine):
    seed(engine, assets=[{"id": "a1", "name": "Banner"}])
    assert embedding_tasks.resync_asset("a1") == "ok"
    assert stored_embedding(engine, "a1") is not None


def test_resync_asset_unknown_is_not_retried():
    assert ProviderTransientError in embedding_tasks.resync_asset.autoretry_for
    assert AssetNotFoundError not in embedding_tasks.resync_asset.autoretry_for
    with pytest.raises(AssetNotFoundError):
        embedding_tasks.resync_asset.run("missing")


def test_regenerate_all_embeddings(engine):
    seed(engine, assets=[{"id": "a1", "name": "Banner"}, {"id": "a2", "name": "Video"}])
    summary = embedding_tasks.regenerate_all_embeddings()
    assert summary["processed_count"] == 2
    assert summary["failed_count"] == 0


def test_each_task_releases_its_container(engine, closed):
    seed(engine, assets=[{"id": "a1", "name": "Banner"}])
    embedding_tasks.resync_asset("a1")
    embedding_tasks.regenerate_all_embeddings()
    assert len(closed) == 2


def test_container_is_released_when_sync_fails(closed):
    with pytest.raises(AssetNotFoundError):
        embedding_tasks.resync_asset.run("missing")
    assert closed == [True]
