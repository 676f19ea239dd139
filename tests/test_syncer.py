"""Tests de la synchronisation unitaire (composer -> vectoriser -> persister)."""

import pytest

from mediaplan.domain.errors import (
    AssetNotFoundError,
    EmptyContentError,
    PersistError,
    PlatformNotFoundError,
    ProviderTransientError,
)
from mediaplan.domain.syncer import SingleItemSyncer
from tests.fakes import FakeEmbeddings, seed, stored_embedding

PREVIOUS = [9.0, 9.0, 9.0]


class FailingSaveStore:
    """Délègue au repository réel mais échoue à l'écriture."""

    def __init__(self, repo):
        self._repo = repo

    def __getattr__(self, name):
        return getattr(self._repo, name)

    def save_embedding(self, asset_id, vector):
        raise PersistError("disk full")


def test_sync_writes_vector_once(engine, repo, fake_embedder):
    seed(
        engine,
        platforms=[{"id": "p1", "name": "Acme", "industry": "Retail"}],
        assets=[{"id": "a1", "name": "Summer banner", "platform_id": "p1"}],
    )
    SingleItemSyncer(repo, fake_embedder).sync("a1")
    assert len(fake_embedder.calls) == 1
    assert "Acme Retail" in fake_embedder.calls[0]
    assert stored_embedding(engine, "a1") == fake_embedder._default(fake_embedder.calls[0])


def test_sync_unknown_asset(repo, fake_embedder):
    with pytest.raises(AssetNotFoundError):
        SingleItemSyncer(repo, fake_embedder).sync("missing")
    assert fake_embedder.calls == []


def test_sync_empty_content_makes_no_call(engine, repo, fake_embedder):
    seed(engine, assets=[{"id": "a1", "name": "", "description": "   "}])
    with pytest.raises(EmptyContentError):
        SingleItemSyncer(repo, fake_embedder).sync("a1")
    assert fake_embedder.calls == []
    assert stored_embedding(engine, "a1") is None


def test_provider_failure_keeps_previous_vector(engine, repo):
    seed(engine, assets=[{"id": "a1", "name": "Summer", "embedding": PREVIOUS}])
    embedder = FakeEmbeddings(fail_on={"Summer"}, error=ProviderTransientError("timeout"))
    with pytest.raises(ProviderTransientError) as exc_info:
        SingleItemSyncer(repo, embedder).sync("a1")
    assert exc_info.value.retryable is True
    assert stored_embedding(engine, "a1") == PREVIOUS


def test_persist_failure_keeps_previous_vector(engine, repo, fake_embedder):
    seed(engine, assets=[{"id": "a1", "name": "Summer", "embedding": PREVIOUS}])
    with pytest.raises(PersistError):
        SingleItemSyncer(FailingSaveStore(repo), fake_embedder).sync("a1")
    assert stored_embedding(engine, "a1") == PREVIOUS


def test_sync_platform(engine, repo, fake_embedder):
    seed(engine, platforms=[{"id": "p1", "name": "Acme", "industry": "Retail"}], assets=[])
    SingleItemSyncer(repo, fake_embedder).sync_platform("p1")
    assert repo.get_platform("p1").embedding is not None


def test_sync_unknown_platform(repo, fake_embedder):
    with pytest.raises(PlatformNotFoundError):
        SingleItemSyncer(repo, fake_embedder).sync_platform("nope")
