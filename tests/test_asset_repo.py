"""Tests du repository SQL du catalogue."""

import pytest

from mediaplan.domain.errors import (
    AssetNotFoundError,
    PersistError,
    RetrievalBackendError,
)
from mediaplan.infra.repo.asset_repo import AssetRepository
from mediaplan.infra.repo.db import get_engine
from tests.fakes import TEST_DIM, seed, stored_embedding

ASSET_COUNT = 7


@pytest.fixture
def broken_repo(tmp_path):
    # base sans tables
    return AssetRepository(get_engine(f"sqlite+pysqlite:///{tmp_path / 'empty.db'}"), TEST_DIM)


def test_list_asset_ids_is_independent_of_page_size(engine, repo):
    seed(engine, assets=[{"id": f"a{i}", "name": f"n{i}"} for i in range(ASSET_COUNT)])
    full = repo.list_asset_ids(page_size=500)
    assert full == [f"a{i}" for i in reversed(range(ASSET_COUNT))]
    for size in (1, 2, 3, ASSET_COUNT):
        assert repo.list_asset_ids(page_size=size) == full


def test_get_with_platform(engine, repo):
    seed(
        engine,
        platforms=[{"id": "p1", "name": "Acme", "audience_data": {"age": "25-34"}}],
        assets=[{"id": "a1", "name": "Banner", "platform_id": "p1", "tags": ["summer"]}],
    )
    asset, platform = repo.get_with_platform("a1")
    assert asset.tags == ["summer"]
    assert platform.audience_data == {"age": "25-34"}
    assert repo.get_with_platform("missing") is None


def test_save_embedding_overwrites(engine, repo):
    seed(engine, assets=[{"id": "a1", "name": "Banner", "embedding": [0.0, 0.0, 1.0]}])
    repo.save_embedding("a1", [1.0, 2.0, 3.0])
    assert stored_embedding(engine, "a1") == [1.0, 2.0, 3.0]


def test_save_embedding_unknown_asset(repo):
    with pytest.raises(AssetNotFoundError):
        repo.save_embedding("missing", [1.0, 2.0, 3.0])


def test_store_failures_are_typed(broken_repo):
    with pytest.raises(PersistError):
        broken_repo.save_embedding("a1", [1.0, 2.0, 3.0])
    with pytest.raises(RetrievalBackendError):
        broken_repo.hybrid_match([1.0, 0.0, 0.0], "query", 0.5, 10)


def test_hybrid_match_rejects_query_of_wrong_dimension(repo):
    with pytest.raises(RetrievalBackendError):
        repo.hybrid_match([1.0, 0.0], "query", 0.5, 10)


def test_hybrid_match_reads_latest_vectors(engine, repo):
    seed(engine, assets=[{"id": "a1", "name": "Banner", "embedding": [0.0, 1.0, 0.0]}])
    assert repo.hybrid_match([1.0, 0.0, 0.0], "q", 0.5, 10) == []
    repo.save_embedding("a1", [1.0, 0.0, 0.0])
    assert [m.asset_id for m in repo.hybrid_match([1.0, 0.0, 0.0], "q", 0.5, 10)] == ["a1"]


def test_loose_tags_are_normalised(engine, repo):
    seed(
        engine,
        assets=[
            {"id": "a1", "name": "single", "tags": "summer"},
            {"id": "a2", "name": "numbers", "tags": [1, 2, None]},
            {"id": "a3", "name": "object", "tags": {"season": "summer"}},
        ],
    )
    assert repo.get_with_platform("a1")[0].tags == ["summer"]
    assert repo.get_with_platform("a2")[0].tags == ["1", "2"]
    assert repo.get_with_platform("a3")[0].tags == []


def test_non_numeric_vectors_are_skipped(engine, repo):
    seed(
        engine,
        assets=[
            {"id": "ok", "name": "ok", "embedding": [1.0, 0.0, 0.0]},
            {"id": "words", "name": "words", "embedding": ["a", "b", "c"]},
            {"id": "holes", "name": "holes", "embedding": [1.0, None, 0.0]},
            {"id": "scalar", "name": "scalar", "embedding": 1.0},
        ],
    )
    matches = repo.hybrid_match([1.0, 0.0, 0.0], "query", 0.0, 10)
    assert [m.asset_id for m in matches] == ["ok"]
    assert repo.get_with_platform("words")[0].embedding is None
