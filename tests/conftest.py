"""Configuration de test pour pytest avec gestion des chemins et fixtures du catalogue.

Ajoute la racine du projet au sys.path et fournit une base SQLite fichier par test, le
repository, un fournisseur d'embeddings factice et un conteneur prêt à l'emploi.
"""

import os
import sys

import pytest
import structlog

# Ensure project root is on sys.path so that
# imports like `from mediaplan...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mediaplan.core.container import Container  # noqa: E402
from mediaplan.infra.repo.asset_repo import AssetRepository  # noqa: E402
from mediaplan.infra.repo.db import get_engine  # noqa: E402
from mediaplan.infra.repo.models import Base  # noqa: E402
from tests.fakes import TEST_DIM, FakeEmbeddings, make_settings  # noqa: E402


@pytest.fixture(autouse=True)
def reset_structlog():
    """Rétablit la configuration structlog par défaut après chaque test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def engine(tmp_path):
    eng = get_engine(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return AssetRepository(engine, dimensions=TEST_DIM)


@pytest.fixture
def fake_embedder():
    return FakeEmbeddings()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def container(settings, engine, fake_embedder):
    return Container(settings, engine=engine, embedder=fake_embedder)
