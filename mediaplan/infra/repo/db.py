"""DB utilities for SQLAlchemy sessions/engine.

Uses the given URL, then the `DATABASE_URL` env var, then falls back to
`sqlite+pysqlite:///:memory:` for tests.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def get_engine(url: str | None = None, statement_timeout_ms: int | None = None) -> Engine:
    """Crée un moteur SQLAlchemy à partir de l'URL de base de données.

    Args:
        url: URL explicite (prioritaire sur `DATABASE_URL`).
        statement_timeout_ms: Timeout par requête (PostgreSQL uniquement).
    """
    db_url = url or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"
    kwargs: dict = {"future": True, "echo": False}
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if ":memory:" in db_url:
            # une seule base partagée par toutes les sessions
            kwargs["poolclass"] = StaticPool
    elif db_url.startswith("postgresql") and statement_timeout_ms:
        connect_args = {"options": f"-c statement_timeout={int(statement_timeout_ms)}"}
    return create_engine(db_url, connect_args=connect_args, **kwargs)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Contexte de session SQLAlchemy avec gestion automatique des transactions.

    Commit en sortie normale, rollback sur toute exception (qui est propagée).
    """
    SessionLocal = get_session_factory(engine)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
