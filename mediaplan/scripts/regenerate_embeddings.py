"""
Régénère les embeddings du catalogue depuis la ligne de commande.

Sans argument, recalcule le vecteur de tous les assets (pool borné) et imprime le résumé
JSON du lot. Avec `--asset` / `--platform`, resynchronise un seul élément.

Environment:
- DATABASE_URL: base cible.
- EMBEDDINGS_PROVIDER + identifiants (OPENAI_API_KEY ou AZURE_OPENAI_*).

Codes de sortie: 0 si le lot a tourné (même avec des échecs unitaires), 1 si le job a
refusé de démarrer ou si la resynchronisation unitaire a échoué.
"""

from __future__ import annotations

import argparse
import json
import sys

import structlog

from mediaplan.core.container import build_container
from mediaplan.core.logging import setup_logging
from mediaplan.core.settings import get_settings
from mediaplan.domain.errors import CatalogError
from mediaplan.infra.repo.models import Base

log = structlog.get_logger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Régénération des embeddings du catalogue")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--asset", help="identifiant d'un asset à resynchroniser")
    target.add_argument("--platform", help="identifiant d'une plateforme à resynchroniser")
    parser.add_argument("--workers", type=int, default=None, help="taille du pool (bulk)")
    parser.add_argument(
        "--create-tables", action="store_true", help="crée le schéma si absent (dev/CI)"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    if args.workers is not None:
        settings = settings.model_copy(update={"SYNC_MAX_WORKERS": max(1, args.workers)})
    setup_logging(settings.APP_ENV, settings.APP_DEBUG, stream=sys.stderr)
    container = build_container(settings)
    if args.create_tables:
        Base.metadata.create_all(container.engine)

    try:
        container.validate()
        if args.asset or args.platform:
            syncer = container.syncer()
            if args.asset:
                syncer.sync(args.asset)
            else:
                syncer.sync_platform(args.platform)
            print(json.dumps({"success": True}))
            return 0
        ledger = container.bulk_job().run()
    except CatalogError as exc:
        log.error("regenerate_refused", code=exc.code, error=exc.message)
        print(json.dumps({"success": False, "error": exc.message, "code": exc.code}))
        return 1
    finally:
        container.close()
    print(json.dumps(ledger.summary(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
