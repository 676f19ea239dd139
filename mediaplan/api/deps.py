"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Exposer aux endpoints le conteneur construit au démarrage (`app.state.container`).
- Permettre aux tests de fournir leur propre conteneur sans patcher de variable globale.
"""

from fastapi import Request

from mediaplan.core.container import Container


def get_container(request: Request) -> Container:
    """Retourne le conteneur attaché à l'application."""
    return request.app.state.container
