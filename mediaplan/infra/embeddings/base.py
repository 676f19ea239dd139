"""
Interface de base pour les générateurs d'embeddings.

Ce module définit l'interface abstraite que doivent implémenter tous les fournisseurs
d'embeddings vectoriels, ainsi que le contrôle de forme commun des réponses.
"""

from abc import ABC, abstractmethod

from mediaplan.domain.errors import ProviderPermanentError


class Embeddings(ABC):
    """Interface abstraite pour les générateurs d'embeddings.

    Un fournisseur ne conserve aucun état entre deux appels et ne fait jamais de retry: la
    politique de retry appartient aux appelants.
    """

    name = "abstract"
    dimensions: int

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Génère un vecteur par texte (textes non vides)."""
        ...

    def embed_one(self, text: str) -> list[float]:
        """Raccourci pour un texte unique."""
        return self.embed([text])[0]


def check_inputs(texts: list[str]) -> None:
    """Rejette les entrées vides avant tout appel réseau."""
    if not texts or any(not (t or "").strip() for t in texts):
        raise ProviderPermanentError("les textes à vectoriser doivent être non vides")


def check_vectors(vectors: list[list[float]], expected_count: int, dimensions: int) -> None:
    """Vérifie le nombre et la dimension des vecteurs renvoyés par le fournisseur."""
    if len(vectors) != expected_count:
        raise ProviderPermanentError(
            f"{len(vectors)} vecteurs reçus pour {expected_count} textes"
        )
    for vec in vectors:
        if len(vec) != dimensions:
            raise ProviderPermanentError(
                f"dimension d'embedding inattendue: {len(vec)} (attendu {dimensions})"
            )
