# ============================================================
# Module : mediaplan/domain/content.py
# Objet  : Texte canonique d'un asset (entrée du fournisseur d'embeddings).
# Invariants :
#  - Fonction pure: mêmes entrées -> mêmes octets.
#  - Jamais d'exception sur un champ optionnel malformé.
# ============================================================
"""Composition déterministe du contenu à vectoriser.

L'ordre des segments est fixe: nom, description, type, catégorie, puis, uniquement si une
plateforme est liée, nom et secteur de la plateforme suivis de la sérialisation JSON (clés
triées) de ses données d'audience et de répartition par appareil.
"""

from __future__ import annotations

import json
from typing import Any

from mediaplan.domain.entities import Asset, Platform

SEPARATOR = " "


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def serialize_attributes(value: Any) -> str:
    """Sérialise des attributs imbriqués de façon stable (clés triées, séparateurs compacts).

    Les valeurs absentes donnent une chaîne vide; les valeurs non sérialisables en JSON sont
    converties en texte plutôt que de lever une exception.
    """
    if value is None or value == {} or value == []:
        return ""
    if isinstance(value, str):
        return value.strip()
    try:
        return json.dumps(
            value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
        )
    except (TypeError, ValueError):
        # clés mixtes non triables, références circulaires
        return _text(value)


def compose(asset: Asset, platform: Platform | None = None) -> str:
    """Construit le texte canonique d'un asset.

    Args:
        asset: Asset à décrire.
        platform: Plateforme liée, ou None.

    Returns:
        str: Contenu à transmettre au fournisseur d'embeddings.
    """
    parts = [
        _text(asset.name),
        _text(asset.description),
        _text(asset.type),
        _text(asset.category),
    ]
    if platform is not None:
        parts.extend(
            [
                _text(platform.name),
                _text(platform.industry),
                serialize_attributes(platform.audience_data),
                serialize_attributes(platform.device_split),
            ]
        )
    return SEPARATOR.join(parts)


def has_content(asset: Asset) -> bool:
    """Indique si l'asset porte au moins un nom, une description ou un type."""
    return any(_text(v) for v in (asset.name, asset.description, asset.type))


def compose_platform(platform: Platform) -> str:
    """Construit le texte canonique d'une plateforme (vecteur propre à la plateforme)."""
    return SEPARATOR.join(
        [
            _text(platform.name),
            _text(platform.industry),
            _text(platform.description),
            serialize_attributes(platform.audience_data),
            serialize_attributes(platform.device_split),
            serialize_attributes(platform.campaign_data),
        ]
    )


def platform_has_content(platform: Platform) -> bool:
    return any(_text(v) for v in (platform.name, platform.industry, platform.description))
