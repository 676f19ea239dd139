"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
- Valider au démarrage la configuration du fournisseur d'embeddings
"""

import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediaplan.domain.errors import ConfigError

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default

EMBEDDINGS_PROVIDERS = ("openai", "azure")
THRESHOLD_GATES = ("similarity", "combined")


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "mediaplan-catalog"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    DATABASE_URL: str | None = None
    STORE_STATEMENT_TIMEOUT_MS: int = 10000

    # Fournisseur d'embeddings
    EMBEDDINGS_PROVIDER: str = "openai"  # "openai" | "azure"
    OPENAI_API_KEY: str | None = None
    EMBEDDINGS_MODEL: str = "text-embedding-ada-002"
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_INSTANCE: str | None = None
    AZURE_OPENAI_DEPLOYMENT: str | None = None
    AZURE_OPENAI_API_VERSION: str = "2023-05-15"
    EMBEDDINGS_DIM: int = 1536
    EMBEDDINGS_TIMEOUT_S: float = 30.0

    # Resynchronisation en masse
    SYNC_MAX_WORKERS: int = 4
    SYNC_PAGE_SIZE: int = 500

    # Recherche hybride
    SEARCH_MATCH_THRESHOLD: float = 0.5
    SEARCH_MATCH_COUNT: int = 20
    SEARCH_VECTOR_WEIGHT: float = 0.7
    SEARCH_LEXICAL_WEIGHT: float = 0.3
    SEARCH_THRESHOLD_GATE: str = "similarity"  # "similarity" | "combined"

    OTLP_ENDPOINT: str | None = None
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    @field_validator("EMBEDDINGS_PROVIDER", "SEARCH_THRESHOLD_GATE")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("SEARCH_MATCH_THRESHOLD")
    @classmethod
    def _threshold_in_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("SEARCH_MATCH_THRESHOLD doit être dans [0, 1]")
        return value

    @field_validator(
        "SEARCH_MATCH_COUNT", "SYNC_MAX_WORKERS", "SYNC_PAGE_SIZE", "EMBEDDINGS_DIM"
    )
    @classmethod
    def _strictly_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("doit être strictement positif")
        return value

    @field_validator("SEARCH_VECTOR_WEIGHT", "SEARCH_LEXICAL_WEIGHT", "EMBEDDINGS_TIMEOUT_S")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("doit être positif ou nul")
        return value


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()


def validate_provider_config(settings: Settings) -> None:
    """Vérifie que les identifiants du fournisseur d'embeddings sont présents.

    Appelée au démarrage (API, worker, CLI): l'absence d'identifiants est une erreur
    d'exploitation, jamais une erreur par requête. Ne journalise aucune valeur.

    Raises:
        ConfigError: si le fournisseur est inconnu ou incomplètement configuré.
    """
    provider = settings.EMBEDDINGS_PROVIDER
    if provider not in EMBEDDINGS_PROVIDERS:
        raise ConfigError(f"EMBEDDINGS_PROVIDER inconnu: {provider!r}")
    if settings.SEARCH_THRESHOLD_GATE not in THRESHOLD_GATES:
        raise ConfigError(f"SEARCH_THRESHOLD_GATE inconnu: {settings.SEARCH_THRESHOLD_GATE!r}")
    if provider == "openai":
        missing = [] if settings.OPENAI_API_KEY else ["OPENAI_API_KEY"]
    else:
        missing = [
            key
            for key in ("AZURE_OPENAI_API_KEY", "AZURE_OPENAI_INSTANCE", "AZURE_OPENAI_DEPLOYMENT")
            if not getattr(settings, key)
        ]
    if missing:
        raise ConfigError(
            "Configuration du fournisseur d'embeddings incomplète: " + ", ".join(missing)
        )
