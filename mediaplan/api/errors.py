"""Traduction des erreurs du catalogue en réponses HTTP.

Corps d'erreur uniforme: `{"error": str, "code": str, "retryable": bool}`. Le code permet de
distinguer un problème de configuration (opérateur), un échec transitoire (ré-invoquer) et un
échec permanent.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mediaplan.core.http_constants import HTTP_BAD_REQUEST, HTTP_INTERNAL_SERVER_ERROR
from mediaplan.domain.errors import CatalogError, EmptyQueryError

log = structlog.get_logger(__name__)

# routes dont les entrées mal typées sont des requêtes invalides (400), pas des 422
BAD_REQUEST_PREFIXES = ("/search/",)

# Les autres erreurs du catalogue sont des échecs côté serveur.
STATUS_BY_ERROR: dict[type[CatalogError], int] = {
    EmptyQueryError: HTTP_BAD_REQUEST,
}


def status_for(err: CatalogError) -> int:
    for cls in type(err).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return HTTP_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int, message: str, code: str = "BAD_REQUEST", retryable: bool = False
) -> JSONResponse:
    """Construit une réponse d'erreur au format du catalogue."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code, "retryable": retryable},
    )


def handle_catalog_error(request: Request, exc: CatalogError) -> JSONResponse:
    """Handler FastAPI pour toute `CatalogError` non traitée par la route."""
    status_code = status_for(exc)
    log.warning(
        "catalog_error",
        path=request.url.path,
        code=exc.code,
        status_code=status_code,
    )
    return error_response(status_code, exc.message, exc.code, exc.retryable)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 au format du catalogue pour la recherche; 422 FastAPI standard ailleurs."""
    if request.url.path.startswith(BAD_REQUEST_PREFIXES):
        fields = sorted(
            {".".join(str(p) for p in e.get("loc", ())[1:]) for e in exc.errors()} - {""}
        )
        message = "Invalid parameters" + (": " + ", ".join(fields) if fields else "")
        return error_response(HTTP_BAD_REQUEST, message)
    return await request_validation_exception_handler(request, exc)


def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Dernier recours: toute exception hors catalogue devient un 500 au format commun."""
    log.error(
        "unexpected_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response(HTTP_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, handle_catalog_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
