"""
Application FastAPI de TenantDesk.

Initialise l'application web avec le Container DI, monte les routes
et convertit les erreurs des cas d'utilisation en réponses JSON
{"error": <type>, "message": <message traduit>}.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from ..container import Container
from ..core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    ConfigurationError,
    NotFoundError,
    OperationFailedError,
    RepositoryError,
    UseCaseError,
    ValidationError,
)
from .routes.entities import router as entities_router
from .routes.licenses import router as licenses_router
from .schemas import ErrorSchema, describe_errors

# Code HTTP par type d'erreur de cas d'utilisation
STATUS_CODES: dict[type, int] = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    BusinessRuleError: 409,
    OperationFailedError: 500,
}

# Documentation OpenAPI des réponses d'erreur
ERROR_RESPONSES: dict[int, dict] = {status: {"model": ErrorSchema} for status in sorted(set(STATUS_CODES.values()))}


def status_for(err: UseCaseError) -> int:
    for error_cls, status in STATUS_CODES.items():
        if isinstance(err, error_cls):
            return status
    return 500


def _error(status: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorSchema(error=kind, message=message).model_dump())


async def use_case_error_handler(request: Request, err: UseCaseError) -> JSONResponse:
    status = status_for(err)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} : {err.message}")
    return _error(status, err.kind, err.message)


async def request_validation_handler(request: Request, err: RequestValidationError) -> JSONResponse:
    details = describe_errors(err.errors())
    return _error(400, ValidationError.kind, details or "invalid request")


async def storage_error_handler(request: Request, err: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} : {err}")
    return _error(500, OperationFailedError.kind, str(err))


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Construit l'application.

    Args :
        container : Container à utiliser (les tests injectent le leur) ;
            un Container neuf est créé au démarrage sinon.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise le Container DI au démarrage."""
        app.state.container = container or Container()
        yield

    app = FastAPI(title="TenantDesk", lifespan=lifespan)

    app.add_exception_handler(UseCaseError, use_case_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RepositoryError, storage_error_handler)
    app.add_exception_handler(ConfigurationError, storage_error_handler)

    # Les routes de licence passent avant les routes génériques /api/{entity}
    app.include_router(licenses_router, responses=ERROR_RESPONSES)
    app.include_router(entities_router, responses=ERROR_RESPONSES)
    return app


app = create_app()
