"""
Dépendances partagées de l'application web.

Fournit le catalogue des cas d'utilisation (depuis le Container stocké
sur app.state) et le contexte d'appel construit depuis les en-têtes.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from ..core.value_objects import RequestContext
from ..services.usecases import UseCaseCatalog


def get_container(request: Request):
    return request.app.state.container


def get_catalog(request: Request) -> UseCaseCatalog:
    return get_container(request).catalog()


def get_context(
    request: Request,
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_business_type: Annotated[Optional[str], Header()] = None,
    accept_language: Annotated[Optional[str], Header()] = None,
) -> RequestContext:
    """
    Contexte d'appel : X-User-Id, X-Business-Type (défaut : configuration)
    et la première langue d'Accept-Language.
    """
    config = get_container(request).config()
    locale = "en"
    if accept_language:
        locale = accept_language.split(",")[0].split(";")[0].strip() or "en"
    return RequestContext(
        user_id=x_user_id or None,
        business_type=x_business_type or config.business_type,
        locale=locale,
    )


CatalogDep = Annotated[UseCaseCatalog, Depends(get_catalog)]
ContextDep = Annotated[RequestContext, Depends(get_context)]
