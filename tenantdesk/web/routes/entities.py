"""
Routes génériques par entité.

    POST   /api/{entity}/page-data   page de liste (filtres, tri, recherche, pagination)
    POST   /api/{entity}             création
    GET    /api/{entity}/{id}        détail
    PUT    /api/{entity}/{id}        mise à jour
    DELETE /api/{entity}/{id}        suppression
"""

from typing import Any, Optional

from fastapi import APIRouter, Body
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as PayloadValidationError

from ...core.exceptions import ConfigurationError, NotFoundError, ValidationError
from ...infrastructure.conversion import entity_from_payload
from ...services.usecases import EntityUseCases, PageDataRequest, UseCaseCatalog
from ..deps import CatalogDep, ContextDep
from ..schemas import PageDataSchema, describe_errors

router = APIRouter(prefix="/api", tags=["entities"])


def _use_cases(catalog: UseCaseCatalog, entity: str) -> EntityUseCases:
    try:
        return catalog.entity(entity)
    except ConfigurationError as err:
        raise NotFoundError(f"unknown entity: {entity}", "errors.unknown_entity") from err


def _parse_entity(catalog: UseCaseCatalog, entity: str, data: dict[str, Any], entity_id: Optional[str] = None):
    definition = catalog.definition(entity)
    if entity_id is not None:
        data = {**data, "id": entity_id}
    try:
        return entity_from_payload(definition.accessor.entity_type, data)
    except PayloadValidationError as err:
        raise ValidationError(
            f"invalid {entity} payload: {describe_errors(err.errors())}", f"{entity}.validation.invalid_payload"
        ) from err


@router.post("/{entity}/page-data")
def page_data(entity: str, ctx: ContextDep, catalog: CatalogDep, body: Optional[PageDataSchema] = None):
    use_cases = _use_cases(catalog, entity)
    request = PageDataRequest(**(body or PageDataSchema()).to_value_objects())
    return jsonable_encoder(use_cases.list_page_data.execute(ctx, request))


@router.post("/{entity}", status_code=201)
def create(entity: str, ctx: ContextDep, catalog: CatalogDep, data: dict[str, Any] = Body(...)):
    use_cases = _use_cases(catalog, entity)
    return jsonable_encoder(use_cases.create.execute(ctx, _parse_entity(catalog, entity, data)))


@router.get("/{entity}/{entity_id}")
def read(entity: str, entity_id: str, ctx: ContextDep, catalog: CatalogDep):
    use_cases = _use_cases(catalog, entity)
    return jsonable_encoder(use_cases.item_page_data.execute(ctx, entity_id))


@router.put("/{entity}/{entity_id}")
def update(entity: str, entity_id: str, ctx: ContextDep, catalog: CatalogDep, data: dict[str, Any] = Body(...)):
    use_cases = _use_cases(catalog, entity)
    return jsonable_encoder(use_cases.update.execute(ctx, _parse_entity(catalog, entity, data, entity_id)))


@router.delete("/{entity}/{entity_id}")
def delete(entity: str, entity_id: str, ctx: ContextDep, catalog: CatalogDep):
    use_cases = _use_cases(catalog, entity)
    return jsonable_encoder(use_cases.delete.execute(ctx, entity_id))
