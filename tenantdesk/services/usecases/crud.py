"""
Cas d'utilisation génériques par entité.

Create / Read / Update / Delete / List / GetListPageData / GetItemPageData,
paramètres par une EntityDefinition et un repository.
"""

import dataclasses
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from tenantdesk.core.exceptions import OperationFailedError
from tenantdesk.core.ports.repositories import IEntityRepository
from tenantdesk.core.value_objects.context import Action, RequestContext
from tenantdesk.core.value_objects.listing import (
    FilterRequest,
    PageResult,
    PaginationRequest,
    SearchRequest,
    SortRequest,
)
from tenantdesk.services.listing.processor import ListDataProcessor
from tenantdesk.services.usecases.base import UseCase, UseCaseServices, utcnow
from tenantdesk.services.usecases.definitions import EntityDefinition

T = TypeVar("T")
Req = TypeVar("Req")
Resp = TypeVar("Resp")


@dataclass(frozen=True)
class ListRequest:
    filters: Optional[FilterRequest] = None


@dataclass(frozen=True)
class PageDataRequest:
    """Requête de page de liste : les quatre parties sont optionnelles."""

    pagination: Optional[PaginationRequest] = None
    filters: Optional[FilterRequest] = None
    sort: Optional[SortRequest] = None
    search: Optional[SearchRequest] = None


class EntityUseCase(UseCase[Req, Resp]):
    """Base des cas d'utilisation liés à une entité et à son repository."""

    def __init__(
        self,
        definition: EntityDefinition,
        repository: IEntityRepository,
        services: UseCaseServices,
    ) -> None:
        super().__init__(services)
        self.definition = definition
        self.repository = repository
        self.entity = definition.name

    def require_id(self, ctx: RequestContext, entity_id: Optional[str]) -> None:
        if not entity_id or not str(entity_id).strip():
            raise self.invalid(ctx, "id_required", "{entity} ID is required", entity=self.entity)

    def check_entity(self, ctx: RequestContext, entity: object) -> None:
        """Verifie le type, les champs obligatoires et les règles de l'entité."""
        if not isinstance(entity, self.definition.entity_type):
            raise self.invalid(
                ctx,
                "invalid_type",
                "expected a {expected}",
                expected=self.definition.entity_type.__name__,
            )
        for name in self.definition.required_fields:
            value = getattr(entity, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise self.invalid(ctx, f"{name}_required", "{field} is required", field=name)
        if self.definition.check is not None:
            violations = self.definition.check(entity)
            if violations:
                first = violations[0]
                raise self.invalid(ctx, first.rule, first.default, **first.params)

    def validate_field_names(self, ctx: RequestContext, names: list[str], kind: str) -> None:
        for index, name in enumerate(names):
            if not name:
                raise self.invalid(
                    ctx,
                    f"{kind}_field_required",
                    "{kind} field is required for {kind} {index}",
                    kind=kind,
                    index=index,
                )
            if name not in self.definition.allowed_fields:
                raise self.invalid(
                    ctx,
                    f"invalid_{kind}_field",
                    "invalid {kind} field: {field}",
                    kind=kind,
                    field=name,
                )

    def validate_filter_request(self, ctx: RequestContext, filters: Optional[FilterRequest]) -> None:
        if filters is None:
            return
        if not filters.filters:
            raise self.invalid(
                ctx, "empty_filters", "filters cannot be empty when filter request is provided"
            )
        self.validate_field_names(ctx, filters.field_names(), "filter")


class CreateEntityUseCase(EntityUseCase[T, T], Generic[T]):
    action = Action.CREATE
    failure_key = "creation_failed"
    failure_default = "creation failed"

    def validate_input(self, ctx: RequestContext, request: T) -> None:
        super().validate_input(ctx, request)
        self.check_entity(ctx, request)

    def enrich(self, ctx: RequestContext, request: T) -> T:
        entity = dataclasses.replace(request)
        if not entity.id:
            entity.id = self.new_id()
        now = utcnow()
        entity.date_created = now
        entity.date_modified = now
        entity.active = True
        if self.definition.normalize is not None:
            self.definition.normalize(entity)
        return entity

    def execute_core(self, ctx: RequestContext, request: T) -> T:
        return self.repository.create(request)


class ReadEntityUseCase(EntityUseCase[str, T], Generic[T]):
    action = Action.READ
    failure_key = "read_failed"
    failure_default = "read failed"

    def validate_input(self, ctx: RequestContext, request: str) -> None:
        self.require_id(ctx, request)

    def execute_core(self, ctx: RequestContext, request: str) -> T:
        return self.repository.read(request)


class UpdateEntityUseCase(EntityUseCase[T, T], Generic[T]):
    action = Action.UPDATE
    failure_key = "update_failed"
    failure_default = "update failed"

    def validate_input(self, ctx: RequestContext, request: T) -> None:
        super().validate_input(ctx, request)
        self.require_id(ctx, getattr(request, "id", None))
        self.check_entity(ctx, request)

    def enrich(self, ctx: RequestContext, request: T) -> T:
        entity = dataclasses.replace(request)
        entity.date_modified = utcnow()
        if self.definition.normalize is not None:
            self.definition.normalize(entity)
        return entity

    def check_update(self, ctx: RequestContext, existing: T, entity: T) -> None:
        """Point d'extension : règles comparant l'état stocké et l'état demandé."""

    def execute_core(self, ctx: RequestContext, request: T) -> T:
        existing = self.repository.read(request.id)
        self.check_update(ctx, existing, request)
        request.date_created = existing.date_created
        return self.repository.update(request)


class DeleteEntityUseCase(EntityUseCase[str, T], Generic[T]):
    """Supprime une entité et retourne l'état supprimé."""

    action = Action.DELETE
    failure_key = "deletion_failed"
    failure_default = "deletion failed"

    def validate_input(self, ctx: RequestContext, request: str) -> None:
        self.require_id(ctx, request)

    def execute_core(self, ctx: RequestContext, request: str) -> T:
        entity = self.repository.read(request)
        self.repository.delete(request)
        return entity


class ListEntitiesUseCase(EntityUseCase[ListRequest, list], Generic[T]):
    action = Action.LIST
    failure_key = "list_failed"
    failure_default = "failed to retrieve list"

    def validate_input(self, ctx: RequestContext, request: ListRequest) -> None:
        super().validate_input(ctx, request)
        self.validate_filter_request(ctx, request.filters)

    def execute_core(self, ctx: RequestContext, request: ListRequest) -> list[T]:
        return self.repository.list_all(request.filters)


class GetListPageDataUseCase(EntityUseCase[PageDataRequest, PageResult], Generic[T]):
    """
    Page de liste : lit toutes les entités puis applique le traitement de listes.

    La requête est validée contre les champs autorisés de l'entité avant
    tout accès au repository.
    """

    action = Action.LIST
    failure_key = "list_page_data_failed"
    failure_default = "list page data retrieval failed"

    def __init__(
        self,
        definition: EntityDefinition,
        repository: IEntityRepository,
        services: UseCaseServices,
        default_page_size: int = 20,
    ) -> None:
        super().__init__(definition, repository, services)
        self.processor: ListDataProcessor[T] = ListDataProcessor(
            definition.accessor,
            default_limit=default_page_size,
            max_limit=definition.max_page_size,
        )

    def validate_input(self, ctx: RequestContext, request: PageDataRequest) -> None:
        super().validate_input(ctx, request)
        self._validate_pagination(ctx, request.pagination)
        self.validate_filter_request(ctx, request.filters)
        self._validate_sort(ctx, request.sort)
        self._validate_search(ctx, request.search)

    def _validate_pagination(self, ctx: RequestContext, pagination: Optional[PaginationRequest]) -> None:
        if pagination is None:
            return
        if pagination.limit is not None and not 0 <= pagination.limit <= self.definition.max_page_size:
            raise self.invalid(
                ctx,
                "invalid_limit",
                "pagination limit must be between 0 and {max} (0 uses the default page size)",
                max=self.definition.max_page_size,
            )
        if pagination.uses_cursor:
            if not pagination.cursor.strip():
                raise self.invalid(ctx, "invalid_cursor", "cursor token cannot be empty")
        elif pagination.page is not None and pagination.page < 1:
            raise self.invalid(ctx, "invalid_page", "page number must be greater than 0")

    def _validate_sort(self, ctx: RequestContext, sort: Optional[SortRequest]) -> None:
        if sort is None:
            return
        if not sort.fields:
            raise self.invalid(
                ctx, "empty_sort_fields", "sort fields cannot be empty when sort request is provided"
            )
        self.validate_field_names(ctx, [field.field for field in sort.fields], "sort")

    def _validate_search(self, ctx: RequestContext, search: Optional[SearchRequest]) -> None:
        if search is None:
            return
        if not search.query or not search.query.strip():
            raise self.invalid(ctx, "empty_search_query", "search query cannot be empty")
        self.validate_field_names(ctx, list(search.fields), "search")
        if not 0 <= search.max_results <= self.definition.max_search_results:
            raise self.invalid(
                ctx,
                "invalid_max_results",
                "max results must be between 0 and {max}",
                max=self.definition.max_search_results,
            )

    def execute_core(self, ctx: RequestContext, request: PageDataRequest) -> PageResult[T]:
        items = self.repository.list_all()
        return self.processor.process_list_request(
            items,
            request.pagination,
            request.filters,
            request.sort,
            request.search,
        )


class GetItemPageDataUseCase(EntityUseCase[str, T], Generic[T]):
    """Page de détail : l'entité lue doit porter l'ID demandé."""

    action = Action.READ
    failure_key = "item_page_data_failed"
    failure_default = "item page data retrieval failed"

    def validate_input(self, ctx: RequestContext, request: str) -> None:
        self.require_id(ctx, request)

    def execute_core(self, ctx: RequestContext, request: str) -> T:
        item = self.repository.get_item_page_data(request)
        if getattr(item, "id", None) != request:
            key = f"{self.entity}.errors.id_mismatch"
            raise OperationFailedError(
                self.translate(ctx, key, "returned {entity} ID does not match request", entity=self.entity),
                key,
            )
        if self.definition.verify_loaded_items and self.definition.check is not None:
            violations = self.definition.check(item)
            if violations:
                first = violations[0]
                raise self.violation(ctx, first.rule, first.default, **first.params)
        return item
