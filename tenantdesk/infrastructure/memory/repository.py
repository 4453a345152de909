"""
Repositories en mémoire.

Stockage par dictionnaire id -> entité, protege par un RLock. Les entités
sont copiées en entrée et en sortie : un appelant ne peut pas modifier le
stockage sans passer par update().

Utilisés pour la demo (données de tenantdesk/seed) et pour les tests.
"""

import copy
import threading
from typing import Any, Generic, Iterable, Optional, TypeVar
from uuid import uuid4

from loguru import logger

from tenantdesk.core.entities import (
    Balance,
    Invoice,
    License,
    LicenseHistory,
    PaymentMethod,
    Plan,
    Role,
    Subscription,
    Workspace,
)
from tenantdesk.core.exceptions import EntityNotFoundError, RepositoryError
from tenantdesk.core.ports.repositories import (
    IBalanceRepository,
    IEntityRepository,
    IInvoiceRepository,
    ILicenseHistoryRepository,
    ILicenseRepository,
    IPaymentMethodRepository,
    IPlanRepository,
    IRoleRepository,
    ISubscriptionRepository,
    IWorkspaceRepository,
    Repositories,
)
from tenantdesk.core.value_objects.context import EntityName
from tenantdesk.core.value_objects.listing import (
    FilterRequest,
    PageResult,
    PaginationRequest,
    SearchRequest,
    SortRequest,
)
from tenantdesk.infrastructure.conversion import entity_from_dict
from tenantdesk.services.listing.accessors import AccessorRegistry, FieldAccessor
from tenantdesk.services.listing.filters import apply_filters
from tenantdesk.services.listing.pagination import DEFAULT_LIMIT, MAX_LIMIT
from tenantdesk.services.listing.processor import ListDataProcessor

T = TypeVar("T")


class InMemoryRepository(IEntityRepository[T], Generic[T]):
    """
    Repository générique en mémoire.

    Les sous-classes fixent `entity_name`. L'ordre d'insertion est conserve
    par list_all().
    """

    def __init__(
        self,
        accessor: FieldAccessor[T],
        items: Iterable[T] = (),
        default_page_size: int = DEFAULT_LIMIT,
        max_page_size: int = MAX_LIMIT,
    ) -> None:
        self._accessor = accessor
        self._processor: ListDataProcessor[T] = ListDataProcessor(
            accessor, default_limit=default_page_size, max_limit=max_page_size
        )
        self._lock = threading.RLock()
        self._items: dict[str, T] = {}
        for item in items:
            self.create(item)

    def _check_type(self, entity: Any) -> None:
        if not isinstance(entity, self._accessor.entity_type):
            raise RepositoryError(
                f"{self.entity_name} repository cannot store {type(entity).__name__}"
            )

    def create(self, entity: T) -> T:
        self._check_type(entity)
        stored = copy.deepcopy(entity)
        with self._lock:
            if not stored.id:
                stored.id = uuid4().hex
            if stored.id in self._items:
                raise RepositoryError(f"{self.entity_name} already exists: {stored.id}")
            self._items[stored.id] = stored
        logger.debug(f"{self.entity_name} créé : {stored.id}")
        return copy.deepcopy(stored)

    def read(self, entity_id: str) -> T:
        with self._lock:
            item = self._items.get(entity_id)
            if item is None:
                raise EntityNotFoundError(self.entity_name, entity_id)
            return copy.deepcopy(item)

    def update(self, entity: T) -> T:
        self._check_type(entity)
        with self._lock:
            if not entity.id or entity.id not in self._items:
                raise EntityNotFoundError(self.entity_name, entity.id)
            self._items[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def delete(self, entity_id: str) -> None:
        with self._lock:
            if self._items.pop(entity_id, None) is None:
                raise EntityNotFoundError(self.entity_name, entity_id)
        logger.debug(f"{self.entity_name} supprimé : {entity_id}")

    def list_all(self, filters: Optional[FilterRequest] = None) -> list[T]:
        with self._lock:
            items = copy.deepcopy(list(self._items.values()))
        return apply_filters(items, filters, self._accessor)

    def get_list_page_data(
        self,
        pagination: Optional[PaginationRequest] = None,
        filters: Optional[FilterRequest] = None,
        sort: Optional[SortRequest] = None,
        search: Optional[SearchRequest] = None,
    ) -> PageResult[T]:
        return self._processor.process_list_request(
            self.list_all(), pagination, filters, sort, search
        )

    def get_item_page_data(self, entity_id: str) -> T:
        return self.read(entity_id)

    # ------------------------------------------------------------------
    # Instantanés (transactions en mémoire)
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, T]:
        with self._lock:
            return copy.deepcopy(self._items)

    def restore(self, snapshot: dict[str, T]) -> None:
        with self._lock:
            self._items = copy.deepcopy(snapshot)

    def count(self) -> int:
        with self._lock:
            return len(self._items)


class InMemoryWorkspaceRepository(InMemoryRepository[Workspace], IWorkspaceRepository):
    entity_name = EntityName.WORKSPACE


class InMemoryRoleRepository(InMemoryRepository[Role], IRoleRepository):
    entity_name = EntityName.ROLE


class InMemoryPlanRepository(InMemoryRepository[Plan], IPlanRepository):
    entity_name = EntityName.PLAN


class InMemorySubscriptionRepository(InMemoryRepository[Subscription], ISubscriptionRepository):
    entity_name = EntityName.SUBSCRIPTION


class InMemoryBalanceRepository(InMemoryRepository[Balance], IBalanceRepository):
    entity_name = EntityName.BALANCE


class InMemoryInvoiceRepository(InMemoryRepository[Invoice], IInvoiceRepository):
    entity_name = EntityName.INVOICE


class InMemoryPaymentMethodRepository(InMemoryRepository[PaymentMethod], IPaymentMethodRepository):
    entity_name = EntityName.PAYMENT_METHOD


class InMemoryLicenseRepository(InMemoryRepository[License], ILicenseRepository):
    entity_name = EntityName.LICENSE

    def get_by_license_key(self, license_key: str) -> Optional[License]:
        with self._lock:
            for item in self._items.values():
                if item.license_key == license_key:
                    return copy.deepcopy(item)
        return None

    def list_by_subscription(self, subscription_id: str) -> list[License]:
        with self._lock:
            return [
                copy.deepcopy(item)
                for item in self._items.values()
                if item.subscription_id == subscription_id
            ]


class InMemoryLicenseHistoryRepository(InMemoryRepository[LicenseHistory], ILicenseHistoryRepository):
    entity_name = EntityName.LICENSE_HISTORY

    def list_by_license(self, license_id: str) -> list[LicenseHistory]:
        with self._lock:
            # L'ordre d'insertion est l'ordre chronologique
            return [
                copy.deepcopy(item)
                for item in self._items.values()
                if item.license_id == license_id
            ]


_REPOSITORY_CLASSES = {
    "workspaces": InMemoryWorkspaceRepository,
    "roles": InMemoryRoleRepository,
    "plans": InMemoryPlanRepository,
    "subscriptions": InMemorySubscriptionRepository,
    "licenses": InMemoryLicenseRepository,
    "license_history": InMemoryLicenseHistoryRepository,
    "balances": InMemoryBalanceRepository,
    "invoices": InMemoryInvoiceRepository,
    "payment_methods": InMemoryPaymentMethodRepository,
}


def build_memory_repositories(
    accessors: AccessorRegistry,
    seed: Optional[dict[str, list[dict[str, Any]]]] = None,
    default_page_size: int = DEFAULT_LIMIT,
    max_page_size: int = MAX_LIMIT,
) -> Repositories:
    """
    Construit l'ensemble des repositories en mémoire.

    Args :
        accessors : Registre des accesseurs de champs
        seed : Données initiales par nom d'entité (voir tenantdesk.infrastructure.seed)
        default_page_size : Taille de page par défaut
        max_page_size : Taille de page maximale

    Retourne :
        Repositories prêts à l'emploi
    """
    seed = seed or {}
    repositories = {}
    for attribute, repository_cls in _REPOSITORY_CLASSES.items():
        accessor = accessors.get(repository_cls.entity_name)
        items = [
            entity_from_dict(accessor.entity_type, record)
            for record in seed.get(repository_cls.entity_name, [])
        ]
        repositories[attribute] = repository_cls(
            accessor,
            items,
            default_page_size=default_page_size,
            max_page_size=max_page_size,
        )
    logger.debug(
        "Repositories en mémoire initialisés : "
        + ", ".join(f"{name}={repo.count()}" for name, repo in repositories.items())
    )
    return Repositories(**repositories)
