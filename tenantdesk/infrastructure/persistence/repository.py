"""
Implementation SQLModel des repositories.

Un repository générique convertit entre entité de domaine (dataclass) et
modèle de table (SQLModel) via tenantdesk.infrastructure.conversion ; les
sous-classes fixent le nom d'entité et la table.

Chaque opération s'exécute dans une unité courte : commit si aucune
transaction n'est ouverte sur la session, simple flush sinon.
"""

import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable, Generic, Optional, TypeVar
from uuid import uuid4

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from tenantdesk.core.entities import License, LicenseHistory
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
from tenantdesk.infrastructure.conversion import entity_from_dict, entity_to_dict
from tenantdesk.infrastructure.persistence.models import (
    BalanceModel,
    InvoiceModel,
    LicenseHistoryModel,
    LicenseModel,
    PaymentMethodModel,
    PlanModel,
    RoleModel,
    SubscriptionModel,
    WorkspaceModel,
)
from tenantdesk.infrastructure.persistence.transaction import in_transaction
from tenantdesk.services.listing.accessors import AccessorRegistry, FieldAccessor
from tenantdesk.services.listing.filters import apply_filters
from tenantdesk.services.listing.pagination import DEFAULT_LIMIT, MAX_LIMIT
from tenantdesk.services.listing.processor import ListDataProcessor

T = TypeVar("T")


class SQLModelRepository(IEntityRepository[T], Generic[T]):
    """
    Repository SQLModel générique.

    Les filtres, la recherche, le tri et la pagination sont appliques en
    mémoire par le ListDataProcessor sur le contenu de la table.
    """

    model_class: type[SQLModel]

    def __init__(
        self,
        accessor: FieldAccessor[T],
        session_provider: Callable[[], Session],
        default_page_size: int = DEFAULT_LIMIT,
        max_page_size: int = MAX_LIMIT,
    ) -> None:
        """
        Initialise le repository.

        Args :
            accessor : Accesseur de champs de l'entité
            session_provider : Retourne la session du thread courant
            default_page_size : Taille de page par défaut
            max_page_size : Taille de page maximale
        """
        self._accessor = accessor
        self._session_provider = session_provider
        self._processor: ListDataProcessor[T] = ListDataProcessor(
            accessor, default_limit=default_page_size, max_limit=max_page_size
        )

    @contextmanager
    def _unit(self) -> Iterator[Session]:
        session = self._session_provider()
        nested = in_transaction(session)
        try:
            yield session
            if nested:
                session.flush()
            else:
                session.commit()
        except SQLAlchemyError as err:
            if not nested:
                session.rollback()
            raise RepositoryError(f"{self.entity_name} storage error: {err}") from err
        except Exception:
            if not nested:
                session.rollback()
            raise

    def _to_entity(self, model: SQLModel) -> T:
        """Convertit un modèle DB en entité domaine."""
        return entity_from_dict(self._accessor.entity_type, model.model_dump())

    def _to_model(self, entity: T) -> SQLModel:
        """Convertit une entité domaine en modèle DB."""
        return self.model_class(**entity_to_dict(entity))

    def _get_model(self, session: Session, entity_id: Optional[str]) -> SQLModel:
        model = session.get(self.model_class, entity_id) if entity_id else None
        if model is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return model

    def _select_all(self, session: Session, *criteria: Any) -> list[T]:
        statement = select(self.model_class)
        for criterion in criteria:
            statement = statement.where(criterion)
        statement = statement.order_by(self.model_class.date_created, self.model_class.id)
        return [self._to_entity(model) for model in session.exec(statement).all()]

    def create(self, entity: T) -> T:
        if not isinstance(entity, self._accessor.entity_type):
            raise RepositoryError(
                f"{self.entity_name} repository cannot store {type(entity).__name__}"
            )
        if not entity.id:
            entity = dataclasses.replace(entity, id=uuid4().hex)
        with self._unit() as session:
            if session.get(self.model_class, entity.id) is not None:
                raise RepositoryError(f"{self.entity_name} already exists: {entity.id}")
            model = self._to_model(entity)
            session.add(model)
            session.flush()
            created = self._to_entity(model)
        logger.debug(f"{self.entity_name} créé : {created.id}")
        return created

    def read(self, entity_id: str) -> T:
        with self._unit() as session:
            return self._to_entity(self._get_model(session, entity_id))

    def update(self, entity: T) -> T:
        with self._unit() as session:
            model = self._get_model(session, entity.id)
            for name, value in entity_to_dict(entity).items():
                setattr(model, name, value)
            session.add(model)
            session.flush()
            return self._to_entity(model)

    def delete(self, entity_id: str) -> None:
        with self._unit() as session:
            session.delete(self._get_model(session, entity_id))
        logger.debug(f"{self.entity_name} supprimé : {entity_id}")

    def list_all(self, filters: Optional[FilterRequest] = None) -> list[T]:
        with self._unit() as session:
            items = self._select_all(session)
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


class SQLModelWorkspaceRepository(SQLModelRepository, IWorkspaceRepository):
    entity_name = EntityName.WORKSPACE
    model_class = WorkspaceModel


class SQLModelRoleRepository(SQLModelRepository, IRoleRepository):
    entity_name = EntityName.ROLE
    model_class = RoleModel


class SQLModelPlanRepository(SQLModelRepository, IPlanRepository):
    entity_name = EntityName.PLAN
    model_class = PlanModel


class SQLModelSubscriptionRepository(SQLModelRepository, ISubscriptionRepository):
    entity_name = EntityName.SUBSCRIPTION
    model_class = SubscriptionModel


class SQLModelBalanceRepository(SQLModelRepository, IBalanceRepository):
    entity_name = EntityName.BALANCE
    model_class = BalanceModel


class SQLModelInvoiceRepository(SQLModelRepository, IInvoiceRepository):
    entity_name = EntityName.INVOICE
    model_class = InvoiceModel


class SQLModelPaymentMethodRepository(SQLModelRepository, IPaymentMethodRepository):
    entity_name = EntityName.PAYMENT_METHOD
    model_class = PaymentMethodModel


class SQLModelLicenseRepository(SQLModelRepository, ILicenseRepository):
    entity_name = EntityName.LICENSE
    model_class = LicenseModel

    def get_by_license_key(self, license_key: str) -> Optional[License]:
        """Récupère une licence par sa clé lisible."""
        with self._unit() as session:
            statement = select(LicenseModel).where(LicenseModel.license_key == license_key)
            model = session.exec(statement).first()
            return self._to_entity(model) if model else None

    def list_by_subscription(self, subscription_id: str) -> list[License]:
        with self._unit() as session:
            return self._select_all(session, LicenseModel.subscription_id == subscription_id)


class SQLModelLicenseHistoryRepository(SQLModelRepository, ILicenseHistoryRepository):
    entity_name = EntityName.LICENSE_HISTORY
    model_class = LicenseHistoryModel

    def list_by_license(self, license_id: str) -> list[LicenseHistory]:
        with self._unit() as session:
            return self._select_all(session, LicenseHistoryModel.license_id == license_id)


_REPOSITORY_CLASSES = {
    "workspaces": SQLModelWorkspaceRepository,
    "roles": SQLModelRoleRepository,
    "plans": SQLModelPlanRepository,
    "subscriptions": SQLModelSubscriptionRepository,
    "licenses": SQLModelLicenseRepository,
    "license_history": SQLModelLicenseHistoryRepository,
    "balances": SQLModelBalanceRepository,
    "invoices": SQLModelInvoiceRepository,
    "payment_methods": SQLModelPaymentMethodRepository,
}


def build_sqlmodel_repositories(
    accessors: AccessorRegistry,
    session_provider: Callable[[], Session],
    default_page_size: int = DEFAULT_LIMIT,
    max_page_size: int = MAX_LIMIT,
) -> Repositories:
    """
    Construit l'ensemble des repositories SQLModel.

    Args :
        accessors : Registre des accesseurs de champs
        session_provider : Registre de sessions (scoped_session)
        default_page_size : Taille de page par défaut
        max_page_size : Taille de page maximale
    """
    return Repositories(
        **{
            attribute: repository_cls(
                accessors.get(repository_cls.entity_name),
                session_provider,
                default_page_size=default_page_size,
                max_page_size=max_page_size,
            )
            for attribute, repository_cls in _REPOSITORY_CLASSES.items()
        }
    )
