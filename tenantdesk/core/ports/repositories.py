"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats de persistance.
Les implémentations (adaptateurs) fournissent le stockage concret
(SQL via SQLModel, en mémoire pour la demo et les tests).

Tous les repositories lèvent EntityNotFoundError quand une entité est
absente et RepositoryError pour toute autre erreur de stockage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Generic, Optional, TypeVar

from tenantdesk.core.exceptions import ConfigurationError
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
from tenantdesk.core.value_objects.listing import (
    FilterRequest,
    PageResult,
    PaginationRequest,
    SearchRequest,
    SortRequest,
)

T = TypeVar("T")


class IEntityRepository(ABC, Generic[T]):
    """
    Contrat CRUD commun à toutes les entités.

    Les opérations "page data" appliquent le traitement de listes
    (filtre, recherche, tri, pagination) sur le contenu du stockage.
    """

    entity_name: str = ""

    @abstractmethod
    def create(self, entity: T) -> T:
        """Insere une nouvelle entité et la retourne."""
        ...

    @abstractmethod
    def read(self, entity_id: str) -> T:
        """Récupère une entité par son ID (EntityNotFoundError si absente)."""
        ...

    @abstractmethod
    def update(self, entity: T) -> T:
        """Remplace une entité existante (EntityNotFoundError si absente)."""
        ...

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        """Supprime une entité par son ID (EntityNotFoundError si absente)."""
        ...

    @abstractmethod
    def list_all(self, filters: Optional[FilterRequest] = None) -> list[T]:
        """Liste les entités, éventuellement filtrées."""
        ...

    @abstractmethod
    def get_list_page_data(
        self,
        pagination: Optional[PaginationRequest] = None,
        filters: Optional[FilterRequest] = None,
        sort: Optional[SortRequest] = None,
        search: Optional[SearchRequest] = None,
    ) -> PageResult[T]:
        """Retourne une page de résultats filtrée, recherchée et triée."""
        ...

    @abstractmethod
    def get_item_page_data(self, entity_id: str) -> T:
        """Retourne une entité pour une page de détail."""
        ...


class IWorkspaceRepository(IEntityRepository[Workspace]):
    """Stockage des espaces de travail."""


class IRoleRepository(IEntityRepository[Role]):
    """Stockage des roles."""


class IPlanRepository(IEntityRepository[Plan]):
    """Stockage des plans."""


class ISubscriptionRepository(IEntityRepository[Subscription]):
    """Stockage des souscriptions."""


class IBalanceRepository(IEntityRepository[Balance]):
    """Stockage des soldes."""


class IInvoiceRepository(IEntityRepository[Invoice]):
    """Stockage des factures."""


class IPaymentMethodRepository(IEntityRepository[PaymentMethod]):
    """Stockage des moyens de paiement."""


class ILicenseRepository(IEntityRepository[License]):
    """Stockage des licences."""

    @abstractmethod
    def get_by_license_key(self, license_key: str) -> Optional[License]:
        """Récupère une licence par sa clé lisible."""
        ...

    @abstractmethod
    def list_by_subscription(self, subscription_id: str) -> list[License]:
        """Liste les licences d'une souscription."""
        ...


class ILicenseHistoryRepository(IEntityRepository[LicenseHistory]):
    """Stockage de l'historique des licences."""

    @abstractmethod
    def list_by_license(self, license_id: str) -> list[LicenseHistory]:
        """Liste l'historique d'une licence, du plus ancien au plus recent."""
        ...


@dataclass
class Repositories:
    """Ensemble des repositories d'un fournisseur de persistance."""

    workspaces: IWorkspaceRepository
    roles: IRoleRepository
    plans: IPlanRepository
    subscriptions: ISubscriptionRepository
    licenses: ILicenseRepository
    license_history: ILicenseHistoryRepository
    balances: IBalanceRepository
    invoices: IInvoiceRepository
    payment_methods: IPaymentMethodRepository

    def by_entity(self, entity_name: str) -> IEntityRepository:
        """Retourne le repository d'une entité par son nom (ex: "license")."""
        for repository in self.all():
            if repository.entity_name == entity_name:
                return repository
        raise ConfigurationError(f"no repository for entity {entity_name!r}")

    def all(self) -> list[IEntityRepository]:
        return [getattr(self, f.name) for f in fields(self)]
