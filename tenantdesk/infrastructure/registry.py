"""
Registre des fournisseurs de persistance.

Un fournisseur construit l'ensemble des repositories et le service de
transaction associé. Le registre est un objet construit puis injecte par
le container : rien ne s'enregistre à l'import.

Fournisseurs par défaut :
- "memory" : repositories en mémoire peuplés avec les données de démo
- "sqlmodel" : base SQL via SQLModel (engine, scoped_session)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from tenantdesk.core.exceptions import ConfigurationError
from tenantdesk.core.ports.repositories import Repositories
from tenantdesk.core.ports.services import ITransactionService
from tenantdesk.core.value_objects.context import DEFAULT_BUSINESS_TYPE
from tenantdesk.services.listing.accessors import AccessorRegistry
from tenantdesk.services.listing.pagination import DEFAULT_LIMIT, MAX_LIMIT


@dataclass(frozen=True)
class ProviderOptions:
    """Paramètres communs aux fournisseurs de persistance."""

    accessors: AccessorRegistry
    business_type: str = DEFAULT_BUSINESS_TYPE
    database_url: str = "sqlite:///tenantdesk.db"
    default_page_size: int = DEFAULT_LIMIT
    max_page_size: int = MAX_LIMIT
    seed_dir: Optional[Path] = None


@dataclass
class PersistenceProvider:
    """Repositories et service de transaction d'un même stockage."""

    name: str
    repositories: Repositories
    transaction: ITransactionService


ProviderFactory = Callable[[ProviderOptions], PersistenceProvider]


class ProviderRegistry:
    """
    Table nom -> fabrique de fournisseur.

    Utilisation :
        registry = build_default_registry()
        provider = registry.create("memory", ProviderOptions(accessors))
    """

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        if name in self._factories:
            raise ConfigurationError(f"persistence provider already registered: {name}")
        self._factories[name] = factory

    def create(self, name: str, options: ProviderOptions) -> PersistenceProvider:
        factory = self._factories.get(name)
        if factory is None:
            raise ConfigurationError(
                f"unknown persistence provider {name!r} (available: {', '.join(self.providers())})"
            )
        logger.debug(f"Fournisseur de persistance : {name}")
        return factory(options)

    def providers(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


def create_memory_provider(options: ProviderOptions) -> PersistenceProvider:
    from tenantdesk.infrastructure.memory import (
        InMemoryTransactionService,
        build_memory_repositories,
    )
    from tenantdesk.infrastructure.seed import load_seed_data

    repositories = build_memory_repositories(
        options.accessors,
        seed=load_seed_data(options.business_type, options.seed_dir),
        default_page_size=options.default_page_size,
        max_page_size=options.max_page_size,
    )
    return PersistenceProvider("memory", repositories, InMemoryTransactionService(repositories))


def create_sqlmodel_provider(options: ProviderOptions) -> PersistenceProvider:
    from tenantdesk.infrastructure.persistence import (
        SQLModelTransactionService,
        build_sqlmodel_repositories,
        create_db_engine,
        create_session_registry,
        init_db,
    )

    engine = create_db_engine(options.database_url)
    init_db(engine)
    sessions = create_session_registry(engine)
    repositories = build_sqlmodel_repositories(
        options.accessors,
        sessions,
        default_page_size=options.default_page_size,
        max_page_size=options.max_page_size,
    )
    return PersistenceProvider("sqlmodel", repositories, SQLModelTransactionService(sessions))


def build_default_registry() -> ProviderRegistry:
    """Registre avec les fournisseurs "memory" et "sqlmodel"."""
    registry = ProviderRegistry()
    registry.register("memory", create_memory_provider)
    registry.register("sqlmodel", create_sqlmodel_provider)
    return registry
