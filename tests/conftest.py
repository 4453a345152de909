"""
Fixtures pytest partagées pour les tests TenantDesk.

Ce module contient les fixtures communes utilisées dans les tests:
- Registre d'accesseurs et définitions d'entités
- Repositories en mémoire (vides ou peuplés avec les données de démo)
- Services transverses et catalogue des cas d'utilisation
- Contexte d'appel et Settings de test
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tenantdesk.adapters.services import (
    DisabledAuthorizationService,
    JsonTranslationService,
    UUIDService,
)
from tenantdesk.config import Settings
from tenantdesk.core.ports.services import ITranslationService
from tenantdesk.core.value_objects import RequestContext
from tenantdesk.infrastructure.memory import InMemoryTransactionService, build_memory_repositories
from tenantdesk.infrastructure.seed import load_seed_data
from tenantdesk.services.usecases import (
    UseCaseCatalog,
    UseCaseServices,
    build_accessor_registry,
    build_entity_definitions,
)


@pytest.fixture
def accessors():
    """Registre des accesseurs de toutes les entités."""
    return build_accessor_registry()


@pytest.fixture
def definitions(accessors):
    return build_entity_definitions(accessors, max_page_size=100, max_search_results=1000)


@pytest.fixture
def repositories(accessors):
    """Repositories en mémoire peuplés avec le jeu de démo "education"."""
    return build_memory_repositories(accessors, seed=load_seed_data("education"))


@pytest.fixture
def empty_repositories(accessors):
    return build_memory_repositories(accessors)


@pytest.fixture
def services(repositories) -> UseCaseServices:
    """Services réels : traduction JSON, autorisation désactivée, transactions en mémoire."""
    return UseCaseServices(
        translation=JsonTranslationService(),
        authorization=DisabledAuthorizationService(),
        transaction=InMemoryTransactionService(repositories),
        ids=UUIDService(),
    )


@pytest.fixture
def catalog(repositories, services, definitions) -> UseCaseCatalog:
    return UseCaseCatalog(repositories, services, definitions)


@pytest.fixture
def ctx() -> RequestContext:
    """Contexte d'un administrateur du tenant education."""
    return RequestContext(user_id="u-admin", business_type="education")


@pytest.fixture
def mock_translation() -> MagicMock:
    """
    Mock de ITranslationService.

    Retourne le message par défaut, comme un catalogue vide.
    """
    mock = MagicMock(spec=ITranslationService)
    mock.get_with_default.side_effect = lambda ctx, business_type, key, default, **params: default
    mock.get.side_effect = lambda ctx, business_type, key, **params: key
    return mock


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test isolés.

    Persistance en mémoire, pas de fichier de log, autorisation désactivée.
    """
    return Settings(
        business_type="education",
        database_provider="memory",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        authorization_enabled=False,
        log_file=None,
    )
