"""
Container d'injection de dépendances via dependency-injector.

Fournit une gestion centralisée des dépendances pour les interfaces CLI et Web :
configuration, fournisseur de persistance, services transverses et
catalogue des cas d'utilisation.
"""

from dependency_injector import containers, providers

from .adapters.services import (
    DisabledAuthorizationService,
    JsonTranslationService,
    StaticAuthorizationService,
    UUIDService,
)
from .config import Settings
from .core.ports.services import IAuthorizationService
from .infrastructure.registry import ProviderOptions, build_default_registry
from .services.usecases import (
    UseCaseCatalog,
    UseCaseServices,
    build_accessor_registry,
    build_entity_definitions,
)


def _authorization(settings: Settings) -> IAuthorizationService:
    if not settings.authorization_enabled:
        return DisabledAuthorizationService()
    return StaticAuthorizationService(settings.authorization_grants, enabled=True)


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        catalog = container.catalog()
        page = catalog.entity("license").list_page_data.execute(ctx, request)

    Les tests remplacent la configuration avec :
        container.config.override(Settings(database_provider="memory"))
    """

    # Configuration : singleton chargé une seule fois
    config = providers.Singleton(Settings)

    # Accesseurs de champs et définitions des entités
    accessors = providers.Singleton(build_accessor_registry)
    definitions = providers.Singleton(
        build_entity_definitions,
        accessors=accessors,
        max_page_size=config.provided.max_page_size,
        max_search_results=config.provided.max_search_results,
    )

    # Persistance - le fournisseur est choisi par nom dans le registre
    provider_registry = providers.Singleton(build_default_registry)
    provider_options = providers.Factory(
        ProviderOptions,
        accessors=accessors,
        business_type=config.provided.business_type,
        database_url=config.provided.database_url,
        default_page_size=config.provided.default_page_size,
        max_page_size=config.provided.max_page_size,
        seed_dir=config.provided.seed_dir,
    )
    persistence = providers.Singleton(
        lambda registry, name, options: registry.create(name, options),
        registry=provider_registry,
        name=config.provided.database_provider,
        options=provider_options,
    )
    repositories = providers.Singleton(lambda persistence: persistence.repositories, persistence=persistence)
    transaction_service = providers.Singleton(
        lambda persistence: persistence.transaction, persistence=persistence
    )

    # Services transverses
    translation_service = providers.Singleton(
        JsonTranslationService,
        messages_dir=config.provided.translations_dir,
    )
    authorization_service = providers.Singleton(_authorization, settings=config)
    id_service = providers.Singleton(UUIDService)

    services = providers.Singleton(
        UseCaseServices,
        translation=translation_service,
        authorization=authorization_service,
        transaction=transaction_service,
        ids=id_service,
    )

    # Cas d'utilisation
    catalog = providers.Singleton(
        UseCaseCatalog,
        repositories=repositories,
        services=services,
        definitions=definitions,
        default_page_size=config.provided.default_page_size,
    )
