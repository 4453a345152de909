"""
Catalogue des cas d'utilisation.

Assemble, pour chaque entité, les sept cas d'utilisation génériques
(les licences reçoivent leurs variantes spécialisées) ainsi que les
actions propres aux licences.
"""

from dataclasses import dataclass

from tenantdesk.core.exceptions import ConfigurationError
from tenantdesk.core.ports.repositories import Repositories
from tenantdesk.core.value_objects.context import EntityName
from tenantdesk.services.usecases.base import UseCaseServices
from tenantdesk.services.usecases.crud import (
    CreateEntityUseCase,
    DeleteEntityUseCase,
    GetItemPageDataUseCase,
    GetListPageDataUseCase,
    ListEntitiesUseCase,
    ReadEntityUseCase,
    UpdateEntityUseCase,
)
from tenantdesk.services.usecases.definitions import EntityDefinition
from tenantdesk.services.usecases.licenses import (
    AssignLicenseUseCase,
    CreateLicenseUseCase,
    CreateLicensesFromPlanUseCase,
    DeleteLicenseUseCase,
    LicenseRepositories,
    ReactivateLicenseUseCase,
    ReassignLicenseUseCase,
    RevokeLicenseAssignmentUseCase,
    SuspendLicenseUseCase,
    UpdateLicenseUseCase,
    ValidateLicenseAccessUseCase,
)


@dataclass
class EntityUseCases:
    create: CreateEntityUseCase
    read: ReadEntityUseCase
    update: UpdateEntityUseCase
    delete: DeleteEntityUseCase
    list_all: ListEntitiesUseCase
    list_page_data: GetListPageDataUseCase
    item_page_data: GetItemPageDataUseCase


@dataclass
class LicenseUseCases:
    assign: AssignLicenseUseCase
    revoke: RevokeLicenseAssignmentUseCase
    reassign: ReassignLicenseUseCase
    suspend: SuspendLicenseUseCase
    reactivate: ReactivateLicenseUseCase
    create_from_plan: CreateLicensesFromPlanUseCase
    validate_access: ValidateLicenseAccessUseCase


class UseCaseCatalog:
    """
    Point d'accès unique aux cas d'utilisation.

    Utilisation :
        catalog = UseCaseCatalog(repositories, services, definitions)
        page = catalog.entity("license").list_page_data.execute(ctx, request)
        catalog.licenses.assign.execute(ctx, AssignLicenseRequest(...))
    """

    def __init__(
        self,
        repositories: Repositories,
        services: UseCaseServices,
        definitions: dict[str, EntityDefinition],
        default_page_size: int = 20,
    ) -> None:
        self._definitions = definitions
        license_repositories = LicenseRepositories(
            licenses=repositories.licenses,
            history=repositories.license_history,
            subscriptions=repositories.subscriptions,
            plans=repositories.plans,
        )
        self._entities: dict[str, EntityUseCases] = {}
        for name, definition in definitions.items():
            repository = repositories.by_entity(name)
            if name == EntityName.LICENSE:
                create = CreateLicenseUseCase(definition, license_repositories, services)
                update = UpdateLicenseUseCase(definition, repository, services)
                delete = DeleteLicenseUseCase(definition, license_repositories, services)
            else:
                create = CreateEntityUseCase(definition, repository, services)
                update = UpdateEntityUseCase(definition, repository, services)
                delete = DeleteEntityUseCase(definition, repository, services)
            self._entities[name] = EntityUseCases(
                create=create,
                read=ReadEntityUseCase(definition, repository, services),
                update=update,
                delete=delete,
                list_all=ListEntitiesUseCase(definition, repository, services),
                list_page_data=GetListPageDataUseCase(
                    definition, repository, services, default_page_size=default_page_size
                ),
                item_page_data=GetItemPageDataUseCase(definition, repository, services),
            )

        self.licenses = LicenseUseCases(
            assign=AssignLicenseUseCase(license_repositories, services),
            revoke=RevokeLicenseAssignmentUseCase(license_repositories, services),
            reassign=ReassignLicenseUseCase(license_repositories, services),
            suspend=SuspendLicenseUseCase(license_repositories, services),
            reactivate=ReactivateLicenseUseCase(license_repositories, services),
            create_from_plan=CreateLicensesFromPlanUseCase(license_repositories, services),
            validate_access=ValidateLicenseAccessUseCase(license_repositories, services),
        )

    def entity(self, name: str) -> EntityUseCases:
        try:
            return self._entities[name]
        except KeyError:
            raise ConfigurationError(f"unknown entity {name!r}") from None

    def definition(self, name: str) -> EntityDefinition:
        self.entity(name)
        return self._definitions[name]

    def entity_names(self) -> list[str]:
        return sorted(self._entities)
