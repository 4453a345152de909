"""
Cas d'utilisation (couche application).

- base : pipeline commun (autorisation, validation, enrichissement, transaction)
- crud : cas génériques par entité (CRUD, list, page data)
- licenses : machine à états des licences, création depuis un plan, contrôle d'accès
- catalog : assemblage de tous les cas d'utilisation
"""

from tenantdesk.services.usecases.base import UseCase, UseCaseServices
from tenantdesk.services.usecases.catalog import EntityUseCases, LicenseUseCases, UseCaseCatalog
from tenantdesk.services.usecases.crud import ListRequest, PageDataRequest
from tenantdesk.services.usecases.definitions import (
    EntityDefinition,
    build_accessor_registry,
    build_entity_definitions,
)
from tenantdesk.services.usecases.licenses import (
    AssignLicenseRequest,
    CreateLicensesFromPlanRequest,
    CreateLicensesFromPlanResponse,
    LicenseAccessResult,
    LicenseStatusRequest,
    ReassignLicenseRequest,
    RevokeLicenseAssignmentRequest,
    ValidateLicenseAccessRequest,
)

__all__ = [
    "AssignLicenseRequest",
    "CreateLicensesFromPlanRequest",
    "CreateLicensesFromPlanResponse",
    "EntityDefinition",
    "EntityUseCases",
    "LicenseAccessResult",
    "LicenseStatusRequest",
    "LicenseUseCases",
    "ListRequest",
    "PageDataRequest",
    "ReassignLicenseRequest",
    "RevokeLicenseAssignmentRequest",
    "UseCase",
    "UseCaseCatalog",
    "UseCaseServices",
    "ValidateLicenseAccessRequest",
    "build_accessor_registry",
    "build_entity_definitions",
]
