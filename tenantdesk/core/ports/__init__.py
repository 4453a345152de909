"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance des données
- IEntityRepository : contrat CRUD + page data générique
- ILicenseRepository, ILicenseHistoryRepository, ... : un port par entité

Ports service : Contrats des services transverses
- ITranslationService : messages traduits par type d'activité
- IAuthorizationService : permissions "entité:action"
- ITransactionService : unité de travail atomique
- IIDService : génération d'identifiants
"""

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
from tenantdesk.core.ports.services import (
    IAuthorizationService,
    IIDService,
    ITransactionService,
    ITranslationService,
)

__all__ = [
    "IAuthorizationService",
    "IBalanceRepository",
    "IEntityRepository",
    "IIDService",
    "IInvoiceRepository",
    "ILicenseHistoryRepository",
    "ILicenseRepository",
    "IPaymentMethodRepository",
    "IPlanRepository",
    "IRoleRepository",
    "ISubscriptionRepository",
    "ITransactionService",
    "ITranslationService",
    "IWorkspaceRepository",
    "Repositories",
]
