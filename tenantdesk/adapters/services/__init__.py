"""
Adaptateurs des services transverses.

Traduction (catalogues JSON), autorisation (table statique) et génération d'IDs.
"""

from tenantdesk.adapters.services.authorization import (
    DisabledAuthorizationService,
    StaticAuthorizationService,
)
from tenantdesk.adapters.services.ids import UUIDService
from tenantdesk.adapters.services.translation import (
    JsonTranslationService,
    NoOpTranslationService,
)

__all__ = [
    "DisabledAuthorizationService",
    "JsonTranslationService",
    "NoOpTranslationService",
    "StaticAuthorizationService",
    "UUIDService",
]
