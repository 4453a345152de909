"""
Exceptions du domaine TenantDesk.

Trois familles :
- UseCaseError : erreurs remontées par les cas d'utilisation (message traduit + clé)
- RepositoryError : erreurs des adaptateurs de persistance
- ConfigurationError : composition invalide (fournisseur ou entité inconnus)

Les erreurs du traitement de listes (ListProcessingError) vivent dans
tenantdesk.services.listing.errors.
"""

from typing import Optional


class DomainError(Exception):
    pass


class UseCaseError(DomainError):
    """
    Erreur d'un cas d'utilisation.

    Attributes:
        message: Message traduit destiné à l'utilisateur
        key: Clé de traduction (ex: "license.errors.not_found")
    """

    kind = "error"

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        self.message = message
        self.key = key
        super().__init__(message)


class ValidationError(UseCaseError):
    kind = "validation_error"


class AuthorizationError(UseCaseError):
    kind = "authorization_error"


class NotFoundError(UseCaseError):
    kind = "not_found"


class BusinessRuleError(UseCaseError):
    kind = "business_rule_violation"


class OperationFailedError(UseCaseError):
    kind = "operation_failed"


class RepositoryError(DomainError):
    pass


class EntityNotFoundError(RepositoryError):
    """Entité absente du stockage."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ConfigurationError(DomainError):
    pass
