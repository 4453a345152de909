"""
Definitions des entités gérées par les cas d'utilisation génériques.

Une définition regroupe le type de l'entité, son accesseur de champs (qui
fixe aussi l'ensemble des champs autorisés dans les filtres, tris et
recherches), les champs obligatoires et les règles de validation.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

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
from tenantdesk.core.value_objects.context import EntityName
from tenantdesk.services.listing.accessors import AccessorRegistry, FieldAccessor
from tenantdesk.services.usecases import rules
from tenantdesk.services.usecases.rules import Violation


@dataclass(frozen=True)
class EntityDefinition:
    """
    Description d'une entité pour les cas d'utilisation génériques.

    Attributs:
        name: Nom de l'entité (ex: "license")
        accessor: Accesseur de champs (champs autorisés)
        required_fields: Champs texte obligatoires à la création/mise à jour
        check: Règles de validation (retourne les violations)
        normalize: Valeurs par défaut appliquées avant persistance
        verify_loaded_items: Re-verifier les règles sur les entités lues
        max_page_size: Taille de page maximale
        max_search_results: Nombre maximal de résultats de recherche
    """

    name: str
    accessor: FieldAccessor
    required_fields: tuple[str, ...] = ()
    check: Optional[Callable[[Any], list[Violation]]] = None
    normalize: Optional[Callable[[Any], None]] = None
    verify_loaded_items: bool = False
    max_page_size: int = 100
    max_search_results: int = 1000

    @property
    def entity_type(self) -> type:
        return self.accessor.entity_type

    @property
    def allowed_fields(self) -> tuple[str, ...]:
        return self.accessor.field_names


def build_accessor_registry() -> AccessorRegistry:
    """Enregistre l'accesseur de chaque entité du domaine."""
    registry = AccessorRegistry()
    registry.register(
        EntityName.WORKSPACE,
        FieldAccessor.for_dataclass(Workspace, searchable=("name", "description")),
    )
    registry.register(
        EntityName.ROLE,
        FieldAccessor.for_dataclass(Role, searchable=("name", "description")),
    )
    registry.register(
        EntityName.PLAN,
        FieldAccessor.for_dataclass(Plan, searchable=("name", "description")),
    )
    registry.register(
        EntityName.SUBSCRIPTION,
        FieldAccessor.for_dataclass(Subscription, searchable=("name", "client_id")),
    )
    registry.register(
        EntityName.LICENSE,
        FieldAccessor.for_dataclass(
            License,
            searchable=("license_key", "assignee_name", "notes"),
            extra={"is_assigned": lambda lic: lic.is_assigned},
        ),
    )
    registry.register(
        EntityName.LICENSE_HISTORY,
        FieldAccessor.for_dataclass(LicenseHistory, searchable=("reason", "notes", "performed_by")),
    )
    registry.register(
        EntityName.BALANCE,
        FieldAccessor.for_dataclass(Balance, searchable=("client_id", "currency")),
    )
    registry.register(
        EntityName.INVOICE,
        FieldAccessor.for_dataclass(Invoice, searchable=("invoice_number", "client_id")),
    )
    registry.register(
        EntityName.PAYMENT_METHOD,
        FieldAccessor.for_dataclass(
            PaymentMethod, searchable=("name", "cardholder_name", "bank_name")
        ),
    )
    return registry


def build_entity_definitions(
    accessors: AccessorRegistry,
    max_page_size: int = 100,
    max_search_results: int = 1000,
) -> dict[str, EntityDefinition]:
    """
    Construit les definitions de toutes les entités.

    Args:
        accessors: Registre des accesseurs de champs
        max_page_size: Taille de page maximale commune
        max_search_results: Nombre maximal de résultats de recherche
    """

    def define(name: str, **kwargs: Any) -> EntityDefinition:
        return EntityDefinition(
            name=name,
            accessor=accessors.get(name),
            max_page_size=max_page_size,
            max_search_results=max_search_results,
            **kwargs,
        )

    definitions = [
        define(EntityName.WORKSPACE, required_fields=("name",)),
        define(EntityName.ROLE, required_fields=("name",), check=rules.check_role),
        define(EntityName.PLAN, required_fields=("name",), check=rules.check_plan),
        define(
            EntityName.SUBSCRIPTION,
            required_fields=("name", "client_id"),
            check=rules.check_subscription,
            normalize=rules.normalize_subscription,
        ),
        define(EntityName.LICENSE, required_fields=("subscription_id",)),
        define(EntityName.LICENSE_HISTORY, required_fields=("license_id",)),
        define(
            EntityName.BALANCE,
            required_fields=("client_id",),
            check=rules.check_balance,
            normalize=rules.normalize_balance,
            verify_loaded_items=True,
        ),
        define(
            EntityName.INVOICE,
            required_fields=("invoice_number", "client_id"),
            check=rules.check_invoice,
            normalize=rules.normalize_invoice,
        ),
        define(
            EntityName.PAYMENT_METHOD,
            required_fields=("name",),
            check=rules.check_payment_method,
        ),
    ]
    return {definition.name: definition for definition in definitions}
