"""
Contexte d'appel et permissions.

Le RequestContext transporte l'identité de l'appelant et le type d'activité
(business type) qui sélectionne les messages traduits et les données de démo.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_BUSINESS_TYPE = "education"


class Action(str, Enum):
    """Action soumise à autorisation."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


@dataclass(frozen=True)
class RequestContext:
    """
    Contexte d'une requête entrante.

    Attributs:
        user_id: Utilisateur authentifié (None si anonyme)
        business_type: Type d'activité du tenant (ex: "education", "fitness_center")
        locale: Langue préférée
    """

    user_id: Optional[str] = None
    business_type: str = DEFAULT_BUSINESS_TYPE
    locale: str = "en"


@dataclass(frozen=True)
class Permission:
    """Couple (entité, action), rendu sous la forme "license:update"."""

    entity: str
    action: Action

    def __str__(self) -> str:
        return f"{self.entity}:{self.action.value}"


class EntityName:
    """Noms des entités (préfixe des permissions et des clés de traduction)."""

    WORKSPACE = "workspace"
    ROLE = "role"
    PLAN = "plan"
    SUBSCRIPTION = "subscription"
    LICENSE = "license"
    LICENSE_HISTORY = "license_history"
    BALANCE = "balance"
    INVOICE = "invoice"
    PAYMENT_METHOD = "payment_method"

    ALL = (
        WORKSPACE,
        ROLE,
        PLAN,
        SUBSCRIPTION,
        LICENSE,
        LICENSE_HISTORY,
        BALANCE,
        INVOICE,
        PAYMENT_METHOD,
    )
