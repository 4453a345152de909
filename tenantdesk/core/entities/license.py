"""
Entités de licence et d'historique de licence.

Une licence appartient à une souscription et peut être assignée à un
utilisateur, un appareil ou un tenant. Chaque mutation de statut ou
d'assignation produit une entrée LicenseHistory.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LicenseStatus(str, Enum):
    """Statut du cycle de vie d'une licence."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REVOKED = "revoked"
    EXPIRED = "expired"


class LicenseType(str, Enum):
    """Type de licence (cible de l'assignation)."""

    USER = "user"
    DEVICE = "device"
    TENANT = "tenant"
    FLOATING = "floating"


class LicenseHistoryAction(str, Enum):
    """Action tracée dans l'historique d'une licence."""

    CREATED = "created"
    ASSIGNED = "assigned"
    REVOKED = "revoked"
    REASSIGNED = "reassigned"
    SUSPENDED = "suspended"
    REACTIVATED = "reactivated"
    EXPIRED = "expired"
    DELETED = "deleted"


# Statuts à partir desquels une licence ne peut plus être assignée
TERMINAL_STATUSES = frozenset({LicenseStatus.REVOKED, LicenseStatus.EXPIRED})


@dataclass
class License:
    """
    Licence rattachée à une souscription.

    Attributs:
        id: Identifiant unique
        subscription_id: Souscription propriétaire
        plan_id: Plan d'origine (optionnel)
        license_key: Clé lisible, ex: "LIC-2024-AB12CD34"
        external_key: Clé chez un fournisseur externe (optionnel)
        license_type: Cible de l'assignation
        status: Statut courant
        date_valid_from / date_valid_until: Fenêtre de validité (optionnelle)
        assignee_id / assignee_type / assignee_name: Titulaire courant
        assigned_by: Utilisateur ayant effectue l'assignation
        date_assigned: Date de la dernière assignation
        sequence_number: Rang dans le lot créé depuis un plan
    """

    id: Optional[str] = None
    subscription_id: str = ""
    plan_id: Optional[str] = None
    license_key: Optional[str] = None
    external_key: Optional[str] = None
    license_type: LicenseType = LicenseType.USER
    status: LicenseStatus = LicenseStatus.PENDING
    date_valid_from: Optional[datetime] = None
    date_valid_until: Optional[datetime] = None
    assignee_id: Optional[str] = None
    assignee_type: Optional[str] = None
    assignee_name: Optional[str] = None
    assigned_by: Optional[str] = None
    date_assigned: Optional[datetime] = None
    sequence_number: Optional[int] = None
    notes: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None

    @property
    def is_assigned(self) -> bool:
        """Indique si la licence a un titulaire."""
        return bool(self.assignee_id)

    def clear_assignee(self) -> None:
        """Retire le titulaire courant."""
        self.assignee_id = None
        self.assignee_type = None
        self.assignee_name = None
        self.assigned_by = None
        self.date_assigned = None


@dataclass
class LicenseHistory:
    """
    Entrée d'audit d'une licence.

    Enregistre l'action, le titulaire avant/après et le statut avant/après.
    """

    id: Optional[str] = None
    license_id: str = ""
    action: LicenseHistoryAction = LicenseHistoryAction.CREATED
    assignee_id: Optional[str] = None
    assignee_type: Optional[str] = None
    assignee_name: Optional[str] = None
    previous_assignee_id: Optional[str] = None
    previous_assignee_type: Optional[str] = None
    previous_assignee_name: Optional[str] = None
    performed_by: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    status_before: Optional[LicenseStatus] = None
    status_after: Optional[LicenseStatus] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
