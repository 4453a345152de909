"""
Modèles SQLModel pour la base de données TenantDesk.

Ces modèles représentent les tables de la base de données. Ils sont
distincts des entités de domaine (dataclass dans core/entities/) ; les
colonnes portent les mêmes noms que les champs des entités, ce qui
permet une conversion générique dans SQLModelRepository.

Tables:
- workspaces, roles : organisation du tenant
- plans, subscriptions : offre commerciale et souscriptions
- licenses, license_history : licences et journal des mutations
- balances, invoices, payment_methods : facturation

Les enums sont stockés par leur valeur (colonnes texte).
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class WorkspaceModel(SQLModel, table=True):
    __tablename__ = "workspaces"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    private: bool = False
    owner_id: Optional[str] = Field(default=None, index=True)
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class RoleModel(SQLModel, table=True):
    __tablename__ = "roles"

    id: str = Field(primary_key=True)
    workspace_id: Optional[str] = Field(default=None, index=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    color: Optional[str] = None  # ex: "#1E90FF"
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class PlanModel(SQLModel, table=True):
    __tablename__ = "plans"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    default_license_type: str = "user"
    license_quantity: int = 0
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class SubscriptionModel(SQLModel, table=True):
    """
    Souscription d'un client à un plan.

    assigned_count / available_count sont tenus à jour par les cas
    d'utilisation des licences.
    """

    __tablename__ = "subscriptions"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    client_id: str = Field(index=True)
    plan_id: Optional[str] = Field(default=None, index=True)
    price_plan_id: Optional[str] = None
    quantity: Optional[int] = None
    assigned_count: int = 0
    available_count: Optional[int] = None
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class LicenseModel(SQLModel, table=True):
    __tablename__ = "licenses"

    id: str = Field(primary_key=True)
    subscription_id: str = Field(index=True)
    plan_id: Optional[str] = None
    license_key: Optional[str] = Field(default=None, index=True, unique=True)
    external_key: Optional[str] = None
    license_type: str = "user"
    status: str = Field(default="pending", index=True)
    date_valid_from: Optional[datetime] = None
    date_valid_until: Optional[datetime] = None
    assignee_id: Optional[str] = Field(default=None, index=True)
    assignee_type: Optional[str] = None
    assignee_name: Optional[str] = None
    assigned_by: Optional[str] = None
    date_assigned: Optional[datetime] = None
    sequence_number: Optional[int] = None
    notes: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class LicenseHistoryModel(SQLModel, table=True):
    """Journal des mutations de licences (une ligne par action)."""

    __tablename__ = "license_history"

    id: str = Field(primary_key=True)
    license_id: str = Field(index=True)
    action: str
    assignee_id: Optional[str] = None
    assignee_type: Optional[str] = None
    assignee_name: Optional[str] = None
    previous_assignee_id: Optional[str] = None
    previous_assignee_type: Optional[str] = None
    previous_assignee_name: Optional[str] = None
    performed_by: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    status_before: Optional[str] = None
    status_after: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = Field(default=None, index=True)
    date_modified: Optional[datetime] = None


class BalanceModel(SQLModel, table=True):
    __tablename__ = "balances"

    id: str = Field(primary_key=True)
    client_id: str = Field(index=True)
    subscription_id: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    balance_type: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class InvoiceModel(SQLModel, table=True):
    __tablename__ = "invoices"

    id: str = Field(primary_key=True)
    invoice_number: str = Field(index=True)
    client_id: str = Field(index=True)
    subscription_id: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    status: str = "draft"
    date_issued: Optional[datetime] = None
    date_due: Optional[datetime] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


class PaymentMethodModel(SQLModel, table=True):
    __tablename__ = "payment_methods"

    id: str = Field(primary_key=True)
    client_id: Optional[str] = Field(default=None, index=True)
    name: str
    method_type: str = "card"
    cardholder_name: Optional[str] = None
    last_four_digits: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    bank_name: Optional[str] = None
    account_last_four: Optional[str] = None
    is_default: bool = False
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
