"""
Business entities representing core domain concepts.

Entities are mutable objects with identity that persist over time.

Exports:
- Workspace, Role: tenant organisation
- Plan, Subscription: what a client bought
- License, LicenseHistory: seats of a subscription and their audit trail
- Balance, Invoice, PaymentMethod: billing records
"""

from tenantdesk.core.entities.billing import (
    Balance,
    BalanceType,
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    PaymentMethodType,
    Plan,
    Subscription,
)
from tenantdesk.core.entities.license import (
    TERMINAL_STATUSES,
    License,
    LicenseHistory,
    LicenseHistoryAction,
    LicenseStatus,
    LicenseType,
)
from tenantdesk.core.entities.workspace import Role, Workspace

__all__ = [
    "Balance",
    "BalanceType",
    "Invoice",
    "InvoiceStatus",
    "License",
    "LicenseHistory",
    "LicenseHistoryAction",
    "LicenseStatus",
    "LicenseType",
    "PaymentMethod",
    "PaymentMethodType",
    "Plan",
    "Role",
    "Subscription",
    "TERMINAL_STATUSES",
    "Workspace",
]
