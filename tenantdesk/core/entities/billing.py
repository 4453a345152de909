"""
Billing entities.

Plans, subscriptions and the money-related records attached to a client:
balances, invoices and payment methods.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from tenantdesk.core.entities.license import LicenseType


class BalanceType(str, Enum):
    """Kind of balance movement."""

    CREDIT = "credit"
    DEBIT = "debit"
    PENDING = "pending"
    HOLD = "hold"
    REFUND = "refund"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
    VOID = "void"
    OVERDUE = "overdue"


class PaymentMethodType(str, Enum):
    """Supported payment method families."""

    CARD = "card"
    BANK_ACCOUNT = "bank_account"
    EWALLET = "ewallet"


@dataclass
class Plan:
    """
    Commercial plan a subscription is bought from.

    Attributes:
        default_license_type: Type used when licenses are generated from the plan
        license_quantity: Number of seats included by default
    """

    id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    default_license_type: LicenseType = LicenseType.USER
    license_quantity: int = 0
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


@dataclass
class Subscription:
    """
    A client's subscription to a plan.

    Attributes:
        quantity: Number of licenses purchased (None when not seat-based)
        assigned_count: Licenses currently assigned
        available_count: quantity - assigned_count, kept in sync by the license use cases
    """

    id: Optional[str] = None
    name: str = ""
    client_id: str = ""
    plan_id: Optional[str] = None
    price_plan_id: Optional[str] = None
    quantity: Optional[int] = None
    assigned_count: int = 0
    available_count: Optional[int] = None
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None

    def recompute_available(self) -> None:
        """Recalcule available_count depuis quantity et assigned_count."""
        if self.quantity is not None:
            self.available_count = self.quantity - self.assigned_count


@dataclass
class Balance:
    """Balance entry for a client, optionally tied to a subscription."""

    id: Optional[str] = None
    client_id: str = ""
    subscription_id: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    balance_type: Optional[BalanceType] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


@dataclass
class Invoice:
    """Invoice issued to a client."""

    id: Optional[str] = None
    invoice_number: str = ""
    client_id: str = ""
    subscription_id: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.DRAFT
    date_issued: Optional[datetime] = None
    date_due: Optional[datetime] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


@dataclass
class PaymentMethod:
    """
    Stored payment method.

    Only masked card/bank details are kept (last four digits).
    """

    id: Optional[str] = None
    client_id: Optional[str] = None
    name: str = ""
    method_type: PaymentMethodType = PaymentMethodType.CARD
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
