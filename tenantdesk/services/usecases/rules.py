"""
Règles de validation et normalisation par entité.

Chaque fonction `check_*` retourne la liste des violations détectées
(vide si l'entité est valide). Les fonctions `normalize_*` appliquent les
valeurs par défaut avant persistance.
"""

import math
import re
from typing import Any, NamedTuple

from tenantdesk.core.entities import (
    Balance,
    BalanceType,
    Invoice,
    PaymentMethod,
    PaymentMethodType,
    Plan,
    Role,
    Subscription,
)

# Montant absolu maximal accepté pour un solde
MAX_BALANCE_AMOUNT = 1e15

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_FOUR_DIGITS = re.compile(r"^\d{4}$")
_CURRENCY = re.compile(r"^[A-Za-z]{3}$")


class Violation(NamedTuple):
    """Règle enfreinte : suffixe de clé, message par défaut et paramètres."""

    rule: str
    default: str
    params: dict[str, Any] = {}


def check_subscription(subscription: Subscription) -> list[Violation]:
    violations = []
    if subscription.quantity is not None and subscription.quantity < 0:
        violations.append(Violation("invalid_quantity", "quantity cannot be negative"))
    if subscription.assigned_count < 0:
        violations.append(Violation("invalid_assigned_count", "assigned count cannot be negative"))
    if (
        subscription.date_start is not None
        and subscription.date_end is not None
        and subscription.date_end < subscription.date_start
    ):
        violations.append(Violation("invalid_date_range", "end date must be after start date"))
    return violations


def normalize_subscription(subscription: Subscription) -> None:
    subscription.recompute_available()


def check_balance(balance: Balance) -> list[Violation]:
    """Invariants financiers d'un solde."""
    violations = []
    amount = balance.amount
    if amount is None or math.isnan(amount) or math.isinf(amount):
        violations.append(Violation("invalid_amount", "balance amount must be a finite number"))
    elif abs(amount) > MAX_BALANCE_AMOUNT:
        violations.append(
            Violation("amount_too_large", "balance amount exceeds {limit}", {"limit": MAX_BALANCE_AMOUNT})
        )
    if balance.currency and not _CURRENCY.match(balance.currency):
        violations.append(
            Violation("invalid_currency", "currency must be a 3-letter code: {currency}", {"currency": balance.currency})
        )
    return violations


def normalize_balance(balance: Balance) -> None:
    """Devise par défaut USD en majuscules, type déduit du signe du montant."""
    balance.currency = (balance.currency or "USD").upper()
    if balance.balance_type is None:
        balance.balance_type = BalanceType.CREDIT if balance.amount >= 0 else BalanceType.DEBIT


def check_invoice(invoice: Invoice) -> list[Violation]:
    violations = []
    if invoice.amount is None or math.isnan(invoice.amount) or invoice.amount < 0:
        violations.append(Violation("invalid_amount", "invoice amount cannot be negative"))
    if invoice.currency and not _CURRENCY.match(invoice.currency):
        violations.append(
            Violation("invalid_currency", "currency must be a 3-letter code: {currency}", {"currency": invoice.currency})
        )
    if (
        invoice.date_issued is not None
        and invoice.date_due is not None
        and invoice.date_due < invoice.date_issued
    ):
        violations.append(Violation("invalid_due_date", "due date cannot be before issue date"))
    return violations


def normalize_invoice(invoice: Invoice) -> None:
    invoice.currency = (invoice.currency or "USD").upper()


def check_payment_method(method: PaymentMethod) -> list[Violation]:
    violations = []
    if method.method_type == PaymentMethodType.CARD:
        if method.last_four_digits is not None and not _FOUR_DIGITS.match(method.last_four_digits):
            violations.append(Violation("invalid_last_four_digits", "last four digits must be 4 digits"))
        if method.expiry_month is not None and not 1 <= method.expiry_month <= 12:
            violations.append(Violation("invalid_expiry_month", "expiry month must be between 1 and 12"))
    if method.account_last_four is not None and not _FOUR_DIGITS.match(method.account_last_four):
        violations.append(Violation("invalid_account_last_four", "account last four must be 4 digits"))
    return violations


def check_role(role: Role) -> list[Violation]:
    if role.color and not _HEX_COLOR.match(role.color):
        return [Violation("invalid_color", "color must use the #RRGGBB format: {color}", {"color": role.color})]
    return []


def check_plan(plan: Plan) -> list[Violation]:
    if plan.license_quantity < 0:
        return [Violation("invalid_license_quantity", "license quantity cannot be negative")]
    return []
