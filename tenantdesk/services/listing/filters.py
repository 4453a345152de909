"""
Evaluation des filtres typés.

Règles :
- Champ inconnu de l'accesseur : le filtre est faux (y compris IS_NULL)
- Valeur nulle : seul NullFilter(IS_NULL) est vrai
- Valeur non convertible vers le type du filtre : faux
- Expression régulière invalide : faux
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from functools import lru_cache, singledispatch
from typing import Any, Optional, Union

from tenantdesk.core.value_objects.listing import (
    BooleanFilter,
    DateFilter,
    DateOperator,
    FilterLogic,
    FilterRequest,
    ListFilter,
    ListOperator,
    NullFilter,
    NullOperator,
    NumberFilter,
    NumberOperator,
    RangeFilter,
    StringFilter,
    StringOperator,
    TypedFilter,
)
from tenantdesk.services.listing.accessors import FieldAccessor

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


# ============================================================================
# Conversions
# ============================================================================


def as_text(value: Any) -> str:
    """Forme texte canonique d'une valeur (enums par valeur, booleens en minuscules)."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def as_datetime(value: Any) -> Optional[datetime]:
    """
    Convertit une valeur en datetime UTC.

    Accepté datetime, date, epoch en millisecondes et chaines ISO 8601.
    Les datetime naifs sont considérés comme UTC.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            result = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result.astimezone(timezone.utc)


def as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


@lru_cache(maxsize=256)
def _compile(pattern: str, case_sensitive: bool) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
    except re.error:
        return None


# ============================================================================
# Prédicats
# ============================================================================


@singledispatch
def _check(condition: Any, value: Any) -> bool:
    # Type de filtre non géré : l'élément passe
    return True


@_check.register
def _(condition: StringFilter, value: Any) -> bool:
    text = as_text(value)
    expected = condition.value
    if condition.operator == StringOperator.REGEX:
        pattern = _compile(expected, condition.case_sensitive)
        return pattern is not None and pattern.search(text) is not None
    if not condition.case_sensitive:
        text = text.lower()
        expected = expected.lower()
    if condition.operator == StringOperator.EQUALS:
        return text == expected
    if condition.operator == StringOperator.NOT_EQUALS:
        return text != expected
    if condition.operator == StringOperator.CONTAINS:
        return expected in text
    if condition.operator == StringOperator.STARTS_WITH:
        return text.startswith(expected)
    if condition.operator == StringOperator.ENDS_WITH:
        return text.endswith(expected)
    return False


@_check.register
def _(condition: NumberFilter, value: Any) -> bool:
    number = as_number(value)
    if number is None:
        return False
    expected = float(condition.value)
    op = condition.operator
    if op == NumberOperator.EQUALS:
        return number == expected
    if op == NumberOperator.NOT_EQUALS:
        return number != expected
    if op == NumberOperator.GREATER_THAN:
        return number > expected
    if op == NumberOperator.GREATER_THAN_OR_EQUAL:
        return number >= expected
    if op == NumberOperator.LESS_THAN:
        return number < expected
    if op == NumberOperator.LESS_THAN_OR_EQUAL:
        return number <= expected
    return False


@_check.register
def _(condition: DateFilter, value: Any) -> bool:
    moment = as_datetime(value)
    reference = as_datetime(condition.value)
    if moment is None or reference is None:
        return False
    op = condition.operator
    if op == DateOperator.EQUALS:
        return moment.date() == reference.date()
    if op == DateOperator.BEFORE:
        return moment < reference
    if op == DateOperator.AFTER:
        return moment > reference
    if op == DateOperator.BETWEEN:
        end = as_datetime(condition.range_end)
        if end is None:
            return False
        return reference <= moment <= end
    return False


@_check.register
def _(condition: ListFilter, value: Any) -> bool:
    text = as_text(value)
    members = {as_text(member) for member in condition.values}
    if condition.operator == ListOperator.IN:
        return text in members
    if condition.operator == ListOperator.NOT_IN:
        return text not in members
    return False


@_check.register
def _(condition: RangeFilter, value: Any) -> bool:
    number = as_number(value)
    if number is None:
        return False
    if condition.min is not None:
        if number < condition.min or (number == condition.min and not condition.include_min):
            return False
    if condition.max is not None:
        if number > condition.max or (number == condition.max and not condition.include_max):
            return False
    return True


@_check.register
def _(condition: BooleanFilter, value: Any) -> bool:
    flag = as_bool(value)
    return flag is not None and flag == condition.value


# ============================================================================
# Evaluation de l'arbre
# ============================================================================


def _evaluate(item: Any, entry: Union[TypedFilter, FilterRequest], accessor: FieldAccessor) -> bool:
    if isinstance(entry, FilterRequest):
        return matches(item, entry, accessor)
    if not accessor.has_field(entry.field):
        return False
    value = accessor.get(item, entry.field)
    condition = entry.condition
    if isinstance(condition, NullFilter):
        is_null = value is None
        return is_null if condition.operator == NullOperator.IS_NULL else not is_null
    if value is None:
        return False
    return _check(condition, value)


def matches(item: Any, request: FilterRequest, accessor: FieldAccessor) -> bool:
    """
    Indique si un élément satisfait une requête de filtres.

    Args:
        item: Elément à tester
        request: Arbre de filtres (AND/OR, groupes imbriqués)
        accessor: Accesseur de champs du type de l'élément

    Returns:
        True si l'élément est retenu (toujours True sans filtre)
    """
    if not request.filters:
        return True
    results = (_evaluate(item, entry, accessor) for entry in request.filters)
    if request.logic == FilterLogic.OR:
        return any(results)
    return all(results)


def apply_filters(items: list, request: Optional[FilterRequest], accessor: FieldAccessor) -> list:
    """Retourne les éléments satisfaisant la requête, dans leur ordre d'origine."""
    if request is None or not request.filters:
        return list(items)
    return [item for item in items if matches(item, request, accessor)]
