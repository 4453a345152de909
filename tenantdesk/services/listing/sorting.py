"""
Tri composite stable.

Le tri est applique en passes successives, de la clé la moins significative
à la clé principale ; la stabilité de sorted() garantit l'ordre composite
et conserve l'ordre d'entrée des éléments à clés égales.

Les valeurs de types différents sont comparées par famille :
nombres < textes < dates < autres (compares sur leur forme texte).
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from tenantdesk.core.value_objects.listing import NullOrder, SortDirection, SortField, SortRequest
from tenantdesk.services.listing.accessors import FieldAccessor
from tenantdesk.services.listing.filters import as_datetime

_NUMBER, _TEXT, _DATE, _OTHER = range(4)


def _comparable(value: Any, case_sensitive: bool) -> tuple:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (bool, int, float, Decimal)):
        return (_NUMBER, float(value))
    if isinstance(value, str):
        return (_TEXT, value if case_sensitive else value.lower())
    if isinstance(value, (datetime, date)):
        return (_DATE, as_datetime(value).timestamp())
    return (_OTHER, str(value))


def _sort_key(field: SortField, accessor: FieldAccessor):
    descending = field.direction == SortDirection.DESC
    # Avec reverse=True l'ordre des rangs est inverse : on compense pour les nuls
    nulls_first_in_key = (field.null_order == NullOrder.FIRST) != descending
    null_rank = 0 if nulls_first_in_key else 2

    def key(item: Any) -> tuple:
        value = accessor.get(item, field.field)
        if value is None:
            return (null_rank,)
        return (1, _comparable(value, field.case_sensitive))

    return key


def apply_sort(items: list, request: Optional[SortRequest], accessor: FieldAccessor) -> list:
    """
    Trie les éléments selon la requête.

    Args:
        items: Eléments à trier (non modifiés)
        request: Champs de tri, le premier étant la clé principale
        accessor: Accesseur de champs du type des éléments

    Returns:
        Nouvelle liste triée
    """
    result = list(items)
    if request is None or not request.fields:
        return result
    for field in reversed(request.fields):
        result.sort(
            key=_sort_key(field, accessor),
            reverse=field.direction == SortDirection.DESC,
        )
    return result
