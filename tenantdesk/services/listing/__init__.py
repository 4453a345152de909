"""
Traitement générique des listes (filtre, recherche, tri, pagination).

Exports :
- ListDataProcessor : processeur paramètre par un accesseur de champs
- FieldAccessor, AccessorRegistry : tables de getters par type d'entité
- ListProcessingError, ItemShapeMismatchError, InvalidCursorError : erreurs structurées
"""

from tenantdesk.services.listing.accessors import AccessorRegistry, FieldAccessor
from tenantdesk.services.listing.errors import (
    InvalidCursorError,
    ItemShapeMismatchError,
    ListProcessingError,
)
from tenantdesk.services.listing.processor import ListDataProcessor

__all__ = [
    "AccessorRegistry",
    "FieldAccessor",
    "InvalidCursorError",
    "ItemShapeMismatchError",
    "ListDataProcessor",
    "ListProcessingError",
]
