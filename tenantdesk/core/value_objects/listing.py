"""
Objets valeur des requêtes et résultats de listes paginées.

Une requête de liste combine quatre parties optionnelles :
- FilterRequest : combinaison AND/OR de filtres typés (ou de groupes imbriqués)
- SearchRequest : recherche plein texte avec score de pertinence
- SortRequest : tri composite stable
- PaginationRequest : pagination par numéro de page ou par curseur

Le résultat (PageResult) contient la page d'éléments, la réponse de
pagination et un SearchResult par élément (index parallèle).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


# ============================================================================
# Filtres
# ============================================================================


class FilterLogic(str, Enum):
    """Opérateur logique combinant les filtres d'une requête."""

    AND = "and"
    OR = "or"


class StringOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


class NumberOperator(str, Enum):
    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"


class DateOperator(str, Enum):
    EQUALS = "equals"
    BEFORE = "before"
    AFTER = "after"
    BETWEEN = "between"


class ListOperator(str, Enum):
    IN = "in"
    NOT_IN = "not_in"


class NullOperator(str, Enum):
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


@dataclass(frozen=True)
class StringFilter:
    """Comparaison de chaîne, insensible à la casse par défaut."""

    value: str
    operator: StringOperator = StringOperator.EQUALS
    case_sensitive: bool = False


@dataclass(frozen=True)
class NumberFilter:
    value: float
    operator: NumberOperator = NumberOperator.EQUALS


@dataclass(frozen=True)
class DateFilter:
    """
    Comparaison de date.

    EQUALS compare le jour calendaire, BETWEEN est inclusif et utilise range_end.
    Les valeurs peuvent être des datetime ou des chaines ISO 8601.
    """

    value: Union[datetime, str]
    operator: DateOperator = DateOperator.EQUALS
    range_end: Union[datetime, str, None] = None


@dataclass(frozen=True)
class ListFilter:
    """Appartenance à un ensemble (comparaison sur la forme texte)."""

    values: tuple[Any, ...]
    operator: ListOperator = ListOperator.IN


@dataclass(frozen=True)
class RangeFilter:
    min: Optional[float] = None
    max: Optional[float] = None
    include_min: bool = True
    include_max: bool = True


@dataclass(frozen=True)
class BooleanFilter:
    value: bool


@dataclass(frozen=True)
class NullFilter:
    operator: NullOperator = NullOperator.IS_NULL


Condition = Union[
    StringFilter, NumberFilter, DateFilter, ListFilter, RangeFilter, BooleanFilter, NullFilter
]


@dataclass(frozen=True)
class TypedFilter:
    """Un filtre nommé : champ + prédicat typé."""

    field: str
    condition: Condition


@dataclass(frozen=True)
class FilterRequest:
    """
    Combinaison logique de filtres.

    Les éléments de `filters` sont des TypedFilter ou des FilterRequest
    imbriqués (groupes), ce qui permet de melanger AND et OR.
    Une requête sans filtre accepte tous les éléments.
    """

    filters: tuple[Union[TypedFilter, "FilterRequest"], ...] = ()
    logic: FilterLogic = FilterLogic.AND

    def field_names(self) -> list[str]:
        """Liste à plat des champs référencés (groupes inclus)."""
        names = []
        for item in self.filters:
            if isinstance(item, FilterRequest):
                names.extend(item.field_names())
            else:
                names.append(item.field)
        return names


# ============================================================================
# Tri
# ============================================================================


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NullOrder(str, Enum):
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class SortField:
    field: str
    direction: SortDirection = SortDirection.ASC
    null_order: NullOrder = NullOrder.LAST
    case_sensitive: bool = True


@dataclass(frozen=True)
class SortRequest:
    """Tri composite : le premier champ est la clé principale."""

    fields: tuple[SortField, ...] = ()


# ============================================================================
# Recherche
# ============================================================================


@dataclass(frozen=True)
class SearchRequest:
    """
    Recherche plein texte.

    Attributs:
        query: Texte recherche
        fields: Champs à interroger (vide = champs par défaut de l'entité)
        max_results: Nombre maximum de résultats (0 = pas de limite)
        field_weights: Multiplicateur de score par champ (défaut 1.0)
        highlight: Produire les extraits surlignés
        fuzzy: Activer la correspondance approximative
    """

    query: str
    fields: tuple[str, ...] = ()
    max_results: int = 0
    field_weights: dict[str, float] = field(default_factory=dict)
    highlight: bool = True
    fuzzy: bool = False


@dataclass(frozen=True)
class HighlightSpan:
    """Extrait surligne : position de la correspondance dans la valeur du champ."""

    field: str
    start: int
    end: int
    fragment: str


@dataclass(frozen=True)
class SearchResult:
    score: float = 0.0
    highlights: tuple[HighlightSpan, ...] = ()


@dataclass(frozen=True)
class SearchMetrics:
    """Statistiques d'une recherche."""

    total_results: int
    top_terms: tuple[str, ...] = ()
    field_match_counts: dict[str, int] = field(default_factory=dict)


# ============================================================================
# Pagination
# ============================================================================


@dataclass(frozen=True)
class PaginationRequest:
    """
    Pagination par page (page >= 1) ou par curseur opaque.

    Si `cursor` est renseigné, le mode curseur est utilisé et `page` est ignoré.
    """

    limit: Optional[int] = None
    page: Optional[int] = None
    cursor: Optional[str] = None

    @property
    def uses_cursor(self) -> bool:
        return self.cursor is not None


@dataclass(frozen=True)
class PaginationResponse:
    total_items: int
    current_page: int
    total_pages: int
    has_next: bool
    has_previous: bool
    limit: int
    next_cursor: Optional[str] = None
    previous_cursor: Optional[str] = None


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """
    Page de résultats.

    `search_results[i]` correspond a `items[i]`.
    """

    items: list[T]
    pagination: PaginationResponse
    search_results: list[SearchResult]
    search_metrics: Optional[SearchMetrics] = None
