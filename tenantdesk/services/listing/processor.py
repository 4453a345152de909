"""
Traitement générique des listes paginées.

Applique, dans un ordre fixe, les quatre étapes d'une requête de liste :
1. filtre  : ne garde que les éléments satisfaisant l'arbre de filtres
2. recherche : score de pertinence, éléments à score nul écartés
3. tri : tri composite stable
4. pagination : le total compte les éléments après filtre et recherche

Le traitement est pur : il ne modifie ni la liste d'entrée ni les éléments.
"""

from typing import Generic, Optional, Sequence, TypeVar

from loguru import logger

from tenantdesk.core.value_objects.listing import (
    FilterRequest,
    PageResult,
    PaginationRequest,
    SearchRequest,
    SearchResult,
    SortRequest,
)
from tenantdesk.services.listing.accessors import FieldAccessor
from tenantdesk.services.listing.filters import apply_filters
from tenantdesk.services.listing.pagination import DEFAULT_LIMIT, MAX_LIMIT, paginate
from tenantdesk.services.listing.search import apply_search
from tenantdesk.services.listing.sorting import apply_sort

T = TypeVar("T")

_EMPTY_RESULT = SearchResult()


class ListDataProcessor(Generic[T]):
    """
    Processeur de listes pour un type d'entité.

    Utilisation :
        processor = ListDataProcessor(accessor, max_limit=100)
        page = processor.process_list_request(items, pagination, filters, sort, search)
    """

    def __init__(
        self,
        accessor: FieldAccessor[T],
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        """
        Initialise le processeur.

        Args :
            accessor : Accesseur de champs du type traite
            default_limit : Taille de page si aucune limite n'est demandée
            max_limit : Taille de page maximale
        """
        self._accessor = accessor
        self._default_limit = default_limit
        self._max_limit = max_limit

    @property
    def accessor(self) -> FieldAccessor[T]:
        return self._accessor

    def process_list_request(
        self,
        items: Sequence[T],
        pagination: Optional[PaginationRequest] = None,
        filters: Optional[FilterRequest] = None,
        sort: Optional[SortRequest] = None,
        search: Optional[SearchRequest] = None,
    ) -> PageResult[T]:
        """
        Produit une page de résultats.

        Args :
            items : Eléments du même type (liste éventuellement vide)
            pagination : Requête de pagination (None = première page)
            filters : Arbre de filtres (None = pas de filtre)
            sort : Champs de tri (None = ordre conserve)
            search : Recherche plein texte (None ou requête vide = pas de recherche)

        Retourne :
            PageResult dont search_results est parallèle à items

        Lève :
            ItemShapeMismatchError : un élément n'a pas le type de l'accesseur
            InvalidCursorError : jeton de curseur illisible
        """
        candidates = list(items)
        for index, item in enumerate(candidates):
            self._accessor.check(item, index)

        candidates = apply_filters(candidates, filters, self._accessor)

        metrics = None
        scores: dict[int, SearchResult] = {}
        if search is not None and search.query.strip():
            candidates, results, metrics = apply_search(candidates, search, self._accessor)
            scores = {id(item): result for item, result in zip(candidates, results)}

        candidates = apply_sort(candidates, sort, self._accessor)
        page_items, pagination_response = paginate(
            candidates, pagination, self._default_limit, self._max_limit
        )

        logger.debug(
            f"Liste traitée : {len(items)} éléments, {pagination_response.total_items} retenus, "
            f"page {pagination_response.current_page}/{pagination_response.total_pages}"
        )
        return PageResult(
            items=page_items,
            pagination=pagination_response,
            search_results=[scores.get(id(item), _EMPTY_RESULT) for item in page_items],
            search_metrics=metrics,
        )
