"""
Tests unitaires du traitement générique des listes.

Tests couvrant:
- filtres typés (égalité, plages, listes, nuls, dates, groupes AND/OR)
- recherche avec score, surlignage et métriques
- tri composite stable et ordre des nuls
- pagination par page et par curseur, bornage de la limite
- scénarios de référence (filtre simple, dernière page, classement, liste vide, tri composite)
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pytest

from tenantdesk.core.value_objects import (
    BooleanFilter,
    DateFilter,
    DateOperator,
    FilterLogic,
    FilterRequest,
    ListFilter,
    ListOperator,
    NullFilter,
    NullOperator,
    NullOrder,
    NumberFilter,
    NumberOperator,
    PaginationRequest,
    RangeFilter,
    SearchRequest,
    SortDirection,
    SortField,
    SortRequest,
    StringFilter,
    StringOperator,
    TypedFilter,
)
from tenantdesk.services.listing import (
    FieldAccessor,
    InvalidCursorError,
    ItemShapeMismatchError,
    ListDataProcessor,
)
from tenantdesk.services.listing.pagination import decode_cursor, encode_cursor, resolve_limit


@dataclass
class Item:
    id: str
    name: str
    status: str = "open"
    active: bool = True
    amount: float = 0.0
    notes: Optional[str] = None
    created: Optional[datetime] = None


def _where(*filters, logic=FilterLogic.AND) -> FilterRequest:
    return FilterRequest(filters=tuple(filters), logic=logic)


def _ids(page) -> list[str]:
    return [item.id for item in page.items]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def accessor() -> FieldAccessor:
    return FieldAccessor.for_dataclass(Item, searchable=("name", "notes"))


@pytest.fixture
def processor(accessor) -> ListDataProcessor:
    return ListDataProcessor(accessor, default_limit=20, max_limit=100)


@pytest.fixture
def numbered_items() -> list[Item]:
    """25 éléments i00..i24, montant = rang."""
    return [Item(id=f"i{n:02d}", name=f"Item {n:02d}", amount=float(n)) for n in range(25)]


@pytest.fixture
def mixed_items() -> list[Item]:
    return [
        Item(id="a", name="Alpha", status="open", active=True, amount=5.0, notes="first"),
        Item(id="b", name="beta", status="closed", active=False, amount=15.0),
        Item(id="c", name="Gamma", status="open", active=True, amount=25.0, notes=None),
        Item(id="d", name="delta", status="archived", active=False, amount=10.0, notes="last"),
    ]


# ============================================================================
# Scénarios de référence
# ============================================================================


class TestReferenceScenarios:
    """Scénarios de référence du traitement de listes."""

    def test_basic_filter(self, processor):
        """10 éléments dont 4 actifs, filtre active == true : 4 résultats."""
        items = [Item(id=str(n), name=f"n{n}", active=n < 4) for n in range(10)]

        page = processor.process_list_request(
            items, filters=_where(TypedFilter("active", BooleanFilter(True)))
        )

        assert len(page.items) == 4
        assert page.pagination.total_items == 4

    def test_pagination_boundary(self, processor, numbered_items):
        """25 éléments, limite 10, page 3 : 5 éléments, pas de page suivante."""
        page = processor.process_list_request(
            numbered_items, pagination=PaginationRequest(limit=10, page=3)
        )

        assert _ids(page) == ["i20", "i21", "i22", "i23", "i24"]
        assert page.pagination.has_next is False
        assert page.pagination.has_previous is True
        assert page.pagination.total_pages == 3

    def test_search_ranking(self, processor):
        """La correspondance exacte passe avant le préfixe ; "Beta" est exclu."""
        items = [Item(id="1", name="Alphabet"), Item(id="2", name="Beta"), Item(id="3", name="Alpha")]

        page = processor.process_list_request(
            items, search=SearchRequest(query="Alpha", fields=("name",))
        )

        assert [item.name for item in page.items] == ["Alpha", "Alphabet"]
        assert page.search_results[0].score == pytest.approx(1.0)
        assert page.search_results[1].score == pytest.approx(0.7)
        assert page.pagination.total_items == 2

    @pytest.mark.parametrize(
        "kwargs",
        [
            {},
            {"pagination": PaginationRequest(limit=5, page=4)},
            {"filters": _where(TypedFilter("active", BooleanFilter(True)))},
            {"search": SearchRequest(query="alpha")},
            {"sort": SortRequest((SortField("name"),))},
        ],
    )
    def test_empty_input(self, processor, kwargs):
        """Liste vide : page vide, aucune erreur quelle que soit la requête."""
        page = processor.process_list_request([], **kwargs)

        assert page.items == []
        assert page.search_results == []
        assert page.pagination.total_items == 0
        assert page.pagination.has_next is False
        assert page.pagination.has_previous is False

    def test_composite_sort(self, processor):
        """Tri [status ASC, name ASC] : groupes par statut, noms ordonnés dans chaque groupe."""
        items = [
            Item(id="1", name="b", status="x"),
            Item(id="2", name="a", status="y"),
            Item(id="3", name="c", status="x"),
            Item(id="4", name="d", status="y"),
            Item(id="5", name="a", status="x"),
        ]

        page = processor.process_list_request(
            items, sort=SortRequest((SortField("status"), SortField("name")))
        )

        assert [(item.status, item.name) for item in page.items] == [
            ("x", "a"), ("x", "b"), ("x", "c"), ("y", "a"), ("y", "d"),
        ]


# ============================================================================
# Propriétés
# ============================================================================


class TestProperties:
    """Propriétés générales du processeur."""

    @pytest.mark.parametrize("limit", [1, 3, 7, 10, 25, 50])
    def test_total_count_is_independent_of_page(self, processor, numbered_items, limit):
        filters = _where(TypedFilter("amount", NumberFilter(10, NumberOperator.GREATER_THAN_OR_EQUAL)))
        totals = {
            processor.process_list_request(
                numbered_items, pagination=PaginationRequest(limit=limit, page=page), filters=filters
            ).pagination.total_items
            for page in (1, 2, 5)
        }
        assert totals == {15}

    def test_stable_sort_keeps_input_order_for_ties(self, processor):
        items = [Item(id=str(n), name=f"n{n}", status="same" if n % 2 else "other") for n in range(8)]

        page = processor.process_list_request(items, sort=SortRequest((SortField("status"),)))

        assert _ids(page) == ["0", "2", "4", "6", "1", "3", "5", "7"]

    @pytest.mark.parametrize(
        "requested, expected",
        [(None, 20), (0, 20), (-5, 20), (1, 1), (7, 7), (100, 100), (1000, 100)],
    )
    def test_limit_clamping(self, processor, numbered_items, requested, expected):
        items = numbered_items * 5
        page = processor.process_list_request(items, pagination=PaginationRequest(limit=requested))

        assert page.pagination.limit == expected
        assert len(page.items) == min(expected, len(items))

    def test_resolve_limit(self):
        assert resolve_limit(None) == 20
        assert resolve_limit(0, default_limit=10, max_limit=50) == 10
        assert resolve_limit(75, default_limit=10, max_limit=50) == 50

    def test_idempotence(self, processor, mixed_items):
        kwargs = dict(
            pagination=PaginationRequest(limit=2),
            filters=_where(TypedFilter("amount", RangeFilter(min=0, max=100))),
            sort=SortRequest((SortField("amount", SortDirection.DESC),)),
            search=SearchRequest(query="a"),
        )
        first = processor.process_list_request(mixed_items, **kwargs)
        second = processor.process_list_request(mixed_items, **kwargs)

        assert first == second

    def test_and_filters_are_commutative(self, processor, numbered_items):
        active = TypedFilter("active", BooleanFilter(True))
        amount = TypedFilter("amount", NumberFilter(12, NumberOperator.LESS_THAN))
        limit = PaginationRequest(limit=100)

        forward = processor.process_list_request(numbered_items, limit, _where(active, amount))
        backward = processor.process_list_request(numbered_items, limit, _where(amount, active))

        assert _ids(forward) == _ids(backward)

    def test_sort_field_order_matters(self, processor):
        items = [
            Item(id="1", name="b", status="x"),
            Item(id="2", name="a", status="y"),
            Item(id="3", name="c", status="x"),
        ]

        by_status = processor.process_list_request(
            items, sort=SortRequest((SortField("status"), SortField("name")))
        )
        by_name = processor.process_list_request(
            items, sort=SortRequest((SortField("name"), SortField("status")))
        )

        assert _ids(by_status) == ["1", "3", "2"]
        assert _ids(by_name) == ["2", "1", "3"]

    def test_input_is_not_modified(self, processor, mixed_items):
        before = list(mixed_items)
        processor.process_list_request(
            mixed_items, sort=SortRequest((SortField("name", SortDirection.DESC),))
        )
        assert mixed_items == before

    def test_item_shape_mismatch(self, processor):
        with pytest.raises(ItemShapeMismatchError) as exc_info:
            processor.process_list_request([Item(id="1", name="ok"), {"id": "2"}])

        assert exc_info.value.index == 1
        assert exc_info.value.kind == "item_shape_mismatch"


# ============================================================================
# Filtres
# ============================================================================


class TestFilters:
    """Evaluation des filtres typés."""

    def _filter(self, processor, items, *filters, logic=FilterLogic.AND):
        return _ids(processor.process_list_request(items, filters=_where(*filters, logic=logic)))

    def test_string_equals_is_case_insensitive_by_default(self, processor, mixed_items):
        assert self._filter(processor, mixed_items, TypedFilter("name", StringFilter("ALPHA"))) == ["a"]

    def test_string_case_sensitive(self, processor, mixed_items):
        condition = StringFilter("ALPHA", case_sensitive=True)
        assert self._filter(processor, mixed_items, TypedFilter("name", condition)) == []

    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            (StringOperator.CONTAINS, "ta", ["b", "d"]),
            (StringOperator.STARTS_WITH, "g", ["c"]),
            (StringOperator.ENDS_WITH, "A", ["a", "b", "c", "d"]),
            (StringOperator.NOT_EQUALS, "beta", ["a", "c", "d"]),
            (StringOperator.REGEX, "^[ab]", ["a", "b"]),
        ],
    )
    def test_string_operators(self, processor, mixed_items, operator, value, expected):
        result = self._filter(processor, mixed_items, TypedFilter("name", StringFilter(value, operator)))
        assert result == expected

    def test_invalid_regex_matches_nothing(self, processor, mixed_items):
        condition = StringFilter("([", StringOperator.REGEX)
        assert self._filter(processor, mixed_items, TypedFilter("name", condition)) == []

    def test_unknown_field_is_false(self, processor, mixed_items):
        assert self._filter(processor, mixed_items, TypedFilter("missing", StringFilter("x"))) == []
        assert self._filter(processor, mixed_items, TypedFilter("missing", NullFilter())) == []

    def test_null_filters(self, processor, mixed_items):
        assert self._filter(processor, mixed_items, TypedFilter("notes", NullFilter())) == ["b", "c"]
        not_null = NullFilter(NullOperator.IS_NOT_NULL)
        assert self._filter(processor, mixed_items, TypedFilter("notes", not_null)) == ["a", "d"]

    def test_null_value_fails_other_filters(self, processor, mixed_items):
        condition = StringFilter("first", StringOperator.NOT_EQUALS)
        assert self._filter(processor, mixed_items, TypedFilter("notes", condition)) == ["d"]

    def test_range_bounds(self, processor, mixed_items):
        inclusive = RangeFilter(min=10, max=25)
        exclusive = RangeFilter(min=10, max=25, include_min=False, include_max=False)

        assert self._filter(processor, mixed_items, TypedFilter("amount", inclusive)) == ["b", "c", "d"]
        assert self._filter(processor, mixed_items, TypedFilter("amount", exclusive)) == ["b"]

    def test_list_operators(self, processor, mixed_items):
        condition = ListFilter(("open", "archived"))
        assert self._filter(processor, mixed_items, TypedFilter("status", condition)) == ["a", "c", "d"]
        excluded = ListFilter(("open",), ListOperator.NOT_IN)
        assert self._filter(processor, mixed_items, TypedFilter("status", excluded)) == ["b", "d"]

    def test_number_filter_accepts_numeric_strings(self, processor):
        items = [Item(id="1", name="10"), Item(id="2", name="abc"), Item(id="3", name="2.5")]
        condition = NumberFilter(5, NumberOperator.LESS_THAN)
        assert self._filter(processor, items, TypedFilter("name", condition)) == ["3"]

    def test_date_filters(self, processor):
        items = [
            Item(id="1", name="a", created=datetime(2024, 1, 15, tzinfo=timezone.utc)),
            Item(id="2", name="b", created=datetime(2024, 3, 1, 12, 30)),
            Item(id="3", name="c"),
        ]
        before = DateFilter("2024-02-01T00:00:00+00:00", DateOperator.BEFORE)
        between = DateFilter(
            datetime(2024, 2, 1, tzinfo=timezone.utc),
            DateOperator.BETWEEN,
            datetime(2024, 12, 31, tzinfo=timezone.utc),
        )
        same_day = DateFilter("2024-03-01", DateOperator.EQUALS)

        assert self._filter(processor, items, TypedFilter("created", before)) == ["1"]
        assert self._filter(processor, items, TypedFilter("created", between)) == ["2"]
        assert self._filter(processor, items, TypedFilter("created", same_day)) == ["2"]

    def test_or_logic(self, processor, mixed_items):
        result = self._filter(
            processor,
            mixed_items,
            TypedFilter("status", StringFilter("closed")),
            TypedFilter("amount", NumberFilter(25)),
            logic=FilterLogic.OR,
        )
        assert result == ["b", "c"]

    def test_nested_groups(self, processor, mixed_items):
        """active AND (name starts with "g" OR amount < 10)."""
        group = _where(
            TypedFilter("name", StringFilter("g", StringOperator.STARTS_WITH)),
            TypedFilter("amount", NumberFilter(10, NumberOperator.LESS_THAN)),
            logic=FilterLogic.OR,
        )
        result = self._filter(processor, mixed_items, TypedFilter("active", BooleanFilter(True)), group)
        assert result == ["a", "c"]


# ============================================================================
# Recherche
# ============================================================================


class TestSearch:
    """Recherche plein texte."""

    def test_substring_highlight(self, processor):
        items = [Item(id="1", name="The Alpha team")]

        page = processor.process_list_request(items, search=SearchRequest(query="alpha", fields=("name",)))

        result = page.search_results[0]
        assert result.score == pytest.approx(0.4)
        assert result.highlights[0].fragment == "The <mark>Alpha</mark> team"
        assert (result.highlights[0].start, result.highlights[0].end) == (4, 9)

    def test_highlight_disabled(self, processor):
        items = [Item(id="1", name="Alpha")]
        request = SearchRequest(query="alpha", fields=("name",), highlight=False)

        page = processor.process_list_request(items, search=request)

        assert page.search_results[0].highlights == ()

    def test_multi_word_partial_match(self, processor):
        items = [Item(id="1", name="Alpha beta")]

        page = processor.process_list_request(
            items, search=SearchRequest(query="alpha gamma", fields=("name",))
        )

        assert page.search_results[0].score == pytest.approx(0.2)

    def test_fuzzy_match_is_opt_in(self, processor):
        items = [Item(id="1", name="Alpha")]

        strict = processor.process_list_request(items, search=SearchRequest(query="alpah", fields=("name",)))
        fuzzy = processor.process_list_request(
            items, search=SearchRequest(query="alpah", fields=("name",), fuzzy=True)
        )

        assert strict.items == []
        assert len(fuzzy.items) == 1
        assert 0 < fuzzy.search_results[0].score <= 0.2

    def test_field_weights_and_default_fields(self, processor):
        items = [Item(id="1", name="Alpha", notes="alpha")]

        page = processor.process_list_request(
            items, search=SearchRequest(query="alpha", field_weights={"name": 2.0})
        )

        assert page.search_results[0].score == pytest.approx(3.0)
        assert page.search_metrics.field_match_counts == {"name": 1, "notes": 1}

    def test_max_results(self, processor, numbered_items):
        page = processor.process_list_request(
            numbered_items, search=SearchRequest(query="item", max_results=3)
        )
        assert page.pagination.total_items == 3

    def test_metrics_top_terms(self, processor, mixed_items):
        page = processor.process_list_request(
            mixed_items, search=SearchRequest(query="the alpha team")
        )
        assert page.search_metrics.top_terms == ("alpha", "team")

    def test_blank_query_is_ignored(self, processor, mixed_items):
        page = processor.process_list_request(mixed_items, search=SearchRequest(query="   "))

        assert len(page.items) == 4
        assert page.search_metrics is None
        assert all(result.score == 0 for result in page.search_results)

    def test_explicit_sort_overrides_relevance(self, processor):
        items = [Item(id="1", name="Alphabet"), Item(id="2", name="Alpha")]

        page = processor.process_list_request(
            items,
            sort=SortRequest((SortField("name", SortDirection.DESC),)),
            search=SearchRequest(query="alpha", fields=("name",)),
        )

        assert _ids(page) == ["1", "2"]
        assert page.search_results[0].score == pytest.approx(0.7)


# ============================================================================
# Tri et pagination
# ============================================================================


class TestSortAndPagination:
    def test_nulls_last_in_both_directions(self, processor, mixed_items):
        asc = processor.process_list_request(mixed_items, sort=SortRequest((SortField("notes"),)))
        desc = processor.process_list_request(
            mixed_items, sort=SortRequest((SortField("notes", SortDirection.DESC),))
        )

        assert _ids(asc) == ["a", "d", "b", "c"]
        assert _ids(desc) == ["d", "a", "b", "c"]

    def test_nulls_first(self, processor, mixed_items):
        field = SortField("notes", null_order=NullOrder.FIRST)
        page = processor.process_list_request(mixed_items, sort=SortRequest((field,)))
        assert _ids(page) == ["b", "c", "a", "d"]

    def test_case_insensitive_sort(self, processor, mixed_items):
        field = SortField("name", case_sensitive=False)
        page = processor.process_list_request(mixed_items, sort=SortRequest((field,)))
        assert _ids(page) == ["a", "b", "d", "c"]

    def test_page_beyond_last_is_empty(self, processor, numbered_items):
        page = processor.process_list_request(numbered_items, pagination=PaginationRequest(limit=10, page=9))

        assert page.items == []
        assert page.pagination.total_items == 25
        assert page.pagination.has_next is False

    def test_cursor_navigation(self, processor, numbered_items):
        first = processor.process_list_request(numbered_items, pagination=PaginationRequest(limit=10))
        second = processor.process_list_request(
            numbered_items, pagination=PaginationRequest(limit=10, cursor=first.pagination.next_cursor)
        )

        assert first.pagination.previous_cursor is None
        assert second.pagination.current_page == 2
        assert _ids(second)[0] == "i10"
        assert decode_cursor(second.pagination.previous_cursor) == 0

    def test_cursor_roundtrip(self):
        assert decode_cursor(encode_cursor(40)) == 40

    @pytest.mark.parametrize("token", ["not-a-cursor", encode_cursor(-1), "eyJmb28iOjF9"])
    def test_invalid_cursor(self, processor, numbered_items, token):
        with pytest.raises(InvalidCursorError):
            processor.process_list_request(numbered_items, pagination=PaginationRequest(cursor=token))
