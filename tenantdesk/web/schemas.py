"""
Schemas pydantic de l'API HTTP.

Les corps JSON sont valides par pydantic puis convertis en value objects
du domaine (FilterRequest, SortRequest, SearchRequest, PaginationRequest).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.value_objects import (
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

FilterType = Literal["string", "number", "date", "list", "range", "boolean", "null"]

# Enum d'opérateur par type de filtre (les types sans opérateur sont absents)
_OPERATORS = {
    "string": StringOperator,
    "number": NumberOperator,
    "date": DateOperator,
    "list": ListOperator,
    "null": NullOperator,
}


class FilterSchema(BaseModel):
    """
    Filtre sur un champ.

    Exemples :
        {"field": "status", "type": "string", "value": "active"}
        {"field": "amount", "type": "range", "min": 10, "max": 100}
        {"field": "status", "type": "list", "operator": "not_in", "values": ["revoked"]}
    """

    field: str
    type: FilterType = "string"
    operator: Optional[str] = None
    value: Any = None
    values: list[Any] = Field(default_factory=list)
    range_end: Optional[datetime] = None
    min: Optional[float] = None
    max: Optional[float] = None
    include_min: bool = True
    include_max: bool = True
    case_sensitive: bool = False

    @model_validator(mode="after")
    def check_operator(self) -> "FilterSchema":
        operators = _OPERATORS.get(self.type)
        if self.operator is not None and operators is not None:
            allowed = {op.value for op in operators}
            if self.operator not in allowed:
                raise ValueError(
                    f"invalid {self.type} operator {self.operator!r} (allowed: {', '.join(sorted(allowed))})"
                )
        if self.type in ("string", "number", "date", "boolean") and self.value is None:
            raise ValueError(f"filter on {self.field!r} requires a value")
        return self

    def _operator(self, default: Any) -> Any:
        return type(default)(self.operator) if self.operator is not None else default

    def to_filter(self) -> TypedFilter:
        if self.type == "string":
            condition = StringFilter(
                str(self.value), self._operator(StringOperator.EQUALS), self.case_sensitive
            )
        elif self.type == "number":
            condition = NumberFilter(float(self.value), self._operator(NumberOperator.EQUALS))
        elif self.type == "date":
            condition = DateFilter(self.value, self._operator(DateOperator.EQUALS), self.range_end)
        elif self.type == "list":
            condition = ListFilter(tuple(self.values), self._operator(ListOperator.IN))
        elif self.type == "range":
            condition = RangeFilter(self.min, self.max, self.include_min, self.include_max)
        elif self.type == "boolean":
            condition = BooleanFilter(bool(self.value))
        else:
            condition = NullFilter(self._operator(NullOperator.IS_NULL))
        return TypedFilter(self.field, condition)


class FilterGroupSchema(BaseModel):
    """Groupe de filtres combinés par "and" ou "or" ; les groupes s'imbriquent."""

    # Un filtre invalide ne doit pas être accepté comme groupe vide
    model_config = ConfigDict(extra="forbid")

    logic: Literal["and", "or"] = "and"
    filters: list[Union[FilterSchema, FilterGroupSchema]] = Field(default_factory=list)

    def to_request(self) -> FilterRequest:
        return FilterRequest(
            filters=tuple(
                entry.to_request() if isinstance(entry, FilterGroupSchema) else entry.to_filter()
                for entry in self.filters
            ),
            logic=FilterLogic(self.logic),
        )


class SortFieldSchema(BaseModel):
    field: str
    direction: Literal["asc", "desc"] = "asc"
    null_order: Literal["first", "last"] = "last"
    case_sensitive: bool = True

    def to_sort_field(self) -> SortField:
        return SortField(
            self.field,
            SortDirection(self.direction),
            NullOrder(self.null_order),
            self.case_sensitive,
        )


class SearchSchema(BaseModel):
    query: str
    fields: list[str] = Field(default_factory=list)
    max_results: int = 0
    field_weights: dict[str, float] = Field(default_factory=dict)
    highlight: bool = True
    fuzzy: bool = False

    def to_request(self) -> SearchRequest:
        return SearchRequest(
            query=self.query,
            fields=tuple(self.fields),
            max_results=self.max_results,
            field_weights=dict(self.field_weights),
            highlight=self.highlight,
            fuzzy=self.fuzzy,
        )


class PaginationSchema(BaseModel):
    limit: Optional[int] = None
    page: Optional[int] = None
    cursor: Optional[str] = None

    def to_request(self) -> PaginationRequest:
        return PaginationRequest(limit=self.limit, page=self.page, cursor=self.cursor)


class PageDataSchema(BaseModel):
    """Corps de POST /api/{entity}/page-data (toutes les parties sont optionnelles)."""

    pagination: Optional[PaginationSchema] = None
    filters: Optional[FilterGroupSchema] = None
    sort: Optional[list[SortFieldSchema]] = None
    search: Optional[SearchSchema] = None

    def to_value_objects(self) -> dict[str, Any]:
        return {
            "pagination": self.pagination.to_request() if self.pagination else None,
            "filters": self.filters.to_request() if self.filters else None,
            "sort": (
                SortRequest(tuple(field.to_sort_field() for field in self.sort))
                if self.sort is not None
                else None
            ),
            "search": self.search.to_request() if self.search else None,
        }


class AssignSchema(BaseModel):
    assignee_id: str
    assignee_type: str = "user"
    assignee_name: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


class ReassignSchema(BaseModel):
    new_assignee_id: str
    new_assignee_type: str = "user"
    new_assignee_name: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


class ReasonSchema(BaseModel):
    """Corps optionnel de revoke / suspend / reactivate."""

    reason: Optional[str] = None
    notes: Optional[str] = None


class ValidateAccessSchema(BaseModel):
    license_id: Optional[str] = None
    license_key: Optional[str] = None
    assignee_id: Optional[str] = None


class CreateFromPlanSchema(BaseModel):
    subscription_id: str
    quantity: int
    plan_id: Optional[str] = None
    license_type: Optional[str] = None
    auto_assign_to_purchaser: bool = False
    date_valid_from: Optional[datetime] = None
    date_valid_until: Optional[datetime] = None


class ErrorSchema(BaseModel):
    """Corps des réponses d'erreur : type d'erreur et message traduit."""

    error: str
    message: str


def describe_errors(errors: list[dict[str, Any]]) -> str:
    """Résume les erreurs pydantic en "champ: message; ..."."""
    return "; ".join(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors)
