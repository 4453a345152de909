"""
Value objects: immutable request/response shapes and call context.
"""

from tenantdesk.core.value_objects.context import (
    DEFAULT_BUSINESS_TYPE,
    Action,
    EntityName,
    Permission,
    RequestContext,
)
from tenantdesk.core.value_objects.listing import (
    BooleanFilter,
    DateFilter,
    DateOperator,
    FilterLogic,
    FilterRequest,
    HighlightSpan,
    ListFilter,
    ListOperator,
    NullFilter,
    NullOperator,
    NullOrder,
    NumberFilter,
    NumberOperator,
    PageResult,
    PaginationRequest,
    PaginationResponse,
    RangeFilter,
    SearchMetrics,
    SearchRequest,
    SearchResult,
    SortDirection,
    SortField,
    SortRequest,
    StringFilter,
    StringOperator,
    TypedFilter,
)

__all__ = [
    "Action",
    "BooleanFilter",
    "DEFAULT_BUSINESS_TYPE",
    "EntityName",
    "DateFilter",
    "DateOperator",
    "FilterLogic",
    "FilterRequest",
    "HighlightSpan",
    "ListFilter",
    "ListOperator",
    "NullFilter",
    "NullOperator",
    "NullOrder",
    "NumberFilter",
    "NumberOperator",
    "PageResult",
    "PaginationRequest",
    "PaginationResponse",
    "Permission",
    "RangeFilter",
    "RequestContext",
    "SearchMetrics",
    "SearchRequest",
    "SearchResult",
    "SortDirection",
    "SortField",
    "SortRequest",
    "StringFilter",
    "StringOperator",
    "TypedFilter",
]
