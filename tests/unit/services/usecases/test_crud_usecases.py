"""
Tests unitaires des cas d'utilisation génériques par entité.

Tests couvrant:
- création, lecture, mise à jour, suppression avec messages traduits
- validation des requêtes de page (champs autorisés, limites, recherche)
- autorisation vérifiée avant toute validation et tout accès au stockage
- erreurs de stockage converties en OperationFailedError
"""

import math
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from tenantdesk.adapters.services import JsonTranslationService, StaticAuthorizationService
from tenantdesk.core.entities import (
    Balance,
    BalanceType,
    Invoice,
    License,
    Role,
    Subscription,
    Workspace,
)
from tenantdesk.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    NotFoundError,
    OperationFailedError,
    RepositoryError,
    ValidationError,
)
from tenantdesk.core.ports.repositories import IEntityRepository
from tenantdesk.core.value_objects import (
    BooleanFilter,
    FilterRequest,
    PaginationRequest,
    RequestContext,
    SearchRequest,
    SortField,
    SortRequest,
    StringFilter,
    TypedFilter,
)
from tenantdesk.services.usecases import ListRequest, PageDataRequest, UseCaseServices
from tenantdesk.services.usecases.crud import (
    CreateEntityUseCase,
    GetListPageDataUseCase,
    ReadEntityUseCase,
)


def _where(field: str, condition) -> FilterRequest:
    return FilterRequest(filters=(TypedFilter(field, condition),))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_repository() -> MagicMock:
    """Repository qui ne doit pas être appelé par les tests de validation."""
    return MagicMock(spec=IEntityRepository)


@pytest.fixture
def bare_services() -> UseCaseServices:
    """Traduction seule : ni autorisation ni transaction."""
    return UseCaseServices(translation=JsonTranslationService())


@pytest.fixture
def secured_services() -> UseCaseServices:
    authorization = StaticAuthorizationService(
        {"u-viewer": ["workspace:read", "workspace:list"], "u-owner": ["workspace:*"]}
    )
    return UseCaseServices(translation=JsonTranslationService(), authorization=authorization)


# ============================================================================
# Tests CRUD
# ============================================================================


class TestCreate:
    """Tests de CreateEntityUseCase."""

    def test_create_enriches_entity(self, catalog, ctx, repositories):
        created = catalog.entity("workspace").create.execute(ctx, Workspace(name="Science Wing"))

        assert created.id
        assert created.active is True
        assert created.date_created is not None
        assert created.date_created == created.date_modified
        assert repositories.workspaces.read(created.id).name == "Science Wing"

    def test_create_keeps_given_id(self, catalog, ctx):
        created = catalog.entity("workspace").create.execute(ctx, Workspace(id="ws-new", name="New"))
        assert created.id == "ws-new"

    def test_does_not_mutate_request(self, catalog, ctx):
        request = Workspace(name="Annex")
        catalog.entity("workspace").create.execute(ctx, request)
        assert request.id is None
        assert request.date_created is None

    @pytest.mark.parametrize(
        "business_type, expected",
        [
            ("education", "Campus name is required"),
            ("fitness_center", "Club name is required"),
            ("retail", "Workspace name is required"),
        ],
    )
    def test_required_field_message_per_business_type(self, catalog, business_type, expected):
        ctx = RequestContext(user_id="u-admin", business_type=business_type)

        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("workspace").create.execute(ctx, Workspace(name="  "))

        assert exc_info.value.key == "workspace.validation.name_required"
        assert exc_info.value.message == expected

    def test_rule_violation_message_has_parameters(self, catalog, ctx):
        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("role").create.execute(ctx, Role(name="Coach", color="red"))

        assert exc_info.value.key == "role.validation.invalid_color"
        assert exc_info.value.message == "Role color must use the #RRGGBB format: red"

    def test_wrong_entity_type(self, catalog, ctx):
        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("workspace").create.execute(ctx, Role(name="Teacher"))

        assert exc_info.value.key == "workspace.validation.invalid_type"
        assert exc_info.value.kind == "validation_error"

    def test_subscription_available_count_is_computed(self, catalog, ctx):
        created = catalog.entity("subscription").create.execute(
            ctx, Subscription(name="Chemistry", client_id="client-north", quantity=10)
        )
        assert created.available_count == 10

    def test_balance_normalization(self, catalog, ctx):
        created = catalog.entity("balance").create.execute(
            ctx, Balance(client_id="client-north", amount=-5.0, currency="eur")
        )
        assert created.currency == "EUR"
        assert created.balance_type == BalanceType.DEBIT

    def test_invoice_due_date_rule(self, catalog, ctx):
        invoice = Invoice(
            invoice_number="INV-9",
            client_id="client-north",
            amount=10.0,
            date_issued=datetime(2024, 10, 1, tzinfo=timezone.utc),
            date_due=datetime(2024, 9, 1, tzinfo=timezone.utc),
        )

        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("invoice").create.execute(ctx, invoice)

        assert exc_info.value.key == "invoice.validation.invalid_due_date"

    def test_validation_does_not_touch_repository(self, definitions, mock_repository, bare_services, ctx):
        use_case = CreateEntityUseCase(definitions["workspace"], mock_repository, bare_services)

        with pytest.raises(ValidationError):
            use_case.execute(ctx, Workspace(name=""))

        mock_repository.create.assert_not_called()

    def test_storage_error_becomes_operation_failed(self, definitions, mock_repository, bare_services, ctx):
        mock_repository.create.side_effect = RepositoryError("disk full")
        use_case = CreateEntityUseCase(definitions["workspace"], mock_repository, bare_services)

        with pytest.raises(OperationFailedError) as exc_info:
            use_case.execute(ctx, Workspace(name="Lab"))

        assert exc_info.value.key == "workspace.errors.creation_failed"
        assert exc_info.value.message.startswith("Workspace creation failed")
        assert isinstance(exc_info.value.__cause__, RepositoryError)


class TestReadUpdateDelete:
    """Tests de lecture, mise à jour et suppression."""

    def test_read(self, catalog, ctx):
        workspace = catalog.entity("workspace").read.execute(ctx, "ws-north")
        assert workspace.name == "North Campus"

    def test_read_missing_is_translated(self, catalog, ctx):
        with pytest.raises(NotFoundError) as exc_info:
            catalog.entity("workspace").read.execute(ctx, "ws-missing")

        assert exc_info.value.key == "workspace.errors.not_found"
        assert exc_info.value.message == "Campus not found: ws-missing"

    def test_read_requires_id(self, catalog, ctx):
        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("workspace").read.execute(ctx, " ")
        assert exc_info.value.key == "workspace.validation.id_required"

    def test_update_keeps_creation_date(self, catalog, ctx):
        use_cases = catalog.entity("workspace")
        existing = use_cases.read.execute(ctx, "ws-north")
        existing.name = "North Campus (renovated)"
        existing.date_created = None

        updated = use_cases.update.execute(ctx, existing)

        assert updated.name == "North Campus (renovated)"
        assert updated.date_created is not None
        assert updated.date_modified > updated.date_created

    def test_update_missing(self, catalog, ctx):
        with pytest.raises(NotFoundError):
            catalog.entity("workspace").update.execute(ctx, Workspace(id="ws-missing", name="Ghost"))

    def test_delete_returns_deleted_entity(self, catalog, ctx):
        use_cases = catalog.entity("payment_method")

        deleted = use_cases.delete.execute(ctx, "pm-002")

        assert deleted.name == "Operating account"
        with pytest.raises(NotFoundError):
            use_cases.read.execute(ctx, "pm-002")

    def test_list_all_with_filters(self, catalog, ctx):
        items = catalog.entity("workspace").list_all.execute(
            ctx, ListRequest(filters=_where("private", BooleanFilter(True)))
        )
        assert [item.id for item in items] == ["ws-staff"]

    def test_item_page_data_reverifies_balances(self, catalog, ctx, repositories):
        repositories.balances.create(Balance(id="bal-bad", client_id="client-north", amount=math.nan))

        with pytest.raises(BusinessRuleError) as exc_info:
            catalog.entity("balance").item_page_data.execute(ctx, "bal-bad")

        assert exc_info.value.key == "balance.errors.invalid_amount"
        assert exc_info.value.message == "Stored balance has an invalid amount"

    def test_item_page_data(self, catalog, ctx):
        assert catalog.entity("balance").item_page_data.execute(ctx, "bal-001").amount == 1250.0


# ============================================================================
# Tests page de liste
# ============================================================================


class TestListPageData:
    """Tests de GetListPageDataUseCase."""

    def test_filter_on_status(self, catalog, ctx):
        page = catalog.entity("license").list_page_data.execute(
            ctx, PageDataRequest(filters=_where("status", StringFilter("active")))
        )
        assert [lic.id for lic in page.items] == ["lic-001", "lic-002", "lic-101"]

    def test_derived_field_filter(self, catalog, ctx):
        page = catalog.entity("license").list_page_data.execute(
            ctx, PageDataRequest(filters=_where("is_assigned", BooleanFilter(True)))
        )
        assert page.pagination.total_items == 4

    def test_search_by_assignee(self, catalog, ctx):
        page = catalog.entity("license").list_page_data.execute(
            ctx, PageDataRequest(search=SearchRequest(query="Alice"))
        )
        assert page.items[0].id == "lic-001"
        assert page.search_metrics.total_results == 1

    def test_sort_and_paginate(self, catalog, ctx):
        page = catalog.entity("license").list_page_data.execute(
            ctx,
            PageDataRequest(
                pagination=PaginationRequest(limit=2, page=2),
                sort=SortRequest((SortField("license_key"),)),
            ),
        )
        assert [lic.id for lic in page.items] == ["lic-001", "lic-002"]
        assert page.pagination.total_items == 7

    def test_invalid_filter_field(self, definitions, mock_repository, bare_services, ctx):
        use_case = GetListPageDataUseCase(definitions["license"], mock_repository, bare_services)

        with pytest.raises(ValidationError) as exc_info:
            use_case.execute(ctx, PageDataRequest(filters=_where("bogus", StringFilter("x"))))

        assert exc_info.value.key == "license.validation.invalid_filter_field"
        assert exc_info.value.message == "Invalid filter field for licenses: bogus"
        mock_repository.list_all.assert_not_called()

    @pytest.mark.parametrize(
        "request_, rule",
        [
            (PageDataRequest(pagination=PaginationRequest(limit=500)), "invalid_limit"),
            (PageDataRequest(pagination=PaginationRequest(page=0)), "invalid_page"),
            (PageDataRequest(pagination=PaginationRequest(cursor="  ")), "invalid_cursor"),
            (PageDataRequest(filters=FilterRequest()), "empty_filters"),
            (PageDataRequest(sort=SortRequest()), "empty_sort_fields"),
            (PageDataRequest(sort=SortRequest((SortField("nope"),))), "invalid_sort_field"),
            (PageDataRequest(search=SearchRequest(query="  ")), "empty_search_query"),
            (PageDataRequest(search=SearchRequest(query="a", fields=("nope",))), "invalid_search_field"),
            (PageDataRequest(search=SearchRequest(query="a", max_results=5000)), "invalid_max_results"),
        ],
    )
    def test_request_validation(self, definitions, mock_repository, bare_services, ctx, request_, rule):
        use_case = GetListPageDataUseCase(definitions["workspace"], mock_repository, bare_services)

        with pytest.raises(ValidationError) as exc_info:
            use_case.execute(ctx, request_)

        assert exc_info.value.key == f"workspace.validation.{rule}"
        mock_repository.list_all.assert_not_called()

    def test_unreadable_cursor_is_validation_error(self, catalog, ctx):
        with pytest.raises(ValidationError) as exc_info:
            catalog.entity("workspace").list_page_data.execute(
                ctx, PageDataRequest(pagination=PaginationRequest(cursor="garbage"))
            )
        assert exc_info.value.key == "workspace.validation.invalid_cursor"

    def test_limit_range_includes_zero(self, catalog, ctx):
        """0 est accepté (taille par défaut) et le message annonce la borne 0."""
        use_cases = catalog.entity("workspace")

        page = use_cases.list_page_data.execute(ctx, PageDataRequest(pagination=PaginationRequest(limit=0)))
        with pytest.raises(ValidationError) as exc_info:
            use_cases.list_page_data.execute(ctx, PageDataRequest(pagination=PaginationRequest(limit=-1)))

        assert page.pagination.limit > 0
        assert "between 0 and" in exc_info.value.message


# ============================================================================
# Tests autorisation
# ============================================================================


class TestAuthorization:
    """L'autorisation est vérifiée avant la validation et le stockage."""

    def test_denied_without_permission(self, definitions, mock_repository, secured_services):
        use_case = CreateEntityUseCase(definitions["workspace"], mock_repository, secured_services)
        ctx = RequestContext(user_id="u-viewer", business_type="education")

        with pytest.raises(AuthorizationError) as exc_info:
            use_case.execute(ctx, Workspace(name="Lab"))

        assert exc_info.value.key == "workspace.errors.authorization_failed"
        assert exc_info.value.message == "You do not have permission to create workspaces"
        mock_repository.create.assert_not_called()

    def test_denied_before_validation(self, definitions, mock_repository, secured_services):
        use_case = CreateEntityUseCase(definitions["workspace"], mock_repository, secured_services)
        ctx = RequestContext(user_id="u-viewer")

        with pytest.raises(AuthorizationError):
            use_case.execute(ctx, Workspace(name=""))

    def test_anonymous_is_denied(self, definitions, mock_repository, secured_services):
        use_case = ReadEntityUseCase(definitions["workspace"], mock_repository, secured_services)

        with pytest.raises(AuthorizationError):
            use_case.execute(RequestContext(user_id=None), "ws-north")

        mock_repository.read.assert_not_called()

    def test_granted_action(self, definitions, mock_repository, secured_services):
        mock_repository.read.return_value = Workspace(id="ws-north", name="North")
        use_case = ReadEntityUseCase(definitions["workspace"], mock_repository, secured_services)

        result = use_case.execute(RequestContext(user_id="u-viewer"), "ws-north")

        assert result.name == "North"

    def test_entity_wildcard(self, definitions, mock_repository, secured_services):
        mock_repository.create.side_effect = lambda entity: entity
        use_case = CreateEntityUseCase(definitions["workspace"], mock_repository, secured_services)

        created = use_case.execute(RequestContext(user_id="u-owner"), Workspace(name="Lab"))

        assert created.name == "Lab"
        mock_repository.create.assert_called_once()

    def test_license_authorization_message(self, definitions, mock_repository, secured_services):
        use_case = CreateEntityUseCase(definitions["license"], mock_repository, secured_services)

        with pytest.raises(AuthorizationError) as exc_info:
            use_case.execute(RequestContext(user_id="u-owner"), License(subscription_id="sub-physics"))

        assert exc_info.value.message == "You do not have permission to create licenses"
