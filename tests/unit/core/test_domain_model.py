"""
Tests pour les entités, value objects et exceptions du domaine.
"""

import pytest

from tenantdesk.core.entities import TERMINAL_STATUSES, License, LicenseStatus, Subscription
from tenantdesk.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    EntityNotFoundError,
    NotFoundError,
    OperationFailedError,
    RepositoryError,
    ValidationError,
)
from tenantdesk.core.value_objects import (
    Action,
    FilterLogic,
    FilterRequest,
    PaginationRequest,
    Permission,
    RequestContext,
    StringFilter,
    TypedFilter,
)


class TestLicenseEntity:
    """Tests pour l'entité License."""

    def test_defaults(self):
        """Une licence neuve est en attente et sans titulaire."""
        license_ = License(subscription_id="sub-1")
        assert license_.status == LicenseStatus.PENDING
        assert license_.is_assigned is False

    def test_clear_assignee(self):
        license_ = License(
            assignee_id="stu-1",
            assignee_type="user",
            assignee_name="Alice",
            assigned_by="u-admin",
        )
        assert license_.is_assigned is True

        license_.clear_assignee()

        assert license_.assignee_id is None
        assert license_.assignee_name is None
        assert license_.assigned_by is None
        assert license_.is_assigned is False

    def test_terminal_statuses(self):
        assert LicenseStatus.REVOKED in TERMINAL_STATUSES
        assert LicenseStatus.EXPIRED in TERMINAL_STATUSES
        assert LicenseStatus.SUSPENDED not in TERMINAL_STATUSES


class TestSubscriptionEntity:
    def test_recompute_available(self):
        subscription = Subscription(quantity=5, assigned_count=3)
        subscription.recompute_available()
        assert subscription.available_count == 2

    def test_recompute_without_quantity(self):
        """Sans quantité, available_count reste inchangé."""
        subscription = Subscription(assigned_count=3)
        subscription.recompute_available()
        assert subscription.available_count is None


class TestValueObjects:
    def test_permission_str(self):
        assert str(Permission("license", Action.UPDATE)) == "license:update"

    def test_request_context_defaults(self):
        ctx = RequestContext()
        assert ctx.user_id is None
        assert ctx.business_type == "education"

    def test_field_names_flattens_groups(self):
        request = FilterRequest(
            filters=(
                TypedFilter("status", StringFilter("active")),
                FilterRequest(
                    filters=(
                        TypedFilter("assignee_id", StringFilter("stu-1")),
                        TypedFilter("notes", StringFilter("x")),
                    ),
                    logic=FilterLogic.OR,
                ),
            )
        )
        assert request.field_names() == ["status", "assignee_id", "notes"]

    def test_cursor_mode(self):
        assert PaginationRequest(page=2).uses_cursor is False
        assert PaginationRequest(page=2, cursor="abc").uses_cursor is True


class TestExceptions:
    @pytest.mark.parametrize(
        "error_class, kind",
        [
            (ValidationError, "validation_error"),
            (AuthorizationError, "authorization_error"),
            (NotFoundError, "not_found"),
            (BusinessRuleError, "business_rule_violation"),
            (OperationFailedError, "operation_failed"),
        ],
    )
    def test_kinds(self, error_class, kind):
        error = error_class("message", key="license.errors.x")
        assert error.kind == kind
        assert error.message == "message"
        assert error.key == "license.errors.x"

    def test_entity_not_found(self):
        error = EntityNotFoundError("license", "lic-9")
        assert isinstance(error, RepositoryError)
        assert str(error) == "license not found: lic-9"
        assert error.entity_id == "lic-9"
