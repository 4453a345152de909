"""Tests des services d'autorisation et de génération d'IDs."""

import pytest

from tenantdesk.adapters.services import (
    DisabledAuthorizationService,
    StaticAuthorizationService,
    UUIDService,
)
from tenantdesk.core.value_objects import RequestContext
from tenantdesk.core.value_objects.context import Action, Permission

CTX = RequestContext(user_id="u-1")


class TestStaticAuthorizationService:
    @pytest.mark.parametrize(
        "granted, permission, expected",
        [
            (["license:update"], Permission("license", Action.UPDATE), True),
            (["license:update"], Permission("license", Action.DELETE), False),
            (["license:*"], Permission("license", Action.DELETE), True),
            (["license:*"], Permission("invoice", Action.READ), False),
            (["*"], Permission("invoice", Action.READ), True),
        ],
    )
    def test_grants(self, granted, permission, expected):
        service = StaticAuthorizationService({"u-1": granted})
        assert service.has_permission(CTX, "u-1", permission) is expected

    def test_unknown_user_denied(self):
        service = StaticAuthorizationService({"u-1": ["*"]})
        assert service.has_permission(CTX, "u-2", Permission("license", Action.READ)) is False

    def test_grant_adds_permissions(self):
        service = StaticAuthorizationService()
        service.grant("u-1", "plan:read")
        service.grant("u-1", "plan:list")

        assert service.has_permission(CTX, "u-1", Permission("plan", Action.LIST))
        assert service.has_permission(CTX, "u-1", Permission("plan", Action.READ))

    def test_enabled_flag(self):
        assert StaticAuthorizationService().is_enabled() is True
        assert StaticAuthorizationService(enabled=False).is_enabled() is False


class TestDisabledAuthorizationService:
    def test_everything_allowed(self):
        service = DisabledAuthorizationService()
        assert service.is_enabled() is False
        assert service.has_permission(CTX, "anyone", Permission("license", Action.DELETE))


class TestUUIDService:
    def test_unique_hex_ids(self):
        service = UUIDService()
        ids = {service.generate_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 32 for i in ids)
