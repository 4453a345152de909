"""Tests de la conversion entité <-> dictionnaire."""

from datetime import datetime, timezone

from tenantdesk.core.entities import Balance, BalanceType, License, LicenseStatus, LicenseType
from tenantdesk.infrastructure.conversion import entity_from_dict, entity_to_dict, to_display


class TestEntityConversion:
    def test_from_dict_coerces_values(self):
        lic = entity_from_dict(
            License,
            {
                "id": "lic-1",
                "subscription_id": "sub-1",
                "status": "suspended",
                "license_type": "device",
                "date_assigned": "2024-09-02T08:00:00Z",
                "date_created": "2024-09-01T08:00:00",
                "unknown_field": "ignored",
            },
        )

        assert lic.status == LicenseStatus.SUSPENDED
        assert lic.license_type == LicenseType.DEVICE
        assert lic.date_assigned == datetime(2024, 9, 2, 8, 0, tzinfo=timezone.utc)
        # Une date sans fuseau est considérée en UTC
        assert lic.date_created.tzinfo == timezone.utc
        assert lic.assignee_id is None

    def test_int_amount_becomes_float(self):
        balance = entity_from_dict(Balance, {"id": "b-1", "amount": 10, "balance_type": "credit"})

        assert isinstance(balance.amount, float)
        assert balance.balance_type == BalanceType.CREDIT

    def test_to_dict_uses_enum_values(self):
        row = entity_to_dict(License(id="lic-1", status=LicenseStatus.ACTIVE))

        assert row["status"] == "active"
        assert row["license_type"] == "user"
        assert row["date_created"] is None


class TestDisplay:
    def test_to_display(self):
        assert to_display(None) == "-"
        assert to_display(LicenseStatus.ACTIVE) == "active"
        assert to_display(datetime(2024, 9, 1, 8, 30)) == "2024-09-01 08:30"
        assert to_display(True) == "oui"
        assert to_display(12.5) == "12.5"
