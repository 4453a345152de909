"""
Tests des commandes CLI (Typer CliRunner) et de leurs utilitaires.

Le Container est remplace par un Container de test dont la configuration
pointe vers la persistance en mémoire ; il est partagé par les commandes
d'un même test.
"""

from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from tenantdesk.adapters.cli.helpers import (
    build_filter_request,
    parse_filter,
    parse_sort,
    render_page,
)
from tenantdesk.config import Settings
from tenantdesk.container import Container
from tenantdesk.core.value_objects import (
    FilterLogic,
    NullFilter,
    NullOperator,
    SearchRequest,
    SortDirection,
    StringFilter,
    StringOperator,
)
from tenantdesk.main import app
from tenantdesk.services.usecases import PageDataRequest

runner = CliRunner()


def _container(settings: Settings) -> Container:
    container = Container()
    container.config.override(settings)
    return container


@pytest.fixture
def cli_container(test_settings):
    """Container de test injecté dans toutes les commandes."""
    container = _container(test_settings)
    with patch("tenantdesk.adapters.cli.helpers.Container", return_value=container):
        yield container


def invoke(*args: str):
    return runner.invoke(app, ["--user", "u-admin", *args])


# ============================================================================
# Tests commandes génériques
# ============================================================================


class TestListAndShow:
    def test_list_with_filter_and_sort(self, cli_container):
        result = invoke(
            "list", "license", "--filter", "status=active", "--sort", "id",
            "--column", "id", "--column", "status",
        )

        assert result.exit_code == 0, result.output
        assert "lic-001" in result.output
        assert "lic-101" in result.output
        assert "3 résultat(s)" in result.output

    def test_list_shows_next_page_hint(self, cli_container):
        result = invoke("list", "license", "--limit", "2", "--column", "id")

        assert result.exit_code == 0, result.output
        assert "--page 2" in result.output

    def test_list_search(self, cli_container):
        result = invoke("list", "license", "--search", "alice", "--column", "id")

        assert result.exit_code == 0, result.output
        assert "lic-001" in result.output
        assert "score" in result.output

    def test_list_unknown_entity(self, cli_container):
        result = invoke("list", "spaceship")

        assert result.exit_code == 2
        assert "Erreur de configuration" in result.output

    def test_list_invalid_filter_expression(self, cli_container):
        result = invoke("list", "license", "--filter", "status")
        assert result.exit_code == 2

    def test_list_invalid_sort_field(self, cli_container):
        result = invoke("list", "license", "--sort", "color")

        assert result.exit_code == 1
        assert "validation_error" in result.output

    def test_show(self, cli_container):
        result = invoke("show", "license", "lic-001")

        assert result.exit_code == 0, result.output
        assert "stu-alice" in result.output

    def test_show_missing_uses_business_type_wording(self, cli_container):
        education = invoke("show", "license", "lic-999")
        fitness = runner.invoke(
            app, ["--user", "u-admin", "--business-type", "fitness_center", "show", "license", "lic-999"]
        )

        assert education.exit_code == 1
        assert "Student seat not found: lic-999" in education.output
        assert "Member pass not found: lic-999" in fitness.output


# ============================================================================
# Tests commandes de licence
# ============================================================================


class TestLicenseCommands:
    def test_assign_then_history(self, cli_container):
        assigned = invoke("license", "assign", "lic-004", "stu-dan", "--name", "Dan", "--reason", "arrival")
        history = invoke("license", "history", "lic-004")

        assert assigned.exit_code == 0, assigned.output
        assert "assignée à stu-dan" in assigned.output
        assert history.exit_code == 0, history.output
        assert "assigned" in history.output
        assert "u-admin" in history.output

    def test_assign_conflict(self, cli_container):
        result = invoke("license", "assign", "lic-001", "stu-dan")

        assert result.exit_code == 1
        assert "business_rule_violation" in result.output

    def test_revoke_and_reassign(self, cli_container):
        revoked = invoke("license", "revoke", "lic-001")
        reassigned = invoke("license", "reassign", "lic-002", "stu-emma")

        assert revoked.exit_code == 0, revoked.output
        assert reassigned.exit_code == 0, reassigned.output
        assert cli_container.repositories().licenses.read("lic-001").assignee_id is None
        assert cli_container.repositories().licenses.read("lic-002").assignee_id == "stu-emma"

    def test_suspend_and_reactivate(self, cli_container):
        suspended = invoke("license", "suspend", "lic-001")
        reactivated = invoke("license", "reactivate", "lic-001")

        assert "suspended" in suspended.output
        assert reactivated.exit_code == 0
        assert "active" in reactivated.output

    def test_suspend_pending_fails(self, cli_container):
        result = invoke("license", "suspend", "lic-004")
        assert result.exit_code == 1

    def test_validate(self, cli_container):
        valid = invoke("license", "validate", "--key", "LIC-2024-PHYS0001")
        refused = invoke("license", "validate", "--id", "lic-003")

        assert valid.exit_code == 0
        assert "Student seat is valid" in valid.output
        assert refused.exit_code == 1
        assert "not_active" in refused.output

    def test_create_from_plan(self, cli_container):
        result = invoke("license", "create", "sub-lab", "--quantity", "2")

        assert result.exit_code == 0, result.output
        assert "2 licence(s) créée(s)" in result.output
        assert len(cli_container.repositories().licenses.list_by_subscription("sub-lab")) == 4


# ============================================================================
# Tests seed, info, version
# ============================================================================


class TestMiscCommands:
    def test_seed_refused_for_memory_provider(self, cli_container):
        result = invoke("seed")
        assert result.exit_code == 1

    def test_seed_sql_database(self, tmp_path):
        settings = Settings(
            database_provider="sqlmodel",
            database_url=f"sqlite:///{tmp_path / 'seed.db'}",
            log_file=None,
        )
        container = _container(settings)

        with patch("tenantdesk.adapters.cli.helpers.Container", return_value=container):
            first = invoke("seed")
            second = invoke("seed")

        assert first.exit_code == 0, first.output
        assert "24 entité(s) insérée(s)" in first.output
        assert "0 entité(s) insérée(s)" in second.output

    def test_info(self, test_settings):
        with patch("tenantdesk.main.container", _container(test_settings)):
            result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "education" in result.output
        assert "memory" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "TenantDesk v" in result.output


# ============================================================================
# Tests utilitaires
# ============================================================================


class TestParseFilter:
    @pytest.mark.parametrize(
        "expression, field, operator, value",
        [
            ("status=active", "status", StringOperator.EQUALS, "active"),
            ("status!=revoked", "status", StringOperator.NOT_EQUALS, "revoked"),
            ("name~=campus", "name", StringOperator.CONTAINS, "campus"),
            ("license_key^=LIC-2024", "license_key", StringOperator.STARTS_WITH, "LIC-2024"),
            ("license_key$=0001", "license_key", StringOperator.ENDS_WITH, "0001"),
            (" notes = pending payment ", "notes", StringOperator.EQUALS, "pending payment"),
        ],
    )
    def test_string_filters(self, expression, field, operator, value):
        typed = parse_filter(expression)

        assert typed.field == field
        assert isinstance(typed.condition, StringFilter)
        assert typed.condition.operator == operator
        assert typed.condition.value == value

    def test_null_filters(self):
        assert parse_filter("notes=null").condition == NullFilter(NullOperator.IS_NULL)
        assert parse_filter("notes!=NULL").condition == NullFilter(NullOperator.IS_NOT_NULL)

    def test_invalid_expression(self):
        with pytest.raises(typer.BadParameter):
            parse_filter("status")

    def test_build_filter_request(self):
        assert build_filter_request(None) is None
        request = build_filter_request(["status=active", "status=pending"], any_match=True)
        assert request.logic == FilterLogic.OR
        assert len(request.filters) == 2


class TestParseSortAndRender:
    def test_parse_sort(self):
        assert parse_sort("amount:desc").direction == SortDirection.DESC
        assert parse_sort("name").direction == SortDirection.ASC

    def test_parse_sort_invalid_direction(self):
        with pytest.raises(typer.BadParameter):
            parse_sort("name:sideways")

    def test_render_page_adds_score_column(self, catalog, ctx):
        page = catalog.entity("license").list_page_data.execute(
            ctx, PageDataRequest(search=SearchRequest("alice"))
        )

        table = render_page("license", page, ["id", "assignee_name"])

        assert [column.header for column in table.columns] == ["id", "assignee_name", "score"]
        assert table.row_count == 1

    def test_render_page_default_columns(self, catalog, ctx):
        page = catalog.entity("workspace").list_page_data.execute(ctx, PageDataRequest())

        table = render_page("workspace", page)

        headers = [column.header for column in table.columns]
        assert headers[0] == "id"
        assert not any(header.startswith("date_") for header in headers)
