"""
Commandes CLI des licences (assign, revoke, reassign, suspend, reactivate,
validate, create, history).
"""

from typing import Annotated, Optional

import typer
from rich.table import Table

from tenantdesk.adapters.cli.helpers import (
    console,
    render_item,
    report_errors,
    request_context,
    suppress_loguru,
    with_container,
)
from tenantdesk.core.entities import License
from tenantdesk.core.value_objects import EntityName
from tenantdesk.infrastructure.conversion import to_display
from tenantdesk.services.usecases import (
    AssignLicenseRequest,
    CreateLicensesFromPlanRequest,
    LicenseStatusRequest,
    ReassignLicenseRequest,
    RevokeLicenseAssignmentRequest,
    ValidateLicenseAccessRequest,
)

# Application Typer pour les commandes de licences
license_app = typer.Typer(
    name="license",
    help="Gestion du cycle de vie des licences",
    rich_markup_mode="rich",
)

ReasonOption = Annotated[Optional[str], typer.Option("--reason", "-r", help="Motif (historique)")]


def _print_license(lic: License, message: str) -> None:
    with suppress_loguru():
        console.print(f"[green]{message}[/green]")
        console.print(render_item(EntityName.LICENSE, lic))


@license_app.command("assign")
def assign(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
    assignee_id: Annotated[str, typer.Argument(help="ID du titulaire")],
    assignee_type: Annotated[str, typer.Option("--type", "-t", help="Type de titulaire")] = "user",
    assignee_name: Annotated[Optional[str], typer.Option("--name", help="Nom du titulaire")] = None,
    reason: ReasonOption = None,
) -> None:
    """Assigne une licence libre à un titulaire."""
    _run_assign(license_id, assignee_id, assignee_type, assignee_name, reason)


@with_container
def _run_assign(container, license_id, assignee_id, assignee_type, assignee_name, reason) -> None:
    with report_errors():
        lic = container.catalog().licenses.assign.execute(
            request_context(container),
            AssignLicenseRequest(
                license_id=license_id,
                assignee_id=assignee_id,
                assignee_type=assignee_type,
                assignee_name=assignee_name,
                reason=reason,
            ),
        )
    _print_license(lic, f"Licence {lic.license_key} assignée à {assignee_id}")


@license_app.command("revoke")
def revoke(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
    reason: ReasonOption = None,
) -> None:
    """Retire le titulaire d'une licence (la licence repasse en attente)."""
    _run_revoke(license_id, reason)


@with_container
def _run_revoke(container, license_id: str, reason: Optional[str]) -> None:
    with report_errors():
        lic = container.catalog().licenses.revoke.execute(
            request_context(container),
            RevokeLicenseAssignmentRequest(license_id=license_id, reason=reason),
        )
    _print_license(lic, f"Assignation de la licence {lic.license_key} révoquée")


@license_app.command("reassign")
def reassign(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
    new_assignee_id: Annotated[str, typer.Argument(help="ID du nouveau titulaire")],
    assignee_type: Annotated[str, typer.Option("--type", "-t", help="Type de titulaire")] = "user",
    assignee_name: Annotated[Optional[str], typer.Option("--name", help="Nom du titulaire")] = None,
    reason: ReasonOption = None,
) -> None:
    """Transfère une licence assignée à un autre titulaire."""
    _run_reassign(license_id, new_assignee_id, assignee_type, assignee_name, reason)


@with_container
def _run_reassign(container, license_id, new_assignee_id, assignee_type, assignee_name, reason) -> None:
    with report_errors():
        lic = container.catalog().licenses.reassign.execute(
            request_context(container),
            ReassignLicenseRequest(
                license_id=license_id,
                new_assignee_id=new_assignee_id,
                new_assignee_type=assignee_type,
                new_assignee_name=assignee_name,
                reason=reason,
            ),
        )
    _print_license(lic, f"Licence {lic.license_key} réassignée à {new_assignee_id}")


@license_app.command("suspend")
def suspend(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
    reason: ReasonOption = None,
) -> None:
    """Suspend une licence active."""
    _run_status_change(license_id, reason, suspend=True)


@license_app.command("reactivate")
def reactivate(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
    reason: ReasonOption = None,
) -> None:
    """Reactive une licence suspendue."""
    _run_status_change(license_id, reason, suspend=False)


@with_container
def _run_status_change(container, license_id: str, reason: Optional[str], suspend: bool) -> None:
    licenses = container.catalog().licenses
    use_case = licenses.suspend if suspend else licenses.reactivate
    with report_errors():
        lic = use_case.execute(
            request_context(container),
            LicenseStatusRequest(license_id=license_id, reason=reason),
        )
    _print_license(lic, f"Licence {lic.license_key} : {lic.status.value}")


@license_app.command("validate")
def validate(
    license_id: Annotated[Optional[str], typer.Option("--id", help="ID de la licence")] = None,
    license_key: Annotated[Optional[str], typer.Option("--key", "-k", help="Clé de la licence")] = None,
    assignee_id: Annotated[
        Optional[str],
        typer.Option("--assignee", "-a", help="Titulaire attendu"),
    ] = None,
) -> None:
    """
    Verifie qu'une licence donne accès au service.

    Code de sortie 0 si la licence est valide, 1 sinon.
    """
    _run_validate(license_id, license_key, assignee_id)


@with_container
def _run_validate(container, license_id, license_key, assignee_id) -> None:
    with report_errors():
        result = container.catalog().licenses.validate_access.execute(
            request_context(container),
            ValidateLicenseAccessRequest(
                license_id=license_id, license_key=license_key, assignee_id=assignee_id
            ),
        )
    if result.valid:
        console.print(f"[green]{result.message}[/green]")
        return
    console.print(f"[red]{result.message}[/red] [dim]({result.reason})[/dim]")
    raise typer.Exit(1)


@license_app.command("create")
def create_from_plan(
    subscription_id: Annotated[str, typer.Argument(help="ID de la souscription")],
    quantity: Annotated[int, typer.Option("--quantity", "-q", help="Nombre de licences")] = 1,
    plan_id: Annotated[Optional[str], typer.Option("--plan", help="Plan (défaut: plan de la souscription)")] = None,
    license_type: Annotated[Optional[str], typer.Option("--type", "-t", help="Type de licence")] = None,
    auto_assign: Annotated[
        bool,
        typer.Option("--auto-assign", help="Assigner la première licence au client"),
    ] = False,
) -> None:
    """Génère des licences pour une souscription à partir de son plan."""
    _run_create_from_plan(subscription_id, quantity, plan_id, license_type, auto_assign)


@with_container
def _run_create_from_plan(container, subscription_id, quantity, plan_id, license_type, auto_assign) -> None:
    with report_errors():
        response = container.catalog().licenses.create_from_plan.execute(
            request_context(container),
            CreateLicensesFromPlanRequest(
                subscription_id=subscription_id,
                quantity=quantity,
                plan_id=plan_id,
                license_type=license_type,
                auto_assign_to_purchaser=auto_assign,
            ),
        )
    table = Table(title=f"{len(response.licenses)} licence(s) créée(s)")
    table.add_column("ID", style="cyan")
    table.add_column("Clé")
    table.add_column("Statut")
    table.add_column("Titulaire")
    for lic in response.licenses:
        table.add_row(lic.id, lic.license_key, lic.status.value, to_display(lic.assignee_id))
    with suppress_loguru():
        console.print(table)


@license_app.command("history")
def history(
    license_id: Annotated[str, typer.Argument(help="ID de la licence")],
) -> None:
    """Affiche l'historique d'une licence."""
    _run_history(license_id)


@with_container
def _run_history(container, license_id: str) -> None:
    from tenantdesk.core.value_objects import FilterRequest, SortField, SortRequest, StringFilter, TypedFilter
    from tenantdesk.services.listing.sorting import apply_sort
    from tenantdesk.services.usecases import ListRequest

    catalog = container.catalog()
    filters = FilterRequest((TypedFilter("license_id", StringFilter(license_id, case_sensitive=True)),))
    with report_errors():
        entries = catalog.entity(EntityName.LICENSE_HISTORY).list_all.execute(
            request_context(container), ListRequest(filters)
        )
    entries = apply_sort(
        entries,
        SortRequest((SortField("date_created"),)),
        catalog.definition(EntityName.LICENSE_HISTORY).accessor,
    )

    table = Table(title=f"Historique de la licence {license_id}")
    table.add_column("Date", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Statut")
    table.add_column("Titulaire")
    table.add_column("Par")
    table.add_column("Motif")
    for entry in entries:
        status = f"{to_display(entry.status_before)} -> {to_display(entry.status_after)}"
        table.add_row(
            to_display(entry.date_created),
            entry.action.value,
            status,
            to_display(entry.assignee_id),
            to_display(entry.performed_by),
            to_display(entry.reason),
        )
    with suppress_loguru():
        console.print(table)
