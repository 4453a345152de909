"""
Commandes CLI génériques sur les entités (list, show, seed).
"""

from typing import Annotated, Optional

import typer

from tenantdesk.adapters.cli.helpers import (
    build_filter_request,
    build_sort_request,
    console,
    render_item,
    render_page,
    report_errors,
    request_context,
    suppress_loguru,
    with_container,
)
from tenantdesk.core.value_objects import PaginationRequest, SearchRequest
from tenantdesk.services.usecases import PageDataRequest


def list_entities(
    entity: Annotated[str, typer.Argument(help="Entité à lister (license, subscription, ...)")],
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Recherche plein texte"),
    ] = None,
    fuzzy: Annotated[
        bool,
        typer.Option("--fuzzy", help="Recherche approximative (tolère les fautes de frappe)"),
    ] = False,
    filters: Annotated[
        Optional[list[str]],
        typer.Option("--filter", "-f", help="Filtre champ=valeur (répétable, ~= contient)"),
    ] = None,
    any_match: Annotated[
        bool,
        typer.Option("--any", help="Combiner les filtres avec OU au lieu de ET"),
    ] = False,
    sort: Annotated[
        Optional[list[str]],
        typer.Option("--sort", help="Tri champ[:desc] (répétable, le premier est prioritaire)"),
    ] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Numéro de page")] = 1,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Taille de page"),
    ] = None,
    columns: Annotated[
        Optional[list[str]],
        typer.Option("--column", "-c", help="Colonne à afficher (répétable)"),
    ] = None,
) -> None:
    """
    Liste une page d'entités avec filtres, recherche et tri.

    Exemples:
      tenantdesk list license --filter status=active --sort license_key
      tenantdesk list license --search "alice" --fuzzy
      tenantdesk list invoice --sort amount:desc --limit 5
    """
    _list_entities(entity, search, fuzzy, filters, any_match, sort, page, limit, columns)


@with_container
def _list_entities(
    container,
    entity: str,
    search: Optional[str],
    fuzzy: bool,
    filters: Optional[list[str]],
    any_match: bool,
    sort: Optional[list[str]],
    page: int,
    limit: Optional[int],
    columns: Optional[list[str]],
) -> None:
    request = PageDataRequest(
        pagination=PaginationRequest(limit=limit, page=page),
        filters=build_filter_request(filters, any_match),
        sort=build_sort_request(sort),
        search=SearchRequest(query=search, fuzzy=fuzzy) if search else None,
    )
    with report_errors():
        catalog = container.catalog()
        ctx = request_context(container)
        result = catalog.entity(entity).list_page_data.execute(ctx, request)

    with suppress_loguru():
        console.print(render_page(entity, result, columns))
        if result.pagination.has_next:
            console.print(f"[dim]Page suivante : --page {result.pagination.current_page + 1}[/dim]")


def show_entity(
    entity: Annotated[str, typer.Argument(help="Entité (license, subscription, ...)")],
    entity_id: Annotated[str, typer.Argument(help="Identifiant")],
) -> None:
    """Affiche le détail d'une entité."""
    _show_entity(entity, entity_id)


@with_container
def _show_entity(container, entity: str, entity_id: str) -> None:
    with report_errors():
        catalog = container.catalog()
        item = catalog.entity(entity).item_page_data.execute(request_context(container), entity_id)
    with suppress_loguru():
        console.print(render_item(entity, item))


def seed(
    business_type: Annotated[
        Optional[str],
        typer.Option("--business-type", "-b", help="Jeu de données (défaut: configuration)"),
    ] = None,
) -> None:
    """Copie les données de démonstration dans la base SQL."""
    _seed(business_type)


@with_container
def _seed(container, business_type: Optional[str]) -> None:
    from tenantdesk.infrastructure.seed import apply_seed, load_seed_data

    config = container.config()
    if not config.uses_database:
        console.print(
            "[yellow]Le fournisseur 'memory' charge déjà les données de démo au démarrage.[/yellow]"
        )
        console.print("[dim]Definissez TENANTDESK_DATABASE_PROVIDER=sqlmodel pour peupler la base.[/dim]")
        raise typer.Exit(1)

    data = load_seed_data(business_type or config.business_type, config.seed_dir)
    with report_errors():
        inserted = apply_seed(container.repositories(), data, container.accessors())

    console.print(f"[green]{sum(inserted.values())} entité(s) insérée(s)[/green]")
    for name, count in inserted.items():
        if count:
            console.print(f"  {name}: {count}")
