"""
Utilitaires partagés pour les commandes CLI de TenantDesk.

Ce module fournit :
- console : instance Rich Console partagée
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : décorateur injectant un container initialise
- state / request_context : contexte d'appel (utilisateur, type d'activité)
- parse_filter / parse_sort : conversion des options --filter et --sort
- render_page / render_item : affichage Rich des résultats
- report_errors : affichage des erreurs des cas d'utilisation
"""

from contextlib import contextmanager
from functools import wraps
from typing import Any, Optional

import typer
from loguru import logger as loguru_logger
from rich.console import Console
from rich.table import Table

from tenantdesk.container import Container
from tenantdesk.core.exceptions import ConfigurationError, UseCaseError
from tenantdesk.core.value_objects import (
    FilterLogic,
    FilterRequest,
    NullFilter,
    NullOperator,
    PageResult,
    RequestContext,
    SortDirection,
    SortField,
    SortRequest,
    StringFilter,
    StringOperator,
    TypedFilter,
)
from tenantdesk.infrastructure.conversion import entity_to_dict, to_display

console = Console()

# Etat global alimente par le callback principal (options --user / --business-type)
state: dict[str, Any] = {"user_id": None, "business_type": None}

# Opérateurs reconnus dans --filter, du plus long au plus court
_FILTER_OPERATORS = (
    ("!=", StringOperator.NOT_EQUALS),
    ("~=", StringOperator.CONTAINS),
    ("^=", StringOperator.STARTS_WITH),
    ("$=", StringOperator.ENDS_WITH),
    ("=", StringOperator.EQUALS),
)

# Nombre maximal de colonnes affichées dans une table de liste
MAX_COLUMNS = 7


@contextmanager
def suppress_loguru():
    """
    Context manager pour désactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("tenantdesk")
    try:
        yield
    finally:
        loguru_logger.enable("tenantdesk")


def with_container(func):
    """
    Décorateur qui injecte un container initialise en premier argument.

    Usage:
        @with_container
        def _my_command(container, ...):
            catalog = container.catalog()
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        container = Container()
        return func(container, *args, **kwargs)

    return wrapper


def request_context(container) -> RequestContext:
    """Construit le contexte d'appel depuis les options globales et la configuration."""
    config = container.config()
    return RequestContext(
        user_id=state.get("user_id"),
        business_type=state.get("business_type") or config.business_type,
    )


def parse_filter(expression: str) -> TypedFilter:
    """
    Convertit une expression --filter en filtre type.

    Formes acceptées :
        status=active       égalité (insensible à la casse)
        name~=campus        contient
        key^=LIC-2024       commence par
        key$=0001           finit par
        status!=revoked     difference
        notes=null          valeur absente (notes!=null : valeur présente)
    """
    for token, operator in _FILTER_OPERATORS:
        field, sep, value = expression.partition(token)
        if sep and field:
            field = field.strip()
            value = value.strip()
            if value.lower() == "null" and operator in (StringOperator.EQUALS, StringOperator.NOT_EQUALS):
                null_operator = NullOperator.IS_NULL if operator == StringOperator.EQUALS else NullOperator.IS_NOT_NULL
                return TypedFilter(field, NullFilter(null_operator))
            return TypedFilter(field, StringFilter(value, operator))
    raise typer.BadParameter(f"filtre invalide : {expression!r} (attendu: champ=valeur)")


def build_filter_request(expressions: Optional[list[str]], any_match: bool = False) -> Optional[FilterRequest]:
    if not expressions:
        return None
    return FilterRequest(
        filters=tuple(parse_filter(expression) for expression in expressions),
        logic=FilterLogic.OR if any_match else FilterLogic.AND,
    )


def parse_sort(expression: str) -> SortField:
    """Convertit "champ" ou "champ:desc" en champ de tri."""
    field, _, direction = expression.partition(":")
    direction = direction.strip().lower() or "asc"
    if direction not in ("asc", "desc"):
        raise typer.BadParameter(f"direction de tri invalide : {direction!r} (asc ou desc)")
    return SortField(field.strip(), SortDirection(direction))


def build_sort_request(expressions: Optional[list[str]]) -> Optional[SortRequest]:
    if not expressions:
        return None
    return SortRequest(fields=tuple(parse_sort(expression) for expression in expressions))


def _columns(items: list, requested: Optional[list[str]]) -> list[str]:
    if requested:
        return requested
    if not items:
        return ["id"]
    names = [name for name in entity_to_dict(items[0]) if not name.startswith("date_")]
    return names[:MAX_COLUMNS]


def render_page(entity_name: str, page: PageResult, columns: Optional[list[str]] = None) -> Table:
    """
    Construit la table Rich d'une page de résultats.

    Une colonne "score" est ajoutée quand la page provient d'une recherche.
    """
    names = _columns(page.items, columns)
    pagination = page.pagination
    table = Table(
        title=f"{entity_name} - page {pagination.current_page}/{max(pagination.total_pages, 1)}",
        caption=f"{pagination.total_items} résultat(s)",
        show_header=True,
    )
    for name in names:
        table.add_column(name, style="cyan" if name == "id" else None, overflow="fold")
    with_scores = page.search_metrics is not None
    if with_scores:
        table.add_column("score", justify="right", style="green")

    for index, item in enumerate(page.items):
        row = entity_to_dict(item)
        cells = [to_display(row.get(name, getattr(item, name, None))) for name in names]
        if with_scores:
            cells.append(f"{page.search_results[index].score:.2f}")
        table.add_row(*cells)
    return table


def render_item(entity_name: str, item: Any) -> Table:
    """Table Rich "champ / valeur" pour une entité."""
    table = Table(title=f"{entity_name} {getattr(item, 'id', '')}", show_header=True)
    table.add_column("Champ", style="cyan")
    table.add_column("Valeur")
    for name, value in entity_to_dict(item).items():
        table.add_row(name, to_display(value))
    return table


@contextmanager
def report_errors():
    """
    Affiche les erreurs métier en rouge et termine la commande avec le code 1.

    Usage:
        with report_errors():
            catalog.licenses.assign.execute(ctx, request)
    """
    try:
        yield
    except UseCaseError as err:
        console.print(f"[red]Erreur ({err.kind}) : {err.message}[/red]")
        raise typer.Exit(1) from err
    except ConfigurationError as err:
        console.print(f"[red]Erreur de configuration : {err}[/red]")
        raise typer.Exit(2) from err
