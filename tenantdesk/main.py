"""
Point d'entrée CLI de TenantDesk.

Configure le logging et fournit les commandes CLI.
"""

from typing import Annotated, Optional

import typer
from loguru import logger

from tenantdesk import __version__
from tenantdesk.adapters.cli.commands import license_app, list_entities, seed, show_entity
from tenantdesk.adapters.cli.helpers import console, state
from tenantdesk.config import Settings
from tenantdesk.container import Container
from tenantdesk.logging_config import configure_logging

app = typer.Typer(
    name="tenantdesk",
    help="Back-office multi-tenant : licences, souscriptions et facturation",
)
container = Container()


@app.callback()
def main_callback(
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", envvar="TENANTDESK_USER", help="Utilisateur appelant"),
    ] = None,
    business_type: Annotated[
        Optional[str],
        typer.Option("--business-type", "-b", help="Type d'activité (défaut: configuration)"),
    ] = None,
) -> None:
    """TenantDesk - Gestion des licences et de la facturation des tenants."""
    state["user_id"] = user
    state["business_type"] = business_type


# Commandes génériques
app.command(name="list")(list_entities)
app.command(name="show")(show_entity)
app.command()(seed)

# Monter license_app comme sous-commande
app.add_typer(license_app, name="license")


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration TenantDesk")
    typer.echo(f"Type d'activité : {config.business_type}")
    typer.echo(f"Persistance : {config.database_provider}")
    if config.uses_database:
        typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Autorisation : {'activée' if config.authorization_enabled else 'désactivée'}")
    typer.echo(f"Taille de page : {config.default_page_size} (max {config.max_page_size})")
    typer.echo(f"Résultats de recherche max : {config.max_search_results}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def entities() -> None:
    """Liste les entités disponibles et leurs champs."""
    definitions = container.definitions()
    for name in sorted(definitions):
        definition = definitions[name]
        searchable = ", ".join(definition.accessor.searchable_fields)
        console.print(f"[cyan]{name}[/cyan] [dim](recherche : {searchable})[/dim]")
        console.print(f"  {', '.join(definition.allowed_fields)}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"TenantDesk v{__version__}")


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option(help="Adresse d'écoute")] = None,
    port: Annotated[Optional[int], typer.Option(help="Port d'écoute")] = None,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance l'API HTTP TenantDesk."""
    import uvicorn

    config = get_config()
    host = host or config.api_host
    port = port or config.api_port
    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("tenantdesk.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
        business_type=settings.business_type,
    )

    logger.info(f"Démarrage de TenantDesk v{__version__}")

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
