"""Sous-package CLI commands - re-exporte les commandes publiques."""

from tenantdesk.adapters.cli.commands.entity_commands import (
    list_entities,
    seed,
    show_entity,
)
from tenantdesk.adapters.cli.commands.license_commands import license_app

__all__ = [
    "license_app",
    "list_entities",
    "seed",
    "show_entity",
]
