"""Génération d'identifiants."""

from uuid import uuid4

from tenantdesk.core.ports.services import IIDService


class UUIDService(IIDService):
    """Identifiants UUID4 au format hexadécimal (32 caractères)."""

    def generate_id(self) -> str:
        return uuid4().hex
