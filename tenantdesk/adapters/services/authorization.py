"""
Services d'autorisation.

StaticAuthorizationService applique une table de permissions par utilisateur,
typiquement chargée depuis la configuration (TENANTDESK_AUTHORIZATION_GRANTS).

Format d'une permission accordée :
- "license:update" : une action sur une entité
- "license:*"      : toutes les actions sur une entité
- "*"              : toutes les permissions
"""

from typing import Iterable, Mapping, Optional

from tenantdesk.core.ports.services import IAuthorizationService
from tenantdesk.core.value_objects.context import Permission, RequestContext

WILDCARD = "*"


class StaticAuthorizationService(IAuthorizationService):
    """Autorisation à partir d'un dictionnaire utilisateur -> permissions."""

    def __init__(
        self,
        grants: Optional[Mapping[str, Iterable[str]]] = None,
        enabled: bool = True,
    ) -> None:
        self._grants: dict[str, frozenset[str]] = {
            user_id: frozenset(permissions) for user_id, permissions in (grants or {}).items()
        }
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    def grant(self, user_id: str, *permissions: str) -> None:
        self._grants[user_id] = self._grants.get(user_id, frozenset()) | frozenset(permissions)

    def has_permission(self, ctx: RequestContext, user_id: str, permission: Permission) -> bool:
        granted = self._grants.get(user_id)
        if not granted:
            return False
        return bool(
            {WILDCARD, str(permission), f"{permission.entity}:{WILDCARD}"} & granted
        )


class DisabledAuthorizationService(IAuthorizationService):
    """Autorisation désactivée : toutes les requêtes passent."""

    def is_enabled(self) -> bool:
        return False

    def has_permission(self, ctx: RequestContext, user_id: str, permission: Permission) -> bool:
        return True
