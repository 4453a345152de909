"""
Interfaces ports pour les services transverses.

Traduction, autorisation, transactions et génération d'identifiants.
Les cas d'utilisation ne dependent que de ces contrats.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from tenantdesk.core.value_objects.context import Permission, RequestContext

R = TypeVar("R")


class ITranslationService(ABC):
    """
    Resolution des messages traduits.

    Ne lève jamais d'exception : retombe sur le message par défaut, puis sur la clé.
    """

    @abstractmethod
    def get(self, ctx: RequestContext, business_type: str, key: str, **params: Any) -> str:
        """Retourne le message pour la clé, ou la clé elle-meme."""
        ...

    @abstractmethod
    def get_with_default(
        self,
        ctx: RequestContext,
        business_type: str,
        key: str,
        default: str,
        **params: Any,
    ) -> str:
        """Retourne le message pour la clé, ou le message par défaut."""
        ...


class IAuthorizationService(ABC):
    """Vérification des permissions "entité:action"."""

    @abstractmethod
    def has_permission(self, ctx: RequestContext, user_id: str, permission: Permission) -> bool:
        ...

    @abstractmethod
    def is_enabled(self) -> bool:
        ...


class ITransactionService(ABC):
    """
    Exécution atomique d'une unité de travail.

    Toute exception levée par `fn` annule l'unité et est propagée.
    """

    @abstractmethod
    def execute_in_transaction(
        self, ctx: RequestContext, fn: Callable[[RequestContext], R]
    ) -> R:
        ...

    @abstractmethod
    def supports_transactions(self) -> bool:
        ...


class IIDService(ABC):
    """Génération d'identifiants uniques."""

    @abstractmethod
    def generate_id(self) -> str:
        ...
