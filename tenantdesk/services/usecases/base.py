"""
Pipeline commun des cas d'utilisation.

Chaque cas d'utilisation execute les mêmes étapes :
1. autorisation (si un service d'autorisation est actif)
2. validation de la requête
3. validation des règles métier
4. enrichissement (IDs générés, dates d'audit)
5. exécution, dans une transaction si le service le permet
6. traduction des erreurs de stockage en erreurs métier

Les messages d'erreur sont traduits via ITranslationService avec des clés
de la forme "{entité}.validation.<règle>" et "{entité}.errors.<règle>".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar
from uuid import uuid4

from loguru import logger

from tenantdesk.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    EntityNotFoundError,
    NotFoundError,
    OperationFailedError,
    RepositoryError,
    ValidationError,
)
from tenantdesk.core.ports.services import (
    IAuthorizationService,
    IIDService,
    ITransactionService,
    ITranslationService,
)
from tenantdesk.core.value_objects.context import Action, Permission, RequestContext
from tenantdesk.services.listing.errors import InvalidCursorError, ListProcessingError

Req = TypeVar("Req")
Resp = TypeVar("Resp")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UseCaseServices:
    """Services transverses injectés dans les cas d'utilisation."""

    translation: ITranslationService
    authorization: Optional[IAuthorizationService] = None
    transaction: Optional[ITransactionService] = None
    ids: Optional[IIDService] = None


class UseCase(ABC, Generic[Req, Resp]):
    """
    Base des cas d'utilisation.

    Les sous-classes définissent `entity`, `action` et `execute_core`, et
    surchargent au besoin les étapes de validation et d'enrichissement.
    """

    entity: str = ""
    action: Action = Action.READ
    # Règle de la clé "{entité}.errors.<failure_key>" en cas d'erreur de stockage
    failure_key: str = "operation_failed"
    failure_default: str = "operation failed"

    def __init__(self, services: UseCaseServices) -> None:
        self.services = services

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def execute(self, ctx: RequestContext, request: Req) -> Resp:
        """
        Execute le cas d'utilisation.

        Lève :
            AuthorizationError, ValidationError, BusinessRuleError,
            NotFoundError, OperationFailedError
        """
        self.authorize(ctx)
        self.validate_input(ctx, request)
        self.validate_business_rules(ctx, request)
        request = self.enrich(ctx, request)

        transaction = self.services.transaction
        if transaction is not None and transaction.supports_transactions():
            return transaction.execute_in_transaction(ctx, lambda tx_ctx: self._run(tx_ctx, request))
        return self._run(ctx, request)

    def authorize(self, ctx: RequestContext) -> None:
        authorization = self.services.authorization
        if authorization is None or not authorization.is_enabled():
            return
        permission = Permission(self.entity, self.action)
        if not ctx.user_id or not authorization.has_permission(ctx, ctx.user_id, permission):
            logger.warning(f"Accès refuse : utilisateur={ctx.user_id} permission={permission}")
            raise self.error(
                AuthorizationError,
                ctx,
                "errors.authorization_failed",
                "you do not have permission to {action} {entity}",
                action=self.action.value,
                entity=self.entity,
            )

    def validate_input(self, ctx: RequestContext, request: Req) -> None:
        if request is None:
            raise self.invalid(ctx, "request_required", "request is required")

    def validate_business_rules(self, ctx: RequestContext, request: Req) -> None:
        pass

    def enrich(self, ctx: RequestContext, request: Req) -> Req:
        return request

    @abstractmethod
    def execute_core(self, ctx: RequestContext, request: Req) -> Resp:
        ...

    def _run(self, ctx: RequestContext, request: Req) -> Resp:
        try:
            return self.execute_core(ctx, request)
        except EntityNotFoundError as err:
            raise NotFoundError(
                self.translate(
                    ctx,
                    f"{err.entity}.errors.not_found",
                    "{entity} not found: {id}",
                    entity=err.entity,
                    id=err.entity_id,
                ),
                f"{err.entity}.errors.not_found",
            ) from err
        except InvalidCursorError as err:
            raise self.invalid(ctx, "invalid_cursor", "invalid cursor token") from err
        except ListProcessingError as err:
            key = f"{self.entity}.errors.processing_failed"
            message = self.translate(ctx, key, "failed to process {entity} list data", entity=self.entity)
            raise OperationFailedError(f"{message}: {err}", key) from err
        except RepositoryError as err:
            key = f"{self.entity}.errors.{self.failure_key}"
            message = self.translate(ctx, key, self.failure_default)
            logger.error(f"Echec {self.entity}/{self.action.value} : {err}")
            raise OperationFailedError(f"{message}: {err}", key) from err

    # ------------------------------------------------------------------
    # Utilitaires
    # ------------------------------------------------------------------

    def translate(self, ctx: RequestContext, key: str, default: str, **params: Any) -> str:
        return self.services.translation.get_with_default(
            ctx, ctx.business_type, key, default, **params
        )

    def error(self, error_cls: type, ctx: RequestContext, rule: str, default: str, **params: Any):
        """Construit une erreur traduite pour la clé "{entité}.<rule>"."""
        key = f"{self.entity}.{rule}"
        return error_cls(self.translate(ctx, key, default, **params), key)

    def invalid(self, ctx: RequestContext, rule: str, default: str, **params: Any) -> ValidationError:
        return self.error(ValidationError, ctx, f"validation.{rule}", default, **params)

    def violation(self, ctx: RequestContext, rule: str, default: str, **params: Any) -> BusinessRuleError:
        return self.error(BusinessRuleError, ctx, f"errors.{rule}", default, **params)

    def new_id(self) -> str:
        if self.services.ids is not None:
            return self.services.ids.generate_id()
        return uuid4().hex
