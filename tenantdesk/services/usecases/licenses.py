"""
Cas d'utilisation des licences.

machine à états des licences :
- Assign : licence non assignée, ni révoquée ni expirée -> ACTIVE
- RevokeAssignment : licence assignée -> titulaire retiré, PENDING
- Reassign : licence assignée (ni suspendue, révoquée ou expirée) -> nouveau titulaire
- Suspend : ACTIVE -> SUSPENDED
- Reactivate : SUSPENDED -> ACTIVE (PENDING si aucun titulaire)

Chaque mutation écrit une entrée d'historique (statut avant/après, titulaire
précédent) et tient à jour le compteur d'assignations de la souscription,
dans la même unité de travail que la mutation.
"""

import dataclasses
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from tenantdesk.core.entities import (
    TERMINAL_STATUSES,
    License,
    LicenseHistory,
    LicenseHistoryAction,
    LicenseStatus,
    LicenseType,
    Subscription,
)
from tenantdesk.core.exceptions import EntityNotFoundError
from tenantdesk.core.ports.repositories import (
    ILicenseHistoryRepository,
    ILicenseRepository,
    IPlanRepository,
    ISubscriptionRepository,
)
from tenantdesk.core.value_objects.context import Action, EntityName, RequestContext
from tenantdesk.services.listing.filters import as_datetime
from tenantdesk.services.usecases.base import UseCase, UseCaseServices, utcnow
from tenantdesk.services.usecases.crud import (
    CreateEntityUseCase,
    DeleteEntityUseCase,
    UpdateEntityUseCase,
)
from tenantdesk.services.usecases.definitions import EntityDefinition

# Nombre maximal de licences générées en une fois depuis un plan
MAX_LICENSES_PER_PLAN = 1000

SYSTEM_USER = "system"

_KEY_ALPHABET = string.ascii_uppercase + string.digits


def generate_license_key(year: int) -> str:
    """Génère une clé de la forme LIC-{année}-{8 caractères A-Z0-9}."""
    suffix = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(8))
    return f"LIC-{year}-{suffix}"


@dataclass
class LicenseRepositories:
    licenses: ILicenseRepository
    history: ILicenseHistoryRepository
    subscriptions: ISubscriptionRepository
    plans: IPlanRepository


# ============================================================================
# Requêtes et réponses
# ============================================================================


@dataclass(frozen=True)
class AssignLicenseRequest:
    license_id: str
    assignee_id: str
    assignee_type: str = "user"
    assignee_name: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class RevokeLicenseAssignmentRequest:
    license_id: str
    reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ReassignLicenseRequest:
    license_id: str
    new_assignee_id: str
    new_assignee_type: str = "user"
    new_assignee_name: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class LicenseStatusRequest:
    """Requête de suspension ou de réactivation."""

    license_id: str
    reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CreateLicensesFromPlanRequest:
    subscription_id: str
    quantity: int
    plan_id: Optional[str] = None
    license_type: Optional[str] = None
    auto_assign_to_purchaser: bool = False
    date_valid_from: Optional[datetime] = None
    date_valid_until: Optional[datetime] = None


@dataclass
class CreateLicensesFromPlanResponse:
    licenses: list[License] = field(default_factory=list)
    assigned_license_id: Optional[str] = None


@dataclass(frozen=True)
class ValidateLicenseAccessRequest:
    license_id: Optional[str] = None
    license_key: Optional[str] = None
    assignee_id: Optional[str] = None


@dataclass(frozen=True)
class LicenseAccessResult:
    """
    Résultat d'un contrôle d'accès.

    `reason` vaut None si l'accès est valide, sinon : not_found, not_active,
    assignee_mismatch, not_yet_valid ou expired.
    """

    valid: bool
    message: str
    reason: Optional[str] = None
    license: Optional[License] = None


# ============================================================================
# Historique et compteurs
# ============================================================================


class LicenseLedger:
    """
    Ecritures annexes d'une mutation de licence.

    Historique, compteur d'assignations de la souscription et assignation
    elle-meme, partagés par tous les cas d'utilisation de licence.
    """

    def __init__(
        self,
        repositories: LicenseRepositories,
        new_id: Callable[[], str],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repositories = repositories
        self.new_id = new_id
        self.clock = clock

    def record(
        self,
        ctx: RequestContext,
        lic: License,
        action: LicenseHistoryAction,
        status_before: Optional[LicenseStatus],
        previous: Optional[License] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> LicenseHistory:
        """Ecrit une entrée d'historique pour la licence."""
        entry = LicenseHistory(
            id=self.new_id(),
            license_id=lic.id,
            action=action,
            assignee_id=lic.assignee_id,
            assignee_type=lic.assignee_type,
            assignee_name=lic.assignee_name,
            previous_assignee_id=previous.assignee_id if previous else None,
            previous_assignee_type=previous.assignee_type if previous else None,
            previous_assignee_name=previous.assignee_name if previous else None,
            performed_by=ctx.user_id or SYSTEM_USER,
            reason=reason,
            notes=notes,
            status_before=status_before,
            status_after=lic.status,
            date_created=self.clock(),
            date_modified=self.clock(),
        )
        return self.repositories.history.create(entry)

    def adjust_assigned_count(self, subscription_id: str, delta: int) -> Optional[Subscription]:
        """Met à jour assigned_count (plancher 0) et available_count de la souscription."""
        try:
            subscription = self.repositories.subscriptions.read(subscription_id)
        except EntityNotFoundError:
            logger.warning(f"Souscription introuvable pour le compteur de licences : {subscription_id}")
            return None
        subscription.assigned_count = max(0, subscription.assigned_count + delta)
        subscription.recompute_available()
        subscription.date_modified = self.clock()
        return self.repositories.subscriptions.update(subscription)

    def assign(
        self,
        ctx: RequestContext,
        lic: License,
        assignee_id: str,
        assignee_type: str,
        assignee_name: Optional[str],
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> License:
        """Assigne une licence déjà vérifiée comme assignable."""
        status_before = lic.status
        now = self.clock()
        lic.assignee_id = assignee_id
        lic.assignee_type = assignee_type
        lic.assignee_name = assignee_name
        lic.assigned_by = ctx.user_id or SYSTEM_USER
        lic.date_assigned = now
        lic.status = LicenseStatus.ACTIVE
        lic.date_modified = now
        updated = self.repositories.licenses.update(lic)
        self.record(ctx, updated, LicenseHistoryAction.ASSIGNED, status_before, reason=reason, notes=notes)
        self.adjust_assigned_count(updated.subscription_id, +1)
        logger.info(f"Licence {updated.id} assignée à {assignee_type}:{assignee_id}")
        return updated


class LicenseUseCase(UseCase):
    """Base des cas d'utilisation manipulant licences, historique et souscriptions."""

    entity = EntityName.LICENSE
    action = Action.UPDATE

    def __init__(
        self,
        repositories: LicenseRepositories,
        services: UseCaseServices,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(services)
        self.repositories = repositories
        self.clock = clock
        self.ledger = LicenseLedger(repositories, self.new_id, clock)

    def require_license_id(self, ctx: RequestContext, license_id: Optional[str]) -> None:
        if not license_id or not license_id.strip():
            raise self.invalid(ctx, "id_required", "license ID is required")


# ============================================================================
# Transitions d'état
# ============================================================================


class AssignLicenseUseCase(LicenseUseCase):
    failure_key = "assignment_failed"
    failure_default = "license assignment failed"

    def validate_input(self, ctx: RequestContext, request: AssignLicenseRequest) -> None:
        super().validate_input(ctx, request)
        self.require_license_id(ctx, request.license_id)
        if not request.assignee_id or not request.assignee_id.strip():
            raise self.invalid(ctx, "assignee_id_required", "assignee ID is required")

    def execute_core(self, ctx: RequestContext, request: AssignLicenseRequest) -> License:
        lic = self.repositories.licenses.read(request.license_id)
        if lic.is_assigned:
            raise self.violation(
                ctx,
                "already_assigned",
                "license is already assigned to {assignee_id}",
                assignee_id=lic.assignee_id,
            )
        if lic.status in TERMINAL_STATUSES:
            raise self.violation(
                ctx,
                "invalid_status",
                "license cannot be assigned in status {status}",
                status=lic.status.value,
            )
        return self.ledger.assign(
            ctx,
            lic,
            request.assignee_id,
            request.assignee_type,
            request.assignee_name,
            request.reason,
            request.notes,
        )


class RevokeLicenseAssignmentUseCase(LicenseUseCase):
    failure_key = "revocation_failed"
    failure_default = "license revocation failed"

    def validate_input(self, ctx: RequestContext, request: RevokeLicenseAssignmentRequest) -> None:
        super().validate_input(ctx, request)
        self.require_license_id(ctx, request.license_id)

    def execute_core(self, ctx: RequestContext, request: RevokeLicenseAssignmentRequest) -> License:
        lic = self.repositories.licenses.read(request.license_id)
        if not lic.is_assigned:
            raise self.violation(ctx, "not_assigned", "license is not assigned")
        previous = dataclasses.replace(lic)
        lic.clear_assignee()
        lic.status = LicenseStatus.PENDING
        lic.date_modified = self.clock()
        updated = self.repositories.licenses.update(lic)
        self.ledger.record(
            ctx,
            updated,
            LicenseHistoryAction.REVOKED,
            previous.status,
            previous=previous,
            reason=request.reason,
            notes=request.notes,
        )
        self.ledger.adjust_assigned_count(updated.subscription_id, -1)
        logger.info(f"Assignation de la licence {updated.id} révoquée ({previous.assignee_id})")
        return updated


class ReassignLicenseUseCase(LicenseUseCase):
    failure_key = "reassignment_failed"
    failure_default = "license reassignment failed"

    def validate_input(self, ctx: RequestContext, request: ReassignLicenseRequest) -> None:
        super().validate_input(ctx, request)
        self.require_license_id(ctx, request.license_id)
        if not request.new_assignee_id or not request.new_assignee_id.strip():
            raise self.invalid(ctx, "assignee_id_required", "assignee ID is required")

    def execute_core(self, ctx: RequestContext, request: ReassignLicenseRequest) -> License:
        lic = self.repositories.licenses.read(request.license_id)
        if not lic.is_assigned:
            raise self.violation(ctx, "not_assigned", "license is not assigned")
        if lic.status in TERMINAL_STATUSES or lic.status == LicenseStatus.SUSPENDED:
            raise self.violation(
                ctx,
                "invalid_status",
                "license cannot be reassigned in status {status}",
                status=lic.status.value,
            )
        if lic.assignee_id == request.new_assignee_id:
            raise self.violation(
                ctx, "same_assignee", "license is already assigned to {assignee_id}",
                assignee_id=lic.assignee_id,
            )
        previous = dataclasses.replace(lic)
        now = self.clock()
        lic.assignee_id = request.new_assignee_id
        lic.assignee_type = request.new_assignee_type
        lic.assignee_name = request.new_assignee_name
        lic.assigned_by = ctx.user_id or SYSTEM_USER
        lic.date_assigned = now
        lic.date_modified = now
        updated = self.repositories.licenses.update(lic)
        self.ledger.record(
            ctx,
            updated,
            LicenseHistoryAction.REASSIGNED,
            previous.status,
            previous=previous,
            reason=request.reason,
            notes=request.notes,
        )
        logger.info(
            f"Licence {updated.id} reassignee : {previous.assignee_id} -> {updated.assignee_id}"
        )
        return updated


class SuspendLicenseUseCase(LicenseUseCase):
    failure_key = "suspension_failed"
    failure_default = "license suspension failed"

    def validate_input(self, ctx: RequestContext, request: LicenseStatusRequest) -> None:
        super().validate_input(ctx, request)
        self.require_license_id(ctx, request.license_id)

    def execute_core(self, ctx: RequestContext, request: LicenseStatusRequest) -> License:
        lic = self.repositories.licenses.read(request.license_id)
        if lic.status != LicenseStatus.ACTIVE:
            raise self.violation(
                ctx,
                "invalid_status",
                "only active licenses can be suspended (status: {status})",
                status=lic.status.value,
            )
        status_before = lic.status
        lic.status = LicenseStatus.SUSPENDED
        lic.date_modified = self.clock()
        updated = self.repositories.licenses.update(lic)
        self.ledger.record(
            ctx, updated, LicenseHistoryAction.SUSPENDED, status_before,
            reason=request.reason, notes=request.notes,
        )
        logger.info(f"Licence {updated.id} suspendue")
        return updated


class ReactivateLicenseUseCase(LicenseUseCase):
    failure_key = "reactivation_failed"
    failure_default = "license reactivation failed"

    def validate_input(self, ctx: RequestContext, request: LicenseStatusRequest) -> None:
        super().validate_input(ctx, request)
        self.require_license_id(ctx, request.license_id)

    def execute_core(self, ctx: RequestContext, request: LicenseStatusRequest) -> License:
        lic = self.repositories.licenses.read(request.license_id)
        if lic.status != LicenseStatus.SUSPENDED:
            raise self.violation(
                ctx,
                "invalid_status",
                "only suspended licenses can be reactivated (status: {status})",
                status=lic.status.value,
            )
        status_before = lic.status
        lic.status = LicenseStatus.ACTIVE if lic.is_assigned else LicenseStatus.PENDING
        lic.date_modified = self.clock()
        updated = self.repositories.licenses.update(lic)
        self.ledger.record(
            ctx, updated, LicenseHistoryAction.REACTIVATED, status_before,
            reason=request.reason, notes=request.notes,
        )
        logger.info(f"Licence {updated.id} réactivée ({updated.status.value})")
        return updated


# ============================================================================
# Creation en lot et contrôle d'accès
# ============================================================================


class CreateLicensesFromPlanUseCase(LicenseUseCase):
    """Génère les licences d'une souscription à partir de son plan."""

    action = Action.CREATE
    failure_key = "creation_failed"
    failure_default = "license creation failed"

    def validate_input(self, ctx: RequestContext, request: CreateLicensesFromPlanRequest) -> None:
        super().validate_input(ctx, request)
        if not request.subscription_id or not request.subscription_id.strip():
            raise self.invalid(ctx, "subscription_id_required", "subscription ID is required")
        if not 1 <= request.quantity <= MAX_LICENSES_PER_PLAN:
            raise self.invalid(
                ctx,
                "invalid_quantity",
                "quantity must be between 1 and {max}",
                max=MAX_LICENSES_PER_PLAN,
            )
        if request.license_type is not None and request.license_type not in {t.value for t in LicenseType}:
            raise self.invalid(
                ctx,
                "invalid_license_type",
                "invalid license type: {license_type}",
                license_type=request.license_type,
            )

    def execute_core(
        self, ctx: RequestContext, request: CreateLicensesFromPlanRequest
    ) -> CreateLicensesFromPlanResponse:
        subscription = self.repositories.subscriptions.read(request.subscription_id)
        plan_id = request.plan_id or subscription.plan_id
        plan = self.repositories.plans.read(plan_id) if plan_id else None

        if request.license_type is not None:
            license_type = LicenseType(request.license_type)
        elif plan is not None:
            license_type = plan.default_license_type
        else:
            license_type = LicenseType.USER

        existing = self.repositories.licenses.list_by_subscription(subscription.id)
        next_sequence = max((lic.sequence_number or 0 for lic in existing), default=0) + 1

        now = self.clock()
        created = []
        for offset in range(request.quantity):
            lic = License(
                id=self.new_id(),
                subscription_id=subscription.id,
                plan_id=plan_id,
                license_key=generate_license_key(now.year),
                license_type=license_type,
                status=LicenseStatus.PENDING,
                date_valid_from=as_datetime(request.date_valid_from),
                date_valid_until=as_datetime(request.date_valid_until),
                sequence_number=next_sequence + offset,
                date_created=now,
                date_modified=now,
            )
            lic = self.repositories.licenses.create(lic)
            self.ledger.record(ctx, lic, LicenseHistoryAction.CREATED, None)
            created.append(lic)

        total = len(existing) + len(created)
        if subscription.quantity is None or subscription.quantity < total:
            subscription.quantity = total
        subscription.recompute_available()
        subscription.date_modified = now
        self.repositories.subscriptions.update(subscription)

        response = CreateLicensesFromPlanResponse(licenses=created)
        if request.auto_assign_to_purchaser and subscription.client_id:
            first = self.ledger.assign(
                ctx,
                created[0],
                subscription.client_id,
                "client",
                None,
                reason="auto-assigned to purchaser",
            )
            created[0] = first
            response.assigned_license_id = first.id

        logger.info(f"{len(created)} licences créées pour la souscription {subscription.id}")
        return response


class ValidateLicenseAccessUseCase(LicenseUseCase):
    """
    Verifie qu'une licence donne accès au service.

    Une licence absente ou invalide n'est pas une erreur : le résultat porte
    valid=False et la raison du refus.
    """

    action = Action.READ
    failure_key = "validation_failed"
    failure_default = "license validation failed"

    def validate_input(self, ctx: RequestContext, request: ValidateLicenseAccessRequest) -> None:
        super().validate_input(ctx, request)
        if not request.license_id and not request.license_key:
            raise self.invalid(
                ctx, "id_or_key_required", "license ID or license key is required"
            )

    def _refuse(self, ctx: RequestContext, reason: str, default: str, lic: Optional[License] = None) -> LicenseAccessResult:
        message = self.translate(ctx, f"license.access.{reason}", default)
        return LicenseAccessResult(valid=False, message=message, reason=reason, license=lic)

    def execute_core(self, ctx: RequestContext, request: ValidateLicenseAccessRequest) -> LicenseAccessResult:
        if request.license_id:
            try:
                lic = self.repositories.licenses.read(request.license_id)
            except EntityNotFoundError:
                lic = None
        else:
            lic = self.repositories.licenses.get_by_license_key(request.license_key)

        if lic is None:
            return self._refuse(ctx, "not_found", "license not found")
        if lic.status != LicenseStatus.ACTIVE:
            return self._refuse(ctx, "not_active", "license is not active", lic)
        if request.assignee_id and lic.assignee_id != request.assignee_id:
            return self._refuse(ctx, "assignee_mismatch", "license is assigned to someone else", lic)
        # Les dates sans fuseau sont lues en UTC
        now = as_datetime(self.clock())
        valid_from = as_datetime(lic.date_valid_from)
        valid_until = as_datetime(lic.date_valid_until)
        if valid_from is not None and valid_from > now:
            return self._refuse(ctx, "not_yet_valid", "license is not yet valid", lic)
        if valid_until is not None and valid_until < now:
            return self._refuse(ctx, "expired", "license has expired", lic)

        message = self.translate(ctx, "license.access.valid", "license is valid")
        return LicenseAccessResult(valid=True, message=message, license=lic)


# ============================================================================
# CRUD spécialisé
# ============================================================================


class CreateLicenseUseCase(CreateEntityUseCase[License]):
    """Creation unitaire : clé générée si absente, historique CREATED."""

    def __init__(
        self,
        definition: EntityDefinition,
        repositories: LicenseRepositories,
        services: UseCaseServices,
    ) -> None:
        super().__init__(definition, repositories.licenses, services)
        self.ledger = LicenseLedger(repositories, self.new_id)

    def enrich(self, ctx: RequestContext, request: License) -> License:
        lic = super().enrich(ctx, request)
        if not lic.license_key:
            lic.license_key = generate_license_key(lic.date_created.year)
        return lic

    def execute_core(self, ctx: RequestContext, request: License) -> License:
        created = self.repository.create(request)
        self.ledger.record(ctx, created, LicenseHistoryAction.CREATED, None)
        if created.is_assigned:
            self.ledger.adjust_assigned_count(created.subscription_id, +1)
        return created


class UpdateLicenseUseCase(UpdateEntityUseCase[License]):
    """Mise à jour des attributs ; statut et titulaire passent par les actions dédiées."""

    def check_update(self, ctx: RequestContext, existing: License, entity: License) -> None:
        if existing.status != entity.status or existing.assignee_id != entity.assignee_id:
            raise self.violation(
                ctx,
                "use_license_actions",
                "license status and assignee can only change through license actions",
            )


class DeleteLicenseUseCase(DeleteEntityUseCase[License]):
    """Suppression : historique DELETED et libération de la place assignée."""

    def __init__(
        self,
        definition: EntityDefinition,
        repositories: LicenseRepositories,
        services: UseCaseServices,
    ) -> None:
        super().__init__(definition, repositories.licenses, services)
        self.ledger = LicenseLedger(repositories, self.new_id)

    def execute_core(self, ctx: RequestContext, request: str) -> License:
        lic = self.repository.read(request)
        self.ledger.record(ctx, lic, LicenseHistoryAction.DELETED, lic.status)
        if lic.is_assigned:
            self.ledger.adjust_assigned_count(lic.subscription_id, -1)
        self.repository.delete(request)
        return lic
