"""
Routes des actions de licence.

Les transitions (assign, revoke, reassign, suspend, reactivate), la
création depuis un plan, le contrôle d'accès et l'historique.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.encoders import jsonable_encoder

from ...core.value_objects import (
    EntityName,
    FilterRequest,
    SortField,
    SortRequest,
    StringFilter,
    TypedFilter,
)
from ...services.listing.sorting import apply_sort
from ...services.usecases import (
    AssignLicenseRequest,
    CreateLicensesFromPlanRequest,
    LicenseStatusRequest,
    ListRequest,
    ReassignLicenseRequest,
    RevokeLicenseAssignmentRequest,
    ValidateLicenseAccessRequest,
)
from ..deps import CatalogDep, ContextDep
from ..schemas import (
    AssignSchema,
    CreateFromPlanSchema,
    ReasonSchema,
    ReassignSchema,
    ValidateAccessSchema,
)

router = APIRouter(prefix="/api/licenses", tags=["licenses"])


@router.post("/validate")
def validate_access(body: ValidateAccessSchema, ctx: ContextDep, catalog: CatalogDep):
    """Contrôle d'accès : répond 200 même si la licence est refusée (valid=false)."""
    result = catalog.licenses.validate_access.execute(
        ctx, ValidateLicenseAccessRequest(**body.model_dump())
    )
    return jsonable_encoder(result)


@router.post("/from-plan", status_code=201)
def create_from_plan(body: CreateFromPlanSchema, ctx: ContextDep, catalog: CatalogDep):
    response = catalog.licenses.create_from_plan.execute(
        ctx, CreateLicensesFromPlanRequest(**body.model_dump())
    )
    return jsonable_encoder(response)


@router.post("/{license_id}/assign")
def assign(license_id: str, body: AssignSchema, ctx: ContextDep, catalog: CatalogDep):
    request = AssignLicenseRequest(license_id=license_id, **body.model_dump())
    return jsonable_encoder(catalog.licenses.assign.execute(ctx, request))


@router.post("/{license_id}/revoke")
def revoke(license_id: str, ctx: ContextDep, catalog: CatalogDep, body: Optional[ReasonSchema] = None):
    body = body or ReasonSchema()
    request = RevokeLicenseAssignmentRequest(license_id=license_id, **body.model_dump())
    return jsonable_encoder(catalog.licenses.revoke.execute(ctx, request))


@router.post("/{license_id}/reassign")
def reassign(license_id: str, body: ReassignSchema, ctx: ContextDep, catalog: CatalogDep):
    request = ReassignLicenseRequest(license_id=license_id, **body.model_dump())
    return jsonable_encoder(catalog.licenses.reassign.execute(ctx, request))


@router.post("/{license_id}/suspend")
def suspend(license_id: str, ctx: ContextDep, catalog: CatalogDep, body: Optional[ReasonSchema] = None):
    body = body or ReasonSchema()
    request = LicenseStatusRequest(license_id=license_id, **body.model_dump())
    return jsonable_encoder(catalog.licenses.suspend.execute(ctx, request))


@router.post("/{license_id}/reactivate")
def reactivate(license_id: str, ctx: ContextDep, catalog: CatalogDep, body: Optional[ReasonSchema] = None):
    body = body or ReasonSchema()
    request = LicenseStatusRequest(license_id=license_id, **body.model_dump())
    return jsonable_encoder(catalog.licenses.reactivate.execute(ctx, request))


@router.get("/{license_id}/history")
def history(license_id: str, ctx: ContextDep, catalog: CatalogDep):
    """Journal complet de la licence, du plus ancien au plus récent."""
    definition = catalog.definition(EntityName.LICENSE_HISTORY)
    filters = FilterRequest(filters=(TypedFilter("license_id", StringFilter(license_id, case_sensitive=True)),))
    entries = catalog.entity(EntityName.LICENSE_HISTORY).list_all.execute(ctx, ListRequest(filters))
    ordered = apply_sort(entries, SortRequest(fields=(SortField("date_created"),)), definition.accessor)
    return jsonable_encoder(ordered)
