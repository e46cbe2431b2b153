# carcheck/routers/check.py
"""
Vehicle check endpoints.
GET /check/{vrm}          — resolve + tier-gate a vehicle report
GET /registrations/{vrm}  — validate and format a registration
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header

from carcheck.schemas.check import CheckResponse, ErrorResponse, RegistrationOut
from carcheck.schemas.tier import SubscriptionTier
from carcheck.routers.tier import get_tier_resolver
from carcheck.services.exceptions import ErrorKind, InvalidRegistrationError, InvalidTierError, ResolutionError
from carcheck.services.gating import apply_gate, section_visibility
from carcheck.services.promotion_service import upgrade_offer
from carcheck.services.registration import format_registration, normalize, plate_year
from carcheck.services.report_resolver import ReportResolver, get_report_resolver, lookup_sequencer
from carcheck.services.tier_service import TierResolver

router = APIRouter()


ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 404, 409, 422, 502, 503)
}


@router.get("/check/{vrm}", response_model=CheckResponse, responses=ERROR_RESPONSES,
            summary="Vehicle report for a registration")
async def check_vehicle(
    vrm: str,
    tier: Optional[str] = None,
    context: str = "default",
    x_client_id: Optional[str] = Header(default=None),
    tiers: TierResolver = Depends(get_tier_resolver),
    resolver: ReportResolver = Depends(get_report_resolver),
):
    """
    Resolves the report at the given tier (or the caller's stored tier) and
    returns it with locked sections stripped, the visibility map and the
    next upgrade offer.
    """
    if tier is None:
        current = tiers.get_tier()
    else:
        current = SubscriptionTier.parse(tier)
        if current is None:
            raise InvalidTierError(f"Invalid tier {tier!r}", status_code=422)

    # Only callers that identify themselves can supersede their own lookups
    resolution = await lookup_sequencer.run(x_client_id, resolver, vrm, current)
    if resolution is None:
        raise ResolutionError(ErrorKind.SUPERSEDED, "Superseded by a newer lookup", status_code=409)
    if not resolution.ok:
        raise resolution.error

    report = resolution.report
    visibility = section_visibility(report, current)
    return CheckResponse(
        vrm=report.vrm,
        display_vrm=format_registration(report.vrm),
        tier=current,
        source=report.source,
        report=apply_gate(report, current),
        visibility={section.value: state.value for section, state in visibility.items()},
        upgrade=upgrade_offer(current, context),
    )


@router.get("/registrations/{vrm}", response_model=RegistrationOut, summary="Validate a registration")
def describe_registration(vrm: str):
    result = normalize(vrm)
    if isinstance(result, InvalidRegistrationError):
        return RegistrationOut(input=vrm, valid=False, error=result.message)
    return RegistrationOut(
        input=vrm,
        valid=True,
        vrm=result.value,
        display_vrm=result.display,
        plate_year=plate_year(result),
    )
