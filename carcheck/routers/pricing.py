# carcheck/routers/pricing.py
"""Pricing tiers and upgrade offers."""

from fastapi import APIRouter, HTTPException

from carcheck.schemas.check import TierPlan, UpgradeOffer
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.exceptions import InvalidTierError
from carcheck.services.promotion_service import tier_plans, upgrade_offer

router = APIRouter()


@router.get("/pricing", response_model=list[TierPlan], summary="All subscription tiers")
def list_plans():
    return tier_plans()


@router.get("/pricing/upgrade/{tier}", response_model=UpgradeOffer, summary="Upgrade offer for a tier")
def get_upgrade_offer(tier: str, context: str = "default"):
    current = SubscriptionTier.parse(tier)
    if current is None:
        raise InvalidTierError(f"Invalid tier {tier!r}", status_code=422)
    offer = upgrade_offer(current, context)
    if offer is None:
        raise HTTPException(status_code=404, detail=f"No upgrade available from {current.value}")
    return offer
