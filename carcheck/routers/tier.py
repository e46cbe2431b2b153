# carcheck/routers/tier.py
"""Read / change the caller's persisted subscription tier."""

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from carcheck.database import get_db
from carcheck.schemas.tier import TierOut, TierUpdate
from carcheck.services.gating import target_upgrade_tier
from carcheck.services.tier_service import SqlStateStore, TierResolver

router = APIRouter()


def get_tier_resolver(
    x_client_id: str = Header(default="anonymous"),
    db: Session = Depends(get_db),
) -> TierResolver:
    """FastAPI dependency — tier resolver bound to the caller's client id."""
    return TierResolver(SqlStateStore(db, x_client_id), client_id=x_client_id)


@router.get("/tier", response_model=TierOut, summary="Current subscription tier")
def get_tier(tiers: TierResolver = Depends(get_tier_resolver)):
    tier = tiers.get_tier()
    return TierOut(client_id=tiers.client_id, tier=tier, upgrade_to=target_upgrade_tier(tier))


@router.put("/tier", response_model=TierOut, summary="Change subscription tier")
def set_tier(body: TierUpdate, tiers: TierResolver = Depends(get_tier_resolver)):
    """Demo upgrade/downgrade. Values outside basic/silver/gold are rejected with 422."""
    tier = tiers.set_tier(body.tier)
    return TierOut(client_id=tiers.client_id, tier=tier, upgrade_to=target_upgrade_tier(tier))
