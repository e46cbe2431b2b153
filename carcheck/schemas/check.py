# carcheck/schemas/check.py
from typing import Optional

from pydantic import BaseModel

from carcheck.schemas.report import ReportSource, VehicleReport
from carcheck.schemas.tier import SubscriptionTier


class UpgradePricing(BaseModel):
    price: str
    period: str = "/month"
    annual: Optional[str] = None
    savings: Optional[str] = None
    upgrade_from: Optional[str] = None


class UpgradeOffer(BaseModel):
    target_tier: SubscriptionTier
    message: str
    features: list[str]
    pricing: UpgradePricing


class TierPlan(BaseModel):
    tier: SubscriptionTier
    name: str
    price: float
    price_display: str
    features: list[str]
    upgrade_to: Optional[SubscriptionTier] = None


class CheckResponse(BaseModel):
    vrm: str
    display_vrm: str
    tier: SubscriptionTier
    source: ReportSource
    report: VehicleReport
    visibility: dict[str, str]
    upgrade: Optional[UpgradeOffer] = None


class ErrorResponse(BaseModel):
    success: bool = False
    kind: str
    error: str
    statusCode: Optional[int] = None


class RegistrationOut(BaseModel):
    input: str
    valid: bool
    vrm: Optional[str] = None
    display_vrm: Optional[str] = None
    plate_year: Optional[int] = None
    error: Optional[str] = None
