# carcheck/services/gating.py
"""
Tier-Gated Presentation Layer.

Pure functions of (VehicleReport, tier): which sections are visible or
locked, and a redacted copy of the report in which locked sections carry no
data. Visibility depends on the tier alone, never on whether the report
happens to contain the section.
"""

from enum import Enum
from typing import Optional

from carcheck.schemas.report import Absent, VehicleReport
from carcheck.schemas.tier import SubscriptionTier


class SectionId(str, Enum):
    IDENTITY = "identity"
    MOT_AND_TAX = "mot_and_tax"
    MOT_HISTORY = "mot_history"
    ENVIRONMENTAL = "environmental"
    EXTENDED_SPECS_DETAILED = "extended_specs_detailed"
    KEEPER_HISTORY = "keeper_history"
    VALUATION = "valuation"


class Visibility(str, Enum):
    VISIBLE = "visible"
    LOCKED = "locked"


# Minimum tier that unlocks each section
SECTION_RULES = {
    SectionId.IDENTITY: SubscriptionTier.BASIC,
    SectionId.MOT_AND_TAX: SubscriptionTier.BASIC,
    SectionId.MOT_HISTORY: SubscriptionTier.SILVER,
    SectionId.ENVIRONMENTAL: SubscriptionTier.SILVER,
    SectionId.EXTENDED_SPECS_DETAILED: SubscriptionTier.SILVER,
    SectionId.KEEPER_HISTORY: SubscriptionTier.GOLD,
    SectionId.VALUATION: SubscriptionTier.GOLD,
}

# Report field holding each gateable section
SECTION_FIELDS = {
    SectionId.MOT_HISTORY: "mot_history",
    SectionId.ENVIRONMENTAL: "environmental",
    SectionId.EXTENDED_SPECS_DETAILED: "extended_specs",
    SectionId.KEEPER_HISTORY: "keeper_history",
    SectionId.VALUATION: "valuation",
}

_UPGRADE_PATH = {
    SubscriptionTier.BASIC: SubscriptionTier.SILVER,
    SubscriptionTier.SILVER: SubscriptionTier.GOLD,
}


def section_visibility(report: VehicleReport, tier: SubscriptionTier) -> dict[SectionId, Visibility]:
    return {
        section: Visibility.VISIBLE if tier.at_least(required) else Visibility.LOCKED
        for section, required in SECTION_RULES.items()
    }


def apply_gate(report: VehicleReport, tier: SubscriptionTier) -> VehicleReport:
    """Copy of the report with every locked section replaced by Absent("locked")."""
    visibility = section_visibility(report, tier)
    locked = {
        SECTION_FIELDS[section]: Absent(reason="locked")
        for section, state in visibility.items()
        if state == Visibility.LOCKED
    }
    return report.model_copy(update=locked) if locked else report


def target_upgrade_tier(current: SubscriptionTier) -> Optional[SubscriptionTier]:
    return _UPGRADE_PATH.get(current)
