# carcheck/services/promotion_service.py
"""
Upgrade promotion content. Every promotional surface asks this module, so
target tier, features, prices and copy stay consistent across the UI.
"""

from typing import Optional

from carcheck.schemas.check import TierPlan, UpgradeOffer, UpgradePricing
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.gating import target_upgrade_tier

TIER_CATALOGUE = {
    SubscriptionTier.BASIC: {
        "name": "Basic",
        "price": 0,
        "price_display": "Free",
        "features": [
            "Unlimited Basic Checks",
            "MOT & Tax Status",
            "Core Vehicle Specifications",
            "Basic Environmental Data",
            "Email Support",
        ],
    },
    SubscriptionTier.SILVER: {
        "name": "Silver",
        "price": 2.99,
        "price_display": "£2.99",
        "features": [
            "Everything in Basic",
            "Full MOT History & Advisories",
            "Detailed Specifications",
            "Previous Owners Count",
            "Export/Import Status",
            "Stolen Vehicle Check",
            "Write-Off Check",
            "Color Change History",
            "Priority Support",
        ],
    },
    SubscriptionTier.GOLD: {
        "name": "Gold",
        "price": 5.99,
        "price_display": "£5.99",
        "features": [
            "Everything in Silver",
            "Keeper Duration History",
            "Vehicle Valuation Data",
            "Additional Mileage Records",
            "Mileage Anomaly Detection",
            "Time Between Keepers",
            "Premium Support",
            "API Access (Beta)",
        ],
    },
}

UPGRADE_FEATURES = {
    SubscriptionTier.SILVER: [
        "Full MOT History (6+ years)",
        "All Test Details & Advisories",
        "Mileage Progression Chart",
        "Environmental Data",
        "Export/Import History",
        "Previous Keeper Count",
    ],
    SubscriptionTier.GOLD: [
        "Complete Keeper History",
        "Ownership Duration Timeline",
        "Professional Valuation",
        "Additional Mileage Records",
        "Mileage Anomaly Detection",
        "Priority Support (24h)",
    ],
}

UPGRADE_PRICING = {
    SubscriptionTier.SILVER: UpgradePricing(
        price="£2.99",
        annual="Save 40% with annual billing",
        savings="£14.36/year",
    ),
    SubscriptionTier.GOLD: UpgradePricing(
        price="£5.99",
        annual="Save 40% with annual billing",
        savings="£28.76/year",
        upgrade_from="£3.00/month more",
    ),
}

# Keyed by the tier the user is currently on
PROMOTION_MESSAGES = {
    SubscriptionTier.BASIC: {
        "default": "See the full story - Upgrade to Silver",
        "unlock-mot-history": "Unlock 6+ years of MOT history for just £2.99/month",
        "popular": "95% of users choose Silver for complete vehicle insights",
        "compare": "What are you missing? Compare plans",
        "free-badge": "FREE forever - upgrade only when you need more",
    },
    SubscriptionTier.SILVER: {
        "default": "Complete your report - Upgrade to Gold",
        "unlock-valuation": "Add professional valuation for £3 more",
        "insights": "Gold users see 40% more vehicle insights",
        "unlock-everything": "Unlock everything with Gold - £5.99/month",
        "keeper-history": "See complete ownership timeline with Gold",
    },
}


def promotion_message(current: SubscriptionTier, context: str = "default") -> Optional[str]:
    messages = PROMOTION_MESSAGES.get(current)
    if not messages:
        return None
    return messages.get(context, messages["default"])


def upgrade_offer(current: SubscriptionTier, context: str = "default") -> Optional[UpgradeOffer]:
    """The next tier up with its features, price and copy. None for gold."""
    target = target_upgrade_tier(current)
    if target is None:
        return None
    return UpgradeOffer(
        target_tier=target,
        message=promotion_message(current, context),
        features=UPGRADE_FEATURES[target],
        pricing=UPGRADE_PRICING[target],
    )


def tier_plans() -> list[TierPlan]:
    return [
        TierPlan(tier=tier, upgrade_to=target_upgrade_tier(tier), **plan)
        for tier, plan in TIER_CATALOGUE.items()
    ]
