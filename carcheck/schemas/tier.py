# carcheck/schemas/tier.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SubscriptionTier(str, Enum):
    BASIC = "basic"
    SILVER = "silver"
    GOLD = "gold"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def at_least(self, other: "SubscriptionTier") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value) -> Optional["SubscriptionTier"]:
        """Returns the member for a stored/raw value, or None if it is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_TIER_ORDER = (SubscriptionTier.BASIC, SubscriptionTier.SILVER, SubscriptionTier.GOLD)


class TierUpdate(BaseModel):
    tier: str   # validated by TierResolver so bad values get a 422 with our message


class TierOut(BaseModel):
    client_id: str
    tier: SubscriptionTier
    upgrade_to: Optional[SubscriptionTier] = None
