# carcheck/services/tier_service.py
"""
Tier Resolver — reads and writes the caller's subscription tier.

The tier lives in a per-client key/value StateStore (SQL table in the app,
a dict in tests). Stored values are untrusted: anything that is not a
SubscriptionTier member is replaced by settings.DEFAULT_TIER on read.
Single writer per client, last write wins, no locking.
"""

from datetime import datetime
from typing import Callable, Optional, Protocol

from sqlalchemy.orm import Session

from carcheck.config import settings
from carcheck.models.client_state import ClientState
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.exceptions import InvalidTierError
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)

TierListener = Callable[[str, SubscriptionTier], None]


class StateStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...


class InMemoryStateStore:
    def __init__(self, initial: Optional[dict] = None):
        self.data = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1


class SqlStateStore:
    """client_state rows for one client id."""

    def __init__(self, db: Session, client_id: str):
        self.db = db
        self.client_id = client_id

    def _row(self, key: str) -> Optional[ClientState]:
        return (
            self.db.query(ClientState)
            .filter(ClientState.client_id == self.client_id, ClientState.key == key)
            .first()
        )

    def get(self, key: str) -> Optional[str]:
        row = self._row(key)
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        row = self._row(key)
        if row is None:
            row = ClientState(client_id=self.client_id, key=key)
            self.db.add(row)
        row.value = value
        row.updated_at = datetime.utcnow()
        self.db.commit()


class TierChangeNotifier:
    """Fan-out of tier changes to observers (e.g. a navbar badge refresh)."""

    def __init__(self):
        self._listeners: list[TierListener] = []

    def subscribe(self, listener: TierListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def notify(self, client_id: str, tier: SubscriptionTier) -> None:
        for listener in list(self._listeners):
            listener(client_id, tier)


tier_notifier = TierChangeNotifier()


class TierResolver:
    def __init__(
        self,
        store: StateStore,
        client_id: str = "anonymous",
        notifier: Optional[TierChangeNotifier] = None,
        storage_key: Optional[str] = None,
        default_tier: Optional[str] = None,
    ):
        self.store = store
        self.client_id = client_id
        self.notifier = notifier or tier_notifier
        self.storage_key = storage_key or settings.TIER_STORAGE_KEY
        self.default_tier = SubscriptionTier(default_tier or settings.DEFAULT_TIER)

    def get_tier(self) -> SubscriptionTier:
        """Stored tier, or the default (persisted once) if missing or invalid."""
        stored = self.store.get(self.storage_key)
        tier = SubscriptionTier.parse(stored)
        if tier is not None:
            return tier

        logger.warning(
            f"[TIER] {self.client_id}: stored tier {stored!r} invalid or missing, "
            f"defaulting to {self.default_tier.value}"
        )
        self.store.set(self.storage_key, self.default_tier.value)
        return self.default_tier

    def set_tier(self, value) -> SubscriptionTier:
        """Persist a new tier and notify listeners. Raises InvalidTierError."""
        tier = SubscriptionTier.parse(value)
        if tier is None:
            raise InvalidTierError(
                f"Invalid tier {value!r}; expected one of {[t.value for t in SubscriptionTier]}",
                status_code=422,
            )
        self.store.set(self.storage_key, tier.value)
        logger.info(f"[TIER] {self.client_id} → {tier.value}")
        self.notifier.notify(self.client_id, tier)
        return tier
