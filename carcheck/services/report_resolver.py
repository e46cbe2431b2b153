# carcheck/services/report_resolver.py
"""
Data Resolution Orchestrator.

One pass per lookup:  Idle → Resolving → Resolved | Failed
  1. normalise the VRM (no network call on failure)
  2. basic        → LiveGovernmentSource (DVLA) → report_mapper
     silver/gold  → FixtureSource
  3. narrow any source error into a ResolutionError of the same kind

Not-found is reported identically for both sources so callers cannot tell a
fixture miss from a real DVLA miss. Nothing is cached between calls.
"""

import itertools
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Protocol

from carcheck.schemas.report import VehicleReport
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services import report_mapper
from carcheck.services.dvla_client import DVLAClient, get_dvla_client
from carcheck.services.exceptions import (
    ErrorKind,
    InvalidRegistrationError,
    ResolutionError,
    VehicleCheckError,
)
from carcheck.services.fixture_store import FixtureStore
from carcheck.services.registration import Registration, format_registration, normalize
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)


class ResolutionState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class Resolution:
    state: ResolutionState
    tier: SubscriptionTier
    vrm: Optional[Registration] = None
    report: Optional[VehicleReport] = None
    error: Optional[ResolutionError] = None

    @property
    def ok(self) -> bool:
        return self.state == ResolutionState.RESOLVED


class DataSource(Protocol):
    name: str

    async def lookup(self, vrm: Registration, tier: SubscriptionTier) -> VehicleReport: ...


class LiveGovernmentSource:
    name = "dvla"

    def __init__(self, client: DVLAClient, today: Optional[date] = None):
        self.client = client
        self.today = today

    async def lookup(self, vrm: Registration, tier: SubscriptionTier) -> VehicleReport:
        payload = await self.client.fetch(vrm)
        return report_mapper.from_government_payload(payload, self.today)


class FixtureSource:
    name = "fixture"

    def __init__(self, store: FixtureStore):
        self.store = store

    async def lookup(self, vrm: Registration, tier: SubscriptionTier) -> VehicleReport:
        return report_mapper.identity(self.store.get_fixture(vrm, tier))


def not_found_message(vrm: Registration) -> str:
    return f"We couldn't find vehicle data for {format_registration(vrm)}"


class ReportResolver:
    def __init__(self, live_source: DataSource, fixture_source: DataSource):
        self.live_source = live_source
        self.fixture_source = fixture_source

    def select_source(self, tier: SubscriptionTier) -> DataSource:
        if tier == SubscriptionTier.BASIC:
            return self.live_source
        return self.fixture_source

    def _failed(self, tier, vrm, error: VehicleCheckError) -> Resolution:
        resolution_error = ResolutionError.from_error(error)
        if resolution_error.kind == ErrorKind.NOT_FOUND and vrm is not None:
            resolution_error = ResolutionError(ErrorKind.NOT_FOUND, not_found_message(vrm), status_code=404)
        logger.info(f"[RESOLVE] {vrm or '-'} @ {tier.value}: Resolving → Failed ({resolution_error.kind.value})")
        return Resolution(state=ResolutionState.FAILED, tier=tier, vrm=vrm, error=resolution_error)

    async def resolve(self, vrm_input: Optional[str], tier: SubscriptionTier) -> Resolution:
        """Resolve one lookup. Expected failures come back in Resolution.error, never raised."""
        normalized = normalize(vrm_input)
        if isinstance(normalized, InvalidRegistrationError):
            logger.info(f"[RESOLVE] Rejected registration {vrm_input!r}: {normalized.message}")
            return self._failed(tier, None, normalized)

        vrm = normalized
        source = self.select_source(tier)
        logger.info(f"[RESOLVE] {vrm} @ {tier.value}: Idle → Resolving via {source.name}")

        try:
            report = await source.lookup(vrm, tier)
        except VehicleCheckError as e:
            return self._failed(tier, vrm, e)

        if report.vrm != vrm.value:
            logger.warning(f"[RESOLVE] {source.name} answered for {report.vrm}, expected {vrm}")
            return self._failed(tier, vrm, ResolutionError(
                ErrorKind.UNKNOWN_API_ERROR, "Vehicle data service returned a different vehicle",
            ))

        logger.info(f"[RESOLVE] {vrm} @ {tier.value}: Resolving → Resolved ({report.source.value})")
        return Resolution(state=ResolutionState.RESOLVED, tier=tier, vrm=vrm, report=report)


class LookupSequencer:
    """
    Latest request wins. Each lookup takes a monotonically increasing token
    per client; a lookup that completes after a newer one started is dropped.
    Callers without a client id are never sequenced against each other.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def begin(self, client_id: str) -> int:
        token = next(self._counter)
        self._latest[client_id] = token
        return token

    def is_current(self, client_id: str, token: int) -> bool:
        return self._latest.get(client_id) == token

    def finish(self, client_id: str, token: int) -> bool:
        """True if token was still the latest; the client's entry is then released."""
        if not self.is_current(client_id, token):
            return False
        del self._latest[client_id]
        return True

    def pending(self) -> int:
        return len(self._latest)

    async def run(self, client_id: Optional[str], resolver: ReportResolver, vrm_input: str,
                  tier: SubscriptionTier) -> Optional[Resolution]:
        """Resolve, returning None if a newer lookup for this client started meanwhile."""
        if client_id is None:
            return await resolver.resolve(vrm_input, tier)

        token = self.begin(client_id)
        try:
            resolution = await resolver.resolve(vrm_input, tier)
        finally:
            current = self.finish(client_id, token)
        if not current:
            logger.info(f"[RESOLVE] Dropping superseded lookup #{token} for {client_id}")
            return None
        return resolution


lookup_sequencer = LookupSequencer()


def get_report_resolver() -> ReportResolver:
    """FastAPI dependency — DVLA for basic, demo fixtures for paid tiers."""
    return ReportResolver(
        live_source=LiveGovernmentSource(get_dvla_client()),
        fixture_source=FixtureSource(FixtureStore()),
    )
