# tests/test_routers.py
"""API tests for the check, proxy, tier, pricing and health routers."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import httpx
import pytest
import requests
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from carcheck.config import settings
from carcheck.database import create_tables, get_db
from carcheck.main import app
from carcheck.services.dvla_client import DVLAClient, demo_transport, get_dvla_client
from carcheck.services.fixture_store import FixtureStore
from carcheck.services.report_resolver import (
    FixtureSource,
    LiveGovernmentSource,
    ReportResolver,
    get_report_resolver,
)


def demo_client():
    return DVLAClient(api_key="k", endpoint="https://dvla.test/vehicles", transport=demo_transport())


class _InterleavedResolver:
    """Holds the first lookup open until the second one has resolved."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = 0
        self.second_done = asyncio.Event()

    async def resolve(self, vrm_input, tier):
        self.calls += 1
        if self.calls == 1:
            await asyncio.wait_for(self.second_done.wait(), timeout=5)
            return await self.inner.resolve(vrm_input, tier)
        try:
            return await self.inner.resolve(vrm_input, tier)
        finally:
            self.second_done.set()


async def concurrent_checks(requests_):
    interleaved = _InterleavedResolver(ReportResolver(
        LiveGovernmentSource(demo_client()),
        FixtureSource(FixtureStore(demo_vrm="WA67YSB")),
    ))
    app.dependency_overrides[get_report_resolver] = lambda: interleaved
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        return await asyncio.gather(*(
            http.get(f"/api/v1/check/{vrm}", params={"tier": "gold"}, headers=headers)
            for vrm, headers in requests_
        ))


@pytest.fixture
def client():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )
    create_tables(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dvla_client] = demo_client
    app.dependency_overrides[get_report_resolver] = lambda: ReportResolver(
        LiveGovernmentSource(demo_client()),
        FixtureSource(FixtureStore(demo_vrm="WA67YSB")),
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCheckEndpoint:
    def test_basic_check_locks_paid_sections(self, client):
        resp = client.get("/api/v1/check/wa67ysb", params={"tier": "basic"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["vrm"] == "WA67YSB"
        assert body["display_vrm"] == "WA67 YSB"
        assert body["source"] == "dvla"
        assert body["visibility"]["identity"] == "visible"
        assert body["visibility"]["mot_history"] == "locked"
        assert body["report"]["mot_history"] == {"status": "absent", "reason": "locked"}
        assert body["upgrade"]["target_tier"] == "silver"

    def test_gold_check_shows_everything(self, client):
        body = client.get("/api/v1/check/WA67YSB", params={"tier": "gold"}).json()
        assert body["source"] == "fixture"
        assert body["report"]["keeper_history"]["status"] == "present"
        assert body["report"]["valuation"]["retail"] == 11800
        assert set(body["visibility"].values()) == {"visible"}
        assert body["upgrade"] is None

    def test_stored_tier_used_when_none_given(self, client):
        headers = {"X-Client-Id": "alice"}
        body = client.get("/api/v1/check/WA67YSB", headers=headers).json()
        assert body["tier"] == "silver"
        assert body["report"]["valuation"]["reason"] == "locked"

        client.put("/api/v1/tier", json={"tier": "gold"}, headers=headers)
        body = client.get("/api/v1/check/WA67YSB", headers=headers).json()
        assert body["tier"] == "gold"
        assert body["report"]["valuation"]["status"] == "present"

    def test_upgrade_context(self, client):
        body = client.get("/api/v1/check/WA67YSB",
                          params={"tier": "silver", "context": "keeper-history"}).json()
        assert body["upgrade"]["message"] == "See complete ownership timeline with Gold"

    def test_invalid_registration(self, client):
        resp = client.get("/api/v1/check/A", params={"tier": "basic"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["kind"] == "InvalidRegistrationError"

    def test_invalid_tier_param(self, client):
        resp = client.get("/api/v1/check/WA67YSB", params={"tier": "diamond"})
        assert resp.status_code == 422
        assert resp.json()["kind"] == "InvalidTierError"

    @pytest.mark.parametrize("vrm,tier", [("AB12CDE", "gold"), ("AB12CDE", "basic")])
    def test_not_found_same_for_both_sources(self, client, vrm, tier):
        resp = client.get(f"/api/v1/check/{vrm}", params={"tier": tier})
        assert resp.status_code == 404
        assert resp.json()["error"] == "We couldn't find vehicle data for AB12 CDE"
        assert resp.json()["kind"] == "NotFoundError"

    @pytest.mark.parametrize("vrm,status,kind", [
        ("ER19SU", 503, "ServiceUnavailable"),
        ("ER19ISE", 502, "UnknownApiError"),
        ("ER19BAD", 400, "InvalidRequest"),
    ])
    def test_dvla_failures(self, client, vrm, status, kind):
        resp = client.get(f"/api/v1/check/{vrm}", params={"tier": "basic"})
        assert resp.status_code == status
        assert resp.json()["kind"] == kind

    def test_error_envelope_documented(self, client):
        spec = client.get("/openapi.json").json()
        responses = spec["paths"]["/api/v1/check/{vrm}"]["get"]["responses"]
        for status in ("400", "404", "409", "422", "502", "503"):
            schema = responses[status]["content"]["application/json"]["schema"]
            assert schema["$ref"].endswith("/ErrorResponse")

    @pytest.mark.asyncio
    async def test_concurrent_anonymous_lookups_both_answered(self, client):
        first, second = await concurrent_checks([("WA67YSB", {}), ("AB12CDE", {})])
        assert {first.status_code, second.status_code} == {200, 404}
        assert all(r.json().get("kind") != "Superseded" for r in (first, second))

    @pytest.mark.asyncio
    async def test_concurrent_lookups_from_one_client_latest_wins(self, client):
        headers = {"X-Client-Id": "dana"}
        responses = await concurrent_checks([("WA67YSB", headers), ("WA67YSB", headers)])
        assert sorted(r.status_code for r in responses) == [200, 409]
        superseded = next(r for r in responses if r.status_code == 409)
        assert superseded.json()["kind"] == "Superseded"

    @pytest.mark.asyncio
    async def test_concurrent_lookups_from_different_clients(self, client):
        responses = await concurrent_checks([
            ("WA67YSB", {"X-Client-Id": "erin"}), ("WA67YSB", {"X-Client-Id": "finn"}),
        ])
        assert [r.status_code for r in responses] == [200, 200]


class TestVehicleProxy:
    def test_success_envelope(self, client):
        resp = client.post("/api/v1/vehicle", json={"registrationNumber": "wa67 ysb"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["statusCode"] == 200
        assert body["data"]["registrationNumber"] == "WA67YSB"

    def test_missing_registration(self, client):
        resp = client.post("/api/v1/vehicle", json={})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "data": None,
                               "error": "Registration number is required", "statusCode": 400}

    def test_upstream_not_found(self, client):
        resp = client.post("/api/v1/vehicle", json={"registrationNumber": "ER19NF"})
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        assert resp.json()["statusCode"] == 404


class TestTierEndpoints:
    def test_default_tier(self, client):
        body = client.get("/api/v1/tier", headers={"X-Client-Id": "bob"}).json()
        assert body == {"client_id": "bob", "tier": "silver", "upgrade_to": "gold"}

    def test_change_tier(self, client):
        resp = client.put("/api/v1/tier", json={"tier": "basic"}, headers={"X-Client-Id": "bob"})
        assert resp.status_code == 200
        assert resp.json()["upgrade_to"] == "silver"
        assert client.get("/api/v1/tier", headers={"X-Client-Id": "bob"}).json()["tier"] == "basic"

    def test_invalid_tier_rejected(self, client):
        client.put("/api/v1/tier", json={"tier": "gold"}, headers={"X-Client-Id": "bob"})
        resp = client.put("/api/v1/tier", json={"tier": "platinum"}, headers={"X-Client-Id": "bob"})
        assert resp.status_code == 422
        assert resp.json()["kind"] == "InvalidTierError"
        assert client.get("/api/v1/tier", headers={"X-Client-Id": "bob"}).json()["tier"] == "gold"


class TestPricingAndRegistrations:
    def test_pricing(self, client):
        plans = client.get("/api/v1/pricing").json()
        assert [p["tier"] for p in plans] == ["basic", "silver", "gold"]

    def test_upgrade_offer(self, client):
        assert client.get("/api/v1/pricing/upgrade/basic").json()["target_tier"] == "silver"
        assert client.get("/api/v1/pricing/upgrade/gold").status_code == 404

    def test_upgrade_offer_invalid_tier_uses_error_envelope(self, client):
        resp = client.get("/api/v1/pricing/upgrade/platinum")
        assert resp.status_code == 422
        assert resp.json()["success"] is False
        assert resp.json()["kind"] == "InvalidTierError"

    def test_registration_lookup(self, client):
        body = client.get("/api/v1/registrations/wa67ysb").json()
        assert body["valid"] is True
        assert body["display_vrm"] == "WA67 YSB"
        assert body["plate_year"] == 2017

    def test_invalid_registration_lookup(self, client):
        body = client.get("/api/v1/registrations/ABCDEF").json()
        assert body["valid"] is False
        assert body["error"]


class TestHealth:
    def test_offline_demo(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DVLA_OFFLINE_DEMO", True)
        body = client.get("/api/v1/health").json()
        assert body["database"] == "ok"
        assert body["dvla"] == "offline_demo"
        assert body["status"] == "ok"

    def test_dvla_unreachable(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DVLA_OFFLINE_DEMO", False)
        monkeypatch.setattr(settings, "DVLA_API_KEY", "k")
        with patch("carcheck.routers.health.requests.get",
                   side_effect=requests.exceptions.ConnectionError("refused")):
            body = client.get("/api/v1/health").json()
        assert body["dvla"] == "unreachable"
        assert body["status"] == "degraded"
