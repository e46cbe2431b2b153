# carcheck/services/dvla_client.py
"""
Government Data Client — DVLA Vehicle Enquiry Service (VES).

Endpoint: POST {DVLA_ENDPOINT}  body {"registrationNumber": "AB12CDE"}
Auth:     x-api-key header
Exactly one outbound request per call. No retry, no caching.

HTTP/transport outcomes are translated into the GovApiError taxonomy:
  404 → GovNotFoundError            400 → GovInvalidRequestError
  502/503/504, timeout → GovServiceUnavailableError
  connection/transport failure → GovNetworkFailureError
  anything else non-2xx → GovUnknownApiError
"""

import json
from typing import Optional

import httpx
from pydantic import ValidationError

from carcheck.config import settings
from carcheck.schemas.government import GovernmentVehiclePayload
from carcheck.services.exceptions import (
    GovInvalidRequestError,
    GovNetworkFailureError,
    GovNotFoundError,
    GovServiceUnavailableError,
    GovUnknownApiError,
)
from carcheck.services.fixture_store import DEMO_DVLA_PAYLOAD, TEST_VRNS
from carcheck.services.registration import Registration
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)

_ERRORS_BY_STATUS = {
    400: GovInvalidRequestError,
    404: GovNotFoundError,
    502: GovServiceUnavailableError,
    503: GovServiceUnavailableError,
    504: GovServiceUnavailableError,
}

DEFAULT_ERROR_MESSAGE = "Failed to fetch vehicle data"


def _error_message(response: httpx.Response) -> str:
    """DVLA errors look like {"errors": [{"status", "code", "title", "detail"}]}."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return DEFAULT_ERROR_MESSAGE
    errors = body.get("errors") if isinstance(body, dict) else None
    if not errors or not isinstance(errors, list) or not isinstance(errors[0], dict):
        return DEFAULT_ERROR_MESSAGE
    first = errors[0]
    return first.get("detail") or first.get("title") or DEFAULT_ERROR_MESSAGE


class DVLAClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.DVLA_API_KEY
        self.endpoint = endpoint or settings.DVLA_ENDPOINT
        self.timeout = timeout or settings.DVLA_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def fetch_raw(self, vrm: Registration) -> dict:
        """POST the VRM and return the raw JSON body of a successful response."""
        logger.info(f"[DVLA] Querying vehicle: {vrm}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    json={"registrationNumber": vrm.value},
                    headers=self._headers(),
                )
        except httpx.TimeoutException as e:
            logger.warning(f"[DVLA] Timeout after {self.timeout}s for {vrm}: {e}")
            raise GovServiceUnavailableError("Vehicle data service timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"[DVLA] Network error for {vrm}: {e}")
            raise GovNetworkFailureError(f"Network error: {e}") from e

        if response.is_success:
            try:
                data = response.json()
            except (json.JSONDecodeError, ValueError) as e:
                raise GovUnknownApiError("Malformed response from vehicle data service",
                                         status_code=response.status_code) from e
            logger.info(f"[DVLA] Success for {vrm}")
            return data

        message = _error_message(response)
        logger.warning(f"[DVLA] {vrm} returned HTTP {response.status_code}: {message}")
        error_cls = _ERRORS_BY_STATUS.get(response.status_code, GovUnknownApiError)
        raise error_cls(message, status_code=response.status_code)

    async def fetch(self, vrm: Registration) -> GovernmentVehiclePayload:
        data = await self.fetch_raw(vrm)
        try:
            return GovernmentVehiclePayload.model_validate(data)
        except ValidationError as e:
            raise GovUnknownApiError("Unexpected response from vehicle data service",
                                     status_code=200) from e


def _demo_handler(request: httpx.Request) -> httpx.Response:
    """Answers like the DVLA UAT environment, including its error test VRNs."""
    vrm = json.loads(request.content or b"{}").get("registrationNumber", "")
    failures = {
        TEST_VRNS["BAD_REQUEST"]: (400, "Invalid format for field - vehicle registration number"),
        TEST_VRNS["NOT_FOUND"]: (404, "Vehicle Not Found"),
        TEST_VRNS["SERVER_ERROR"]: (500, "Internal Server Error"),
        TEST_VRNS["UNAVAILABLE"]: (503, "Service Unavailable"),
    }
    if vrm in failures:
        status, title = failures[vrm]
        return httpx.Response(status, json={"errors": [{"status": str(status), "title": title}]})
    if vrm in (settings.DEMO_VRM, TEST_VRNS["VALID"]):
        return httpx.Response(200, json={**DEMO_DVLA_PAYLOAD, "registrationNumber": vrm})
    return httpx.Response(404, json={"errors": [{"status": "404", "title": "Vehicle Not Found"}]})


def demo_transport() -> httpx.MockTransport:
    return httpx.MockTransport(_demo_handler)


def get_dvla_client() -> DVLAClient:
    """FastAPI dependency — offline demo transport when DVLA_OFFLINE_DEMO is set."""
    transport = demo_transport() if settings.DVLA_OFFLINE_DEMO else None
    return DVLAClient(transport=transport)
