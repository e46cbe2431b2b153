# carcheck/routers/vehicle.py
"""
DVLA proxy — POST /vehicle  body {"registrationNumber": "AB12 CDE"}
Keeps the DVLA API key server-side. Always answers with the
{success, data | error, statusCode} envelope.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from carcheck.exceptions import http_status_for
from carcheck.schemas.government import ProxyResponse, VehicleEnquiry
from carcheck.services.dvla_client import DVLAClient, get_dvla_client
from carcheck.services.exceptions import GovApiError, InvalidRegistrationError
from carcheck.services.registration import normalize

router = APIRouter()


def _failure(status_code: int, error: str, upstream_status=None) -> JSONResponse:
    body = ProxyResponse(success=False, error=error, statusCode=upstream_status or status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/vehicle", response_model=ProxyResponse, summary="DVLA vehicle enquiry proxy")
async def vehicle_enquiry(body: VehicleEnquiry, client: DVLAClient = Depends(get_dvla_client)):
    if not body.registrationNumber:
        return _failure(400, "Registration number is required")

    vrm = normalize(body.registrationNumber)
    if isinstance(vrm, InvalidRegistrationError):
        return _failure(400, vrm.message)

    try:
        data = await client.fetch_raw(vrm)
    except GovApiError as e:
        return _failure(e.status_code or http_status_for(e), e.message, e.status_code)

    return ProxyResponse(success=True, data=data, statusCode=200)
