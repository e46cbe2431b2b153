# carcheck/exceptions.py
"""HTTP translation of VehicleCheckError kinds into the JSON error envelope."""

from fastapi import Request
from fastapi.responses import JSONResponse

from carcheck.services.exceptions import ErrorKind, VehicleCheckError
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)

HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID_REGISTRATION: 400,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SUPERSEDED: 409,
    ErrorKind.INVALID_TIER: 422,
    ErrorKind.UNKNOWN_API_ERROR: 502,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.NETWORK_FAILURE: 503,
}


def http_status_for(exc: VehicleCheckError) -> int:
    return HTTP_STATUS_BY_KIND.get(exc.kind, 500)


async def vehicle_check_exception_handler(request: Request, exc: VehicleCheckError):
    status_code = http_status_for(exc)
    logger.info(f"{request.url.path} → {status_code} {exc.kind.value}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "kind": exc.kind.value,
            "error": exc.message,
            "statusCode": exc.status_code,
        },
    )
