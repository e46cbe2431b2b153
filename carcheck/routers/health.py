# carcheck/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + DVLA reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from carcheck.database import get_db
from carcheck.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - DVLA endpoint reachability (any HTTP answer counts as reachable)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "dvla": "unknown",
        "dvla_environment": "test" if settings.DVLA_USE_TEST else "production",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    if settings.DVLA_OFFLINE_DEMO:
        result["dvla"] = "offline_demo"
        return result

    if not settings.DVLA_API_KEY:
        result["dvla"] = "not_configured"
        result["status"] = "degraded"
        return result

    # The enquiry endpoint only accepts POST; a 405 still proves it is up.
    try:
        resp = requests.get(settings.DVLA_ENDPOINT, timeout=3)
        result["dvla"] = "ok" if resp.status_code < 500 else f"http_{resp.status_code}"
    except requests.exceptions.ConnectionError:
        result["dvla"] = "unreachable"
        result["status"] = "degraded"
    except requests.exceptions.Timeout:
        result["dvla"] = "timeout"
        result["status"] = "degraded"

    return result
