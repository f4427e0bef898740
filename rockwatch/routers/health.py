# rockwatch/routers/health.py
"""
Liveness probe.
Returns service identity plus database reachability.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from rockwatch.config import Settings, get_settings
from rockwatch.dependencies import get_gateway
from rockwatch.services.persistence_gateway import SqlPersistenceGateway

router = APIRouter()


@router.get("/health", summary="Service health check")
def health_check(settings: Settings = Depends(get_settings),
                 gateway: SqlPersistenceGateway = Depends(get_gateway)):
    result = {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
    }
    try:
        gateway.ping()
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"
    return result
