"""
System Routes - Health

Public health check for load balancers and uptime monitors.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from rdcredit import __version__
from rdcredit.engine import DEFAULT_TABLES
from rdcredit.schemas import HealthResponse
from rdcredit.settings_loader import EngineSettings, get_engine_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: EngineSettings = Depends(get_engine_settings)):
    """
    Basic health check endpoint.
    Public - no auth required.
    """
    services = {
        "calculator": "healthy",
        "pricing_table": DEFAULT_TABLES.pricing.version,
        "legislative_table": DEFAULT_TABLES.legislative.version,
    }

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=__version__,
        environment=settings.environment,
        services=services
    )
