"""
Calculator Routes
Public endpoints for live credit estimates, pricing tiers, and legislative context.

The host UI calls /calculate on debounced input changes; every call is an
independent computation over one snapshot, so stale responses can simply be
dropped by the client.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Path

from rdcredit import __version__
from rdcredit.engine import (
    DEFAULT_TABLES,
    EngineTables,
    ExpenseValidationError,
    calculate_credit,
    get_legislative_context,
)
from rdcredit.router_utils import wrap_response, raise_validation_error
from rdcredit.schemas import ApiResponse, LegislativeContextOut, PricingScheduleOut
from rdcredit.settings_loader import EngineSettings, get_engine_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calculator", tags=["calculator"])


def get_engine_tables() -> EngineTables:
    """Dependency hook so tests and deployments can inject other tables."""
    return DEFAULT_TABLES


def _meta(tables: EngineTables) -> dict:
    return {
        "engine_version": __version__,
        "pricing_version": tables.pricing.version,
        "legislative_version": tables.legislative.version,
    }


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/calculate", response_model=ApiResponse[Dict[str, Any]])
async def calculate(
    payload: Dict[str, Any] = Body(...),
    tables: EngineTables = Depends(get_engine_tables),
    settings: EngineSettings = Depends(get_engine_settings),
):
    """
    Compute a full credit estimate.

    Returns 422 with field-level errors when required company facts are missing
    or unusable; otherwise always returns a result.
    """
    try:
        result = calculate_credit(
            payload,
            tables=tables,
            default_corporate_tax_rate=settings.corporate_tax_rate,
        )
    except ExpenseValidationError as e:
        logger.warning(f"[Calculator] Rejected input: {e}")
        raise_validation_error(e)

    return wrap_response(result.to_dict(), meta=_meta(tables))


@router.get("/pricing-tiers", response_model=PricingScheduleOut)
async def list_pricing_tiers(tables: EngineTables = Depends(get_engine_tables)):
    """Active flat-fee pricing schedule."""
    return {
        "version": tables.pricing.version,
        "tiers": [t.to_dict() for t in tables.pricing.tiers],
    }


@router.get("/legislative-context/{tax_year}", response_model=LegislativeContextOut)
async def legislative_context(
    tax_year: int = Path(..., ge=1900, le=2100),
    tables: EngineTables = Depends(get_engine_tables),
):
    """Statutory facts and advisories for a tax year."""
    return get_legislative_context(tax_year, tables.legislative).to_dict()
