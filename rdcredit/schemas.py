from typing import List, Dict, Any, Optional, Generic, TypeVar
from pydantic import BaseModel, Field
from datetime import datetime

T = TypeVar('T')

# =============================================================================
# API ENVELOPE
# =============================================================================

class ApiMeta(BaseModel):
    version: int = 1
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    engine_version: Optional[str] = None
    pricing_version: Optional[str] = None
    legislative_version: Optional[str] = None

class ApiError(BaseModel):
    code: str
    message: str
    target: Optional[str] = None # Field name
    details: Optional[Any] = None

class ApiResponse(BaseModel, Generic[T]):
    data: Optional[T] = None
    meta: ApiMeta = Field(default_factory=ApiMeta)
    errors: Optional[List[ApiError]] = None

# =============================================================================
# CALCULATOR RESPONSES
# =============================================================================

class PricingTierOut(BaseModel):
    tier: int
    name: str
    price: float
    credit_range: str
    min_credit: float
    max_credit: Optional[float] = None
    description: str = ""
    features: List[str] = []

class PricingScheduleOut(BaseModel):
    version: str
    tiers: List[PricingTierOut]

class LegislativeAlertOut(BaseModel):
    type: str
    message: str
    impact: str

class LegislativeContextOut(BaseModel):
    tax_year: int
    rules_year: int
    payroll_tax_cap: float
    deduction_percentage: int
    amortization_required: bool
    domestic_amortization_years: Optional[int] = None
    foreign_amortization_years: Optional[int] = None
    alerts: List[LegislativeAlertOut] = []
    assumptions: List[str] = []
    table_version: str

# =============================================================================
# SYSTEM
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str
    services: Dict[str, str]
