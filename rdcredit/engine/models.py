"""
Credit Engine Value Objects
Immutable result types produced by the credit calculation pipeline.

Every object is derived fresh per calculation and exposes to_dict() for
JSON serialization. Currency is rounded to cents, rates to 4 decimals.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Mapping, Tuple


def _money(value: float) -> float:
    return round(value, 2)


def _rate(value: float) -> float:
    return round(value, 4)


# ============================================================================
# QRE
# ============================================================================

@dataclass(frozen=True)
class QREBreakdown:
    """Eligible Qualified Research Expenses per category"""
    wages: float = 0.0
    contractors: float = 0.0
    supplies: float = 0.0
    cloud_and_software: float = 0.0
    total: float = 0.0
    details: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "wages": _money(self.wages),
            "contractors": _money(self.contractors),
            "supplies": _money(self.supplies),
            "cloud_and_software": _money(self.cloud_and_software),
            "total": _money(self.total),
            "details": dict(self.details),
        }


# ============================================================================
# Credit Method + Section 280C
# ============================================================================

@dataclass(frozen=True)
class ASCCalculation:
    """Alternative Simplified Credit computation"""
    method: str  # first-time | repeat
    current_year_qre: float
    prior_year_average: float
    base_amount: float
    excess_qre: float
    credit_rate: float
    credit_amount: float
    effective_credit_rate: float

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "current_year_qre": _money(self.current_year_qre),
            "prior_year_average": _money(self.prior_year_average),
            "base_amount": _money(self.base_amount),
            "excess_qre": _money(self.excess_qre),
            "credit_rate": _rate(self.credit_rate),
            "credit_amount": _money(self.credit_amount),
            "effective_credit_rate": _rate(self.effective_credit_rate),
        }


@dataclass(frozen=True)
class CreditOption:
    """One side of the Section 280C election"""
    amount: float
    deduction_reduction: float
    net_benefit: float
    complexity: str
    recommended: bool = False

    def to_dict(self) -> dict:
        return {
            "amount": _money(self.amount),
            "deduction_reduction": _money(self.deduction_reduction),
            "net_benefit": _money(self.net_benefit),
            "complexity": self.complexity,
            "recommended": self.recommended,
        }


@dataclass(frozen=True)
class CreditOptions:
    """Full vs reduced credit comparison"""
    full_credit: CreditOption
    reduced_credit: CreditOption
    recommendation: str  # full | reduced
    reasoning: str
    corporate_tax_rate: float

    @property
    def recommended_option(self) -> CreditOption:
        return self.full_credit if self.recommendation == "full" else self.reduced_credit

    def to_dict(self) -> dict:
        return {
            "full_credit": self.full_credit.to_dict(),
            "reduced_credit": self.reduced_credit.to_dict(),
            "recommendation": self.recommendation,
            "reasoning": self.reasoning,
            "corporate_tax_rate": _rate(self.corporate_tax_rate),
        }


# ============================================================================
# QSB + Cash Flow
# ============================================================================

@dataclass(frozen=True)
class PayrollOffsetCashFlow:
    q1: float = 0.0
    q2: float = 0.0
    q3: float = 0.0
    q4: float = 0.0
    total: float = 0.0

    def to_dict(self) -> dict:
        return {
            "q1": _money(self.q1),
            "q2": _money(self.q2),
            "q3": _money(self.q3),
            "q4": _money(self.q4),
            "total": _money(self.total),
        }


@dataclass(frozen=True)
class TraditionalCreditCashFlow:
    year1: float = 0.0
    year2: float = 0.0
    year3: float = 0.0
    year_to_breakeven: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "year1": _money(self.year1),
            "year2": _money(self.year2),
            "year3": _money(self.year3),
            "year_to_breakeven": self.year_to_breakeven,
        }


@dataclass(frozen=True)
class CashFlowComparison:
    with_payroll_offset: PayrollOffsetCashFlow
    traditional_credit: TraditionalCreditCashFlow

    def to_dict(self) -> dict:
        return {
            "with_payroll_offset": self.with_payroll_offset.to_dict(),
            "traditional_credit": self.traditional_credit.to_dict(),
        }


@dataclass(frozen=True)
class QSBAnalysis:
    """Qualified Small Business eligibility and payroll offset modeling"""
    is_eligible: bool
    current_year_revenue: float
    years_in_business: int
    eligibility_reasons: Tuple[str, ...]
    payroll_offset_available: bool
    max_payroll_offset: float
    quarterly_benefit: float
    cash_flow_comparison: CashFlowComparison
    recommended_action: str
    payroll_elections_remaining: int = 0
    lifetime_remaining: float = 0.0

    def to_dict(self) -> dict:
        return {
            "is_eligible": self.is_eligible,
            "current_year_revenue": _money(self.current_year_revenue),
            "years_in_business": self.years_in_business,
            "eligibility_reasons": list(self.eligibility_reasons),
            "payroll_offset_available": self.payroll_offset_available,
            "max_payroll_offset": _money(self.max_payroll_offset),
            "quarterly_benefit": _money(self.quarterly_benefit),
            "cash_flow_comparison": self.cash_flow_comparison.to_dict(),
            "recommended_action": self.recommended_action,
            "payroll_elections_remaining": self.payroll_elections_remaining,
            "lifetime_remaining": _money(self.lifetime_remaining),
        }


# ============================================================================
# Legislative Context
# ============================================================================

@dataclass(frozen=True)
class LegislativeAlert:
    type: str  # benefit | warning | info
    message: str
    impact: str

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "impact": self.impact}


@dataclass(frozen=True)
class LegislativeContext:
    """Statutory facts in force for a tax year"""
    tax_year: int
    rules_year: int
    payroll_tax_cap: float
    deduction_percentage: int
    amortization_required: bool
    domestic_amortization_years: Optional[int]
    foreign_amortization_years: Optional[int]
    alerts: Tuple[LegislativeAlert, ...]
    assumptions: Tuple[str, ...]
    table_version: str

    @property
    def fallback_applied(self) -> bool:
        return self.rules_year != self.tax_year

    def to_dict(self) -> dict:
        return {
            "tax_year": self.tax_year,
            "rules_year": self.rules_year,
            "payroll_tax_cap": _money(self.payroll_tax_cap),
            "deduction_percentage": self.deduction_percentage,
            "amortization_required": self.amortization_required,
            "domestic_amortization_years": self.domestic_amortization_years,
            "foreign_amortization_years": self.foreign_amortization_years,
            "alerts": [a.to_dict() for a in self.alerts],
            "assumptions": list(self.assumptions),
            "table_version": self.table_version,
        }


# ============================================================================
# Pricing + ROI
# ============================================================================

@dataclass(frozen=True)
class PricingTier:
    tier: int
    name: str
    price: float
    credit_range: str
    min_credit: float
    max_credit: Optional[float]  # None = open-ended top tier
    description: str = ""
    features: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "tier": self.tier,
            "name": self.name,
            "price": _money(self.price),
            "credit_range": self.credit_range,
            "min_credit": _money(self.min_credit),
            "max_credit": _money(self.max_credit) if self.max_credit is not None else None,
            "description": self.description,
            "features": list(self.features),
        }


@dataclass(frozen=True)
class ROICalculation:
    credit_amount: float
    service_cost: float
    net_benefit: float
    roi_multiple: str
    roi_multiple_value: float
    payback_days: Optional[int]

    def to_dict(self) -> dict:
        return {
            "credit_amount": _money(self.credit_amount),
            "service_cost": _money(self.service_cost),
            "net_benefit": _money(self.net_benefit),
            "roi_multiple": self.roi_multiple,
            "roi_multiple_value": round(self.roi_multiple_value, 1),
            "payback_days": self.payback_days,
        }


# ============================================================================
# Industry Insights + Final Result
# ============================================================================

@dataclass(frozen=True)
class IndustryInsights:
    common_activities: Tuple[str, ...]
    average_credit: str
    success_story: str

    def to_dict(self) -> dict:
        return {
            "common_activities": list(self.common_activities),
            "average_credit": self.average_credit,
            "success_story": self.success_story,
        }


@dataclass(frozen=True)
class EnhancedCalculationResult:
    """Fully-resolved credit estimate handed to presentation and document layers"""
    qre_breakdown: QREBreakdown
    asc_calculation: ASCCalculation
    credit_options: CreditOptions
    federal_credit: float
    effective_credit_rate: float
    qsb_analysis: QSBAnalysis
    legislative_context: LegislativeContext
    pricing_tier: PricingTier
    roi: ROICalculation
    industry_insights: IndustryInsights
    confidence: str  # high | medium | low
    warnings: Tuple[str, ...]
    assumptions: Tuple[str, ...]
    pricing_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "qre_breakdown": self.qre_breakdown.to_dict(),
            "asc_calculation": self.asc_calculation.to_dict(),
            "credit_options": self.credit_options.to_dict(),
            "federal_credit": _money(self.federal_credit),
            "effective_credit_rate": _rate(self.effective_credit_rate),
            "qsb_analysis": self.qsb_analysis.to_dict(),
            "legislative_context": self.legislative_context.to_dict(),
            "pricing_tier": self.pricing_tier.to_dict(),
            "roi": self.roi.to_dict(),
            "industry_insights": self.industry_insights.to_dict(),
            "confidence": self.confidence,
            "warnings": list(self.warnings),
            "assumptions": list(self.assumptions),
            "pricing_version": self.pricing_version,
        }
