"""
Result Composer
Assembles the final EnhancedCalculationResult from the pipeline outputs.

No credit figures are computed here: the composer only gathers warnings and
assumptions, asks the knowledge base for a confidence level, and guarantees
that a zero-QRE result always carries a warning.
"""

import logging
from typing import List

from .expense_normalizer import NormalizedInput, ItemizedWages
from .knowledge_base import KnowledgeBase
from .models import (
    ASCCalculation,
    CreditOptions,
    EnhancedCalculationResult,
    IndustryInsights,
    LegislativeContext,
    PricingTier,
    QREBreakdown,
    QSBAnalysis,
    ROICalculation,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Warning Thresholds
# ============================================================================

HIGH_ALLOCATION_PCT = 80
LOW_ALLOCATION_PCT = 20
LOW_SALARY = 40000
HIGH_SALARY = 200000
FULL_PRIOR_YEARS = 3

ZERO_QRE_WARNING = "No qualified research expenses entered - the estimated credit is $0"


def _wage_cost(normalized: NormalizedInput) -> float:
    wages = normalized.wages
    if isinstance(wages, ItemizedWages):
        return sum(emp.salary for emp in wages.employees)
    return wages.technical_employees * wages.avg_salary


def _average_salary(normalized: NormalizedInput) -> float:
    wages = normalized.wages
    if isinstance(wages, ItemizedWages):
        salaries = [emp.salary for emp in wages.employees]
        return sum(salaries) / len(salaries) if salaries else 0.0
    return wages.avg_salary


def collect_warnings(normalized: NormalizedInput) -> List[str]:
    """Heuristic warnings about unusual input patterns."""
    warnings = []
    wages = normalized.wages

    if isinstance(wages, ItemizedWages):
        high = sum(1 for emp in wages.employees if emp.rd_time_pct > HIGH_ALLOCATION_PCT)
        if high:
            warnings.append(
                f"{high} employee(s) above {HIGH_ALLOCATION_PCT}% R&D time - ensure accurate time tracking"
            )
    elif wages.technical_employees > 0:
        if wages.rd_allocation_pct > HIGH_ALLOCATION_PCT:
            warnings.append(f"Over {HIGH_ALLOCATION_PCT}% R&D allocation is unusual - ensure accurate time tracking")
        elif wages.rd_allocation_pct < LOW_ALLOCATION_PCT:
            warnings.append("Low R&D allocation - ensure all experimentation time is included")

    avg_salary = _average_salary(normalized)
    if 0 < avg_salary < LOW_SALARY:
        warnings.append("Salary seems low for technical employees")
    elif avg_salary > HIGH_SALARY:
        warnings.append("High average salary - ensure this reflects actual wages")

    if normalized.contractor_cost > _wage_cost(normalized):
        warnings.append("Contractor costs exceed wage costs - ensure contract research agreements are documented")

    return warnings


def collect_assumptions(normalized: NormalizedInput,
                        asc: ASCCalculation,
                        context: LegislativeContext,
                        corporate_tax_rate: float,
                        corporate_rate_defaulted: bool) -> List[str]:
    assumptions = list(context.assumptions)

    assumptions.append(
        f"{asc.credit_rate * 100:.0f}% ASC credit rate based on {asc.method} filer status"
    )
    if asc.method == "repeat" and len(normalized.prior_year_qres) < FULL_PRIOR_YEARS:
        assumptions.append(
            f"Prior-year average based on {len(normalized.prior_year_qres)} year(s) of QRE history"
        )

    if isinstance(normalized.wages, ItemizedWages):
        assumptions.append("R&D time share and benefits rate as entered for each employee")
    else:
        assumptions.append(
            f"{normalized.wages.rd_allocation_pct:g}% of technical employee time spent on R&D activities"
        )

    assumptions.append("All expenses are properly documented and qualify under Section 41")

    if normalized.contractor_cost > 0:
        assumptions.append("Contractor costs limited to 65% of the R&D share per IRC Section 41(b)(3)")

    if context.amortization_required:
        assumptions.append(
            f"Section 174 amortization applies ({context.domestic_amortization_years}-year domestic / "
            f"{context.foreign_amortization_years}-year foreign); it affects deductions, not the credit"
        )

    if corporate_rate_defaulted:
        assumptions.append(
            f"Assumed {corporate_tax_rate * 100:g}% federal corporate tax rate for the Section 280C comparison"
        )

    if normalized.substituted_defaults:
        assumptions.append(f"Defaults substituted for: {', '.join(normalized.substituted_defaults)}")

    return assumptions


def compose_result(*,
                   normalized: NormalizedInput,
                   qre: QREBreakdown,
                   asc: ASCCalculation,
                   credit_options: CreditOptions,
                   qsb: QSBAnalysis,
                   context: LegislativeContext,
                   pricing_tier: PricingTier,
                   roi: ROICalculation,
                   insights: IndustryInsights,
                   knowledge_base: KnowledgeBase,
                   pricing_version: str,
                   corporate_rate_defaulted: bool) -> EnhancedCalculationResult:
    """Assemble the immutable final result."""
    heuristic_warnings = collect_warnings(normalized)

    warnings = [
        f"Input {field} was negative, non-numeric or out of range and was clamped"
        for field in normalized.clamped_fields
    ]
    warnings.extend(heuristic_warnings)

    # Zero-QRE results must explain themselves
    if qre.total == 0 and ZERO_QRE_WARNING not in warnings:
        warnings.append(ZERO_QRE_WARNING)
        heuristic_warnings.append(ZERO_QRE_WARNING)

    assumptions = collect_assumptions(
        normalized, asc, context, credit_options.corporate_tax_rate, corporate_rate_defaulted
    )

    return EnhancedCalculationResult(
        qre_breakdown=qre,
        asc_calculation=asc,
        credit_options=credit_options,
        federal_credit=credit_options.recommended_option.amount,
        effective_credit_rate=asc.effective_credit_rate,
        qsb_analysis=qsb,
        legislative_context=context,
        pricing_tier=pricing_tier,
        roi=roi,
        industry_insights=insights,
        confidence=knowledge_base.assess_confidence(normalized, heuristic_warnings),
        warnings=tuple(warnings),
        assumptions=tuple(assumptions),
        pricing_version=pricing_version,
    )
