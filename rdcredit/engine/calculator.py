"""
Credit Calculator
Single entry point for the credit estimate pipeline:

normalize -> legislative context -> QRE -> ASC -> 280C -> QSB -> pricing -> compose

The pipeline is synchronous and side-effect free. Legislative rules, pricing
and the knowledge base arrive through EngineTables; nothing is read from the
environment, the clock or a random source, so identical input always yields
an identical result and callers can simply discard superseded results.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .credit_estimate_engine import (
    DEFAULT_CORPORATE_TAX_RATE,
    compare_elections,
    select_credit_method,
)
from .expense_normalizer import normalize_expense_input
from .knowledge_base import KnowledgeBase, StaticKnowledgeBase
from .legislative_context import (
    DEFAULT_LEGISLATIVE_TABLE,
    LegislativeTable,
    get_legislative_context,
)
from .models import EnhancedCalculationResult
from .pricing_engine import DEFAULT_PRICING_SCHEDULE, PricingSchedule, recommend_pricing
from .qre_engine import aggregate_qres
from .qsb_analyzer import analyze_qsb
from .result_composer import compose_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineTables:
    """Versioned, read-only lookups injected into every calculation"""
    legislative: LegislativeTable
    pricing: PricingSchedule
    knowledge_base: KnowledgeBase


DEFAULT_TABLES = EngineTables(
    legislative=DEFAULT_LEGISLATIVE_TABLE,
    pricing=DEFAULT_PRICING_SCHEDULE,
    knowledge_base=StaticKnowledgeBase(),
)


def calculate_credit(payload: Mapping[str, Any],
                     tables: EngineTables = DEFAULT_TABLES,
                     default_corporate_tax_rate: float = DEFAULT_CORPORATE_TAX_RATE) -> EnhancedCalculationResult:
    """
    Compute the full credit estimate for one input snapshot.

    Args:
        payload: raw expense input plus company facts
        tables: legislative, pricing and knowledge base lookups
        default_corporate_tax_rate: used when the payload has no corporate_tax_rate

    Raises:
        ExpenseValidationError: before any computation, when required facts are unusable
    """
    normalized = normalize_expense_input(payload)

    context = get_legislative_context(normalized.tax_year, tables.legislative)
    qre = aggregate_qres(normalized)
    asc = select_credit_method(qre.total, normalized.is_first_time_filer, normalized.prior_year_qres)

    corporate_rate_defaulted = normalized.corporate_tax_rate is None
    corporate_tax_rate = default_corporate_tax_rate if corporate_rate_defaulted else normalized.corporate_tax_rate
    credit_options = compare_elections(asc.credit_amount, corporate_tax_rate)
    federal_credit = credit_options.recommended_option.amount

    qsb = analyze_qsb(
        normalized.gross_receipts,
        normalized.years_in_business,
        federal_credit,
        payroll_tax_cap=context.payroll_tax_cap,
        prior_payroll_elections=normalized.prior_payroll_elections,
    )
    pricing_tier, roi = recommend_pricing(federal_credit, qsb, tables.pricing)
    insights = tables.knowledge_base.industry_insights(normalized.business_type)

    result = compose_result(
        normalized=normalized,
        qre=qre,
        asc=asc,
        credit_options=credit_options,
        qsb=qsb,
        context=context,
        pricing_tier=pricing_tier,
        roi=roi,
        insights=insights,
        knowledge_base=tables.knowledge_base,
        pricing_version=tables.pricing.version,
        corporate_rate_defaulted=corporate_rate_defaulted,
    )

    logger.info(
        f"[Calculator] tax_year={normalized.tax_year} qre_total={qre.total:,.2f} "
        f"method={asc.method} election={credit_options.recommendation} "
        f"federal_credit={result.federal_credit:,.2f} tier={pricing_tier.tier} "
        f"confidence={result.confidence}"
    )
    return result
