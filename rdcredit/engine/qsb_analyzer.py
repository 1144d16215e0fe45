"""
QSB & Payroll-Offset Analyzer
Qualified Small Business eligibility and payroll offset cash-flow modeling.

QSB: gross receipts under $5M AND fewer than 5 years in business.
Eligible companies can apply the credit against employer payroll tax each
quarter instead of waiting for income tax liability.
"""

import logging

from .models import (
    CashFlowComparison,
    PayrollOffsetCashFlow,
    QSBAnalysis,
    TraditionalCreditCashFlow,
)

logger = logging.getLogger(__name__)

QSB_REVENUE_LIMIT = 5000000
QSB_AGE_LIMIT = 5
DEFAULT_PAYROLL_TAX_CAP = 500000

# A QSB may elect the payroll offset for at most five tax years
QSB_MAX_ELECTION_YEARS = 5


def _money(value: float) -> float:
    return round(value, 2)


def _year_to_breakeven(traditional, offset_by_year):
    """First year cumulative traditional cash catches up with cumulative offset cash."""
    traditional_total = 0.0
    offset_total = 0.0
    for year, (trad, offset) in enumerate(zip(traditional, offset_by_year), start=1):
        traditional_total += trad
        offset_total += offset
        if traditional_total >= offset_total:
            return year
    return None


def analyze_qsb(gross_receipts: float,
                years_in_business: int,
                credit_amount: float,
                payroll_tax_cap: float = DEFAULT_PAYROLL_TAX_CAP,
                prior_payroll_elections: int = 0) -> QSBAnalysis:
    """
    Evaluate QSB eligibility for the recommended credit amount.

    eligibility_reasons always lists both tests, passed or failed, plus a note
    when the five-year election limit is exhausted. lifetime_remaining is the
    offset capacity left for future years after this year's election.
    """
    credit_amount = max(0.0, credit_amount)

    revenue_ok = gross_receipts < QSB_REVENUE_LIMIT
    age_ok = years_in_business < QSB_AGE_LIMIT
    is_eligible = revenue_ok and age_ok

    reasons = []
    if revenue_ok:
        reasons.append(f"Gross receipts ${gross_receipts:,.0f} are under the ${QSB_REVENUE_LIMIT:,.0f} limit")
    else:
        reasons.append(f"Gross receipts ${gross_receipts:,.0f} meet or exceed the ${QSB_REVENUE_LIMIT:,.0f} limit")
    if age_ok:
        reasons.append(f"{years_in_business} year(s) in business is under the {QSB_AGE_LIMIT}-year limit")
    else:
        reasons.append(f"{years_in_business} year(s) in business meets or exceeds the {QSB_AGE_LIMIT}-year limit")

    elections_left = QSB_MAX_ELECTION_YEARS - min(max(prior_payroll_elections, 0), QSB_MAX_ELECTION_YEARS)
    if is_eligible and elections_left == 0:
        reasons.append(
            f"Payroll offset already elected for {QSB_MAX_ELECTION_YEARS} tax years; the lifetime limit is reached"
        )

    payroll_offset_available = is_eligible and elections_left > 0

    if payroll_offset_available:
        offset_amount = _money(min(credit_amount, payroll_tax_cap))
        quarterly_benefit = _money(offset_amount / 4)
        with_offset = PayrollOffsetCashFlow(
            q1=quarterly_benefit,
            q2=quarterly_benefit,
            q3=quarterly_benefit,
            q4=quarterly_benefit,
            total=offset_amount,
        )
        elections_remaining = elections_left - 1
        lifetime_remaining = _money(elections_remaining * payroll_tax_cap)
        recommended_action = (
            f"Elect payroll offset on Form 6765 to recover ${quarterly_benefit:,.0f} per quarter "
            f"against employer payroll tax"
        )
    else:
        offset_amount = 0.0
        quarterly_benefit = 0.0
        with_offset = PayrollOffsetCashFlow()
        elections_remaining = elections_left
        lifetime_remaining = 0.0
        recommended_action = "Apply against income tax; track carryforward of unused credit"

    # Credit is not usable until the return is filed and income tax is owed
    traditional_by_year = (0.0, _money(credit_amount), 0.0)
    offset_by_year = (offset_amount, 0.0, 0.0)
    traditional = TraditionalCreditCashFlow(
        year1=traditional_by_year[0],
        year2=traditional_by_year[1],
        year3=traditional_by_year[2],
        year_to_breakeven=_year_to_breakeven(traditional_by_year, offset_by_year),
    )

    logger.debug(
        f"[QSB] eligible={is_eligible} offset={offset_amount:.2f} "
        f"breakeven_year={traditional.year_to_breakeven}"
    )

    return QSBAnalysis(
        is_eligible=is_eligible,
        current_year_revenue=gross_receipts,
        years_in_business=years_in_business,
        eligibility_reasons=tuple(reasons),
        payroll_offset_available=payroll_offset_available,
        max_payroll_offset=offset_amount,
        quarterly_benefit=quarterly_benefit,
        cash_flow_comparison=CashFlowComparison(
            with_payroll_offset=with_offset,
            traditional_credit=traditional,
        ),
        recommended_action=recommended_action,
        payroll_elections_remaining=elections_remaining,
        lifetime_remaining=lifetime_remaining,
    )
