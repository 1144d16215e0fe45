"""
Credit Estimate Engine
Applies the Alternative Simplified Credit (ASC) method to a QRE total and
compares the two Section 280C elections.

Both steps are pure functions of their arguments; the composer decides what
is surfaced to the client.
"""

import logging
from typing import Sequence

from .models import ASCCalculation, CreditOption, CreditOptions

logger = logging.getLogger(__name__)

# ============================================================================
# Credit Computation Constants
# ============================================================================

# ASC Credit (14% of QRE over 50% of the prior 3-year average)
ASC_CREDIT_RATE = 0.14
ASC_BASE_PERCENTAGE = 0.50

# First-time filers / no prior QREs: 6% of current-year QRE
ASC_FIRST_TIME_RATE = 0.06

# Federal corporate rate used for the 280C comparison unless the caller overrides it
DEFAULT_CORPORATE_TAX_RATE = 0.21

FULL_CREDIT_COMPLEXITY = "Higher - wage/research deduction must be reduced by the full credit amount"
REDUCED_CREDIT_COMPLEXITY = "Lower - reduced credit elected on the original return, no deduction adjustment"


def _money(value: float) -> float:
    return round(value, 2)


# ============================================================================
# Credit Method Selector (ASC)
# ============================================================================

def select_credit_method(total_qre: float,
                         is_first_time_filer: bool,
                         prior_year_qres: Sequence[float]) -> ASCCalculation:
    """
    Compute the ASC credit for the current year.

    Args:
        total_qre: current-year QRE total
        is_first_time_filer: company has never claimed the credit
        prior_year_qres: up to three prior-year QRE totals, oldest first

    Returns:
        ASCCalculation; a zero QRE total is a valid zero-credit outcome
    """
    total_qre = max(0.0, total_qre)
    has_prior_qres = any(q > 0 for q in prior_year_qres)

    if is_first_time_filer or not has_prior_qres:
        credit = _money(total_qre * ASC_FIRST_TIME_RATE)
        calc = ASCCalculation(
            method="first-time",
            current_year_qre=total_qre,
            prior_year_average=0.0,
            base_amount=0.0,
            excess_qre=total_qre,
            credit_rate=ASC_FIRST_TIME_RATE,
            credit_amount=credit,
            effective_credit_rate=credit / total_qre if total_qre > 0 else 0.0,
        )
    else:
        prior_average = sum(prior_year_qres) / len(prior_year_qres)
        base_amount = _money(prior_average * ASC_BASE_PERCENTAGE)
        excess = max(0.0, total_qre - base_amount)
        credit = _money(excess * ASC_CREDIT_RATE)
        calc = ASCCalculation(
            method="repeat",
            current_year_qre=total_qre,
            prior_year_average=_money(prior_average),
            base_amount=base_amount,
            excess_qre=_money(excess),
            credit_rate=ASC_CREDIT_RATE,
            credit_amount=credit,
            effective_credit_rate=credit / total_qre if total_qre > 0 else 0.0,
        )

    logger.debug(f"[ASC] method={calc.method} base={calc.base_amount:.2f} credit={calc.credit_amount:.2f}")
    return calc


# ============================================================================
# Election Comparator (Section 280C)
# ============================================================================

def compare_elections(credit_amount: float,
                      corporate_tax_rate: float = DEFAULT_CORPORATE_TAX_RATE) -> CreditOptions:
    """
    Compare the full credit against the 280C(c) reduced credit.

    The full credit forces the deduction down by the credit amount, which costs
    credit x corporate rate in extra tax. The reduced credit is cut by the same
    rate up front and leaves the deduction alone. Net benefits are compared at
    cent precision and ties go to the reduced credit.
    """
    credit_amount = _money(max(0.0, credit_amount))

    # Both nets share one rounded deduction cost
    deduction_cost = _money(credit_amount * corporate_tax_rate)
    full_net = _money(credit_amount - deduction_cost)
    reduced_amount = _money(credit_amount - deduction_cost)
    reduced_net = reduced_amount

    recommend_full = full_net > reduced_net
    advantage = abs(full_net - reduced_net)

    if recommend_full:
        reasoning = (
            f"Full credit nets ${advantage:,.2f} more than the reduced credit "
            f"after the ${deduction_cost:,.2f} deduction cost"
        )
    elif advantage > 0:
        reasoning = f"Reduced credit nets ${advantage:,.2f} more than the full credit"
    else:
        reasoning = (
            f"Both elections net ${reduced_net:,.2f} ($0.00 advantage); the reduced credit "
            f"keeps the full deduction and carries lower audit complexity"
        )

    full = CreditOption(
        amount=_money(credit_amount),
        deduction_reduction=_money(credit_amount),
        net_benefit=full_net,
        complexity=FULL_CREDIT_COMPLEXITY,
        recommended=recommend_full,
    )
    reduced = CreditOption(
        amount=reduced_amount,
        deduction_reduction=0.0,
        net_benefit=reduced_net,
        complexity=REDUCED_CREDIT_COMPLEXITY,
        recommended=not recommend_full,
    )

    return CreditOptions(
        full_credit=full,
        reduced_credit=reduced,
        recommendation="full" if recommend_full else "reduced",
        reasoning=reasoning,
        corporate_tax_rate=corporate_tax_rate,
    )
