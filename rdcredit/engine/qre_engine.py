"""
QRE Aggregator
Computes eligible Qualified Research Expenses per IRC Section 41 category.
"""

import logging
from types import MappingProxyType

from .expense_normalizer import NormalizedInput, ItemizedWages
from .models import QREBreakdown

logger = logging.getLogger(__name__)

# ============================================================================
# QRE Constants
# ============================================================================

# Contract Research - 65% rule, applied after the R&D time share
CONTRACT_QRE_RATE = 0.65


def _money(value: float) -> float:
    return round(max(0.0, value), 2)


def compute_wage_qre(normalized: NormalizedInput) -> float:
    wages = normalized.wages
    if isinstance(wages, ItemizedWages):
        return sum(
            emp.salary * (1 + emp.benefits_rate / 100) * (emp.rd_time_pct / 100)
            for emp in wages.employees
        )
    return wages.technical_employees * wages.avg_salary * (wages.rd_allocation_pct / 100)


def compute_contract_qre(normalized: NormalizedInput) -> float:
    return normalized.contractor_cost * (normalized.contractor_rd_time_pct / 100) * CONTRACT_QRE_RATE


def compute_supply_qre(normalized: NormalizedInput) -> float:
    return sum(item.cost * (item.rd_allocation / 100) for item in normalized.supplies)


def compute_cloud_software_qre(normalized: NormalizedInput) -> float:
    # No statutory cap beyond the R&D allocation
    return sum(item.annual_amount * (item.rd_allocation / 100) for item in normalized.cloud_and_software)


def _wage_detail(normalized: NormalizedInput) -> str:
    wages = normalized.wages
    if isinstance(wages, ItemizedWages):
        return f"{len(wages.employees)} itemized employee(s): salary x (1 + benefits rate) x R&D time"
    return (
        f"{wages.technical_employees:g} employees x ${wages.avg_salary:,.0f} "
        f"x {wages.rd_allocation_pct:g}% R&D time"
    )


def aggregate_qres(normalized: NormalizedInput) -> QREBreakdown:
    """
    Compute the QRE breakdown for a normalized input.

    Each category is rounded to cents; total is the exact sum of the rounded
    categories so downstream consumers can re-add them without drift.
    """
    wages = _money(compute_wage_qre(normalized))
    contractors = _money(compute_contract_qre(normalized))
    supplies = _money(compute_supply_qre(normalized))
    cloud_and_software = _money(compute_cloud_software_qre(normalized))
    total = wages + contractors + supplies + cloud_and_software

    details = MappingProxyType({
        "wage_calculation": _wage_detail(normalized),
        "contractor_calculation": (
            f"${normalized.contractor_cost:,.0f} x {normalized.contractor_rd_time_pct:g}% R&D time "
            f"x {CONTRACT_QRE_RATE * 100:.0f}% IRS limit"
        ),
        "supply_calculation": (
            f"{len(normalized.supplies)} supply item(s) x R&D allocation; "
            f"{len(normalized.cloud_and_software)} cloud/software item(s) annualized x R&D allocation"
        ),
    })

    logger.debug(
        f"[QRE] wages={wages:.2f} contractors={contractors:.2f} "
        f"supplies={supplies:.2f} cloud_software={cloud_and_software:.2f} total={total:.2f}"
    )

    return QREBreakdown(
        wages=wages,
        contractors=contractors,
        supplies=supplies,
        cloud_and_software=cloud_and_software,
        total=total,
        details=details,
    )
