"""
Legislative Context Provider
Static, versioned statutory facts keyed by tax year.

Section 174 capitalization is informational here: it changes deduction timing,
never the credit amount.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .models import LegislativeAlert, LegislativeContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearRules:
    """Rules in force for one tax year"""
    payroll_tax_cap: float
    amortization_required: bool
    domestic_amortization_years: Optional[int] = None
    foreign_amortization_years: Optional[int] = None

    @property
    def deduction_percentage(self) -> int:
        # First-year share of R&D cost deductible (mid-year convention ignored)
        if not self.amortization_required:
            return 100
        return int(100 / self.domestic_amortization_years)


@dataclass(frozen=True)
class LegislativeTable:
    version: str
    rules: Mapping[int, YearRules]

    @property
    def latest_year(self) -> int:
        return max(self.rules)


# Pre-IRA payroll offset cap
_LEGACY_RULES = YearRules(payroll_tax_cap=250000, amortization_required=False)

# TCJA Section 174 capitalization + IRA doubled payroll offset cap
_SECTION_174_RULES = YearRules(
    payroll_tax_cap=500000,
    amortization_required=True,
    domestic_amortization_years=5,
    foreign_amortization_years=15,
)

DEFAULT_LEGISLATIVE_TABLE = LegislativeTable(
    version="2025.1",
    rules=MappingProxyType({
        2018: _LEGACY_RULES,
        2019: _LEGACY_RULES,
        2020: _LEGACY_RULES,
        2021: _LEGACY_RULES,
        2022: _SECTION_174_RULES,
        2023: _SECTION_174_RULES,
        2024: _SECTION_174_RULES,
        2025: _SECTION_174_RULES,
    }),
)


def _build_alerts(rules: YearRules, rules_year: int):
    alerts = []

    if rules.amortization_required:
        alerts.append(LegislativeAlert(
            type="warning",
            message=(
                f"Section 174: R&D expenses must be capitalized and amortized over "
                f"{rules.domestic_amortization_years} years (domestic) / "
                f"{rules.foreign_amortization_years} years (foreign)"
            ),
            impact=(
                f"Only {rules.deduction_percentage}% of R&D cost is deductible in year one, "
                f"raising taxable income; the R&D credit itself is unchanged"
            ),
        ))

    if rules.payroll_tax_cap >= 500000:
        alerts.append(LegislativeAlert(
            type="benefit",
            message=f"Qualified small businesses can offset up to ${rules.payroll_tax_cap:,.0f} of payroll tax",
            impact="Credit becomes quarterly cash instead of waiting for income tax liability",
        ))
    elif rules.payroll_tax_cap > 0:
        alerts.append(LegislativeAlert(
            type="info",
            message=f"Payroll tax offset limited to ${rules.payroll_tax_cap:,.0f} (Social Security portion only) for {rules_year}",
            impact="Cap increased to $500,000 for tax years beginning after 2022",
        ))

    return alerts


def get_legislative_context(tax_year: int,
                            table: LegislativeTable = DEFAULT_LEGISLATIVE_TABLE) -> LegislativeContext:
    """
    Get the legislative context for a tax year.

    Unknown years fall back to the latest year in the table with an explicit
    assumption; this never raises.
    """
    rules = table.rules.get(tax_year)
    rules_year = tax_year
    assumptions = []

    if rules is None:
        rules_year = table.latest_year
        rules = table.rules[rules_year]
        logger.warning(f"[Legislative] No rules for tax year {tax_year}; using {rules_year} rules")
        assumptions.append(
            f"ASSUMPTION: tax year {tax_year} is not in legislative table {table.version}; "
            f"{rules_year} rules applied (payroll cap ${rules.payroll_tax_cap:,.0f}, "
            f"Section 174 amortization {'required' if rules.amortization_required else 'not required'})"
        )

    alerts = _build_alerts(rules, rules_year)
    if rules_year != tax_year:
        alerts.append(LegislativeAlert(
            type="info",
            message=f"Tax year {tax_year} is outside the supported range; {rules_year} rules were used",
            impact="Confirm current-law limits before relying on this estimate",
        ))

    return LegislativeContext(
        tax_year=tax_year,
        rules_year=rules_year,
        payroll_tax_cap=rules.payroll_tax_cap,
        deduction_percentage=rules.deduction_percentage,
        amortization_required=rules.amortization_required,
        domestic_amortization_years=rules.domestic_amortization_years,
        foreign_amortization_years=rules.foreign_amortization_years,
        alerts=tuple(alerts),
        assumptions=tuple(assumptions),
        table_version=table.version,
    )
