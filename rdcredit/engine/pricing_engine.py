"""
Pricing/ROI Recommender
Maps a federal credit to a flat-fee tier and computes ROI metrics.

Fees follow a fixed schedule by credit bucket, never a percentage of the
credit, so the service fee cannot be read as a contingency fee.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .models import PricingTier, QSBAnalysis, ROICalculation

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


@dataclass(frozen=True)
class PricingSchedule:
    version: str
    tiers: Tuple[PricingTier, ...]

    def tier_for(self, federal_credit: float) -> PricingTier:
        for tier in self.tiers:
            if federal_credit >= tier.min_credit and (tier.max_credit is None or federal_credit < tier.max_credit):
                return tier
        # Negative credits never reach here after normalization; lowest tier otherwise
        return self.tiers[0]


def _tier(tier: int, name: str, price: float, min_credit: float, max_credit: Optional[float],
          features: Tuple[str, ...]) -> PricingTier:
    if max_credit is None:
        credit_range = f"${min_credit:,.0f}+"
        description = f"Credits > ${min_credit / 1000:,.0f}K"
    elif min_credit == 0:
        credit_range = f"${min_credit:,.0f} - ${max_credit:,.0f}"
        description = f"Credits < ${max_credit / 1000:,.0f}K"
    else:
        credit_range = f"${min_credit:,.0f} - ${max_credit:,.0f}"
        description = f"Credits ${min_credit / 1000:,.0f}K-${max_credit / 1000:,.0f}K"
    return PricingTier(
        tier=tier,
        name=name,
        price=price,
        credit_range=credit_range,
        min_credit=min_credit,
        max_credit=max_credit,
        description=description,
        features=features,
    )


DEFAULT_PRICING_SCHEDULE = PricingSchedule(
    version="2025-01",
    tiers=(
        _tier(1, "Starter", 500, 0, 10000, (
            "Federal R&D Credit Forms",
            "Technical Narrative (4-8 pages)",
            "Section 174 Deduction",
            "Compliance Memo",
            "90-day Document Access",
        )),
        _tier(2, "Growth", 750, 10000, 20000, (
            "Everything in Tier 1",
            "Enhanced narrative detail",
            "Priority support",
            "Multi-year guidance",
            "QSB payroll offset prep",
        )),
        _tier(3, "Professional", 1000, 20000, 30000, (
            "Everything in Tier 2",
            "Multi-project support",
            "Expedited processing",
            "Executive summary",
            "State credit guidance",
        )),
        _tier(4, "Scale", 1250, 30000, 40000, (
            "Everything in Tier 3",
            "Complex project structures",
            "Department-level breakdowns",
            "Custom narratives",
        )),
        _tier(5, "Advanced", 1500, 40000, 50000, (
            "Everything in Tier 4",
            "Dedicated support specialist",
            "Advanced documentation",
        )),
        _tier(6, "Premium", 1750, 50000, 60000, (
            "Everything in Tier 5",
            "Rush processing available",
            "White-glove service",
        )),
        _tier(7, "Enterprise", 2000, 60000, None, (
            "Enterprise features",
            "Custom solutions",
            "Dedicated account manager",
        )),
    ),
)


def format_roi_multiple(value: float) -> str:
    """25.0 -> '25x', 12.46 -> '12.5x'"""
    rounded = round(value, 1)
    if rounded == int(rounded):
        return f"{int(rounded)}x"
    return f"{rounded}x"


def recommend_pricing(federal_credit: float,
                      qsb_analysis: QSBAnalysis,
                      schedule: PricingSchedule = DEFAULT_PRICING_SCHEDULE) -> Tuple[PricingTier, ROICalculation]:
    """
    Pick the tier for a federal credit and compute ROI.

    payback_days is 0 with payroll offset (cash arrives in the first quarter),
    otherwise the traditional breakeven year in days, or None when the
    traditional path never breaks even.
    """
    federal_credit = max(0.0, federal_credit)
    tier = schedule.tier_for(federal_credit)

    roi_value = federal_credit / tier.price if tier.price > 0 else 0.0

    if qsb_analysis.payroll_offset_available:
        payback_days = 0
    else:
        breakeven = qsb_analysis.cash_flow_comparison.traditional_credit.year_to_breakeven
        payback_days = breakeven * DAYS_PER_YEAR if breakeven is not None else None

    roi = ROICalculation(
        credit_amount=federal_credit,
        service_cost=tier.price,
        net_benefit=round(federal_credit - tier.price, 2),
        roi_multiple=format_roi_multiple(roi_value),
        roi_multiple_value=roi_value,
        payback_days=payback_days,
    )

    logger.debug(f"[Pricing] tier={tier.tier} price={tier.price} roi={roi.roi_multiple}")
    return tier, roi
