"""
Estimate Knowledge Base
Confidence scoring and industry insight content.

Both are curated presentation content rather than derived formulas, so they
live behind a swappable KnowledgeBase that the calculator receives by
injection.
"""

from types import MappingProxyType
from typing import Optional, Sequence

from .expense_normalizer import NormalizedInput
from .models import IndustryInsights


class KnowledgeBase:
    """Base class for confidence and insight lookups."""

    def assess_confidence(self, normalized: NormalizedInput, warnings: Sequence[str]) -> str:
        raise NotImplementedError

    def industry_insights(self, business_type: Optional[str]) -> IndustryInsights:
        raise NotImplementedError


_INDUSTRY_INSIGHTS = MappingProxyType({
    "software": IndustryInsights(
        common_activities=(
            "AI/ML model development and training",
            "Custom algorithm development",
            "Performance optimization experiments",
            "New feature prototyping",
        ),
        average_credit="$45,000",
        success_story="SaaS company saved $67k on AI chatbot development",
    ),
    "e-commerce": IndustryInsights(
        common_activities=(
            "Recommendation engine development",
            "Inventory optimization algorithms",
            "Personalization system testing",
            "Fraud detection improvements",
        ),
        average_credit="$32,000",
        success_story="Online retailer claimed $89k for ML recommendation system",
    ),
    "agency": IndustryInsights(
        common_activities=(
            "Marketing automation development",
            "Custom analytics dashboards",
            "Client workflow optimization",
            "AI content generation tools",
        ),
        average_credit="$28,000",
        success_story="Digital agency recovered $41k for custom CRM development",
    ),
})

_DEFAULT_INSIGHTS = IndustryInsights(
    common_activities=(
        "Process automation development",
        "Data analysis system improvements",
        "Custom software solutions",
        "Technical experimentation",
    ),
    average_credit="$35,000",
    success_story="SMB recovered $52k for AI-powered process improvements",
)

_ALIASES = MappingProxyType({
    "technology": "software",
    "saas": "software",
    "ecommerce": "e-commerce",
    "retail": "e-commerce",
    "marketing": "agency",
})


class StaticKnowledgeBase(KnowledgeBase):
    """
    Hard-coded knowledge base.

    Confidence:
    - high: itemized wages, no substituted defaults, no clamped fields, no warnings
    - medium: at most MEDIUM_ISSUE_LIMIT input issues
    - low: anything else
    """

    MEDIUM_ISSUE_LIMIT = 2

    def assess_confidence(self, normalized: NormalizedInput, warnings: Sequence[str]) -> str:
        issues = len(normalized.substituted_defaults) + len(normalized.clamped_fields) + len(warnings)
        if normalized.is_itemized and issues == 0:
            return "high"
        if issues <= self.MEDIUM_ISSUE_LIMIT:
            return "medium"
        return "low"

    def industry_insights(self, business_type: Optional[str]) -> IndustryInsights:
        key = (business_type or "").strip().lower()
        key = _ALIASES.get(key, key)
        return _INDUSTRY_INSIGHTS.get(key, _DEFAULT_INSIGHTS)
