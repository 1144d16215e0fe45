"""
R&D Credit Estimate Engine

Pure, synchronous pipeline that turns expense inputs into a federal R&D
credit estimate.

Key components:
- expense_normalizer: itemized vs. aggregate input resolution and validation
- qre_engine: Qualified Research Expense aggregation
- credit_estimate_engine: ASC credit and Section 280C election comparison
- qsb_analyzer: QSB eligibility and payroll offset cash flow
- legislative_context: tax-year statutory facts
- pricing_engine: flat-fee tier and ROI
- result_composer: final result assembly
- calculator: the calculate_credit entry point
"""

from rdcredit.engine.calculator import (
    DEFAULT_TABLES,
    EngineTables,
    calculate_credit,
)
from rdcredit.engine.credit_estimate_engine import (
    compare_elections,
    select_credit_method,
)
from rdcredit.engine.expense_normalizer import (
    ExpenseValidationError,
    FieldError,
    NormalizedInput,
    normalize_expense_input,
)
from rdcredit.engine.knowledge_base import KnowledgeBase, StaticKnowledgeBase
from rdcredit.engine.legislative_context import (
    DEFAULT_LEGISLATIVE_TABLE,
    LegislativeTable,
    YearRules,
    get_legislative_context,
)
from rdcredit.engine.models import EnhancedCalculationResult
from rdcredit.engine.pricing_engine import (
    DEFAULT_PRICING_SCHEDULE,
    PricingSchedule,
    recommend_pricing,
)
from rdcredit.engine.qre_engine import aggregate_qres
from rdcredit.engine.qsb_analyzer import analyze_qsb

__all__ = [
    "DEFAULT_TABLES",
    "EngineTables",
    "calculate_credit",
    "compare_elections",
    "select_credit_method",
    "ExpenseValidationError",
    "FieldError",
    "NormalizedInput",
    "normalize_expense_input",
    "KnowledgeBase",
    "StaticKnowledgeBase",
    "DEFAULT_LEGISLATIVE_TABLE",
    "LegislativeTable",
    "YearRules",
    "get_legislative_context",
    "EnhancedCalculationResult",
    "DEFAULT_PRICING_SCHEDULE",
    "PricingSchedule",
    "recommend_pricing",
    "aggregate_qres",
    "analyze_qsb",
]
