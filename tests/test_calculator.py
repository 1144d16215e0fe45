"""
Credit Calculator Pipeline Tests

End-to-end runs of calculate_credit over complete input snapshots.

Run with: python -m pytest tests/test_calculator.py -v
"""

import json

import pytest

from rdcredit.engine import (
    DEFAULT_TABLES,
    EngineTables,
    ExpenseValidationError,
    StaticKnowledgeBase,
    calculate_credit,
)
from rdcredit.engine.result_composer import ZERO_QRE_WARNING


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def startup_payload():
    """First-time filer, 10 engineers at $95k, QSB-eligible."""
    return {
        "technical_employees": 10,
        "avg_salary": 95000,
        "rd_allocation_pct": 100,
        "is_first_time_filer": True,
        "gross_receipts": 2000000,
        "years_in_business": 3,
        "tax_year": 2024,
        "business_type": "software",
    }


@pytest.fixture
def returning_payload(startup_payload):
    payload = dict(startup_payload)
    payload.update({
        "is_first_time_filer": False,
        "prior_year_qres": [500000, 520000, 540000],
        "gross_receipts": 12000000,
        "years_in_business": 9,
    })
    return payload


# =============================================================================
# WORKED EXAMPLES
# =============================================================================

class TestWorkedExamples:
    """Full pipeline over known scenarios."""

    def test_first_time_startup(self, startup_payload):
        result = calculate_credit(startup_payload)

        assert result.qre_breakdown.total == 950000
        assert result.asc_calculation.credit_amount == pytest.approx(57000)
        assert result.credit_options.recommendation == "reduced"
        assert result.federal_credit == pytest.approx(45030)

        assert result.qsb_analysis.is_eligible is True
        assert result.qsb_analysis.max_payroll_offset == pytest.approx(45030)
        assert result.qsb_analysis.quarterly_benefit == pytest.approx(11257.5)

        assert result.pricing_tier.tier == 5
        assert result.pricing_tier.price == 1500
        assert result.roi.roi_multiple == "30x"
        assert result.roi.payback_days == 0

        assert result.industry_insights.average_credit == "$45,000"
        assert result.pricing_version == DEFAULT_TABLES.pricing.version

    def test_returning_filer(self, returning_payload):
        result = calculate_credit(returning_payload)

        assert result.asc_calculation.method == "repeat"
        assert result.asc_calculation.base_amount == pytest.approx(260000)
        assert result.asc_calculation.credit_amount == pytest.approx(96600)
        assert result.federal_credit == pytest.approx(76314)

        assert result.qsb_analysis.is_eligible is False
        assert result.pricing_tier.tier == 7
        assert result.roi.payback_days == 365


# =============================================================================
# RESULT INVARIANTS
# =============================================================================

class TestResultInvariants:
    """Properties that hold for every result."""

    @pytest.fixture(params=["startup", "returning", "zero"])
    def result(self, request, startup_payload, returning_payload):
        payloads = {
            "startup": startup_payload,
            "returning": returning_payload,
            "zero": {"gross_receipts": 100000, "years_in_business": 1, "tax_year": 2024},
        }
        return calculate_credit(payloads[request.param])

    def test_federal_credit_is_recommended_amount(self, result):
        assert result.federal_credit == result.credit_options.recommended_option.amount

    def test_exactly_one_election_recommended(self, result):
        flags = [result.credit_options.full_credit.recommended, result.credit_options.reduced_credit.recommended]
        assert flags.count(True) == 1

    def test_payroll_offset_implies_eligibility(self, result):
        if result.qsb_analysis.payroll_offset_available:
            assert result.qsb_analysis.is_eligible

    def test_qre_total_is_sum(self, result):
        qre = result.qre_breakdown
        assert qre.total == qre.wages + qre.contractors + qre.supplies + qre.cloud_and_software

    def test_json_serializable(self, result):
        json.dumps(result.to_dict())

    def test_deterministic(self, result, startup_payload, returning_payload):
        first = calculate_credit(startup_payload).to_dict()
        second = calculate_credit(dict(startup_payload)).to_dict()
        assert first == second


# =============================================================================
# EDGE CASES
# =============================================================================

class TestEdgeCases:
    """Zero input, bad input, unknown years and overrides."""

    def test_zero_qre_returns_result_with_warning(self):
        result = calculate_credit({"gross_receipts": 100000, "years_in_business": 1, "tax_year": 2024})
        assert result.qre_breakdown.total == 0
        assert result.federal_credit == 0
        assert ZERO_QRE_WARNING in result.warnings
        assert result.pricing_tier.tier == 1

    def test_missing_facts_raise_before_computation(self):
        with pytest.raises(ExpenseValidationError) as exc_info:
            calculate_credit({"technical_employees": 10, "avg_salary": 95000})
        assert {e.field for e in exc_info.value.errors} == {"gross_receipts", "years_in_business", "tax_year"}

    def test_unknown_tax_year_assumption(self, startup_payload):
        result = calculate_credit({**startup_payload, "tax_year": 2031})
        assert result.legislative_context.rules_year == 2025
        assert any(a.startswith("ASSUMPTION: tax year 2031") for a in result.assumptions)

    def test_legacy_year_uses_lower_payroll_cap(self):
        result = calculate_credit({
            "technical_employees": 100,
            "avg_salary": 150000,
            "rd_allocation_pct": 100,
            "is_first_time_filer": True,
            "gross_receipts": 1000000,
            "years_in_business": 2,
            "tax_year": 2020,
        })
        assert result.legislative_context.payroll_tax_cap == 250000
        assert result.qsb_analysis.max_payroll_offset == 250000

    def test_exhausted_payroll_elections(self, startup_payload):
        result = calculate_credit({**startup_payload, "prior_payroll_elections": 5})
        assert result.qsb_analysis.is_eligible is True
        assert result.qsb_analysis.payroll_offset_available is False
        assert result.roi.payback_days == 365

    def test_string_false_keeps_repeat_method(self, returning_payload):
        result = calculate_credit({**returning_payload, "is_first_time_filer": "false"})
        assert result.asc_calculation.method == "repeat"
        assert result.asc_calculation.credit_amount == pytest.approx(96600)

    def test_clamped_inputs_warn(self, startup_payload):
        result = calculate_credit({**startup_payload, "contractor_cost": -500})
        assert any("contractor_cost" in w for w in result.warnings)

    def test_contractors_exceeding_wages_warn(self):
        result = calculate_credit({
            "technical_employees": 1,
            "avg_salary": 60000,
            "rd_allocation_pct": 50,
            "contractor_cost": 200000,
            "contractor_rd_time_pct": 100,
            "gross_receipts": 1000000,
            "years_in_business": 2,
            "tax_year": 2024,
        })
        assert any(w.startswith("Contractor costs exceed wage costs") for w in result.warnings)


# =============================================================================
# CORPORATE RATE + CONFIDENCE
# =============================================================================

class TestCorporateRate:
    """Default vs. supplied corporate tax rate."""

    def test_default_rate_is_an_assumption(self, startup_payload):
        result = calculate_credit(startup_payload)
        assert result.credit_options.corporate_tax_rate == 0.21
        assert any(a.startswith("Assumed 21% federal corporate tax rate") for a in result.assumptions)

    def test_supplied_rate_used(self, startup_payload):
        result = calculate_credit({**startup_payload, "corporate_tax_rate": 0.25})
        assert result.credit_options.corporate_tax_rate == 0.25
        assert result.federal_credit == pytest.approx(42750)
        assert not any(a.startswith("Assumed") for a in result.assumptions)

    def test_odd_cent_credit_stays_reduced(self, startup_payload):
        """$666,675 QRE x 6% = $40,000.50; 15% rate must still recommend reduced."""
        result = calculate_credit({
            **startup_payload,
            "technical_employees": 1,
            "avg_salary": 666675,
            "corporate_tax_rate": 0.15,
        })
        assert result.asc_calculation.credit_amount == pytest.approx(40000.5)
        assert result.credit_options.recommendation == "reduced"
        assert result.federal_credit == pytest.approx(34000.42, abs=0.011)

    def test_caller_default_rate(self, startup_payload):
        result = calculate_credit(startup_payload, default_corporate_tax_rate=0.30)
        assert result.credit_options.corporate_tax_rate == 0.30


class TestConfidence:
    """Knowledge-base confidence scoring."""

    def test_clean_itemized_input_is_high(self):
        result = calculate_credit({
            "employees": [
                {"salary": 120000, "rd_time_pct": 60, "benefits_rate": 20},
                {"salary": 140000, "rd_time_pct": 50, "benefits_rate": 20},
            ],
            "is_first_time_filer": True,
            "gross_receipts": 3000000,
            "years_in_business": 4,
            "tax_year": 2024,
        })
        assert result.warnings == ()
        assert result.confidence == "high"

    def test_aggregate_with_one_warning_is_medium(self, startup_payload):
        assert calculate_credit(startup_payload).confidence == "medium"

    def test_many_issues_is_low(self, startup_payload):
        result = calculate_credit({
            **startup_payload,
            "contractor_cost": -1,
            "supplies_cost": "n/a",
            "software_cost": -20,
        })
        assert result.confidence == "low"

    def test_injected_knowledge_base(self, startup_payload):
        class CautiousKnowledgeBase(StaticKnowledgeBase):
            def assess_confidence(self, normalized, warnings):
                return "low"

        tables = EngineTables(
            legislative=DEFAULT_TABLES.legislative,
            pricing=DEFAULT_TABLES.pricing,
            knowledge_base=CautiousKnowledgeBase(),
        )
        assert calculate_credit(startup_payload, tables=tables).confidence == "low"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
