"""
QRE Aggregator Tests

Run with: python -m pytest tests/test_qre_engine.py -v
"""

import pytest

from rdcredit.engine import aggregate_qres, normalize_expense_input
from rdcredit.engine.expense_normalizer import AggregateWages, ItemizedWages
from rdcredit.engine.qre_engine import CONTRACT_QRE_RATE


COMPANY_FACTS = {"gross_receipts": 2000000, "years_in_business": 3, "tax_year": 2024}


def qres_for(**fields):
    return aggregate_qres(normalize_expense_input({**COMPANY_FACTS, **fields}))


# =============================================================================
# WAGES
# =============================================================================

class TestWageQRE:
    """Wage QREs for itemized and aggregate entry."""

    def test_aggregate_wages_example(self):
        """10 employees x $95,000 x 100% = $950,000."""
        qre = qres_for(technical_employees=10, avg_salary=95000, rd_allocation_pct=100)
        assert qre.wages == 950000
        assert qre.total == 950000

    def test_aggregate_allocation_applied(self):
        qre = qres_for(technical_employees=4, avg_salary=100000, rd_allocation_pct=25)
        assert qre.wages == pytest.approx(100000)

    def test_itemized_wages_include_benefits(self):
        """salary x (1 + benefits) x R&D time."""
        qre = qres_for(employees=[
            {"salary": 100000, "rd_time_pct": 50, "benefits_rate": 20},
            {"salary": 80000, "rd_time_pct": 100, "benefits_rate": 0},
        ])
        assert qre.wages == pytest.approx(60000 + 80000)

    def test_itemized_wins_over_aggregate(self):
        normalized = normalize_expense_input({
            **COMPANY_FACTS,
            "employees": [{"salary": 50000, "rd_time_pct": 100, "benefits_rate": 0}],
            "technical_employees": 10,
            "avg_salary": 95000,
        })
        assert isinstance(normalized.wages, ItemizedWages)
        assert aggregate_qres(normalized).wages == pytest.approx(50000)

    def test_missing_wage_data_defaults_to_zero(self):
        normalized = normalize_expense_input(dict(COMPANY_FACTS))
        assert isinstance(normalized.wages, AggregateWages)
        assert "wages" in normalized.substituted_defaults
        assert aggregate_qres(normalized).wages == 0


# =============================================================================
# CONTRACTORS
# =============================================================================

class TestContractorQRE:
    """65% limitation applied to the R&D-time-adjusted cost."""

    def test_contractor_compounded_reduction(self):
        qre = qres_for(contractor_cost=100000, contractor_rd_time_pct=50)
        assert qre.contractors == pytest.approx(32500)

    def test_contractor_defaults_to_full_rd_time(self):
        qre = qres_for(contractor_cost=100000)
        assert qre.contractors == pytest.approx(65000)

    @pytest.mark.parametrize("rd_pct", [0, 10, 33.3, 50, 99.9, 100, 150])
    def test_contractor_never_exceeds_65_percent(self, rd_pct):
        cost = 123456.78
        qre = qres_for(contractor_cost=cost, contractor_rd_time_pct=rd_pct)
        assert qre.contractors <= round(CONTRACT_QRE_RATE * cost, 2)


# =============================================================================
# SUPPLIES + CLOUD/SOFTWARE
# =============================================================================

class TestSupplyAndCloudQRE:
    """Per-item allocation, monthly costs annualized."""

    def test_supply_items(self):
        qre = qres_for(supplies=[
            {"description": "Prototype parts", "cost": 10000, "rd_allocation": 50},
            {"description": "Lab materials", "cost": 2000, "rd_allocation": 100},
        ])
        assert qre.supplies == pytest.approx(7000)

    def test_aggregate_supplies(self):
        qre = qres_for(supplies_cost=8000)
        assert qre.supplies == pytest.approx(8000)

    def test_cloud_monthly_and_annual(self):
        qre = qres_for(cloud_and_software=[
            {"description": "AWS", "monthly_cost": 1000, "rd_allocation": 50},
            {"description": "IDE licenses", "annual_cost": 24000, "rd_allocation": 25},
        ])
        assert qre.cloud_and_software == pytest.approx(12000)

    def test_annual_cost_preferred_when_both_given(self):
        qre = qres_for(cloud_and_software=[
            {"description": "GPU cluster", "monthly_cost": 5000, "annual_cost": 30000, "rd_allocation": 100},
        ])
        assert qre.cloud_and_software == pytest.approx(30000)

    def test_aggregate_software_and_cloud(self):
        qre = qres_for(software_cost=5000, cloud_cost=7000)
        assert qre.cloud_and_software == pytest.approx(12000)


# =============================================================================
# CLAMPING + TOTALS
# =============================================================================

class TestClampingAndTotals:
    """Bad values clamp; total is always the exact sum."""

    def test_negative_and_non_numeric_clamp_to_zero(self):
        normalized = normalize_expense_input({
            **COMPANY_FACTS,
            "contractor_cost": -5000,
            "supplies": [{"cost": "lots", "rd_allocation": 100}],
        })
        assert normalized.contractor_cost == 0
        assert "contractor_cost" in normalized.clamped_fields
        assert "supplies[0].cost" in normalized.clamped_fields
        qre = aggregate_qres(normalized)
        assert qre.contractors == 0
        assert qre.supplies == 0

    def test_allocation_clamped_to_100(self):
        normalized = normalize_expense_input({
            **COMPANY_FACTS,
            "technical_employees": 2,
            "avg_salary": 100000,
            "rd_allocation_pct": 250,
        })
        assert normalized.wages.rd_allocation_pct == 100
        assert "rd_allocation_pct" in normalized.clamped_fields
        assert aggregate_qres(normalized).wages == pytest.approx(200000)

    def test_all_zero_input_yields_zero_total(self):
        qre = qres_for(technical_employees=0, avg_salary=0, contractor_cost=0, supplies_cost=0)
        assert qre.total == 0

    def test_total_is_exact_sum(self):
        qre = qres_for(
            employees=[{"salary": 87654.321, "rd_time_pct": 37.5, "benefits_rate": 18.25}],
            contractor_cost=33333.33,
            contractor_rd_time_pct=61,
            supplies=[{"cost": 1234.567, "rd_allocation": 71}],
            cloud_and_software=[{"monthly_cost": 412.34, "rd_allocation": 83}],
        )
        assert qre.total == qre.wages + qre.contractors + qre.supplies + qre.cloud_and_software
        assert min(qre.wages, qre.contractors, qre.supplies, qre.cloud_and_software) >= 0

    def test_details_describe_formulas(self):
        qre = qres_for(technical_employees=10, avg_salary=95000, rd_allocation_pct=100)
        assert "10 employees" in qre.details["wage_calculation"]
        assert "65% IRS limit" in qre.details["contractor_calculation"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
