"""
ASC Credit + Section 280C Election Tests

Run with: python -m pytest tests/test_credit_estimate_engine.py -v
"""

import pytest

from rdcredit.engine import compare_elections, select_credit_method
from rdcredit.engine.credit_estimate_engine import ASC_CREDIT_RATE, ASC_FIRST_TIME_RATE


# =============================================================================
# CREDIT METHOD SELECTOR
# =============================================================================

class TestSelectCreditMethod:
    """ASC method: 6% first-time, 14% over half the prior average otherwise."""

    def test_first_time_filer(self):
        """$950,000 QRE x 6% = $57,000."""
        asc = select_credit_method(950000, True, [])
        assert asc.method == "first-time"
        assert asc.credit_rate == ASC_FIRST_TIME_RATE
        assert asc.base_amount == 0
        assert asc.credit_amount == pytest.approx(57000)
        assert asc.effective_credit_rate == pytest.approx(0.06)

    def test_returning_filer(self):
        """Base = 50% x avg(500k, 520k, 540k) = $260,000; credit = 14% x $690,000."""
        asc = select_credit_method(950000, False, [500000, 520000, 540000])
        assert asc.method == "repeat"
        assert asc.credit_rate == ASC_CREDIT_RATE
        assert asc.prior_year_average == pytest.approx(520000)
        assert asc.base_amount == pytest.approx(260000)
        assert asc.excess_qre == pytest.approx(690000)
        assert asc.credit_amount == pytest.approx(96600)

    def test_zero_prior_history_falls_back_to_first_time(self):
        returning = select_credit_method(400000, False, [0, 0, 0])
        first_time = select_credit_method(400000, True, [0, 0, 0])
        assert returning == first_time
        assert returning.credit_amount == pytest.approx(24000)

    def test_first_time_flag_ignores_prior_history(self):
        asc = select_credit_method(400000, True, [100000, 100000, 100000])
        assert asc.method == "first-time"

    def test_base_above_current_qre_yields_zero_credit(self):
        asc = select_credit_method(100000, False, [900000, 900000, 900000])
        assert asc.excess_qre == 0
        assert asc.credit_amount == 0

    def test_short_history_averages_supplied_years(self):
        asc = select_credit_method(500000, False, [200000])
        assert asc.base_amount == pytest.approx(100000)
        assert asc.credit_amount == pytest.approx(56000)

    def test_zero_qre_is_valid(self):
        asc = select_credit_method(0, True, [])
        assert asc.credit_amount == 0
        assert asc.effective_credit_rate == 0


# =============================================================================
# ELECTION COMPARATOR
# =============================================================================

class TestCompareElections:
    """Full vs. reduced credit under Section 280C."""

    def test_reduced_credit_amount(self):
        options = compare_elections(57000)
        assert options.reduced_credit.amount == pytest.approx(45030)
        assert options.full_credit.amount == pytest.approx(57000)
        assert options.full_credit.deduction_reduction == pytest.approx(57000)
        assert options.reduced_credit.deduction_reduction == 0

    def test_tie_goes_to_reduced(self):
        options = compare_elections(57000)
        assert options.full_credit.net_benefit == options.reduced_credit.net_benefit
        assert options.recommendation == "reduced"
        assert options.reduced_credit.recommended is True
        assert options.full_credit.recommended is False
        assert "$0.00 advantage" in options.reasoning

    def test_recommended_option_property(self):
        options = compare_elections(96600)
        assert options.recommended_option is options.reduced_credit

    def test_custom_corporate_rate(self):
        options = compare_elections(10000, corporate_tax_rate=0.30)
        assert options.corporate_tax_rate == 0.30
        assert options.reduced_credit.amount == pytest.approx(7000)

    @pytest.mark.parametrize("credit", [0, 0.01, 1234.56, 57000, 96600, 333333.33, 2500000])
    def test_exactly_one_recommended_with_best_net(self, credit):
        options = compare_elections(credit)
        flags = [options.full_credit.recommended, options.reduced_credit.recommended]
        assert flags.count(True) == 1
        chosen = options.recommended_option
        other = options.full_credit if chosen is options.reduced_credit else options.reduced_credit
        assert chosen.net_benefit >= other.net_benefit

    @pytest.mark.parametrize("rate", [0.15, 0.21, 0.30, 0.35])
    @pytest.mark.parametrize("credit", [5.5, 40000.5, 12345.67, 57000, 99999.99])
    def test_tie_holds_across_rates(self, credit, rate):
        """Equal nets must never be split by rounding, whatever the rate."""
        options = compare_elections(credit, corporate_tax_rate=rate)
        assert options.full_credit.net_benefit == options.reduced_credit.net_benefit
        assert options.recommendation == "reduced"
        assert "$0.00 advantage" in options.reasoning

    def test_odd_cent_credit_at_15_percent(self):
        options = compare_elections(40000.5, corporate_tax_rate=0.15)
        assert options.recommendation == "reduced"
        assert options.reduced_credit.amount == pytest.approx(34000.42, abs=0.011)

    def test_zero_credit(self):
        options = compare_elections(0)
        assert options.reduced_credit.amount == 0
        assert options.recommendation == "reduced"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
