"""Tests for the financial derivation engine."""

from datetime import date
from decimal import Decimal

import pytest

from coop_lending.config import FeePolicy, RiskPolicy
from coop_lending.engine import (
    MAX_AMOUNT,
    add_months,
    calculate_disbursement,
    calculate_installment,
    calculate_maturity_date,
    debt_to_income,
    derive_terms,
    equivalent_flat_rate,
    months_between,
    net_received,
    round_currency,
    safe_divide,
    suggest_fees,
    to_amount,
    to_int,
)
from coop_lending.models.lending import InterestType, NominativeData


class TestAmounts:
    """Tests for numeric coercion and rounding."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "NaN", "inf", True, [1]])
    def test_invalid_input_becomes_zero(self, raw: object) -> None:
        assert to_amount(raw) == 0

    def test_numeric_strings_are_parsed(self) -> None:
        assert to_amount("1500.5") == Decimal("1500.5")
        assert to_amount(" 200 ") == Decimal("200")
        assert to_amount(12) == Decimal("12")

    def test_to_int_truncates(self) -> None:
        assert to_int("12.9") == 12
        assert to_int("x") == 0

    def test_round_currency_half_away_from_zero(self) -> None:
        assert round_currency(Decimal("2.5")) == 3
        assert round_currency(Decimal("2.49")) == 2
        assert round_currency(Decimal("-2.5")) == -3

    def test_safe_divide_by_zero(self) -> None:
        assert safe_divide(Decimal("10"), Decimal("0")) == 0
        assert safe_divide(Decimal("10"), Decimal("4")) == Decimal("2.5")

    @pytest.mark.parametrize("raw", ["1e30", "-1e16", Decimal("1e9999999"), 10**20])
    def test_out_of_range_magnitude_becomes_zero(self, raw: object) -> None:
        assert to_amount(raw) == 0
        assert round_currency(raw) == 0

    def test_upper_bound_is_accepted(self) -> None:
        assert to_amount(MAX_AMOUNT) == MAX_AMOUNT
        assert round_currency(MAX_AMOUNT) == MAX_AMOUNT


class TestCalculateInstallment:
    """Tests for installment computation."""

    def test_flat_interest(self) -> None:
        """Flat rate is monthly: P/n + P*r/100."""
        result = calculate_installment(10_000_000, 2, 12, InterestType.FLAT)
        assert result == Decimal("1033333")

    def test_annuity_matches_closed_form(self) -> None:
        principal, rate, n = 50_000_000, 35, 24
        i = rate / 100 / 12
        expected = principal * i / (1 - (1 + i) ** -n)

        result = calculate_installment(principal, rate, n, InterestType.ANNUITY)

        assert abs(float(result) - expected) <= 1
        assert result == result.to_integral_value()

    def test_annuity_zero_rate_is_straight_line(self) -> None:
        assert calculate_installment(12_000_000, 0, 7) == Decimal("1714286")

    def test_accepts_string_regime(self) -> None:
        assert calculate_installment(10_000_000, 2, 12, "FLAT") == Decimal("1033333")

    @pytest.mark.parametrize(
        ("principal", "tenure"),
        [(0, 12), (-5_000_000, 12), (10_000_000, 0), (10_000_000, -3), ("", 12), (10_000_000, "")],
    )
    def test_non_positive_inputs_give_zero(self, principal: object, tenure: object) -> None:
        assert calculate_installment(principal, 2, tenure, InterestType.FLAT) == 0
        assert calculate_installment(principal, 24, tenure, InterestType.ANNUITY) == 0

    @pytest.mark.parametrize(
        ("principal", "rate", "tenure"),
        [
            ("1e30", 0, 12),
            ("1e9999999", 10, 12),
            (Decimal("1e9999999"), 10, 12),
            (10_000_000, "1e30", 12),
            (MAX_AMOUNT, MAX_AMOUNT, MAX_AMOUNT),
        ],
    )
    def test_extreme_inputs_never_raise(self, principal: object, rate: object, tenure: object) -> None:
        for regime in InterestType:
            result = calculate_installment(principal, rate, tenure, regime)
            assert isinstance(result, Decimal)
            assert result >= 0

    def test_oversized_principal_gives_zero(self) -> None:
        assert calculate_installment("1e30", 0, 12) == 0
        assert calculate_installment("1e9999999", 10, 12) == 0

    @pytest.mark.parametrize("regime", [InterestType.ANNUITY, InterestType.FLAT])
    def test_negative_rate_counts_as_zero(self, regime: InterestType) -> None:
        """A rate of -2400% a year would otherwise divide by zero."""
        assert calculate_installment(10_000_000, -2400, 12, regime) == Decimal("833333")
        assert calculate_installment(10_000_000, "-1", 12, regime) == Decimal("833333")

    def test_equivalent_flat_rate(self) -> None:
        # 1.2M total interest over 12 months on 12M -> 0.83% a month
        assert equivalent_flat_rate(12_000_000, 1_100_000, 12) == Decimal("0.83")
        assert equivalent_flat_rate(0, 1_100_000, 12) == 0


class TestCalendar:
    """Tests for month arithmetic."""

    def test_add_months_keeps_day(self) -> None:
        assert add_months(date(2025, 12, 15), 2) == date(2026, 2, 15)
        assert add_months(date(2025, 3, 31), 12) == date(2026, 3, 31)

    def test_add_months_rolls_over_missing_day(self) -> None:
        assert add_months(date(2025, 1, 31), 1) == date(2025, 3, 3)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 3, 2)

    def test_months_between_counts_whole_months(self) -> None:
        assert months_between(date(2025, 1, 10), date(2025, 12, 17)) == 11
        assert months_between(date(2025, 1, 20), date(2025, 12, 17)) == 10
        assert months_between(date(2025, 1, 10), date(2025, 1, 10)) == 0

    def test_months_between_negative_when_reversed(self) -> None:
        assert months_between(date(2025, 6, 1), date(2025, 3, 1)) == -3

    def test_maturity_date(self) -> None:
        assert calculate_maturity_date(date(2025, 1, 10), 24) == date(2027, 1, 10)
        assert calculate_maturity_date(None, 24) is None
        assert calculate_maturity_date(date(2025, 1, 10), 0) is None

    @pytest.mark.parametrize("tenure", [10**6, 10**15, MAX_AMOUNT])
    def test_maturity_beyond_calendar_is_unset(self, tenure: object) -> None:
        assert calculate_maturity_date(date(2025, 1, 10), tenure) is None

    @pytest.mark.parametrize("start", [date(2024, 1, 1), date(2025, 2, 28), date(2023, 7, 15)])
    def test_months_between_inverts_add_months(self, start: date) -> None:
        """Whole-month offsets survive a round trip for days 1-28."""
        for months in range(1, 361):
            assert months_between(start, add_months(start, months)) == months


class TestDeriveTerms:
    """Tests for derived installment and maturity."""

    def test_recomputes_installment_and_maturity(self, sample_nominative: NominativeData) -> None:
        assert sample_nominative.monthly_installment == calculate_installment(50_000_000, 35, 24)
        assert sample_nominative.maturity_date == date(2027, 1, 10)

    def test_does_not_mutate_input(self) -> None:
        terms = NominativeData(loan_amount=Decimal("10000000"), interest_rate=Decimal("2"),
                               interest_type=InterestType.FLAT, tenure_months=12)
        derived = derive_terms(terms)

        assert terms.monthly_installment == 0
        assert derived.monthly_installment == Decimal("1033333")

    def test_clears_derived_fields_without_principal(self, sample_nominative: NominativeData) -> None:
        from dataclasses import replace

        derived = derive_terms(replace(sample_nominative, loan_amount=Decimal("0")))

        assert derived.monthly_installment == 0
        assert derived.maturity_date is None

    def test_no_maturity_without_disbursement_date(self) -> None:
        terms = NominativeData(loan_amount=Decimal("10000000"), tenure_months=12)
        assert derive_terms(terms).maturity_date is None


class TestDisbursement:
    """Tests for net disbursement."""

    def test_breakdown_of_sample_loan(self, sample_nominative: NominativeData) -> None:
        breakdown = calculate_disbursement(sample_nominative)

        assert breakdown.total_monthly_payment == sample_nominative.monthly_installment + 100_000
        assert breakdown.upfront_deductions == Decimal("10520000")
        assert breakdown.prepaid_installments == 0
        assert breakdown.other_allocations == 0
        assert breakdown.net_received == Decimal("36980000")
        assert breakdown.total_deductions == Decimal("13020000")

    def test_blocked_and_payoff_allocations(self) -> None:
        terms = NominativeData(
            loan_amount=Decimal("20000000"),
            monthly_installment=Decimal("1000000"),
            mandatory_savings=Decimal("100000"),
            blocked_installment_count=2,
            blocked_amount_sk=Decimal("1000000"),
            flagging_fee=Decimal("50000"),
            repayment_amount=Decimal("5000000"),
        )

        breakdown = calculate_disbursement(terms)

        assert breakdown.prepaid_installments == Decimal("2200000")
        assert breakdown.other_allocations == Decimal("6050000")
        assert breakdown.net_received == Decimal("11750000")
        assert net_received(terms) == breakdown.net_received

    def test_net_can_go_negative(self) -> None:
        terms = NominativeData(loan_amount=Decimal("1000000"), repayment_amount=Decimal("3000000"))
        assert net_received(terms) == Decimal("-2000000")

    def test_empty_terms_net_zero(self) -> None:
        assert net_received(NominativeData()) == 0

    @pytest.mark.parametrize(
        "field_name",
        [
            "risk_reserve",
            "admin_fee",
            "provision_fee",
            "principal_savings",
            "blocked_amount_sk",
            "flagging_fee",
            "repayment_amount",
            "marketing_fee",
        ],
    )
    def test_each_deduction_lowers_net_by_its_amount(
        self, sample_nominative: NominativeData, field_name: str
    ) -> None:
        from dataclasses import replace

        delta = Decimal("250000")
        raised = replace(
            sample_nominative, **{field_name: getattr(sample_nominative, field_name) + delta}
        )

        assert net_received(raised) == net_received(sample_nominative) - delta


class TestSuggestFees:
    """Tests for advisory fee defaults."""

    def test_defaults_for_principal(self) -> None:
        fees = suggest_fees(100_000_000)

        assert fees["admin_fee"] == Decimal("7500000")
        assert fees["provision_fee"] == Decimal("2500000")
        assert fees["marketing_fee"] == Decimal("5000000")
        assert fees["risk_reserve"] == Decimal("11000000")
        assert fees["principal_savings"] == Decimal("20000")
        assert fees["mandatory_savings"] == Decimal("100000")

    def test_zero_principal_gives_zero_fees(self) -> None:
        assert all(amount == 0 for amount in suggest_fees(0).values())

    def test_custom_policy(self) -> None:
        policy = FeePolicy(admin_rate=Decimal("0.01"))
        assert suggest_fees(10_000_000, policy)["admin_fee"] == Decimal("100000")

    def test_rounded_to_whole_units(self) -> None:
        assert suggest_fees(1_234_567)["admin_fee"] == Decimal("92593")

    def test_oversized_principal_gives_zero_fees(self) -> None:
        assert all(amount == 0 for amount in suggest_fees("1e30").values())


class TestDebtToIncome:
    """Tests for the debt burden ratio."""

    def test_ratio(self) -> None:
        result = debt_to_income(2_000_000, 4_000_000)
        assert result.ratio == Decimal("50.00")
        assert result.is_high is False

    def test_high_ratio_flagged(self) -> None:
        assert debt_to_income(3_960_000, 4_000_000).is_high is True
        assert debt_to_income(3_920_000, 4_000_000).is_high is False

    def test_oversized_inputs_do_not_raise(self) -> None:
        assert debt_to_income("1e30", "1e-20").ratio == 0
        assert debt_to_income(2_000_000, "1e9999999").ratio == 0

    def test_zero_salary(self) -> None:
        result = debt_to_income(2_000_000, 0)
        assert result.ratio == 0
        assert result.is_high is False

    def test_threshold_from_policy(self) -> None:
        assert debt_to_income(2_000_000, 4_000_000, RiskPolicy(high_dbr_threshold=Decimal("40"))).is_high
