"""Tests for the accumulation and withdrawal simulators."""

import dataclasses

import pytest
from btc_sim_jp import (
    END_YEAR,
    AccumulationParams,
    InitialInvestmentType,
    PriceModel,
    WithdrawalMode,
    WithdrawalParams,
    WithdrawalPhase,
    find_depletion_year,
    price_jpy,
    run_accumulation,
    run_withdrawal,
    simulate_accumulation,
    simulate_withdrawal,
)


def _dca(**overrides) -> AccumulationParams:
    kwargs = dict(
        initial_investment_type=InitialInvestmentType.BTC,
        initial_btc_holding=0.0,
        monthly_investment=10_000,
        years=10,
        current_year=2025,
        price_model=PriceModel.STANDARD,
        exchange_rate=150.0,
        inflation_rate=0.0,
    )
    kwargs.update(overrides)
    return AccumulationParams(**kwargs)


def _percentage_phase(start_year=2025, rate=4.0) -> WithdrawalPhase:
    return WithdrawalPhase(start_year=start_year, mode=WithdrawalMode.PERCENTAGE, annual_rate_percent=rate)


def _fixed_phase(start_year=2025, amount=200_000.0) -> WithdrawalPhase:
    return WithdrawalPhase(start_year=start_year, mode=WithdrawalMode.FIXED, fixed_monthly_amount=amount)


def _withdrawal(phases, **overrides) -> WithdrawalParams:
    kwargs = dict(
        initial_btc=1.0,
        phases=tuple(phases),
        current_year=2025,
        price_model=PriceModel.STANDARD,
        tax_rate=20.0,
        exchange_rate=150.0,
        inflation_rate=0.0,
    )
    kwargs.update(overrides)
    return WithdrawalParams(**kwargs)


class TestAccumulationScenario:
    """10年積立: 2025-2034 積立、2035-2050 放置"""

    def setup_method(self):
        self.result = simulate_accumulation(_dca())
        self.records = self.result.records

    def test_ok(self):
        assert self.result.ok
        assert self.result.error is None

    def test_one_record_per_year(self):
        assert [r.year for r in self.records] == list(range(2025, END_YEAR + 1))

    def test_investment_period_flags(self):
        for r in self.records:
            assert r.is_investment_period == (r.year <= 2034), r.year

    def test_holding_increases_while_investing(self):
        held = [r.btc_held_cumulative for r in self.records if r.is_investment_period]
        assert all(a < b for a, b in zip(held, held[1:]))

    def test_holding_constant_while_coasting(self):
        held = [r.btc_held_cumulative for r in self.records if r.year >= 2034]
        assert len(set(held)) == 1

    def test_annual_investment(self):
        assert self.records[0].annual_investment_jpy == 120_000
        assert self.records[-1].annual_investment_jpy == 0

    def test_purchase_uses_that_years_price(self):
        r = self.records[3]
        assert r.btc_price_jpy == pytest.approx(price_jpy(2028, PriceModel.STANDARD, 150.0))
        assert r.btc_purchased == pytest.approx(120_000 / r.btc_price_jpy)

    def test_conservation(self):
        prev = 0.0
        for r in self.records:
            assert r.btc_held_cumulative == pytest.approx(prev + r.btc_purchased, rel=1e-12)
            if not r.is_investment_period:
                assert r.btc_purchased == 0
            prev = r.btc_held_cumulative

    def test_total_value(self):
        for r in self.records:
            assert r.total_value_jpy == pytest.approx(r.btc_held_cumulative * r.btc_price_jpy)

    def test_value_keeps_growing_after_contributions(self):
        coasting = [r.total_value_jpy for r in self.records if not r.is_investment_period]
        assert all(a < b for a, b in zip(coasting, coasting[1:]))


class TestAccumulationInitialPosition:
    def test_btc_mode_starts_from_holding(self):
        records = simulate_accumulation(_dca(initial_btc_holding=0.5, monthly_investment=0)).records
        assert all(r.btc_held_cumulative == 0.5 for r in records)

    def test_jpy_mode_converted_at_first_year_price(self):
        params = _dca(
            initial_investment_type=InitialInvestmentType.JPY,
            initial_investment=1_500_000, monthly_investment=0,
        )
        first = simulate_accumulation(params).records[0]
        assert first.btc_held_cumulative == pytest.approx(1_500_000 / first.btc_price_jpy)
        assert first.total_value_jpy == pytest.approx(1_500_000)

    def test_jpy_mode_ignores_btc_holding(self):
        params = _dca(
            initial_investment_type=InitialInvestmentType.JPY,
            initial_investment=0, initial_btc_holding=3.0, monthly_investment=0,
        )
        assert simulate_accumulation(params).records[0].btc_held_cumulative == 0


class TestAccumulationInflation:
    def test_contribution_grows_with_inflation(self):
        records = simulate_accumulation(_dca(inflation_rate=2.0)).records
        assert records[0].annual_investment_jpy == pytest.approx(120_000)
        assert records[2].annual_investment_jpy == pytest.approx(120_000 * 1.02 ** 2)
        assert records[9].annual_investment_jpy == pytest.approx(120_000 * 1.02 ** 9)

    def test_inflation_buys_more_btc(self):
        flat = simulate_accumulation(_dca()).records[-1].btc_held_cumulative
        inflated = simulate_accumulation(_dca(inflation_rate=3.0)).records[-1].btc_held_cumulative
        assert inflated > flat


class TestAccumulationHorizon:
    def test_years_beyond_horizon(self):
        records = simulate_accumulation(_dca(current_year=2040, years=26)).records
        assert len(records) == 11
        assert all(r.is_investment_period for r in records)

    def test_start_in_final_year(self):
        records = simulate_accumulation(_dca(current_year=END_YEAR, years=1)).records
        assert len(records) == 1

    def test_engine_error_returned_not_raised(self):
        result = simulate_accumulation(_dca(current_year=2000))
        assert not result.ok
        assert "2000年" in result.error
        assert result.records == ()

    @pytest.mark.parametrize("overrides", [
        {"exchange_rate": 0.0},
        {"exchange_rate": float("nan")},
        {"monthly_investment": -10_000},
        {"monthly_investment": float("inf")},
        {"initial_investment_type": InitialInvestmentType.JPY, "initial_investment": -1.0},
        {"initial_btc_holding": -0.5},
    ])
    def test_unusable_params_returned_as_error(self, overrides):
        result = simulate_accumulation(_dca(**overrides))
        assert not result.ok
        assert result.records == ()

    def test_model_changes_result(self):
        std = simulate_accumulation(_dca()).records[-1].total_value_jpy
        con = simulate_accumulation(_dca(price_model=PriceModel.CONSERVATIVE)).records[-1].total_value_jpy
        assert std != con


class TestWithdrawalPercentage:
    """定率4%: 単位数は年4%ずつ減り、枯渇しない"""

    def setup_method(self):
        self.records = simulate_withdrawal(_withdrawal([_percentage_phase()])).records

    def test_first_year(self):
        assert self.records[0].year == 2025
        assert self.records[0].remaining_btc == pytest.approx(0.96)
        assert self.records[0].withdrawal_btc == pytest.approx(0.04)

    def test_second_year(self):
        assert self.records[1].remaining_btc == pytest.approx(0.96 ** 2)

    def test_strictly_decreasing_never_zero(self):
        remaining = [r.remaining_btc for r in self.records]
        assert all(a > b for a, b in zip(remaining, remaining[1:]))
        assert all(x > 0 for x in remaining)

    def test_no_depletion(self):
        assert find_depletion_year(self.records) is None

    def test_amount_is_share_of_value(self):
        r = self.records[0]
        assert r.withdrawal_amount_jpy == pytest.approx(1.0 * r.btc_price_jpy * 0.04)
        assert r.withdrawal_rate_or_amount == 4.0

    def test_total_value(self):
        for r in self.records:
            assert r.total_value_jpy == pytest.approx(r.remaining_btc * r.btc_price_jpy)

    def test_full_rate_depletes_exactly(self):
        records = simulate_withdrawal(_withdrawal([_percentage_phase(rate=100.0)])).records
        assert records[0].remaining_btc == 0
        assert records[0].withdrawal_btc == 1.0
        assert find_depletion_year(records) == 2025


class TestWithdrawalFixed:
    def test_gross_up(self):
        """手取り月8万・税率20% → 額面年120万"""
        records = simulate_withdrawal(_withdrawal([_fixed_phase(amount=80_000)])).records
        r = records[0]
        assert r.withdrawal_amount_jpy == pytest.approx(1_200_000)
        assert r.withdrawal_btc == pytest.approx(1_200_000 / r.btc_price_jpy)
        assert r.remaining_btc == pytest.approx(1.0 - r.withdrawal_btc)
        assert r.withdrawal_rate_or_amount == 80_000

    def test_inflation_adjusts_monthly_amount(self):
        params = _withdrawal([_fixed_phase(amount=80_000)], inflation_rate=2.0)
        records = simulate_withdrawal(params).records
        assert records[3].withdrawal_rate_or_amount == pytest.approx(80_000 * 1.02 ** 3)
        assert records[3].withdrawal_amount_jpy == pytest.approx(1_200_000 * 1.02 ** 3)

    def test_inflation_counts_from_start_year(self):
        params = _withdrawal([_fixed_phase(start_year=2030, amount=80_000)], inflation_rate=2.0)
        records = simulate_withdrawal(params).records
        assert records[0].year == 2030
        assert records[0].withdrawal_amount_jpy == pytest.approx(1_200_000)


class TestWithdrawalDepletion:
    def setup_method(self):
        # 0.01 BTC（約15万円）に対して年額数千万円 → 初年度で枯渇
        self.params = _withdrawal([_fixed_phase(amount=2_000_000)], initial_btc=0.01)
        self.records = simulate_withdrawal(self.params).records

    def test_sells_everything_in_first_year(self):
        r = self.records[0]
        assert r.withdrawal_btc == 0.01
        assert r.withdrawal_amount_jpy == pytest.approx(0.01 * r.btc_price_jpy)
        assert r.remaining_btc == 0

    def test_zero_after_depletion(self):
        for r in self.records[1:]:
            assert r.remaining_btc == 0
            assert r.withdrawal_btc == 0
            assert r.withdrawal_amount_jpy == 0
            assert r.total_value_jpy == 0

    def test_depletion_year(self):
        assert find_depletion_year(self.records) == 2025

    def test_deterministic(self):
        again = simulate_withdrawal(self.params).records
        assert find_depletion_year(again) == find_depletion_year(self.records)
        assert again == self.records

    def test_mid_horizon_depletion(self):
        params = _withdrawal([_fixed_phase(amount=300_000)], initial_btc=1.0)
        records = simulate_withdrawal(params).records
        year = find_depletion_year(records)
        assert year is not None and 2025 < year <= END_YEAR
        zero_seen = False
        for r in records:
            assert r.remaining_btc >= 0
            if zero_seen:
                assert r.remaining_btc == 0
            zero_seen = zero_seen or r.remaining_btc == 0

    def test_zero_initial_btc(self):
        records = simulate_withdrawal(_withdrawal([_percentage_phase()], initial_btc=0.0)).records
        assert all(r.remaining_btc == 0 and r.withdrawal_btc == 0 for r in records)


class TestWithdrawalPhases:
    def setup_method(self):
        self.phases = [_percentage_phase(rate=4.0), _fixed_phase(start_year=2030, amount=100_000)]
        self.records = simulate_withdrawal(_withdrawal(self.phases)).records

    def test_active_phase_switches_at_second_year(self):
        for r in self.records:
            expected = 1 if r.year < 2030 else 2
            assert r.active_phase == expected, r.year

    def test_mode_follows_phase(self):
        assert self.records[0].mode is WithdrawalMode.PERCENTAGE
        assert self.records[5].mode is WithdrawalMode.FIXED

    def test_no_retroactive_change(self):
        single = simulate_withdrawal(_withdrawal(self.phases[:1])).records
        assert self.records[:5] == single[:5]
        assert self.records[5] != single[5]

    def test_second_phase_amount(self):
        r = self.records[5]
        assert r.year == 2030
        assert r.withdrawal_amount_jpy == pytest.approx(100_000 / 0.8 * 12)

    def test_unordered_phases_rejected(self):
        phases = [_percentage_phase(start_year=2030), _fixed_phase(start_year=2025)]
        result = simulate_withdrawal(_withdrawal(phases))
        assert not result.ok
        assert result.records == ()

    @pytest.mark.parametrize("phases,overrides", [
        ([_fixed_phase()], {"exchange_rate": 0.0}),
        ([_percentage_phase()], {"exchange_rate": -150.0}),
        ([_fixed_phase()], {"tax_rate": 100.0}),
        ([_fixed_phase()], {"tax_rate": -5.0}),
        ([_percentage_phase()], {"initial_btc": float("nan")}),
        ([_fixed_phase(amount=-100_000)], {}),
        ([_percentage_phase(rate=-4.0)], {}),
    ])
    def test_unusable_params_returned_as_error(self, phases, overrides):
        result = simulate_withdrawal(_withdrawal(phases, **overrides))
        assert not result.ok
        assert result.records == ()

    def test_no_phase_rejected(self):
        result = simulate_withdrawal(_withdrawal([]))
        assert not result.ok

    def test_params_unchanged(self):
        params = _withdrawal(self.phases)
        before = dataclasses.replace(params)
        simulate_withdrawal(params)
        assert params == before


class TestRunHelpers:
    def test_run_accumulation_success(self):
        validation, result = run_accumulation({
            "initial_investment_type": "btc",
            "initial_btc_holding": "0",
            "monthly_investment": "10000",
            "years": "10",
            "current_year": "2025",
        })
        assert validation.ok
        assert result.ok
        assert len(result.records) == END_YEAR - 2025 + 1

    def test_run_accumulation_field_errors_skip_engine(self):
        validation, result = run_accumulation({
            "initial_investment_type": "btc",
            "initial_btc_holding": "0",
            "monthly_investment": "-1",
            "years": "0",
            "current_year": "2025",
        })
        assert len(validation.errors) == 2
        assert result is None

    def test_run_withdrawal_success(self):
        validation, result = run_withdrawal({
            "initial_btc": "1.0",
            "start_year": "2025",
            "withdrawal_type": "percentage",
            "withdrawal_rate": "4",
            "current_year": "2025",
        })
        assert result.ok
        assert result.records[0].remaining_btc == pytest.approx(0.96)

    def test_run_withdrawal_field_errors_skip_engine(self):
        validation, result = run_withdrawal({"current_year": "2025"})
        assert not validation.ok
        assert result is None
