"""Core projection engine: accumulation (DCA) and withdrawal simulators."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from btc_sim_jp.params import (
    END_YEAR,
    AccumulationParams,
    InitialInvestmentType,
    WithdrawalMode,
    WithdrawalParams,
    inflation_factor,
)
from btc_sim_jp.errors import EngineError
from btc_sim_jp.price_model import price_jpy
from btc_sim_jp.tax import annual_gross_withdrawal
from btc_sim_jp.validation import (
    ValidationResult,
    validate_accumulation_inputs,
    validate_withdrawal_inputs,
)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class YearlyAccumulationRecord:
    year: int
    btc_price_jpy: float
    annual_investment_jpy: float
    btc_purchased: float
    btc_held_cumulative: float
    total_value_jpy: float
    is_investment_period: bool


@dataclass(frozen=True)
class YearlyWithdrawalRecord:
    year: int
    btc_price_jpy: float
    active_phase: int  # 1 or 2
    mode: WithdrawalMode
    withdrawal_rate_or_amount: float  # FIXED: 税引き後月額（円）, PERCENTAGE: 年率（%）
    withdrawal_amount_jpy: float
    withdrawal_btc: float
    remaining_btc: float
    total_value_jpy: float


@dataclass(frozen=True)
class SimulationResult:
    """Fully materialized yearly series, or a run-level error message."""

    records: tuple = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _require_amount(name: str, value: float | None) -> None:
    if value is None or not math.isfinite(value) or value < 0:
        raise EngineError(f"{name}が不正です: {value}")


def _require_exchange_rate(value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise EngineError(f"為替レートは0より大きい値が必要です: {value}")


def _check_accumulation_params(params: AccumulationParams) -> None:
    """Reject values the arithmetic cannot handle (for params built without validation)."""
    _require_exchange_rate(params.exchange_rate)
    _require_amount("インフレ率", params.inflation_rate)
    _require_amount("毎月積立額", params.monthly_investment)
    _require_amount("初期投資額", params.initial_investment)
    _require_amount("初期保有BTC", params.initial_btc_holding)


def _initial_btc(params: AccumulationParams) -> float:
    """BTC held just before the first simulated year."""
    if params.initial_investment_type is InitialInvestmentType.BTC:
        return params.initial_btc_holding
    if params.initial_investment_type is InitialInvestmentType.JPY:
        # 初年度の価格で円→BTC換算
        first_price = price_jpy(params.current_year, params.price_model, params.exchange_rate)
        return params.initial_investment / first_price
    raise EngineError(f"未対応の初期投資方法です: {params.initial_investment_type}")


def _accumulate(params: AccumulationParams) -> tuple[YearlyAccumulationRecord, ...]:
    btc_held = _initial_btc(params)
    base_annual = params.monthly_investment * MONTHS_PER_YEAR
    records = []
    for year in range(params.current_year, END_YEAR + 1):
        btc_price = price_jpy(year, params.price_model, params.exchange_rate)
        investing = params.is_investing(year)
        if investing:
            annual_investment = base_annual * inflation_factor(
                params.inflation_rate, year - params.current_year
            )
            btc_purchased = annual_investment / btc_price
        else:
            annual_investment = 0.0
            btc_purchased = 0.0
        btc_held += btc_purchased
        records.append(YearlyAccumulationRecord(
            year=year,
            btc_price_jpy=btc_price,
            annual_investment_jpy=annual_investment,
            btc_purchased=btc_purchased,
            btc_held_cumulative=btc_held,
            total_value_jpy=btc_held * btc_price,
            is_investment_period=investing,
        ))
    return tuple(records)


def simulate_accumulation(params: AccumulationParams) -> SimulationResult:
    """Project a recurring-purchase plan from current_year through END_YEAR.

    Purchases run for params.years years; afterwards the holding only
    appreciates. The monthly amount grows with inflation_rate each year.
    """
    try:
        _check_accumulation_params(params)
        records = _accumulate(params)
    except EngineError as e:
        return SimulationResult(error=str(e))
    if not records:
        return SimulationResult(error=f"開始年{params.current_year}年が{END_YEAR}年を超えています")
    return SimulationResult(records=records)


def _requested_withdrawal_btc(
    params: WithdrawalParams, mode: WithdrawalMode, rate_or_amount: float,
    remaining_btc: float, btc_price: float,
) -> float:
    if mode is WithdrawalMode.FIXED:
        return annual_gross_withdrawal(rate_or_amount, params.tax_rate) / btc_price
    if mode is WithdrawalMode.PERCENTAGE:
        return remaining_btc * rate_or_amount / 100
    raise EngineError(f"未対応の取り崩し方法です: {mode}")


def _withdraw(params: WithdrawalParams) -> tuple[YearlyWithdrawalRecord, ...]:
    remaining = params.initial_btc
    records = []
    for year in range(params.start_year, END_YEAR + 1):
        btc_price = price_jpy(year, params.price_model, params.exchange_rate)
        phase_number, phase = params.active_phase(year)
        rate_or_amount = phase.rate_or_amount
        if phase.mode is WithdrawalMode.FIXED:
            # 生活費（税引き後月額）は取り崩し開始年からインフレ調整
            rate_or_amount *= inflation_factor(params.inflation_rate, year - params.start_year)

        if remaining > 0:
            requested_btc = _requested_withdrawal_btc(
                params, phase.mode, rate_or_amount, remaining, btc_price,
            )
            if requested_btc >= remaining:
                # 残高不足: 全量売却して枯渇
                withdrawal_btc = remaining
                withdrawal_jpy = remaining * btc_price
                remaining = 0.0
            else:
                withdrawal_btc = requested_btc
                withdrawal_jpy = requested_btc * btc_price
                remaining -= withdrawal_btc
        else:
            withdrawal_btc = 0.0
            withdrawal_jpy = 0.0

        records.append(YearlyWithdrawalRecord(
            year=year,
            btc_price_jpy=btc_price,
            active_phase=phase_number,
            mode=phase.mode,
            withdrawal_rate_or_amount=rate_or_amount,
            withdrawal_amount_jpy=withdrawal_jpy,
            withdrawal_btc=withdrawal_btc,
            remaining_btc=remaining,
            total_value_jpy=remaining * btc_price,
        ))
    return tuple(records)


def _check_withdrawal_params(params: WithdrawalParams) -> None:
    _require_exchange_rate(params.exchange_rate)
    _require_amount("インフレ率", params.inflation_rate)
    _require_amount("保有BTC", params.initial_btc)
    if not math.isfinite(params.tax_rate) or not 0 <= params.tax_rate < 100:
        raise EngineError(f"税率は0以上100未満で指定してください: {params.tax_rate}")
    for phase in params.phases:
        _require_amount(f"{phase.start_year}年からの取り崩し設定", phase.rate_or_amount)


def simulate_withdrawal(params: WithdrawalParams) -> SimulationResult:
    """Project withdrawals from start_year through END_YEAR.

    The active phase decides each year's policy. Once the holding is
    exhausted, every later year reports zero withdrawal and zero balance.
    """
    if not params.phases:
        return SimulationResult(error="取り崩しフェーズが設定されていません")
    starts = [p.start_year for p in params.phases]
    if starts != sorted(set(starts)):
        return SimulationResult(error="取り崩しフェーズの開始年が昇順になっていません")
    try:
        _check_withdrawal_params(params)
        records = _withdraw(params)
    except EngineError as e:
        return SimulationResult(error=str(e))
    if not records:
        return SimulationResult(error=f"取り崩し開始年{params.start_year}年が{END_YEAR}年を超えています")
    return SimulationResult(records=records)


def find_depletion_year(records: tuple[YearlyWithdrawalRecord, ...]) -> int | None:
    """First year whose remaining balance is zero, or None if funds last."""
    for record in records:
        if record.remaining_btc <= 0:
            return record.year
    return None


def run_accumulation(raw: Mapping[str, Any]) -> tuple[ValidationResult, SimulationResult | None]:
    """Validate raw inputs and simulate; the simulation is skipped on field errors."""
    validation = validate_accumulation_inputs(raw)
    if not validation.ok:
        return validation, None
    return validation, simulate_accumulation(validation.params)


def run_withdrawal(raw: Mapping[str, Any]) -> tuple[ValidationResult, SimulationResult | None]:
    """Validate raw inputs and simulate; the simulation is skipped on field errors."""
    validation = validate_withdrawal_inputs(raw)
    if not validation.ok:
        return validation, None
    return validation, simulate_withdrawal(validation.params)
