"""Run one parameter set under every price model for side-by-side comparison."""

import dataclasses

from btc_sim_jp.params import AccumulationParams, PriceModel, WithdrawalParams
from btc_sim_jp.simulation import (
    SimulationResult,
    simulate_accumulation,
    simulate_withdrawal,
)

SCENARIOS: tuple[PriceModel, ...] = (PriceModel.STANDARD, PriceModel.CONSERVATIVE)


def compare_accumulation(params: AccumulationParams) -> dict[PriceModel, SimulationResult]:
    """Accumulation results keyed by price model (params.price_model is overridden)."""
    return {
        model: simulate_accumulation(dataclasses.replace(params, price_model=model))
        for model in SCENARIOS
    }


def compare_withdrawal(params: WithdrawalParams) -> dict[PriceModel, SimulationResult]:
    """Withdrawal results keyed by price model (params.price_model is overridden)."""
    return {
        model: simulate_withdrawal(dataclasses.replace(params, price_model=model))
        for model in SCENARIOS
    }
