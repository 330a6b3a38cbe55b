"""Bitcoin long-term accumulation / withdrawal projection package."""

from btc_sim_jp.params import (
    AccumulationParams,
    WithdrawalParams,
    WithdrawalPhase,
    PriceModel,
    InitialInvestmentType,
    WithdrawalMode,
    GENESIS_DATE,
    END_YEAR,
    MIN_YEARS,
    MAX_YEARS,
)
from btc_sim_jp.errors import EngineError, InvalidYearError
from btc_sim_jp.price_model import (
    price_usd,
    price_jpy,
    model_coefficients,
)
from btc_sim_jp.validation import (
    ValidationResult,
    validate_accumulation_inputs,
    validate_withdrawal_inputs,
)
from btc_sim_jp.simulation import (
    YearlyAccumulationRecord,
    YearlyWithdrawalRecord,
    SimulationResult,
    simulate_accumulation,
    simulate_withdrawal,
    find_depletion_year,
    run_accumulation,
    run_withdrawal,
)
from btc_sim_jp.scenarios import compare_accumulation, compare_withdrawal

__all__ = [
    "AccumulationParams",
    "WithdrawalParams",
    "WithdrawalPhase",
    "PriceModel",
    "InitialInvestmentType",
    "WithdrawalMode",
    "GENESIS_DATE",
    "END_YEAR",
    "MIN_YEARS",
    "MAX_YEARS",
    "EngineError",
    "InvalidYearError",
    "price_usd",
    "price_jpy",
    "model_coefficients",
    "ValidationResult",
    "validate_accumulation_inputs",
    "validate_withdrawal_inputs",
    "YearlyAccumulationRecord",
    "YearlyWithdrawalRecord",
    "SimulationResult",
    "simulate_accumulation",
    "simulate_withdrawal",
    "find_depletion_year",
    "run_accumulation",
    "run_withdrawal",
    "compare_accumulation",
    "compare_withdrawal",
]
