"""Simulation parameters, model selectors and horizon constants."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from btc_sim_jp.tax import CAPITAL_GAINS_TAX_RATE

# Projection horizon
GENESIS_DATE = date(2009, 1, 3)  # ジェネシスブロック
GENESIS_YEAR = GENESIS_DATE.year
END_YEAR = 2050

# Input ranges
MIN_YEARS = 1
MAX_YEARS = 26  # 画面の選択肢（当年から26年分）

# Defaults for advanced options
DEFAULT_EXCHANGE_RATE = 150.0  # 円/USD
DEFAULT_INFLATION_RATE = 0.0   # %/年
DEFAULT_TAX_RATE = round(CAPITAL_GAINS_TAX_RATE * 100, 3)  # %
DEFAULT_YEARS = 10
DEFAULT_WITHDRAWAL_RATE = 4.0  # % 4%ルール


class PriceModel(Enum):
    """Power-law price model variant."""

    STANDARD = "standard"          # 2050年 1BTC=1000万ドル
    CONSERVATIVE = "conservative"  # 2050年 1BTC=400万ドル

    @property
    def label(self) -> str:
        if self is PriceModel.STANDARD:
            return "標準モデル"
        if self is PriceModel.CONSERVATIVE:
            return "保守的モデル"
        raise ValueError(f"Unknown price model: {self}")  # pragma: no cover


class InitialInvestmentType(Enum):
    """How the starting position of an accumulation plan is given."""

    BTC = "btc"  # すでにBTC保有
    JPY = "jpy"  # 日本円で投資


class WithdrawalMode(Enum):
    """Withdrawal policy of a phase."""

    FIXED = "fixed"            # 定額（月額、税引き後）
    PERCENTAGE = "percentage"  # 定率（年率）

    @property
    def label(self) -> str:
        if self is WithdrawalMode.FIXED:
            return "定額"
        if self is WithdrawalMode.PERCENTAGE:
            return "定率"
        raise ValueError(f"Unknown withdrawal mode: {self}")  # pragma: no cover


@dataclass(frozen=True)
class AccumulationParams:
    """Validated input of the accumulation (DCA) simulator.

    Amounts are JPY, rates are percent.
    """

    initial_investment_type: InitialInvestmentType
    monthly_investment: float
    years: int
    current_year: int
    initial_investment: float = 0.0   # 円（JPYモード）
    initial_btc_holding: float = 0.0  # BTC（BTCモード）
    price_model: PriceModel = PriceModel.STANDARD
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    inflation_rate: float = DEFAULT_INFLATION_RATE

    def is_investing(self, year: int) -> bool:
        """True while the year lies inside the contribution period."""
        return year - self.current_year < self.years


@dataclass(frozen=True)
class WithdrawalPhase:
    """A withdrawal policy active from start_year until the next phase starts."""

    start_year: int
    mode: WithdrawalMode
    fixed_monthly_amount: float | None = None  # 円/月（税引き後）
    annual_rate_percent: float | None = None   # %/年

    @property
    def rate_or_amount(self) -> float:
        if self.mode is WithdrawalMode.FIXED:
            return self.fixed_monthly_amount or 0.0
        if self.mode is WithdrawalMode.PERCENTAGE:
            return self.annual_rate_percent or 0.0
        raise ValueError(f"Unknown withdrawal mode: {self.mode}")  # pragma: no cover


@dataclass(frozen=True)
class WithdrawalParams:
    """Validated input of the withdrawal simulator.

    phases is ordered by start_year; the first phase starts at start_year.
    """

    initial_btc: float
    phases: tuple[WithdrawalPhase, ...]
    current_year: int
    price_model: PriceModel = PriceModel.STANDARD
    tax_rate: float = DEFAULT_TAX_RATE
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    inflation_rate: float = DEFAULT_INFLATION_RATE

    @property
    def start_year(self) -> int:
        return self.phases[0].start_year

    @property
    def has_second_phase(self) -> bool:
        return len(self.phases) > 1

    def active_phase(self, year: int) -> tuple[int, WithdrawalPhase]:
        """Return (1-based phase number, phase) in effect for the given year."""
        number, active = 1, self.phases[0]
        for i, phase in enumerate(self.phases):
            if phase.start_year <= year:
                number, active = i + 1, phase
        return number, active


def inflation_factor(rate_percent: float, years: int) -> float:
    """Cumulative growth factor for a constant annual rate (percent)."""
    if years <= 0:
        return 1.0
    return (1 + rate_percent / 100) ** years
