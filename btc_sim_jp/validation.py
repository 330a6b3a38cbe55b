"""Raw input validation for the accumulation and withdrawal simulators.

Every field is checked in one pass so that all problems can be shown at once.
The result holds either typed params or a {field: message} mapping, never both.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, TypeVar

from btc_sim_jp.params import (
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_INFLATION_RATE,
    DEFAULT_TAX_RATE,
    END_YEAR,
    GENESIS_YEAR,
    MAX_YEARS,
    MIN_YEARS,
    AccumulationParams,
    InitialInvestmentType,
    PriceModel,
    WithdrawalMode,
    WithdrawalParams,
    WithdrawalPhase,
)

MAX_RATE = 100.0

MSG_REQUIRED = "入力してください"
MSG_NOT_NUMBER = "数値を入力してください"
MSG_NEGATIVE = "0以上の値を入力してください"
MSG_NOT_INTEGER = "整数を入力してください"

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"", "0", "false", "no", "off", "none"}

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_*: params on success, errors otherwise."""

    params: AccumulationParams | WithdrawalParams | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class _Reader:
    """Collects per-field errors while converting raw values."""

    def __init__(self, raw: Mapping[str, Any]):
        self.raw = raw
        self.errors: dict[str, str] = {}

    def fail(self, key: str, message: str) -> None:
        # 1フィールド1メッセージ（最初の違反を優先）
        self.errors.setdefault(key, message)

    def _value(self, key: str) -> Any:
        v = self.raw.get(key)
        if isinstance(v, str):
            v = v.strip().replace(",", "")
            return v or None
        return v

    def number(
        self, key: str, *, default: float | None = None,
        minimum: float = 0.0, maximum: float | None = None,
        exclusive_min: bool = False, exclusive_max: bool = False,
    ) -> float | None:
        v = self._value(key)
        if v is None:
            if default is None:
                self.fail(key, MSG_REQUIRED)
            return default
        if isinstance(v, bool):
            self.fail(key, MSG_NOT_NUMBER)
            return None
        try:
            x = float(v)
        except (TypeError, ValueError):
            self.fail(key, MSG_NOT_NUMBER)
            return None
        if not math.isfinite(x):
            self.fail(key, MSG_NOT_NUMBER)
            return None
        if x < minimum or (exclusive_min and x == minimum):
            if minimum == 0 and not exclusive_min:
                self.fail(key, MSG_NEGATIVE)
            elif exclusive_min:
                self.fail(key, f"{minimum:g}より大きい値を入力してください")
            else:
                self.fail(key, f"{minimum:g}以上の値を入力してください")
            return None
        if maximum is not None and (x > maximum or (exclusive_max and x == maximum)):
            if exclusive_max:
                self.fail(key, f"{maximum:g}未満の値を入力してください")
            else:
                self.fail(key, f"{maximum:g}以下の値を入力してください")
            return None
        return x

    def integer(
        self, key: str, *, default: int | None = None,
        minimum: int = 0, maximum: int | None = None,
    ) -> int | None:
        x = self.number(key, default=default, minimum=-math.inf)
        if x is None:
            return None
        if not float(x).is_integer():
            self.fail(key, MSG_NOT_INTEGER)
            return None
        n = int(x)
        if n < minimum or (maximum is not None and n > maximum):
            if maximum is None:
                self.fail(key, MSG_NEGATIVE if minimum == 0 else f"{minimum}以上を指定してください")
            else:
                self.fail(key, f"{minimum}〜{maximum}の範囲で指定してください")
            return None
        return n

    def rate(self, key: str, *, default: float | None = None, exclusive_max: bool = False) -> float | None:
        return self.number(key, default=default, maximum=MAX_RATE, exclusive_max=exclusive_max)

    def choice(self, key: str, enum_type: type[E], *, default: E | None = None) -> E | None:
        v = self._value(key)
        if v is None:
            if default is None:
                self.fail(key, MSG_REQUIRED)
            return default
        if isinstance(v, enum_type):
            return v
        try:
            return enum_type(str(v).lower())
        except ValueError:
            allowed = ", ".join(m.value for m in enum_type)
            self.fail(key, f"{allowed} のいずれかを指定してください")
            return None

    def flag(self, key: str) -> bool:
        v = self.raw.get(key)
        if v is None or isinstance(v, bool):
            return bool(v)
        s = str(v).strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s not in _FALSE_STRINGS:
            self.fail(key, "true/false を指定してください")
        return False


def _current_year(reader: _Reader) -> int | None:
    return reader.integer(
        "current_year", default=date.today().year,
        minimum=GENESIS_YEAR, maximum=END_YEAR,
    )


def validate_accumulation_inputs(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate raw accumulation inputs.

    Only the initial amount matching initial_investment_type is required;
    the other one is ignored.
    """
    r = _Reader(raw)
    investment_type = r.choice("initial_investment_type", InitialInvestmentType)
    initial_investment = 0.0
    initial_btc_holding = 0.0
    if investment_type is InitialInvestmentType.JPY:
        initial_investment = r.number("initial_investment")
    elif investment_type is InitialInvestmentType.BTC:
        initial_btc_holding = r.number("initial_btc_holding")
    monthly_investment = r.number("monthly_investment")
    years = r.integer("years", minimum=MIN_YEARS, maximum=MAX_YEARS)
    price_model = r.choice("price_model", PriceModel, default=PriceModel.STANDARD)
    exchange_rate = r.number("exchange_rate", default=DEFAULT_EXCHANGE_RATE, exclusive_min=True)
    inflation_rate = r.rate("inflation_rate", default=DEFAULT_INFLATION_RATE)
    current_year = _current_year(r)

    if r.errors:
        return ValidationResult(errors=r.errors)
    return ValidationResult(params=AccumulationParams(
        initial_investment_type=investment_type,
        initial_investment=initial_investment,
        initial_btc_holding=initial_btc_holding,
        monthly_investment=monthly_investment,
        years=years,
        current_year=current_year,
        price_model=price_model,
        exchange_rate=exchange_rate,
        inflation_rate=inflation_rate,
    ))


def _read_phase(r: _Reader, prefix: str, start_year: int | None) -> WithdrawalPhase | None:
    """Read one phase; keys are <prefix>_type / _amount / _rate."""
    mode = r.choice(f"{prefix}_type", WithdrawalMode)
    amount = rate = None
    if mode is WithdrawalMode.FIXED:
        amount = r.number(f"{prefix}_amount")
    elif mode is WithdrawalMode.PERCENTAGE:
        rate = r.rate(f"{prefix}_rate")
    if mode is None or start_year is None or (amount is None and rate is None):
        return None
    return WithdrawalPhase(
        start_year=start_year, mode=mode,
        fixed_monthly_amount=amount, annual_rate_percent=rate,
    )


def validate_withdrawal_inputs(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate raw withdrawal inputs, including the optional second phase.

    second_phase_year must be strictly after start_year and no later than END_YEAR;
    a violation is reported against second_phase_year.
    """
    r = _Reader(raw)
    initial_btc = r.number("initial_btc")
    current_year = _current_year(r)
    start_year = r.integer(
        "start_year",
        minimum=current_year if current_year is not None else GENESIS_YEAR,
        maximum=END_YEAR,
    )
    phases = [_read_phase(r, "withdrawal", start_year)]

    if r.flag("second_phase"):
        second_year = r.integer("second_phase_year", minimum=GENESIS_YEAR, maximum=END_YEAR)
        if second_year is not None and start_year is not None and second_year <= start_year:
            r.fail("second_phase_year", f"取り崩し開始年（{start_year}年）より後の年を指定してください")
            second_year = None
        phases.append(_read_phase(r, "second_phase", second_year))

    price_model = r.choice("price_model", PriceModel, default=PriceModel.STANDARD)
    tax_rate = r.rate("tax_rate", default=DEFAULT_TAX_RATE, exclusive_max=True)
    exchange_rate = r.number("exchange_rate", default=DEFAULT_EXCHANGE_RATE, exclusive_min=True)
    inflation_rate = r.rate("inflation_rate", default=DEFAULT_INFLATION_RATE)

    if r.errors:
        return ValidationResult(errors=r.errors)
    return ValidationResult(params=WithdrawalParams(
        initial_btc=initial_btc,
        phases=tuple(phases),
        current_year=current_year,
        price_model=price_model,
        tax_rate=tax_rate,
        exchange_rate=exchange_rate,
        inflation_rate=inflation_rate,
    ))
