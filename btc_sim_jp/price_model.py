"""Power-law BTC price model.

log10(price) = intercept + slope * log10(days since genesis)

Both variants share the present-day reference anchor and differ only in the
2050 target, so each is a straight line on a log-log plot pinned by two points.
"""

import math
from datetime import date
from functools import cache

from btc_sim_jp.errors import EngineError, InvalidYearError
from btc_sim_jp.params import END_YEAR, GENESIS_DATE, GENESIS_YEAR, PriceModel

# Calibration anchors (mid-year dates)
REFERENCE_DATE = date(2025, 7, 2)
REFERENCE_PRICE_USD = 100_000.0
TARGET_DATE = date(END_YEAR, 7, 2)
TARGET_PRICES_USD: dict[PriceModel, float] = {
    PriceModel.STANDARD: 10_000_000.0,
    PriceModel.CONSERVATIVE: 4_000_000.0,
}


def year_midpoint(year: int) -> date:
    """Mid-point of a calendar year (2 July)."""
    return date(year, 7, 2)


def days_since_genesis(year: int) -> int:
    """Days from the genesis block to the mid-point of year.

    Raises InvalidYearError for years before the genesis year.
    """
    if year < GENESIS_YEAR:
        raise InvalidYearError(
            f"{year}年はモデルの対象外です（{GENESIS_YEAR}年以降を指定してください）"
        )
    return (year_midpoint(year) - GENESIS_DATE).days


@cache
def model_coefficients(model: PriceModel) -> tuple[float, float]:
    """Return (slope, intercept) solved from the two anchor points."""
    if model not in TARGET_PRICES_USD:
        raise EngineError(f"未対応の価格モデルです: {model}")
    x0 = math.log10((REFERENCE_DATE - GENESIS_DATE).days)
    x1 = math.log10((TARGET_DATE - GENESIS_DATE).days)
    y0 = math.log10(REFERENCE_PRICE_USD)
    y1 = math.log10(TARGET_PRICES_USD[model])
    slope = (y1 - y0) / (x1 - x0)
    intercept = y0 - slope * x0
    return slope, intercept


def price_usd(year: int, model: PriceModel) -> float:
    """Projected BTC/USD price at the mid-point of year."""
    slope, intercept = model_coefficients(model)
    d = days_since_genesis(year)
    return 10 ** (intercept + slope * math.log10(d))


def price_jpy(year: int, model: PriceModel, exchange_rate: float) -> float:
    """Projected BTC/JPY price; the exchange rate is held constant."""
    return price_usd(year, model) * exchange_rate


def price_curve(start_year: int, end_year: int, model: PriceModel) -> list[tuple[int, float]]:
    """[(year, usd_price), ...] for start_year..end_year inclusive."""
    return [(y, price_usd(y, model)) for y in range(start_year, end_year + 1)]
