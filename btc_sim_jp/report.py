"""Highlights and text formatting of simulation results."""

from dataclasses import dataclass

from btc_sim_jp.params import (
    AccumulationParams,
    InitialInvestmentType,
    WithdrawalMode,
    WithdrawalParams,
)
from btc_sim_jp.simulation import (
    YearlyAccumulationRecord,
    YearlyWithdrawalRecord,
    find_depletion_year,
)

HIGHLIGHT_OFFSETS = (5, 10)  # 5年後・10年後の資産


def format_yen(value: float, decimals: int = 2) -> str:
    """Format JPY with 億/万 units: 123456789 → '1.23億円'."""
    sign = "-" if value < 0 else ""
    v = abs(value)
    if v >= 1e8:
        return f"{sign}{v / 1e8:,.{decimals}f}億円"
    if v >= 1e4:
        return f"{sign}{v / 1e4:,.{decimals}f}万円"
    return f"{sign}{v:,.0f}円"


def format_btc(value: float, decimals: int = 4) -> str:
    return f"{value:,.{decimals}f} BTC"


def format_percent(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}%"


def value_in_year(records: tuple, year: int) -> float | None:
    """total_value_jpy of the record for year, or None if outside the series."""
    for record in records:
        if record.year == year:
            return record.total_value_jpy
    return None


@dataclass(frozen=True)
class AccumulationHighlights:
    initial_label: str
    monthly_investment: float
    values_after: dict[int, float | None]  # 経過年数 → 資産評価額
    final_year: int
    final_value: float
    final_btc: float
    total_invested_jpy: float


@dataclass(frozen=True)
class WithdrawalHighlights:
    initial_btc: float
    depletion_year: int | None
    years_lasted: int | None
    values_after: dict[int, float | None]
    final_year: int
    final_value: float
    total_withdrawn_jpy: float

    @property
    def depletion_label(self) -> str:
        if self.depletion_year is None:
            return f"{self.final_year}年以降も維持"
        return f"{self.depletion_year}年（{self.years_lasted}年間）"


def accumulation_highlights(
    params: AccumulationParams, records: tuple[YearlyAccumulationRecord, ...],
) -> AccumulationHighlights:
    if params.initial_investment_type is InitialInvestmentType.JPY:
        initial_label = format_yen(params.initial_investment)
    else:
        initial_label = format_btc(params.initial_btc_holding)
    last = records[-1]
    total_invested = sum(r.annual_investment_jpy for r in records)
    if params.initial_investment_type is InitialInvestmentType.JPY:
        total_invested += params.initial_investment
    return AccumulationHighlights(
        initial_label=initial_label,
        monthly_investment=params.monthly_investment,
        values_after={n: value_in_year(records, params.current_year + n) for n in HIGHLIGHT_OFFSETS},
        final_year=last.year,
        final_value=last.total_value_jpy,
        final_btc=last.btc_held_cumulative,
        total_invested_jpy=total_invested,
    )


def withdrawal_highlights(
    params: WithdrawalParams, records: tuple[YearlyWithdrawalRecord, ...],
) -> WithdrawalHighlights:
    depletion_year = find_depletion_year(records)
    last = records[-1]
    return WithdrawalHighlights(
        initial_btc=params.initial_btc,
        depletion_year=depletion_year,
        years_lasted=None if depletion_year is None else depletion_year - params.start_year,
        values_after={n: value_in_year(records, params.current_year + n) for n in HIGHLIGHT_OFFSETS},
        final_year=last.year,
        final_value=last.total_value_jpy,
        total_withdrawn_jpy=sum(r.withdrawal_amount_jpy for r in records),
    )


def accumulation_table(records: tuple[YearlyAccumulationRecord, ...]) -> list[str]:
    """Yearly log lines (header first)."""
    lines = [
        f"{'年':<6} {'BTC価格':>14} {'年間積立額':>14} {'追加BTC量':>16} {'BTC保有量':>16} {'資産評価額':>14}",
    ]
    for r in records:
        mark = "" if r.is_investment_period else " *"
        lines.append(
            f"{r.year:<6} {format_yen(r.btc_price_jpy):>14} {format_yen(r.annual_investment_jpy):>14} "
            f"{format_btc(r.btc_purchased):>16} {format_btc(r.btc_held_cumulative):>16} "
            f"{format_yen(r.total_value_jpy):>14}{mark}"
        )
    return lines


def withdrawal_table(records: tuple[YearlyWithdrawalRecord, ...], show_phase: bool = False) -> list[str]:
    """Yearly log lines (header first). show_phase adds the active phase column."""
    phase_header = f"{'段階':<4} " if show_phase else ""
    lines = [
        f"{'年':<6} {phase_header}{'BTC価格':>14} {'取り崩し':>14} {'取り崩し額':>14} "
        f"{'取り崩しBTC':>16} {'残りBTC':>16} {'資産評価額':>14}",
    ]
    for r in records:
        phase_col = f"{r.active_phase:<4} " if show_phase else ""
        if r.mode is WithdrawalMode.FIXED:
            setting = f"{format_yen(r.withdrawal_rate_or_amount)}/月"
        else:
            setting = format_percent(r.withdrawal_rate_or_amount)
        lines.append(
            f"{r.year:<6} {phase_col}{format_yen(r.btc_price_jpy):>14} {setting:>14} "
            f"{format_yen(r.withdrawal_amount_jpy):>14} {format_btc(r.withdrawal_btc):>16} "
            f"{format_btc(r.remaining_btc):>16} {format_yen(r.total_value_jpy):>14}"
        )
    return lines
