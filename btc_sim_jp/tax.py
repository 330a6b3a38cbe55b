"""Tax gross-up for after-tax withdrawal targets."""

from btc_sim_jp.errors import EngineError

# 暗号資産の分離課税（所得税15.315%+住民税5%）を想定した既定税率
CAPITAL_GAINS_TAX_RATE = 0.20315


def gross_up(net_amount: float, tax_rate_percent: float) -> float:
    """Pre-tax amount that leaves net_amount after tax.

    gross = net / (1 - rate). The whole withdrawal is treated as taxable
    (cost basis is not tracked). Raises EngineError for rates of 100% or more.
    """
    rate = tax_rate_percent / 100
    if rate >= 1:
        raise EngineError(f"税率{tax_rate_percent}%では税引き前の金額を計算できません")
    return net_amount / (1 - rate)


def annual_gross_withdrawal(monthly_net: float, tax_rate_percent: float) -> float:
    """Annual pre-tax JPY withdrawal for a monthly after-tax spending target."""
    return gross_up(monthly_net, tax_rate_percent) * 12
