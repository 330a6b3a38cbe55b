"""Chart generation for BTC projection results."""

import platform
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from btc_sim_jp.params import PriceModel
from btc_sim_jp.price_model import price_curve

BTC_COLOR = "#34D399"    # green
VALUE_COLOR = "#60A5FA"  # blue
MODEL_COLORS = {
    PriceModel.STANDARD: "#f59e0b",      # amber
    PriceModel.CONSERVATIVE: "#7f7f7f",  # gray
}


def _setup_japanese_font():
    """Configure matplotlib to use a Japanese font."""
    system = platform.system()
    if system == "Darwin":
        font_family = "Hiragino Sans"
    elif system == "Linux":
        font_family = "Noto Sans CJK JP"
    else:
        font_family = "sans-serif"
    plt.rcParams["font.family"] = font_family
    plt.rcParams["axes.unicode_minus"] = False


def _format_oku_axis(ax: plt.Axes):
    """Y axis in 億円."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x / 1e8:,.1f}億" if x != 0 else "0")
    )


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_holdings(
    years: list[int],
    btc: list[float],
    values: list[float],
    output_path: Path,
    title: str,
    stem: str,
    name: str = "",
    marker_year: int | None = None,
    marker_label: str = "",
) -> Path:
    """Two-axis line chart: BTC holding (left) and JPY valuation (right).

    Args:
        marker_year: optional vertical marker (end of contributions, depletion year).

    Returns:
        Path to the generated PNG file.
    """
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(14, 8))
    ax.plot(years, btc, color=BTC_COLOR, linewidth=2, label="BTC保有量")
    ax.set_xlabel("年")
    ax.set_ylabel("BTC保有量", color=BTC_COLOR)
    ax.grid(True, alpha=0.3)

    ax_value = ax.twinx()
    ax_value.plot(years, values, color=VALUE_COLOR, linewidth=2, label="資産評価額")
    ax_value.set_ylabel("資産評価額（円）", color=VALUE_COLOR)
    _format_oku_axis(ax_value)

    if marker_year is not None:
        ax.axvline(marker_year, color="#888888", linewidth=1.0, linestyle=":")
        ax.annotate(
            marker_label or f"{marker_year}年",
            xy=(marker_year, ax.get_ylim()[1] * 0.9),
            fontsize=11, ha="center",
            bbox=dict(boxstyle="round,pad=0.4", fc="white", ec="#888888", alpha=0.9),
        )

    lines = ax.get_lines()[:1] + ax_value.get_lines()[:1]
    ax.legend(lines, [line.get_label() for line in lines], loc="upper left")
    ax.set_title(title)
    return _save(fig, output_path, stem, name)


def plot_accumulation(result_records: tuple, output_path: Path, title: str, name: str = "") -> Path:
    """Accumulation chart; the marker shows the last contribution year."""
    years = [r.year for r in result_records]
    investing = [r.year for r in result_records if r.is_investment_period]
    return plot_holdings(
        years,
        [r.btc_held_cumulative for r in result_records],
        [r.total_value_jpy for r in result_records],
        output_path, title, "accumulation", name,
        marker_year=investing[-1] if investing and investing[-1] != years[-1] else None,
        marker_label="積立終了",
    )


def plot_withdrawal(
    result_records: tuple, output_path: Path, title: str, name: str = "",
    depletion_year: int | None = None,
) -> Path:
    """Withdrawal chart; the marker shows the depletion year if any."""
    return plot_holdings(
        [r.year for r in result_records],
        [r.remaining_btc for r in result_records],
        [r.total_value_jpy for r in result_records],
        output_path, title, "withdrawal", name,
        marker_year=depletion_year,
        marker_label=f"{depletion_year}年 枯渇" if depletion_year else "",
    )


def plot_price_models(start_year: int, end_year: int, output_path: Path, name: str = "") -> Path:
    """Log-scale USD price curve of every price model."""
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(14, 8))
    for model in PriceModel:
        curve = price_curve(start_year, end_year, model)
        ax.plot(
            [y for y, _ in curve], [p for _, p in curve],
            label=model.label, color=MODEL_COLORS.get(model, "#7f7f7f"), linewidth=2,
        )
    ax.set_yscale("log")
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(lambda x, _: f"${x:,.0f}"))
    ax.set_xlabel("年")
    ax.set_ylabel("BTC価格（USD）")
    ax.set_title("パワーロー価格モデル")
    ax.legend(loc="upper left")
    ax.grid(True, which="both", alpha=0.3)
    return _save(fig, output_path, "price_models", name)
