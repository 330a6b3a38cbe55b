"""CLI entry point for the withdrawal (取り崩し) simulation."""

import argparse
import sys
from pathlib import Path

from btc_sim_jp.cli import print_field_errors
from btc_sim_jp.config import SCENARIO_WITHDRAWAL, parse_args
from btc_sim_jp.params import END_YEAR, WithdrawalMode, WithdrawalParams, WithdrawalPhase
from btc_sim_jp.report import (
    format_btc,
    format_percent,
    format_yen,
    withdrawal_highlights,
    withdrawal_table,
)
from btc_sim_jp.scenarios import compare_withdrawal
from btc_sim_jp.simulation import find_depletion_year, run_withdrawal


def _add_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--compare-models", action="store_true",
        help="標準モデルと保守的モデルの枯渇年を比較する",
    )
    parser.add_argument(
        "--chart", type=Path, default=None,
        help="チャートPNGの出力ディレクトリ（指定時のみ生成）",
    )


def _describe_phase(phase: WithdrawalPhase) -> str:
    if phase.mode is WithdrawalMode.FIXED:
        return f"{phase.start_year}年〜 定額 {format_yen(phase.fixed_monthly_amount)}/月（税引き後）"
    return f"{phase.start_year}年〜 定率 {format_percent(phase.annual_rate_percent)}/年"


def _print_header(params: WithdrawalParams):
    print("=" * 80)
    print(f"ビットコイン取り崩しシミュレーション（{params.start_year}年-{END_YEAR}年）")
    print(f"  保有BTC: {format_btc(params.initial_btc)} / 価格予測モデル: {params.price_model.label}")
    print(f"  税率: {params.tax_rate:.3f}% / 為替: {params.exchange_rate:.1f}円/USD"
          f" / インフレ率: {params.inflation_rate:.1f}%")
    for i, phase in enumerate(params.phases, start=1):
        print(f"  {i}段階目: {_describe_phase(phase)}")
    print("=" * 80)


def main():
    """Execute withdrawal simulation"""
    raw, args = parse_args("ビットコイン取り崩しシミュレーション", SCENARIO_WITHDRAWAL, _add_args)

    validation, result = run_withdrawal(raw)
    if not validation.ok:
        print_field_errors(validation.errors)
        raise SystemExit(2)
    if not result.ok:
        print(f"シミュレーションに失敗しました: {result.error}", file=sys.stderr)
        raise SystemExit(1)

    params = validation.params
    _print_header(params)
    print("\n【シミュレーション結果】")
    print("-" * 120)
    for line in withdrawal_table(result.records, show_phase=params.has_second_phase):
        print(line)
    print("-" * 120)

    h = withdrawal_highlights(params, result.records)
    print("\n【ハイライト】")
    print(f"  保有BTC: {format_btc(h.initial_btc)}")
    for n, value in h.values_after.items():
        if value is not None:
            print(f"  {n}年後の資産: {format_yen(value)}")
    print(f"  取り崩し総額: {format_yen(h.total_withdrawn_jpy)}")
    print(f"  資産枯渇: {h.depletion_label}")
    if h.depletion_year is not None:
        print(f"    ⚠ {h.depletion_year}年に保有BTCが尽きます")

    if args.compare_models:
        print("\n【モデル比較】")
        for model, r in compare_withdrawal(params).items():
            if not r.ok:
                print(f"  {model.label}: {r.error}")
                continue
            year = find_depletion_year(r.records)
            status = f"{year}年に枯渇" if year is not None else f"{END_YEAR}年以降も維持"
            print(f"  {model.label:<8} {status} / {END_YEAR}年の資産: {format_yen(r.records[-1].total_value_jpy)}")

    if args.chart is not None:
        from btc_sim_jp.charts import plot_withdrawal

        print("チャート生成中...", file=sys.stderr)
        path = plot_withdrawal(
            result.records, args.chart,
            title=f"取り崩し推移（{params.price_model.label}）",
            depletion_year=h.depletion_year,
        )
        print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
