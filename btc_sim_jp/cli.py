"""CLI entry point for the accumulation (積立) simulation."""

import argparse
import sys
from pathlib import Path

from btc_sim_jp.config import SCENARIO_ACCUMULATION, parse_args
from btc_sim_jp.params import AccumulationParams, END_YEAR
from btc_sim_jp.report import (
    accumulation_highlights,
    accumulation_table,
    format_btc,
    format_yen,
)
from btc_sim_jp.scenarios import compare_accumulation
from btc_sim_jp.simulation import SimulationResult, run_accumulation


def _add_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--compare-models", action="store_true",
        help="標準モデルと保守的モデルの最終資産を比較する",
    )
    parser.add_argument(
        "--chart", type=Path, default=None,
        help="チャートPNGの出力ディレクトリ（指定時のみ生成）",
    )


def print_field_errors(errors: dict[str, str]):
    print("入力内容に誤りがあります:", file=sys.stderr)
    for key, message in errors.items():
        print(f"  {key}: {message}", file=sys.stderr)


def _print_header(params: AccumulationParams):
    print("=" * 80)
    print(f"ビットコイン積み立てシミュレーション（{params.current_year}年-{END_YEAR}年）")
    print(f"  価格予測モデル: {params.price_model.label} / 為替: {params.exchange_rate:.1f}円/USD"
          f" / インフレ率: {params.inflation_rate:.1f}%")
    print(f"  毎月積立額: {format_yen(params.monthly_investment)} × {params.years}年間")
    print("=" * 80)


def _print_highlights(params: AccumulationParams, result: SimulationResult):
    h = accumulation_highlights(params, result.records)
    print("\n【ハイライト】")
    print(f"  初期投資額: {h.initial_label}")
    print(f"  月額積立金: {format_yen(h.monthly_investment)}")
    for n, value in h.values_after.items():
        if value is not None:
            print(f"  {n}年後の資産: {format_yen(value)}")
    print(f"  積立総額: {format_yen(h.total_invested_jpy)}")
    print(f"  {h.final_year}年の資産: {format_yen(h.final_value)}（{format_btc(h.final_btc)}）")


def main():
    """Execute accumulation simulation"""
    raw, args = parse_args("ビットコイン積み立てシミュレーション", SCENARIO_ACCUMULATION, _add_args)

    validation, result = run_accumulation(raw)
    if not validation.ok:
        print_field_errors(validation.errors)
        raise SystemExit(2)
    if not result.ok:
        print(f"シミュレーションに失敗しました: {result.error}", file=sys.stderr)
        raise SystemExit(1)

    params = validation.params
    _print_header(params)
    print("\n【シミュレーション結果】（* = 積立終了後）")
    print("-" * 100)
    for line in accumulation_table(result.records):
        print(line)
    print("-" * 100)
    _print_highlights(params, result)

    if args.compare_models:
        print("\n【モデル比較】")
        for model, r in compare_accumulation(params).items():
            if not r.ok:
                print(f"  {model.label}: {r.error}")
                continue
            last = r.records[-1]
            print(f"  {model.label:<8} {last.year}年: {format_yen(last.total_value_jpy)}")

    if args.chart is not None:
        from btc_sim_jp.charts import plot_accumulation

        print("チャート生成中...", file=sys.stderr)
        path = plot_accumulation(
            result.records, args.chart,
            title=f"資産推移（{params.price_model.label}）",
        )
        print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
