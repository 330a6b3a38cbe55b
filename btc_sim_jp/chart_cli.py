"""CLI entry point for the price model chart."""

import argparse
import sys
from datetime import date
from pathlib import Path

from btc_sim_jp.charts import plot_price_models
from btc_sim_jp.params import END_YEAR, GENESIS_YEAR, PriceModel
from btc_sim_jp.errors import InvalidYearError
from btc_sim_jp.price_model import price_usd


def _build_parser():
    parser = argparse.ArgumentParser(description="パワーロー価格モデル チャート生成")
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="出力ディレクトリ (default: reports/charts)",
    )
    parser.add_argument(
        "--start-year", type=int, default=GENESIS_YEAR + 1,
        help=f"開始年 (default: {GENESIS_YEAR + 1})",
    )
    parser.add_argument(
        "--end-year", type=int, default=END_YEAR,
        help=f"終了年 (default: {END_YEAR})",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="出力ファイル名のサフィックス（例: v2 → price_models-v2.png）",
    )
    return parser


def main():
    args = _build_parser().parse_args()
    if args.end_year < args.start_year:
        print(f"終了年{args.end_year}年が開始年{args.start_year}年より前です", file=sys.stderr)
        raise SystemExit(2)

    this_year = date.today().year
    try:
        for model in PriceModel:
            print(f"  {model.label}: {this_year}年 ${price_usd(this_year, model):,.0f}"
                  f" → {END_YEAR}年 ${price_usd(END_YEAR, model):,.0f}", file=sys.stderr)
        path = plot_price_models(args.start_year, args.end_year, args.output, name=args.name)
    except InvalidYearError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    print(f"  → {path}", file=sys.stderr)
    print("完了", file=sys.stderr)


if __name__ == "__main__":
    main()
