"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from datetime import date
from pathlib import Path
from typing import Callable

from btc_sim_jp.params import (
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_INFLATION_RATE,
    DEFAULT_TAX_RATE,
    DEFAULT_WITHDRAWAL_RATE,
    DEFAULT_YEARS,
)

DEFAULT_CONFIG_PATH = Path("config.toml")

SCENARIO_ACCUMULATION = "accumulation"
SCENARIO_WITHDRAWAL = "withdrawal"

# Values are kept as strings where a user would type them; parsing belongs to validation.
SHARED_DEFAULTS = {
    "price_model": "standard",
    "exchange_rate": str(DEFAULT_EXCHANGE_RATE),
    "inflation_rate": str(DEFAULT_INFLATION_RATE),
    "current_year": None,  # None → 今年
}

ACCUMULATION_DEFAULTS = {
    **SHARED_DEFAULTS,
    "initial_investment_type": "btc",
    "initial_investment": "",
    "initial_btc_holding": "",
    "monthly_investment": "",
    "years": str(DEFAULT_YEARS),
}

WITHDRAWAL_DEFAULTS = {
    **SHARED_DEFAULTS,
    "initial_btc": "",
    "start_year": None,  # None → current_year
    "withdrawal_type": "fixed",
    "withdrawal_amount": "",
    "withdrawal_rate": str(DEFAULT_WITHDRAWAL_RATE),
    "second_phase": False,
    "second_phase_year": "",
    "second_phase_type": "fixed",
    "second_phase_amount": "",
    "second_phase_rate": str(DEFAULT_WITHDRAWAL_RATE),
    "tax_rate": str(DEFAULT_TAX_RATE),
}

DEFAULTS = {
    SCENARIO_ACCUMULATION: ACCUMULATION_DEFAULTS,
    SCENARIO_WITHDRAWAL: WITHDRAWAL_DEFAULTS,
}


def load_config(path: Path | None = None, scenario: str | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist.

    Top-level keys are shared; a [accumulation] / [withdrawal] table overrides
    them for that scenario. [withdrawal.second_phase] {year, type, amount, rate}
    is flattened to second_phase_* keys and enables the second phase.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"設定ファイルの読み込みに失敗: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)

    config = {k: v for k, v in raw.items() if not isinstance(v, dict)}
    if scenario is not None and isinstance(raw.get(scenario), dict):
        section = dict(raw[scenario])
        # Normalize second phase table → flat keys
        phase = section.pop("second_phase", None)
        if isinstance(phase, dict):
            section["second_phase"] = phase.get("enabled", True)
            for key in ("year", "type", "amount", "rate"):
                if key in phase:
                    section[f"second_phase_{key}"] = phase[key]
        elif phase is not None:
            section["second_phase"] = phase
        config.update(section)
    return config


def _add_shared_args(parser: argparse.ArgumentParser):
    d = SHARED_DEFAULTS
    parser.add_argument("--config", type=Path, default=None, help="設定ファイルパス (default: config.toml)")
    parser.add_argument("--price-model", type=str, default=None, help=f"価格予測モデル: standard, conservative (default: {d['price_model']})")
    parser.add_argument("--exchange-rate", type=str, default=None, help=f"為替レート・円/USD (default: {d['exchange_rate']})")
    parser.add_argument("--inflation-rate", type=str, default=None, help=f"インフレ率・%%/年 (default: {d['inflation_rate']})")
    parser.add_argument("--current-year", type=str, default=None, help="シミュレーション開始年 (default: 今年)")


def create_parser(description: str, scenario: str) -> argparse.ArgumentParser:
    """Create argparse parser with the flags of one scenario."""
    parser = argparse.ArgumentParser(description=description)
    _add_shared_args(parser)
    if scenario == SCENARIO_ACCUMULATION:
        d = ACCUMULATION_DEFAULTS
        parser.add_argument("--initial-investment-type", type=str, default=None, help=f"初期投資方法: btc（BTC保有）, jpy（日本円で投資）(default: {d['initial_investment_type']})")
        parser.add_argument("--initial-investment", type=str, default=None, help="初期投資額・円（jpy時）")
        parser.add_argument("--initial-btc-holding", type=str, default=None, help="初期保有BTC（btc時）")
        parser.add_argument("--monthly-investment", type=str, default=None, help="毎月積立額・円")
        parser.add_argument("--years", type=str, default=None, help=f"積立年数 1-26 (default: {d['years']})")
    elif scenario == SCENARIO_WITHDRAWAL:
        d = WITHDRAWAL_DEFAULTS
        parser.add_argument("--initial-btc", type=str, default=None, help="保有BTC")
        parser.add_argument("--start-year", type=str, default=None, help="取り崩し開始年 (default: 開始年)")
        parser.add_argument("--withdrawal-type", type=str, default=None, help=f"取り崩し方法: fixed（定額・月額）, percentage（定率・年率）(default: {d['withdrawal_type']})")
        parser.add_argument("--withdrawal-amount", type=str, default=None, help="取り崩し額・円/月（税引き後）")
        parser.add_argument("--withdrawal-rate", type=str, default=None, help=f"取り崩し率・%%/年 (default: {d['withdrawal_rate']})")
        parser.add_argument("--second-phase", action="store_true", default=None, help="2段階目の取り崩しを有効にする")
        parser.add_argument("--second-phase-year", type=str, default=None, help="2段階目開始年")
        parser.add_argument("--second-phase-type", type=str, default=None, help=f"2段階目取り崩し方法 (default: {d['second_phase_type']})")
        parser.add_argument("--second-phase-amount", type=str, default=None, help="2段階目取り崩し額・円/月（税引き後）")
        parser.add_argument("--second-phase-rate", type=str, default=None, help=f"2段階目取り崩し率・%%/年 (default: {d['second_phase_rate']})")
        parser.add_argument("--tax-rate", type=str, default=None, help=f"税率・%% (default: {d['tax_rate']})")
    else:
        raise ValueError(f"Unknown scenario: {scenario}")
    return parser


def resolve(args: argparse.Namespace, config: dict, scenario: str) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS[scenario].items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    if resolved["current_year"] is None:
        resolved["current_year"] = date.today().year
    if scenario == SCENARIO_WITHDRAWAL and resolved["start_year"] is None:
        resolved["start_year"] = resolved["current_year"]
    return resolved


def parse_args(
    description: str,
    scenario: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_raw_inputs, namespace). The raw inputs go to validation as-is.
    """
    parser = create_parser(description, scenario)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config, scenario)
    return resolve(args, config, scenario), args
