"""
Backtest entry point (CLI).

Usage:
    python run_backtest.py --strategy bollinger_mean_reversion
    python run_backtest.py --data data/BTCUSDT_1h.csv --period 20 --multiplier 2
    python run_backtest.py --strategy bollinger_mean_reversion --sl 0.01 --bands
    python run_backtest.py --list

Loads a strategy dict from the strategies/ package (CLI flags override
its params), loads candles, runs the backtest and writes reports
(console, trades CSV, result JSON, markdown summary).
"""

import argparse
import importlib
import logging
import os
import pkgutil
import sys
from typing import Dict, List, Optional

import config
import strategies
from config import ConfigurationError
from engine import reporter
from engine.backtest import run_backtest
from engine.data_loader import calculate_bands, load_candles, prepare_frame, read_frame
from engine.params import BacktestParams

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "bollinger_mean_reversion"


# ============================================
# LOGGING SETUP
# ============================================
def _setup_logging(level: str = config.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


# ============================================
# STRATEGY LOADING
# ============================================
def list_strategies() -> List[str]:
    """Return names of all strategy modules in strategies/."""
    return sorted(m.name for m in pkgutil.iter_modules(strategies.__path__))


def load_strategy(strategy_name: str) -> Dict:
    """
    Load the STRATEGY dict from strategies/<strategy_name>.py.

    Raises:
        ModuleNotFoundError: no such strategy module
        ConfigurationError: module has no STRATEGY dict
    """
    module = importlib.import_module(f"strategies.{strategy_name}")
    strategy = getattr(module, "STRATEGY", None)
    if not isinstance(strategy, dict):
        raise ConfigurationError(f"strategies/{strategy_name}.py has no STRATEGY dict")
    # Copy so CLI overrides never touch the module-level dict
    return {**strategy, "params": dict(strategy.get("params", {}))}


def resolve_data_path(path: str) -> str:
    """Relative paths not found as given are looked up under config.DATA_DIR."""
    if os.path.isabs(path) or os.path.exists(path):
        return path
    return os.path.join(config.DATA_DIR, path)


def apply_overrides(strategy: Dict, args: argparse.Namespace) -> Dict:
    """Apply CLI flags on top of the strategy dict."""
    overrides = {
        "period": args.period,
        "multiplier": args.multiplier,
        "sl": args.sl,
        "tp": args.tp,
        "usd_balance": args.usd_balance,
    }
    for key, value in overrides.items():
        if value is not None:
            strategy["params"][key] = value

    for key in ("data_path", "symbol", "exchange"):
        value = getattr(args, key)
        if value is not None:
            strategy[key] = value
    return strategy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bollinger mean-reversion backtester")
    parser.add_argument("--strategy", default=DEFAULT_STRATEGY,
                        help="strategy module name in strategies/")
    parser.add_argument("--list", action="store_true", help="list strategies and exit")
    parser.add_argument("--data", dest="data_path", help="candle file (.csv / .parquet)")
    parser.add_argument("--symbol")
    parser.add_argument("--exchange")
    parser.add_argument("--period", type=int)
    parser.add_argument("--multiplier", type=float)
    parser.add_argument("--sl", type=float, help="stop loss fraction, e.g. 0.02")
    parser.add_argument("--tp", type=float, help="take profit fraction, e.g. 0.04")
    parser.add_argument("--usd-balance", dest="usd_balance", type=float)
    parser.add_argument("--output-dir", default=config.OUTPUT_DIR)
    parser.add_argument("--bands", action="store_true",
                        help="also export a CSV of candles with band columns")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser


# ============================================
# RUN
# ============================================
def run(strategy: Dict, output_dir: str = ".", export_bands: bool = False) -> Optional[Dict]:
    """
    Run the backtest for one strategy dict and write outputs.

    Steps:
      1. Validate params (fails before any data is read)
      2. Load candles
      3. Run backtest engine
      4. Generate + save reports

    Returns report dict ({} when there were no trades).
    """
    params = BacktestParams.from_dict(strategy.get("params", {}))
    symbol = strategy.get("symbol", "")
    exchange = strategy.get("exchange", "")
    data_path = strategy.get("data_path")
    if not data_path:
        raise ConfigurationError("No data path given (strategy data_path or --data)")
    data_path = resolve_data_path(data_path)

    start, end = strategy.get("backtest_start"), strategy.get("backtest_end")
    candles = load_candles(data_path, start_date=start, end_date=end)

    result = run_backtest(candles, params, symbol=symbol, exchange=exchange)

    report = reporter.generate_report(result, usd_balance=params.usd_balance)
    reporter.print_report(report, strategy.get("name", ""))

    os.makedirs(output_dir, exist_ok=True)
    tag = symbol or "backtest"
    reporter.save_csv(report, os.path.join(output_dir, f"backtest_results_{tag}.csv"))
    reporter.save_result_json(result, os.path.join(output_dir, f"backtest_result_{tag}.json"))
    reporter.write_summary(report, {**strategy, "params": params.to_dict()},
                           os.path.join(output_dir, "backtest_summary.md"))

    if export_bands:
        df = prepare_frame(read_frame(data_path), start, end)
        df = calculate_bands(df, params.period, params.multiplier)
        bands_path = os.path.join(output_dir, f"bands_{tag}.csv")
        df.to_csv(bands_path, index=False)
        logger.info(f"Band values saved to {bands_path}")

    return report


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    if args.list:
        print("Available strategies:")
        for name in list_strategies():
            print(f"  {name}")
        return 0

    try:
        strategy = load_strategy(args.strategy)
    except ModuleNotFoundError:
        logger.error(f"Strategy not found: {args.strategy}")
        logger.info(f"Available: {list_strategies()}")
        return 1

    strategy = apply_overrides(strategy, args)
    logger.info(f"Strategy: {strategy.get('name', 'Unknown')}")
    logger.info(f"Description: {strategy.get('description', '')}")

    try:
        run(strategy, output_dir=args.output_dir, export_bands=args.bands)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info("All done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
