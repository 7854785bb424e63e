"""
Backtest Engine package.

Modules:
  - trade: Candle, OpenTrade / ClosedTrade, position slot, BacktestResult
  - params: validated BacktestParams
  - signals: entry / exit condition evaluation
  - backtest: main backtest loop and run_backtest()
  - data_loader: CSV / parquet candle loading and band columns
  - reporter: report generation (console, CSV, JSON, summary)
"""

from engine.backtest import BacktestEngine, run_backtest
from engine.params import BacktestParams
from engine.trade import (
    BacktestResult, Candle, ClosedTrade, ExitReason, OpenTrade, Side,
)

__all__ = [
    "BacktestEngine", "BacktestParams", "BacktestResult", "Candle",
    "ClosedTrade", "ExitReason", "OpenTrade", "Side", "run_backtest",
]
