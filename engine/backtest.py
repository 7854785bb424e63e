"""
Main backtest loop.

Bollinger mean-reversion backtest over a candle sequence:
  1. Feed every close into the rolling band indicator
  2. Skip trading until the indicator has a full window
  3. In position: check SL / TP / opposite-signal exit on the close
  4. Flat (or just closed): check band breach entry on the same close
  5. End of data: force close any open position at the last close

One position at most: the slot is FLAT or InPosition(OpenTrade).
A candle may close a position and open the opposite one.

The loop does no I/O beyond debug logging and holds no global state;
run_backtest() builds a fresh engine per call so parameter sweeps can
run in parallel.
"""

import logging
import numbers
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd

from config import ConfigurationError
from engine.data_loader import candles_from_frame, prepare_frame
from engine.params import BacktestParams
from engine.signals import check_entry, check_exit
from engine.trade import (
    FLAT, BacktestResult, ClosedTrade, ExitReason, InPosition, OpenTrade, Position,
)
from indicators.bollinger import RollingBandIndicator

logger = logging.getLogger(__name__)

ParamsLike = Union[BacktestParams, Mapping, None]


def _close_of(candle) -> float:
    """Close price of a Candle, a mapping with 'close', or a bare number."""
    if isinstance(candle, numbers.Real) and not isinstance(candle, bool):
        return float(candle)
    if isinstance(candle, Mapping):
        return float(candle['close'])
    return float(candle.close)


def _timestamp_of(candle, index: int) -> Any:
    """Candle timestamp if it has one, else its position in the sequence."""
    if isinstance(candle, Mapping):
        ts = candle.get('timestamp')
    else:
        ts = getattr(candle, 'timestamp', None)
    return index if ts is None else ts


def _coerce_params(params: ParamsLike) -> BacktestParams:
    if params is None:
        return BacktestParams()
    if isinstance(params, BacktestParams):
        return params
    if isinstance(params, Mapping):
        return BacktestParams.from_dict(params)
    raise ConfigurationError(f"Unsupported params type: {type(params).__name__}")


class BacktestEngine:
    """
    Bollinger mean-reversion backtesting engine.

    Owns its indicator, position slot and trade list. Use one instance
    per run; call run() once.
    """

    def __init__(self, params: ParamsLike = None, symbol: str = "", exchange: str = ""):
        """
        Args:
            params: BacktestParams, a dict of params, or None for defaults
            symbol: ticker symbol, carried into the result
            exchange: exchange name, carried into the result

        Raises:
            ConfigurationError: any parameter outside its valid range
        """
        self.params = _coerce_params(params)
        self.symbol = symbol
        self.exchange = exchange

        self.indicator = RollingBandIndicator(self.params.period, self.params.multiplier)
        self.position: Position = FLAT
        self.trades: List[ClosedTrade] = []
        self.candles_processed = 0

        logger.info(f"Initialized backtest {symbol or '-'} | "
                    f"period={self.params.period} k={self.params.multiplier} | "
                    f"SL={self.params.sl:.2%} | TP={self.params.tp:.2%}")

    # ------------------------------------------
    # POSITION HELPERS
    # ------------------------------------------
    def _open(self, trade: OpenTrade):
        if self.position is not FLAT:
            raise RuntimeError("Cannot open a position while one is already open")
        self.position = InPosition(trade)

    def _close(self, close_price: float, reason: ExitReason, closed_at) -> ClosedTrade:
        if self.position is FLAT:
            raise RuntimeError("No open position to close")
        closed = self.position.trade.close(close_price, reason, closed_at)
        self.trades.append(closed)
        self.position = FLAT
        return closed

    # ------------------------------------------
    # PER-CANDLE STEP
    # ------------------------------------------
    def step(self, candle, index: Optional[int] = None):
        """
        Process one candle.

        The close always goes into the indicator; trading only starts
        once the indicator returns a band.
        """
        if index is None:
            index = self.candles_processed
        close = _close_of(candle)
        t = _timestamp_of(candle, index)
        self.candles_processed += 1

        band = self.indicator.push(close)
        if band is None:
            return

        # --- EXIT MANAGEMENT ---
        if isinstance(self.position, InPosition):
            trade = self.position.trade
            reason, desc = check_exit(trade, close, band, self.params.sl, self.params.tp)
            if reason is not None:
                closed = self._close(close, reason, t)
                logger.debug(f"[{t}] EXIT {reason.value} {trade.side.value}: {desc} | "
                             f"{trade.open_price:.4f} -> {close:.4f} | "
                             f"pnl={closed.profit:+.4f}")

        # --- ENTRY (same candle, after any exit) ---
        if self.position is FLAT:
            side, desc = check_entry(close, band)
            if side is not None:
                self._open(OpenTrade(open_price=close, side=side, opened_at=t))
                logger.debug(f"[{t}] ENTRY {side.value} @ {close:.4f}: {desc}")

    # ------------------------------------------
    # MAIN LOOP
    # ------------------------------------------
    def run(self, candles: Iterable) -> BacktestResult:
        """
        Run the full backtest.

        Returns a BacktestResult; every position is closed by the end.
        """
        if isinstance(candles, pd.DataFrame):
            candles = candles_from_frame(prepare_frame(candles))

        last = None
        last_index = -1
        for i, candle in enumerate(candles):
            self.step(candle, i)
            last, last_index = candle, i

        if not self.indicator.is_ready:
            logger.info(f"Only {self.candles_processed} candle(s), need "
                        f"{self.params.period}: no trades")

        # --- END OF DATA: force close ---
        if isinstance(self.position, InPosition):
            close = _close_of(last)
            t = _timestamp_of(last, last_index)
            closed = self._close(close, ExitReason.END_OF_DATA, t)
            logger.debug(f"[{t}] EXIT END_OF_DATA {closed.side.value} @ {close:.4f} | "
                         f"pnl={closed.profit:+.4f}")

        result = BacktestResult.from_trades(self.trades, self.symbol, self.exchange)
        logger.info(f"Backtest done. Candles: {self.candles_processed} | "
                    f"Trades: {len(result.trades)} | "
                    f"Total profit: {result.total_profit:+.4f}")
        return result


def run_backtest(candles: Iterable, params: ParamsLike = None,
                 symbol: str = "", exchange: str = "") -> BacktestResult:
    """
    Run one backtest on a fresh engine.

    Args:
        candles: chronological Candles (or mappings with 'close', or floats)
        params: BacktestParams, a dict of params, or None for defaults
        symbol: optional ticker symbol for the result
        exchange: optional exchange name for the result

    Returns:
        BacktestResult with closed trades and total profit

    Raises:
        ConfigurationError: params invalid (raised before any candle is read)
    """
    engine = BacktestEngine(params, symbol=symbol, exchange=exchange)
    return engine.run(candles)
