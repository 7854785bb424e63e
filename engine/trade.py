"""
Candle, trade and position classes.

A trade cycle:
  1. Entry signal fires -> OpenTrade at the candle close (fixed 1.0 unit)
  2. Exit on STOP_LOSS / TAKE_PROFIT / OPPOSITE_SIGNAL, or END_OF_DATA
  3. OpenTrade + close price -> ClosedTrade (immutable)

The engine's position slot is either FLAT or InPosition(OpenTrade),
so at most one position can exist at a time.

P&L:
  - LONG:  (close_price - open_price) * amount
  - SHORT: (open_price - close_price) * amount
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from config import FIXED_AMOUNT


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class ExitReason(str, Enum):
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    OPPOSITE_SIGNAL = "OPPOSITE_SIGNAL"
    END_OF_DATA = "END_OF_DATA"


@dataclass(frozen=True)
class Candle:
    """One OHLC bar. Only `close` is used by the backtest."""
    timestamp: Any
    open: float
    high: float
    low: float
    close: float


def signed_profit(side: Side, open_price: float, close_price: float, amount: float) -> float:
    """P&L for one unit-sized trade, positive when the trade made money."""
    if side == Side.LONG:
        return (close_price - open_price) * amount
    return (open_price - close_price) * amount


# ============================================
# CLOSED TRADE
# ============================================
@dataclass(frozen=True)
class ClosedTrade:
    """
    A completed trade.

    Equality covers the trade itself (prices, amount, side).
    exit_reason and the open/close markers are bookkeeping only.
    """
    open_price: float
    close_price: float
    amount: float
    side: Side
    exit_reason: Optional[ExitReason] = field(default=None, compare=False)
    opened_at: Any = field(default=None, compare=False)
    closed_at: Any = field(default=None, compare=False)

    @property
    def profit(self) -> float:
        return signed_profit(self.side, self.open_price, self.close_price, self.amount)

    @property
    def profit_pct(self) -> float:
        """Profit as a fraction of the entry price."""
        return (self.profit / self.amount) / self.open_price

    def to_dict(self) -> Dict:
        """Flat dictionary for CSV / JSON export."""
        return {
            'side': self.side.value,
            'open_price': self.open_price,
            'close_price': self.close_price,
            'amount': self.amount,
            'profit': self.profit,
            'profit_pct': self.profit_pct * 100,
            'exit_reason': self.exit_reason.value if self.exit_reason else None,
            'opened_at': self.opened_at,
            'closed_at': self.closed_at,
        }


# ============================================
# OPEN TRADE
# ============================================
@dataclass(frozen=True)
class OpenTrade:
    """The single live position held by the engine."""
    open_price: float
    side: Side
    amount: float = FIXED_AMOUNT
    opened_at: Any = field(default=None, compare=False)

    def unrealized_pct(self, price: float) -> float:
        """
        Unrealized move as a fraction of entry, positive when in profit.

        A zero open_price raises ZeroDivisionError (caller contract violation).
        """
        if self.side == Side.LONG:
            return (price - self.open_price) / self.open_price
        return (self.open_price - price) / self.open_price

    def close(self, close_price: float, reason: ExitReason, closed_at: Any = None) -> ClosedTrade:
        """Convert this position into a ClosedTrade at close_price."""
        return ClosedTrade(
            open_price=self.open_price,
            close_price=close_price,
            amount=self.amount,
            side=self.side,
            exit_reason=reason,
            opened_at=self.opened_at,
            closed_at=closed_at,
        )


# ============================================
# POSITION SLOT (Flat | InPosition)
# ============================================
class Flat:
    """No open position. Use the FLAT singleton."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "FLAT"


FLAT = Flat()


@dataclass(frozen=True)
class InPosition:
    """Holding exactly one OpenTrade."""
    trade: OpenTrade


Position = Union[Flat, InPosition]


# ============================================
# RESULT
# ============================================
@dataclass(frozen=True)
class BacktestResult:
    """
    Outcome of one backtest run.

    Built once from the full trade sequence; total_profit is the sum of
    each trade's signed profit.
    """
    trades: Tuple[ClosedTrade, ...]
    total_profit: float
    symbol: str = ""
    exchange: str = ""

    @classmethod
    def from_trades(cls, trades, symbol: str = "", exchange: str = "") -> "BacktestResult":
        trades = tuple(trades)
        return cls(
            trades=trades,
            total_profit=sum((t.profit for t in trades), 0.0),
            symbol=symbol,
            exchange=exchange,
        )

    def to_dict(self) -> Dict:
        """JSON-ready payload: trades, total_profit, symbol, exchange."""
        return {
            'trades': [
                {
                    'open_price': t.open_price,
                    'close_price': t.close_price,
                    'amount': t.amount,
                    'side': t.side.value,
                }
                for t in self.trades
            ],
            'total_profit': self.total_profit,
            'symbol': self.symbol,
            'exchange': self.exchange,
        }
