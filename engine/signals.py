"""
Signal evaluation for the band mean-reversion strategy.

Entry (only when flat):
  - close > upper band -> SHORT (overbought, expect reversion down)
  - close < lower band -> LONG  (oversold, expect reversion up)

Exit (only when in position), first match wins:
  1. STOP_LOSS:       LONG close <= open*(1-sl), SHORT close >= open*(1+sl)
  2. TAKE_PROFIT:     LONG close >= open*(1+tp), SHORT close <= open*(1-tp)
  3. OPPOSITE_SIGNAL: LONG and close >= upper, or SHORT and close <= lower

Each check returns (result, description) so the engine can log why.
"""

from typing import Optional, Tuple

from engine.trade import ExitReason, OpenTrade, Side
from indicators.bollinger import BandValue


def check_entry(close: float, band: BandValue) -> Tuple[Optional[Side], str]:
    """
    Check whether the close breaches a band.

    Returns:
        (side to open or None, description)
    """
    if close > band.upper:
        return Side.SHORT, f"close above upper ({close:.4f} > {band.upper:.4f})"
    if close < band.lower:
        return Side.LONG, f"close below lower ({close:.4f} < {band.lower:.4f})"
    return None, ""


def exit_prices(trade: OpenTrade, sl: float, tp: float) -> Tuple[float, float]:
    """
    Stop-loss and take-profit trigger prices for an open trade.

    A close exactly at a trigger price counts as hit, so LONG 10.0 -> 9.8
    stops out at sl=0.02.
    """
    if trade.side == Side.LONG:
        return trade.open_price * (1.0 - sl), trade.open_price * (1.0 + tp)
    return trade.open_price * (1.0 + sl), trade.open_price * (1.0 - tp)


def check_exit(trade: OpenTrade, close: float, band: BandValue,
               sl: float, tp: float) -> Tuple[Optional[ExitReason], str]:
    """
    Check exit conditions for the open trade on this close.

    Args:
        trade: the open position
        close: current candle close
        band: current band values
        sl: stop loss fraction (0.02 = 2%)
        tp: take profit fraction

    Returns:
        (exit reason or None, description)
    """
    move = trade.unrealized_pct(close)
    stop, target = exit_prices(trade, sl, tp)
    is_long = trade.side == Side.LONG

    hit_sl = close <= stop if is_long else close >= stop
    if hit_sl:
        return ExitReason.STOP_LOSS, f"loss {-move:.2%} hit SL {sl:.2%} at {stop:.4f}"

    hit_tp = close >= target if is_long else close <= target
    if hit_tp:
        return ExitReason.TAKE_PROFIT, f"gain {move:.2%} hit TP {tp:.2%} at {target:.4f}"

    if is_long and close >= band.upper:
        return ExitReason.OPPOSITE_SIGNAL, f"close at/above upper ({close:.4f} >= {band.upper:.4f})"
    if not is_long and close <= band.lower:
        return ExitReason.OPPOSITE_SIGNAL, f"close at/below lower ({close:.4f} <= {band.lower:.4f})"

    return None, ""
