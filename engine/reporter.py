"""
Report generation for backtest results.

Handles:
  - generate_report(): builds a stats dict from a BacktestResult
  - print_report(): prints formatted summary to console
  - save_csv(): exports trade details to CSV
  - save_result_json(): writes the result payload (trades, total_profit,
    symbol, exchange) as JSON
  - write_summary(): writes markdown summary file

All functions read from BacktestResult / ClosedTrade objects and
plain dicts -- nothing here feeds back into the engine.
"""

import json
import logging
from datetime import datetime
from typing import Dict, Optional

import pandas as pd

from engine.trade import BacktestResult, Side

logger = logging.getLogger(__name__)


# ============================================
# GENERATE REPORT (builds stats dict)
# ============================================
def generate_report(result: BacktestResult, usd_balance: Optional[float] = None) -> Dict:
    """
    Build a report dict from a backtest result.

    Args:
        result: BacktestResult from run_backtest()
        usd_balance: account balance used for return_pct (optional)

    Returns:
        Dict with report metrics + trades_df; {} if there are no trades
    """
    label = result.symbol or "backtest"
    if not result.trades:
        logger.warning(f"{label}: No trades to report")
        return {}

    trades_df = pd.DataFrame([t.to_dict() for t in result.trades])

    total = len(trades_df)
    wins_df = trades_df[trades_df['profit'] > 0]
    loss_df = trades_df[trades_df['profit'] < 0]
    long_df = trades_df[trades_df['side'] == Side.LONG.value]
    short_df = trades_df[trades_df['side'] == Side.SHORT.value]

    report = {
        'symbol': result.symbol,
        'exchange': result.exchange,
        'usd_balance': usd_balance,
        'total_profit': result.total_profit,
        'return_pct': (result.total_profit / usd_balance) * 100 if usd_balance else None,
        'total_trades': total,
        'wins': len(wins_df),
        'losses': len(loss_df),
        'win_rate': (len(wins_df) / total) * 100,
        'avg_profit': trades_df['profit'].mean(),
        'avg_win': wins_df['profit'].mean() if len(wins_df) > 0 else 0.0,
        'avg_loss': loss_df['profit'].mean() if len(loss_df) > 0 else 0.0,
        'max_win': trades_df['profit'].max(),
        'max_loss': trades_df['profit'].min(),
        'exit_reasons': trades_df['exit_reason'].value_counts().to_dict(),
        'long_trades': len(long_df),
        'short_trades': len(short_df),
        'long_profit': long_df['profit'].sum(),
        'short_profit': short_df['profit'].sum(),
        'trades_df': trades_df,
    }
    return report


# ============================================
# PRINT REPORT (console output)
# ============================================
def print_report(report: Dict, strategy_name: str = ""):
    """Print formatted report to console."""
    if not report:
        print("No trades to report.")
        return

    r = report
    print("\n" + "=" * 60)
    title = f"  BACKTEST REPORT: {r['symbol'] or '-'}"
    if r['exchange']:
        title += f" ({r['exchange']})"
    if strategy_name:
        title += f" | {strategy_name}"
    print(title)
    print("=" * 60)

    print(f"  Total Profit:     {r['total_profit']:>12,.4f}")
    if r['return_pct'] is not None:
        print(f"  Balance:          {r['usd_balance']:>12,.2f}")
        print(f"  Return:           {r['return_pct']:>12.2f}%")
    print("-" * 60)

    print(f"  Total Trades:     {r['total_trades']:>6}")
    print(f"  Wins:             {r['wins']:>6} ({r['win_rate']:.1f}%)")
    print(f"  Losses:           {r['losses']:>6}")
    print(f"  Avg Profit:       {r['avg_profit']:>12,.4f}")
    print(f"  Avg Win:          {r['avg_win']:>12,.4f}")
    print(f"  Avg Loss:         {r['avg_loss']:>12,.4f}")
    print(f"  Max Win:          {r['max_win']:>12,.4f}")
    print(f"  Max Loss:         {r['max_loss']:>12,.4f}")
    print("-" * 60)

    print("  Exit Reasons:")
    for reason, count in r['exit_reasons'].items():
        pct = (count / r['total_trades']) * 100
        print(f"    {reason:20} {count:>4} ({pct:.1f}%)")
    print("-" * 60)

    print(f"  LONG:  {r['long_trades']} trades | Profit: {r['long_profit']:,.4f}")
    print(f"  SHORT: {r['short_trades']} trades | Profit: {r['short_profit']:,.4f}")
    print("=" * 60)


# ============================================
# SAVE CSV / JSON
# ============================================
def save_csv(report: Dict, filename: str):
    """Export trades to CSV."""
    if not report or 'trades_df' not in report:
        return
    report['trades_df'].to_csv(filename, index=False)
    logger.info(f"Saved {report['symbol'] or 'trades'} -> {filename}")


def save_result_json(result: BacktestResult, filename: str):
    """Write the result payload as JSON."""
    with open(filename, 'w') as f:
        json.dump(result.to_dict(), f, indent=2)
    logger.info(f"Result JSON saved to {filename}")


# ============================================
# SUMMARY FILE WRITER (markdown)
# ============================================
def write_summary(
    report: Dict,
    strategy_config: Dict,
    output_path: str = "backtest_summary.md",
):
    """
    Write a markdown summary file.

    Args:
        report: dict from generate_report() (may be empty)
        strategy_config: strategy definition dict
        output_path: where to write the summary
    """
    params = strategy_config.get('params', {})

    with open(output_path, 'w') as f:
        f.write("# Backtest Summary\n\n")
        f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")

        f.write("## Strategy\n\n")
        f.write(f"- **Name**: {strategy_config.get('name', 'Unknown')}\n")
        f.write(f"- **Bands**: mean +/- {params.get('multiplier', '?')} std "
                f"over {params.get('period', '?')} candles\n")
        f.write("- **Entry**: SHORT above upper band, LONG below lower band\n")
        f.write(f"- **Stop Loss**: {params.get('sl', 0) * 100:.2f}% (at candle close)\n")
        f.write(f"- **Take Profit**: {params.get('tp', 0) * 100:.2f}% (at candle close)\n")
        f.write("- **Exit**: SL, then TP, then opposite band; "
                "open position force-closed at last candle\n")
        f.write("- **Size**: fixed 1.0 unit per trade\n\n")

        f.write("---\n\n")
        if not report:
            f.write("No trades.\n")
            logger.info(f"Summary saved to {output_path}")
            return

        r = report
        f.write(f"## {r['symbol'] or 'Results'}\n\n")

        f.write("### Performance\n\n")
        f.write("| Metric | Value |\n")
        f.write("|--------|-------|\n")
        f.write(f"| Total Profit | {r['total_profit']:,.4f} |\n")
        if r['return_pct'] is not None:
            f.write(f"| Return on Balance | {r['return_pct']:.2f}% |\n")
        f.write(f"| Total Trades | {r['total_trades']} |\n")
        f.write(f"| Wins | {r['wins']} ({r['win_rate']:.1f}%) |\n")
        f.write(f"| Losses | {r['losses']} |\n")
        f.write(f"| Avg Profit per Trade | {r['avg_profit']:,.4f} |\n")
        f.write(f"| Max Win | {r['max_win']:,.4f} |\n")
        f.write(f"| Max Loss | {r['max_loss']:,.4f} |\n\n")

        f.write("### Exit Reasons\n\n")
        f.write("| Reason | Count | % |\n")
        f.write("|--------|-------|---|\n")
        for reason, count in r['exit_reasons'].items():
            pct = (count / r['total_trades']) * 100
            f.write(f"| {reason} | {count} | {pct:.1f}% |\n")
        f.write("\n")

        f.write("### By Side\n\n")
        f.write("| Side | Trades | Profit |\n")
        f.write("|------|--------|--------|\n")
        f.write(f"| LONG | {r['long_trades']} | {r['long_profit']:,.4f} |\n")
        f.write(f"| SHORT | {r['short_trades']} | {r['short_profit']:,.4f} |\n\n")

    logger.info(f"Summary saved to {output_path}")
