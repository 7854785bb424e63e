"""
Strategies package.

Each strategy file exports a STRATEGY dict that defines:
  - name / description
  - symbol, exchange and candle data path
  - backtest params (period, multiplier, sl, tp, usd_balance)

See strategies/bollinger_mean_reversion.py for the reference example.
"""
