"""
Bollinger Mean Reversion Strategy.

SHORT when the close breaks above the upper band (overbought),
LONG when it breaks below the lower band (oversold).
Exit on SL, then TP, then a close beyond the opposite band.
Fixed 1.0 unit per trade; one position at a time.
"""

STRATEGY = {
    # ---- Identity ----
    "name": "Bollinger Mean Reversion",
    "description": (
        "Fade closes outside mean +/- 2 std over 20 candles. "
        "SL 2%, TP 4%, exit on opposite band. Fixed unit size."
    ),

    # ---- Market ----
    # Carried into the result payload; not used by the engine.
    "symbol": "BTCUSDT",
    "exchange": "binance",

    # ---- Data ----
    # CSV or parquet with at least a close column.
    "data_path": "BTCUSDT_1h.csv",    # resolved under config.DATA_DIR
    "backtest_start": None,   # "YYYY-MM-DD" or None for all data
    "backtest_end": None,

    # ---- Parameters ----
    # Ranges are enforced by engine/params.py (see config.PARAM_BOUNDS).
    "params": {
        "period": 20,        # band window (2-200)
        "multiplier": 2.0,   # std deviation multiplier (0.1-5.0)
        "sl": 0.02,          # stop loss fraction (0.001-0.5)
        "tp": 0.04,          # take profit fraction (0.001-1.0)
        "usd_balance": 1000.0,  # informational (>= 1.0)
    },
}
