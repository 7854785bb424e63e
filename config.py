"""
Global configuration.

Contains only global defaults shared across all strategies:
  - Default backtest parameters (period, multiplier, SL/TP, balance)
  - Valid ranges for each parameter
  - Data / output paths
  - Logging settings

Strategy-specific overrides live in strategies/*.py STRATEGY dicts
or are passed on the command line.
"""

import numbers
import os

from dotenv import load_dotenv

# .env.local takes priority over .env
load_dotenv(".env.local", override=True)
load_dotenv(".env", override=False)


class ConfigurationError(ValueError):
    """A backtest parameter is outside its documented valid range."""


# ============================================
# PARAMETER RANGES (inclusive)
# ============================================
# None as an upper bound means unbounded.
PARAM_BOUNDS = {
    'period': (2, 200),
    'multiplier': (0.1, 5.0),
    'sl': (0.001, 0.5),
    'tp': (0.001, 1.0),
    'usd_balance': (1.0, None),
}

# ============================================
# DEFAULT PARAMETERS
# ============================================
# Moving average window and std deviation multiplier for the bands
DEFAULT_PERIOD = int(os.getenv("BB_PERIOD", "20"))
DEFAULT_MULTIPLIER = float(os.getenv("BB_MULTIPLIER", "2.0"))

# Stop loss / take profit as fractions of entry price (0.02 = 2%)
DEFAULT_SL = float(os.getenv("BB_SL", "0.02"))
DEFAULT_TP = float(os.getenv("BB_TP", "0.04"))

# Informational only: the engine trades a fixed unit of 1.0
DEFAULT_USD_BALANCE = float(os.getenv("USD_BALANCE", "1000.0"))

# Position size per trade
FIXED_AMOUNT = 1.0

# ============================================
# PATHS
# ============================================
DATA_DIR = os.getenv("DATA_DIR", "data")
OUTPUT_DIR = os.getenv("OUTPUT_DIR", ".")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def check_param(name: str, value):
    """
    Validate one parameter against PARAM_BOUNDS.

    Returns the value (as int for 'period', float otherwise).

    Raises:
        ConfigurationError: wrong type, NaN, or outside the valid range
    """
    lo, hi = PARAM_BOUNDS[name]
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")

    if name == 'period':
        if not isinstance(value, numbers.Integral) and not float(value).is_integer():
            raise ConfigurationError(f"period must be an integer, got {value!r}")
        value = int(value)
    else:
        value = float(value)

    # NaN fails both comparisons
    if not (value >= lo and (hi is None or value <= hi)):
        upper = "inf" if hi is None else hi
        raise ConfigurationError(f"{name}={value!r} outside valid range [{lo}, {upper}]")
    return value
