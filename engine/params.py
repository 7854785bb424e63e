"""
Backtest parameters.

BacktestParams is validated on construction, so an invalid parameter set
never reaches the engine. Defaults and ranges come from config.py.
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Dict, Mapping

import config
from config import check_param

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestParams:
    """
    Parameter set for one backtest run.

    Fields:
        period: band window length (2..200)
        multiplier: std deviation multiplier (0.1..5.0)
        sl: stop loss as a fraction of entry (0.001..0.5)
        tp: take profit as a fraction of entry (0.001..1.0)
        usd_balance: account balance (>= 1.0); informational, the engine
            always trades a fixed 1.0 unit
    """
    period: int = config.DEFAULT_PERIOD
    multiplier: float = config.DEFAULT_MULTIPLIER
    sl: float = config.DEFAULT_SL
    tp: float = config.DEFAULT_TP
    usd_balance: float = config.DEFAULT_USD_BALANCE

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check every field against config.PARAM_BOUNDS and normalize types.

        Raises:
            ConfigurationError: first field found outside its range
        """
        for f in fields(self):
            value = check_param(f.name, getattr(self, f.name))
            # frozen dataclass: normalize via object.__setattr__
            object.__setattr__(self, f.name, value)

    @classmethod
    def from_dict(cls, data: Mapping) -> "BacktestParams":
        """Build from a mapping; missing keys take defaults, unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.debug(f"Ignoring unknown parameter(s): {', '.join(sorted(map(str, unknown)))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict:
        return asdict(self)
