"""
Bollinger Bands indicator.

A volatility band around a moving average.
Default: period=20, multiplier=2.

Bands over the last `period` closes (current close included):
  - middle: mean of the window
  - upper:  middle + (multiplier * population std)
  - lower:  middle - (multiplier * population std)

Population std (ddof=0) is used because the window is the full sample,
not an estimate of a larger population.

Streaming state is a fixed numpy ring buffer with a head index.
Running sums are kept relative to a shift value so each push is O(1);
every time the head wraps the sums are recomputed exactly from the
buffer. When the running variance is indistinguishable from zero the
band is recomputed two-pass from the buffer, so a flat window always
gives a zero-width band centred exactly on the price.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd

from config import DEFAULT_MULTIPLIER, DEFAULT_PERIOD, check_param
from indicators.base import Indicator

# Variance, relative to the magnitude of the running sums, below which
# the band is recomputed from the buffer
FLAT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class BandValue:
    """Band triple for one candle."""
    middle: float
    upper: float
    lower: float


class RollingBandIndicator(Indicator):
    """Bollinger Bands with configurable period and std deviation multiplier."""

    def __init__(self, period: int = DEFAULT_PERIOD, multiplier: float = DEFAULT_MULTIPLIER,
                 name: Optional[str] = None):
        """
        Args:
            period: window length, 2..200
            multiplier: std deviation multiplier, 0.1..5.0
            name: instance name (defaults to "bb_<period>_<multiplier>")

        Raises:
            ConfigurationError: period or multiplier outside valid range
        """
        period = check_param('period', period)
        multiplier = check_param('multiplier', multiplier)
        super().__init__(name or f"bb_{period}_{multiplier:g}",
                         period=period, multiplier=multiplier)
        self.period = period
        self.multiplier = multiplier

        self._window = np.zeros(period, dtype=float)
        self._head = 0      # next slot to overwrite
        self._count = 0     # prices seen since construction / reset

        # Sums of (price - shift) and (price - shift)^2 over the window
        self._shift = 0.0
        self._sum = 0.0
        self._sum_sq = 0.0

    @property
    def count(self) -> int:
        """Number of prices pushed so far."""
        return self._count

    @property
    def is_ready(self) -> bool:
        """True once a full window has been seen."""
        return self._count >= self.period

    def reset(self):
        self._window.fill(0.0)
        self._head = 0
        self._count = 0
        self._shift = 0.0
        self._sum = 0.0
        self._sum_sq = 0.0

    # ------------------------------------------
    # STREAMING
    # ------------------------------------------
    def push(self, price: float) -> Optional[BandValue]:
        """
        Consume one close price in chronological order.

        Returns None for the first period-1 calls, then the band over
        the most recent `period` prices.
        """
        price = float(price)
        if self._count == 0:
            self._shift = price

        # Evict the oldest price once the window is full
        if self._count >= self.period:
            old = float(self._window[self._head]) - self._shift
            self._sum -= old
            self._sum_sq -= old * old

        self._window[self._head] = price
        dev = price - self._shift
        self._sum += dev
        self._sum_sq += dev * dev

        self._head = (self._head + 1) % self.period
        self._count += 1

        if self._count < self.period:
            return None

        if self._head == 0:
            self._resync()
        return self._band()

    def _resync(self):
        """Recompute the running sums exactly from the buffer."""
        self._shift = float(self._window.mean())
        dev = self._window - self._shift
        self._sum = float(dev.sum())
        self._sum_sq = float((dev * dev).sum())

    def _band(self) -> BandValue:
        mean_dev = self._sum / self.period
        middle = self._shift + mean_dev
        variance = self._sum_sq / self.period - mean_dev * mean_dev

        # Running sums cannot tell a flat window from rounding noise
        scale = self._sum_sq / self.period + middle * middle
        if variance <= FLAT_TOLERANCE * scale:
            return self._exact_band()

        std = math.sqrt(variance)
        return BandValue(
            middle=middle,
            upper=middle + self.multiplier * std,
            lower=middle - self.multiplier * std,
        )

    def _exact_band(self) -> BandValue:
        """Two-pass mean / population std straight from the buffer."""
        lo = float(self._window.min())
        hi = float(self._window.max())
        if lo == hi:
            return BandValue(middle=lo, upper=lo, lower=lo)

        middle = min(max(float(self._window.mean()), lo), hi)
        dev = self._window - middle
        std = math.sqrt(float((dev * dev).mean()))
        return BandValue(
            middle=middle,
            upper=middle + self.multiplier * std,
            lower=middle - self.multiplier * std,
        )

    # ------------------------------------------
    # VECTORIZED
    # ------------------------------------------
    def calculate(self, close: pd.Series) -> Dict[str, pd.Series]:
        """
        Calculate upper, middle, and lower bands over a full series.

        First `period - 1` rows will be NaN.

        Args:
            close: close prices, sorted chronologically

        Returns:
            dict with keys "upper", "middle", "lower"
        """
        rolling = close.astype(float).rolling(window=self.period)
        middle = rolling.mean()
        rolling_std = rolling.std(ddof=0)

        upper = middle + (self.multiplier * rolling_std)
        lower = middle - (self.multiplier * rolling_std)

        return {
            "upper": upper,
            "middle": middle,
            "lower": lower,
        }
