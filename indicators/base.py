"""
Base Indicator class.

Indicators support two modes over the same close prices:
  - streaming: push() one close at a time (used by the backtest loop)
  - vectorized: calculate() over a whole pd.Series (used for band exports)
Both must agree on every value once the window is full.
"""

import pandas as pd
from typing import Any, Dict, Optional, Union


class Indicator:
    """
    Base class for all technical indicators.

    Subclasses must implement push() and calculate().
    """

    def __init__(self, name: str, **params):
        """
        Args:
            name: unique name for this indicator instance (e.g., "bb_20_2")
            **params: indicator-specific parameters (e.g., period=20)
        """
        self.name = name
        self.params = params

    def push(self, price: float) -> Optional[Any]:
        """Consume one close price. Returns None until warmed up."""
        raise NotImplementedError("Subclasses must implement push()")

    def reset(self):
        """Drop all streaming state."""
        raise NotImplementedError("Subclasses must implement reset()")

    def calculate(self, close: pd.Series) -> Union[pd.Series, Dict[str, pd.Series]]:
        """
        Calculate the indicator over a full series.

        Args:
            close: close prices, sorted chronologically

        Returns:
            pd.Series for single-output indicators
            dict[str, pd.Series] for multi-output indicators (Bollinger)
        """
        raise NotImplementedError("Subclasses must implement calculate()")

    def __repr__(self):
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.__class__.__name__}(name='{self.name}', {params_str})"
