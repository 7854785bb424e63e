import numpy as np
import pandas as pd
import pytest

from engine.trade import Candle


def make_candles(closes, start="2024-01-01", freq="D"):
    """Candles with daily timestamps; open/high/low mirror the close."""
    times = pd.date_range(start, periods=len(closes), freq=freq)
    return [Candle(timestamp=t, open=c, high=c, low=c, close=c) for t, c in zip(times, closes)]


def random_walk(seed, n=400, start=100.0, vol=0.01):
    """Reproducible geometric random walk of close prices."""
    rng = np.random.RandomState(seed)
    returns = rng.normal(0.0, vol, size=n)
    return list(start * np.exp(np.cumsum(returns)))


@pytest.fixture
def reversal_closes():
    """Dip below the lower band, then a spike through the upper band."""
    return [100.0] * 5 + [90.0, 110.0]


@pytest.fixture
def candle_csv(tmp_path, reversal_closes):
    """CSV file of the reversal scenario, rows deliberately out of order."""
    times = pd.date_range("2024-03-01", periods=len(reversal_closes), freq="D")
    df = pd.DataFrame({
        "timestamp": times,
        "open": reversal_closes,
        "high": [c + 1 for c in reversal_closes],
        "low": [c - 1 for c in reversal_closes],
        "close": reversal_closes,
    })
    path = tmp_path / "candles.csv"
    df.iloc[::-1].to_csv(path, index=False)
    return path
