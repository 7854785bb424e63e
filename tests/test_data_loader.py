import pandas as pd
import pytest

from engine.data_loader import calculate_bands, candles_from_frame, load_candles, prepare_frame
from engine.trade import Candle
from indicators.bollinger import RollingBandIndicator


class TestLoadCandles:
    def test_sorted_chronologically(self, candle_csv, reversal_closes):
        candles = load_candles(str(candle_csv))
        assert [c.close for c in candles] == reversal_closes
        assert all(isinstance(c, Candle) for c in candles)
        assert candles[0].timestamp == pd.Timestamp("2024-03-01")

    def test_ohlc_columns_read(self, candle_csv):
        first = load_candles(str(candle_csv))[0]
        assert (first.open, first.high, first.low, first.close) == (100.0, 101.0, 99.0, 100.0)

    def test_date_filter_inclusive(self, candle_csv):
        candles = load_candles(str(candle_csv), start_date="2024-03-02", end_date="2024-03-06")
        assert [c.timestamp.day for c in candles] == [2, 3, 4, 5, 6]

    def test_parquet(self, tmp_path):
        pytest.importorskip("pyarrow")
        path = tmp_path / "candles.parquet"
        pd.DataFrame({"close": [1.0, 2.0, 3.0]}).to_parquet(path)
        assert [c.close for c in load_candles(str(path))] == [1.0, 2.0, 3.0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_candles(str(tmp_path / "nope.csv"))

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="Unsupported"):
            load_candles(str(path))

    def test_missing_close_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({"open": [1.0], "high": [2.0]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="close"):
            load_candles(str(path))


class TestPrepareFrame:
    def test_fills_missing_ohlc_from_close(self):
        df = prepare_frame(pd.DataFrame({"Close": [5.0, 6.0]}))
        assert list(df["open"]) == [5.0, 6.0]
        assert list(df["high"]) == [5.0, 6.0]
        assert list(df["low"]) == [5.0, 6.0]

    def test_drops_rows_without_close(self):
        df = prepare_frame(pd.DataFrame({"close": [1.0, None, "x", 4.0]}))
        assert list(df["close"]) == [1.0, 4.0]

    def test_without_time_column_uses_positions(self):
        candles = candles_from_frame(prepare_frame(pd.DataFrame({"close": [1.0, 2.0]})))
        assert [c.timestamp for c in candles] == [0, 1]

    def test_equal_timestamps_keep_file_order(self):
        df = pd.DataFrame({"datetime": ["2024-01-01"] * 3, "close": [3.0, 1.0, 2.0]})
        assert list(prepare_frame(df)["close"]) == [3.0, 1.0, 2.0]


class TestCalculateBands:
    def test_band_columns_match_streaming(self, reversal_closes):
        df = prepare_frame(pd.DataFrame({"close": reversal_closes}))
        out = calculate_bands(df, period=5, multiplier=1.5)

        assert {"bb_middle", "bb_upper", "bb_lower"} <= set(out.columns)
        assert out["bb_middle"].iloc[:4].isna().all()
        assert "bb_middle" not in df.columns

        ind = RollingBandIndicator(5, 1.5)
        bands = [ind.push(c) for c in reversal_closes]
        assert out["bb_lower"].iloc[5] == pytest.approx(bands[5].lower)
        assert out["bb_upper"].iloc[6] == pytest.approx(bands[6].upper)
