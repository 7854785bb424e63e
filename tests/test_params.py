import pytest

import config
from config import ConfigurationError, check_param
from engine.params import BacktestParams


class TestDefaults:
    def test_defaults_match_config(self):
        p = BacktestParams()
        assert p.period == config.DEFAULT_PERIOD
        assert p.multiplier == config.DEFAULT_MULTIPLIER
        assert p.sl == config.DEFAULT_SL
        assert p.tp == config.DEFAULT_TP
        assert p.usd_balance == config.DEFAULT_USD_BALANCE

    def test_documented_defaults(self):
        assert BacktestParams().to_dict() == {
            'period': 20, 'multiplier': 2.0, 'sl': 0.02, 'tp': 0.04, 'usd_balance': 1000.0,
        }

    def test_frozen(self):
        p = BacktestParams()
        with pytest.raises(AttributeError):
            p.period = 10


class TestValidation:
    @pytest.mark.parametrize("field,value", [
        ("period", 1), ("period", 201), ("period", 3.5),
        ("multiplier", 0.05), ("multiplier", 5.5),
        ("sl", 0.0), ("sl", 0.0009), ("sl", 0.51),
        ("tp", 0.0), ("tp", 1.01),
        ("usd_balance", 0.99), ("usd_balance", -100.0),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            BacktestParams(**{field: value})

    @pytest.mark.parametrize("field", ["period", "multiplier", "sl", "tp", "usd_balance"])
    def test_nan_rejected(self, field):
        with pytest.raises(ConfigurationError):
            BacktestParams(**{field: float("nan")})

    @pytest.mark.parametrize("value", [True, None, "0.02"])
    def test_non_numbers_rejected(self, value):
        with pytest.raises(ConfigurationError):
            BacktestParams(sl=value)

    @pytest.mark.parametrize("field,value", [
        ("period", 2), ("period", 200),
        ("multiplier", 0.1), ("multiplier", 5.0),
        ("sl", 0.001), ("sl", 0.5),
        ("tp", 0.001), ("tp", 1.0),
        ("usd_balance", 1.0), ("usd_balance", 1e9),
    ])
    def test_range_edges_accepted(self, field, value):
        assert getattr(BacktestParams(**{field: value}), field) == value

    def test_types_normalized(self):
        p = BacktestParams(period=10.0, multiplier=2, usd_balance=500)
        assert isinstance(p.period, int)
        assert isinstance(p.multiplier, float)
        assert isinstance(p.usd_balance, float)

    def test_usd_balance_unbounded_above(self):
        assert check_param('usd_balance', 1e12) == 1e12


class TestFromDict:
    def test_missing_keys_take_defaults(self):
        p = BacktestParams.from_dict({"period": 10})
        assert p.period == 10
        assert p.sl == config.DEFAULT_SL

    def test_unknown_keys_ignored(self):
        p = BacktestParams.from_dict({"period": 10, "symbol": "BTCUSDT"})
        assert p.period == 10

    def test_invalid_value_raises(self):
        with pytest.raises(ConfigurationError):
            BacktestParams.from_dict({"tp": 2.0})

    def test_round_trip(self):
        p = BacktestParams(period=14, multiplier=1.5, sl=0.01, tp=0.03, usd_balance=250.0)
        assert BacktestParams.from_dict(p.to_dict()) == p
