import json

import pytest

import run_backtest as cli
from strategies.bollinger_mean_reversion import STRATEGY


class TestStrategies:
    def test_list_strategies(self):
        assert "bollinger_mean_reversion" in cli.list_strategies()

    def test_load_strategy_copies_params(self):
        strategy = cli.load_strategy("bollinger_mean_reversion")
        strategy["params"]["period"] = 3
        assert STRATEGY["params"]["period"] == 20

    def test_unknown_strategy(self):
        with pytest.raises(ModuleNotFoundError):
            cli.load_strategy("does_not_exist")


class TestMain:
    def test_list(self, capsys):
        assert cli.main(["--list"]) == 0
        assert "bollinger_mean_reversion" in capsys.readouterr().out

    def test_full_run_writes_outputs(self, candle_csv, tmp_path):
        out = tmp_path / "out"
        code = cli.main([
            "--data", str(candle_csv), "--symbol", "TEST",
            "--period", "5", "--multiplier", "1.5", "--tp", "0.5",
            "--output-dir", str(out), "--bands",
        ])
        assert code == 0

        payload = json.loads((out / "backtest_result_TEST.json").read_text())
        assert payload["total_profit"] == 20.0
        assert [t["side"] for t in payload["trades"]] == ["LONG", "SHORT"]
        assert (out / "backtest_results_TEST.csv").exists()
        assert (out / "backtest_summary.md").exists()
        assert "bb_upper" in (out / "bands_TEST.csv").read_text().splitlines()[0]

    def test_invalid_param_exit_code(self, candle_csv, tmp_path):
        code = cli.main(["--data", str(candle_csv), "--sl", "0.9",
                         "--output-dir", str(tmp_path)])
        assert code == 2

    def test_missing_data_file(self, tmp_path):
        code = cli.main(["--data", str(tmp_path / "missing.csv"),
                         "--output-dir", str(tmp_path)])
        assert code == 1

    def test_unknown_strategy_exit_code(self, tmp_path):
        assert cli.main(["--strategy", "does_not_exist"]) == 1


class TestDataPath:
    def test_relative_path_resolved_under_data_dir(self, candle_csv, tmp_path, monkeypatch):
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)
        monkeypatch.setattr(cli.config, "DATA_DIR", str(candle_csv.parent))
        assert cli.resolve_data_path(candle_csv.name) == str(candle_csv.parent / candle_csv.name)

    def test_existing_and_absolute_paths_unchanged(self, candle_csv, tmp_path, monkeypatch):
        monkeypatch.setattr(cli.config, "DATA_DIR", str(tmp_path / "elsewhere"))
        assert cli.resolve_data_path(str(candle_csv)) == str(candle_csv)

    def test_main_reads_from_data_dir(self, candle_csv, tmp_path, monkeypatch):
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)
        monkeypatch.setattr(cli.config, "DATA_DIR", str(candle_csv.parent))

        code = cli.main(["--data", candle_csv.name, "--symbol", "TEST",
                         "--period", "5", "--multiplier", "1.5", "--tp", "0.5",
                         "--output-dir", str(tmp_path / "out")])
        assert code == 0
        payload = json.loads((tmp_path / "out" / "backtest_result_TEST.json").read_text())
        assert payload["total_profit"] == 20.0
