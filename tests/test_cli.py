"""Tests for the command-line entry point and logging setup."""

from __future__ import annotations

import logging

import pandas as pd
import pytest

from ev_mobility_sim.cli import build_parser, main, resolve_config
from ev_mobility_sim.logging_config import ROOT_LOGGER, setup_logging

FAST = ["-n", "4", "--seed", "3", "--max-attempts", "20000"]


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def private_only(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(
        "fleet:\n  car_purpose_shares:\n    Private: 1.0\n",
        encoding="utf-8",
    )
    return path


class TestResolveConfig:
    def test_flags_override_yaml(self, private_only):
        args = build_parser().parse_args(["--config", str(private_only), "-n", "7", "--workers", "2"])
        config = resolve_config(args)
        assert config.fleet.total_profiles == 7
        assert config.fleet.car_purpose_shares == {"Private": 1.0}
        assert config.simulation.workers == 2

    def test_defaults(self):
        config = resolve_config(build_parser().parse_args([]))
        assert config.fleet.total_profiles == 10
        assert not config.simulation.fail_fast

    def test_fail_fast_flag(self):
        assert resolve_config(build_parser().parse_args(["--fail-fast"])).simulation.fail_fast


class TestMain:
    def test_writes_text_and_csv(self, tmp_path, private_only):
        out = tmp_path / "profiles.txt"
        csv = tmp_path / "profiles.csv"
        code = main([*FAST, "--config", str(private_only), "-q", "-o", str(out), "--csv", str(csv)])
        assert code == 0
        text = out.read_text(encoding="utf-8")
        assert "--- Simulation 1: Workday ---" in text
        assert "--- Simulation 4: Weekend ---" in text
        frame = pd.read_csv(csv)
        assert set(frame["index"]) == {1, 2, 3, 4}
        assert list(frame["vehicle_class"].unique()) == ["PKW", "Van", "LKW", "Bus"]

    def test_console_output(self, capsys, private_only):
        assert main([*FAST, "--config", str(private_only)]) == 0
        captured = capsys.readouterr()
        assert "--- Simulation 1: Workday ---" in captured.out
        assert "Purpose" in captured.out

    def test_quiet(self, capsys, private_only):
        assert main([*FAST, "--config", str(private_only), "-q"]) == 0
        assert capsys.readouterr().out == ""

    def test_log_file(self, tmp_path, private_only):
        log = tmp_path / "logs" / "run.log"
        assert main([*FAST, "--config", str(private_only), "-q", "--log-file", str(log)]) == 0
        assert "Done: 4 profiles" in log.read_text(encoding="utf-8")

    def test_missing_table(self, tmp_path):
        assert main([*FAST, "-q", "--temperature", str(tmp_path / "nope.csv")]) == 2

    def test_bad_config(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("simulation:\n  workers: 0\n", encoding="utf-8")
        assert main(["-q", "--config", str(path)]) == 2

    def test_too_few_profiles(self):
        assert main(["-q", "-n", "2"]) == 2

    def test_failed_vehicle_exit_code(self, tmp_path, private_only):
        charging = tmp_path / "charging.csv"
        charging.write_text(
            "Segment,AC_11kW,DC_50kW,DC_150kW\n"
            "PKW,TRUE,FALSE,FALSE\n"
            "Van,FALSE,TRUE,FALSE\n"
            "LKW,FALSE,FALSE,TRUE\n",
            encoding="utf-8",
        )
        args = [*FAST, "--config", str(private_only), "-q", "--charging", str(charging)]
        assert main(args) == 1
        assert main([*args, "--fail-fast"]) == 2


class TestSetupLogging:
    def test_handlers_replaced(self):
        setup_logging("DEBUG")
        logger = setup_logging("WARNING")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING

    def test_file_handler(self, tmp_path):
        logger = setup_logging("INFO", tmp_path / "a.log", "detailed")
        assert len(logger.handlers) == 2
        logging.getLogger("ev_mobility_sim.engine").info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in (tmp_path / "a.log").read_text(encoding="utf-8")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            setup_logging("INFO", log_format="fancy")
