from __future__ import annotations

import io
import logging

import pytest

import run_sim
from armreach_sim.utils.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    yield
    logger = logging.getLogger("armreach_sim")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_env_mode_runs(capsys):
    run_sim.main(["--mode", "env", "--steps", "40", "--width", "32", "--height", "24"])
    out = capsys.readouterr().out
    assert "Mode: env" in out
    assert "Final reward" in out
    assert "Joint Angles:" in out


def test_terminal_mode_reads_keys(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("d\nq\nx\n"))
    run_sim.main(["--mode", "terminal", "--fps", "5", "--width", "32", "--height", "24"])
    out = capsys.readouterr().out
    assert "Target at x=0.40, y=0.60, z=0.90" in out
    assert "Target at x=0.40, y=0.70, z=0.90" in out


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "sim.log"
    logger = setup_logging(logging.DEBUG, str(log_file))
    setup_logging(logging.DEBUG, str(log_file))
    assert len(logger.handlers) == 2
    logging.getLogger("armreach_sim.control").warning("arm stalled")
    for handler in logger.handlers:
        handler.flush()
    assert "WARNING armreach_sim.control: arm stalled" in log_file.read_text(encoding="utf-8")
