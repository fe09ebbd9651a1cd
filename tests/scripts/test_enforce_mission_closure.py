"""Tests for the scheduled closure sweep entry point."""

import importlib.util
from pathlib import Path
from unittest.mock import patch, AsyncMock
import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "enforce_mission_closure.py"


@pytest.fixture(name="script")
def script_fixture():
    spec = importlib.util.spec_from_file_location("enforce_mission_closure", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_run_sweep_returns_closed_count(script):
    with (
        patch.object(script, "setup_logging"),
        patch.object(
            script, "run_enforcement_sweep", new_callable=AsyncMock, return_value=[3, 8]
        ) as mock_sweep,
    ):
        assert script.run_sweep() == 2

    mock_sweep.assert_awaited_once_with()


def test_run_sweep_exits_on_failure(script):
    with (
        patch.object(script, "setup_logging"),
        patch.object(
            script,
            "run_enforcement_sweep",
            new_callable=AsyncMock,
            side_effect=RuntimeError("database unreachable"),
        ),
        patch.object(script, "logger") as mock_logger,
    ):
        with pytest.raises(SystemExit) as exc_info:
            script.run_sweep()

    assert exc_info.value.code == 1
    mock_logger.exception.assert_called_once()
