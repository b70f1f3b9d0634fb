"""Tests for the scheduled rate sync flow."""

from unittest.mock import MagicMock, patch

import pytest

from flows import scheduled_sync  # noqa: F401 - needed for patching
from flows.scheduled_sync import run_rate_sync, scheduled_rate_sync_flow
from rate_sync.domain.entities import RunResult
from rate_sync.domain.exceptions import PersistenceError, UpstreamTransportError


@pytest.fixture
def executed_result():
    return RunResult(
        skipped=False,
        date="2026-10-13",
        wrote=True,
        rates={"BTC": 67000.0, "EGLD": 28.0},
        last_updated={"BTC": None, "EGLD": None},
        updated=("BTC", "EGLD"),
        owner_id="gid://shopify/Shop/42",
    )


class TestRunRateSyncTask:
    """Test the task body with the run entry point mocked."""

    @patch("flows.scheduled_sync.get_run_logger", return_value=MagicMock())
    @patch("flows.scheduled_sync.get_settings")
    @patch("flows.scheduled_sync.execute_run")
    def test_returns_result_dict(
        self, mock_execute, mock_get_settings, _mock_logger, executed_result
    ):
        mock_execute.return_value = executed_result

        result = run_rate_sync.fn(force=False)

        mock_execute.assert_called_once_with(mock_get_settings.return_value, force=False)
        assert result["ok"] is True
        assert result["wrote"] is True
        assert result["shop_id"] == 42
        assert result["updated"] == ["BTC", "EGLD"]

    @patch("flows.scheduled_sync.get_run_logger", return_value=MagicMock())
    @patch("flows.scheduled_sync.get_settings")
    @patch("flows.scheduled_sync.execute_run")
    def test_skipped_run(self, mock_execute, _mock_get_settings, _mock_logger):
        mock_execute.return_value = RunResult(
            skipped=True, date="2026-12-01", reason="holiday:Ziua Națională"
        )

        result = run_rate_sync.fn()

        assert result == {
            "ok": True,
            "skipped": True,
            "reason": "holiday:Ziua Națională",
            "date": "2026-12-01",
        }

    @patch("flows.scheduled_sync.get_run_logger", return_value=MagicMock())
    @patch("flows.scheduled_sync.get_settings")
    @patch("flows.scheduled_sync.execute_run")
    def test_errors_propagate_from_task(self, mock_execute, _mock_get_settings, _mock_logger):
        mock_execute.side_effect = PersistenceError("metafieldsSet errors: [...]")

        with pytest.raises(PersistenceError):
            run_rate_sync.fn()


class TestScheduledRateSyncFlow:
    """Test the full flow with the task mocked."""

    @patch("flows.scheduled_sync.run_rate_sync")
    def test_returns_task_result(self, mock_task, executed_result):
        mock_task.return_value = executed_result.to_dict()

        result = scheduled_rate_sync_flow()

        mock_task.assert_called_once_with(force=False)
        assert result["wrote"] is True
        assert result["rates"] == {"BTC": 67000.0, "EGLD": 28.0}

    @patch("flows.scheduled_sync.run_rate_sync")
    def test_failure_is_absorbed(self, mock_task):
        mock_task.side_effect = UpstreamTransportError("CMC fetch timed out: read timeout")

        result = scheduled_rate_sync_flow()

        assert result == {
            "ok": False,
            "error": "UpstreamTransportError: CMC fetch timed out: read timeout",
        }
