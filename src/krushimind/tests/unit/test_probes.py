"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock, patch

import structlog

from infrastructure.observability import DefaultConnectivityProbe, DefaultStoreProbe
from records.application.observability import DefaultRecordServiceProbe
from shared_kernel.outbox.observability import (
    DefaultSyncOrchestratorProbe,
    DefaultSyncQueueProbe,
)


class TestStoreProbe:
    """Tests for StoreProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        probe = DefaultStoreProbe()
        assert probe._logger is not None

    def test_store_initialized_logs_info(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultStoreProbe(logger=mock_logger)

        probe.store_initialized(path="data/krushimind.db")

        mock_logger.info.assert_called_once_with(
            "local_store_initialized", path="data/krushimind.db"
        )

    def test_operation_failed_logs_error(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultStoreProbe(logger=mock_logger)

        probe.store_operation_failed("put", "marketplace", OSError("disk full"))

        mock_logger.error.assert_called_once_with(
            "local_store_operation_failed",
            operation="put",
            collection="marketplace",
            error="disk full",
        )


class TestConnectivityProbe:
    """Tests for ConnectivityProbe implementation."""

    def test_probe_failed_logs_info(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultConnectivityProbe(logger=mock_logger)

        probe.probe_failed(url="http://sync.test/api/ping", reason="HTTP 503")

        mock_logger.info.assert_called_once_with(
            "connectivity_probe_failed",
            url="http://sync.test/api/ping",
            reason="HTTP 503",
        )

    def test_callback_failure_logs_warning(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultConnectivityProbe(logger=mock_logger)

        probe.subscriber_callback_failed("online", RuntimeError("boom"))

        mock_logger.warning.assert_called_once_with(
            "connectivity_subscriber_callback_failed",
            transition="online",
            error="boom",
        )


class TestSyncProbes:
    """Tests for the sync queue and orchestrator probes."""

    def test_queue_probe_binds_component(self):
        with patch("shared_kernel.outbox.observability.logger") as mock_logger:
            probe = DefaultSyncQueueProbe()
            probe.enqueue_failed("marketplace", 3, "disk full")

        mock_logger.bind.assert_called_once_with(component="sync_queue")
        mock_logger.bind.return_value.error.assert_called_once_with(
            "sync_enqueue_failed",
            record_type="marketplace",
            record_id=3,
            error="disk full",
        )

    def test_empty_purge_is_not_logged(self):
        with patch("shared_kernel.outbox.observability.logger") as mock_logger:
            probe = DefaultSyncQueueProbe()
            probe.entries_purged(0)
            probe.entries_purged(2)

        mock_logger.bind.return_value.info.assert_called_once_with(
            "sync_entries_purged", count=2
        )

    def test_orchestrator_probe_logs_pass_statistics(self):
        with patch("shared_kernel.outbox.observability.logger") as mock_logger:
            probe = DefaultSyncOrchestratorProbe()
            probe.pass_completed(synced=2, failed=1, deferred=0)

        mock_logger.bind.assert_called_once_with(component="sync_orchestrator")
        mock_logger.bind.return_value.info.assert_called_once_with(
            "sync_pass_completed", synced=2, failed=1, deferred=0
        )

    def test_terminal_failure_logs_error(self):
        with patch("shared_kernel.outbox.observability.logger") as mock_logger:
            probe = DefaultSyncOrchestratorProbe()
            probe.entry_failed(5, "marketplace", "exceeded maximum attempts")

        mock_logger.bind.return_value.error.assert_called_once_with(
            "sync_entry_failed",
            entry_id=5,
            record_type="marketplace",
            reason="exceeded maximum attempts",
        )


class TestRecordServiceProbe:
    def test_record_created_logs_info(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultRecordServiceProbe(logger=mock_logger)

        probe.record_created("marketplace", record_id=1, queue_entry_id=4)

        mock_logger.info.assert_called_once_with(
            "record_created",
            collection="marketplace",
            record_id=1,
            queue_entry_id=4,
        )
