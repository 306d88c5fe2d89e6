"""Unit tests for authorization domain probe."""

from unittest.mock import Mock

from shared_kernel.authorization.observability import (
    DefaultAuthorizationProbe,
)
from shared_kernel.observability_context import ObservationContext


class TestDefaultAuthorizationProbe:
    """Tests for DefaultAuthorizationProbe."""

    def test_creates_with_default_logger(self):
        """Test that probe can be created without providing a logger."""
        probe = DefaultAuthorizationProbe()
        assert probe._logger is not None

    def test_accepts_custom_logger(self):
        """Test that probe accepts a custom logger."""
        custom_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=custom_logger)
        assert probe._logger is custom_logger


class TestRelationshipsWritten:
    """Tests for relationships_written probe method."""

    def test_logs_with_correct_parameters(self):
        """Test that relationship written event is logged correctly."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.relationships_written(
            relationships=["tenant:t1#member@user:alice"],
        )

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "authorization_relationships_written"
        assert call_args[1]["relationships"] == ["tenant:t1#member@user:alice"]
        assert call_args[1]["count"] == 1


class TestRelationshipsWriteFailed:
    """Tests for relationships_write_failed probe method."""

    def test_logs_error_with_details(self):
        """Test that write failures are logged with error details."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)
        error = ValueError("Connection refused")

        probe.relationships_write_failed(
            relationships=["tenant:t1#member@user:alice"],
            error=error,
        )

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert call_args[0][0] == "authorization_relationships_write_failed"
        assert call_args[1]["error"] == "Connection refused"
        assert call_args[1]["error_type"] == "ValueError"


class TestPermissionChecked:
    """Tests for permission_checked probe method."""

    def test_logs_granted_permission(self):
        """Test that granted permissions are logged."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.permission_checked(
            resource="site:s1",
            permission="view",
            subject="user:alice",
            granted=True,
            cached=False,
        )

        mock_logger.debug.assert_called_once()
        call_args = mock_logger.debug.call_args
        assert call_args[0][0] == "authorization_permission_checked"
        assert call_args[1]["granted"] is True
        assert call_args[1]["cached"] is False

    def test_logs_cached_denial(self):
        """Test that denials served from the cache are logged as cached."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.permission_checked(
            resource="tenant:t1",
            permission="delete",
            subject="user:alice",
            granted=False,
            cached=True,
        )

        call_args = mock_logger.debug.call_args
        assert call_args[1]["granted"] is False
        assert call_args[1]["cached"] is True


class TestBulkCheckCompleted:
    """Tests for bulk_check_completed probe method."""

    def test_logs_bulk_check_statistics(self):
        """Test that bulk check statistics are logged."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.bulk_check_completed(
            total_requests=10,
            cached_count=4,
            permitted_count=7,
            failed_count=1,
        )

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "authorization_bulk_check_completed"
        assert call_args[1]["total_requests"] == 10
        assert call_args[1]["cached_count"] == 4
        assert call_args[1]["permitted_count"] == 7
        assert call_args[1]["failed_count"] == 1


class TestSchemaEvents:
    """Tests for schema bootstrap probe methods."""

    def test_schema_write_failed_logs_error(self):
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.schema_write_failed(error=RuntimeError("unavailable"))

        call_args = mock_logger.error.call_args
        assert call_args[0][0] == "authorization_schema_write_failed"
        assert call_args[1]["error_type"] == "RuntimeError"

    def test_not_initialized_names_operation(self):
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.not_initialized(operation="check permission")

        call_args = mock_logger.error.call_args
        assert call_args[0][0] == "authorization_not_initialized"
        assert call_args[1]["operation"] == "check permission"


class TestWithContext:
    """Tests for binding observation context."""

    def test_context_fields_are_included(self):
        """Context bound with with_context should appear on every event."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-1", user_id="alice")
        )

        probe.cache_invalidated(resource="tenant:t1", removed=3)

        call_args = mock_logger.debug.call_args
        assert call_args[0][0] == "authorization_cache_invalidated"
        assert call_args[1]["removed"] == 3
        assert call_args[1]["request_id"] == "req-1"
        assert call_args[1]["user_id"] == "alice"
