"""
Tests for ClusterSession.
"""
from unittest.mock import MagicMock, patch

import pytest

from hearth.connections import ClusterSession, DriverConfiguration, DriverOption


@pytest.fixture
def driver_config():
    return DriverConfiguration(
        {
            DriverOption.CONTACT_POINTS: ("10.0.0.1:9042",),
            DriverOption.SHUTDOWN_TIMEOUT: 15,
        }
    )


@pytest.fixture
def cluster_session(driver_config):
    return ClusterSession(MagicMock(), MagicMock(), driver_config, "default")


def test_execute_delegates(cluster_session):
    """Test statements go to the driver session."""
    cluster_session.execute("SELECT * FROM t WHERE k = %s", ("a",), timeout=3)

    cluster_session.session.execute.assert_called_once_with(
        "SELECT * FROM t WHERE k = %s", ("a",), timeout=3
    )


def test_close_shuts_down_once(cluster_session):
    """Test close is idempotent."""
    cluster_session.close()
    cluster_session.close()

    cluster_session.cluster.shutdown.assert_called_once()
    assert cluster_session.is_closed


def test_context_manager_closes(driver_config):
    """Test leaving the with block closes the session."""
    cluster = MagicMock()

    with ClusterSession(cluster, MagicMock(), driver_config) as session:
        assert not session.is_closed

    cluster.shutdown.assert_called_once()


def test_execute_after_close(cluster_session):
    """Test a closed session refuses statements."""
    cluster_session.close()

    with pytest.raises(RuntimeError):
        cluster_session.execute("SELECT 1")


def test_slow_shutdown_is_reported(cluster_session):
    """Test a shutdown slower than the close timeout logs a warning."""
    with patch("hearth.connections.session.time") as clock:
        clock.monotonic.side_effect = [0.0, 20.0]
        with patch.object(cluster_session.logger, "warning") as warning:
            cluster_session.close()

    warning.assert_called_once()
    assert "15s close timeout" in warning.call_args.args[0]


def test_repr(cluster_session):
    """Test the repr names contact points and state."""
    assert repr(cluster_session) == "ClusterSession(['10.0.0.1:9042'], open)"
