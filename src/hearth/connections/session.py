"""
A live session to the cluster.

ClusterSession pairs the driver's Cluster (the connection pools) with the
Session used to run statements, plus the DriverConfiguration that shaped
them. It is owned by whoever asked for it: hearth never closes a session on
the caller's behalf.
"""
import time
from typing import Any, Optional

from hearth.messages import get_logger

from .options import DriverConfiguration, DriverOption


class ClusterSession:
    """
    Live connection pool for one worker.

    Example:
        ```python
        with factory.create_session(config) as session:
            rows = session.execute("SELECT release_version FROM system.local")
        ```
    """

    def __init__(
        self,
        cluster: Any,
        session: Any,
        driver_configuration: DriverConfiguration,
        factory_name: Optional[str] = None,
    ):
        self.cluster = cluster
        self.session = session
        self.driver_configuration = driver_configuration
        self.factory_name = factory_name
        self._closed = False
        self.logger = get_logger(f"hearth.factory.{factory_name or 'session'}")

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def contact_points(self):
        return self.driver_configuration.get(DriverOption.CONTACT_POINTS, ())

    def execute(self, statement: Any, parameters: Any = None, **kwargs) -> Any:
        """Run a statement through the driver session."""
        if self._closed:
            raise RuntimeError("Session is closed")
        return self.session.execute(statement, parameters, **kwargs)

    def close(self) -> None:
        """
        Shut down the session and its connection pools.

        Safe to call more than once. A shutdown that overruns the configured
        close timeout is reported but not interrupted.
        """
        if self._closed:
            return
        self._closed = True

        timeout_s = self.driver_configuration.get(DriverOption.SHUTDOWN_TIMEOUT, 0)
        started = time.monotonic()
        self.cluster.shutdown()
        elapsed = time.monotonic() - started

        if timeout_s and elapsed > timeout_s:
            self.logger.warning(
                f"Session shutdown took {elapsed:.1f}s, "
                f"longer than the {timeout_s}s close timeout"
            )
        else:
            self.logger.debug(f"Session closed in {elapsed:.2f}s")

    def __enter__(self) -> "ClusterSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ClusterSession({list(self.contact_points)}, {state})"
