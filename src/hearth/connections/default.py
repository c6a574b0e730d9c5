"""
The default connection factory.

Builds the DriverConfiguration for a PolicyConfig, turns it into driver
``Cluster`` arguments and connects.

``cassandra.cluster`` chooses its event loop when imported, so it is only
imported when a cluster is actually created.
"""
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from cassandra import AuthenticationFailed, OperationTimedOut
from cassandra.connection import locally_supported_compressions
from cassandra.policies import HostDistance
from cassandra.query import dict_factory

from hearth.configs.policy_config import PolicyConfig
from hearth.messages import get_logger
from hearth.tls import TlsMaterialLoader
from hearth.utility.exceptions import (
    AuthenticationError,
    ClusterConnectionError,
    ConfigValidationError,
    HearthError,
)

from .base import ConnectionFactory
from .builder import build_driver_configuration
from .options import DriverConfiguration, DriverOption
from .session import ClusterSession

# Drivers only honor per-host pool sizes on protocol v1 and v2
POOL_SIZE_MAX_PROTOCOL = 2


def split_contact_point(contact_point: str) -> Tuple[str, int]:
    """``"10.0.0.1:9042"`` / ``"[::1]:9042"`` -> (host, port)."""
    host, _, port = contact_point.rpartition(":")
    return host.strip("[]"), int(port)


def _seconds(value) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value / 1000


def check_compression(name: str) -> None:
    """
    Require a local codec for ``name``.

    The driver silently falls back to no compression when it has no codec
    in common with the server, so a missing codec package is refused here.

    Raises:
        ConfigValidationError: If the codec package is not installed
    """
    if name not in locally_supported_compressions:
        available = sorted(locally_supported_compressions) or ["none"]
        raise ConfigValidationError(
            f"Compression '{name}' needs its codec package installed "
            f"(pip install 'hearth[compression]'); available: {available}",
            compression=name,
        )


def _auth_failure(error: BaseException) -> Optional[BaseException]:
    """The AuthenticationFailed behind ``error``, if there is one."""
    if isinstance(error, AuthenticationFailed):
        return error
    # NoHostAvailable carries one error per host it tried
    for host_error in (getattr(error, "errors", None) or {}).values():
        if isinstance(host_error, AuthenticationFailed):
            return host_error
    return None


class DefaultConnectionFactory(ConnectionFactory, factory_name="default"):
    """
    Connection factory used when no other factory is named.

    Every call to ``create_session`` builds its own DriverConfiguration,
    its own policy instances and re-reads TLS keystores; nothing is cached
    between sessions.

    Example:
        ```python
        factory = DefaultConnectionFactory()
        with factory.create_session(config) as session:
            session.execute("SELECT release_version FROM system.local")
        ```
    """

    def __init__(self, loader: Optional[TlsMaterialLoader] = None, parallelism=None):
        self.loader = loader
        self.parallelism = parallelism
        self.logger = get_logger(f"hearth.factory.{self.factory_name}")

    def create_session(self, config: PolicyConfig) -> ClusterSession:
        """
        Connect to the cluster described by ``config``.

        Raises:
            CredentialLoadError: If TLS material cannot be loaded
            ConfigValidationError: If the chosen compression codec is not installed
            AuthenticationError: If the cluster rejects the credentials
            ClusterConnectionError: If no contact point can be reached
        """
        driver_config = build_driver_configuration(
            config, parallelism=self.parallelism, loader=self.loader
        )
        self.logger.debug(f"Driver configuration: {driver_config.describe()}")

        cluster_kwargs, profile_kwargs = self.cluster_arguments(
            driver_config, config.auth_provider
        )
        hosts = ", ".join(driver_config[DriverOption.CONTACT_POINTS])
        self.logger.start(f"Connecting to {self.logger.host(hosts)}")

        cluster = self._new_cluster(cluster_kwargs, profile_kwargs)
        try:
            self._apply_pool_sizes(cluster, driver_config, config)
            session = cluster.connect()
        except Exception as e:
            cluster.shutdown()
            raise self._connection_error(e, hosts) from e

        self.logger.success(f"Connected to {self.logger.host(hosts)}")
        return ClusterSession(cluster, session, driver_config, self.factory_name)

    def cluster_arguments(
        self, driver_config: DriverConfiguration, auth_provider: Any = None
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Translate a DriverConfiguration into driver arguments.

        Returns:
            (Cluster keyword arguments, default ExecutionProfile keyword
            arguments). Policy objects are new instances on every call.
        """
        contact_points: List[Tuple[str, int]] = [
            split_contact_point(cp) for cp in driver_config[DriverOption.CONTACT_POINTS]
        ]
        reconnection_class = driver_config[DriverOption.RECONNECTION_POLICY_CLASS]
        connect_timeout = _seconds(driver_config[DriverOption.CONNECT_TIMEOUT])

        compression = driver_config.get(DriverOption.COMPRESSION, False)
        if compression:
            check_compression(compression)

        cluster_kwargs: Dict[str, Any] = {
            "contact_points": contact_points,
            "compression": compression,
            "connect_timeout": connect_timeout,
            "control_connection_timeout": connect_timeout,
            "reconnection_policy": reconnection_class(
                min_delay=driver_config[DriverOption.RECONNECTION_BASE_DELAY],
                max_delay=driver_config[DriverOption.RECONNECTION_MAX_DELAY],
            ),
        }
        if DriverOption.PROTOCOL_VERSION in driver_config:
            cluster_kwargs["protocol_version"] = driver_config[
                DriverOption.PROTOCOL_VERSION
            ]
        if DriverOption.SSL_ENGINE_FACTORY_CLASS in driver_config:
            engine = driver_config[DriverOption.SSL_ENGINE_FACTORY_CLASS]()
            cluster_kwargs["ssl_context"] = engine.create_context(
                trust_store=driver_config.get(DriverOption.SSL_TRUSTSTORE),
                key_store=driver_config.get(DriverOption.SSL_KEYSTORE),
                cipher_suites=driver_config.get(DriverOption.SSL_CIPHER_SUITES, ()),
                hostname_validation=driver_config.get(
                    DriverOption.SSL_HOSTNAME_VALIDATION, True
                ),
            )
        if auth_provider is not None:
            cluster_kwargs["auth_provider"] = auth_provider

        load_balancing_class = driver_config[DriverOption.LOAD_BALANCING_POLICY_CLASS]
        retry_class = driver_config[DriverOption.RETRY_POLICY_CLASS]
        profile_kwargs: Dict[str, Any] = {
            "load_balancing_policy": load_balancing_class(
                local_dc=driver_config.get(DriverOption.LOAD_BALANCING_LOCAL_DATACENTER)
            ),
            "retry_policy": retry_class(
                max_retry_count=driver_config[DriverOption.RETRY_MAX_COUNT]
            ),
            "request_timeout": _seconds(driver_config[DriverOption.REQUEST_TIMEOUT]),
            "row_factory": dict_factory,
        }
        return cluster_kwargs, profile_kwargs

    def _new_cluster(
        self, cluster_kwargs: Dict[str, Any], profile_kwargs: Dict[str, Any]
    ) -> Any:
        from cassandra.cluster import EXEC_PROFILE_DEFAULT, Cluster, ExecutionProfile

        return Cluster(
            execution_profiles={EXEC_PROFILE_DEFAULT: ExecutionProfile(**profile_kwargs)},
            **cluster_kwargs,
        )

    def _apply_pool_sizes(
        self, cluster: Any, driver_config: DriverConfiguration, config: PolicyConfig
    ) -> None:
        local_size = driver_config[DriverOption.POOL_LOCAL_SIZE]
        remote_size = driver_config[DriverOption.POOL_REMOTE_SIZE]
        protocol_version = driver_config.get(DriverOption.PROTOCOL_VERSION)

        if protocol_version is None or protocol_version > POOL_SIZE_MAX_PROTOCOL:
            message = (
                f"Pool sizes (local={local_size}, remote={remote_size}) are not "
                "applied: the driver manages one connection per host on "
                "protocol v3 and later"
            )
            explicit = (
                config.local_connections_per_executor is not None
                or config.remote_connections_per_executor is not None
            )
            if explicit:
                self.logger.warning(message)
            else:
                self.logger.debug(message)
            return

        for distance, size in (
            (HostDistance.LOCAL, local_size),
            (HostDistance.REMOTE, remote_size),
        ):
            # max first: core may never exceed max
            cluster.set_max_connections_per_host(distance, size)
            cluster.set_core_connections_per_host(distance, size)

    def _connection_error(self, error: Exception, hosts: str) -> HearthError:
        auth_error = _auth_failure(error)
        if auth_error is not None:
            self.logger.error(f"Authentication to {hosts} failed: {auth_error}")
            return AuthenticationError(f"Authentication failed: {auth_error}")
        if isinstance(error, OperationTimedOut):
            self.logger.error(f"Timed out connecting to {hosts}: {error}")
            return ClusterConnectionError(f"Timed out connecting to {hosts}: {error}")
        self.logger.error(f"Could not connect to {hosts}: {error}")
        return ClusterConnectionError(f"Could not connect to {hosts}: {error}")
