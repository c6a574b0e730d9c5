"""
Driver options and the immutable DriverConfiguration that carries them.

A DriverConfiguration is produced once per ``create_session`` call by the
configuration builder and then only read: every stage returns a new
instance instead of changing the one it was given.
"""
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from hearth.tls.loader import CredentialStore


class DriverOption(str, Enum):
    """Names of the options a DriverConfiguration may hold."""

    CONTACT_POINTS = "basic.contact_points"
    REQUEST_TIMEOUT = "basic.request.timeout_ms"
    CONNECT_TIMEOUT = "advanced.connection.connect_timeout_ms"
    POOL_LOCAL_SIZE = "advanced.connection.pool.local.size"
    POOL_REMOTE_SIZE = "advanced.connection.pool.remote.size"
    PROTOCOL_VERSION = "advanced.protocol.version"
    COMPRESSION = "advanced.protocol.compression"

    RETRY_POLICY_CLASS = "advanced.retry_policy.class"
    RETRY_MAX_COUNT = "advanced.retry_policy.max_retry_count"
    RECONNECTION_POLICY_CLASS = "advanced.reconnection_policy.class"
    RECONNECTION_BASE_DELAY = "advanced.reconnection_policy.base_delay"
    RECONNECTION_MAX_DELAY = "advanced.reconnection_policy.max_delay"
    LOAD_BALANCING_POLICY_CLASS = "basic.load_balancing_policy.class"
    LOAD_BALANCING_LOCAL_DATACENTER = "basic.load_balancing_policy.local_datacenter"

    SHUTDOWN_QUIET_PERIOD = "advanced.shutdown.quiet_period_s"
    SHUTDOWN_TIMEOUT = "advanced.shutdown.timeout_s"

    SSL_ENGINE_FACTORY_CLASS = "advanced.ssl_engine_factory.class"
    SSL_TRUSTSTORE_PATH = "advanced.ssl_engine_factory.truststore_path"
    SSL_TRUSTSTORE_PASSWORD = "advanced.ssl_engine_factory.truststore_password"
    SSL_TRUSTSTORE = "advanced.ssl_engine_factory.truststore"
    SSL_KEYSTORE_PATH = "advanced.ssl_engine_factory.keystore_path"
    SSL_KEYSTORE_PASSWORD = "advanced.ssl_engine_factory.keystore_password"
    SSL_KEYSTORE = "advanced.ssl_engine_factory.keystore"
    SSL_CIPHER_SUITES = "advanced.ssl_engine_factory.cipher_suites"
    SSL_HOSTNAME_VALIDATION = "advanced.ssl_engine_factory.hostname_validation"


TLS_OPTIONS = frozenset(
    option for option in DriverOption if option.value.startswith("advanced.ssl")
)

_SECRET_OPTIONS = frozenset(
    {DriverOption.SSL_TRUSTSTORE_PASSWORD, DriverOption.SSL_KEYSTORE_PASSWORD}
)

_MASK = "********"


def _describe_value(value: Any) -> Any:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, timedelta):
        return f"{value.total_seconds():g}s"
    if isinstance(value, CredentialStore):
        return f"<{value.keystore_type} store: {len(value.certificates)} certificate(s)>"
    if isinstance(value, tuple):
        return list(value)
    return value


class DriverConfiguration(Mapping):
    """
    Read-only mapping of DriverOption -> value.

    Example:
        ```python
        config = DriverConfiguration().with_option(DriverOption.COMPRESSION, "lz4")
        DriverOption.COMPRESSION in config  # True
        ```
    """

    __slots__ = ("_options",)

    def __init__(self, options: Optional[Mapping[DriverOption, Any]] = None):
        self._options = MappingProxyType(dict(options or {}))

    def __getitem__(self, option: DriverOption) -> Any:
        return self._options[option]

    def __iter__(self) -> Iterator[DriverOption]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"DriverConfiguration({self.describe()})"

    def with_option(self, option: DriverOption, value: Any) -> "DriverConfiguration":
        """Return a copy with one option set (or overwritten)."""
        return self.with_options({option: value})

    def with_options(
        self, options: Mapping[DriverOption, Any]
    ) -> "DriverConfiguration":
        """Return a copy with several options set (or overwritten)."""
        merged = dict(self._options)
        merged.update(options)
        return DriverConfiguration(merged)

    def describe(self) -> Dict[str, Any]:
        """
        Printable view keyed by option name.

        Passwords are masked and key material is summarized, so the result
        is safe to log.
        """
        described = {}
        for option, value in self._options.items():
            if option in _SECRET_OPTIONS and value is not None:
                described[option.value] = _MASK
            else:
                described[option.value] = _describe_value(value)
        return described
