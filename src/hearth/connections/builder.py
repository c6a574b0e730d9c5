"""
Assembling a DriverConfiguration from a PolicyConfig.

The configuration is built by folding an ordered tuple of stages over an
empty DriverConfiguration. Each stage takes the configuration so far and
returns a new one; no stage reads the options another stage wrote.

Stage order is fixed (basic, compression, local datacenter, TLS) because a
later stage may overwrite an option set by an earlier one. ``STAGES`` is the
single place that order is defined.

Apart from the TLS stage, which reads keystore files through
TlsMaterialLoader when TLS is enabled, building has no side effects.
"""
import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import reduce
from ipaddress import IPv6Address
from typing import Callable, Optional, Tuple

from hearth.configs.policy_config import Compression, PolicyConfig
from hearth.configs.settings import CONNECTION_DEFAULTS, default_local_pool_size
from hearth.messages import get_logger
from hearth.policies import (
    ExponentialReconnectionPolicy,
    LocalDcFirstPolicy,
    MultipleRetryPolicy,
)
from hearth.tls import DefaultSslEngineFactory, TlsMaterialLoader

from .options import DriverConfiguration, DriverOption

logger = get_logger("hearth.connections.builder")


def cpu_parallelism() -> int:
    """Available parallelism of this process."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class BuildContext:
    """Collaborators the stages need besides the PolicyConfig."""

    parallelism: Callable[[], int] = cpu_parallelism
    loader: TlsMaterialLoader = field(default_factory=TlsMaterialLoader)


Stage = Callable[[DriverConfiguration, PolicyConfig, BuildContext], DriverConfiguration]


def format_contact_point(host, port: int) -> str:
    """``host:port``, with IPv6 addresses in brackets."""
    if isinstance(host, IPv6Address):
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def basic_properties(
    builder: DriverConfiguration, config: PolicyConfig, context: BuildContext
) -> DriverConfiguration:
    """Pool sizes, timeouts, contact points, policies and shutdown periods."""
    local_pool_size = config.local_connections_per_executor or default_local_pool_size(
        context.parallelism()
    )
    remote_pool_size = (
        config.remote_connections_per_executor
        or CONNECTION_DEFAULTS.remote_connections_per_executor
    )

    options = {
        DriverOption.POOL_LOCAL_SIZE: local_pool_size,
        DriverOption.POOL_REMOTE_SIZE: remote_pool_size,
        DriverOption.CONNECT_TIMEOUT: config.connect_timeout_ms,
        DriverOption.REQUEST_TIMEOUT: config.read_timeout_ms,
        DriverOption.CONTACT_POINTS: tuple(
            format_contact_point(host, config.port) for host in config.hosts
        ),
        DriverOption.RETRY_POLICY_CLASS: MultipleRetryPolicy,
        DriverOption.RETRY_MAX_COUNT: config.query_retry_count,
        DriverOption.RECONNECTION_POLICY_CLASS: ExponentialReconnectionPolicy,
        DriverOption.RECONNECTION_BASE_DELAY: timedelta(
            milliseconds=config.min_reconnection_delay_ms
        ),
        DriverOption.RECONNECTION_MAX_DELAY: timedelta(
            milliseconds=config.max_reconnection_delay_ms
        ),
        DriverOption.LOAD_BALANCING_POLICY_CLASS: LocalDcFirstPolicy,
        # whole seconds, truncating
        DriverOption.SHUTDOWN_QUIET_PERIOD: config.quiet_period_before_close_ms // 1000,
        DriverOption.SHUTDOWN_TIMEOUT: config.timeout_before_close_ms // 1000,
    }
    if config.protocol_version is not None:
        options[DriverOption.PROTOCOL_VERSION] = config.protocol_version
    return builder.with_options(options)


def compression_properties(
    builder: DriverConfiguration, config: PolicyConfig, context: BuildContext
) -> DriverConfiguration:
    """Compression, only when one is chosen; NONE leaves the driver default."""
    if config.compression is Compression.NONE:
        return builder
    return builder.with_option(
        DriverOption.COMPRESSION, config.compression.value.lower()
    )


def local_dc_property(
    builder: DriverConfiguration, config: PolicyConfig, context: BuildContext
) -> DriverConfiguration:
    """Local datacenter, only when configured."""
    if config.local_dc is None:
        return builder
    return builder.with_option(
        DriverOption.LOAD_BALANCING_LOCAL_DATACENTER, config.local_dc
    )


def tls_properties(
    builder: DriverConfiguration, config: PolicyConfig, context: BuildContext
) -> DriverConfiguration:
    """
    Keystore locations, loaded key material and engine settings.

    A no-op when TLS is disabled. Key store settings are only honored when
    client authentication is enabled.
    """
    tls = config.tls
    if not tls.enabled:
        return builder

    def client_auth(value):
        return value if tls.client_auth_enabled else None

    if tls.client_auth_enabled and tls.key_store_path is None:
        logger.warning(
            "Client authentication is enabled but no key store is configured; "
            "no client certificate will be presented"
        )

    key_store_path = client_auth(tls.key_store_path)
    key_store_password = client_auth(tls.key_store_password)

    options = {}
    for option, value in (
        (DriverOption.SSL_TRUSTSTORE_PATH, tls.trust_store_path),
        (DriverOption.SSL_TRUSTSTORE_PASSWORD, tls.trust_store_password),
        (DriverOption.SSL_KEYSTORE_PATH, key_store_path),
        (DriverOption.SSL_KEYSTORE_PASSWORD, key_store_password),
    ):
        if value is not None:
            options[option] = str(value)

    trust_store = context.loader.load(
        tls.trust_store_path, tls.trust_store_password, tls.trust_store_type
    )
    if trust_store is not None:
        options[DriverOption.SSL_TRUSTSTORE] = trust_store

    key_store = context.loader.load(
        key_store_path, key_store_password, tls.key_store_type
    )
    if key_store is not None:
        options[DriverOption.SSL_KEYSTORE] = key_store

    options[DriverOption.SSL_ENGINE_FACTORY_CLASS] = DefaultSslEngineFactory
    options[DriverOption.SSL_CIPHER_SUITES] = tls.enabled_algorithms
    options[DriverOption.SSL_HOSTNAME_VALIDATION] = tls.hostname_validation
    return builder.with_options(options)


# Order matters: later stages may overwrite options set by earlier ones.
STAGES: Tuple[Stage, ...] = (
    basic_properties,
    compression_properties,
    local_dc_property,
    tls_properties,
)


def build_driver_configuration(
    config: PolicyConfig,
    *,
    parallelism: Optional[Callable[[], int]] = None,
    loader: Optional[TlsMaterialLoader] = None,
) -> DriverConfiguration:
    """
    Build the driver configuration for one session.

    Args:
        config: Validated connection settings
        parallelism: Returns the available parallelism used for the default
            local pool size (defaults to the CPU count)
        loader: Keystore loader used by the TLS stage

    Returns:
        A new, immutable DriverConfiguration

    Raises:
        CredentialLoadError: If TLS is enabled and a keystore cannot be loaded
    """
    context = BuildContext(
        parallelism=parallelism or cpu_parallelism,
        loader=loader or TlsMaterialLoader(),
    )
    return reduce(
        lambda builder, stage: stage(builder, config, context),
        STAGES,
        DriverConfiguration(),
    )
