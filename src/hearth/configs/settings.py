"""
Shared default values for cluster connections.

Defaults live in pydantic models so they are validated once and so the
property-bag parser, the PolicyConfig model and the CLI all agree on them.
"""
from typing import Tuple

from pydantic import BaseModel, Field


class ConnectionDefaults(BaseModel):
    """Default connection configuration."""

    hosts: Tuple[str, ...] = Field(
        default=("localhost",), description="Contact points used for discovery"
    )
    port: int = Field(default=9042, ge=1, le=65535, description="Native port")
    connect_timeout_ms: int = Field(
        default=5_000, ge=1, description="Timeout for establishing a connection"
    )
    read_timeout_ms: int = Field(
        default=120_000, ge=1, description="Timeout for a single request"
    )
    min_reconnection_delay_ms: int = Field(
        default=1_000, ge=1, description="First reconnection delay"
    )
    max_reconnection_delay_ms: int = Field(
        default=60_000, ge=1, description="Reconnection delay ceiling"
    )
    query_retry_count: int = Field(
        default=60, ge=0, description="Retries per request before rethrowing"
    )
    quiet_period_before_close_ms: int = Field(
        default=0, ge=0, description="Quiet period before the pool shuts down"
    )
    timeout_before_close_ms: int = Field(
        default=15_000, ge=0, description="Upper bound on pool shutdown"
    )
    remote_connections_per_executor: int = Field(
        default=1, ge=1, description="Connections per remote node"
    )


class TlsDefaults(BaseModel):
    """Default TLS configuration."""

    keystore_type: str = Field(
        default="PKCS12", description="Keystore format for trust and key stores"
    )
    hostname_validation: bool = Field(
        default=True, description="Verify the node certificate matches its address"
    )


class ReadDefaults(BaseModel):
    """Default scanner configuration."""

    fetch_size_in_rows: int = Field(
        default=1_000, ge=1, description="Rows fetched per page"
    )
    consistency_level: str = Field(
        default="LOCAL_ONE", description="Consistency level for scans"
    )


# Singleton instances for easy access
CONNECTION_DEFAULTS = ConnectionDefaults()
TLS_DEFAULTS = TlsDefaults()
READ_DEFAULTS = ReadDefaults()


def default_local_pool_size(parallelism: int) -> int:
    """
    Local connections per executor when none is configured.

    Leaves one core to the host framework's own work.
    """
    return max(1, parallelism - 1)
