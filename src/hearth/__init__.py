"""
Policy-driven client sessions for Cassandra-compatible clusters.
"""
from .configs import PolicyConfig, ReadConf, TlsConfig
from .connections import (
    ClusterSession,
    ConnectionFactory,
    DriverConfiguration,
    DriverOption,
    build_driver_configuration,
    factory_from_properties,
    resolve_factory,
    session_from_properties,
)
from .scanner import DefaultScanner, Scanner, ScanResult

__all__ = [
    # Configuration
    "PolicyConfig",
    "ReadConf",
    "TlsConfig",
    # Sessions
    "ClusterSession",
    "ConnectionFactory",
    "DriverConfiguration",
    "DriverOption",
    "build_driver_configuration",
    "factory_from_properties",
    "resolve_factory",
    "session_from_properties",
    # Reading
    "DefaultScanner",
    "ScanResult",
    "Scanner",
]
