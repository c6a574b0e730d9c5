"""
Connection management for hearth.

Turns a PolicyConfig into a live ClusterSession through a pluggable
connection factory.

Key components:
- build_driver_configuration: PolicyConfig -> immutable DriverConfiguration
- ConnectionFactory: Interface for connection factories
- DefaultConnectionFactory: Factory used when none is named
- SecureConnectionFactory: Factory that requires TLS and credentials
- resolve_factory: Factory lookup by name (built-ins and entry points)
"""
from .base import ConnectionFactory, register_factory
from .builder import STAGES, build_driver_configuration
from .default import DefaultConnectionFactory
from .options import DriverConfiguration, DriverOption
from .resolver import (
    factory_from_properties,
    factory_names,
    resolve_factory,
    session_from_properties,
)
from .secure import SecureConnectionFactory
from .session import ClusterSession

__all__ = [
    "ClusterSession",
    "ConnectionFactory",
    "DefaultConnectionFactory",
    "DriverConfiguration",
    "DriverOption",
    "STAGES",
    "SecureConnectionFactory",
    "build_driver_configuration",
    "factory_from_properties",
    "factory_names",
    "register_factory",
    "resolve_factory",
    "session_from_properties",
]
