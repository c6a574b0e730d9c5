"""
Configuration models for hearth sessions.
"""
from .policy_config import Compression, PolicyConfig, TlsConfig
from .properties import (
    check_properties,
    flatten_properties,
    policy_config_from_properties,
    read_conf_from_properties,
)
from .read_config import ReadConf
from .settings import (
    CONNECTION_DEFAULTS,
    READ_DEFAULTS,
    TLS_DEFAULTS,
    ConnectionDefaults,
    default_local_pool_size,
)

__all__ = [
    "CONNECTION_DEFAULTS",
    "Compression",
    "ConnectionDefaults",
    "PolicyConfig",
    "READ_DEFAULTS",
    "ReadConf",
    "TLS_DEFAULTS",
    "TlsConfig",
    "check_properties",
    "default_local_pool_size",
    "flatten_properties",
    "policy_config_from_properties",
    "read_conf_from_properties",
]
