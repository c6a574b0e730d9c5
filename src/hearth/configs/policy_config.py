"""
Configuration models for cluster sessions.

PolicyConfig is the single immutable value every connection factory receives.
It is built once per worker (usually from the host framework's property bag,
see ``hearth.configs.properties``) and then shared read-only across any number
of concurrent ``create_session`` calls.
"""
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    ValidationError,
    field_validator,
    model_validator,
)

from hearth.utility.exceptions import ConfigValidationError

from .settings import CONNECTION_DEFAULTS, TLS_DEFAULTS


class Compression(str, Enum):
    """Wire compression supported by the native protocol."""

    NONE = "NONE"
    LZ4 = "LZ4"
    SNAPPY = "SNAPPY"


class TlsConfig(BaseModel):
    """TLS settings for a session. Inert unless ``enabled`` is set."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Encrypt client connections")
    trust_store_path: Optional[Path] = Field(
        default=None, description="Keystore holding trusted node certificates"
    )
    trust_store_password: Optional[str] = Field(default=None)
    trust_store_type: str = Field(default=TLS_DEFAULTS.keystore_type)
    client_auth_enabled: bool = Field(
        default=False, description="Present a client certificate to the nodes"
    )
    key_store_path: Optional[Path] = Field(
        default=None,
        description="Keystore with the client key; used only with client auth",
    )
    key_store_password: Optional[str] = Field(default=None)
    key_store_type: str = Field(default=TLS_DEFAULTS.keystore_type)
    enabled_algorithms: Tuple[str, ...] = Field(
        default=(), description="Cipher suites to offer, in preference order"
    )
    hostname_validation: bool = Field(
        default=TLS_DEFAULTS.hostname_validation,
        description="Check node certificates against the address connected to",
    )

    @field_validator("enabled_algorithms", mode="before")
    @classmethod
    def split_algorithms(cls, v):
        """Accept a comma separated string as well as a sequence."""
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        return v

    @field_validator("trust_store_type", "key_store_type")
    @classmethod
    def normalize_store_type(cls, v):
        """Keystore types are matched case-insensitively."""
        if not v or not v.strip():
            raise ValueError("Keystore type cannot be blank")
        return v.strip().upper()


class PolicyConfig(BaseModel):
    """
    Every user-tunable parameter of a cluster session.

    Validation happens on construction; the instance is frozen afterwards.
    Use ``PolicyConfig.create`` (or the property-bag parser) to get
    ConfigValidationError instead of pydantic's ValidationError.
    """

    model_config = ConfigDict(frozen=True)

    hosts: Tuple[IPvAnyAddress, ...] = Field(
        ..., description="Contact point addresses, in preference order"
    )
    port: int = Field(default=CONNECTION_DEFAULTS.port, ge=1, le=65535)
    local_connections_per_executor: Optional[int] = Field(default=None, gt=0)
    remote_connections_per_executor: Optional[int] = Field(default=None, gt=0)
    connect_timeout_ms: int = Field(default=CONNECTION_DEFAULTS.connect_timeout_ms, gt=0)
    read_timeout_ms: int = Field(default=CONNECTION_DEFAULTS.read_timeout_ms, gt=0)
    min_reconnection_delay_ms: int = Field(
        default=CONNECTION_DEFAULTS.min_reconnection_delay_ms, gt=0
    )
    max_reconnection_delay_ms: int = Field(
        default=CONNECTION_DEFAULTS.max_reconnection_delay_ms, gt=0
    )
    query_retry_count: int = Field(default=CONNECTION_DEFAULTS.query_retry_count, ge=0)
    compression: Compression = Field(default=Compression.NONE)
    local_dc: Optional[str] = Field(default=None)
    quiet_period_before_close_ms: int = Field(
        default=CONNECTION_DEFAULTS.quiet_period_before_close_ms, ge=0
    )
    timeout_before_close_ms: int = Field(
        default=CONNECTION_DEFAULTS.timeout_before_close_ms, ge=0
    )
    protocol_version: Optional[int] = Field(default=None, ge=1)
    tls: TlsConfig = Field(default_factory=TlsConfig)
    auth_provider: Optional[Any] = Field(
        default=None, description="Opaque credential provider attached to the cluster"
    )
    custom_properties: Tuple[Tuple[str, str], ...] = Field(
        default=(), description="Factory-specific properties from the bag"
    )

    @field_validator("hosts", mode="before")
    @classmethod
    def validate_hosts(cls, v):
        """Require at least one host."""
        hosts = parse_hosts(v or ())
        if not hosts:
            raise ValueError("At least one contact host is required")
        return hosts

    @field_validator("hosts")
    @classmethod
    def drop_duplicate_hosts(cls, v):
        """Drop duplicates by address, so '::1' and '0:0::1' are one host."""
        return tuple(dict.fromkeys(v))

    @field_validator("compression", mode="before")
    @classmethod
    def validate_compression(cls, v):
        """Compression names are case-insensitive."""
        if isinstance(v, str):
            valid = [c.value for c in Compression]
            if v.strip().upper() not in valid:
                raise ValueError(f"Compression must be one of {valid}, got '{v}'")
            return v.strip().upper()
        return v

    @field_validator("local_dc")
    @classmethod
    def blank_dc_is_absent(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @field_validator("custom_properties", mode="before")
    @classmethod
    def freeze_custom_properties(cls, v):
        if isinstance(v, dict):
            return tuple(sorted((str(k), str(val)) for k, val in v.items()))
        return v

    @model_validator(mode="after")
    def validate_reconnection_bounds(self):
        """The reconnection floor must not exceed the ceiling."""
        if self.min_reconnection_delay_ms > self.max_reconnection_delay_ms:
            raise ValueError(
                "min_reconnection_delay_ms "
                f"({self.min_reconnection_delay_ms}) must not exceed "
                f"max_reconnection_delay_ms ({self.max_reconnection_delay_ms})"
            )
        return self

    @classmethod
    def create(cls, **values: Any) -> "PolicyConfig":
        """
        Build a PolicyConfig, reporting problems as ConfigValidationError.

        Raises:
            ConfigValidationError: If any field is missing or malformed
        """
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigValidationError(
                f"Invalid connection configuration: {e}", errors=e.errors()
            ) from e

    @property
    def contact_hosts(self) -> Tuple[str, ...]:
        """Contact point addresses as strings, in input order."""
        return tuple(str(host) for host in self.hosts)

    def custom_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a factory-specific property."""
        return dict(self.custom_properties).get(name, default)

    def with_auth_provider(self, auth_provider: Any) -> "PolicyConfig":
        """Return a copy carrying the given credential provider."""
        return self.model_copy(update={"auth_provider": auth_provider})


def parse_hosts(value: Union[str, Iterable[str]]) -> Tuple[str, ...]:
    """Split a comma separated host list, ignoring blanks."""
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(part).strip() for part in value if str(part).strip())
