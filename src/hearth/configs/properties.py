"""
Reading PolicyConfig and ReadConf from the host framework's property bag.

The host framework hands every worker a flat ``{key: value}`` mapping. Keys
under the ``hearth.`` prefix belong to us: unknown ones are rejected (with
suggestions) unless the selected connection factory whitelists them, in which
case they travel to the factory on ``PolicyConfig.custom_properties``.
"""
import difflib
import ipaddress
import socket
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from pydantic import ValidationError

from hearth.auth import AUTH_PROPERTIES, auth_provider_from_properties
from hearth.utility.exceptions import ConfigValidationError

from .policy_config import PolicyConfig, TlsConfig, parse_hosts
from .read_config import ReadConf
from .settings import CONNECTION_DEFAULTS

PREFIX = "hearth."

FACTORY = "hearth.connection.factory"
HOST = "hearth.connection.host"
PORT = "hearth.connection.port"
LOCAL_CONNECTIONS = "hearth.connection.local_connections_per_executor"
REMOTE_CONNECTIONS = "hearth.connection.remote_connections_per_executor"
CONNECT_TIMEOUT = "hearth.connection.timeout_ms"
READ_TIMEOUT = "hearth.read.timeout_ms"
COMPRESSION = "hearth.connection.compression"
LOCAL_DC = "hearth.connection.local_dc"
MIN_RECONNECTION_DELAY = "hearth.connection.reconnection_delay_ms.min"
MAX_RECONNECTION_DELAY = "hearth.connection.reconnection_delay_ms.max"
QUERY_RETRY_COUNT = "hearth.query.retry.count"
QUIET_PERIOD_BEFORE_CLOSE = "hearth.connection.quiet_period_before_close_ms"
TIMEOUT_BEFORE_CLOSE = "hearth.connection.timeout_before_close_ms"
PROTOCOL_VERSION = "hearth.connection.protocol_version"

SSL_ENABLED = "hearth.connection.ssl.enabled"
SSL_TRUST_STORE_PATH = "hearth.connection.ssl.trust_store.path"
SSL_TRUST_STORE_PASSWORD = "hearth.connection.ssl.trust_store.password"
SSL_TRUST_STORE_TYPE = "hearth.connection.ssl.trust_store.type"
SSL_CLIENT_AUTH_ENABLED = "hearth.connection.ssl.client_auth.enabled"
SSL_KEY_STORE_PATH = "hearth.connection.ssl.key_store.path"
SSL_KEY_STORE_PASSWORD = "hearth.connection.ssl.key_store.password"
SSL_KEY_STORE_TYPE = "hearth.connection.ssl.key_store.type"
SSL_ENABLED_ALGORITHMS = "hearth.connection.ssl.enabled_algorithms"
SSL_HOSTNAME_VALIDATION = "hearth.connection.ssl.hostname_validation"

FETCH_SIZE_IN_ROWS = "hearth.input.fetch.size_in_rows"
CONSISTENCY_LEVEL = "hearth.input.consistency.level"

# property key -> PolicyConfig field
POLICY_FIELDS: Dict[str, str] = {
    PORT: "port",
    LOCAL_CONNECTIONS: "local_connections_per_executor",
    REMOTE_CONNECTIONS: "remote_connections_per_executor",
    CONNECT_TIMEOUT: "connect_timeout_ms",
    READ_TIMEOUT: "read_timeout_ms",
    COMPRESSION: "compression",
    LOCAL_DC: "local_dc",
    MIN_RECONNECTION_DELAY: "min_reconnection_delay_ms",
    MAX_RECONNECTION_DELAY: "max_reconnection_delay_ms",
    QUERY_RETRY_COUNT: "query_retry_count",
    QUIET_PERIOD_BEFORE_CLOSE: "quiet_period_before_close_ms",
    TIMEOUT_BEFORE_CLOSE: "timeout_before_close_ms",
    PROTOCOL_VERSION: "protocol_version",
}

# property key -> TlsConfig field
TLS_FIELDS: Dict[str, str] = {
    SSL_ENABLED: "enabled",
    SSL_TRUST_STORE_PATH: "trust_store_path",
    SSL_TRUST_STORE_PASSWORD: "trust_store_password",
    SSL_TRUST_STORE_TYPE: "trust_store_type",
    SSL_CLIENT_AUTH_ENABLED: "client_auth_enabled",
    SSL_KEY_STORE_PATH: "key_store_path",
    SSL_KEY_STORE_PASSWORD: "key_store_password",
    SSL_KEY_STORE_TYPE: "key_store_type",
    SSL_ENABLED_ALGORITHMS: "enabled_algorithms",
    SSL_HOSTNAME_VALIDATION: "hostname_validation",
}

# property key -> ReadConf field
READ_FIELDS: Dict[str, str] = {
    FETCH_SIZE_IN_ROWS: "fetch_size_in_rows",
    CONSISTENCY_LEVEL: "consistency_level",
}

KNOWN_PROPERTIES = frozenset(
    {FACTORY, HOST}
    | set(POLICY_FIELDS)
    | set(TLS_FIELDS)
    | set(READ_FIELDS)
    | AUTH_PROPERTIES
)


def flatten_properties(data: Mapping[str, Any], parent: str = "") -> Dict[str, Any]:
    """
    Flatten nested mappings (as loaded from YAML) into dotted keys.

    ``{"hearth": {"connection": {"port": 9042}}}`` becomes
    ``{"hearth.connection.port": "9042"}``. Values become strings, the way
    the host framework delivers them; lists are joined with commas.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_properties(value, name))
        elif isinstance(value, (list, tuple)):
            flat[name] = ",".join(str(item) for item in value)
        elif value is None:
            flat[name] = None
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


def check_properties(
    properties: Mapping[str, Any], allowed: Iterable[str] = ()
) -> None:
    """
    Reject unknown ``hearth.*`` keys.

    Args:
        properties: Flat property bag
        allowed: Extra names accepted, usually a factory's ``properties``

    Raises:
        ConfigValidationError: Listing each unknown key with close matches
    """
    valid = KNOWN_PROPERTIES | frozenset(allowed)
    unknown = sorted(
        key for key in properties if key.startswith(PREFIX) and key not in valid
    )
    if not unknown:
        return

    lines = []
    for key in unknown:
        suggestions = difflib.get_close_matches(key, sorted(valid), n=3)
        hint = f" (did you mean: {', '.join(suggestions)}?)" if suggestions else ""
        lines.append(f"  {key}{hint}")
    raise ConfigValidationError(
        "Unknown configuration properties:\n" + "\n".join(lines), unknown=unknown
    )


def resolve_contact_points(
    hosts: Iterable[str], resolve_host: Callable[[str], str] = socket.gethostbyname
) -> tuple:
    """
    Resolve host names to addresses, keeping literal addresses as they are.

    Raises:
        ConfigValidationError: If a host name does not resolve
    """
    resolved = []
    for host in hosts:
        try:
            resolved.append(str(ipaddress.ip_address(host)))
            continue
        except ValueError:
            pass
        try:
            resolved.append(resolve_host(host))
        except (OSError, UnicodeError) as e:
            # UnicodeError: idna rejects empty or over-long labels
            raise ConfigValidationError(
                f"Cannot resolve contact host '{host}': {e}", host=host
            ) from e
    return tuple(resolved)


def _pick(properties: Mapping[str, Any], fields: Mapping[str, str]) -> Dict[str, Any]:
    return {
        field: properties[key]
        for key, field in fields.items()
        if key in properties and properties[key] is not None and properties[key] != ""
    }


def policy_config_from_properties(
    properties: Mapping[str, Any],
    *,
    factory_properties: Iterable[str] = (),
    auth_provider: Optional[Any] = None,
    resolve_host: Callable[[str], str] = socket.gethostbyname,
) -> PolicyConfig:
    """
    Build a PolicyConfig from a flat property bag.

    Args:
        properties: Flat property bag from the host framework
        factory_properties: Custom keys the selected factory accepts
        auth_provider: Credential provider to attach; when omitted one is
            built from ``hearth.auth.*`` if present
        resolve_host: Name resolver for contact hosts (injectable for tests)

    Returns:
        Validated, frozen PolicyConfig

    Raises:
        ConfigValidationError: For unknown keys, unresolvable hosts or
            invalid values
    """
    factory_properties = frozenset(factory_properties)
    check_properties(properties, factory_properties)

    hosts = parse_hosts(properties.get(HOST) or CONNECTION_DEFAULTS.hosts)
    if not hosts:
        raise ConfigValidationError(f"'{HOST}' must name at least one host")

    if auth_provider is None:
        auth_provider = auth_provider_from_properties(properties)

    custom = {
        key: str(value)
        for key, value in properties.items()
        if key in factory_properties and value is not None
    }

    try:
        return PolicyConfig(
            hosts=resolve_contact_points(hosts, resolve_host),
            tls=TlsConfig(**_pick(properties, TLS_FIELDS)),
            auth_provider=auth_provider,
            custom_properties=custom,
            **_pick(properties, POLICY_FIELDS),
        )
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid connection configuration: {e}", errors=e.errors()
        ) from e


def read_conf_from_properties(properties: Mapping[str, Any]) -> ReadConf:
    """
    Build a ReadConf from a flat property bag.

    Raises:
        ConfigValidationError: If a read setting is invalid
    """
    try:
        return ReadConf(**_pick(properties, READ_FIELDS))
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid read configuration: {e}", errors=e.errors()
        ) from e
