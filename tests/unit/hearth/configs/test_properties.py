"""
Tests for reading configuration from the property bag.
"""
import pytest
from cassandra.auth import PlainTextAuthProvider

from hearth.configs import (
    Compression,
    check_properties,
    flatten_properties,
    policy_config_from_properties,
    read_conf_from_properties,
)
from hearth.configs.properties import KNOWN_PROPERTIES, resolve_contact_points
from hearth.utility.exceptions import ConfigValidationError


class TestFlattenProperties:
    """Nested YAML -> dotted keys."""

    def test_nested_mappings(self):
        """Test nested mappings become dotted keys with string values."""
        flat = flatten_properties(
            {"hearth": {"connection": {"port": 9043, "ssl": {"enabled": True}}}}
        )

        assert flat == {
            "hearth.connection.port": "9043",
            "hearth.connection.ssl.enabled": "true",
        }

    def test_lists_become_comma_strings(self):
        """Test host lists collapse to the comma form."""
        flat = flatten_properties({"hearth.connection.host": ["10.0.0.1", "10.0.0.2"]})

        assert flat == {"hearth.connection.host": "10.0.0.1,10.0.0.2"}

    def test_none_is_kept(self):
        """Test null values stay None so they count as absent."""
        assert flatten_properties({"hearth": {"connection": {"local_dc": None}}}) == {
            "hearth.connection.local_dc": None
        }


class TestCheckProperties:
    """Unknown key detection."""

    def test_known_keys_pass(self):
        """Test every known key is accepted."""
        check_properties({key: "x" for key in KNOWN_PROPERTIES})

    def test_foreign_keys_ignored(self):
        """Test keys outside the hearth prefix belong to someone else."""
        check_properties({"spark.executor.cores": "4", "other": "1"})

    def test_unknown_key_suggests_close_match(self):
        """Test a typo is reported with a suggestion."""
        with pytest.raises(ConfigValidationError) as exc_info:
            check_properties({"hearth.connection.prot": "9042"})

        message = str(exc_info.value)
        assert "hearth.connection.prot" in message
        assert "hearth.connection.port" in message
        assert exc_info.value.context["unknown"] == ["hearth.connection.prot"]

    def test_whitelisted_keys_pass(self):
        """Test a factory's custom keys are accepted."""
        check_properties(
            {"hearth.connection.vendor.region": "eu"},
            allowed={"hearth.connection.vendor.region"},
        )


class TestResolveContactPoints:
    """Host name resolution."""

    def test_addresses_pass_through(self):
        """Test literal addresses are not looked up."""

        def fail(host):
            raise AssertionError("should not resolve")

        assert resolve_contact_points(["10.0.0.1", "::1"], fail) == ("10.0.0.1", "::1")

    def test_names_are_resolved(self, fake_resolver):
        """Test names go through the resolver."""
        assert resolve_contact_points(["node1.example"], fake_resolver) == ("10.0.0.1",)

    def test_unresolvable_name(self, fake_resolver):
        """Test resolution failure is a configuration error."""
        with pytest.raises(ConfigValidationError) as exc_info:
            resolve_contact_points(["nowhere.example"], fake_resolver)

        assert "nowhere.example" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.parametrize("host", ["node..example", "a" * 64 + ".example"])
    def test_malformed_name(self, host):
        """Test names the resolver cannot even encode are configuration errors."""
        with pytest.raises(ConfigValidationError) as exc_info:
            resolve_contact_points([host])

        assert exc_info.value.context["host"] == host
        assert isinstance(exc_info.value.__cause__, UnicodeError)

    def test_malformed_name_from_bag(self):
        """Test a malformed host in the bag never escapes as a raw error."""
        with pytest.raises(ConfigValidationError):
            policy_config_from_properties({"hearth.connection.host": "node..example"})


class TestPolicyConfigFromProperties:
    """Property bag -> PolicyConfig."""

    def test_empty_bag_uses_defaults(self, fake_resolver):
        """Test an empty bag connects to localhost with defaults."""
        config = policy_config_from_properties({}, resolve_host=fake_resolver)

        assert config.contact_hosts == ("127.0.0.1",)
        assert config.port == 9042
        assert config.tls.enabled is False

    def test_full_bag(self, fake_resolver):
        """Test every policy key reaches its field."""
        config = policy_config_from_properties(
            {
                "hearth.connection.host": "node1.example,10.0.0.2",
                "hearth.connection.port": "9043",
                "hearth.connection.local_connections_per_executor": "4",
                "hearth.connection.remote_connections_per_executor": "2",
                "hearth.connection.timeout_ms": "2000",
                "hearth.read.timeout_ms": "30000",
                "hearth.connection.compression": "snappy",
                "hearth.connection.local_dc": "dc1",
                "hearth.connection.reconnection_delay_ms.min": "500",
                "hearth.connection.reconnection_delay_ms.max": "8000",
                "hearth.query.retry.count": "3",
                "hearth.connection.quiet_period_before_close_ms": "1500",
                "hearth.connection.timeout_before_close_ms": "4500",
                "hearth.connection.protocol_version": "4",
            },
            resolve_host=fake_resolver,
        )

        assert config.contact_hosts == ("10.0.0.1", "10.0.0.2")
        assert config.port == 9043
        assert config.local_connections_per_executor == 4
        assert config.remote_connections_per_executor == 2
        assert config.connect_timeout_ms == 2000
        assert config.read_timeout_ms == 30000
        assert config.compression is Compression.SNAPPY
        assert config.local_dc == "dc1"
        assert config.min_reconnection_delay_ms == 500
        assert config.max_reconnection_delay_ms == 8000
        assert config.query_retry_count == 3
        assert config.quiet_period_before_close_ms == 1500
        assert config.timeout_before_close_ms == 4500
        assert config.protocol_version == 4

    def test_tls_keys(self, fake_resolver, tmp_path):
        """Test TLS keys reach TlsConfig."""
        config = policy_config_from_properties(
            {
                "hearth.connection.host": "10.0.0.1",
                "hearth.connection.ssl.enabled": "true",
                "hearth.connection.ssl.trust_store.path": str(tmp_path / "trust.p12"),
                "hearth.connection.ssl.trust_store.password": "secret",
                "hearth.connection.ssl.client_auth.enabled": "true",
                "hearth.connection.ssl.key_store.path": str(tmp_path / "key.p12"),
                "hearth.connection.ssl.key_store.type": "pem",
                "hearth.connection.ssl.enabled_algorithms": "AES256-SHA,AES128-SHA",
                "hearth.connection.ssl.hostname_validation": "false",
            },
            resolve_host=fake_resolver,
        )

        tls = config.tls
        assert tls.enabled is True
        assert tls.trust_store_path == tmp_path / "trust.p12"
        assert tls.trust_store_password == "secret"
        assert tls.client_auth_enabled is True
        assert tls.key_store_path == tmp_path / "key.p12"
        assert tls.key_store_type == "PEM"
        assert tls.enabled_algorithms == ("AES256-SHA", "AES128-SHA")
        assert tls.hostname_validation is False

    def test_blank_values_are_absent(self, fake_resolver):
        """Test empty strings fall back to defaults."""
        config = policy_config_from_properties(
            {"hearth.connection.port": "", "hearth.connection.local_dc": ""},
            resolve_host=fake_resolver,
        )

        assert config.port == 9042
        assert config.local_dc is None

    def test_invalid_value_is_config_error(self, fake_resolver):
        """Test pydantic errors surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError) as exc_info:
            policy_config_from_properties(
                {"hearth.connection.port": "not-a-port"}, resolve_host=fake_resolver
            )

        assert exc_info.value.context["errors"]

    def test_unknown_key_rejected(self, fake_resolver):
        """Test unknown hearth keys stop parsing."""
        with pytest.raises(ConfigValidationError):
            policy_config_from_properties(
                {"hearth.connection.compresion": "lz4"}, resolve_host=fake_resolver
            )

    def test_custom_properties_collected(self, fake_resolver):
        """Test whitelisted keys travel on custom_properties."""
        config = policy_config_from_properties(
            {"hearth.connection.vendor.region": "eu"},
            factory_properties={"hearth.connection.vendor.region"},
            resolve_host=fake_resolver,
        )

        assert config.custom_property("hearth.connection.vendor.region") == "eu"

    def test_credentials_from_bag(self, fake_resolver):
        """Test username/password build a password authenticator."""
        config = policy_config_from_properties(
            {"hearth.auth.username": "worker", "hearth.auth.password": "pw"},
            resolve_host=fake_resolver,
        )

        assert isinstance(config.auth_provider, PlainTextAuthProvider)
        assert config.auth_provider.username == "worker"

    def test_explicit_provider_wins(self, fake_resolver):
        """Test a provider handed in is used over bag credentials."""
        provider = object()
        config = policy_config_from_properties(
            {"hearth.auth.username": "worker", "hearth.auth.password": "pw"},
            auth_provider=provider,
            resolve_host=fake_resolver,
        )

        assert config.auth_provider is provider


class TestReadConfFromProperties:
    """Property bag -> ReadConf."""

    def test_defaults(self):
        """Test scanner defaults."""
        read_conf = read_conf_from_properties({})

        assert read_conf.fetch_size_in_rows == 1000
        assert read_conf.consistency_level == "LOCAL_ONE"

    def test_values(self):
        """Test scanner keys reach ReadConf."""
        read_conf = read_conf_from_properties(
            {
                "hearth.input.fetch.size_in_rows": "250",
                "hearth.input.consistency.level": "quorum",
            }
        )

        assert read_conf.fetch_size_in_rows == 250
        assert read_conf.consistency_level == "QUORUM"

    def test_unknown_consistency_level(self):
        """Test a consistency level the driver does not know."""
        with pytest.raises(ConfigValidationError) as exc_info:
            read_conf_from_properties({"hearth.input.consistency.level": "MOST"})

        assert "Consistency level must be one of" in str(exc_info.value)
