"""
A connection factory that refuses unencrypted or anonymous sessions.

Select it with ``hearth.connection.factory: secure``. It connects exactly
like the default factory once the configuration passes its checks.
"""
from typing import FrozenSet

from hearth.configs.policy_config import PolicyConfig
from hearth.utility.exceptions import ConfigValidationError

from .default import DefaultConnectionFactory
from .session import ClusterSession

REQUIRE_CLIENT_AUTH = "hearth.connection.secure.require_client_auth"


class SecureConnectionFactory(DefaultConnectionFactory, factory_name="secure"):
    """
    Default factory with TLS and credentials made mandatory.

    Custom properties:
        hearth.connection.secure.require_client_auth: when ``true``, also
            require mutual TLS with a configured key store
    """

    @property
    def properties(self) -> FrozenSet[str]:
        return frozenset({REQUIRE_CLIENT_AUTH})

    def create_session(self, config: PolicyConfig) -> ClusterSession:
        self.check(config)
        return super().create_session(config)

    def check(self, config: PolicyConfig) -> None:
        """
        Validate ``config`` against this factory's requirements.

        Raises:
            ConfigValidationError: Listing every requirement not met
        """
        problems = []
        if not config.tls.enabled:
            problems.append("TLS must be enabled")
        if config.auth_provider is None:
            problems.append("credentials must be configured")

        require_client_auth = (
            config.custom_property(REQUIRE_CLIENT_AUTH, "false").strip().lower()
            == "true"
        )
        if require_client_auth:
            if not config.tls.client_auth_enabled:
                problems.append("client authentication must be enabled")
            if config.tls.key_store_path is None:
                problems.append("a key store must be configured")

        if problems:
            raise ConfigValidationError(
                f"The {self.factory_name} factory refuses this configuration: "
                + "; ".join(problems),
                problems=problems,
            )
