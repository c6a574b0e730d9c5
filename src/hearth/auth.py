"""
Credential providers for cluster sessions.

Factories treat the auth provider as an opaque capability: whatever is on
``PolicyConfig.auth_provider`` is attached to the cluster as-is. This module
covers the common case of a username and password in the property bag.
"""
from typing import Mapping, Optional

from cassandra.auth import AuthProvider, PlainTextAuthProvider

from hearth.utility.exceptions import ConfigValidationError

USERNAME = "hearth.auth.username"
PASSWORD = "hearth.auth.password"

AUTH_PROPERTIES = frozenset({USERNAME, PASSWORD})


def auth_provider_from_properties(
    properties: Mapping[str, object]
) -> Optional[AuthProvider]:
    """
    Build a password authenticator from the property bag.

    Args:
        properties: Flat property bag

    Returns:
        PlainTextAuthProvider, or None when no username is configured
        (anonymous connection)

    Raises:
        ConfigValidationError: If a username is given without a password
    """
    username = properties.get(USERNAME)
    if username is None or not str(username).strip():
        return None

    password = properties.get(PASSWORD)
    if password is None:
        raise ConfigValidationError(
            f"'{USERNAME}' is set but '{PASSWORD}' is missing"
        )
    return PlainTextAuthProvider(username=str(username), password=str(password))
