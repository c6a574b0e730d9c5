"""
Custom exceptions for hearth - clear, actionable error handling.

hearth uses a small exception hierarchy so callers can tell a bad
configuration apart from unreadable credentials or an unreachable cluster.
Every error is raised synchronously from ``create_session``; nothing here is
retried. Retrying belongs to the retry and reconnection policies acting on a
session that was created successfully.

Exception Hierarchy:
    HearthError (base)
    ├── ConfigValidationError - Malformed or missing configuration values
    ├── CredentialLoadError - TLS keystore unreadable, bad password or type
    ├── ResolutionError - Named connection factory not registered
    ├── SessionError
    │   ├── ClusterConnectionError - No contact point reachable within timeout
    │   └── AuthenticationError - Credentials rejected by the cluster
    └── ScanError - Rows could not be projected onto the requested columns

Usage Guidelines:
    - Always use exception chaining (`raise SpecificError(...) from e`) when
      wrapping driver or pydantic exceptions to keep the original traceback.
    - ClusterConnectionError is named to avoid shadowing the builtin
      ConnectionError.
"""


class HearthError(Exception):
    """Base exception for all hearth errors."""

    pass


class ConfigValidationError(HearthError):
    """Raised when a configuration value is malformed or missing."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.context = kwargs


class CredentialLoadError(HearthError):
    """Raised when TLS key material cannot be loaded."""

    pass


class ResolutionError(HearthError):
    """Raised when a connection factory name cannot be resolved."""

    pass


class SessionError(HearthError):
    """Base exception for session creation failures."""

    pass


class ClusterConnectionError(SessionError):
    """No contact point could be reached within the connect timeout."""

    pass


class AuthenticationError(SessionError):
    """The cluster rejected the supplied credentials."""

    pass


class ScanError(HearthError):
    """Error streaming rows from a scanner."""

    pass
