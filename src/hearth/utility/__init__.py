"""
Utility functions and classes for hearth.
"""
from .exceptions import (
    AuthenticationError,
    ClusterConnectionError,
    ConfigValidationError,
    CredentialLoadError,
    HearthError,
    ResolutionError,
    ScanError,
    SessionError,
)

__all__ = [
    "HearthError",
    "ConfigValidationError",
    "CredentialLoadError",
    "ResolutionError",
    "SessionError",
    "ClusterConnectionError",
    "AuthenticationError",
    "ScanError",
]
