"""
TLS material for encrypted sessions.

- TlsMaterialLoader: keystore files -> in-memory CredentialStore
- DefaultSslEngineFactory: CredentialStores -> ssl.SSLContext
"""
from .engine import DefaultSslEngineFactory
from .loader import CredentialStore, TlsMaterialLoader

__all__ = ["CredentialStore", "DefaultSslEngineFactory", "TlsMaterialLoader"]
