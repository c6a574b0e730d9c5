"""
SSL contexts for encrypted sessions.

The driver takes a ready ``ssl.SSLContext``. DefaultSslEngineFactory builds
one from the in-memory stores produced by TlsMaterialLoader.
"""
import os
import secrets
import ssl
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from hearth.utility.exceptions import ConfigValidationError, CredentialLoadError

from .loader import CredentialStore


class DefaultSslEngineFactory:
    """Creates client-side SSL contexts."""

    def create_context(
        self,
        trust_store: Optional[CredentialStore] = None,
        key_store: Optional[CredentialStore] = None,
        cipher_suites: Sequence[str] = (),
        hostname_validation: bool = True,
    ) -> ssl.SSLContext:
        """
        Build an SSL context.

        Args:
            trust_store: Certificates to trust; system defaults when None
            key_store: Client certificate and key for mutual TLS
            cipher_suites: OpenSSL cipher names; library defaults when empty
            hostname_validation: Check node certificates against the
                address connected to

        Raises:
            ConfigValidationError: If none of the cipher suites is usable
            CredentialLoadError: If the client key does not fit its certificate
        """
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = hostname_validation
        context.verify_mode = ssl.CERT_REQUIRED

        if trust_store is not None and trust_store.certificates:
            context.load_verify_locations(cadata=trust_store.certificates_pem())
        else:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)

        if key_store is not None:
            self._load_client_chain(context, key_store)

        if cipher_suites:
            try:
                context.set_ciphers(":".join(cipher_suites))
            except ssl.SSLError as e:
                raise ConfigValidationError(
                    f"No usable cipher suite in {list(cipher_suites)}: {e}"
                ) from e

        return context

    def _load_client_chain(
        self, context: ssl.SSLContext, key_store: CredentialStore
    ) -> None:
        # one-time password: the key never reaches disk unencrypted
        password = secrets.token_urlsafe(32)
        key_pem = key_store.private_key_pem(password.encode("ascii"))
        if key_pem is None:
            raise CredentialLoadError(
                f"{key_store.keystore_type} key store holds no private key"
            )

        # ssl only loads certificate chains from files; the file lives in a
        # private directory that is removed as soon as the chain is loaded.
        with tempfile.TemporaryDirectory(prefix="hearth-tls-") as directory:
            chain_file = Path(directory) / "client.pem"
            fd = os.open(chain_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as handle:
                handle.write(key_pem)
                handle.write(key_store.certificates_pem().encode("ascii"))
            try:
                context.load_cert_chain(str(chain_file), password=password)
            except ssl.SSLError as e:
                raise CredentialLoadError(
                    f"Client key does not match its certificate chain: {e}"
                ) from e
