"""
Loading TLS key material from keystore files.

Keystores are read once per session creation and parsed into an in-memory
CredentialStore. The file handle never outlives the ``load`` call, and any
problem (missing file, wrong password, wrong type) is a CredentialLoadError:
a session that asked for TLS is never quietly created without it.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from hearth.messages import get_logger
from hearth.utility.exceptions import CredentialLoadError

logger = get_logger("hearth.tls.loader")


@dataclass(frozen=True)
class CredentialStore:
    """Certificates (and optionally a private key) held in memory."""

    keystore_type: str
    certificates: Tuple[x509.Certificate, ...]
    private_key: Optional[Any] = None

    def certificates_pem(self) -> str:
        """All certificates as one PEM bundle."""
        return "".join(
            cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
            for cert in self.certificates
        )

    def private_key_pem(self, password: Optional[bytes] = None) -> Optional[bytes]:
        """
        The private key as PKCS#8 PEM, if there is one.

        Encrypted with ``password`` when given, unencrypted otherwise.
        """
        if self.private_key is None:
            return None
        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )


def _password_bytes(password: Optional[str]) -> Optional[bytes]:
    return password.encode("utf-8") if password is not None else None


def _parse_pkcs12(handle: BinaryIO, password: Optional[str]) -> CredentialStore:
    key, cert, additional = pkcs12.load_key_and_certificates(
        handle.read(), _password_bytes(password)
    )
    certificates = tuple(c for c in (cert, *additional) if c is not None)
    return CredentialStore("PKCS12", certificates, key)


def _parse_pem(handle: BinaryIO, password: Optional[str]) -> CredentialStore:
    data = handle.read()
    certificates = tuple(x509.load_pem_x509_certificates(data))
    key = None
    if b"PRIVATE KEY-----" in data:
        key = serialization.load_pem_private_key(data, _password_bytes(password))
    return CredentialStore("PEM", certificates, key)


class TlsMaterialLoader:
    """
    Parses keystore files into CredentialStores.

    Supported types are ``PKCS12`` (alias ``P12``/``PFX``) and ``PEM``.
    Java ``JKS`` stores are not readable here; convert them with
    ``keytool -importkeystore -deststoretype PKCS12``.
    """

    _PARSERS = {
        "PKCS12": _parse_pkcs12,
        "PEM": _parse_pem,
    }
    _ALIASES = {"P12": "PKCS12", "PFX": "PKCS12"}

    def load(
        self,
        path: Optional[Union[str, Path]],
        password: Optional[str],
        keystore_type: str,
    ) -> Optional[CredentialStore]:
        """
        Load a keystore file.

        Args:
            path: Keystore location; None means there is nothing to load
            password: Keystore password; None means no password
            keystore_type: ``PKCS12`` or ``PEM``

        Returns:
            CredentialStore, or None when ``path`` is None

        Raises:
            CredentialLoadError: If the file is missing or unreadable, the
                password is wrong or the type does not match the content
        """
        if path is None:
            return None

        store_type = (keystore_type or "").strip().upper()
        store_type = self._ALIASES.get(store_type, store_type)
        parser = self._PARSERS.get(store_type)
        if parser is None:
            raise CredentialLoadError(
                f"Unsupported keystore type '{keystore_type}' for {path}. "
                f"Supported types: {sorted(self._PARSERS)}"
            )

        try:
            with open(path, "rb") as handle:
                store = parser(handle, password)
        except OSError as e:
            raise CredentialLoadError(f"Cannot read keystore {path}: {e}") from e
        except (ValueError, TypeError) as e:
            # cryptography reports wrong passwords and malformed content
            # as ValueError / TypeError
            raise CredentialLoadError(
                f"Cannot open {store_type} keystore {path} "
                f"(wrong password or keystore type?): {e}"
            ) from e

        if not store.certificates and store.private_key is None:
            raise CredentialLoadError(f"Keystore {path} contains no certificates")

        logger.debug(
            f"Loaded {len(store.certificates)} certificate(s) from {store_type} "
            f"keystore {path}"
        )
        return store
