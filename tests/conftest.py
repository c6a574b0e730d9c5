"""
Common test fixtures and configuration.

This module provides shared fixtures following hearth's testing approach:
- No cluster needed: the driver's Cluster is always mocked
- Real key material: keystores are generated on the fly with cryptography
- Keep fixtures simple and maintainable
"""
import datetime
import os
import sys
from pathlib import Path

# Keep test runs from writing logs/hearth.log; must happen before hearth
# creates its module-level loggers.
os.environ.setdefault("HEARTH_LOG_TO_FILE", "false")

# Add src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest  # noqa: E402
from cryptography import x509  # noqa: E402
from cryptography.hazmat.primitives import hashes, serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from cryptography.hazmat.primitives.serialization import pkcs12  # noqa: E402
from cryptography.x509.oid import NameOID  # noqa: E402

from hearth.configs import PolicyConfig  # noqa: E402

KEYSTORE_PASSWORD = "changeit"


def make_certificate(common_name: str = "hearth-test"):
    """Self-signed certificate and its private key."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return cert, key


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for tests."""
    return tmp_path


@pytest.fixture(scope="session")
def certificate():
    """A self-signed (certificate, private key) pair shared by the session."""
    return make_certificate()


@pytest.fixture
def key_store_file(temp_dir, certificate):
    """PKCS12 key store holding the certificate and its key."""
    cert, key = certificate
    path = temp_dir / "client.p12"
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"client",
            key,
            cert,
            None,
            serialization.BestAvailableEncryption(KEYSTORE_PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture
def trust_store_file(temp_dir, certificate):
    """PKCS12 trust store holding only the certificate."""
    cert, _ = certificate
    path = temp_dir / "truststore.p12"
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            None,
            None,
            None,
            [cert],
            serialization.BestAvailableEncryption(KEYSTORE_PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture
def pem_bundle_file(temp_dir, certificate):
    """Unencrypted PEM file with the private key followed by the certificate."""
    cert, key = certificate
    path = temp_dir / "client.pem"
    path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        + cert.public_bytes(serialization.Encoding.PEM)
    )
    return path


@pytest.fixture
def fake_resolver():
    """Name resolver that knows a couple of hosts and nothing else."""
    known = {"localhost": "127.0.0.1", "node1.example": "10.0.0.1"}

    def resolve(host):
        if host not in known:
            raise OSError(f"Name or service not known: {host}")
        return known[host]

    return resolve


@pytest.fixture
def make_config():
    """Build a PolicyConfig from keyword overrides."""

    def _make(**overrides):
        values = {"hosts": ("10.0.0.1",)}
        values.update(overrides)
        return PolicyConfig(**values)

    return _make
