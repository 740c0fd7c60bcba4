"""Certificate utility functions for key generation, serialization, and path validation."""

import uuid

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.x509.oid import ExtendedKeyUsageOID, ObjectIdentifier
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from .errors import KeyGenerationError


def generate_private_key(key_size: int = 4096) -> RSAPrivateKey:
    """Generate RSA private key with specified size.

    Raises:
        KeyGenerationError: If the size is rejected or RSA is unavailable
    """
    try:
        return rsa.generate_private_key(
            public_exponent=65537,
            key_size=key_size,
        )
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyGenerationError(f"failed to generate {key_size}-bit RSA key: {e}") from e


def serialize_private_key(key: RSAPrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS8, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> RSAPrivateKey:
    """Deserialize private key from PEM bytes."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, RSAPrivateKey):
        raise ValueError("expected RSA private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def generate_serial_number() -> int:
    """Generate certificate serial number from UUID4.

    UUID v4 gives a 128-bit value with ~122 bits of randomness, above the
    64-bit CSPRNG minimum for serial numbers.
    """
    return uuid.uuid4().int


def get_certificate_serial_hex(cert: x509.Certificate) -> str:
    """Return certificate serial number as hex with colons (e.g., 3A:F2:B1:...)."""
    serial_hex = f"{cert.serial_number:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return ":".join(serial_hex[i : i + 2] for i in range(0, len(serial_hex), 2))


def key_matches_certificate(key: RSAPrivateKey, cert: x509.Certificate) -> bool:
    """Return True if the certificate binds the public half of key."""
    cert_public_key = cert.public_key()
    if not isinstance(cert_public_key, rsa.RSAPublicKey):
        return False
    return key.public_key().public_numbers() == cert_public_key.public_numbers()


def verify_certificate_for_usage(
    leaf_cert: x509.Certificate,
    root_cert: x509.Certificate,
    usage: ObjectIdentifier,
    server_name: str = "localhost",
) -> bool:
    """Run full path validation of leaf_cert against root_cert for one usage.

    Uses the cryptography verification policy (the same checks a TLS peer
    applies), so a serverAuth-only certificate fails client validation and
    vice versa.

    Args:
        leaf_cert: End-entity certificate to validate
        root_cert: Trust anchor
        usage: ExtendedKeyUsageOID.SERVER_AUTH or ExtendedKeyUsageOID.CLIENT_AUTH
        server_name: DNS name the server certificate must match

    Returns:
        True if validation succeeds, False otherwise

    Raises:
        ValueError: If usage is neither serverAuth nor clientAuth
    """
    builder = PolicyBuilder().store(Store([root_cert]))
    try:
        if usage == ExtendedKeyUsageOID.SERVER_AUTH:
            builder.build_server_verifier(x509.DNSName(server_name)).verify(leaf_cert, [])
        elif usage == ExtendedKeyUsageOID.CLIENT_AUTH:
            builder.build_client_verifier().verify(leaf_cert, [])
        else:
            raise ValueError(f"unsupported usage: {usage.dotted_string}")
    except VerificationError:
        return False
    return True
