"""Issue role certificates signed by the run's root CA."""

import logging

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .ca_utils import build_dn_from_config
from .cert_utils import generate_private_key, get_certificate_serial_hex
from .certificate_builder import CertificateBuilder
from .config import ProvisionConfig
from .errors import CertificateBuildError
from .roles import Role, get_role_profile

logger = logging.getLogger(__name__)


def issue_certificate(
    ca_key: RSAPrivateKey,
    ca_cert: x509.Certificate,
    role: Role,
    config: ProvisionConfig,
) -> tuple[RSAPrivateKey, x509.Certificate]:
    """Generate a key pair for role and issue its certificate from the CA.

    Every call generates a new key, so the server and client never share
    key material.

    Args:
        ca_key: Root CA private key used for signing
        ca_cert: Root CA certificate (issuer)
        role: Role the certificate is issued for
        config: Provisioning configuration with key size and leaf validity

    Returns:
        Tuple of (leaf_key, leaf_cert)

    Raises:
        InvalidRoleError: If role is not a known Role
        KeyGenerationError: If the key pair cannot be generated
        CertificateBuildError: If the certificate cannot be built, signed or
            verified against the CA
    """
    profile = get_role_profile(role)
    leaf_key = generate_private_key(config.key_size)

    leaf_cert = CertificateBuilder.build_leaf_certificate(
        subject_dn=build_dn_from_config(config, profile.common_name),
        public_key=leaf_key.public_key(),
        issuer_cert=ca_cert,
        issuer_key=ca_key,
        validity_days=config.leaf_validity_days,
        extended_key_usage=profile.extended_key_usage,
        subject_alternative_names=profile.subject_alternative_names(),
    )

    try:
        leaf_cert.verify_directly_issued_by(ca_cert)
    except (ValueError, TypeError, InvalidSignature) as e:
        raise CertificateBuildError(
            f"{profile.role} certificate does not verify against the CA: {e}"
        ) from e

    logger.info(
        "Issued %s certificate CN=%s, serial %s",
        profile.role,
        profile.common_name,
        get_certificate_serial_hex(leaf_cert),
    )
    return leaf_key, leaf_cert
