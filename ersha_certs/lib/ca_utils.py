"""Root CA creation for a single provisioning run."""

import logging

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import generate_private_key, get_certificate_serial_hex
from .certificate_builder import CertificateBuilder
from .config import DistinguishedName, ProvisionConfig

logger = logging.getLogger(__name__)

ROOT_CA_COMMON_NAME = "Ersha Local Root CA"


def build_dn_from_config(config: ProvisionConfig, common_name: str) -> DistinguishedName:
    """Build DN from ProvisionConfig fields + common_name."""
    return DistinguishedName(
        country=config.country,
        state=config.state,
        locality=config.locality,
        organization=config.organization,
        organizational_unit=config.organizational_unit,
        common_name=common_name,
    )


def create_root_ca(config: ProvisionConfig) -> tuple[RSAPrivateKey, x509.Certificate]:
    """Generate a fresh root CA key and self-signed certificate.

    The pair is only held by the caller for the current run; nothing is
    written to disk.

    Args:
        config: Provisioning configuration with key size and CA validity

    Returns:
        Tuple of (root_key, root_cert)

    Raises:
        KeyGenerationError: If the key pair cannot be generated
        CertificateBuildError: If the certificate cannot be built or signed
    """
    root_key = generate_private_key(config.key_size)
    root_cert = CertificateBuilder.build_root_ca(
        subject_dn=build_dn_from_config(config, ROOT_CA_COMMON_NAME),
        private_key=root_key,
        validity_days=config.ca_validity_days,
    )
    logger.info("Root CA created, serial %s", get_certificate_serial_hex(root_cert))
    return root_key, root_cert
