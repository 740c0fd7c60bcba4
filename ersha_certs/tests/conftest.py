"""Test fixtures for ersha_certs tests."""

from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from ersha_certs.lib.ca_utils import create_root_ca
from ersha_certs.lib.config import ProvisionConfig
from ersha_certs.lib.issuer import issue_certificate
from ersha_certs.lib.roles import Role


@pytest.fixture
def provision_config(tmp_path: Path) -> ProvisionConfig:
    """Return test configuration with short validity periods, rooted at tmp_path."""
    return ProvisionConfig(
        ca_validity_days=30,
        leaf_validity_days=7,
        key_size=2048,  # Faster for tests
        base_dir=tmp_path,
    )


@pytest.fixture
def root_ca(provision_config: ProvisionConfig) -> tuple[RSAPrivateKey, x509.Certificate]:
    """Generate root CA key and self-signed certificate."""
    return create_root_ca(provision_config)


@pytest.fixture
def root_key(root_ca: tuple[RSAPrivateKey, x509.Certificate]) -> RSAPrivateKey:
    """Return root CA private key."""
    return root_ca[0]


@pytest.fixture
def root_cert(root_ca: tuple[RSAPrivateKey, x509.Certificate]) -> x509.Certificate:
    """Return root CA certificate."""
    return root_ca[1]


@pytest.fixture
def server_pair(
    root_key: RSAPrivateKey,
    root_cert: x509.Certificate,
    provision_config: ProvisionConfig,
) -> tuple[RSAPrivateKey, x509.Certificate]:
    """Issue server key and certificate from the root CA."""
    return issue_certificate(root_key, root_cert, Role.SERVER, provision_config)


@pytest.fixture
def client_pair(
    root_key: RSAPrivateKey,
    root_cert: x509.Certificate,
    provision_config: ProvisionConfig,
) -> tuple[RSAPrivateKey, x509.Certificate]:
    """Issue client key and certificate from the root CA."""
    return issue_certificate(root_key, root_cert, Role.CLIENT, provision_config)
