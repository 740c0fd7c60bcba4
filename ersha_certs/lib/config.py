"""Provisioning configuration dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path

from cryptography import x509
from cryptography.x509 import oid

from .roles import Role, get_role_profile

MIN_KEY_SIZE = 2048


@dataclass
class ProvisionConfig:
    """Configuration for one provisioning run."""

    country: str | None = None
    state: str | None = None
    locality: str | None = None
    organization: str | None = "Ersha"
    organizational_unit: str | None = "Local PKI"
    ca_validity_days: int = 3650
    leaf_validity_days: int = 365
    key_size: int = 4096
    base_dir: Path = Path(".")
    destination_overrides: dict[Role, Path] = field(default_factory=dict)
    share_root_certificate: bool = False

    def __post_init__(self) -> None:
        if self.ca_validity_days <= 0:
            raise ValueError("ca_validity_days must be positive")
        if self.leaf_validity_days <= 0:
            raise ValueError("leaf_validity_days must be positive")
        if self.leaf_validity_days >= self.ca_validity_days:
            raise ValueError("leaf_validity_days must be shorter than ca_validity_days")
        if self.key_size < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE} bits")

    def destination_for(self, role: Role) -> Path:
        """Return the directory the role's key and certificate are placed in."""
        override = self.destination_overrides.get(role)
        if override is not None:
            return override
        return self.base_dir / get_role_profile(role).default_dir


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name. Attributes left as None are omitted."""

    common_name: str
    country: str | None = None
    state: str | None = None
    locality: str | None = None
    organization: str | None = None
    organizational_unit: str | None = None

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        candidates = [
            (oid.NameOID.COUNTRY_NAME, self.country),
            (oid.NameOID.STATE_OR_PROVINCE_NAME, self.state),
            (oid.NameOID.LOCALITY_NAME, self.locality),
            (oid.NameOID.ORGANIZATION_NAME, self.organization),
            (oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
            (oid.NameOID.COMMON_NAME, self.common_name),
        ]
        return x509.Name(
            [x509.NameAttribute(name_oid, value) for name_oid, value in candidates if value]
        )
