"""Service roles and the certificate profile each one is issued with."""

import ipaddress
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, ObjectIdentifier

from .errors import InvalidRoleError

ROOT_CERT_FILENAME = "root-ca.pem"

_LOOPBACK_ADDRESSES = (ipaddress.ip_address("127.0.0.1"), ipaddress.ip_address("::1"))


class Role(StrEnum):
    """Roles taking part in the mutual-TLS connection."""

    SERVER = "server"
    CLIENT = "client"


@dataclass(frozen=True)
class RoleProfile:
    """Certificate and on-disk settings for one role."""

    role: Role
    common_name: str
    extended_key_usage: ObjectIdentifier
    dns_names: tuple[str, ...]
    default_dir: Path
    key_filename: str
    cert_filename: str

    def subject_alternative_names(self) -> x509.SubjectAlternativeName:
        """Return SAN extension covering the role's hostnames and loopback addresses."""
        names: list[x509.GeneralName] = [x509.DNSName(name) for name in self.dns_names]
        names.extend(x509.IPAddress(address) for address in _LOOPBACK_ADDRESSES)
        return x509.SubjectAlternativeName(names)


ROLE_PROFILES: dict[Role, RoleProfile] = {
    Role.SERVER: RoleProfile(
        role=Role.SERVER,
        common_name="prime",
        extended_key_usage=ExtendedKeyUsageOID.SERVER_AUTH,
        dns_names=("prime", "ersha-prime", "localhost"),
        default_dir=Path("ersha-prime") / "keys",
        key_filename="prime.key",
        cert_filename="prime.pem",
    ),
    Role.CLIENT: RoleProfile(
        role=Role.CLIENT,
        common_name="dispatch",
        extended_key_usage=ExtendedKeyUsageOID.CLIENT_AUTH,
        dns_names=("dispatch", "ersha-dispatch", "localhost"),
        default_dir=Path("ersha-dispatch") / "keys",
        key_filename="dispatch.key",
        cert_filename="dispatch.pem",
    ),
}


def get_role_profile(role: Role | str) -> RoleProfile:
    """Look up the profile for a role.

    Args:
        role: Role member or its string value

    Returns:
        RoleProfile for the role

    Raises:
        InvalidRoleError: If role is not a known Role
    """
    try:
        return ROLE_PROFILES[Role(role)]
    except (ValueError, KeyError) as e:
        raise InvalidRoleError(role) from e
