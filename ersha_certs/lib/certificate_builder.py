"""Certificate builder for X.509 certificate construction."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.x509.oid import ObjectIdentifier

from .cert_utils import generate_serial_number
from .config import DistinguishedName
from .errors import CertificateBuildError


class CertificateBuilder:
    """Builds X.509 certificates for the root CA and the role certificates."""

    @staticmethod
    def build_root_ca(
        subject_dn: DistinguishedName,
        private_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build self-signed Root CA certificate.

        The root signs end-entity certificates directly, so path length is 0.

        Args:
            subject_dn: Distinguished name for certificate subject
            private_key: RSA private key for signing
            validity_days: Certificate validity period in days

        Returns:
            Self-signed X.509 certificate with CA extensions

        Raises:
            CertificateBuildError: If the certificate cannot be encoded or signed
        """
        try:
            subject = subject_dn.to_x509_name()
            not_before = datetime.now(timezone.utc)
            not_after = not_before + timedelta(days=validity_days)

            builder = (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(subject)
                .public_key(private_key.public_key())
                .serial_number(generate_serial_number())
                .not_valid_before(not_before)
                .not_valid_after(not_after)
                .add_extension(
                    x509.BasicConstraints(ca=True, path_length=0),
                    critical=True,
                )
                .add_extension(
                    x509.KeyUsage(
                        digital_signature=False,
                        content_commitment=False,
                        key_encipherment=False,
                        data_encipherment=False,
                        key_agreement=False,
                        key_cert_sign=True,
                        crl_sign=True,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    critical=True,
                )
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                    critical=False,
                )
            )

            return builder.sign(private_key, hashes.SHA256())
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CertificateBuildError(f"failed to build root CA certificate: {e}") from e

    @staticmethod
    def build_leaf_certificate(
        subject_dn: DistinguishedName,
        public_key: RSAPublicKey,
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
        validity_days: int,
        extended_key_usage: ObjectIdentifier,
        subject_alternative_names: x509.SubjectAlternativeName,
    ) -> x509.Certificate:
        """Build end-entity certificate signed by the root CA.

        Validity is clipped to the issuer's not_valid_after so a leaf never
        outlives its CA.

        Args:
            subject_dn: Distinguished name for certificate subject
            public_key: Public key to bind into the certificate
            issuer_cert: Root CA certificate (issuer)
            issuer_key: Root CA private key for signing
            validity_days: Certificate validity period in days
            extended_key_usage: serverAuth or clientAuth OID
            subject_alternative_names: Hostnames and addresses for the certificate

        Returns:
            X.509 end-entity certificate signed by the CA

        Raises:
            CertificateBuildError: If the certificate cannot be encoded or signed
        """
        try:
            not_before = datetime.now(timezone.utc)
            not_after = min(
                not_before + timedelta(days=validity_days),
                issuer_cert.not_valid_after_utc,
            )
            issuer_ski = issuer_cert.extensions.get_extension_for_class(
                x509.SubjectKeyIdentifier
            ).value

            builder = (
                x509.CertificateBuilder()
                .subject_name(subject_dn.to_x509_name())
                .issuer_name(issuer_cert.subject)
                .public_key(public_key)
                .serial_number(generate_serial_number())
                .not_valid_before(not_before)
                .not_valid_after(not_after)
                .add_extension(
                    x509.BasicConstraints(ca=False, path_length=None),
                    critical=True,
                )
                .add_extension(
                    x509.KeyUsage(
                        digital_signature=True,
                        content_commitment=False,
                        key_encipherment=True,
                        data_encipherment=False,
                        key_agreement=False,
                        key_cert_sign=False,
                        crl_sign=False,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    critical=True,
                )
                .add_extension(
                    x509.ExtendedKeyUsage([extended_key_usage]),
                    critical=False,
                )
                .add_extension(subject_alternative_names, critical=False)
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(public_key),
                    critical=False,
                )
                .add_extension(
                    x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(issuer_ski),
                    critical=False,
                )
            )

            return builder.sign(issuer_key, hashes.SHA256())
        except x509.ExtensionNotFound as e:
            raise CertificateBuildError("issuer certificate has no subject key identifier") from e
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CertificateBuildError(f"failed to build leaf certificate: {e}") from e
