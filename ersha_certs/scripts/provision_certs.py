#!/usr/bin/env python3
"""Provision the ersha-prime / ersha-dispatch mutual-TLS key material."""

import argparse
import sys
from pathlib import Path

from ersha_certs.lib.config import ProvisionConfig
from ersha_certs.lib.errors import ProvisioningFailedError
from ersha_certs.lib.logging_config import LOGGER, configure_logging
from ersha_certs.lib.provisioner import Provisioner
from ersha_certs.lib.roles import Role


def build_config(args: argparse.Namespace) -> ProvisionConfig:
    """Build ProvisionConfig from parsed arguments."""
    overrides: dict[Role, Path] = {}
    if args.server_dir is not None:
        overrides[Role.SERVER] = args.server_dir
    if args.client_dir is not None:
        overrides[Role.CLIENT] = args.client_dir

    return ProvisionConfig(
        ca_validity_days=args.ca_validity_days,
        leaf_validity_days=args.leaf_validity_days,
        key_size=args.key_size,
        base_dir=args.base_dir,
        destination_overrides=overrides,
        share_root_certificate=args.share_root_cert,
    )


def main() -> int:
    """Generate a root CA, issue server and client certificates, place them.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    defaults = ProvisionConfig()
    parser = argparse.ArgumentParser(
        description="Provision mutual-TLS keys for ersha-prime and ersha-dispatch"
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=defaults.base_dir,
        help="Directory containing ersha-prime/ and ersha-dispatch/ (default: .)",
    )
    parser.add_argument(
        "--ca-validity-days",
        type=int,
        default=defaults.ca_validity_days,
        help=f"Root CA validity in days (default: {defaults.ca_validity_days})",
    )
    parser.add_argument(
        "--leaf-validity-days",
        type=int,
        default=defaults.leaf_validity_days,
        help=f"Server/client certificate validity in days (default: {defaults.leaf_validity_days})",
    )
    parser.add_argument(
        "--key-size",
        type=int,
        default=defaults.key_size,
        help=f"RSA key size in bits (default: {defaults.key_size})",
    )
    parser.add_argument(
        "--server-dir",
        type=Path,
        default=None,
        help="Override key directory for the server (default: <base-dir>/ersha-prime/keys)",
    )
    parser.add_argument(
        "--client-dir",
        type=Path,
        default=None,
        help="Override key directory for the client (default: <base-dir>/ersha-dispatch/keys)",
    )
    parser.add_argument(
        "--share-root-cert",
        action="store_true",
        help="Also place the root CA certificate in both key directories",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    try:
        config = build_config(args)
    except ValueError as e:
        LOGGER.error("Invalid configuration: %s", e)
        return 1

    try:
        LOGGER.info("Provisioning mutual-TLS certificates...")
        result = Provisioner(config).run()

        LOGGER.info("Root CA serial: %s", result.root_serial)
        for placement in (result.server, result.client):
            LOGGER.info("%s certificate placed:", placement.role)
            LOGGER.info("  Key: %s", placement.key_path)
            LOGGER.info("  Cert: %s", placement.cert_path)
            LOGGER.info("  Serial: %s", placement.serial_number)
            if placement.root_cert_path is not None:
                LOGGER.info("  Root: %s", placement.root_cert_path)

        for warning in result.cleanup_warnings:
            LOGGER.warning("Cleanup incomplete: %s", warning)

        LOGGER.info("Provisioning complete")
        return 0

    except ProvisioningFailedError as e:
        LOGGER.error("Provisioning failed at %s: %s", e.stage, e.__cause__)
        return 1
    except Exception as e:
        LOGGER.error("Provisioning failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
