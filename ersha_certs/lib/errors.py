"""Exceptions raised by the certificate provisioning pipeline."""

from pathlib import Path


class ProvisioningError(Exception):
    """Base class for provisioning failures."""


class KeyGenerationError(ProvisioningError):
    """Raised when a key pair cannot be generated."""


class CertificateBuildError(ProvisioningError):
    """Raised when a certificate cannot be built, signed or verified."""


class InvalidRoleError(ProvisioningError):
    """Raised when a role descriptor is not one of the known roles."""

    def __init__(self, role: object):
        self.role = role
        super().__init__(f"unknown role: {role!r}")


class PlacementError(ProvisioningError):
    """Raised when key material cannot be written to its destination."""

    def __init__(self, role: str, path: Path, reason: str):
        self.role = role
        self.path = path
        super().__init__(f"failed to place {role} artifacts at {path}: {reason}")


class InvalidTransitionError(ProvisioningError):
    """Raised when the provisioner is driven through an undefined transition."""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(f"Invalid transition: {current_state} -> {target_state}")


class ProvisioningFailedError(ProvisioningError):
    """Raised by the provisioner when a pipeline stage fails.

    The underlying error is available as ``__cause__``.
    """

    def __init__(self, stage: str, from_state: str, cause: Exception):
        self.stage = stage
        self.from_state = from_state
        super().__init__(f"provisioning failed at stage {stage}: {cause}")


class CleanupWarning(UserWarning):
    """Staging files could not be removed. Logged and returned, never raised."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"could not remove staging path {path}: {reason}")
