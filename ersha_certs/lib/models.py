"""Result models for provisioning operations."""

from dataclasses import dataclass, field
from pathlib import Path

from .errors import CleanupWarning
from .roles import Role


@dataclass
class StagedArtifacts:
    """Files for one role written to staging but not yet moved into place.

    files maps the final file name to its staged path.
    """

    role: Role
    destination: Path
    staging_dir: Path
    files: dict[str, Path]
    serial_number: str


@dataclass
class PlacementResult:
    """Result from placing one role's key and certificate."""

    role: Role
    key_path: Path
    cert_path: Path
    serial_number: str
    root_cert_path: Path | None = None


@dataclass
class ProvisionResult:
    """Result from a complete provisioning run.

    Contains the root serial number and placement details for both roles.
    """

    root_serial: str
    server: PlacementResult
    client: PlacementResult
    cleanup_warnings: list[CleanupWarning] = field(default_factory=list)
