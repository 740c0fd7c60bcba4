"""Place issued keys and certificates into the consuming services' key directories.

Each role's files are first written into a private staging directory inside
the destination, then moved over the final names with ``os.replace``. Staging
and destination share a filesystem, so every replace is atomic and a reader
sees either the previous file or the new one, never a partial write.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from types import TracebackType

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import get_certificate_serial_hex, serialize_certificate, serialize_private_key
from .errors import CleanupWarning, PlacementError
from .models import PlacementResult, StagedArtifacts
from .roles import ROOT_CERT_FILENAME, Role, get_role_profile

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"
BACKUP_DIRNAME = "previous"
KEY_FILE_MODE = 0o600
CERT_FILE_MODE = 0o644


def _write_file(path: Path, data: bytes, mode: int) -> None:
    """Create path exclusively, write data and flush it to disk."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    path.chmod(mode)


def _fsync_directory(path: Path) -> None:
    """Persist renames in path."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class ArtifactPlacer:
    """Stages and commits role artifacts, and owns the staging directories.

    Use as a context manager so staging is removed on every exit path:

        with ArtifactPlacer() as placer:
            placer.place(Role.SERVER, key, cert, destination)
    """

    def __init__(self) -> None:
        self._staging_dirs: list[Path] = []
        self._warnings: list[CleanupWarning] = []

    def __enter__(self) -> "ArtifactPlacer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    @property
    def staging_dirs(self) -> list[Path]:
        """Staging directories created by this placer and not yet removed."""
        return list(self._staging_dirs)

    def stage(
        self,
        role: Role,
        key: RSAPrivateKey,
        cert: x509.Certificate,
        destination: Path,
        root_cert: x509.Certificate | None = None,
    ) -> StagedArtifacts:
        """Write a role's key and certificate into a staging directory.

        Creates the destination if needed and removes staging directories
        left behind by interrupted runs.

        Args:
            role: Role the artifacts belong to
            key: Role private key
            cert: Role certificate
            destination: Role key directory
            root_cert: Root certificate to place alongside, if sharing is enabled

        Returns:
            StagedArtifacts ready for commit()

        Raises:
            InvalidRoleError: If role is not a known Role
            PlacementError: If the destination or staged files cannot be written
        """
        profile = get_role_profile(role)

        try:
            destination.mkdir(parents=True, exist_ok=True)
            self._remove_stale_staging(destination)
            staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=destination))
        except OSError as e:
            raise PlacementError(profile.role, destination, str(e)) from e
        self._staging_dirs.append(staging_dir)

        contents = {
            profile.key_filename: (serialize_private_key(key), KEY_FILE_MODE),
            profile.cert_filename: (serialize_certificate(cert), CERT_FILE_MODE),
        }
        if root_cert is not None:
            contents[ROOT_CERT_FILENAME] = (serialize_certificate(root_cert), CERT_FILE_MODE)

        files: dict[str, Path] = {}
        for filename, (data, mode) in contents.items():
            staged_path = staging_dir / filename
            try:
                _write_file(staged_path, data, mode)
            except OSError as e:
                raise PlacementError(profile.role, staged_path, str(e)) from e
            files[filename] = staged_path

        return StagedArtifacts(
            role=profile.role,
            destination=destination,
            staging_dir=staging_dir,
            files=files,
            serial_number=get_certificate_serial_hex(cert),
        )

    def commit(self, staged: StagedArtifacts) -> PlacementResult:
        """Move staged files over their final names.

        Existing files are backed up in staging first. If any replace fails,
        files already replaced are restored from the backup (or removed when
        there was none), so the destination keeps a matching key and
        certificate.

        Raises:
            PlacementError: If the files cannot be moved into place
        """
        profile = get_role_profile(staged.role)
        backup_dir = staged.staging_dir / BACKUP_DIRNAME
        replaced: list[Path] = []

        try:
            backup_dir.mkdir(mode=0o700)
            for filename in staged.files:
                target = staged.destination / filename
                if target.exists():
                    shutil.copy2(target, backup_dir / filename)

            for filename, staged_path in staged.files.items():
                target = staged.destination / filename
                os.replace(staged_path, target)
                replaced.append(target)

            if ROOT_CERT_FILENAME not in staged.files:
                (staged.destination / ROOT_CERT_FILENAME).unlink(missing_ok=True)

            _fsync_directory(staged.destination)
        except OSError as e:
            self._roll_back(replaced, backup_dir)
            raise PlacementError(profile.role, staged.destination, str(e)) from e

        root_cert_path = None
        if ROOT_CERT_FILENAME in staged.files:
            root_cert_path = staged.destination / ROOT_CERT_FILENAME

        logger.info("Placed %s key and certificate in %s", profile.role, staged.destination)
        return PlacementResult(
            role=profile.role,
            key_path=staged.destination / profile.key_filename,
            cert_path=staged.destination / profile.cert_filename,
            serial_number=staged.serial_number,
            root_cert_path=root_cert_path,
        )

    def place(
        self,
        role: Role,
        key: RSAPrivateKey,
        cert: x509.Certificate,
        destination: Path,
        root_cert: x509.Certificate | None = None,
    ) -> PlacementResult:
        """Stage and commit one role's artifacts."""
        return self.commit(self.stage(role, key, cert, destination, root_cert=root_cert))

    def cleanup(self) -> list[CleanupWarning]:
        """Remove all staging directories created by this placer.

        Safe to call any number of times. Failures are logged and returned,
        never raised.

        Returns:
            Warnings for staging paths that could not be removed
        """
        for staging_dir in list(self._staging_dirs):
            try:
                shutil.rmtree(staging_dir)
            except FileNotFoundError:
                pass
            except OSError as e:
                self._warn(staging_dir, str(e))
                continue
            self._staging_dirs.remove(staging_dir)

        warnings, self._warnings = self._warnings, []
        return warnings

    def _remove_stale_staging(self, destination: Path) -> None:
        for stale in destination.glob(f"{STAGING_PREFIX}*"):
            if stale in self._staging_dirs or not stale.is_dir():
                continue
            try:
                shutil.rmtree(stale)
                logger.info("Removed stale staging directory %s", stale)
            except OSError as e:
                self._warn(stale, str(e))

    def _roll_back(self, replaced: list[Path], backup_dir: Path) -> None:
        for target in reversed(replaced):
            backup = backup_dir / target.name
            try:
                if backup.exists():
                    os.replace(backup, target)
                else:
                    target.unlink(missing_ok=True)
            except OSError as e:
                logger.critical("ROLLBACK FAILED for %s: %s", target, e)

    def _warn(self, path: Path, reason: str) -> None:
        warning = CleanupWarning(path, reason)
        logger.warning("%s", warning)
        self._warnings.append(warning)
