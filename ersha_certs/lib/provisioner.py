"""Provisioning pipeline: root CA, server and client certificates, placement, cleanup.

The run is a linear state machine:

    start -> ca_ready -> server_issued -> client_issued -> placed -> done

with ``failed`` reachable from every non-terminal state. Staging is owned by
an ArtifactPlacer used as a context manager, so it is removed whether the
run completes or fails.
"""

import logging
from enum import StrEnum
from typing import NoReturn

from .ca_utils import create_root_ca
from .cert_utils import get_certificate_serial_hex
from .config import ProvisionConfig
from .errors import InvalidTransitionError, ProvisioningFailedError
from .issuer import issue_certificate
from .models import ProvisionResult
from .placer import ArtifactPlacer
from .roles import Role

logger = logging.getLogger(__name__)


class ProvisionState(StrEnum):
    """All states of a provisioning run."""

    START = "start"
    CA_READY = "ca_ready"
    SERVER_ISSUED = "server_issued"
    CLIENT_ISSUED = "client_issued"
    PLACED = "placed"
    DONE = "done"  # Terminal state
    FAILED = "failed"  # Terminal state


TERMINAL_STATES = frozenset({ProvisionState.DONE, ProvisionState.FAILED})

TRANSITIONS: dict[ProvisionState, ProvisionState] = {
    ProvisionState.START: ProvisionState.CA_READY,
    ProvisionState.CA_READY: ProvisionState.SERVER_ISSUED,
    ProvisionState.SERVER_ISSUED: ProvisionState.CLIENT_ISSUED,
    ProvisionState.CLIENT_ISSUED: ProvisionState.PLACED,
    ProvisionState.PLACED: ProvisionState.DONE,
}

# Stage performed to reach each state, used in failure reports
STAGE_NAMES: dict[ProvisionState, str] = {
    ProvisionState.CA_READY: "root CA creation",
    ProvisionState.SERVER_ISSUED: "server certificate issuance",
    ProvisionState.CLIENT_ISSUED: "client certificate issuance",
    ProvisionState.PLACED: "artifact placement",
    ProvisionState.DONE: "cleanup",
}


class Provisioner:
    """Runs the provisioning pipeline once."""

    def __init__(self, config: ProvisionConfig) -> None:
        """Initialize provisioner with configuration.

        Args:
            config: Validity periods, key size and destination directories
        """
        self.config = config
        self.state = ProvisionState.START
        self.history: list[ProvisionState] = [ProvisionState.START]

    def run(self) -> ProvisionResult:
        """Create a fresh trust chain and place both role pairs.

        Both roles are staged before either is committed, and the two
        commits run back to back. If the client commit fails, the server
        pair already committed stays in place.

        Returns:
            ProvisionResult with placement details for both roles

        Raises:
            ProvisioningFailedError: If any stage fails; the original error
                is chained as __cause__
            InvalidTransitionError: If this provisioner has already run
        """
        if self.state != ProvisionState.START:
            raise InvalidTransitionError(self.state.value, ProvisionState.CA_READY.value)

        config = self.config
        with ArtifactPlacer() as placer:
            try:
                ca_key, ca_cert = create_root_ca(config)
                self._transition(ProvisionState.CA_READY)

                server_key, server_cert = issue_certificate(ca_key, ca_cert, Role.SERVER, config)
                self._transition(ProvisionState.SERVER_ISSUED)

                client_key, client_cert = issue_certificate(ca_key, ca_cert, Role.CLIENT, config)
                self._transition(ProvisionState.CLIENT_ISSUED)

                root_cert = ca_cert if config.share_root_certificate else None
                staged_server = placer.stage(
                    Role.SERVER,
                    server_key,
                    server_cert,
                    config.destination_for(Role.SERVER),
                    root_cert=root_cert,
                )
                staged_client = placer.stage(
                    Role.CLIENT,
                    client_key,
                    client_cert,
                    config.destination_for(Role.CLIENT),
                    root_cert=root_cert,
                )
                server_result = placer.commit(staged_server)
                client_result = placer.commit(staged_client)
                self._transition(ProvisionState.PLACED)
            except Exception as e:
                self._fail(e)

            cleanup_warnings = placer.cleanup()
            self._transition(ProvisionState.DONE)

        return ProvisionResult(
            root_serial=get_certificate_serial_hex(ca_cert),
            server=server_result,
            client=client_result,
            cleanup_warnings=cleanup_warnings,
        )

    def _transition(self, target: ProvisionState) -> None:
        current = self.state
        if target == ProvisionState.FAILED:
            allowed = current not in TERMINAL_STATES
        else:
            allowed = TRANSITIONS.get(current) == target
        if not allowed:
            raise InvalidTransitionError(current.value, target.value)

        self.state = target
        self.history.append(target)
        logger.info("State transition %s -> %s", current.value, target.value)

    def _fail(self, error: Exception) -> NoReturn:
        from_state = self.state
        stage = STAGE_NAMES[TRANSITIONS[from_state]]
        self._transition(ProvisionState.FAILED)
        logger.error("Provisioning failed during %s: %s", stage, error)
        raise ProvisioningFailedError(stage, from_state.value, error) from error
