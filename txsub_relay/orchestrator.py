"""
Submission orchestrator — decode, check readiness, submit, map.

Composes the pure layers (envelope.py, status.py) with the impure
network boundary (core client + metrics) for a single request:

    Received → Decoded → ReadinessChecked → Submitted → Mapped

    1. Disabled relay        → SubmissionDisabled (nothing decoded)
    2. Decode failure        → MalformedEnvelope (nothing submitted)
    3. Node not synced       → ReadinessUnavailable (node never contacted)
    4. Submit (instrumented) → RequestError on transport failure
    5. Map acknowledgment    → SubmissionResponse, SubmissionException,
                               or InvalidSubmissionStatus

No retries and no deduplication: two identical submissions make two
calls to stellar-core. The only state shared between requests is the
metrics registry.
"""

from __future__ import annotations

import logging

from txsub_relay.core.client import CoreClient
from txsub_relay.core.metrics import InstrumentedCoreClient, SubmissionMetrics
from txsub_relay.envelope import decode_envelope
from txsub_relay.errors import (
    InvalidSubmissionStatus,
    ReadinessUnavailable,
    RequestError,
    SubmissionDisabled,
    SubmissionException,
)
from txsub_relay.readiness import CoreStateGetter
from txsub_relay.status import SubmissionResponse, map_acknowledgment

logger = logging.getLogger(__name__)


class SubmissionOrchestrator:
    """Runs one submission through the pipeline.

    Args:
        core_client: stellar-core client; wrapped with ``metrics``.
        state_getter: Readiness source, read once per request.
        metrics: Submission metrics (owns the registry).
        network_passphrase: Passphrase used to hash envelopes.
        disable_tx_sub: Reject every submission with SubmissionDisabled.
        submit_timeout: Default deadline in seconds for the node call.
    """

    def __init__(
        self,
        core_client: CoreClient,
        state_getter: CoreStateGetter,
        metrics: SubmissionMetrics,
        *,
        network_passphrase: str,
        disable_tx_sub: bool = False,
        submit_timeout: float | None = None,
    ) -> None:
        self._client = InstrumentedCoreClient(core_client, metrics)
        self._state_getter = state_getter
        self._network_passphrase = network_passphrase
        self._disable_tx_sub = disable_tx_sub
        self._submit_timeout = submit_timeout

    @property
    def disabled(self) -> bool:
        return self._disable_tx_sub

    async def submit(
        self,
        raw: str,
        *,
        timeout: float | None = None,
    ) -> SubmissionResponse:
        """Submit a base64 envelope and return the mapped response.

        Args:
            raw: The ``tx`` field from the request.
            timeout: Deadline for the node call; defaults to the
                orchestrator's ``submit_timeout``.

        Raises:
            SubmissionDisabled, MalformedEnvelope, ReadinessUnavailable,
            RequestError, SubmissionException, InvalidSubmissionStatus.
        """
        if self._disable_tx_sub:
            raise SubmissionDisabled(extras={"envelope_xdr": raw})

        envelope = decode_envelope(raw, self._network_passphrase)

        core_state = self._state_getter.get_core_state()
        if not core_state.synced:
            logger.info(
                "rejecting submission %s: stellar-core not synced (state=%r)",
                envelope.hash,
                core_state.state,
            )
            raise ReadinessUnavailable()

        deadline = self._submit_timeout if timeout is None else timeout
        try:
            ack = await self._client.submit(raw, envelope.variant, timeout=deadline)
        except RequestError as exc:
            logger.warning(
                "submission %s failed to reach stellar-core: %s",
                envelope.hash,
                exc.extras.get("error", exc),
            )
            raise

        try:
            response = map_acknowledgment(ack, envelope)
        except (SubmissionException, InvalidSubmissionStatus) as exc:
            logger.error(
                "stellar-core rejected submission %s with %s: %s (envelope_xdr=%s)",
                envelope.hash,
                exc.error_code,
                exc.extras.get("error"),
                raw,
            )
            raise

        logger.debug(
            "submission %s (%s) acknowledged: %s",
            envelope.hash,
            envelope.variant,
            response.tx_status,
        )
        return response
