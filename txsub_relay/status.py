"""
Status mapping — translates stellar-core acknowledgments into the
relay's versioned response contract.

The node's vocabulary is ad hoc; the relay's is stable:

    ExceptionAck        → SubmissionException
    ERROR               → 400, errorResultXdr / diagnosticEventsXdr
    PENDING             → 201
    DUPLICATE           → 409
    TRY_AGAIN_LATER     → 503
    anything else       → InvalidSubmissionStatus

The response hash is always the outer envelope hash, fee-bumps
included.

``_HTTP_STATUS`` must cover every TxStatus member. This is checked at
import time so a new status can't silently fall through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from txsub_relay.core.client import ExceptionAck, StatusAck, SubmissionAck, TxStatus
from txsub_relay.envelope import EnvelopeInfo
from txsub_relay.errors import InvalidSubmissionStatus, SubmissionException

HTTP_STATUS_FOR_PENDING = 201
HTTP_STATUS_FOR_DUPLICATE = 409
HTTP_STATUS_FOR_TRY_AGAIN_LATER = 503
HTTP_STATUS_FOR_ERROR = 400

_HTTP_STATUS: dict[TxStatus, int] = {
    TxStatus.PENDING: HTTP_STATUS_FOR_PENDING,
    TxStatus.DUPLICATE: HTTP_STATUS_FOR_DUPLICATE,
    TxStatus.TRY_AGAIN_LATER: HTTP_STATUS_FOR_TRY_AGAIN_LATER,
    TxStatus.ERROR: HTTP_STATUS_FOR_ERROR,
}

_unmapped = set(TxStatus) - set(_HTTP_STATUS)
if _unmapped:
    raise RuntimeError(f"TxStatus values without an HTTP mapping: {sorted(_unmapped)}")


@dataclass(frozen=True)
class SubmissionResponse:
    """The relay's reply to a submission.

    Attributes:
        tx_status: The node's status string (one of TxStatus).
        http_status: HTTP status code the reply is sent with.
        hash: Hex hash of the submitted (outer) envelope.
        error_result_xdr: Base64 TransactionResult, ERROR only.
        diagnostic_events_xdr: Base64 diagnostic events, ERROR only.
    """

    tx_status: str
    http_status: int
    hash: str
    error_result_xdr: str | None = None
    diagnostic_events_xdr: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON body; empty optional fields are omitted."""
        body: dict[str, Any] = {
            "tx_status": self.tx_status,
            "status": self.http_status,
            "hash": self.hash,
        }
        if self.error_result_xdr:
            body["errorResultXdr"] = self.error_result_xdr
        if self.diagnostic_events_xdr:
            body["diagnosticEventsXdr"] = self.diagnostic_events_xdr
        return body


def http_status_for(status: TxStatus) -> int:
    return _HTTP_STATUS[status]


def map_acknowledgment(ack: SubmissionAck, envelope: EnvelopeInfo) -> SubmissionResponse:
    """Map a node acknowledgment to a SubmissionResponse.

    Args:
        ack: StatusAck or ExceptionAck from the core client.
        envelope: The decoded envelope the ack belongs to.

    Returns:
        SubmissionResponse for every known TxStatus.

    Raises:
        SubmissionException: If the node replied with an exception.
        InvalidSubmissionStatus: If the status is not a TxStatus.
    """
    extras: dict[str, Any] = {"envelope_xdr": envelope.raw}

    if isinstance(ack, ExceptionAck):
        extras["error"] = ack.exception
        raise SubmissionException(
            f"stellar-core exception: {ack.exception}", extras=extras
        )

    if not isinstance(ack, StatusAck):
        raise TypeError(f"unexpected acknowledgment type: {type(ack).__name__}")

    status = ack.known_status
    if status is None:
        extras["error"] = ack.error_result_xdr or f"unknown status {ack.status!r}"
        raise InvalidSubmissionStatus(
            f"stellar-core returned unknown status {ack.status!r}", extras=extras
        )

    if status is TxStatus.ERROR:
        return SubmissionResponse(
            tx_status=status.value,
            http_status=http_status_for(status),
            hash=envelope.hash,
            error_result_xdr=ack.error_result_xdr,
            diagnostic_events_xdr=ack.diagnostic_events_xdr,
        )

    return SubmissionResponse(
        tx_status=status.value,
        http_status=http_status_for(status),
        hash=envelope.hash,
    )
