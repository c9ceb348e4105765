"""
stellar-core client protocol — the network boundary.

Defines the interface the orchestrator depends on, not a concrete
implementation. This keeps the submission pipeline testable and
prevents ``httpx`` from creeping into mapping logic.

Concrete implementations:
    - CoreHttpClient (real, talks to stellar-core's HTTP command port)
    - InstrumentedCoreClient (metrics decorator over any CoreClient)
    - FakeCoreClient (tests)

Acknowledgments are a tagged variant:
    - ``StatusAck`` — the node parsed the envelope and made an admission
      decision (PENDING, DUPLICATE, TRY_AGAIN_LATER, ERROR, or a status
      this relay does not know).
    - ``ExceptionAck`` — the node failed to handle the request and
      replied with an exception string.

Transport failures are not acknowledgments; they raise RequestError.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, Union, runtime_checkable


# =========================================================================
# Acknowledgment types
# =========================================================================


class TxStatus(StrEnum):
    """Admission statuses stellar-core returns from ``/tx``."""

    PENDING = "PENDING"
    DUPLICATE = "DUPLICATE"
    TRY_AGAIN_LATER = "TRY_AGAIN_LATER"
    ERROR = "ERROR"


@dataclass(frozen=True)
class StatusAck:
    """An admission decision from stellar-core.

    Attributes:
        status: Status string exactly as the node sent it. Not
            necessarily a TxStatus member; see ``known_status``.
        error_result_xdr: Base64 ``TransactionResult`` explaining an
            ERROR status. None for other statuses.
        diagnostic_events_xdr: Base64 diagnostic events accompanying an
            ERROR status, if the node emitted any.
    """

    status: str
    error_result_xdr: str | None = None
    diagnostic_events_xdr: str | None = None

    @property
    def known_status(self) -> TxStatus | None:
        """The status as a TxStatus, or None if the node sent something else."""
        try:
            return TxStatus(self.status)
        except ValueError:
            return None

    @property
    def outcome(self) -> str:
        """Metrics label; unknown statuses share one value."""
        return self.status if self.known_status is not None else "invalid_status"


@dataclass(frozen=True)
class ExceptionAck:
    """stellar-core replied with an exception instead of a decision."""

    exception: str

    @property
    def outcome(self) -> str:
        return "exception"


SubmissionAck = Union[StatusAck, ExceptionAck]


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class CoreClient(Protocol):
    """Interface for stellar-core operations used by the relay.

    Methods are async because network I/O is inherently asynchronous.
    """

    async def submit(
        self,
        raw_envelope: str,
        *,
        timeout: float | None = None,
    ) -> SubmissionAck:
        """Submit a base64 envelope and return the node's acknowledgment.

        Args:
            raw_envelope: Base64 XDR envelope, forwarded verbatim.
            timeout: Optional deadline in seconds for the whole call.

        Returns:
            StatusAck or ExceptionAck.

        Raises:
            RequestError: If the call could not complete (connection
                failure, deadline exceeded, bad HTTP status, unparseable
                reply).
        """
        ...

    async def info(self) -> dict[str, Any]:
        """Fetch the node's ``/info`` document (used for readiness)."""
        ...
