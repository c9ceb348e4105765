"""
stellar-core boundary for the submission relay.

Protocols (for dependency injection):
    - ``CoreClient`` — network boundary (submit envelope, fetch info).
    - ``CoreTransport`` — injectable HTTP transport.

Acknowledgment types:
    - ``StatusAck``, ``ExceptionAck``, ``SubmissionAck``, ``TxStatus``.

Concrete implementations:
    - ``CoreHttpClient`` — HTTP implementation of CoreClient.
    - ``HttpxTransport`` — default httpx-based transport.
    - ``InstrumentedCoreClient`` — metrics decorator.
"""

from txsub_relay.core.client import (
    CoreClient,
    ExceptionAck,
    StatusAck,
    SubmissionAck,
    TxStatus,
)
from txsub_relay.core.http_client import CoreHttpClient
from txsub_relay.core.metrics import (
    OUTCOME_EXCEPTION,
    OUTCOME_INVALID_STATUS,
    OUTCOME_REQUEST_ERROR,
    InstrumentedCoreClient,
    SubmissionMetrics,
)
from txsub_relay.core.transport import CoreTransport, HttpxTransport

__all__ = [
    "OUTCOME_EXCEPTION",
    "OUTCOME_INVALID_STATUS",
    "OUTCOME_REQUEST_ERROR",
    "CoreClient",
    "CoreHttpClient",
    "CoreTransport",
    "ExceptionAck",
    "HttpxTransport",
    "InstrumentedCoreClient",
    "StatusAck",
    "SubmissionAck",
    "SubmissionMetrics",
    "TxStatus",
]
