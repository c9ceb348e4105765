"""
txsub-relay — asynchronous transaction submission relay for stellar-core.

Public API:

    Pure layer (no I/O):
        - ``decode_envelope()`` — base64 XDR → EnvelopeInfo (hash, inner hash).
        - ``map_acknowledgment()`` — node acknowledgment → SubmissionResponse.

    Impure layer (network I/O):
        - ``SubmissionOrchestrator`` — decode, readiness, submit, map.
        - ``CoreHttpClient`` — stellar-core HTTP client.
        - ``InstrumentedCoreClient`` / ``SubmissionMetrics`` — metrics.
        - ``CoreStateTracker`` — readiness owned by an /info poller.

    HTTP:
        - ``create_app()`` — FastAPI application factory.
"""

from txsub_relay.config import RelayConfig
from txsub_relay.core import (
    CoreClient,
    CoreHttpClient,
    ExceptionAck,
    InstrumentedCoreClient,
    StatusAck,
    SubmissionAck,
    SubmissionMetrics,
    TxStatus,
)
from txsub_relay.envelope import EnvelopeInfo, EnvelopeVariant, decode_envelope
from txsub_relay.errors import (
    BadRequest,
    ConfigError,
    InvalidSubmissionStatus,
    MalformedEnvelope,
    ReadinessUnavailable,
    RelayError,
    RequestError,
    SubmissionDisabled,
    SubmissionException,
    UnsupportedMediaType,
)
from txsub_relay.orchestrator import SubmissionOrchestrator
from txsub_relay.readiness import CoreState, CoreStateGetter, CoreStateTracker
from txsub_relay.status import SubmissionResponse, map_acknowledgment

__version__ = "0.1.0"

__all__ = [
    "BadRequest",
    "ConfigError",
    "CoreClient",
    "CoreHttpClient",
    "CoreState",
    "CoreStateGetter",
    "CoreStateTracker",
    "EnvelopeInfo",
    "EnvelopeVariant",
    "ExceptionAck",
    "InstrumentedCoreClient",
    "InvalidSubmissionStatus",
    "MalformedEnvelope",
    "ReadinessUnavailable",
    "RelayConfig",
    "RelayError",
    "RequestError",
    "StatusAck",
    "SubmissionAck",
    "SubmissionDisabled",
    "SubmissionException",
    "SubmissionMetrics",
    "SubmissionOrchestrator",
    "SubmissionResponse",
    "TxStatus",
    "UnsupportedMediaType",
    "decode_envelope",
    "map_acknowledgment",
]
