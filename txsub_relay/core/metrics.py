"""
Submission metrics — a timing/counting decorator over a CoreClient.

Every outbound submission is recorded exactly once, after the wrapped
call returns or raises, into two collectors sharing the labels
``(status, envelope_type)``:

    <ns>_<subsystem>_submission_duration_seconds   Histogram
    <ns>_<subsystem>_submissions_total             Counter

``status`` is the outcome:
    - "request_error" when the call raised (transport failure, deadline,
      or cancellation of the calling task)
    - "exception" for an ExceptionAck
    - "invalid_status" for a status outside TxStatus
    - the node's status string otherwise ("PENDING", "ERROR", ...)

The label set is therefore bounded whatever the node sends.

Collectors live in an injected CollectorRegistry rather than the global
default, so each service instance (and each test) owns its own state.
prometheus_client guards every sample with a lock, which keeps
concurrent increments exact.
"""

from __future__ import annotations

import time
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram

from txsub_relay.core.client import CoreClient, SubmissionAck
from txsub_relay.envelope import EnvelopeVariant

OUTCOME_REQUEST_ERROR = "request_error"
OUTCOME_EXCEPTION = "exception"
OUTCOME_INVALID_STATUS = "invalid_status"

LABELS = ("status", "envelope_type")

DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30)


class SubmissionMetrics:
    """Collectors for stellar-core submissions.

    Args:
        registry: Registry the collectors are registered in.
        namespace: Metric name prefix.
        subsystem: Second name component.
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        *,
        namespace: str = "txsub",
        subsystem: str = "async_txsub",
    ) -> None:
        self.registry = registry
        self.submission_duration = Histogram(
            "submission_duration_seconds",
            "Duration of submissions to stellar-core",
            LABELS,
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
            buckets=DURATION_BUCKETS,
        )
        self.submissions = Counter(
            "submissions",
            "Number of submissions to stellar-core",
            LABELS,
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    def observe(self, outcome: str, variant: EnvelopeVariant, duration: float) -> None:
        """Record one finished submission."""
        labels = {"status": outcome, "envelope_type": str(variant)}
        self.submission_duration.labels(**labels).observe(duration)
        self.submissions.labels(**labels).inc()


class InstrumentedCoreClient:
    """Wraps a CoreClient and records every submission in SubmissionMetrics.

    The wrapped call's return value and exceptions pass through
    untouched.
    """

    def __init__(self, client: CoreClient, metrics: SubmissionMetrics) -> None:
        self._client = client
        self._metrics = metrics

    @property
    def metrics(self) -> SubmissionMetrics:
        return self._metrics

    async def submit(
        self,
        raw_envelope: str,
        variant: EnvelopeVariant,
        *,
        timeout: float | None = None,
    ) -> SubmissionAck:
        outcome = OUTCOME_REQUEST_ERROR
        started = time.perf_counter()
        try:
            ack = await self._client.submit(raw_envelope, timeout=timeout)
            outcome = ack.outcome
            return ack
        finally:
            self._metrics.observe(outcome, variant, time.perf_counter() - started)

    async def info(self) -> dict[str, Any]:
        return await self._client.info()
