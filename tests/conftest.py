"""Shared envelopes and fakes for relay tests. No network access."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from prometheus_client import CollectorRegistry
from stellar_sdk import (
    Account,
    Asset,
    FeeBumpTransactionEnvelope,
    Keypair,
    Network,
    TransactionBuilder,
    TransactionEnvelope,
)

from txsub_relay.core.client import StatusAck, SubmissionAck
from txsub_relay.core.metrics import SubmissionMetrics
from txsub_relay.readiness import CoreState

# V0 envelope and its hash on the public network.
TX_XDR = (
    "AAAAAAGUcmKO5465JxTSLQOQljwk2SfqAJmZSG6JH6wtqpwhAAABLAAAAAAAAAABAAAAAAAAAAEAAAAL"
    "aGVsbG8gd29ybGQAAAAAAwAAAAAAAAAAAAAAABbxCy3mLg3hiTqX4VUEEp60pFOrJNxYM1JtxXTwXhY2"
    "AAAAAAvrwgAAAAAAAAAAAQAAAAAW8Qst5i4N4Yk6l+FVBBKetKRTqyTcWDNSbcV08F4WNgAAAAAN4Laz"
    "j4x61AAAAAAAAAAFAAAAAAAAAAAAAAAAAAAAAQAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAB"
    "LaqcIQAAAEBKwqWy3TaOxoGnfm9eUjfTRBvPf34dvDA0Nf+B8z4zBob90UXtuCqmQqwMCyH+okOI3c05"
    "br3khkH0yP4kCwcE"
)
TX_HASH = "3389e9f0f1a65f19736cacf544c2e825313e8447f569233bb8db39aa607c8889"

PUBLIC = Network.PUBLIC_NETWORK_PASSPHRASE
TESTNET = Network.TESTNET_NETWORK_PASSPHRASE


# ---------------------------------------------------------------------------
# Envelope builders
# ---------------------------------------------------------------------------


def build_payment_envelope(passphrase: str = TESTNET) -> TransactionEnvelope:
    source = Keypair.random()
    destination = Keypair.random()
    envelope = (
        TransactionBuilder(
            source_account=Account(source.public_key, 1234),
            network_passphrase=passphrase,
            base_fee=100,
        )
        .append_payment_op(
            destination=destination.public_key,
            asset=Asset.native(),
            amount="10",
        )
        .set_timeout(300)
        .build()
    )
    envelope.sign(source)
    return envelope


def build_fee_bump_envelope(passphrase: str = TESTNET) -> FeeBumpTransactionEnvelope:
    fee_source = Keypair.random()
    envelope = TransactionBuilder.build_fee_bump_transaction(
        fee_source=fee_source,
        base_fee=200,
        inner_transaction_envelope=build_payment_envelope(passphrase),
        network_passphrase=passphrase,
    )
    envelope.sign(fee_source)
    return envelope


@pytest.fixture(scope="session")
def v1_envelope() -> TransactionEnvelope:
    return build_payment_envelope()


@pytest.fixture(scope="session")
def fee_bump_envelope() -> FeeBumpTransactionEnvelope:
    return build_fee_bump_envelope()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeCoreClient:
    """Minimal CoreClient implementation for testing."""

    def __init__(
        self,
        *,
        ack: SubmissionAck | None = None,
        should_raise: BaseException | None = None,
        info: dict[str, Any] | None = None,
        delay: float = 0.0,
    ) -> None:
        self._ack = ack or StatusAck(status="PENDING")
        self._should_raise = should_raise
        self._info = info or {"info": {"state": "Synced!", "ledger": {"num": 7}}}
        self._delay = delay
        self.submit_calls: list[tuple[str, float | None]] = []
        self.info_calls = 0

    async def submit(self, raw_envelope: str, *, timeout: float | None = None) -> SubmissionAck:
        self.submit_calls.append((raw_envelope, timeout))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._should_raise is not None:
            raise self._should_raise
        return self._ack

    async def info(self) -> dict[str, Any]:
        self.info_calls += 1
        return self._info


class FakeStateGetter:
    def __init__(self, synced: bool = True) -> None:
        self.state = CoreState(synced=synced, state="Synced!" if synced else "Catching up")
        self.calls = 0

    def get_core_state(self) -> CoreState:
        self.calls += 1
        return self.state


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> SubmissionMetrics:
    return SubmissionMetrics(registry)


def submissions_by_label(registry: CollectorRegistry) -> dict[tuple[str, str], float]:
    """Counter samples keyed by (status, envelope_type)."""
    counts: dict[tuple[str, str], float] = {}
    for family in registry.collect():
        for sample in family.samples:
            if sample.name == "txsub_async_txsub_submissions_total":
                key = (sample.labels["status"], sample.labels["envelope_type"])
                counts[key] = sample.value
    return counts


def duration_count(registry: CollectorRegistry, status: str, envelope_type: str) -> float | None:
    return registry.get_sample_value(
        "txsub_async_txsub_submission_duration_seconds_count",
        {"status": status, "envelope_type": envelope_type},
    )
