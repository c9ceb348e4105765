"""
Transaction envelope codec — decode and hash submitted envelopes.

Pure layer: no I/O, no logging, no state. Given the base64 ``tx`` field
and the network passphrase, produces an ``EnvelopeInfo`` or raises
``MalformedEnvelope``.

Hashes are the Stellar transaction signature-payload hashes, computed by
stellar-sdk's envelope wrappers:

    - V0 and V1 envelopes: ``TransactionEnvelope.hash_hex()`` (V0 is
      hashed as its V1 equivalent).
    - Fee-bump envelopes: ``FeeBumpTransactionEnvelope.hash_hex()``;
      ``inner_hash`` is the hash of the wrapped V1 envelope.

Invariants:
    - ``hash`` depends only on (raw bytes, passphrase).
    - ``inner_hash`` is set iff the variant is FEE_BUMP.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import StrEnum

from stellar_sdk import FeeBumpTransactionEnvelope, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr

from txsub_relay.errors import MalformedEnvelope


class EnvelopeVariant(StrEnum):
    """Envelope flavour; used as the ``envelope_type`` metrics label."""

    V0 = "v0"
    V1 = "v1"
    FEE_BUMP = "fee_bump"


_VARIANTS: dict[stellar_xdr.EnvelopeType, EnvelopeVariant] = {
    stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX_V0: EnvelopeVariant.V0,
    stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX: EnvelopeVariant.V1,
    stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX_FEE_BUMP: EnvelopeVariant.FEE_BUMP,
}


@dataclass(frozen=True)
class EnvelopeInfo:
    """A decoded submission envelope.

    Attributes:
        raw: The base64 envelope exactly as submitted. This is what gets
            forwarded to stellar-core.
        parsed: Decoded XDR ``TransactionEnvelope``.
        hash: Hex digest (64 lowercase chars) of the outer envelope.
            This is the public identifier of the submission.
        inner_hash: Hex digest of the wrapped transaction for fee-bump
            envelopes, None otherwise.
    """

    raw: str
    parsed: stellar_xdr.TransactionEnvelope
    hash: str
    inner_hash: str | None = None

    @property
    def variant(self) -> EnvelopeVariant:
        return envelope_variant(self.parsed)

    @property
    def is_fee_bump(self) -> bool:
        return self.variant is EnvelopeVariant.FEE_BUMP


# =========================================================================
# Hashing
# =========================================================================


def envelope_variant(parsed: stellar_xdr.TransactionEnvelope) -> EnvelopeVariant:
    """Map a decoded envelope to its variant.

    Raises:
        MalformedEnvelope: If the envelope type is not a transaction type.
    """
    try:
        return _VARIANTS[parsed.type]
    except KeyError:
        raise MalformedEnvelope(
            f"unsupported envelope type: {parsed.type!r}"
        ) from None


def hash_envelope(
    parsed: stellar_xdr.TransactionEnvelope,
    passphrase: str,
) -> tuple[str, str | None]:
    """Compute ``(hash, inner_hash)`` for a decoded envelope."""
    if envelope_variant(parsed) is not EnvelopeVariant.FEE_BUMP:
        return TransactionEnvelope.from_xdr_object(parsed, passphrase).hash_hex(), None

    fee_bump = FeeBumpTransactionEnvelope.from_xdr_object(parsed, passphrase)
    inner = fee_bump.transaction.inner_transaction_envelope
    return fee_bump.hash_hex(), inner.hash_hex()


# =========================================================================
# decode_envelope()
# =========================================================================


def _strip_line_breaks(raw: str) -> str:
    # Wrapped base64 (MIME/PEM style) is accepted; any other stray
    # character still fails validation.
    return raw.replace("\r", "").replace("\n", "")


def decode_envelope(raw: str, network_passphrase: str) -> EnvelopeInfo:
    """Decode and hash a base64 XDR transaction envelope.

    Args:
        raw: Base64-encoded ``TransactionEnvelope`` from the request.
            CR/LF line breaks inside the base64 text are ignored.
        network_passphrase: Passphrase of the network the relay serves.

    Returns:
        EnvelopeInfo with ``hash`` (and ``inner_hash`` for fee-bumps).

    Raises:
        MalformedEnvelope: If ``raw`` is not valid base64, not a complete
            XDR envelope, has trailing bytes, or cannot be hashed
            (including an empty passphrase).
    """
    extras = {"envelope_xdr": raw}

    try:
        raw_bytes = base64.b64decode(_strip_line_breaks(raw), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEnvelope(f"invalid base64: {exc}", extras=extras) from exc

    try:
        parsed = stellar_xdr.TransactionEnvelope.from_xdr_bytes(raw_bytes)
    except Exception as exc:
        raise MalformedEnvelope(f"invalid envelope xdr: {exc}", extras=extras) from exc

    # XDR is canonical: a fully consumed input re-encodes to itself.
    if parsed.to_xdr_bytes() != raw_bytes:
        raise MalformedEnvelope("trailing or non-canonical bytes in envelope", extras=extras)

    if not network_passphrase:
        raise MalformedEnvelope("empty network passphrase", extras=extras)

    try:
        tx_hash, inner_hash = hash_envelope(parsed, network_passphrase)
    except MalformedEnvelope as exc:
        exc.extras.update(extras)
        raise
    except Exception as exc:
        raise MalformedEnvelope(f"could not hash envelope: {exc}", extras=extras) from exc

    return EnvelopeInfo(raw=raw, parsed=parsed, hash=tx_hash, inner_hash=inner_hash)
