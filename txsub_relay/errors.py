"""
Error taxonomy for the submission relay.

Every failure the relay can report to a client is a ``RelayError``
subclass carrying a machine-readable ``error_code`` (the problem type),
an HTTP status, a human title/detail, and an ``extras`` dict of
diagnostics. The HTTP layer renders any RelayError with
``to_problem()``; nothing else needs to know the status codes.

Domain rejections from the node (``ERROR`` acknowledgments) are NOT
errors here. They are successful responses carrying rejection details.

Taxonomy:
    - MalformedEnvelope          400  transaction_malformed
    - SubmissionDisabled         405  transaction_submission_disabled
    - ReadinessUnavailable       503  stale_history
    - RequestError               400  transaction_submission_failed
    - SubmissionException        400  transaction_submission_exception
    - InvalidSubmissionStatus    400  transaction_submission_invalid_status
    - UnsupportedMediaType       415  unsupported_media_type
    - BadRequest                 400  bad_request
"""

from __future__ import annotations

from typing import Any

_ERRORS_DOC_URL = (
    "https://developers.stellar.org/api/errors/http-status-codes/"
    "horizon-specific/transaction-submission-v2"
)


class RelayError(Exception):
    """Base class for client-visible relay failures.

    Args:
        message: Internal message (logs, ``str(exc)``).
        extras: Diagnostics echoed to the client under ``extras``.
        detail: Overrides the class-level client-facing detail text.
    """

    error_code: str = "server_error"
    status: int = 500
    title: str = "Internal Server Error"
    detail: str = "An unexpected error occurred."

    def __init__(
        self,
        message: str | None = None,
        *,
        extras: dict[str, Any] | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message or self.title)
        self.extras: dict[str, Any] = dict(extras or {})
        if detail is not None:
            self.detail = detail

    def to_problem(self) -> dict[str, Any]:
        """Render as a problem document (type/title/status/detail/extras)."""
        problem: dict[str, Any] = {
            "type": self.error_code,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
        }
        if self.extras:
            problem["extras"] = self.extras
        return problem


# =========================================================================
# Request validation
# =========================================================================


class UnsupportedMediaType(RelayError):
    error_code = "unsupported_media_type"
    status = 415
    title = "Unsupported Media Type"
    detail = (
        "The request has an unsupported content type. Transactions must be "
        "submitted as application/x-www-form-urlencoded or multipart/form-data."
    )


class BadRequest(RelayError):
    error_code = "bad_request"
    status = 400
    title = "Bad Request"
    detail = (
        "The request you sent was invalid in some way. "
        "See `extras.invalid_field` for the offending field."
    )


# =========================================================================
# Submission pipeline
# =========================================================================


class SubmissionDisabled(RelayError):
    """Submission was switched off by the operator (``disable_tx_sub``)."""

    error_code = "transaction_submission_disabled"
    status = 405
    title = "Transaction Submission Disabled"
    detail = (
        "Transaction submission has been disabled on this relay. "
        "To enable it again, unset TXSUB_DISABLE_TX_SUB."
    )


class MalformedEnvelope(RelayError):
    """The ``tx`` field could not be decoded or hashed."""

    error_code = "transaction_malformed"
    status = 400
    title = "Transaction Malformed"
    detail = (
        "The relay could not decode the transaction envelope in this request. "
        "A transaction should be an XDR TransactionEnvelope struct encoded "
        "using base64. The envelope read from this request is echoed in the "
        "`extras.envelope_xdr` field of this response for your convenience."
    )


class ReadinessUnavailable(RelayError):
    """The upstream node is not synced; nothing was submitted."""

    error_code = "stale_history"
    status = 503
    title = "Historical DB Is Too Stale"
    detail = (
        "This relay rejects submissions while the connected stellar-core "
        "instance is not synced with the network. Please try again later."
    )


class RequestError(RelayError):
    """The call to stellar-core could not complete (transport level)."""

    error_code = "transaction_submission_failed"
    status = 400
    title = "Transaction Submission Failed"
    detail = (
        "Could not submit transaction to stellar-core. The `extras.error` "
        "field on this response contains further details. Descriptions of "
        f"each code can be found at: {_ERRORS_DOC_URL}/transaction_submission_failed"
    )


class SubmissionException(RelayError):
    """stellar-core replied with an exception instead of a status."""

    error_code = "transaction_submission_exception"
    status = 400
    title = "Transaction Submission Exception"
    detail = (
        "Received exception from stellar-core. The `extras.error` field on "
        "this response contains further details. Descriptions of each code "
        f"can be found at: {_ERRORS_DOC_URL}/transaction_submission_exception"
    )


class InvalidSubmissionStatus(RelayError):
    """stellar-core replied with a status outside the known set.

    Usually a protocol-version mismatch between relay and node.
    """

    error_code = "transaction_submission_invalid_status"
    status = 400
    title = "Transaction Submission Invalid Status"
    detail = (
        "Received invalid status from stellar-core. The `extras.error` field "
        "on this response contains further details. Descriptions of each code "
        f"can be found at: {_ERRORS_DOC_URL}/transaction_submission_invalid_status"
    )


# =========================================================================
# Configuration
# =========================================================================


class ConfigError(ValueError):
    """Raised when relay configuration fails validation."""
