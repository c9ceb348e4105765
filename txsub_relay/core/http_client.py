"""
stellar-core HTTP client — real network implementation of CoreClient.

Translates ``/tx`` replies into StatusAck/ExceptionAck. Uses an
injectable transport (CoreTransport) so the HTTP layer can be swapped
for test fakes without changing parsing logic.

No retry loops. No XDR logic beyond forwarding the envelope verbatim.

Reply shapes (stellar-core ``/tx``):
    - Decision:  {"status": "PENDING"}
    - Rejection: {"status": "ERROR", "error": "<TransactionResult b64>",
                  "diagnostic_events": "<b64>"}
    - Failure:   {"exception": "Invalid XDR"}
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from txsub_relay.core.client import ExceptionAck, StatusAck, SubmissionAck
from txsub_relay.core.transport import CoreTransport, HttpxTransport
from txsub_relay.errors import RequestError


class CoreHttpClient:
    """stellar-core client implementing the CoreClient protocol.

    Args:
        url: stellar-core HTTP command endpoint (e.g. "http://localhost:11626").
        transport: Injectable transport. Defaults to HttpxTransport.
    """

    def __init__(
        self,
        url: str,
        transport: CoreTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._transport = transport or HttpxTransport()

    @property
    def url(self) -> str:
        """The stellar-core endpoint URL."""
        return self._url

    # -----------------------------------------------------------------
    # CoreClient protocol methods
    # -----------------------------------------------------------------

    async def submit(
        self,
        raw_envelope: str,
        *,
        timeout: float | None = None,
    ) -> SubmissionAck:
        """Submit a base64 envelope to ``/tx``.

        An expired ``timeout`` and every transport failure raise
        RequestError. Cancellation of the calling task propagates
        unchanged.
        """
        url = f"{self._url}/tx"
        extras: dict[str, Any] = {"envelope_xdr": raw_envelope}

        try:
            async with asyncio.timeout(timeout):
                reply = await self._transport.post_form(url, {"blob": raw_envelope})
        except (TimeoutError, httpx.TimeoutException) as exc:
            extras["error"] = f"no reply from stellar-core within deadline ({exc!r})"
            raise RequestError("stellar-core submission timed out", extras=extras) from exc
        except httpx.HTTPStatusError as exc:
            extras["error"] = f"HTTP {exc.response.status_code} from stellar-core"
            raise RequestError("stellar-core returned an error status", extras=extras) from exc
        except Exception as exc:
            extras["error"] = str(exc) or repr(exc)
            raise RequestError(f"stellar-core submission failed: {exc!r}", extras=extras) from exc

        return _parse_submit_response(reply, extras)

    async def info(self) -> dict[str, Any]:
        """Fetch ``/info``. Transport exceptions propagate to the caller."""
        reply = await self._transport.get_json(f"{self._url}/info")
        if not isinstance(reply, dict):
            raise ValueError(f"/info reply is not a JSON object: {type(reply).__name__}")
        return reply


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _parse_submit_response(reply: Any, extras: dict[str, Any]) -> SubmissionAck:
    """Parse a ``/tx`` reply into a SubmissionAck.

    Handles:
        - Non-object replies (RequestError)
        - Non-empty ``exception`` (ExceptionAck, takes precedence)
        - Anything else (StatusAck; a missing status becomes "")
    """
    if not isinstance(reply, dict):
        extras["error"] = f"reply is not a JSON object: {type(reply).__name__}"
        raise RequestError("unparseable reply from stellar-core", extras=extras)

    exception = reply.get("exception")
    if exception:
        return ExceptionAck(exception=str(exception))

    status = reply.get("status")
    return StatusAck(
        status="" if status is None else str(status),
        error_result_xdr=_optional_str(reply.get("error")),
        diagnostic_events_xdr=_optional_str(reply.get("diagnostic_events")),
    )


def _optional_str(value: Any) -> str | None:
    # Payloads are base64 strings; other JSON values are stringified.
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)
