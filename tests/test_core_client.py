"""
Tests for CoreHttpClient — canned stellar-core replies, no network.

Uses a FakeTransport for parsing and pytest-httpx for the default
HttpxTransport wire format.

Test plan:
- Parsing: each status, ERROR payload fields, exception precedence,
  missing status, non-object reply
- Transport: exceptions → RequestError, deadline → RequestError,
  caller cancellation propagates
- Wire: POST /tx with form field ``blob``; HTTP error status and
  invalid JSON → RequestError; GET /info
"""

import asyncio
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from pytest_httpx import HTTPXMock

from conftest import TX_XDR
from txsub_relay.core.client import CoreClient, ExceptionAck, StatusAck, TxStatus
from txsub_relay.core.http_client import CoreHttpClient
from txsub_relay.core.transport import HttpxTransport
from txsub_relay.errors import RequestError

CORE_URL = "http://core.test:11626"

# ---------------------------------------------------------------------------
# Fake transports
# ---------------------------------------------------------------------------


class FakeTransport:
    """Returns a canned reply for every request."""

    def __init__(self, reply: Any) -> None:
        self._reply = reply
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    async def post_form(self, url: str, form: dict[str, str]) -> Any:
        self.calls.append((url, form))
        return self._reply

    async def get_json(self, url: str) -> Any:
        self.calls.append((url, None))
        return self._reply


class ErrorTransport:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def post_form(self, url: str, form: dict[str, str]) -> Any:
        raise self._exc

    async def get_json(self, url: str) -> Any:
        raise self._exc


class SlowTransport:
    async def post_form(self, url: str, form: dict[str, str]) -> Any:
        await asyncio.sleep(10)
        return {"status": "PENDING"}

    async def get_json(self, url: str) -> Any:
        await asyncio.sleep(10)
        return {}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestSubmitParsing:
    def test_implements_protocol(self) -> None:
        assert isinstance(CoreHttpClient(CORE_URL), CoreClient)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["PENDING", "DUPLICATE", "TRY_AGAIN_LATER"])
    async def test_status_parsed(self, status: str) -> None:
        client = CoreHttpClient(CORE_URL, FakeTransport({"status": status}))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(status=status)
        assert isinstance(ack, StatusAck)
        assert ack.known_status is TxStatus(status)

    @pytest.mark.asyncio
    async def test_error_payload_parsed(self) -> None:
        reply = {
            "status": "ERROR",
            "error": "AAAAAAAAAGT////7AAAAAA==",
            "diagnostic_events": "AAAAAQ==",
        }
        client = CoreHttpClient(CORE_URL, FakeTransport(reply))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(
            status="ERROR",
            error_result_xdr="AAAAAAAAAGT////7AAAAAA==",
            diagnostic_events_xdr="AAAAAQ==",
        )

    @pytest.mark.asyncio
    async def test_exception_takes_precedence(self) -> None:
        client = CoreHttpClient(
            CORE_URL, FakeTransport({"exception": "Invalid XDR", "status": "PENDING"})
        )
        ack = await client.submit(TX_XDR)
        assert ack == ExceptionAck(exception="Invalid XDR")
        assert ack.outcome == "exception"

    @pytest.mark.asyncio
    async def test_empty_exception_is_ignored(self) -> None:
        client = CoreHttpClient(CORE_URL, FakeTransport({"exception": "", "status": "PENDING"}))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(status="PENDING")

    @pytest.mark.asyncio
    async def test_unknown_status_kept_verbatim(self) -> None:
        client = CoreHttpClient(CORE_URL, FakeTransport({"status": "FILTERED"}))
        ack = await client.submit(TX_XDR)
        assert isinstance(ack, StatusAck)
        assert ack.status == "FILTERED"
        assert ack.known_status is None
        assert ack.outcome == "invalid_status"

    @pytest.mark.asyncio
    async def test_non_string_payloads_are_stringified(self) -> None:
        reply = {"status": "ERROR", "error": {"x": 1}, "diagnostic_events": 7}
        client = CoreHttpClient(CORE_URL, FakeTransport(reply))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(
            status="ERROR",
            error_result_xdr="{'x': 1}",
            diagnostic_events_xdr="7",
        )

    @pytest.mark.asyncio
    async def test_empty_payloads_are_none(self) -> None:
        reply = {"status": "ERROR", "error": "", "diagnostic_events": None}
        client = CoreHttpClient(CORE_URL, FakeTransport(reply))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(status="ERROR")

    @pytest.mark.asyncio
    async def test_missing_status_is_empty(self) -> None:
        client = CoreHttpClient(CORE_URL, FakeTransport({}))
        ack = await client.submit(TX_XDR)
        assert ack == StatusAck(status="")

    @pytest.mark.asyncio
    async def test_non_object_reply_is_request_error(self) -> None:
        client = CoreHttpClient(CORE_URL, FakeTransport(["PENDING"]))
        with pytest.raises(RequestError):
            await client.submit(TX_XDR)

    @pytest.mark.asyncio
    async def test_sends_blob_to_tx_endpoint(self) -> None:
        transport = FakeTransport({"status": "PENDING"})
        client = CoreHttpClient(CORE_URL + "/", transport)
        await client.submit(TX_XDR)
        assert transport.calls == [(f"{CORE_URL}/tx", {"blob": TX_XDR})]


# ---------------------------------------------------------------------------
# Transport failures, deadlines, cancellation
# ---------------------------------------------------------------------------


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        client = CoreHttpClient(CORE_URL, ErrorTransport(ConnectionError("refused")))
        with pytest.raises(RequestError) as exc_info:
            await client.submit(TX_XDR)
        assert "refused" in exc_info.value.extras["error"]
        assert exc_info.value.extras["envelope_xdr"] == TX_XDR
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self) -> None:
        client = CoreHttpClient(CORE_URL, SlowTransport())
        with pytest.raises(RequestError) as exc_info:
            await client.submit(TX_XDR, timeout=0.01)
        assert "deadline" in exc_info.value.extras["error"]

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self) -> None:
        client = CoreHttpClient(CORE_URL, SlowTransport())
        task = asyncio.create_task(client.submit(TX_XDR))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


# ---------------------------------------------------------------------------
# Default httpx transport
# ---------------------------------------------------------------------------


class TestHttpxWire:
    @pytest.mark.asyncio
    async def test_posts_form_encoded_blob(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=f"{CORE_URL}/tx", json={"status": "PENDING"})

        ack = await CoreHttpClient(CORE_URL).submit(TX_XDR)

        assert ack == StatusAck(status="PENDING")
        request = httpx_mock.get_requests()[0]
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {"blob": [TX_XDR]}

    @pytest.mark.asyncio
    async def test_http_error_status(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=f"{CORE_URL}/tx", status_code=500)

        with pytest.raises(RequestError) as exc_info:
            await CoreHttpClient(CORE_URL).submit(TX_XDR)
        assert exc_info.value.extras["error"] == "HTTP 500 from stellar-core"

    @pytest.mark.asyncio
    async def test_invalid_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=f"{CORE_URL}/tx", text="<html>oops</html>")

        with pytest.raises(RequestError):
            await CoreHttpClient(CORE_URL).submit(TX_XDR)

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))

        with pytest.raises(RequestError) as exc_info:
            await CoreHttpClient(CORE_URL).submit(TX_XDR)
        assert "connection refused" in exc_info.value.extras["error"]

    @pytest.mark.asyncio
    async def test_read_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        with pytest.raises(RequestError) as exc_info:
            await CoreHttpClient(CORE_URL).submit(TX_XDR)
        assert "deadline" in exc_info.value.extras["error"]

    @pytest.mark.asyncio
    async def test_info(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="GET",
            url=f"{CORE_URL}/info",
            json={"info": {"state": "Synced!"}},
        )

        info = await CoreHttpClient(CORE_URL).info()
        assert info["info"]["state"] == "Synced!"

    @pytest.mark.asyncio
    async def test_shared_client(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=f"{CORE_URL}/tx", json={"status": "DUPLICATE"})

        async with httpx.AsyncClient() as shared:
            client = CoreHttpClient(CORE_URL, HttpxTransport(client=shared))
            ack = await client.submit(TX_XDR)
        assert ack == StatusAck(status="DUPLICATE")
