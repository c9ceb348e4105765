"""
Transport protocol for stellar-core HTTP calls.

Defines the seam where concrete HTTP implementations plug in. The core
client depends on this protocol, not on httpx directly, so the
transport can be swapped without editing parsing logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

stellar-core's command port speaks plain HTTP: ``/tx`` takes the
envelope as a ``blob`` form field, ``/info`` is a GET. Both reply with
a JSON object.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class CoreTransport(Protocol):
    """Async transport for stellar-core HTTP requests."""

    async def post_form(self, url: str, form: dict[str, str]) -> Any:
        """POST a form-encoded body and return the decoded JSON reply.

        Raises:
            Exception: On transport-level failures (connection refused,
                timeout, HTTP error status, invalid JSON). The core
                client maps these to RequestError.
        """
        ...

    async def get_json(self, url: str) -> Any:
        """GET a URL and return the decoded JSON reply."""
        ...


class HttpxTransport:
    """Default transport using httpx.AsyncClient.

    Without a shared ``client`` every call opens and closes its own
    AsyncClient, so a cancelled call never leaves a connection behind.
    A shared client (owned and closed by the caller) reuses its pool.

    Args:
        timeout: Per-request timeout in seconds.
        client: Optional shared AsyncClient.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client

    async def post_form(self, url: str, form: dict[str, str]) -> Any:
        if self._client is not None:
            response = await self._client.post(url, data=form, timeout=self._timeout)
            return _decode(response)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(url, data=form)
            return _decode(response)

    async def get_json(self, url: str) -> Any:
        if self._client is not None:
            response = await self._client.get(url, timeout=self._timeout)
            return _decode(response)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(url)
            return _decode(response)


def _decode(response: httpx.Response) -> Any:
    response.raise_for_status()
    return response.json()
