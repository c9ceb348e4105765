"""
Core readiness — whether stellar-core is synced and safe to submit to.

The orchestrator only reads readiness through ``CoreStateGetter``. The
state itself is owned by ``CoreStateTracker``, which a background task
refreshes from stellar-core's ``/info`` endpoint. Readers may see a
slightly stale value; at worst that costs one extra round trip or one
premature rejection.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from txsub_relay.core.client import CoreClient

logger = logging.getLogger(__name__)

# Value of info.state once stellar-core has caught up with the network.
SYNCED_STATE = "Synced!"


@dataclass(frozen=True)
class CoreState:
    """Snapshot of the node's sync status."""

    synced: bool
    state: str | None = None
    ledger: int | None = None


@runtime_checkable
class CoreStateGetter(Protocol):
    def get_core_state(self) -> CoreState: ...


def core_state_from_info(info: dict[str, Any]) -> CoreState:
    """Build a CoreState from a stellar-core ``/info`` document."""
    body = info.get("info")
    if not isinstance(body, dict):
        return CoreState(synced=False)

    state = body.get("state")
    ledger = None
    ledger_info = body.get("ledger")
    if isinstance(ledger_info, dict) and isinstance(ledger_info.get("num"), int):
        ledger = ledger_info["num"]

    return CoreState(synced=state == SYNCED_STATE, state=state, ledger=ledger)


class CoreStateTracker:
    """Thread-safe holder of the latest CoreState.

    Starts unsynced, so nothing is submitted before the first
    successful refresh unless ``initial`` says otherwise.
    """

    def __init__(self, initial: CoreState | None = None) -> None:
        self._lock = threading.Lock()
        self._state = initial or CoreState(synced=False)

    def get_core_state(self) -> CoreState:
        with self._lock:
            return self._state

    def set_state(self, state: CoreState) -> None:
        with self._lock:
            previous, self._state = self._state, state
        if previous.synced != state.synced:
            logger.info(
                "stellar-core sync state changed: synced=%s state=%r ledger=%s",
                state.synced,
                state.state,
                state.ledger,
            )

    async def refresh(self, client: CoreClient) -> CoreState:
        """Poll ``/info`` once and store the result.

        A failed poll marks the node unsynced rather than keeping the
        last known state.
        """
        try:
            info = await client.info()
        except Exception as exc:
            logger.warning("stellar-core /info poll failed: %s", exc)
            state = CoreState(synced=False)
        else:
            state = core_state_from_info(info)
        self.set_state(state)
        return state

    async def run_refresh_loop(self, client: CoreClient, interval: float) -> None:
        """Refresh every ``interval`` seconds until cancelled."""
        while True:
            await self.refresh(client)
            await asyncio.sleep(interval)
