"""
HTTP surface for the submission relay (FastAPI/ASGI).

Routes:
    POST /v2/transactions   async submission; form field ``tx``
    GET  /metrics           Prometheus text exposition of the registry
    GET  /health            liveness plus the last known sync state

Every RelayError is rendered as a problem document with the error's
HTTP status. Successful submissions are sent with the status from the
mapping table (201/409/503/400) and the SubmissionResponse body.

All collaborators can be injected through ``create_app`` so tests can
run the full HTTP path against a fake stellar-core.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from txsub_relay.config import RelayConfig
from txsub_relay.core.client import CoreClient
from txsub_relay.core.http_client import CoreHttpClient
from txsub_relay.core.metrics import SubmissionMetrics
from txsub_relay.core.transport import HttpxTransport
from txsub_relay.errors import BadRequest, RelayError, UnsupportedMediaType
from txsub_relay.orchestrator import SubmissionOrchestrator
from txsub_relay.readiness import CoreStateGetter, CoreStateTracker

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})
PROBLEM_CONTENT_TYPE = "application/problem+json"

router = APIRouter()


# =========================================================================
# Request helpers
# =========================================================================


def validate_body_type(content_type: str | None) -> None:
    """Allow an empty content type or one of FORM_CONTENT_TYPES.

    Raises:
        UnsupportedMediaType: For any other media type.
    """
    if not content_type:
        return
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type not in FORM_CONTENT_TYPES:
        raise UnsupportedMediaType(
            f"unsupported content type {media_type!r}",
            extras={"content_type": media_type},
        )


async def read_tx_field(request: Request) -> str:
    """Return the ``tx`` form field.

    Raises:
        BadRequest: If the body cannot be parsed as a form or the field
            is missing or empty.
    """
    try:
        form = await request.form()
    except StarletteHTTPException as exc:
        raise BadRequest(
            f"unparseable form body: {exc.detail}",
            extras={"invalid_field": "tx", "reason": str(exc.detail)},
        ) from exc
    except MultiPartException as exc:
        raise BadRequest(
            f"unparseable form body: {exc.message}",
            extras={"invalid_field": "tx", "reason": exc.message},
        ) from exc
    value: Any = form.get("tx")
    if value is not None and not isinstance(value, str):
        # multipart file part
        value = (await value.read()).decode("utf-8", errors="replace")
    if not value:
        raise BadRequest(
            "missing tx field",
            extras={"invalid_field": "tx", "reason": "field is required"},
        )
    return value.strip()


# =========================================================================
# Routes
# =========================================================================


@router.post("/v2/transactions")
async def submit_transaction(request: Request) -> JSONResponse:
    validate_body_type(request.headers.get("content-type"))
    raw = await read_tx_field(request)

    orchestrator: SubmissionOrchestrator = request.app.state.orchestrator
    response = await orchestrator.submit(raw)
    return JSONResponse(response.to_dict(), status_code=response.http_status)


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    registry: CollectorRegistry = request.app.state.registry
    return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    state_getter: CoreStateGetter = request.app.state.state_getter
    return {"status": "ok", "core_synced": state_getter.get_core_state().synced}


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(
        exc.to_problem(),
        status_code=exc.status,
        media_type=PROBLEM_CONTENT_TYPE,
    )


# =========================================================================
# App factory
# =========================================================================


def create_app(
    config: RelayConfig,
    *,
    core_client: CoreClient | None = None,
    state_getter: CoreStateGetter | None = None,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        config: Validated relay configuration.
        core_client: stellar-core client. Defaults to CoreHttpClient
            against ``config.core_url``.
        state_getter: Readiness source. When omitted, a
            CoreStateTracker is created and polled from the app lifespan.
        registry: Prometheus registry. Defaults to a fresh one.

    Returns:
        FastAPI application.
    """
    if registry is None:
        registry = CollectorRegistry()
    if core_client is None:
        core_client = CoreHttpClient(
            config.core_url,
            HttpxTransport(timeout=config.submit_timeout_s),
        )

    tracker: CoreStateTracker | None = None
    if state_getter is None:
        tracker = CoreStateTracker()
        state_getter = tracker

    orchestrator = SubmissionOrchestrator(
        core_client,
        state_getter,
        SubmissionMetrics(registry, namespace=config.metrics_namespace),
        network_passphrase=config.network_passphrase,
        disable_tx_sub=config.disable_tx_sub,
        submit_timeout=config.submit_timeout_s,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        poller: asyncio.Task[None] | None = None
        if tracker is not None:
            poller = asyncio.create_task(
                tracker.run_refresh_loop(core_client, config.core_poll_interval_s)
            )
        logger.info(
            "relay started: core_url=%s disable_tx_sub=%s",
            config.core_url,
            config.disable_tx_sub,
        )
        try:
            yield
        finally:
            if poller is not None:
                poller.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await poller

    app = FastAPI(title="txsub-relay", lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.state_getter = state_getter
    app.state.orchestrator = orchestrator
    app.add_exception_handler(RelayError, relay_error_handler)
    app.include_router(router)
    return app
