"""HTTP endpoints called by VerneMQ's webhook plugin.

Every hook answers with an empty body; the status code is the decision.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Mapping, Type, TypeVar

import orjson
from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, ValidationError

from . import __version__
from .contracts import HookType, PublishHook, RegisterHook, SubscribeHook, VersionInfo
from .errors import ParseError, UnsupportedRequest, status_for
from .service import WebhookService

logger = logging.getLogger(__name__)

HOOK_HEADER = "vernemq-hook"
SERVICE_NAME = "http"

HookT = TypeVar("HookT", bound=BaseModel)

router = APIRouter()


def ensure_hook(headers: Mapping[str, str], hook: HookType) -> None:
    """Reject requests whose ``vernemq-hook`` header does not name ``hook``."""
    received = headers.get(HOOK_HEADER)
    if received is None or hook.value not in received:
        raise UnsupportedRequest(hook.value, received)


def decode_hook_request(body: bytes, model: Type[HookT]) -> HookT:
    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise ParseError.malformed_body(str(exc)) from exc
    if not isinstance(data, dict):
        raise ParseError.malformed_body("expected a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ParseError.malformed_body(f"{exc.error_count()} invalid field(s)") from exc


async def _serve(
    request: Request,
    hook: HookType,
    model: Type[HookT],
    handle: Callable[[WebhookService, HookT], Awaitable[object]],
) -> Response:
    started = time.perf_counter()
    service: WebhookService | None = request.app.state.service
    try:
        if service is None:
            raise RuntimeError("webhook service is not initialized")
        ensure_hook(request.headers, hook)
        payload = decode_hook_request(await request.body(), model)
        await handle(service, payload)
    except Exception as exc:
        status_code = status_for(exc)
        elapsed = time.perf_counter() - started
        _log_failure(hook, status_code, elapsed, exc)
    else:
        status_code = 202
        elapsed = time.perf_counter() - started
        logger.debug(
            "hook accepted",
            extra={"hook": hook.value, "status": status_code, "duration_ms": round(elapsed * 1000, 3)},
        )

    request.app.state.metrics.observe(hook.value, status_code, elapsed)
    return Response(status_code=status_code)


def _log_failure(hook: HookType, status_code: int, elapsed: float, exc: Exception) -> None:
    extra = {"hook": hook.value, "status": status_code, "duration_ms": round(elapsed * 1000, 3)}
    if status_code == 500:
        logger.error("hook failed: %s", exc, exc_info=exc, extra=extra)
    elif status_code == 503:
        logger.warning("hook rejected: %s", exc, extra=extra)
    else:
        logger.info("hook rejected: %s", exc, extra=extra)


@router.post("/auth_on_register", status_code=202)
async def auth_on_register(request: Request) -> Response:
    return await _serve(
        request,
        HookType.register,
        RegisterHook,
        lambda service, hook: service.register(hook),
    )


@router.post("/auth_on_publish", status_code=202)
async def auth_on_publish(request: Request) -> Response:
    content_type = request.headers.get("content-type", "")
    return await _serve(
        request,
        HookType.publish,
        PublishHook,
        lambda service, hook: service.publish(hook, content_type=content_type),
    )


@router.post("/auth_on_subscribe", status_code=202)
async def auth_on_subscribe(request: Request) -> Response:
    return await _serve(
        request,
        HookType.subscribe,
        SubscribeHook,
        lambda service, hook: service.subscribe(hook),
    )


@router.get("/version", response_model=VersionInfo)
async def version() -> VersionInfo:
    return VersionInfo(service=SERVICE_NAME, version=__version__)


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    registry = request.app.state.metrics
    return Response(content=registry.render(), media_type=registry.content_type)


__all__ = ["HOOK_HEADER", "decode_hook_request", "ensure_hook", "router"]
