"""Access decisions against the things service."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable

import grpc

from .errors import BackendError, Unauthorized
from .ports import ThingsClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0


class Authorizer:
    """Resolve thing keys into thing ids.

    Each call is a single things-service RPC bounded by ``timeout`` seconds.
    Empty keys are rejected without contacting the backend. Nothing is
    cached and nothing is retried.
    """

    def __init__(self, things: ThingsClient, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._things = things
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def authenticate(self, key: str) -> str:
        """Return the id of the thing owning ``key``."""
        if not key:
            raise Unauthorized()
        return await self._call("identify", self._things.identify(key))

    async def authorize(self, key: str, channel_id: str) -> str:
        """Return the id of the thing owning ``key`` if it is connected to ``channel_id``."""
        if not key:
            raise Unauthorized()
        return await self._call("can_access", self._things.can_access(key, channel_id))

    async def _call(self, method: str, call: Awaitable[str]) -> str:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.debug("things.%s timed out", method, extra={"timeout": self._timeout})
            raise BackendError(grpc.StatusCode.DEADLINE_EXCEEDED, f"{method} timed out") from exc
        except grpc.aio.AioRpcError as exc:
            logger.debug("things.%s failed", method, extra={"code": exc.code().name})
            raise BackendError(exc.code(), exc.details()) from exc


__all__ = ["Authorizer", "DEFAULT_TIMEOUT"]
