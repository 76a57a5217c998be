from __future__ import annotations

from typing import Protocol

from .contracts import RawMessage


class ThingsClient(Protocol):
    """Identity/access backend.

    Both calls return the resolved thing id. Failures are raised either as
    ``grpc.aio.AioRpcError`` or as :class:`mqtt_webhook.errors.BackendError`.
    """

    async def identify(self, token: str) -> str: ...

    async def can_access(self, token: str, channel_id: str) -> str: ...


class MessagePublisher(Protocol):
    async def publish(self, message: RawMessage) -> None: ...
