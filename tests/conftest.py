"""Shared fixtures for mqtt-webhook tests."""

from __future__ import annotations

import asyncio
import base64

import grpc
import pytest
from fastapi.testclient import TestClient

from mqtt_webhook.__main__ import create_app
from mqtt_webhook.config import WebhookConfig
from mqtt_webhook.contracts import RawMessage


def rpc_error(code: grpc.StatusCode, details: str = "") -> grpc.aio.AioRpcError:
    """Build the error a grpc.aio call raises on failure."""
    return grpc.aio.AioRpcError(code, grpc.aio.Metadata(), grpc.aio.Metadata(), details=details)


class FakeThings:
    """In-memory things service.

    ``keys`` maps thing keys to thing ids; ``connections`` holds the
    (thing id, channel id) pairs allowed to communicate.
    """

    def __init__(self) -> None:
        self.keys: dict[str, str] = {"thing-key": "u1"}
        self.connections: set[tuple[str, str]] = {("u1", "c1")}
        self.calls: list[tuple] = []
        self.error: Exception | None = None
        self.delay = 0.0

    async def _respond(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def identify(self, token: str) -> str:
        self.calls.append(("identify", token))
        await self._respond()
        if token not in self.keys:
            raise rpc_error(grpc.StatusCode.UNAUTHENTICATED, "unknown key")
        return self.keys[token]

    async def can_access(self, token: str, channel_id: str) -> str:
        self.calls.append(("can_access", token, channel_id))
        await self._respond()
        thing_id = self.keys.get(token)
        if thing_id is None or (thing_id, channel_id) not in self.connections:
            raise rpc_error(grpc.StatusCode.PERMISSION_DENIED, "not connected")
        return thing_id


class RecordingPublisher:
    def __init__(self) -> None:
        self.messages: list[RawMessage] = []

    async def publish(self, message: RawMessage) -> None:
        self.messages.append(message)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


@pytest.fixture
def config() -> WebhookConfig:
    return WebhookConfig(things_timeout=0.2, bus_url="mqtt://localhost:1883")


@pytest.fixture
def things() -> FakeThings:
    return FakeThings()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def client(config: WebhookConfig, things: FakeThings, publisher: RecordingPublisher) -> TestClient:
    app = create_app(config, things=things, publisher=publisher)
    return TestClient(app)
