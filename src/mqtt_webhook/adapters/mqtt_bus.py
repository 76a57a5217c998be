"""Forward allowed publishes to the message bus over MQTT."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional
from urllib.parse import urlparse

import aiomqtt
import orjson

from ..contracts import RawMessage
from ..topics import LEVEL_SEPARATOR

logger = logging.getLogger(__name__)

# Characters MQTT forbids in a publish topic level; '%' first so escapes stay unambiguous.
_LEVEL_ESCAPES = (("%", "%25"), ("#", "%23"), ("+", "%2B"), ("\x00", "%00"))


class BusAddress(NamedTuple):
    hostname: str
    port: int
    username: Optional[str]
    password: Optional[str]


def parse_mqtt_url(url: str) -> BusAddress:
    """Parse ``mqtt://[user:pass@]host[:port]``; raises ValueError for other schemes."""
    parsed = urlparse(url)
    if parsed.scheme != "mqtt":
        raise ValueError(f"Invalid MQTT URL scheme: {parsed.scheme!r}. Expected 'mqtt://'.")
    return BusAddress(parsed.hostname or "localhost", parsed.port or 1883, parsed.username, parsed.password)


def escape_level(level: str) -> str:
    for char, escaped in _LEVEL_ESCAPES:
        level = level.replace(char, escaped)
    return level


def bus_topic(prefix: str, message: RawMessage) -> str:
    """Topic for ``message``: ``<prefix>/<channel>[/<escaped subtopic levels>]``.

    Subtopic levels may hold ``#`` or ``+``, which are wildcards on the bus
    broker; they are percent-encoded so the topic stays publishable.
    """
    levels = [prefix, message.channel]
    if message.subtopic:
        levels.extend(escape_level(level) for level in message.subtopic.split(LEVEL_SEPARATOR))
    return "/".join(levels)


def build_client(url: str, client_id: str) -> aiomqtt.Client:
    address = parse_mqtt_url(url)
    return aiomqtt.Client(
        hostname=address.hostname,
        port=address.port,
        username=address.username,
        password=address.password,
        identifier=client_id,
    )


class MQTTMessagePublisher:
    """Publisher implementation backed by a connected aiomqtt client."""

    def __init__(self, client: aiomqtt.Client, *, topic_prefix: str = "channels", qos: int = 1) -> None:
        self._client = client
        self._topic_prefix = topic_prefix
        self._qos = qos

    async def publish(self, message: RawMessage) -> None:
        topic = bus_topic(self._topic_prefix, message)
        payload = orjson.dumps(message.model_dump(mode="json"))
        try:
            await self._client.publish(topic, payload, qos=self._qos)
        except aiomqtt.MqttError as exc:
            logger.error("bus publish failed", extra={"topic": topic, "error": str(exc)})
            raise RuntimeError(f"MQTT publish failed: {exc}") from exc


__all__ = [
    "BusAddress",
    "MQTTMessagePublisher",
    "build_client",
    "bus_topic",
    "escape_level",
    "parse_mqtt_url",
]
