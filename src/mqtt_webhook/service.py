"""Register, publish and subscribe hook pipelines."""

from __future__ import annotations

import logging

from .auth import Authorizer
from .contracts import PublishHook, RawMessage, RegisterHook, SubscribeHook
from .ports import MessagePublisher
from .topics import normalize_subtopic, parse_topic

logger = logging.getLogger(__name__)


class WebhookService:
    """Compose topic parsing and access checks for each broker hook.

    Every pipeline stops at the first failing stage and lets its
    :class:`~mqtt_webhook.errors.HookError` propagate to the caller.
    """

    def __init__(self, authorizer: Authorizer, publisher: MessagePublisher) -> None:
        self._authorizer = authorizer
        self._publisher = publisher

    async def register(self, hook: RegisterHook) -> None:
        # The resolved thing id only gates the connection.
        await self._authorizer.authenticate(hook.password)

    async def publish(self, hook: PublishHook, *, content_type: str = "") -> RawMessage:
        channel_id, path = parse_topic(hook.topic)
        subtopic = normalize_subtopic(path)
        publisher = await self._authorizer.authorize(hook.username, channel_id)

        message = RawMessage(
            publisher=publisher,
            content_type=content_type,
            channel=channel_id,
            subtopic=subtopic,
            payload=hook.payload,
        )
        await self._publisher.publish(message)
        logger.debug(
            "message forwarded",
            extra={"channel": channel_id, "subtopic": subtopic, "publisher": publisher},
        )
        return message

    async def subscribe(self, hook: SubscribeHook) -> None:
        channel_id, _ = parse_topic(hook.topic)
        await self._authorizer.authorize(hook.username, channel_id)


__all__ = ["WebhookService"]
