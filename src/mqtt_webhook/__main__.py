"""MQTT webhook service - entry point."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .adapters.mqtt_bus import MQTTMessagePublisher, build_client, parse_mqtt_url
from .adapters.things_grpc import GrpcThingsClient, open_channel
from .api import router
from .auth import Authorizer
from .config import WebhookConfig, load_config
from .logging import configure_logging
from .metrics import HookMetrics
from .ports import MessagePublisher, ThingsClient
from .service import WebhookService

logger = logging.getLogger(__name__)


def _build_service(config: WebhookConfig, things: ThingsClient, publisher: MessagePublisher) -> WebhookService:
    authorizer = Authorizer(things, timeout=config.things_timeout)
    return WebhookService(authorizer, publisher)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the things channel and the bus connection for the app's lifetime.

    Collaborators injected through :func:`create_app` are used as they are.
    """
    config: WebhookConfig = app.state.config

    async with AsyncExitStack() as stack:
        things = app.state.things
        if things is None:
            channel = open_channel(config.things_url, config.things_ca_certs)
            stack.push_async_callback(channel.close)
            things = GrpcThingsClient(channel)
            logger.info(
                "things service channel opened",
                extra={"target": config.things_url, "tls": config.things_ca_certs is not None},
            )

        publisher = app.state.publisher
        if publisher is None:
            client = await stack.enter_async_context(build_client(config.bus_url, config.bus_client_id))
            publisher = MQTTMessagePublisher(client, topic_prefix=config.bus_topic_prefix)
            address = parse_mqtt_url(config.bus_url)
            logger.info("connected to message bus", extra={"bus": f"{address.hostname}:{address.port}"})

        app.state.service = _build_service(config, things, publisher)
        yield
        logger.info("shutting down")


def create_app(
    config: WebhookConfig | None = None,
    *,
    things: ThingsClient | None = None,
    publisher: MessagePublisher | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    With both ``things`` and ``publisher`` given the app is ready to serve
    without running its lifespan.
    """
    config = config or load_config()

    app = FastAPI(
        title="MQTT Webhook",
        description="VerneMQ webhook bridge to the things service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.things = things
    app.state.publisher = publisher
    app.state.metrics = HookMetrics()
    app.state.service = None
    if things is not None and publisher is not None:
        app.state.service = _build_service(config, things, publisher)

    app.include_router(router)
    return app


def main() -> None:
    """Main entry point."""
    config = load_config()
    configure_logging(config.log_level, config.log_format)

    app = create_app(config)

    logger.info(f"Starting MQTT webhook on {config.host}:{config.port}")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
