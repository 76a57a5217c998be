"""Adapter implementations bridging the webhook ports to infrastructure."""

from .mqtt_bus import MQTTMessagePublisher
from .things_grpc import GrpcThingsClient

__all__ = ["GrpcThingsClient", "MQTTMessagePublisher"]
