"""Configuration for the webhook service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


class WebhookConfig(BaseModel):
    """Configuration for the webhook service, read from ``MQTT_WEBHOOK_*`` variables."""

    # Defaults come from the environment as strings and must be coerced.
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    # HTTP
    host: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_HOST", "0.0.0.0"),
        description="HTTP bind address",
    )
    port: int = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_PORT", "8180"),
        ge=1,
        le=65535,
        description="HTTP port",
    )

    # Things service
    things_url: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_THINGS_URL", "localhost:8183"),
        description="gRPC target of the things service",
    )
    things_timeout: float = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_THINGS_TIMEOUT", "1.0"),
        gt=0,
        description="Timeout of a single things RPC in seconds",
    )
    things_ca_certs: Optional[Path] = Field(
        default_factory=lambda: _optional_path("MQTT_WEBHOOK_THINGS_CA_CERTS"),
        description="PEM bundle enabling TLS towards the things service",
    )

    # Message bus
    bus_url: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_BUS_URL", "mqtt://localhost:1883"),
        description="MQTT broker receiving allowed publishes",
    )
    bus_topic_prefix: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_BUS_TOPIC_PREFIX", "channels"),
        min_length=1,
        description="First topic level of forwarded messages",
    )
    bus_client_id: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_BUS_CLIENT_ID", "mqtt-webhook"),
        description="MQTT client identifier on the bus",
    )

    # Operational
    log_level: str = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_LOG_LEVEL", "INFO"),
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default_factory=lambda: os.getenv("MQTT_WEBHOOK_LOG_FORMAT", "json"),
        description="Log line format",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("bus_url")
    @classmethod
    def _mqtt_scheme(cls, value: str) -> str:
        if not value.startswith("mqtt://"):
            raise ValueError(f"bus_url must use the mqtt:// scheme, got {value!r}")
        return value


def load_config() -> WebhookConfig:
    """Load configuration from environment variables."""
    return WebhookConfig()
