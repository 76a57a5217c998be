"""Hook request bodies and the outbound message record."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field

MQTT_PROTOCOL = "mqtt"


class HookType(StrEnum):
    """Values of the ``vernemq-hook`` header, one per endpoint."""

    register = "auth_on_register"
    publish = "auth_on_publish"
    subscribe = "auth_on_subscribe"


class _HookRequest(BaseModel):
    # VerneMQ sends more fields than the bridge reads (client_id, mountpoint, qos, ...).
    model_config = ConfigDict(extra="ignore", frozen=True)


class RegisterHook(_HookRequest):
    """``auth_on_register`` body; the password is the thing key."""

    password: str = ""


class PublishHook(_HookRequest):
    """``auth_on_publish`` body; the username is the thing key."""

    username: str = ""
    topic: str = ""
    payload: Base64Bytes = Field(default=b"")


class SubscribeHook(_HookRequest):
    """``auth_on_subscribe`` body; the username is the thing key."""

    username: str = ""
    topic: str = ""


class RawMessage(BaseModel):
    """Message handed to the publishing collaborator once a publish is allowed."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    publisher: str
    protocol: str = MQTT_PROTOCOL
    content_type: str = ""
    channel: str
    subtopic: str = ""
    payload: bytes = b""


class VersionInfo(BaseModel):
    service: str
    version: str


__all__ = [
    "HookType",
    "MQTT_PROTOCOL",
    "PublishHook",
    "RawMessage",
    "RegisterHook",
    "SubscribeHook",
    "VersionInfo",
]
