"""gRPC client for the things service.

The service speaks ``mainflux.ThingsService``::

    message Token     { string value = 1; }
    message AccessReq { string token = 1; string chanID = 2; }
    message ThingID   { string value = 1; }

    rpc Identify(Token) returns (ThingID);
    rpc CanAccess(AccessReq) returns (ThingID);

Message classes are built from that descriptor at import time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import grpc
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "mainflux"
SERVICE = f"{PACKAGE}.ThingsService"
IDENTIFY_METHOD = f"/{SERVICE}/Identify"
CAN_ACCESS_METHOD = f"/{SERVICE}/CanAccess"

_MESSAGES = {
    "Token": ("value",),
    "AccessReq": ("token", "chanID"),
    "ThingID": ("value",),
}


def _build_message_classes() -> dict[str, Any]:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="mqtt_webhook/things.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, field_names in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for number, field_name in enumerate(field_names, start=1):
            message.field.add(
                name=field_name,
                number=number,
                type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
                label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
            )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return {
        name: message_factory.GetMessageClass(pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))
        for name in _MESSAGES
    }


_classes = _build_message_classes()
Token = _classes["Token"]
AccessReq = _classes["AccessReq"]
ThingID = _classes["ThingID"]


class GrpcThingsClient:
    """Things service client over a shared ``grpc.aio`` channel.

    RPC failures surface as ``grpc.aio.AioRpcError``; the authorizer owns
    timeouts and classification.
    """

    def __init__(self, channel: grpc.aio.Channel) -> None:
        self._identify = channel.unary_unary(
            IDENTIFY_METHOD,
            request_serializer=Token.SerializeToString,
            response_deserializer=ThingID.FromString,
        )
        self._can_access = channel.unary_unary(
            CAN_ACCESS_METHOD,
            request_serializer=AccessReq.SerializeToString,
            response_deserializer=ThingID.FromString,
        )

    async def identify(self, token: str) -> str:
        reply = await self._identify(Token(value=token))
        return reply.value

    async def can_access(self, token: str, channel_id: str) -> str:
        reply = await self._can_access(AccessReq(token=token, chanID=channel_id))
        return reply.value


def open_channel(target: str, ca_certs: Path | None = None) -> grpc.aio.Channel:
    """Open a channel to ``target``, with TLS when a CA bundle is given."""
    if ca_certs is None:
        return grpc.aio.insecure_channel(target)
    credentials = grpc.ssl_channel_credentials(root_certificates=ca_certs.read_bytes())
    return grpc.aio.secure_channel(target, credentials)


__all__ = [
    "AccessReq",
    "CAN_ACCESS_METHOD",
    "GrpcThingsClient",
    "IDENTIFY_METHOD",
    "ThingID",
    "Token",
    "open_channel",
]
