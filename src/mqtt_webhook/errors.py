"""Hook error taxonomy and its mapping onto HTTP status codes."""

from __future__ import annotations

from enum import StrEnum

import grpc


class ErrorKind(StrEnum):
    """Classification carried by every :class:`HookError`."""

    malformed_topic = "malformed_topic"
    malformed_subtopic = "malformed_subtopic"
    malformed_body = "malformed_body"
    unsupported_request = "unsupported_request"
    unauthorized = "unauthorized"
    backend = "backend"


class HookError(Exception):
    """Base class for errors that decide a hook response."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


class ParseError(HookError):
    """Caller input does not follow the topic, subtopic or body grammar."""

    @classmethod
    def malformed_topic(cls, topic: str) -> "ParseError":
        return cls(ErrorKind.malformed_topic, f"malformed topic: {topic!r}")

    @classmethod
    def malformed_subtopic(cls, subtopic: str) -> "ParseError":
        return cls(ErrorKind.malformed_subtopic, f"malformed subtopic: {subtopic!r}")

    @classmethod
    def malformed_body(cls, reason: str) -> "ParseError":
        return cls(ErrorKind.malformed_body, f"malformed request data: {reason}")


class UnsupportedRequest(HookError):
    """Request reached an endpoint without the matching ``vernemq-hook`` marker."""

    def __init__(self, expected: str, received: str | None) -> None:
        super().__init__(
            ErrorKind.unsupported_request,
            f"expected hook {expected!r}, got {received!r}",
        )
        self.expected = expected
        self.received = received


class Unauthorized(HookError):
    """Empty credential; decided locally without calling the backend."""

    def __init__(self, message: str = "missing or invalid credentials") -> None:
        super().__init__(ErrorKind.unauthorized, message)


class BackendError(HookError):
    """Things service call failed; ``code`` is the gRPC status it reported."""

    def __init__(self, code: grpc.StatusCode, details: str | None = None) -> None:
        message = f"things service returned {code.name}"
        if details:
            message = f"{message}: {details}"
        super().__init__(ErrorKind.backend, message)
        self.code = code
        self.details = details

    @property
    def permission_denied(self) -> bool:
        return self.code is grpc.StatusCode.PERMISSION_DENIED


def status_for(exc: BaseException) -> int:
    """Return the HTTP status a failed hook answers with.

    Successful hooks always answer 202 and never reach this function.
    """
    if not isinstance(exc, HookError):
        return 500
    if exc.kind in (
        ErrorKind.malformed_topic,
        ErrorKind.malformed_subtopic,
        ErrorKind.malformed_body,
        ErrorKind.unsupported_request,
    ):
        return 400
    if exc.kind is ErrorKind.unauthorized:
        return 403
    if exc.kind is ErrorKind.backend:
        return 403 if isinstance(exc, BackendError) and exc.permission_denied else 503
    return 500


__all__ = [
    "BackendError",
    "ErrorKind",
    "HookError",
    "ParseError",
    "Unauthorized",
    "UnsupportedRequest",
    "status_for",
]
