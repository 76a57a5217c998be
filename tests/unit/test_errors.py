"""Unit tests for the hook error encoder."""

import grpc
import pytest

from mqtt_webhook.errors import (
    BackendError,
    ErrorKind,
    HookError,
    ParseError,
    Unauthorized,
    UnsupportedRequest,
    status_for,
)


@pytest.mark.parametrize(
    "error, status",
    [
        (ParseError.malformed_topic("/foo/bar"), 400),
        (ParseError.malformed_subtopic("a*b"), 400),
        (ParseError.malformed_body("not json"), 400),
        (UnsupportedRequest("auth_on_subscribe", None), 400),
        (Unauthorized(), 403),
        (BackendError(grpc.StatusCode.PERMISSION_DENIED), 403),
        (BackendError(grpc.StatusCode.UNAVAILABLE), 503),
        (BackendError(grpc.StatusCode.DEADLINE_EXCEEDED), 503),
        (BackendError(grpc.StatusCode.INTERNAL, "boom"), 503),
        (BackendError(grpc.StatusCode.UNAUTHENTICATED), 503),
        (HookError(ErrorKind.backend), 503),
        (RuntimeError("bus down"), 500),
        (KeyError("x"), 500),
    ],
)
def test_status_for(error, status):
    assert status_for(error) == status


def test_backend_error_message():
    error = BackendError(grpc.StatusCode.UNAVAILABLE, "connection refused")

    assert str(error) == "things service returned UNAVAILABLE: connection refused"
    assert not error.permission_denied
    assert str(BackendError(grpc.StatusCode.PERMISSION_DENIED)) == "things service returned PERMISSION_DENIED"


def test_unsupported_request_keeps_received_marker():
    error = UnsupportedRequest("auth_on_publish", "auth_on_register")

    assert error.kind is ErrorKind.unsupported_request
    assert error.expected == "auth_on_publish"
    assert error.received == "auth_on_register"
