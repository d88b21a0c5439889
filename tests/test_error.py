from __future__ import annotations

import logging

import pytest

from modbridge.core.error import (
    ErrorType,
    ModBridgeError,
    NotFoundError,
    PartialDependencyFailureError,
    UnavailableError,
    classify_error,
    handle_error,
    log_error,
)


@pytest.mark.parametrize(
    "error,expected",
    [
        (NotFoundError("gone"), ErrorType.NOT_FOUND),
        (ModBridgeError("bad", error_type=ErrorType.INVALID_PARAMS), ErrorType.INVALID_PARAMS),
        (ConnectionError("reset"), ErrorType.UNAVAILABLE),
        (TimeoutError(), ErrorType.UNAVAILABLE),
        (RuntimeError("HTTP 404 Not Found"), ErrorType.NOT_FOUND),
        (RuntimeError("network is unreachable"), ErrorType.UNAVAILABLE),
        (ValueError("invalid page size"), ErrorType.INVALID_PARAMS),
        (RuntimeError("boom"), ErrorType.UNKNOWN),
    ],
)
def test_classify_error(error: Exception, expected: ErrorType) -> None:
    assert classify_error(error) is expected


def test_to_dict_carries_type_and_details() -> None:
    error = UnavailableError("provider down", details={"source": "curseforge"})

    assert error.to_dict() == {
        "error_type": "unavailable",
        "message": "provider down",
        "details": {"source": "curseforge"},
    }


def test_partial_dependency_failure_carries_result() -> None:
    error = PartialDependencyFailureError("1 failed", result={"cf-a": "failed"})

    assert error.error_type is ErrorType.PARTIAL_DEPENDENCY_FAILURE
    assert error.result == {"cf-a": "failed"}


def test_log_error_prefixes_classification(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("modbridge.test")
    with caplog.at_level(logging.WARNING, logger="modbridge.test"):
        info = log_error(NotFoundError("no such mod"), logger, context={"id": "cf-1"}, level="WARNING")

    assert info["error_type"] == "not_found"
    assert info["context"] == {"id": "cf-1"}
    assert "[not_found] NotFoundError: no such mod" in caplog.text


def test_handle_error_reraises_on_request() -> None:
    with pytest.raises(UnavailableError):
        handle_error(UnavailableError("down"), raise_again=True)
    assert handle_error(UnavailableError("down"))["error_type"] == "unavailable"
