"""Tests for the error taxonomy and its JSON payloads."""
import pytest
from fastapi import HTTPException

from filechat.errors import (
    ConfigurationError,
    InternalError,
    PayloadTooLargeError,
    RelayError,
    UploadTooLargeError,
    UpstreamError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error, status, kind",
    [
        (ValidationError("No file"), 400, "validation_error"),
        (ConfigurationError(), 400, "configuration_error"),
        (UpstreamError("OpenAI API error", detail="raw"), 502, "upstream_error"),
        (InternalError(), 500, "internal_error"),
        (UploadTooLargeError(50 * 1024 * 1024), 413, "upload_too_large"),
        (PayloadTooLargeError(1024 * 1024), 413, "payload_too_large"),
    ],
)
def test_status_and_kind(error, status, kind):
    assert error.status_code == status
    assert error.kind == kind
    assert isinstance(error, RelayError)
    assert isinstance(error, HTTPException)


def test_payload_includes_detail_when_present():
    error = UpstreamError("OpenAI API error", detail="raw body")
    assert error.to_payload() == {"error": "OpenAI API error", "kind": "upstream_error", "detail": "raw body"}
    assert error.to_payload(include_detail=False) == {"error": "OpenAI API error", "kind": "upstream_error"}


def test_payload_omits_missing_detail():
    assert ValidationError("No file").to_payload() == {"error": "No file", "kind": "validation_error"}


def test_size_messages():
    assert UploadTooLargeError(50 * 1024 * 1024).message == "File exceeds the 50MB limit"
    assert UploadTooLargeError(1024).message == "File exceeds the 1024 byte limit"
    assert PayloadTooLargeError(1024 * 1024).message == "Request body exceeds the 1MB limit"


def test_upload_too_large_is_a_validation_error():
    assert isinstance(UploadTooLargeError(1), ValidationError)
