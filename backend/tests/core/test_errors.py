"""Error Hierarchy — status mapping and response envelope."""

import pytest

from uden.core.errors import (
    BadRequestError, ConflictError, DatabaseError, ErrorCategory, ForbiddenError,
    InternalError, UdenError, UnauthenticatedError, UpstreamError,
)


@pytest.mark.parametrize("error, status, category", [
    (BadRequestError("Invalid product", "INVALID_PRODUCT", field="product"), 400, ErrorCategory.VALIDATION),
    (UnauthenticatedError(), 401, ErrorCategory.AUTHENTICATION),
    (ForbiddenError("Verify first", "EMAIL_NOT_VERIFIED"), 403, ErrorCategory.BUSINESS_RULE),
    (ConflictError("Email already exists", "EMAIL_EXISTS"), 409, ErrorCategory.CONFLICT),
    (UpstreamError("stripe", "Payment gateway error"), 502, ErrorCategory.EXTERNAL_API),
    (InternalError("Failed to record order"), 500, ErrorCategory.INTERNAL),
    (DatabaseError("timeout", "execute"), 503, ErrorCategory.DATABASE),
])
def test_status_and_category(error, status, category):
    assert isinstance(error, UdenError)
    assert error.http_status == status
    assert error.category == category


def test_response_envelope_shape():
    body = ConflictError("Username already exists", "USERNAME_EXISTS").to_response()

    assert set(body) == {"error"}
    assert body["error"]["code"] == "USERNAME_EXISTS"
    assert body["error"]["message"] == "Username already exists"
    assert body["error"]["category"] == "conflict"
    assert "timestamp" in body["error"]


def test_upstream_error_keeps_service_off_the_envelope():
    error = UpstreamError("resend", "Failed to send email", "EMAIL_DELIVERY_FAILED")

    assert error.service == "resend"
    assert "resend" not in str(error.to_response())
