# datastore/http.py

"""
API ERROR NORMALIZATION (RECORD STORE)

Every view answers store failures with the same body shape:
    {"error": {"code": "...", "message": "..."}}

Configuration problems get 503 + a dedicated code so the frontend can show
the "configuration required" screen instead of a generic failure.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from datastore.exceptions import (
    ConfigurationInvalid,
    ConfigurationMissing,
    ConstraintViolation,
    RecordStoreError,
)


def error_response(*, code: str, message: str, http_status: int, **extra):
    body = {"code": code, "message": message}
    body.update(extra)
    return Response({"error": body}, status=http_status)


def store_error_response(exc: RecordStoreError):
    if isinstance(exc, ConfigurationMissing):
        return error_response(
            code="configuration_missing",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, ConfigurationInvalid):
        return error_response(
            code="configuration_invalid",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, ConstraintViolation):
        return error_response(
            code="constraint_violation",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    return error_response(
        code="store_unavailable",
        message=str(exc),
        http_status=status.HTTP_502_BAD_GATEWAY,
    )
