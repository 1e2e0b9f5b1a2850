# inventory/api/exception_handler.py

"""
API ERROR NORMALIZATION

Ledger errors are rendered with the canonical error envelope:

    {"error": {"code": ..., "message": ..., "details": {...}}}

with the HTTP status carried by the error class. Everything else (DRF
validation, auth, throttling, 404 on unknown routes) keeps DRF's default
rendering.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from inventory.services.exceptions import LedgerError

logger = logging.getLogger("ledger")


def error_response(*, code: str, message: str, http_status: int, details: dict | None = None):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message, "details": details or {}}},
        status=http_status,
    )


def ledger_exception_handler(exc, context):
    if isinstance(exc, LedgerError):
        if exc.http_status >= 500:
            logger.error(
                "Ledger request failed",
                extra={"code": exc.code, "details": exc.details},
            )
        return error_response(
            code=exc.code,
            message=exc.message,
            http_status=exc.http_status,
            details=exc.details,
        )

    return exception_handler(exc, context)
