# inventory/services/atomic.py

"""
LEDGER TRANSACTION SCOPE

One database transaction per sale / purchase / payment / reversal request.

ledger_atomic:
- opens transaction.atomic()
- on PostgreSQL, bounds lock waits and statement time with SET LOCAL
  (settings.LEDGER["LOCK_TIMEOUT_MS"] / ["STATEMENT_TIMEOUT_MS"]) so a stalled
  transaction cannot hold a product row lock indefinitely
- remaps storage-layer failures into the ledger error taxonomy AFTER the
  atomic block has rolled back; a caller never sees a partial success

Domain errors (LedgerError) pass through unchanged.
"""

from __future__ import annotations

import functools
import logging

from django.conf import settings
from django.db import DatabaseError, connection, transaction
from django.db import IntegrityError as DBIntegrityError

from inventory.services.exceptions import IntegrityError, InternalError, LedgerError

logger = logging.getLogger("ledger")


def _ledger_setting(key: str, default):
    return getattr(settings, "LEDGER", {}).get(key, default)


def _apply_timeouts() -> None:
    if connection.vendor != "postgresql":
        return

    lock_ms = int(_ledger_setting("LOCK_TIMEOUT_MS", 5_000))
    statement_ms = int(_ledger_setting("STATEMENT_TIMEOUT_MS", 15_000))

    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = {lock_ms}")
        cursor.execute(f"SET LOCAL statement_timeout = {statement_ms}")


def ledger_atomic(func):
    """
    Decorator: run func inside one bounded ledger transaction.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            with transaction.atomic():
                _apply_timeouts()
                return func(*args, **kwargs)

        except LedgerError:
            raise

        except DBIntegrityError as exc:
            logger.exception(
                "Storage constraint violated; transaction rolled back",
                extra={"operation": func.__name__},
            )
            raise IntegrityError(
                "A storage constraint was violated; nothing was applied.",
                details={"operation": func.__name__, "reason": str(exc)},
            ) from exc

        except DatabaseError as exc:
            logger.exception(
                "Storage failure; transaction rolled back",
                extra={"operation": func.__name__},
            )
            raise InternalError(
                "The operation could not be completed; nothing was applied.",
                details={"operation": func.__name__, "retryable": True},
            ) from exc

    return wrapper
