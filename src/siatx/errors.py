"""
Exceptions raised while building, signing and broadcasting transactions.
"""

from __future__ import annotations

from typing import Any


class SiaTxError(Exception):
    """Base class for transaction build failures."""


class InsufficientFundsError(SiaTxError):
    """Spendable outputs cannot cover the requested amount plus fee."""

    def __init__(self, needed: int, available: int, message: str | None = None):
        self.needed = needed
        self.available = available
        super().__init__(message or f"Insufficient funds: need {needed}, have {available}")


class RangeError(SiaTxError, ValueError):
    """A value or count does not fit its wire encoding."""


class FetchError(SiaTxError):
    """A read-only query against the explorer failed."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(f"Fetch failed: {endpoint} - {message}")


class BroadcastError(SiaTxError):
    """The transaction pool rejected the signed transaction."""

    def __init__(self, detail: Any, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Broadcast failed{status}: {detail}")


class CancelledByOperator(Exception):
    """
    The operator supplied no signature.

    Not a SiaTxError: cancelling at the signing prompt is a normal way to
    end a run and must not be reported as a failure.
    """
