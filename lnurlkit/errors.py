"""
Error taxonomy for LNURL operations.

Every failure in the pay, callback and auth flows surfaces as a subclass of
LnurlError. Nothing here is retried; the caller owns retry policy.
"""

from __future__ import annotations


class LnurlError(Exception):
    """Base class for all LNURL operation failures."""


class InvalidAddress(LnurlError):
    """Malformed Lightning Address, domain or callback URL."""


class ClientCreationFailed(LnurlError):
    """The LNURL client could not be constructed."""


class InvalidResponse(LnurlError):
    """The LNURL service answered with an unexpected response kind."""


class RequestFailed(LnurlError):
    """Transport-level failure talking to the LNURL service."""


class InvalidAmount(LnurlError):
    """Requested amount is outside the service's sendable range.

    ``min`` and ``max`` are in satoshis (msat bounds, integer-divided).
    """

    def __init__(self, amount_satoshis: int, min: int, max: int) -> None:
        self.amount_satoshis = amount_satoshis
        self.min = min
        self.max = max
        super().__init__(
            f"Amount {amount_satoshis} sats outside sendable range [{min}, {max}] sats"
        )


class InvoiceCreationFailed(LnurlError):
    """The service rejected the invoice request."""

    def __init__(self, error_details: str) -> None:
        self.error_details = error_details
        super().__init__(f"Invoice creation failed: {error_details}")


class AuthenticationFailed(LnurlError):
    """LNURL-auth failed locally or was rejected by the service.

    When the service rejected the login, its stated reason is kept on
    ``server_reason``. It is untrusted text and is not part of the message.
    """

    def __init__(self, message: str = "Authentication failed", server_reason: str | None = None) -> None:
        self.server_reason = server_reason
        super().__init__(message)
