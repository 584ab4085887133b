"""
Value objects for the LNURL flows.

All types are frozen dataclasses: constructed once per call, never mutated,
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lnurlkit import HASHING_KEY_SIZE


@dataclass(frozen=True)
class LightningAddress:
    """A parsed ``user@domain`` Lightning Address (LUD-16)."""

    user: str
    domain: str

    @property
    def lnurlp_url(self) -> str:
        """The well-known payRequest endpoint for this address."""
        scheme = "http" if self.domain.endswith(".onion") else "https"
        return f"{scheme}://{self.domain}/.well-known/lnurlp/{self.user}"

    def __str__(self) -> str:
        return f"{self.user}@{self.domain}"


@dataclass(frozen=True)
class LnUrl:
    """Normalized LNURL target. Always holds the decoded plain URL."""

    url: str


# ---------------------------------------------------------------------------
# Service responses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PayResponse:
    """payRequest (LUD-06). Sendable bounds are in millisatoshis."""

    callback: str
    min_sendable: int
    max_sendable: int
    metadata: str = ""
    comment_allowed: int = 0
    tag: str = "payRequest"


@dataclass(frozen=True)
class WithdrawResponse:
    """withdrawRequest (LUD-03). Withdrawable bounds are in millisatoshis."""

    callback: str
    k1: str
    default_description: str = ""
    min_withdrawable: int = 0
    max_withdrawable: int = 0
    tag: str = "withdrawRequest"


@dataclass(frozen=True)
class ChannelResponse:
    """channelRequest (LUD-02)."""

    uri: str
    callback: str
    k1: str
    tag: str = "channelRequest"


@dataclass(frozen=True)
class UnknownResponse:
    """Any response whose tag this client does not model."""

    tag: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CallbackResponse:
    """Generic ``{"status": "OK" | "ERROR", "reason": ...}`` callback reply."""

    status: str
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "OK"


# ---------------------------------------------------------------------------
# Call parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChannelRequestParams:
    k1: str
    callback: str
    local_node_id: str
    is_private: bool
    cancel: bool


@dataclass(frozen=True)
class WithdrawCallbackParams:
    k1: str
    callback: str
    payment_request: str


@dataclass(frozen=True)
class LnurlAuthParams:
    """Inputs for one LNURL-auth handshake.

    Attributes:
        domain: Service domain the linking key is bound to.
        k1: Hex-encoded 32-byte challenge issued by the service.
        callback: Callback URL, plain or bech32 ``lnurl1...``.
        hashing_key: 32-byte seed for the linking key derivation.
    """

    domain: str
    k1: str
    callback: str
    hashing_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.hashing_key) != HASHING_KEY_SIZE:
            raise ValueError(f"hashing_key must be {HASHING_KEY_SIZE} bytes")


@dataclass(frozen=True)
class LightningAddressInvoice:
    """An invoice obtained for a Lightning Address."""

    address: str
    amount_satoshis: int
    invoice: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "amount_satoshis": self.amount_satoshis,
            "invoice": self.invoice,
        }
