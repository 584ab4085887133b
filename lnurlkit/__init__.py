"""
lnurlkit — client-side LNURL operations.

Flows:
    Pay:       Lightning Address → payRequest (LUD-16/LUD-06) → bounds check → invoice
    Callbacks: channelRequest (LUD-02) and withdrawRequest (LUD-03) callback URLs
    Auth:      LNURL-auth (LUD-04) with LUD-05 deterministic linking keys

Network access goes through lnurlkit.client (httpx), signing through
lnurlkit.keys (bip_utils derivation, secp256k1 C bindings).
"""

__version__ = "0.1.0"

# Protocol-fixed: LNURL amounts are millisatoshis, callers speak satoshis
MSAT_PER_SAT = 1000

# LNURL bech32 encoding
LNURL_HRP = "lnurl"
LNURL_BECH32_PREFIX = "lnurl1"

# LUD-05 linking key derivation
LNURL_AUTH_PURPOSE = 138
HARDENED_OFFSET = 0x80000000
HASHING_KEY_SIZE = 32

# Client defaults
CLIENT_DEFAULT_TIMEOUT = 30.0
CLIENT_USER_AGENT = f"lnurlkit/{__version__}"

from lnurlkit.errors import (  # noqa: E402
    LnurlError,
    InvalidAddress,
    ClientCreationFailed,
    InvalidResponse,
    RequestFailed,
    InvalidAmount,
    InvoiceCreationFailed,
    AuthenticationFailed,
)
from lnurlkit.types import (  # noqa: E402
    ChannelRequestParams,
    WithdrawCallbackParams,
    LnurlAuthParams,
    LightningAddressInvoice,
)
from lnurlkit.address import is_lnurl_address  # noqa: E402
from lnurlkit.callbacks import (  # noqa: E402
    create_channel_request_url,
    create_withdraw_callback_url,
)
from lnurlkit.keys import get_derivation_path  # noqa: E402
from lnurlkit.pay import get_lnurl_invoice  # noqa: E402
from lnurlkit.auth import lnurl_auth  # noqa: E402

__all__ = [
    "LnurlError",
    "InvalidAddress",
    "ClientCreationFailed",
    "InvalidResponse",
    "RequestFailed",
    "InvalidAmount",
    "InvoiceCreationFailed",
    "AuthenticationFailed",
    "ChannelRequestParams",
    "WithdrawCallbackParams",
    "LnurlAuthParams",
    "LightningAddressInvoice",
    "is_lnurl_address",
    "create_channel_request_url",
    "create_withdraw_callback_url",
    "get_derivation_path",
    "get_lnurl_invoice",
    "lnurl_auth",
]
