"""
Lightning Address payments: resolve ``user@domain`` to a payRequest, check
the amount against its bounds, and fetch an invoice.

Single attempt per call; transient failures propagate to the caller.
"""

from __future__ import annotations

from lnurlkit import MSAT_PER_SAT
from lnurlkit.address import parse_lightning_address
from lnurlkit.client import LnurlClient, LnurlClientError, create_client
from lnurlkit.errors import (
    InvalidAmount,
    InvalidResponse,
    InvoiceCreationFailed,
    RequestFailed,
)
from lnurlkit.types import LightningAddress, PayResponse


async def fetch_pay_response(client: LnurlClient, address: LightningAddress) -> PayResponse:
    """Fetch the payRequest for ``address``. Any other response kind is rejected."""
    try:
        response = await client.make_request(address.lnurlp_url)
    except LnurlClientError as e:
        raise RequestFailed(str(e)) from e
    if not isinstance(response, PayResponse):
        raise InvalidResponse(f"Expected payRequest, got {response.tag!r}")
    return response


async def generate_invoice(
    client: LnurlClient,
    pay: PayResponse,
    amount_satoshis: int,
) -> str:
    """Bounds-check ``amount_satoshis`` and request an invoice for it.

    Raises InvalidAmount (without contacting the service) when the msat amount
    is outside ``[min_sendable, max_sendable]``.
    """
    amount_msat = amount_satoshis * MSAT_PER_SAT
    if (
        amount_satoshis < 0
        or amount_msat < pay.min_sendable
        or amount_msat > pay.max_sendable
    ):
        raise InvalidAmount(
            amount_satoshis,
            min=pay.min_sendable // MSAT_PER_SAT,
            max=pay.max_sendable // MSAT_PER_SAT,
        )

    try:
        return await client.get_invoice(pay, amount_msat)
    except LnurlClientError as e:
        raise InvoiceCreationFailed(error_details=str(e)) from e


async def get_lnurl_invoice(address: str, amount_satoshis: int) -> str:
    """Resolve a Lightning Address and return a bolt11 invoice for ``amount_satoshis``."""
    ln_addr = parse_lightning_address(address)
    async with create_client() as client:
        pay = await fetch_pay_response(client, ln_addr)
        return await generate_invoice(client, pay, amount_satoshis)
